"""Tests for the profile, activity and relationship endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from conftest import at
from socialprofile.domain.entities import (
    ActivityItem,
    ActivityType,
    RelationshipType,
    VisibilityRule,
)
from socialprofile.infrastructure.database import (
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from socialprofile.infrastructure.repositories import (
    ActivityRepository,
    PrivacyRepository,
    RelationshipRepository,
)
from socialprofile.interfaces.api.dependencies import reset_cache_backend
from main import create_app

OWNER = 1


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure every test starts from empty tables and an empty cache."""

    initialize_database()
    Base.metadata.drop_all(bind=engine)
    initialize_database()
    reset_cache_backend()
    yield
    Base.metadata.drop_all(bind=engine)
    reset_cache_backend()


@pytest.fixture()
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _seed_edits(session, count: int, actor_id: int = OWNER) -> None:
    repository = ActivityRepository(session)
    for minute in range(count):
        repository.add(
            ActivityItem(type=ActivityType.EDIT, actor_id=actor_id, timestamp=at(minute))
        )


def _seed_friends(session, *friend_ids: int) -> RelationshipRepository:
    repository = RelationshipRepository(session)
    for friend_id in friend_ids:
        repository.add_relationship(OWNER, friend_id, established_at=at(friend_id))
    return repository


def test_activity_feed_is_capped_with_boundary(client: TestClient, session) -> None:
    _seed_edits(session, 12)

    response = client.get(f"/profiles/{OWNER}/activity")

    assert response.status_code == 200
    body = response.json()
    assert body["displayed_count"] == 8
    assert body["total_count"] == 12
    assert body["has_more"] is True
    assert [entry["is_boundary"] for entry in body["entries"]].index(True) == 7
    assert body["entries"][0]["item"]["type"] == "edit"
    assert body["state"] == "delivered"


def test_activity_item_type_filter(client: TestClient, session) -> None:
    _seed_edits(session, 2)
    ActivityRepository(session).add(
        ActivityItem(
            type=ActivityType.USER_MESSAGE,
            actor_id=OWNER,
            timestamp=at(30),
            related_actor_id=2,
        )
    )

    edits = client.get(f"/profiles/{OWNER}/activity", params={"item_type": "edits"}).json()
    messages = client.get(f"/profiles/{OWNER}/activity", params={"item_type": "messages"}).json()

    assert {entry["item"]["type"] for entry in edits["entries"]} == {"edit"}
    assert {entry["item"]["type"] for entry in messages["entries"]} == {"user_message"}


@pytest.mark.parametrize(
    "params",
    [{"item_type": "everything"}, {"limit": 0}, {"limit": -2}],
)
def test_invalid_activity_parameters_are_bad_requests(client: TestClient, params) -> None:
    response = client.get(f"/profiles/{OWNER}/activity", params=params)

    assert response.status_code == 400


def test_relationships_are_cached_until_a_change(client: TestClient, session) -> None:
    repository = _seed_friends(session, 2, 3, 4, 5)

    first = client.get(f"/profiles/{OWNER}/relationships/friends", params={"count": 4}).json()
    second = client.get(f"/profiles/{OWNER}/relationships/friends", params={"count": 4}).json()
    repository.add_relationship(OWNER, 6, established_at=at(6))
    third = client.get(f"/profiles/{OWNER}/relationships/friends", params={"count": 4}).json()

    assert [record["actor_id"] for record in first["records"]] == [5, 4, 3, 2]
    assert first["from_cache"] is False
    assert second["from_cache"] is True
    assert third["from_cache"] is False
    assert [record["actor_id"] for record in third["records"]] == [6, 5, 4, 3]


def test_unknown_relationship_type_is_not_found(client: TestClient) -> None:
    assert client.get(f"/profiles/{OWNER}/relationships/enemies").status_code == 404


def test_hidden_relationships_are_forbidden(client: TestClient, session) -> None:
    _seed_friends(session, 2)
    PrivacyRepository(session).set_rule(OWNER, "friends", VisibilityRule.REGISTERED)

    anonymous = client.get(f"/profiles/{OWNER}/relationships/friends")
    registered = client.get(
        f"/profiles/{OWNER}/relationships/friends", headers={"X-Viewer-Id": "7"}
    )

    assert anonymous.status_code == 403
    assert registered.status_code == 200


def test_visible_fields_depend_on_viewer(client: TestClient) -> None:
    anonymous = client.get(f"/profiles/{OWNER}/visible-fields").json()
    owner = client.get(
        f"/profiles/{OWNER}/visible-fields", headers={"X-Viewer-Id": str(OWNER)}
    ).json()

    assert anonymous["viewer_id"] is None
    assert anonymous["fields"]["real_name"] is False
    assert anonymous["fields"]["about"] is True
    assert all(owner["fields"].values())


def test_malformed_viewer_header_is_rejected(client: TestClient) -> None:
    response = client.get(f"/profiles/{OWNER}/visible-fields", headers={"X-Viewer-Id": "abc"})

    assert response.status_code == 400


def test_profile_overview(client: TestClient, session) -> None:
    _seed_edits(session, 3)
    _seed_friends(session, 2, 3, 4, 5, 6)
    RelationshipRepository(session).add_relationship(OWNER, 9, RelationshipType.FOE)

    response = client.get(f"/profiles/{OWNER}", headers={"X-Viewer-Id": "2"})

    assert response.status_code == 200
    body = response.json()
    sections = body["sections"]
    assert body["is_owner"] is False
    assert sections["foes"]["enabled"] is False
    assert [record["actor_id"] for record in sections["friends"]["data"]["records"]] == [6, 5, 4, 3]
    assert sections["friends"]["data"]["total_count"] == 5
    assert sections["friends"]["data"]["view_all"] is True
    assert sections["stats"]["data"]["edits"] == 3
    assert sections["activity"]["data"]["displayed_count"] == 3
    assert sections["board"]["data"] == {"total": 0, "displayed": 0, "view_all": False}


def test_profile_overview_rejects_unknown_item_type(client: TestClient) -> None:
    response = client.get(f"/profiles/{OWNER}", params={"item_type": "nope"})

    assert response.status_code == 400


def test_network_activity_lists_friend_edits(client: TestClient, session) -> None:
    _seed_friends(session, 2, 3)
    _seed_edits(session, 2, actor_id=2)
    _seed_edits(session, 1, actor_id=3)
    _seed_edits(session, 4, actor_id=50)

    response = client.get(f"/profiles/{OWNER}/network-activity")

    assert response.status_code == 200
    body = response.json()
    assert body["limit"] == 40
    assert {entry["item"]["actor_id"] for entry in body["entries"]} == {2, 3}
    assert body["displayed_count"] == 3


def test_network_activity_for_foes(client: TestClient, session) -> None:
    _seed_friends(session, 2)
    RelationshipRepository(session).add_relationship(OWNER, 9, RelationshipType.FOE)
    _seed_edits(session, 1, actor_id=2)
    _seed_edits(session, 2, actor_id=9)

    foes = client.get(f"/profiles/{OWNER}/network-activity", params={"rel_type": "foes"}).json()
    unknown = client.get(f"/profiles/{OWNER}/network-activity", params={"rel_type": "enemies"})

    assert {entry["item"]["actor_id"] for entry in foes["entries"]} == {9}
    assert foes["displayed_count"] == 2
    assert unknown.status_code == 400
