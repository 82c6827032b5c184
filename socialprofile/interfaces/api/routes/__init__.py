from fastapi import FastAPI

from .profiles import router as profiles_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(profiles_router)
