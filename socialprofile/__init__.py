"""Social profile activity feed and relationship cache."""
