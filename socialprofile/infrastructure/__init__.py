"""Infrastructure layer: persistence, caching and change notification."""
