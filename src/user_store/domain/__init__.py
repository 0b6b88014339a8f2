"""Domain layer - entities and value objects for users and profiles."""
