"""Domain layer: entities, errors and the authentication flows."""
