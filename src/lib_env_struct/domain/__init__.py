"""Domain layer: schema value objects and the error taxonomy."""
