"""Domain layer: request value objects, errors, events and interfaces."""
