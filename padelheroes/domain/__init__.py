"""Domain layer: value objects produced and consumed by the services."""
