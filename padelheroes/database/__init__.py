"""ORM schema for PadelHeroes (tables only, no behavior)."""
