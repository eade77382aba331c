"""Core infrastructure: configuration, logging, clock, database, exceptions."""
