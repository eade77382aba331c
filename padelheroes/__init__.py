"""PadelHeroes: club check-ins, loyalty points and leaderboards."""

__version__ = "0.3.0"
