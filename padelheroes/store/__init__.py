"""
Store adapters implementing the ports in `padelheroes.modules.shared.ports`.

- **sql**: SQLAlchemy async repositories (PostgreSQL via asyncpg, SQLite via aiosqlite)
- **memory**: in-process adapter with the same atomicity rules, for tests and local runs
"""
