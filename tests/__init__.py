"""
PadelHeroes Test Suite
======================

Test Organization
-----------------
- tests/unit/          : Fast tests against the in-memory store (no database)
- tests/unit/domain/   : Pure rule, ranking and calendar tests
- tests/integration/   : SQL store tests against a temporary SQLite database

Testing Philosophy
------------------
- Services run with a FixedClock, never the wall clock
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
