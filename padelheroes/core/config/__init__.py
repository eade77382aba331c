"""
Configuration subsystem for PadelHeroes.

- **config.py**: static configuration from environment variables (.env aware)
- **rules.py**: immutable check-in rule snapshot injected into services
"""

from padelheroes.core.config.config import Config, Environment
from padelheroes.core.config.rules import CheckinRules

__all__ = ["Config", "Environment", "CheckinRules"]
