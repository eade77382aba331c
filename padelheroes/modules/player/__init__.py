"""Player profiles and the player home card."""

from padelheroes.modules.player.profile_service import ProfileService
from padelheroes.modules.player.summary_service import PlayerSummaryService

__all__ = ["PlayerSummaryService", "ProfileService"]
