"""Club attendance statistics and the staff dashboard."""

from padelheroes.modules.club_stats.calendar import month_start, week_start
from padelheroes.modules.club_stats.dashboard_service import ClubDashboardService
from padelheroes.modules.club_stats.service import ClubStatsService, summarize_checkins

__all__ = [
    "ClubDashboardService",
    "ClubStatsService",
    "month_start",
    "summarize_checkins",
    "week_start",
]
