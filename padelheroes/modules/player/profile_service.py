"""
ProfileService - display names
==============================

Handles:
- Profile bootstrap right after a player authenticates
- Batch display-name resolution for ranked views

Display names belong to the player; this service only creates the
initial one and reads them back. Read paths never fail on a missing or
unresolvable profile: the placeholder name is used instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from padelheroes.core.logging.logger import get_logger
from padelheroes.modules.shared.base_service import BaseService
from padelheroes.modules.shared.exceptions import ProfileResolutionError

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.core.config.rules import CheckinRules
    from padelheroes.modules.shared.ports import ProfileStore


class ProfileService(BaseService):
    def __init__(
        self,
        profiles: ProfileStore,
        rules: CheckinRules,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(logger or get_logger(__name__))
        self._profiles = profiles
        self._placeholder = rules.placeholder_display_name

    @property
    def placeholder_name(self) -> str:
        return self._placeholder

    def default_name_for(self, email: Optional[str]) -> str:
        """Local part of the email address, or the placeholder name."""
        if email:
            local_part = email.split("@", 1)[0].strip()
            if local_part:
                return local_part
        return self._placeholder

    async def ensure_profile(self, player_id: str, email: Optional[str] = None) -> str:
        """
        Create the player's profile on first login (idempotent).

        Args:
            player_id: Authenticated player identifier
            email: Address the player signed in with, if known

        Returns:
            The player's display name
        """
        player_id = self.validate_identifier(player_id, "player_id")
        default_name = self.default_name_for(email)

        created = await self._profiles.create_profile_if_absent(player_id, default_name)
        if created:
            self.log_operation("ensure_profile", player_id=player_id, created=True)
            return default_name

        return await self.resolve_display_name(player_id)

    async def resolve_display_name(self, player_id: str) -> str:
        try:
            name = await self._profiles.get_display_name(player_id)
        except ProfileResolutionError as exc:
            self._log_downgrade(exc, [player_id])
            return self._placeholder
        return name or self._placeholder

    async def resolve_display_names(self, player_ids: Iterable[str]) -> Dict[str, str]:
        """
        Display name for every requested player.

        Players without a profile, or whose profile cannot be resolved, get
        the placeholder name. A failed batch lookup falls back to one lookup
        per player so a single bad profile does not blank the whole view.
        """
        ids: List[str] = list(dict.fromkeys(player_ids))
        if not ids:
            return {}

        try:
            found = await self._profiles.get_display_names(ids)
        except ProfileResolutionError as exc:
            self._log_downgrade(exc, ids)
            return {player_id: await self.resolve_display_name(player_id) for player_id in ids}

        return {player_id: found.get(player_id) or self._placeholder for player_id in ids}

    def _log_downgrade(self, error: ProfileResolutionError, player_ids: List[str]) -> None:
        self.log.warning(
            "Profile lookup failed; using placeholder name",
            extra={
                "operation": "resolve_display_names",
                "player_count": len(player_ids),
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
