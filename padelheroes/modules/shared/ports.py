"""
Store and collaborator contracts used by the services.

Purpose
-------
Services depend on these protocols, never on a concrete store. Two adapter
families implement them: `padelheroes.store.sql` (SQLAlchemy) and
`padelheroes.store.memory` (in-process). Both must honor the same
atomicity rules:

- `CheckinLedger.append` is a compare-and-swap on `event.sequence`: it
  succeeds only if no event with that sequence exists yet for the
  (player, club) pair, otherwise it raises `LedgerConflictError` and
  writes nothing.
- `ScoreAccountStore.increment` adds to the stored total atomically and
  creates the account on first use. It never reads then writes the total.
- Driver failures surface as `StorageError` with no partial write.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from padelheroes.domain.models import CheckinEvent, ScoreAccount


@runtime_checkable
class CheckinLedger(Protocol):
    async def latest_for(self, player_id: str, club_id: str) -> Optional[CheckinEvent]:
        """Most recent event for the pair, or None."""
        ...

    async def append(self, event: CheckinEvent) -> CheckinEvent:
        """Record `event`; raises LedgerConflictError if its sequence is taken."""
        ...

    async def list_for_club(
        self, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        ...

    async def list_for_player(
        self, player_id: str, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        ...


@runtime_checkable
class ScoreAccountStore(Protocol):
    async def get(self, player_id: str, club_id: str) -> Optional[ScoreAccount]:
        ...

    async def increment(self, player_id: str, club_id: str, points: int) -> ScoreAccount:
        """Atomically add `points`, creating the account if needed."""
        ...

    async def list_for_club(self, club_id: str) -> List[ScoreAccount]:
        ...


@runtime_checkable
class ProfileStore(Protocol):
    async def get_display_name(self, player_id: str) -> Optional[str]:
        """Display name, None when no profile exists."""
        ...

    async def get_display_names(self, player_ids: Iterable[str]) -> Dict[str, str]:
        """Names for the players that have a profile; others are omitted."""
        ...

    async def create_profile_if_absent(self, player_id: str, default_name: str) -> bool:
        """Create the profile unless one exists. Returns True if created."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    async def get_current_player(self) -> Optional[str]:
        """Authenticated player id, or None when the caller must log in."""
        ...
