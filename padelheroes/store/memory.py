"""
In-process store adapter.

Holds the ledger, score accounts and profiles in dictionaries. Every
mutation runs under an asyncio.Lock with no suspension point inside the
critical section, which gives the same per-row atomicity the SQL adapter
gets from its constraints:

- `append` rejects a sequence that is already taken (LedgerConflictError)
- `increment` adds to the stored total in place

Used by the unit tests and for running the services without a database.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime
from typing import DefaultDict, Dict, Iterable, List, Optional, Tuple

from padelheroes.core.logging.logger import get_logger
from padelheroes.domain.models import CheckinEvent, ScoreAccount
from padelheroes.modules.shared.exceptions import LedgerConflictError

logger = get_logger(__name__)

_Key = Tuple[str, str]


class InMemoryCheckinLedger:
    """Append-only ledger keyed by (player_id, club_id)."""

    def __init__(self) -> None:
        self._events: DefaultDict[_Key, List[CheckinEvent]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def latest_for(self, player_id: str, club_id: str) -> Optional[CheckinEvent]:
        history = self._events.get((player_id, club_id))
        return history[-1] if history else None

    async def append(self, event: CheckinEvent) -> CheckinEvent:
        async with self._lock:
            history = self._events[event.key]
            expected = len(history) + 1
            if event.sequence != expected:
                logger.debug(
                    "Ledger append lost the sequence race",
                    extra={
                        "player_id": event.player_id,
                        "club_id": event.club_id,
                        "sequence": event.sequence,
                        "expected_sequence": expected,
                    },
                )
                raise LedgerConflictError(event.player_id, event.club_id, event.sequence)
            history.append(event)
        return event

    async def list_for_club(
        self, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        events = [
            event
            for (_, event_club), history in self._events.items()
            if event_club == club_id
            for event in history
            if since is None or event.timestamp >= since
        ]
        return sorted(events, key=lambda e: (e.timestamp, e.player_id, e.sequence))

    async def list_for_player(
        self, player_id: str, club_id: str, since: Optional[datetime] = None
    ) -> List[CheckinEvent]:
        return [
            event
            for event in self._events.get((player_id, club_id), [])
            if since is None or event.timestamp >= since
        ]


class InMemoryScoreAccountStore:
    def __init__(self) -> None:
        self._totals: Dict[_Key, int] = {}
        self._lock = asyncio.Lock()

    async def get(self, player_id: str, club_id: str) -> Optional[ScoreAccount]:
        total = self._totals.get((player_id, club_id))
        if total is None:
            return None
        return ScoreAccount(player_id=player_id, club_id=club_id, total_points=total)

    async def increment(self, player_id: str, club_id: str, points: int) -> ScoreAccount:
        async with self._lock:
            key = (player_id, club_id)
            total = self._totals.get(key, 0) + points
            self._totals[key] = total
        return ScoreAccount(player_id=player_id, club_id=club_id, total_points=total)

    async def list_for_club(self, club_id: str) -> List[ScoreAccount]:
        return [
            ScoreAccount(player_id=player_id, club_id=account_club, total_points=total)
            for (player_id, account_club), total in self._totals.items()
            if account_club == club_id
        ]


class InMemoryProfileStore:
    def __init__(self, names: Optional[Dict[str, str]] = None) -> None:
        self._names: Dict[str, str] = dict(names or {})
        self._lock = asyncio.Lock()

    async def get_display_name(self, player_id: str) -> Optional[str]:
        return self._names.get(player_id)

    async def get_display_names(self, player_ids: Iterable[str]) -> Dict[str, str]:
        return {pid: self._names[pid] for pid in player_ids if pid in self._names}

    async def create_profile_if_absent(self, player_id: str, default_name: str) -> bool:
        async with self._lock:
            if player_id in self._names:
                return False
            self._names[player_id] = default_name
        return True


class StaticIdentityProvider:
    """Identity provider that always reports the same player (or nobody)."""

    def __init__(self, player_id: Optional[str] = None) -> None:
        self.player_id = player_id

    async def get_current_player(self) -> Optional[str]:
        return self.player_id
