"""
CheckinService - check-in decision and point award
===================================================

Handles:
- Cooldown enforcement against the most recent ledger event
- Ledger append (compare-and-swap on the event sequence)
- Atomic point credit on the (player, club) score account
- Account reconciliation from the ledger
- QR check-in links

Ordering
--------
The ledger append is durable before any point is credited. If the append
fails nothing has changed. If the credit fails after a successful append,
the ledger is ahead of the account by one award; `reconcile_account`
re-derives the total from the ledger and credits the difference.

Concurrency
-----------
Two racing check-ins for the same pair read the same previous event and
both try to append `previous.sequence + 1`. The store lets exactly one
of them through; the other gets LedgerConflictError, re-reads the ledger
and re-applies the cooldown (normally ending in CheckinTooSoon). No two
accepted check-ins can therefore land inside one cooldown window.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from padelheroes.core.config.config import Config
from padelheroes.core.exceptions import StorageError
from padelheroes.core.logging.logger import LogContext, get_logger
from padelheroes.domain.models import CheckinAccepted, CheckinEvent, CheckinOutcome, ScoreAccount
from padelheroes.modules.checkin.links import build_checkin_link
from padelheroes.modules.checkin.rules import evaluate_cooldown
from padelheroes.modules.shared.base_service import BaseService
from padelheroes.modules.shared.exceptions import (
    CheckinContentionError,
    LedgerConflictError,
    UnauthenticatedError,
    ValidationError,
)

if TYPE_CHECKING:
    from logging import Logger

    from padelheroes.core.clock import Clock
    from padelheroes.core.config.rules import CheckinRules
    from padelheroes.modules.shared.ports import (
        CheckinLedger,
        IdentityProvider,
        ScoreAccountStore,
    )


class CheckinService(BaseService):
    """
    Decides whether a check-in is accepted and awards its points.

    Business Logic:
    - At most one accepted check-in per (player, club) per cooldown window
    - Each accepted check-in is worth `points_per_checkin`
    - A rejected check-in writes nothing
    """

    def __init__(
        self,
        ledger: CheckinLedger,
        accounts: ScoreAccountStore,
        clock: Clock,
        rules: CheckinRules,
        logger: Optional[Logger] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(logger or get_logger(__name__))
        self._ledger = ledger
        self._accounts = accounts
        self._clock = clock
        self._rules = rules
        self._base_url = base_url or Config.CHECKIN_BASE_URL

    # -------------------------------------------------------------------------
    # Core Operations
    # -------------------------------------------------------------------------

    async def attempt_checkin(
        self, player_id: str, club_id: str, now: datetime
    ) -> CheckinOutcome:
        """
        Check `player_id` in to `club_id` at `now`.

        Args:
            player_id: Authenticated player identifier
            club_id: Club identifier
            now: Timezone-aware instant from the Clock

        Returns:
            CheckinAccepted, or CheckinTooSoon when inside the cooldown window

        Raises:
            ValidationError: Blank identifiers or naive `now`
            StorageError: Store unavailable
            CheckinContentionError: Lost every ledger race
        """
        player_id = self.validate_identifier(player_id, "player_id")
        club_id = self.validate_identifier(club_id, "club_id")
        now = self.validate_timestamp(now)

        retries = self._rules.conflict_retries
        for attempt in range(1, retries + 1):
            last = await self._ledger.latest_for(player_id, club_id)

            too_soon = evaluate_cooldown(last, now, self._rules)
            if too_soon is not None:
                self.log.info(
                    "Check-in rejected: cooldown active",
                    extra={
                        "operation": "attempt_checkin",
                        "player_id": player_id,
                        "club_id": club_id,
                        "remaining_minutes": too_soon.remaining_minutes,
                        "attempt": attempt,
                    },
                )
                return too_soon

            event = CheckinEvent.first_or_next(last, player_id, club_id, now)
            try:
                await self._ledger.append(event)
            except LedgerConflictError:
                self.log.debug(
                    "Check-in lost ledger race; re-evaluating",
                    extra={
                        "operation": "attempt_checkin",
                        "player_id": player_id,
                        "club_id": club_id,
                        "sequence": event.sequence,
                        "attempt": attempt,
                    },
                )
                continue

            return await self._credit(event)

        error = CheckinContentionError(player_id, club_id, retries)
        self.log_error("attempt_checkin", error, player_id=player_id, club_id=club_id)
        raise error

    async def check_in(
        self, identity: IdentityProvider, club_id: Optional[str] = None
    ) -> CheckinOutcome:
        """
        Front-door check-in for the authenticated caller.

        Resolves the player before anything else touches the ledger, falls
        back to the configured default club, and reads `now` from the clock.

        Raises:
            UnauthenticatedError: No current player
            ValidationError: No club id given and no default configured
        """
        player_id = await identity.get_current_player()
        if player_id is None:
            self.log.info(
                "Check-in refused: caller not authenticated",
                extra={"operation": "check_in", "club_id": club_id},
            )
            raise UnauthenticatedError("check in")

        club = self.resolve_club_id(club_id)

        async with LogContext(player_id=player_id, club_id=club, operation="check_in"):
            return await self.attempt_checkin(player_id, club, self._clock.now())

    async def reconcile_account(self, player_id: str, club_id: str) -> int:
        """
        Bring a score account back in line with the ledger.

        The expected total is `points_per_checkin` times the number of
        recorded check-ins. Only a positive deficit is credited; a total
        ahead of the ledger (manual bonus) is left alone.

        Must not run while a check-in for the same pair is in flight: an
        appended-but-not-yet-credited event would be credited twice.

        Returns:
            Points credited (0 when the account was already consistent)
        """
        player_id = self.validate_identifier(player_id, "player_id")
        club_id = self.validate_identifier(club_id, "club_id")

        events = await self._ledger.list_for_player(player_id, club_id)
        expected = len(events) * self._rules.points_per_checkin

        account = await self._accounts.get(player_id, club_id) or ScoreAccount.empty(
            player_id, club_id
        )
        current = account.total_points

        deficit = expected - current
        if deficit <= 0:
            self.log.debug(
                "Score account consistent with ledger",
                extra={
                    "operation": "reconcile_account",
                    "player_id": player_id,
                    "club_id": club_id,
                    "expected_total": expected,
                    "current_total": current,
                },
            )
            return 0

        await self._accounts.increment(player_id, club_id, deficit)
        self.log_operation(
            "reconcile_account",
            player_id=player_id,
            club_id=club_id,
            credited=deficit,
            expected_total=expected,
        )
        return deficit

    def build_checkin_link(
        self, club_id: Optional[str] = None, base_url: Optional[str] = None
    ) -> str:
        """URL a club's QR code should encode."""
        return build_checkin_link(self.resolve_club_id(club_id), base_url or self._base_url)

    def resolve_club_id(self, club_id: Optional[str]) -> str:
        club = club_id or self._rules.default_club_id
        if club is None:
            raise ValidationError("club_id", "club_id is required (no default club configured)")
        return self.validate_identifier(club, "club_id")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _credit(self, event: CheckinEvent) -> CheckinAccepted:
        points = self._rules.points_per_checkin
        try:
            account = await self._accounts.increment(event.player_id, event.club_id, points)
        except StorageError as exc:
            # Ledger already advanced; reconcile_account will repair the total
            self.log_error(
                "attempt_checkin",
                exc,
                player_id=event.player_id,
                club_id=event.club_id,
                sequence=event.sequence,
                reconcile_required=True,
            )
            raise

        self.log_operation(
            "attempt_checkin",
            player_id=event.player_id,
            club_id=event.club_id,
            points_awarded=points,
            new_total=account.total_points,
            sequence=event.sequence,
        )
        return CheckinAccepted(
            points_awarded=points,
            new_total=account.total_points,
            event=event,
        )
