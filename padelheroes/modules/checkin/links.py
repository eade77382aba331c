"""Check-in link a club's QR code points to."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from padelheroes.core.config.config import Config
from padelheroes.modules.shared.exceptions import ValidationError


def build_checkin_link(club_id: str, base_url: Optional[str] = None) -> str:
    """
    Build the URL encoded in a club's QR code.

    >>> build_checkin_link("club-1", "https://padel.example")
    'https://padel.example/checkin?clubId=club-1'
    """
    if not club_id or not club_id.strip():
        raise ValidationError("club_id", "club_id must be a non-empty string")

    base = (base_url or Config.CHECKIN_BASE_URL).rstrip("/")
    return f"{base}/checkin?{urlencode({'clubId': club_id})}"
