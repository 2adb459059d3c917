"""
Cookie-less visitor fingerprints.

Every fingerprint is the first 32 hex characters of a SHA-256 digest, so the
stored value has a fixed length no matter what the client sent.
"""

import hashlib
from dataclasses import dataclass
from datetime import date
from typing import Optional

from portfolio.config import settings
from portfolio.utils.time_utils import local_today

FINGERPRINT_LENGTH = 32
CANVAS_FALLBACK = "canvas-error"


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def generate_fingerprint(user_agent: Optional[str], accept_language: Optional[str], today: Optional[date] = None) -> str:
    """Server-side fallback fingerprint.

    The calendar date is part of the input, so the same browser gets a new
    fingerprint every day.
    """
    day = today or local_today(settings.timezone_name)
    components = [
        user_agent or "",
        accept_language or "",
        day.isoformat(),
    ]
    return _digest("|".join(components))


def hash_client_fingerprint(client_fingerprint: str) -> str:
    """Re-hash a client supplied fingerprint before it is stored."""
    return _digest(client_fingerprint or "")


@dataclass
class ClientSignals:
    """Browser characteristics collected by the site widget."""
    user_agent: Optional[str] = None
    language: Optional[str] = None
    screen_width: Optional[int] = None
    screen_height: Optional[int] = None
    color_depth: Optional[int] = None
    timezone_offset: Optional[int] = None
    hardware_concurrency: Optional[int] = None
    canvas: Optional[str] = None


def _text(value) -> str:
    return "" if value is None else str(value)


def client_fingerprint(signals: ClientSignals) -> str:
    """Client-side fingerprint computed from the collected browser signals.

    Mirrors what the widget script does in the browser. A missing canvas
    signature becomes a fixed marker; any other missing signal becomes "".
    """
    if signals.screen_width is not None and signals.screen_height is not None:
        screen = f"{signals.screen_width}x{signals.screen_height}"
    else:
        screen = ""
    components = [
        _text(signals.user_agent),
        _text(signals.language),
        screen,
        _text(signals.color_depth),
        _text(signals.timezone_offset),
        _text(signals.hardware_concurrency or 0),
        signals.canvas or CANVAS_FALLBACK,
    ]
    return _digest("|".join(components))
