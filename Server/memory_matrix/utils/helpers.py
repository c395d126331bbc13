"""
Helper Functions

Contains utility functions used throughout the application.
"""

from typing import Dict, Optional

MAX_NAME_LENGTH = 20


def get_user_identity(request_obj) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'

    return {
        'user_ip': user_ip,
        'session_id': None,
        'username': None
    }


def parse_int(value, default: int) -> int:
    """Parses a decimal integer, falling back to ``default`` when it is unreadable."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def sanitize_name(name: Optional[str]) -> str:
    """
    Makes a player name safe for the leaderboard record format.

    Truncates to 20 characters, strips quotes, commas and line breaks, drops
    code points UTF-8 cannot encode (lone surrogates), trims whitespace, and
    falls back to "Anonymous" when nothing is left.
    """
    if not name:
        return 'Anonymous'
    cleaned = str(name)[:MAX_NAME_LENGTH]
    for char in ('"', ',', '\r', '\n'):
        cleaned = cleaned.replace(char, '')
    cleaned = cleaned.encode('utf-8', 'ignore').decode('utf-8')
    return cleaned.strip() or 'Anonymous'


def round_half_up(value: float) -> int:
    # Halves go up (2.5 -> 3), unlike round()
    return int(value + 0.5)
