"""
Leaderboard Record Format

Reads and writes the ``name,level,score,timestamp`` snapshot format.
Names containing a comma are quoted; quoted fields may hold commas.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Iterable, List

from ..models.leaderboard import LeaderboardEntry
from .helpers import parse_int

HEADER = ['name', 'level', 'score', 'timestamp']
HEADER_LINE = ','.join(HEADER)


def utc_now_iso() -> str:
    """Current instant as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_timestamp(value: str):
    """Parses an ISO-8601 timestamp, returning None when it is unreadable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def serialize_entries(entries: Iterable[LeaderboardEntry]) -> str:
    """Renders entries (in the given order) with a header line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(HEADER)
    for entry in entries:
        writer.writerow([entry.name, entry.level, entry.score, entry.timestamp])
    return buffer.getvalue()


def parse_entries(text: str) -> List[LeaderboardEntry]:
    """
    Parses a snapshot back into entries, in file order.

    Recovery rules:
    - a leading header line is skipped
    - rows with fewer than four fields are dropped
    - unreadable or out-of-range level becomes 1, score becomes 0
    - an empty name becomes "Unknown", an empty timestamp becomes now
    """
    if not text or not text.strip():
        return []

    lines = [line for line in text.strip().splitlines() if line.strip()]
    if lines and HEADER_LINE in lines[0]:
        lines = lines[1:]

    entries = []
    for row in csv.reader(lines, skipinitialspace=True):
        if len(row) < 4:
            continue
        name, level, score, timestamp = (part.strip() for part in row[:4])

        parsed_level = parse_int(level, 1)
        parsed_score = parse_int(score, 0)
        entries.append(LeaderboardEntry(
            name=name or 'Unknown',
            level=parsed_level if parsed_level >= 1 else 1,
            score=parsed_score if parsed_score >= 0 else 0,
            timestamp=timestamp or utc_now_iso()
        ))
    return entries
