"""Grammar of the ``copy_status`` column on shell programs.

The column holds exactly one of::

    ready | failed | cloning | cloning_week_<i>_of_<n>

It is the only durable signal of clone progress shared between the worker
and the polling API.
"""
import re
from dataclasses import dataclass

READY = "ready"
FAILED = "failed"
CLONING = "cloning"

_WEEK_PREFIX = "cloning_week_"
_WEEK_PATTERN = re.compile(r"^cloning_week_(\d+)_of_(\d+)$")


@dataclass(frozen=True)
class Progress:
    current_week: int
    total_weeks: int


def week_progress_status(current_week: int, total_weeks: int) -> str:
    """Heartbeat value written before week ``current_week`` (1-based) is cloned."""
    if total_weeks < 1 or not 1 <= current_week <= total_weeks:
        raise ValueError(f"invalid week progress {current_week}/{total_weeks}")
    return f"{_WEEK_PREFIX}{current_week}_of_{total_weeks}"


def parse_progress(status: str | None) -> Progress | None:
    if not status:
        return None
    match = _WEEK_PATTERN.match(status)
    if not match:
        return None
    return Progress(current_week=int(match.group(1)), total_weeks=int(match.group(2)))


def is_in_progress(status: str | None) -> bool:
    return status == CLONING or (status or "").startswith(_WEEK_PREFIX)


def effective_status(raw: str | None) -> str:
    # Rows created outside the clone flow never had a status; they are complete.
    return raw or READY
