"""
Readiness calculation.

Turns a problem's persisted snapshot (best time, last solve) and its log
history into a single freshness label. Everything here is a pure function of
its arguments and a reference instant, so results are recomputed on every
read instead of being stored.
"""

import calendar
import enum
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import Difficulty, LogStatus, utcnow

# Expiry window for logs written before expires_at was stored
LEGACY_LOG_LIFETIME = timedelta(days=30)

# Minutes: (mastered if below, revisit if at most)
READINESS_THRESHOLDS: Dict[Difficulty, Tuple[int, int]] = {
    Difficulty.EASY: (10, 20),
    Difficulty.MEDIUM: (25, 40),
    Difficulty.HARD: (45, 75),
}


class Readiness(str, enum.Enum):
    """Freshness label of a problem."""
    MASTERED = "mastered"
    REVISIT = "revisit"
    WEAK = "weak"
    RUSTY = "rusty"
    UNSOLVED = "-"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC so stored and computed times compare."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def add_months(value: datetime, months: int) -> datetime:
    """Shift a datetime by calendar months, clamping the day to the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def normalize_difficulty(value) -> Optional[Difficulty]:
    """Map 'Easy', ' HARD ' etc. to a Difficulty, or None when unrecognized."""
    if isinstance(value, Difficulty):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Difficulty(value.strip().lower())
    except ValueError:
        return None


def log_expiry(log) -> Optional[datetime]:
    """When a log stops counting: its stored expiry, or created_at + 30 days for legacy rows."""
    expires_at = as_utc(getattr(log, "expires_at", None))
    if expires_at is not None:
        return expires_at

    created_at = as_utc(getattr(log, "created_at", None))
    if created_at is not None:
        return created_at + LEGACY_LOG_LIFETIME
    return None


def is_active(log, now: Optional[datetime] = None) -> bool:
    """Whether a log is still inside its validity window (exclusive at the boundary)."""
    now = as_utc(now) or utcnow()
    expiry = log_expiry(log)
    return expiry is not None and expiry > now


def active_logs(logs: Optional[Iterable], now: Optional[datetime] = None) -> List:
    """Non-expired subset of logs, in the order given."""
    now = as_utc(now) or utcnow()
    return [log for log in (logs or []) if is_active(log, now)]


def created_sort_key(log) -> datetime:
    return as_utc(getattr(log, "created_at", None)) or datetime.min


def latest_log(logs: Iterable):
    """Most recently created log, or None."""
    logs = list(logs)
    if not logs:
        return None
    return max(logs, key=created_sort_key)


def is_solved(log) -> bool:
    return getattr(log, "status", None) == LogStatus.SOLVED


def base_readiness(time_spent: int, difficulty) -> Readiness:
    """Readiness from solve time alone, before the decay rule."""
    level = normalize_difficulty(difficulty)
    if level is None:
        return Readiness.UNSOLVED

    mastered_below, revisit_up_to = READINESS_THRESHOLDS[level]
    minutes = time_spent / 60

    if minutes < mastered_below:
        return Readiness.MASTERED
    if minutes <= revisit_up_to:
        return Readiness.REVISIT
    return Readiness.WEAK


def calculate_readiness(
    time_spent: Optional[int],
    solved_at: Optional[datetime],
    difficulty,
    logs: Optional[Iterable],
    now: Optional[datetime] = None,
) -> Readiness:
    """
    Classify a problem.

    Args:
        time_spent: Persisted best non-expired solve time in seconds
        solved_at: Persisted timestamp of the latest solve
        difficulty: Problem difficulty (any casing)
        logs: Log history; expired entries are ignored
        now: Reference instant, defaults to the current time
    """
    if time_spent is None or solved_at is None:
        return Readiness.UNSOLVED

    now = as_utc(now) or utcnow()
    current = active_logs(logs, now)

    # A recent struggle outweighs an older solve
    latest = latest_log(current)
    if latest is not None and latest.status == LogStatus.ATTEMPTED:
        return Readiness.WEAK

    if not current:
        return Readiness.WEAK

    readiness = base_readiness(time_spent, difficulty)

    if readiness == Readiness.MASTERED and as_utc(solved_at) < add_months(now, -1):
        return Readiness.RUSTY

    return readiness


def classify(user_problem, logs: Optional[Iterable] = None, now: Optional[datetime] = None) -> Readiness:
    """Readiness of a UserProblem (uses its own logs unless a log list is passed)."""
    if logs is None:
        logs = user_problem.logs
    return calculate_readiness(
        user_problem.time_spent,
        user_problem.solved_at,
        user_problem.problem.difficulty,
        logs,
        now,
    )


def format_time(seconds: Optional[int]) -> str:
    """Human readable duration: '1h 2m 3s', '5m', '42s' or '-' when unknown."""
    if not seconds:
        return "-"
    hours, remainder = divmod(int(seconds), 3600)
    mins, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {mins}m {secs}s" if mins > 0 else f"{hours}h {secs}s"
    if mins > 0:
        return f"{mins}m {secs}s" if secs > 0 else f"{mins}m"
    return f"{secs}s"
