"""
Snapshot service.

Recomputes the persisted best-attempt snapshot of a UserProblem
(best non-expired solve time, overall status, last solve time) from its logs.
The reduction itself is pure; SnapshotService wraps it in a transaction with an
optimistic version check so concurrent log writes cannot lose an update.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..config import settings
from ..exceptions import NotFoundError, SnapshotConflictError
from ..models import Log, LogStatus, ProblemStatus, UserProblem, utcnow
from .readiness_service import active_logs, as_utc, created_sort_key, is_solved

logger = logging.getLogger(__name__)

# Largest value an int4 column holds
MAX_TIME_SPENT = 2**31 - 1


@dataclass(frozen=True)
class Snapshot:
    """Aggregate state persisted on a UserProblem."""
    time_spent: Optional[int]
    status: ProblemStatus
    solved_at: Optional[datetime]


def coerce_time_spent(value: Any) -> int:
    """Seconds from client input; anything non-numeric, negative or out of range becomes 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if value < 0 or value > MAX_TIME_SPENT:
        return 0
    return int(value)


def coerce_log_status(value: Any, time_spent: int) -> LogStatus:
    """Explicit 'solved'/'attempted', otherwise inferred from whether time was logged."""
    if isinstance(value, str):
        try:
            return LogStatus(value)
        except ValueError:
            pass
    return LogStatus.SOLVED if time_spent > 0 else LogStatus.ATTEMPTED


def best_solved_log(logs: Iterable, now: Optional[datetime] = None):
    """Fastest non-expired solved log; the most recent one wins a tie."""
    candidates = [log for log in active_logs(logs, now) if is_solved(log)]
    if not candidates:
        return None
    # min() keeps the first of equal keys, so order newest first
    candidates.sort(key=created_sort_key, reverse=True)
    return min(candidates, key=lambda log: log.time_spent)


def reduce_logs(
    logs: Iterable,
    previous_solved_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Snapshot:
    """
    Compute the snapshot for a full log list.

    Args:
        logs: Every log of the problem, expired ones included
        previous_solved_at: solved_at currently stored on the problem
        now: Reference instant; new logs should be stamped with the same value

    Returns:
        Snapshot to persist
    """
    logs = list(logs)
    now = as_utc(now) or utcnow()

    best = best_solved_log(logs, now)
    time_spent = best.time_spent if best is not None else None

    solved = [log for log in logs if is_solved(log)]
    if solved:
        status = ProblemStatus.SOLVED
    elif logs:
        status = ProblemStatus.IN_PROGRESS
    else:
        status = ProblemStatus.NOT_STARTED

    if solved and previous_solved_at is None:
        # First ever solve
        solved_at = now
    elif solved:
        solved_at = as_utc(max(solved, key=created_sort_key).created_at)
    else:
        solved_at = previous_solved_at

    return Snapshot(time_spent=time_spent, status=status, solved_at=solved_at)


class SnapshotService:
    """Applies log mutations and keeps the UserProblem snapshot in sync."""

    def __init__(self, max_retries: Optional[int] = None):
        self.max_retries = settings.journal.snapshot_retries if max_retries is None else max_retries

    def apply(
        self,
        db: Session,
        user_problem_id: int,
        mutation: Optional[Callable[[Session, UserProblem, datetime], Any]] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[UserProblem, Any]:
        """
        Run a log mutation and the snapshot refresh as one transaction.

        The mutation receives the write time so new logs are stamped with the
        same instant the reducer uses. The whole unit is retried when another
        writer bumped the problem's version in between.

        Returns:
            (refreshed UserProblem, value returned by the mutation)
        """
        for attempt in range(1, self.max_retries + 1):
            write_time = as_utc(now) or utcnow()
            user_problem = db.get(UserProblem, user_problem_id)
            if user_problem is None:
                raise NotFoundError(f"User problem {user_problem_id} not found")

            try:
                result = mutation(db, user_problem, write_time) if mutation else None
                db.flush()

                logs = db.query(Log).filter(Log.user_problem_id == user_problem_id).all()
                snapshot = reduce_logs(logs, user_problem.solved_at, write_time)
                self._write(user_problem, snapshot, write_time)

                db.commit()
            except StaleDataError:
                db.rollback()
                logger.warning(
                    "Snapshot conflict on user problem %s (attempt %d/%d)",
                    user_problem_id, attempt, self.max_retries,
                )
                continue

            db.refresh(user_problem)
            return user_problem, result

        raise SnapshotConflictError(
            f"User problem {user_problem_id} is being modified concurrently, try again"
        )

    def refresh(self, db: Session, user_problem_id: int, now: Optional[datetime] = None) -> UserProblem:
        """Recompute the snapshot without changing any log."""
        user_problem, _ = self.apply(db, user_problem_id, now=now)
        return user_problem

    def update_snapshot(
        self,
        db: Session,
        user_problem_id: int,
        snapshot: Snapshot,
        now: Optional[datetime] = None,
    ) -> UserProblem:
        """Persist an already computed snapshot under the version check."""
        user_problem = db.get(UserProblem, user_problem_id)
        if user_problem is None:
            raise NotFoundError(f"User problem {user_problem_id} not found")

        self._write(user_problem, snapshot, as_utc(now) or utcnow())
        try:
            db.commit()
        except StaleDataError as e:
            db.rollback()
            raise SnapshotConflictError(
                f"User problem {user_problem_id} is being modified concurrently, try again"
            ) from e

        db.refresh(user_problem)
        return user_problem

    def _write(self, user_problem: UserProblem, snapshot: Snapshot, now: datetime) -> None:
        user_problem.time_spent = snapshot.time_spent
        user_problem.status = snapshot.status
        user_problem.solved_at = snapshot.solved_at
        # Always touch the row so the version check runs
        user_problem.updated_at = now


# Singleton instance
_snapshot_service: Optional[SnapshotService] = None


def get_snapshot_service() -> SnapshotService:
    """Get the singleton snapshot service instance."""
    global _snapshot_service
    if _snapshot_service is None:
        _snapshot_service = SnapshotService()
    return _snapshot_service
