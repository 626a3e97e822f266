"""
User problem service.
Handles adding problems to a user's list, writing and deleting logs, and
loading the list with recent history for the dashboard and analytics views.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..exceptions import DuplicateProblemError, ForbiddenError, NotFoundError
from ..models import Log, Problem, ProblemStatus, User, UserProblem
from .leetcode_service import LeetCodeClient, extract_slug, get_leetcode_client
from .readiness_service import active_logs, add_months, normalize_difficulty
from .snapshot_service import (
    SnapshotService, coerce_log_status, coerce_time_spent, get_snapshot_service,
)

logger = logging.getLogger(__name__)


@dataclass
class UserProblemView:
    """A user problem with the recent, non-expired part of its history."""
    id: int
    status: ProblemStatus
    time_spent: Optional[int]
    solved_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    problem: Problem
    logs: List[Log] = field(default_factory=list)


class UserProblemService:
    """Service for managing a user's problem list and attempt logs."""

    def __init__(
        self,
        leetcode_client: Optional[LeetCodeClient] = None,
        snapshot_service: Optional[SnapshotService] = None,
    ):
        self.leetcode_client = leetcode_client or get_leetcode_client()
        self.snapshot_service = snapshot_service or get_snapshot_service()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def get_user_problem(self, db: Session, user_id: int, user_problem_id: int) -> UserProblem:
        """Get a user problem, checking that it belongs to the user."""
        user_problem = db.query(UserProblem).filter(UserProblem.id == user_problem_id).first()
        if not user_problem:
            raise NotFoundError("Problem not found")
        if user_problem.user_id != user_id:
            raise ForbiddenError("Problem belongs to another user")
        return user_problem

    def list_logs(self, db: Session, user_problem_id: int, limit: Optional[int] = None) -> List[Log]:
        """Logs of a user problem, newest first."""
        query = (
            db.query(Log)
            .filter(Log.user_problem_id == user_problem_id)
            .order_by(Log.created_at.desc(), Log.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def to_view(self, db: Session, user_problem: UserProblem, now: Optional[datetime] = None) -> UserProblemView:
        """Attach the recent non-expired logs the read paths work with."""
        recent = self.list_logs(db, user_problem.id, settings.journal.log_fetch_limit)
        retained = active_logs(recent, now)[:settings.journal.log_retain_limit]
        return UserProblemView(
            id=user_problem.id,
            status=user_problem.status,
            time_spent=user_problem.time_spent,
            solved_at=user_problem.solved_at,
            created_at=user_problem.created_at,
            updated_at=user_problem.updated_at,
            problem=user_problem.problem,
            logs=retained,
        )

    def get_user_problems(self, db: Session, user_id: int, now: Optional[datetime] = None) -> List[UserProblemView]:
        """All problems of a user, newest first, with their recent logs."""
        user_problems = (
            db.query(UserProblem)
            .options(joinedload(UserProblem.problem))
            .filter(UserProblem.user_id == user_id)
            .order_by(UserProblem.created_at.desc(), UserProblem.id.desc())
            .all()
        )
        return [self.to_view(db, up, now) for up in user_problems]

    # ------------------------------------------------------------------
    # Problems
    # ------------------------------------------------------------------

    def get_or_create_problem(self, db: Session, url: str) -> Problem:
        """
        Find a cached problem for the URL or fetch and cache it.

        The metadata source is only called for problems not seen before.
        """
        slug = extract_slug(url)
        problem = db.query(Problem).filter(Problem.slug == slug).first()
        if problem:
            return problem

        metadata = self.leetcode_client.fetch_problem(url)

        problem = db.query(Problem).filter(Problem.leetcode_id == metadata.external_id).first()
        if problem:
            # Backfill fields that older cache rows may lack
            if not problem.tags and metadata.tags:
                problem.tags = metadata.tags
                problem.category = metadata.tags[0]
            if not problem.description and metadata.description:
                problem.description = metadata.description
            if not problem.slug:
                problem.slug = metadata.slug
            db.flush()
            return problem

        level = normalize_difficulty(metadata.difficulty)
        problem = Problem(
            leetcode_id=metadata.external_id,
            title=metadata.title,
            slug=metadata.slug,
            difficulty=level.value if level else metadata.difficulty,
            tags=metadata.tags,
            category=metadata.tags[0] if metadata.tags else None,
            description=metadata.description,
        )
        db.add(problem)
        db.flush()
        logger.info("Cached problem %s (%s)", problem.leetcode_id, problem.title)
        return problem

    def add_problem(self, db: Session, user_id: int, url: str) -> UserProblem:
        """Add a problem to a user's list by its URL."""
        self.get_user(db, user_id)
        problem = self.get_or_create_problem(db, url)

        existing = db.query(UserProblem).filter(
            UserProblem.user_id == user_id,
            UserProblem.problem_id == problem.id,
        ).first()
        if existing:
            db.commit()  # keep the cached problem
            raise DuplicateProblemError("Problem already added to your list")

        user_problem = UserProblem(
            user_id=user_id,
            problem_id=problem.id,
            status=ProblemStatus.NOT_STARTED,
        )
        db.add(user_problem)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateProblemError("Problem already added to your list") from e

        db.refresh(user_problem)
        logger.info("User %s added problem %s", user_id, problem.leetcode_id)
        return user_problem

    def delete_user_problem(self, db: Session, user_id: int, user_problem_id: int) -> None:
        """Remove a problem from the list together with its logs."""
        user_problem = self.get_user_problem(db, user_id, user_problem_id)
        db.delete(user_problem)
        db.commit()

    def delete_user_problems(self, db: Session, user_id: int, user_problem_ids: Sequence[int]) -> int:
        """Remove several problems; all must exist and belong to the user."""
        user_problems = [
            self.get_user_problem(db, user_id, up_id) for up_id in dict.fromkeys(user_problem_ids)
        ]
        for user_problem in user_problems:
            db.delete(user_problem)
        db.commit()
        return len(user_problems)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def create_log(
        self,
        db: Session,
        user_id: int,
        user_problem_id: int,
        time_spent: Any = None,
        status: Any = None,
        notes: Optional[str] = None,
        solution: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[Log, UserProblem]:
        """
        Save an attempt and refresh the problem snapshot.

        Args:
            time_spent: Seconds; non-numeric or negative values are stored as 0
            status: 'solved' or 'attempted'; inferred from time_spent otherwise

        Returns:
            (created Log, updated UserProblem)
        """
        self.get_user_problem(db, user_id, user_problem_id)

        seconds = coerce_time_spent(time_spent)
        log_status = coerce_log_status(status, seconds)

        def write(session: Session, user_problem: UserProblem, write_time: datetime) -> Log:
            log = Log(
                user_problem_id=user_problem.id,
                time_spent=seconds,
                status=log_status,
                notes=notes or None,
                solution=solution or None,
                created_at=write_time,
                expires_at=add_months(write_time, 1),
            )
            session.add(log)
            return log

        user_problem, log = self.snapshot_service.apply(db, user_problem_id, write, now)
        db.refresh(log)
        logger.info(
            "Logged %s attempt of %ss on user problem %s",
            log_status.value, seconds, user_problem_id,
        )
        return log, user_problem

    def delete_log(self, db: Session, user_id: int, log_id: int, now: Optional[datetime] = None) -> UserProblem:
        """Delete a log and recompute the snapshot from the remaining ones."""
        log = db.query(Log).filter(Log.id == log_id).first()
        if not log:
            raise NotFoundError("Log not found")
        user_problem = self.get_user_problem(db, user_id, log.user_problem_id)

        def remove(session: Session, _user_problem: UserProblem, _write_time: datetime) -> None:
            target = session.get(Log, log_id)
            if target is not None:
                session.delete(target)

        user_problem, _ = self.snapshot_service.apply(db, user_problem.id, remove, now)
        return user_problem

    def refresh_snapshot(self, db: Session, user_id: int, user_problem_id: int, now: Optional[datetime] = None) -> UserProblem:
        """Recompute a snapshot, e.g. after logs expired."""
        self.get_user_problem(db, user_id, user_problem_id)
        return self.snapshot_service.refresh(db, user_problem_id, now)


# Singleton instance
_user_problem_service: Optional[UserProblemService] = None


def get_user_problem_service() -> UserProblemService:
    """Get the singleton user problem service instance."""
    global _user_problem_service
    if _user_problem_service is None:
        _user_problem_service = UserProblemService()
    return _user_problem_service
