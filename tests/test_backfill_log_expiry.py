"""Tests for the legacy log expiry backfill."""
from datetime import timedelta

from sqlalchemy.orm import Session

from backfill_log_expiry import backfill_expiry
from conftest import make_log
from leetlog.models import Log, Problem, User, UserProblem, utcnow


def tracked_problem(db: Session, user: User) -> UserProblem:
    problem = Problem(leetcode_id=1, title="Two Sum", slug="two-sum", difficulty="easy", tags=["Array"])
    db.add(problem)
    db.flush()
    user_problem = UserProblem(user_id=user.id, problem_id=problem.id)
    db.add(user_problem)
    db.flush()
    return user_problem


def test_backfill_stamps_legacy_logs(db: Session, user: User) -> None:
    user_problem = tracked_problem(db, user)
    created = utcnow() - timedelta(days=3)
    legacy = make_log(time_spent=240, created_at=created, legacy=True)
    current = make_log(time_spent=500, created_at=utcnow() - timedelta(days=1))
    for log in (legacy, current):
        log.user_problem_id = user_problem.id
    db.add_all([legacy, current])
    db.commit()

    result = backfill_expiry(db)

    assert result == {"logs": 1, "user_problems": 1}
    db.refresh(legacy)
    assert legacy.expires_at == created + timedelta(days=30)
    db.refresh(user_problem)
    assert user_problem.time_spent == 240
    assert db.query(Log).filter(Log.expires_at.is_(None)).count() == 0


def test_backfill_dry_run_changes_nothing(db: Session, user: User) -> None:
    user_problem = tracked_problem(db, user)
    legacy = make_log(created_at=utcnow() - timedelta(days=3), legacy=True)
    legacy.user_problem_id = user_problem.id
    db.add(legacy)
    db.commit()

    assert backfill_expiry(db, dry_run=True) == {"logs": 1, "user_problems": 1}
    db.refresh(legacy)
    assert legacy.expires_at is None


def test_backfill_without_legacy_logs(db: Session) -> None:
    assert backfill_expiry(db) == {"logs": 0, "user_problems": 0}
