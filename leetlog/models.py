"""
SQLAlchemy database models for the practice journal.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey,
    Text, JSON, Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the form the database stores)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Difficulty(str, enum.Enum):
    """Problem difficulty."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ProblemStatus(str, enum.Enum):
    """Progress of a user on a problem."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"


class LogStatus(str, enum.Enum):
    """Outcome of a single timed attempt."""
    SOLVED = "solved"
    ATTEMPTED = "attempted"


class User(Base):
    """Journal owner."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, nullable=True)

    # Persisted "don't ask again" choice for destructive actions
    skip_delete_confirmation = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user_problems = relationship("UserProblem", back_populates="user", cascade="all, delete-orphan")


class Problem(Base):
    """Cached problem metadata, shared across users."""
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    leetcode_id = Column(Integer, unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True)
    difficulty = Column(String(20), nullable=False)  # easy / medium / hard

    # Topic tags in the order the source lists them
    tags = Column(JSON, default=list, nullable=False)
    category = Column(String(100), nullable=True)  # First tag
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    # Relationships
    user_problems = relationship("UserProblem", back_populates="problem")


class UserProblem(Base):
    """A problem on a user's list, with its persisted best-attempt snapshot."""
    __tablename__ = "user_problems"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)

    # Snapshot, written only by the snapshot service
    status = Column(SQLEnum(ProblemStatus), default=ProblemStatus.NOT_STARTED, nullable=False)
    time_spent = Column(Integer, nullable=True)  # Best non-expired solved time, seconds
    solved_at = Column(DateTime, nullable=True)

    # Optimistic lock for snapshot writes
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="user_problems")
    problem = relationship("Problem", back_populates="user_problems")
    logs = relationship(
        "Log",
        back_populates="user_problem",
        cascade="all, delete-orphan",
        order_by="Log.created_at.desc()",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="unique_user_problem"),
        Index("idx_user_problem_user", "user_id"),
    )


class Log(Base):
    """One timed attempt on a user problem."""
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    user_problem_id = Column(Integer, ForeignKey("user_problems.id", ondelete="CASCADE"), nullable=False)

    time_spent = Column(Integer, default=0, nullable=False)  # seconds
    status = Column(SQLEnum(LogStatus), nullable=False)
    notes = Column(Text, nullable=True)
    solution = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    # Null on rows written before expiry was tracked
    expires_at = Column(DateTime, nullable=True)

    # Relationships
    user_problem = relationship("UserProblem", back_populates="logs")

    __table_args__ = (
        Index("idx_log_user_problem_created", "user_problem_id", "created_at"),
    )
