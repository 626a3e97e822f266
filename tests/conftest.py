"""Test configuration."""
import os
from datetime import datetime, timedelta
from typing import Dict, Generator, List, Optional

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from leetlog.database import Base, get_db
from leetlog.exceptions import ProblemNotFound
from leetlog.main import app
from leetlog.models import Log, LogStatus, Problem, User
from leetlog.services import user_problem_service as user_problem_module
from leetlog.services.leetcode_service import ProblemMetadata, extract_slug
from leetlog.services.readiness_service import add_months
from leetlog.services.snapshot_service import SnapshotService
from leetlog.services.user_problem_service import UserProblemService, UserProblemView

fake = Faker()

# Fixed reference instant; the month before it has 30 days
NOW = datetime(2026, 10, 19, 12, 0, 0)


class FakeLeetCodeClient:
    """Stands in for the LeetCode GraphQL client."""

    def __init__(self, problems: Dict[str, ProblemMetadata]):
        self.problems = problems
        self.calls: List[str] = []

    def fetch_problem(self, url: str) -> ProblemMetadata:
        slug = extract_slug(url)
        self.calls.append(slug)
        if slug not in self.problems:
            raise ProblemNotFound(f"Problem '{slug}' not found")
        return self.problems[slug]


@pytest.fixture
def leetcode_problems() -> Dict[str, ProblemMetadata]:
    return {
        "two-sum": ProblemMetadata(
            external_id=1, title="Two Sum", slug="two-sum", difficulty="easy",
            tags=["Array", "Hash Table"], description="Find two numbers.",
        ),
        "longest-substring-without-repeating-characters": ProblemMetadata(
            external_id=3, title="Longest Substring Without Repeating Characters",
            slug="longest-substring-without-repeating-characters", difficulty="medium",
            tags=["Hash Table", "String", "Sliding Window"],
        ),
        "median-of-two-sorted-arrays": ProblemMetadata(
            external_id=4, title="Median of Two Sorted Arrays",
            slug="median-of-two-sorted-arrays", difficulty="hard",
            tags=["Array", "Binary Search", "Divide and Conquer"],
        ),
    }


@pytest.fixture
def leetcode_client(leetcode_problems) -> FakeLeetCodeClient:
    return FakeLeetCodeClient(leetcode_problems)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def service(leetcode_client) -> UserProblemService:
    return UserProblemService(leetcode_client=leetcode_client, snapshot_service=SnapshotService())


@pytest.fixture
def client(db: Session, service: UserProblemService, monkeypatch) -> Generator[TestClient, None, None]:
    """API client bound to the test database and the fake LeetCode client."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(user_problem_module, "_user_problem_service", service)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user(db: Session) -> User:
    """Create a test user."""
    user = User(username=fake.unique.user_name(), email=fake.unique.email())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_user(db: Session) -> User:
    user = User(username=fake.unique.user_name())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_log(
    time_spent: int = 300,
    status: LogStatus = LogStatus.SOLVED,
    created_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
    legacy: bool = False,
) -> Log:
    """Unsaved log; expires one month after creation unless legacy."""
    created_at = created_at or NOW
    if expires_at is None and not legacy:
        expires_at = add_months(created_at, 1)
    return Log(time_spent=time_spent, status=status, created_at=created_at, expires_at=expires_at)


def make_tracked(
    difficulty: str = "easy",
    time_spent: Optional[int] = None,
    solved_at: Optional[datetime] = None,
    logs: Optional[List[Log]] = None,
    tags: Optional[List[str]] = None,
) -> UserProblemView:
    """Unsaved user problem view for pure readiness/analytics tests."""
    problem = Problem(leetcode_id=fake.random_int(), title=fake.sentence(), difficulty=difficulty, tags=tags or [])
    return UserProblemView(
        id=fake.random_int(),
        status=None,
        time_spent=time_spent,
        solved_at=solved_at,
        created_at=NOW - timedelta(days=60),
        updated_at=NOW,
        problem=problem,
        logs=logs or [],
    )
