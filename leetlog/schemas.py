"""
Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class ProblemStatusEnum(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"


class LogStatusEnum(str, Enum):
    SOLVED = "solved"
    ATTEMPTED = "attempted"


class ReadinessEnum(str, Enum):
    MASTERED = "mastered"
    REVISIT = "revisit"
    WEAK = "weak"
    RUSTY = "rusty"
    UNSOLVED = "-"


# =============================================================================
# User Schemas
# =============================================================================

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: Optional[str] = None


class UserUpdate(BaseModel):
    email: Optional[str] = None
    skip_delete_confirmation: Optional[bool] = None


class UserResponse(BaseModel):
    id: int
    username: str
    email: Optional[str]
    skip_delete_confirmation: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Problem Schemas
# =============================================================================

class ProblemResponse(BaseModel):
    id: int
    leetcode_id: int
    title: str
    slug: Optional[str]
    difficulty: str
    tags: List[str] = []
    category: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class ProblemDetailResponse(ProblemResponse):
    description: Optional[str]


# =============================================================================
# Log Schemas
# =============================================================================

class LogCreate(BaseModel):
    # Bad values are coerced by the service, never rejected
    time_spent: Any = None
    status: Any = None
    notes: Optional[str] = None
    solution: Optional[str] = None


class LogResponse(BaseModel):
    id: int
    user_problem_id: int
    time_spent: int
    status: LogStatusEnum
    notes: Optional[str]
    solution: Optional[str]
    created_at: datetime
    expires_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# User Problem Schemas
# =============================================================================

class UserProblemCreate(BaseModel):
    url: str = Field(..., min_length=1)


class UserProblemResponse(BaseModel):
    id: int
    status: ProblemStatusEnum
    time_spent: Optional[int]
    time_display: str = "-"
    solved_at: Optional[datetime]
    readiness: ReadinessEnum = ReadinessEnum.UNSOLVED
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    problem: ProblemResponse

    model_config = ConfigDict(from_attributes=True)


class UserProblemDetailResponse(UserProblemResponse):
    problem: ProblemDetailResponse
    logs: List[LogResponse] = []


class LogCreatedResponse(BaseModel):
    success: bool = True
    log: LogResponse
    user_problem: UserProblemDetailResponse


class BulkDeleteRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


# =============================================================================
# Analytics Schemas
# =============================================================================

class CategoryScoreResponse(BaseModel):
    category: str
    score: float
    count: int

    model_config = ConfigDict(from_attributes=True)


class DifficultyStats(BaseModel):
    difficulty: str
    total: int
    solved: int
    avg_time: Optional[int]
    avg_time_display: str
    readiness: Dict[str, int]


class AnalyticsResponse(BaseModel):
    total_problems: int
    solved: int
    avg_time: Optional[int]
    avg_time_display: str
    readiness_counts: Dict[str, int]
    difficulty_stats: List[DifficultyStats]
    data_structure_scores: List[CategoryScoreResponse]
    algorithm_scores: List[CategoryScoreResponse]
    gpa: float
