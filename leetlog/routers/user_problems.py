"""
Problem list API routes: add problems, log attempts, remove problems.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user, to_http_exception
from ..exceptions import LeetLogError
from ..models import User
from ..schemas import (
    UserProblemCreate, UserProblemResponse, UserProblemDetailResponse,
    LogCreate, LogCreatedResponse, BulkDeleteRequest, BulkDeleteResponse,
)
from ..services.readiness_service import classify, format_time
from ..services.user_problem_service import UserProblemView, get_user_problem_service

router = APIRouter(prefix="/user-problem", tags=["user-problems"])


def _build_row(view: UserProblemView, with_logs: bool = False) -> dict:
    """Dashboard row with the readiness computed at request time."""
    row = {
        "id": view.id,
        "status": view.status,
        "time_spent": view.time_spent,
        "time_display": format_time(view.time_spent),
        "solved_at": view.solved_at,
        "readiness": classify(view),
        "created_at": view.created_at,
        "updated_at": view.updated_at,
        "problem": view.problem,
    }
    if with_logs:
        row["logs"] = view.logs
    return row


@router.post("", response_model=UserProblemResponse, status_code=status.HTTP_201_CREATED)
def add_user_problem(
    payload: UserProblemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a LeetCode problem to the list by URL."""
    service = get_user_problem_service()

    try:
        user_problem = service.add_problem(db, current_user.id, payload.url)
    except LeetLogError as e:
        raise to_http_exception(e)

    return _build_row(service.to_view(db, user_problem))


@router.get("", response_model=List[UserProblemResponse])
def list_user_problems(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Dashboard: every problem on the list with its current readiness."""
    service = get_user_problem_service()
    return [_build_row(view) for view in service.get_user_problems(db, current_user.id)]


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_user_problems(
    payload: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove several problems at once."""
    service = get_user_problem_service()

    try:
        deleted = service.delete_user_problems(db, current_user.id, payload.ids)
    except LeetLogError as e:
        raise to_http_exception(e)

    return BulkDeleteResponse(deleted=deleted)


@router.get("/{user_problem_id}", response_model=UserProblemDetailResponse)
def get_user_problem(
    user_problem_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One problem with its recent non-expired logs."""
    service = get_user_problem_service()

    try:
        user_problem = service.get_user_problem(db, current_user.id, user_problem_id)
    except LeetLogError as e:
        raise to_http_exception(e)

    return _build_row(service.to_view(db, user_problem), with_logs=True)


@router.post("/{user_problem_id}", response_model=LogCreatedResponse)
def create_log(
    user_problem_id: int,
    payload: LogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Save a timed attempt.

    The problem's best time, status and solve date are recomputed from its
    logs afterwards.
    """
    service = get_user_problem_service()

    try:
        log, user_problem = service.create_log(
            db=db,
            user_id=current_user.id,
            user_problem_id=user_problem_id,
            time_spent=payload.time_spent,
            status=payload.status,
            notes=payload.notes,
            solution=payload.solution,
        )
    except LeetLogError as e:
        raise to_http_exception(e)

    return {
        "success": True,
        "log": log,
        "user_problem": _build_row(service.to_view(db, user_problem), with_logs=True),
    }


@router.post("/{user_problem_id}/refresh", response_model=UserProblemDetailResponse)
def refresh_user_problem(
    user_problem_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Recompute the stored best time after logs have expired."""
    service = get_user_problem_service()

    try:
        user_problem = service.refresh_snapshot(db, current_user.id, user_problem_id)
    except LeetLogError as e:
        raise to_http_exception(e)

    return _build_row(service.to_view(db, user_problem), with_logs=True)


@router.delete("/{user_problem_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_problem(
    user_problem_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a problem and all of its logs from the list."""
    service = get_user_problem_service()

    try:
        service.delete_user_problem(db, current_user.id, user_problem_id)
    except LeetLogError as e:
        raise to_http_exception(e)
