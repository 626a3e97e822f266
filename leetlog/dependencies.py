"""
Shared FastAPI dependencies and error translation.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import (
    DuplicateProblemError, ForbiddenError, InvalidProblemURL, LeetLogError,
    NotFoundError, ProblemFetchError, ProblemNotFound, SnapshotConflictError,
)
from .models import User

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    DuplicateProblemError: status.HTTP_400_BAD_REQUEST,
    InvalidProblemURL: status.HTTP_400_BAD_REQUEST,
    ProblemNotFound: status.HTTP_404_NOT_FOUND,
    ProblemFetchError: status.HTTP_502_BAD_GATEWAY,
    SnapshotConflictError: status.HTTP_409_CONFLICT,
}


def to_http_exception(error: LeetLogError) -> HTTPException:
    """Map a service error to the HTTP error the API returns for it."""
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the calling user from the X-User-Id header."""
    if not x_user_id or not x_user_id.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )

    user = db.query(User).filter(User.id == int(x_user_id)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user
