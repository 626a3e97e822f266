"""
Log API routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user, to_http_exception
from ..exceptions import LeetLogError
from ..models import User
from ..services.user_problem_service import get_user_problem_service

router = APIRouter(prefix="/log", tags=["logs"])


@router.delete("/{log_id}")
def delete_log(
    log_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a log; the problem snapshot is recomputed from the remaining logs."""
    service = get_user_problem_service()

    try:
        service.delete_log(db, current_user.id, log_id)
    except LeetLogError as e:
        raise to_http_exception(e)

    return {"success": True}
