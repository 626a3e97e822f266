"""
Analytics API routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_current_user
from ..models import User
from ..schemas import AnalyticsResponse
from ..services.analytics_service import get_analytics_service
from ..services.user_problem_service import get_user_problem_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsResponse)
def get_analytics(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Readiness breakdown, per-difficulty stats, category radar scores and the
    composite GPA for the calling user.
    """
    views = get_user_problem_service().get_user_problems(db, current_user.id)
    return get_analytics_service().build_report(views)
