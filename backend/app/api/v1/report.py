"""
K12 Tutor - Report API
Weekly reports for students and their linked parents
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentUser, DbSession
from app.models.user import UserRole
from app.schemas.report import WeeklyReportResponse
from app.services.auth import AuthService
from app.services.report import ReportService

router = APIRouter(prefix="/report", tags=["Reports"])


@router.get("/weekly", response_model=WeeklyReportResponse)
async def get_weekly_report(
    db: DbSession,
    current_user: CurrentUser,
    student_id: Optional[UUID] = None,
):
    """
    Weekly report for the signed-in student, or for a parent's linked
    student given by ``student_id``.
    """
    if current_user.role == UserRole.STUDENT:
        student = current_user
    elif current_user.role == UserRole.PARENT:
        if student_id is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="student_id is required for parent accounts",
            )
        student = await AuthService(db).get_child(current_user, student_id)
        if student is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Student not found",
            )
    else:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reports are available to students and parents",
        )

    report = await ReportService(db).get_weekly_report(student)
    return WeeklyReportResponse.model_validate(report)
