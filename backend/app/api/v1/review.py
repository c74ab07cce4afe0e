"""
K12 Tutor - Review API
Due spaced-repetition reviews
"""
from typing import Optional

from fastapi import APIRouter, Query

from app.api.deps import CurrentStudent, DbSession
from app.models.catalog import Subject
from app.schemas.catalog import QuestionPublic
from app.schemas.review import DueReviewItem, DueReviewResponse
from app.services.memory import MemoryReviewService

router = APIRouter(prefix="/review", tags=["Review"])


@router.get("/due", response_model=DueReviewResponse)
async def get_due_reviews(
    db: DbSession,
    current_user: CurrentStudent,
    subject: Optional[Subject] = None,
    grade: Optional[int] = Query(None, ge=1, le=12),
    limit: int = Query(MemoryReviewService.DEFAULT_LIMIT, ge=1, le=100),
) -> DueReviewResponse:
    """Questions whose next review time has passed, most overdue first."""
    due = await MemoryReviewService(db).get_due_reviews(
        current_user.id,
        subject=subject.value if subject else None,
        grade=grade,
        limit=limit,
    )
    return DueReviewResponse(
        total=len(due),
        items=[
            DueReviewItem(
                question=QuestionPublic.model_validate(question),
                stage=review.stage,
                next_review_at=review.next_review_at,
            )
            for review, question in due
        ],
    )
