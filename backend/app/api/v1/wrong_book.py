"""
K12 Tutor - Wrong-Book API
Questions the student most recently answered wrong
"""
from typing import Optional

from fastapi import APIRouter

from app.api.deps import CurrentStudent, DbSession
from app.models.catalog import Subject
from app.schemas.catalog import QuestionResponse
from app.schemas.review import WrongBookItem, WrongBookResponse
from app.services.attempts import AttemptLedger
from app.services.catalog import CatalogService
from app.services.memory import MemoryReviewService

router = APIRouter(prefix="/wrong-book", tags=["Wrong Book"])


@router.get("", response_model=WrongBookResponse)
async def get_wrong_book(
    db: DbSession,
    current_user: CurrentStudent,
    subject: Optional[Subject] = None,
) -> WrongBookResponse:
    """Latest-wrong questions with solutions, most recent mistake first."""
    latest = await AttemptLedger(db).get_last_attempt_by_question(current_user.id)
    wrong = {qid: attempt for qid, attempt in latest.items() if not attempt.correct}
    questions = await CatalogService(db).get_questions_by_ids(wrong.keys())
    memory = MemoryReviewService(db)

    items = []
    for question in questions:
        if subject is not None and question.subject != subject.value:
            continue
        attempt = wrong[question.id]
        review = await memory.get_review(current_user.id, question.id)
        items.append(WrongBookItem(
            question=QuestionResponse.model_validate(question),
            last_answer=attempt.answer,
            last_reason=attempt.reason,
            last_attempt_at=attempt.created_at,
            review_stage=review.stage if review else None,
        ))
    items.sort(key=lambda item: item.last_attempt_at, reverse=True)
    return WrongBookResponse(total=len(items), items=items)
