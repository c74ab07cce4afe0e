"""
K12 Tutor - Practice API
Next-question feed, answer submission and AI explanations
"""
import logging
import random

from fastapi import APIRouter, HTTPException, status

from app.ai.agents.explainer import ExplanationAgent
from app.api.deps import CurrentStudent, DbSession
from app.models.user import User
from app.schemas.catalog import QuestionPublic
from app.schemas.practice import (
    ExplanationRequest,
    ExplanationResponse,
    PracticeMode,
    PracticeNextRequest,
    PracticeNextResponse,
    PracticeSubmitRequest,
    PracticeSubmitResponse,
    ReviewState,
)
from app.services.attempts import AttemptLedger
from app.services.catalog import CatalogService
from app.services.memory import MemoryReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/practice", tags=["Practice"])

DEFAULT_GRADE = 4


def resolve_grade(requested: int | None, student: User) -> int:
    return requested or student.grade or DEFAULT_GRADE


@router.post("/next", response_model=PracticeNextResponse)
async def next_question(
    request: PracticeNextRequest,
    db: DbSession,
    current_user: CurrentStudent,
) -> PracticeNextResponse:
    """
    Pick the next question to practice.

    - normal: a random question in the subject and grade
    - wrong: a random question whose latest attempt was wrong
    - review: the most overdue spaced-repetition review
    """
    catalog = CatalogService(db)
    grade = resolve_grade(request.grade, current_user)

    if request.mode == PracticeMode.REVIEW:
        due = await MemoryReviewService(db).get_due_review_questions(
            current_user.id, request.subject, grade,
            knowledge_point_id=request.knowledge_point_id, limit=1,
        )
        question = due[0] if due else None
    else:
        if request.mode == PracticeMode.WRONG:
            wrong_ids = await AttemptLedger(db).get_wrong_question_ids(current_user.id)
            # Wrong-book questions keep their own grade unless one is requested
            candidates = [
                q for q in await catalog.get_questions_by_ids(wrong_ids)
                if q.subject == request.subject
                and (request.grade is None or q.grade == grade)
                and (request.knowledge_point_id is None or q.knowledge_point_id == request.knowledge_point_id)
            ]
        else:
            candidates = await catalog.list_questions(
                subject=request.subject,
                grade=grade,
                knowledge_point_id=request.knowledge_point_id,
            )
        question = random.choice(candidates) if candidates else None

    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No questions available",
        )

    return PracticeNextResponse(
        mode=request.mode,
        question=QuestionPublic.model_validate(question),
    )


@router.post("/submit", response_model=PracticeSubmitResponse)
async def submit_answer(
    request: PracticeSubmitRequest,
    db: DbSession,
    current_user: CurrentStudent,
) -> PracticeSubmitResponse:
    """Grade an answer, append it to the ledger and reschedule its review."""
    question = await CatalogService(db).get_question(request.question_id)
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found",
        )

    attempt = await AttemptLedger(db).record_answer(
        current_user.id, question, request.answer, reason=request.reason
    )
    review = await MemoryReviewService(db).update_memory_schedule(
        current_user.id, question.id, attempt.correct, now=attempt.created_at
    )

    return PracticeSubmitResponse(
        correct=attempt.correct,
        answer=question.answer,
        explanation=question.explanation,
        review=ReviewState.model_validate(review),
    )


@router.post("/explanation", response_model=ExplanationResponse)
async def explain_question(
    request: ExplanationRequest,
    db: DbSession,
    current_user: CurrentStudent,
) -> ExplanationResponse:
    catalog = CatalogService(db)
    question = await catalog.get_question(request.question_id)
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found",
        )
    knowledge_point = await catalog.get_knowledge_point(question.knowledge_point_id)

    variants = await ExplanationAgent().explain(question, knowledge_point)
    return ExplanationResponse(**variants.to_dict())
