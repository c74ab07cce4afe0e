"""
K12 Tutor - Diagnostic API
Placement quizzes that seed mastery and the first study plan
"""
from fastapi import APIRouter, HTTPException, status

from app.api.deps import CurrentStudent, DbSession
from app.api.v1.plan import build_plan_response
from app.api.v1.practice import resolve_grade
from app.schemas.catalog import QuestionPublic
from app.schemas.practice import (
    DiagnosticStartRequest,
    DiagnosticStartResponse,
    DiagnosticSubmitRequest,
    DiagnosticSubmitResponse,
)
from app.services.diagnostic import DiagnosticAnswer, DiagnosticService

router = APIRouter(prefix="/diagnostic", tags=["Diagnostic"])


@router.post("/start", response_model=DiagnosticStartResponse)
async def start_diagnostic(
    request: DiagnosticStartRequest,
    db: DbSession,
    current_user: CurrentStudent,
) -> DiagnosticStartResponse:
    """Sample a diagnostic set spread across the grade's knowledge points."""
    grade = resolve_grade(request.grade, current_user)
    questions = await DiagnosticService(db).get_diagnostic_questions(
        request.subject, grade, count=request.count
    )
    if not questions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No questions available",
        )
    return DiagnosticStartResponse(
        subject=request.subject,
        grade=grade,
        questions=[QuestionPublic.model_validate(q) for q in questions],
    )


@router.post("/submit", response_model=DiagnosticSubmitResponse)
async def submit_diagnostic(
    request: DiagnosticSubmitRequest,
    db: DbSession,
    current_user: CurrentStudent,
) -> DiagnosticSubmitResponse:
    result = await DiagnosticService(db).submit_diagnostic(
        current_user.id,
        request.subject,
        request.grade,
        [
            DiagnosticAnswer(question_id=a.question_id, answer=a.answer, reason=a.reason)
            for a in request.answers
        ],
    )
    return DiagnosticSubmitResponse(
        total=result.total,
        correct=result.correct,
        accuracy=result.accuracy,
        plan=await build_plan_response(db, result.plan),
        breakdown=result.breakdown,
        wrong_reasons=result.wrong_reasons,
    )
