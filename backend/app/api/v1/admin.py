"""
K12 Tutor - Admin Catalog API Routes
Create, update, delete and bulk-import catalog content
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import CurrentAdmin, DbSession
from app.models.catalog import Subject
from app.schemas.catalog import (
    KnowledgePointCreate,
    KnowledgePointResponse,
    KnowledgePointUpdate,
    QuestionCreate,
    QuestionImportRequest,
    QuestionImportResponse,
    QuestionResponse,
    QuestionUpdate,
)
from app.services.catalog import CatalogService, InvalidAnswerError, KnowledgePointNotFoundError

router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================================================
# Knowledge Points
# ============================================================================

@router.post(
    "/knowledge-points",
    response_model=KnowledgePointResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_knowledge_point(
    data: KnowledgePointCreate,
    db: DbSession,
    admin: CurrentAdmin,
):
    return await CatalogService(db).create_knowledge_point(data.model_dump())


@router.patch("/knowledge-points/{kp_id}", response_model=KnowledgePointResponse)
async def update_knowledge_point(
    kp_id: UUID,
    data: KnowledgePointUpdate,
    db: DbSession,
    admin: CurrentAdmin,
):
    kp = await CatalogService(db).update_knowledge_point(kp_id, data.model_dump(exclude_unset=True))
    if kp is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Knowledge point not found")
    return kp


@router.delete("/knowledge-points/{kp_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_knowledge_point(
    kp_id: UUID,
    db: DbSession,
    admin: CurrentAdmin,
) -> None:
    if not await CatalogService(db).delete_knowledge_point(kp_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Knowledge point not found")


# ============================================================================
# Questions
# ============================================================================

@router.get("/questions", response_model=list[QuestionResponse])
async def list_questions(
    db: DbSession,
    admin: CurrentAdmin,
    subject: Optional[Subject] = None,
    grade: Optional[int] = Query(None, ge=1, le=12),
    knowledge_point_id: Optional[UUID] = None,
):
    return await CatalogService(db).list_questions(
        subject=subject.value if subject else None,
        grade=grade,
        knowledge_point_id=knowledge_point_id,
    )


@router.post(
    "/questions",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    data: QuestionCreate,
    db: DbSession,
    admin: CurrentAdmin,
):
    try:
        return await CatalogService(db).create_question(data.to_model_data())
    except KnowledgePointNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: UUID,
    data: QuestionUpdate,
    db: DbSession,
    admin: CurrentAdmin,
):
    try:
        question = await CatalogService(db).update_question(
            question_id, data.model_dump(exclude_unset=True)
        )
    except KnowledgePointNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidAnswerError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    return question


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: UUID,
    db: DbSession,
    admin: CurrentAdmin,
) -> None:
    if not await CatalogService(db).delete_question(question_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")


@router.post(
    "/questions/import",
    response_model=QuestionImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_questions(
    payload: QuestionImportRequest,
    db: DbSession,
    admin: CurrentAdmin,
) -> QuestionImportResponse:
    """Bulk import. Entries pointing at unknown knowledge points are skipped."""
    created, skipped = await CatalogService(db).import_questions(
        [item.to_model_data() for item in payload.questions]
    )
    return QuestionImportResponse(
        created=len(created),
        skipped=skipped,
        questions=[QuestionResponse.model_validate(q) for q in created],
    )
