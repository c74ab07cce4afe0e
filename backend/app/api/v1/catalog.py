"""
K12 Tutor - Catalog API Routes
Read access to knowledge points and questions for any signed-in user
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from app.api.deps import CurrentUser, DbSession
from app.models.catalog import Subject
from app.schemas.catalog import KnowledgePointResponse, QuestionPublic
from app.services.catalog import CatalogService

router = APIRouter(tags=["Catalog"])


@router.get("/knowledge-points", response_model=list[KnowledgePointResponse])
async def list_knowledge_points(
    db: DbSession,
    current_user: CurrentUser,
    subject: Optional[Subject] = None,
    grade: Optional[int] = Query(None, ge=1, le=12),
):
    return await CatalogService(db).list_knowledge_points(
        subject=subject.value if subject else None,
        grade=grade,
    )


@router.get("/questions", response_model=list[QuestionPublic])
async def list_questions(
    db: DbSession,
    current_user: CurrentUser,
    subject: Optional[Subject] = None,
    grade: Optional[int] = Query(None, ge=1, le=12),
    knowledge_point_id: Optional[UUID] = None,
):
    """Questions without answers. Admins read full records under /admin/questions."""
    return await CatalogService(db).list_questions(
        subject=subject.value if subject else None,
        grade=grade,
        knowledge_point_id=knowledge_point_id,
    )
