"""
K12 Tutor - Study Plan API
"""
from typing import Optional

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentStudent, DbSession
from app.models.catalog import Subject
from app.models.progress import StudyPlan
from app.schemas.plan import (
    PlanRefreshRequest,
    StudyPlanItemResponse,
    StudyPlanOverview,
    StudyPlanResponse,
)
from app.services.catalog import CatalogService
from app.services.study_plan import StudyPlanService

router = APIRouter(prefix="/plan", tags=["Study Plan"])


async def build_plan_response(db: AsyncSession, plan: StudyPlan) -> StudyPlanResponse:
    """Serialize a plan with knowledge point titles filled in."""
    titles = {
        kp_id: kp.title
        for kp_id, kp in (
            await CatalogService(db).get_knowledge_point_map(
                {item.knowledge_point_id for item in plan.items}
            )
        ).items()
    }
    return StudyPlanResponse(
        id=plan.id,
        subject=plan.subject,
        created_at=plan.created_at,
        items=[
            StudyPlanItemResponse(
                position=item.position,
                knowledge_point_id=item.knowledge_point_id,
                title=titles.get(item.knowledge_point_id, ""),
                target_count=item.target_count,
                due_date=item.due_date,
                subject=plan.subject,
            )
            for item in plan.items
        ],
    )


async def build_overview(db: AsyncSession, plans: list[StudyPlan]) -> StudyPlanOverview:
    responses = [await build_plan_response(db, plan) for plan in plans]
    return StudyPlanOverview(
        plans=responses,
        items=[item for plan in responses for item in plan.items],
    )


@router.get("", response_model=StudyPlanOverview)
async def get_plan(
    db: DbSession,
    current_user: CurrentStudent,
    subject: Optional[Subject] = None,
) -> StudyPlanOverview:
    """
    The student's current plans, generated on first access.

    Without a subject, covers every subject the student studies.
    """
    service = StudyPlanService(db)
    if subject is not None:
        return await build_overview(db, [await service.get_or_generate(current_user.id, subject.value)])

    subjects = current_user.study_subjects
    plans = await service.get_study_plans(current_user.id, subjects)
    if not plans:
        plans = await service.generate_study_plans(current_user.id, subjects)
    return await build_overview(db, plans)


@router.post("/refresh", response_model=StudyPlanOverview)
async def refresh_plan(
    db: DbSession,
    current_user: CurrentStudent,
    request: PlanRefreshRequest | None = None,
) -> StudyPlanOverview:
    """Rebuild plans from the current attempt history."""
    service = StudyPlanService(db)
    if request is not None and request.subject is not None:
        subjects = [request.subject.value]
    else:
        subjects = current_user.study_subjects
    plans = [await service.refresh_study_plan(current_user.id, s) for s in subjects]
    return await build_overview(db, plans)
