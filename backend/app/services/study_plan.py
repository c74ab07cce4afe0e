"""
K12 Tutor - Study Plan Service
Weakest-first study plans, one active plan per (student, subject)
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.telemetry import service_span
from app.models.progress import StudyPlan, StudyPlanItem
from app.services.mastery import MasteryService

logger = logging.getLogger(__name__)


class StudyPlanService:
    """
    Builds and stores study plans.

    A plan lists the student's weakest knowledge points in a subject, one per
    day starting today, each with a fixed practice target. Regenerating a plan
    replaces the previous one for that subject.
    """

    PLAN_SIZE = 5
    TARGET_COUNT = 5

    def __init__(self, db: AsyncSession):
        self.db = db
        self.mastery = MasteryService(db)

    async def generate_study_plan(
        self,
        user_id: uuid.UUID,
        subject: str,
        now: Optional[datetime] = None,
    ) -> StudyPlan:
        created_at = now or utcnow()

        with service_span("study_plan.generate", {"subject": subject}) as span:
            ranked = (await self.mastery.rank_knowledge_points(user_id, subject))[: self.PLAN_SIZE]

            # Delete-then-insert inside the request transaction
            await self._delete_plan(user_id, subject)

            plan = StudyPlan(
                user_id=user_id,
                subject=subject,
                created_at=created_at,
                items=[
                    StudyPlanItem(
                        position=index,
                        knowledge_point_id=entry.knowledge_point.id,
                        target_count=self.TARGET_COUNT,
                        due_date=created_at + timedelta(days=index),
                    )
                    for index, entry in enumerate(ranked)
                ],
            )
            self.db.add(plan)
            await self.db.flush()

            span.set_attribute("study_plan.items", len(plan.items))
            logger.info(
                "Generated %s study plan for user %s with %d items",
                subject, user_id, len(plan.items),
            )
            return plan

    async def refresh_study_plan(
        self,
        user_id: uuid.UUID,
        subject: str,
        now: Optional[datetime] = None,
    ) -> StudyPlan:
        """Always rebuild the plan from the current attempt history."""
        return await self.generate_study_plan(user_id, subject, now=now)

    async def generate_study_plans(
        self,
        user_id: uuid.UUID,
        subjects: list[str],
        now: Optional[datetime] = None,
    ) -> list[StudyPlan]:
        return [await self.generate_study_plan(user_id, subject, now=now) for subject in subjects]

    async def get_study_plan(self, user_id: uuid.UUID, subject: str) -> Optional[StudyPlan]:
        result = await self.db.execute(
            select(StudyPlan).where(
                StudyPlan.user_id == user_id,
                StudyPlan.subject == subject,
            )
        )
        return result.scalar_one_or_none()

    async def get_study_plans(self, user_id: uuid.UUID, subjects: list[str]) -> list[StudyPlan]:
        if not subjects:
            return []
        result = await self.db.execute(
            select(StudyPlan)
            .where(StudyPlan.user_id == user_id, StudyPlan.subject.in_(subjects))
            .order_by(StudyPlan.subject)
        )
        return list(result.scalars().all())

    async def get_or_generate(self, user_id: uuid.UUID, subject: str) -> StudyPlan:
        plan = await self.get_study_plan(user_id, subject)
        if plan is None:
            plan = await self.generate_study_plan(user_id, subject)
        return plan

    async def _delete_plan(self, user_id: uuid.UUID, subject: str) -> None:
        existing = await self.get_study_plan(user_id, subject)
        if existing is None:
            return
        # Items go with the plan (delete-orphan cascade). Flush now so the new
        # plan does not collide with the (user_id, subject) unique constraint.
        await self.db.delete(existing)
        await self.db.flush()
