"""
K12 Tutor - Spaced Repetition Service
Per-question review scheduling over a fixed interval table.

Each (student, question) pair has a stage. A correct answer moves it one
stage up, capped at the last stage; a wrong answer resets it to stage 0. The
next review is due ``interval(stage)`` days after the answer. Nothing is
pushed to students: the practice feed polls for due questions.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.telemetry import service_span
from app.models.catalog import Question
from app.models.progress import MemoryReview
from app.services.catalog import CatalogService

logger = logging.getLogger(__name__)


class ReviewSchedule(Protocol):
    """Strategy that decides stage transitions and review intervals."""

    def next_stage(self, current: int, correct: bool) -> int:
        ...

    def interval(self, stage: int) -> timedelta:
        ...


@dataclass(frozen=True)
class FixedIntervalSchedule:
    """Stage ladder over a fixed table of day intervals."""

    stages: tuple[int, ...] = (1, 3, 7, 14, 30)

    @property
    def max_stage(self) -> int:
        return len(self.stages) - 1

    def next_stage(self, current: int, correct: bool) -> int:
        if not correct:
            return 0
        return min(current + 1, self.max_stage)

    def interval(self, stage: int) -> timedelta:
        clamped = max(0, min(stage, self.max_stage))
        return timedelta(days=self.stages[clamped])


DEFAULT_SCHEDULE = FixedIntervalSchedule()
STAGES = DEFAULT_SCHEDULE.stages


def _insert_for(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


class MemoryReviewService:
    """Maintains MemoryReview rows and answers "what is due?"."""

    DEFAULT_LIMIT = 10

    def __init__(self, db: AsyncSession, schedule: ReviewSchedule = DEFAULT_SCHEDULE):
        self.db = db
        self.schedule = schedule

    async def get_review(self, user_id: uuid.UUID, question_id: uuid.UUID) -> Optional[MemoryReview]:
        result = await self.db.execute(
            select(MemoryReview)
            .where(MemoryReview.user_id == user_id, MemoryReview.question_id == question_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update_memory_schedule(
        self,
        user_id: uuid.UUID,
        question_id: uuid.UUID,
        correct: bool,
        now: Optional[datetime] = None,
    ) -> MemoryReview:
        """
        Advance or reset the stage for one answer and reschedule the review.

        Writes with a single upsert keyed on (user_id, question_id). Two
        concurrent answers for the same pair may both read the same prior
        stage; the later write wins.
        """
        now = now or utcnow()

        with service_span("memory.update_schedule", {"correct": correct}) as span:
            existing = await self.get_review(user_id, question_id)
            current_stage = existing.stage if existing else 0
            stage = self.schedule.next_stage(current_stage, correct)
            next_review_at = now + self.schedule.interval(stage)

            values = {
                "id": existing.id if existing else uuid.uuid4(),
                "user_id": user_id,
                "question_id": question_id,
                "stage": stage,
                "next_review_at": next_review_at,
                "last_reviewed_at": now,
                "created_at": existing.created_at if existing else now,
                "updated_at": now,
            }

            insert = _insert_for(self.db.get_bind().dialect.name)
            if insert is not None:
                stmt = insert(MemoryReview).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id", "question_id"],
                    set_={
                        "stage": stmt.excluded.stage,
                        "next_review_at": stmt.excluded.next_review_at,
                        "last_reviewed_at": stmt.excluded.last_reviewed_at,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                await self.db.execute(stmt)
            elif existing is not None:
                existing.stage = stage
                existing.next_review_at = next_review_at
                existing.last_reviewed_at = now
                existing.updated_at = now
            else:
                self.db.add(MemoryReview(**values))
            await self.db.flush()

            span.set_attribute("memory.stage", stage)
            logger.info(
                "Review stage %d -> %d for user %s question %s, next review %s",
                current_stage, stage, user_id, question_id, next_review_at.isoformat(),
            )
            return await self.get_review(user_id, question_id)

    async def get_due_review_question_ids(
        self, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> list[uuid.UUID]:
        """Question ids whose review is due, most overdue first."""
        now = now or utcnow()
        result = await self.db.execute(
            select(MemoryReview.question_id)
            .where(MemoryReview.user_id == user_id, MemoryReview.next_review_at <= now)
            .order_by(MemoryReview.next_review_at.asc())
        )
        return list(result.scalars().all())

    async def get_due_reviews(
        self,
        user_id: uuid.UUID,
        subject: Optional[str] = None,
        grade: Optional[int] = None,
        knowledge_point_id: Optional[uuid.UUID] = None,
        limit: int = DEFAULT_LIMIT,
        now: Optional[datetime] = None,
    ) -> list[tuple[MemoryReview, Question]]:
        """Due reviews paired with their questions, most overdue first."""
        now = now or utcnow()
        result = await self.db.execute(
            select(MemoryReview)
            .where(MemoryReview.user_id == user_id, MemoryReview.next_review_at <= now)
            .order_by(MemoryReview.next_review_at.asc())
        )
        reviews = list(result.scalars().all())
        if not reviews:
            return []
        questions = {
            q.id: q
            for q in await CatalogService(self.db).get_questions_by_ids(r.question_id for r in reviews)
        }
        due = []
        for review in reviews:
            question = questions.get(review.question_id)
            if question is None:
                continue
            if subject and question.subject != subject:
                continue
            if grade is not None and question.grade != grade:
                continue
            if knowledge_point_id is not None and question.knowledge_point_id != knowledge_point_id:
                continue
            due.append((review, question))
        return due[:limit]

    async def get_due_review_questions(
        self,
        user_id: uuid.UUID,
        subject: str,
        grade: int,
        knowledge_point_id: Optional[uuid.UUID] = None,
        limit: int = DEFAULT_LIMIT,
        now: Optional[datetime] = None,
    ) -> list[Question]:
        """Due questions within a subject and grade, keeping the due order."""
        due = await self.get_due_reviews(
            user_id, subject, grade, knowledge_point_id=knowledge_point_id, limit=limit, now=now
        )
        return [question for _, question in due]
