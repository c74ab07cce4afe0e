"""
K12 Tutor - Attempt Ledger
Append-only log of answer submissions
"""
import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ensure_utc, utcnow
from app.models.catalog import Question
from app.models.progress import QuestionAttempt

logger = logging.getLogger(__name__)


class AttemptLedger:
    """
    Records every answer a student submits.

    Attempts are immutable once written. Callers resolve the question against
    the catalog before recording; the ledger only checks structural shape.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_attempt(self, attempt: QuestionAttempt) -> QuestionAttempt:
        """Append an attempt and return it with its ledger id assigned."""
        if attempt.created_at is None:
            attempt.created_at = utcnow()
        self.db.add(attempt)
        await self.db.flush()
        logger.debug(
            "Recorded attempt %s user=%s question=%s correct=%s",
            attempt.id, attempt.user_id, attempt.question_id, attempt.correct,
        )
        return attempt

    async def record_answer(
        self,
        user_id: uuid.UUID,
        question: Question,
        answer: str,
        reason: Optional[str] = None,
        now=None,
    ) -> QuestionAttempt:
        """Grade ``answer`` against ``question`` and append the attempt."""
        attempt = QuestionAttempt(
            user_id=user_id,
            question_id=question.id,
            subject=question.subject,
            knowledge_point_id=question.knowledge_point_id,
            correct=answer == question.answer,
            answer=answer,
            reason=reason,
            created_at=now or utcnow(),
        )
        return await self.add_attempt(attempt)

    async def get_attempts_by_user(self, user_id: uuid.UUID) -> list[QuestionAttempt]:
        """All attempts of a user in insertion order. Unknown users yield []."""
        result = await self.db.execute(
            select(QuestionAttempt)
            .where(QuestionAttempt.user_id == user_id)
            .order_by(QuestionAttempt.id)
        )
        return list(result.scalars().all())

    async def get_attempts_by_users(self, user_ids: Iterable[uuid.UUID]) -> list[QuestionAttempt]:
        ids = list(user_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(QuestionAttempt)
            .where(QuestionAttempt.user_id.in_(ids))
            .order_by(QuestionAttempt.id)
        )
        return list(result.scalars().all())

    async def get_last_attempt_by_question(
        self, user_id: uuid.UUID
    ) -> dict[uuid.UUID, QuestionAttempt]:
        """Latest attempt per question. Later ledger entries win ties on timestamp."""
        latest: dict[uuid.UUID, QuestionAttempt] = {}
        for attempt in await self.get_attempts_by_user(user_id):
            previous = latest.get(attempt.question_id)
            if previous is None or ensure_utc(attempt.created_at) >= ensure_utc(previous.created_at):
                latest[attempt.question_id] = attempt
        return latest

    async def get_wrong_question_ids(self, user_id: uuid.UUID) -> list[uuid.UUID]:
        """Questions whose most recent attempt was wrong (the wrong-book)."""
        latest = await self.get_last_attempt_by_question(user_id)
        return [question_id for question_id, attempt in latest.items() if not attempt.correct]
