"""
K12 Tutor - Catalog Service
Knowledge point and question bank repository
"""
import logging
import uuid
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import KnowledgePoint, Question

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Base catalog authoring error."""
    pass


class KnowledgePointNotFoundError(CatalogError):
    """A question refers to a knowledge point that does not exist."""
    pass


class InvalidAnswerError(CatalogError):
    """The answer is not one of the question's options."""
    pass


class CatalogService:
    """
    Read and author the reference catalog.

    Lookups by id return None and deletes return False for unknown ids, the
    routers turn that into a 404.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Knowledge points
    # =========================================================================

    async def list_knowledge_points(
        self,
        subject: Optional[str] = None,
        grade: Optional[int] = None,
    ) -> list[KnowledgePoint]:
        """Knowledge points in catalog order (display_order, then id)."""
        query = select(KnowledgePoint)
        if subject:
            query = query.where(KnowledgePoint.subject == subject)
        if grade is not None:
            query = query.where(KnowledgePoint.grade == grade)
        query = query.order_by(KnowledgePoint.display_order, KnowledgePoint.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_knowledge_point(self, kp_id: uuid.UUID) -> Optional[KnowledgePoint]:
        return await self.db.get(KnowledgePoint, kp_id)

    async def get_knowledge_point_map(
        self, kp_ids: Optional[Iterable[uuid.UUID]] = None
    ) -> dict[uuid.UUID, KnowledgePoint]:
        query = select(KnowledgePoint)
        if kp_ids is not None:
            ids = list(kp_ids)
            if not ids:
                return {}
            query = query.where(KnowledgePoint.id.in_(ids))
        result = await self.db.execute(query)
        return {kp.id: kp for kp in result.scalars().all()}

    async def create_knowledge_point(self, data: dict[str, Any]) -> KnowledgePoint:
        kp = KnowledgePoint(**data)
        self.db.add(kp)
        await self.db.flush()
        await self.db.refresh(kp)
        logger.info("Created knowledge point %s (%s)", kp.id, kp.title)
        return kp

    async def update_knowledge_point(
        self, kp_id: uuid.UUID, data: dict[str, Any]
    ) -> Optional[KnowledgePoint]:
        kp = await self.get_knowledge_point(kp_id)
        if kp is None:
            return None
        for field, value in data.items():
            setattr(kp, field, value)
        await self.db.flush()
        return kp

    async def delete_knowledge_point(self, kp_id: uuid.UUID) -> bool:
        kp = await self.get_knowledge_point(kp_id)
        if kp is None:
            return False
        await self.db.delete(kp)
        await self.db.flush()
        logger.info("Deleted knowledge point %s", kp_id)
        return True

    # =========================================================================
    # Questions
    # =========================================================================

    async def list_questions(
        self,
        subject: Optional[str] = None,
        grade: Optional[int] = None,
        knowledge_point_id: Optional[uuid.UUID] = None,
    ) -> list[Question]:
        """Questions in a scope, in creation order."""
        query = select(Question)
        if subject:
            query = query.where(Question.subject == subject)
        if grade is not None:
            query = query.where(Question.grade == grade)
        if knowledge_point_id is not None:
            query = query.where(Question.knowledge_point_id == knowledge_point_id)
        query = query.order_by(Question.created_at, Question.id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_questions_by_ids(self, question_ids: Iterable[uuid.UUID]) -> list[Question]:
        ids = list(question_ids)
        if not ids:
            return []
        result = await self.db.execute(select(Question).where(Question.id.in_(ids)))
        return list(result.scalars().all())

    async def get_question(self, question_id: uuid.UUID) -> Optional[Question]:
        return await self.db.get(Question, question_id)

    async def create_question(self, data: dict[str, Any]) -> Question:
        """
        Create a question. Subject and grade default to the knowledge point's.

        Raises:
            KnowledgePointNotFoundError: If the knowledge point does not exist
        """
        kp = await self.get_knowledge_point(data["knowledge_point_id"])
        if kp is None:
            raise KnowledgePointNotFoundError(f"Knowledge point {data['knowledge_point_id']} not found")
        payload = {"subject": kp.subject, "grade": kp.grade, **data}
        question = Question(**payload)
        self.db.add(question)
        await self.db.flush()
        await self.db.refresh(question)
        return question

    async def update_question(
        self, question_id: uuid.UUID, data: dict[str, Any]
    ) -> Optional[Question]:
        """
        Apply a partial update.

        The answer is checked against the options after merging the update
        with the stored question.

        Raises:
            KnowledgePointNotFoundError: If the new knowledge point does not exist
            InvalidAnswerError: If the resulting answer is not among the options
        """
        question = await self.get_question(question_id)
        if question is None:
            return None
        if "knowledge_point_id" in data and await self.get_knowledge_point(data["knowledge_point_id"]) is None:
            raise KnowledgePointNotFoundError(f"Knowledge point {data['knowledge_point_id']} not found")
        options = data.get("options", question.options)
        answer = data.get("answer", question.answer)
        if options and answer not in options:
            raise InvalidAnswerError("Answer must be one of the options")
        for field, value in data.items():
            setattr(question, field, value)
        await self.db.flush()
        return question

    async def delete_question(self, question_id: uuid.UUID) -> bool:
        question = await self.get_question(question_id)
        if question is None:
            return False
        await self.db.delete(question)
        await self.db.flush()
        return True

    async def import_questions(self, items: list[dict[str, Any]]) -> tuple[list[Question], list[dict]]:
        """
        Bulk-create questions.

        Returns:
            (created questions, skipped entries with the reason they were skipped)
        """
        known = await self.get_knowledge_point_map(
            {item["knowledge_point_id"] for item in items}
        )
        created: list[Question] = []
        skipped: list[dict] = []
        for index, item in enumerate(items):
            kp = known.get(item["knowledge_point_id"])
            if kp is None:
                skipped.append({"index": index, "reason": "unknown knowledge point"})
                continue
            question = Question(**{"subject": kp.subject, "grade": kp.grade, **item})
            self.db.add(question)
            created.append(question)
        await self.db.flush()
        logger.info("Imported %d questions, skipped %d", len(created), len(skipped))
        return created, skipped
