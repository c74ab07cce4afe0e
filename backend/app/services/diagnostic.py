"""
K12 Tutor - Diagnostic Service
Balanced placement quizzes that seed mastery before any practice history exists
"""
import logging
import random
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.telemetry import service_span
from app.models.catalog import Question
from app.models.progress import StudyPlan
from app.services.attempts import AttemptLedger
from app.services.catalog import CatalogService
from app.services.mastery import MasteryStat
from app.services.memory import MemoryReviewService
from app.services.study_plan import StudyPlanService

logger = logging.getLogger(__name__)


def sample_breadth_first(
    questions: list[Question],
    count: int,
    rng: Optional[random.Random] = None,
) -> list[Question]:
    """
    Pick up to ``count`` questions, one per knowledge point per pass.

    Groups are shuffled independently, then visited round-robin in the order
    their knowledge point first appears, so no knowledge point contributes a
    second question before every other one has contributed its first.
    """
    rng = rng or random.Random()
    groups: dict[uuid.UUID, list[Question]] = {}
    for question in questions:
        groups.setdefault(question.knowledge_point_id, []).append(question)
    for group in groups.values():
        rng.shuffle(group)

    selected: list[Question] = []
    while len(selected) < count:
        progressed = False
        for group in groups.values():
            if not group:
                continue
            selected.append(group.pop())
            progressed = True
            if len(selected) >= count:
                break
        if not progressed:
            break
    return selected


@dataclass
class DiagnosticAnswer:
    question_id: uuid.UUID
    answer: str
    reason: Optional[str] = None


@dataclass
class DiagnosticResult:
    total: int
    correct: int
    accuracy: int
    plan: StudyPlan
    breakdown: list[dict] = field(default_factory=list)
    wrong_reasons: list[dict] = field(default_factory=list)


class DiagnosticService:
    """Builds diagnostic sets and scores submitted diagnostics."""

    DEFAULT_COUNT = 10

    def __init__(self, db: AsyncSession, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng
        self.catalog = CatalogService(db)

    async def get_diagnostic_questions(
        self,
        subject: str,
        grade: int,
        count: int = DEFAULT_COUNT,
    ) -> list[Question]:
        with service_span("diagnostic.sample", {"subject": subject, "grade": grade}) as span:
            questions = await self.catalog.list_questions(subject=subject, grade=grade)
            selected = sample_breadth_first(questions, count, self.rng)
            span.set_attribute("diagnostic.selected", len(selected))
            return selected

    async def submit_diagnostic(
        self,
        user_id: uuid.UUID,
        subject: str,
        grade: int,
        answers: list[DiagnosticAnswer],
        now: Optional[datetime] = None,
    ) -> DiagnosticResult:
        """
        Grade a diagnostic, record every answer and rebuild the study plan.

        Answers to unknown questions are skipped but still count toward the
        submitted total.
        """
        now = now or utcnow()
        ledger = AttemptLedger(self.db)
        memory = MemoryReviewService(self.db)

        questions = {
            q.id: q for q in await self.catalog.get_questions_by_ids(a.question_id for a in answers)
        }
        knowledge_points = await self.catalog.get_knowledge_point_map(
            {q.knowledge_point_id for q in questions.values()}
        )

        correct_count = 0
        breakdown: dict[uuid.UUID, MasteryStat] = {}
        wrong_reasons: Counter[str] = Counter()

        for item in answers:
            question = questions.get(item.question_id)
            if question is None:
                continue
            attempt = await ledger.record_answer(user_id, question, item.answer, reason=item.reason, now=now)
            await memory.update_memory_schedule(user_id, question.id, attempt.correct, now=now)
            breakdown.setdefault(question.knowledge_point_id, MasteryStat()).add(attempt.correct)
            if attempt.correct:
                correct_count += 1
            elif item.reason:
                wrong_reasons[item.reason] += 1

        plan = await StudyPlanService(self.db).generate_study_plan(user_id, subject, now=now)

        total = len(answers)
        logger.info(
            "Diagnostic for user %s (%s grade %d): %d/%d correct",
            user_id, subject, grade, correct_count, total,
        )
        return DiagnosticResult(
            total=total,
            correct=correct_count,
            accuracy=round(correct_count / total * 100) if total else 0,
            plan=plan,
            breakdown=[
                {
                    "knowledge_point_id": kp_id,
                    "title": knowledge_points[kp_id].title if kp_id in knowledge_points else "",
                    "total": stat.total,
                    "correct": stat.correct,
                    "accuracy": stat.percent,
                }
                for kp_id, stat in breakdown.items()
            ],
            wrong_reasons=[
                {"reason": reason, "count": count} for reason, count in wrong_reasons.items()
            ],
        )
