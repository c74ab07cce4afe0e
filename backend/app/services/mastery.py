"""
K12 Tutor - Mastery Service
Folds the attempt ledger into per-knowledge-point accuracy and activity stats
"""
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ensure_utc, utcnow
from app.core.telemetry import service_span
from app.models.catalog import KnowledgePoint
from app.models.progress import QuestionAttempt
from app.services.attempts import AttemptLedger
from app.services.catalog import CatalogService


@dataclass
class MasteryStat:
    """Correct and total attempt counts for one knowledge point."""
    correct: int = 0
    total: int = 0

    @property
    def ratio(self) -> float:
        # Unattempted points count as fully unmastered so they rank first
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)

    def add(self, correct: bool) -> None:
        self.total += 1
        if correct:
            self.correct += 1


@dataclass
class RankedKnowledgePoint:
    knowledge_point: KnowledgePoint
    ratio: float
    total: int


@dataclass
class AccuracyStats:
    total: int
    correct: int
    accuracy: int  # percent, 0 when there are no attempts

    @classmethod
    def from_attempts(cls, attempts: Iterable[QuestionAttempt]) -> "AccuracyStats":
        stat = MasteryStat()
        for attempt in attempts:
            stat.add(attempt.correct)
        return cls(total=stat.total, correct=stat.correct, accuracy=stat.percent)


@dataclass
class DailyAccuracy:
    date: date
    total: int
    correct: int
    accuracy: int


@dataclass
class Badge:
    id: str
    title: str
    description: str


BADGE_STREAK_DAYS = 3
BADGE_ACCURACY = 80
BADGE_ACCURACY_MIN_ATTEMPTS = 5
BADGE_PRACTICE_COUNT = 50


def earned_badges(total_attempts: int, streak: int, weekly: AccuracyStats) -> list[Badge]:
    """Achievement badges, in a fixed display order."""
    badges = []
    if total_attempts >= 1:
        badges.append(Badge("first", "First steps", "Completed a first practice question"))
    if streak >= BADGE_STREAK_DAYS:
        badges.append(Badge("streak-3", "3-day streak", "Studied 3 days in a row"))
    if weekly.total >= BADGE_ACCURACY_MIN_ATTEMPTS and weekly.accuracy >= BADGE_ACCURACY:
        badges.append(Badge("accuracy-80", "Sharp shooter", "At least 80% accuracy over the last 7 days"))
    if total_attempts >= BADGE_PRACTICE_COUNT:
        badges.append(Badge("practice-50", "Hard worker", "Answered 50 questions"))
    return badges


def fold_mastery(attempts: Iterable[QuestionAttempt]) -> dict[uuid.UUID, MasteryStat]:
    """Fold attempts into {knowledge_point_id: MasteryStat}."""
    totals: dict[uuid.UUID, MasteryStat] = {}
    for attempt in attempts:
        totals.setdefault(attempt.knowledge_point_id, MasteryStat()).add(attempt.correct)
    return totals


def rank_weakest_first(
    knowledge_points: Iterable[KnowledgePoint],
    mastery: dict[uuid.UUID, MasteryStat],
) -> list[RankedKnowledgePoint]:
    """
    Sort knowledge points ascending by mastery ratio.

    Ties fall back to catalog display_order, then the knowledge point id, so
    the ranking never depends on query order.
    """
    ranked = []
    for kp in knowledge_points:
        stat = mastery.get(kp.id, MasteryStat())
        ranked.append(RankedKnowledgePoint(knowledge_point=kp, ratio=stat.ratio, total=stat.total))
    ranked.sort(key=lambda r: (r.ratio, r.knowledge_point.display_order, str(r.knowledge_point.id)))
    return ranked


class MasteryService:
    """Read-side analytics over the attempt ledger."""

    WEAK_POINT_LIMIT = 3

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = AttemptLedger(db)
        self.catalog = CatalogService(db)

    async def get_mastery_by_knowledge_point(
        self,
        user_id: uuid.UUID,
        subject: Optional[str] = None,
    ) -> dict[uuid.UUID, MasteryStat]:
        """Per-knowledge-point {correct, total} for a user, optionally within one subject."""
        with service_span("mastery.by_knowledge_point", {"subject": subject}) as span:
            attempts = await self.ledger.get_attempts_by_user(user_id)
            if subject:
                attempts = [a for a in attempts if a.subject == subject]
            totals = fold_mastery(attempts)
            span.set_attribute("mastery.knowledge_points", len(totals))
            return totals

    async def rank_knowledge_points(
        self, user_id: uuid.UUID, subject: str
    ) -> list[RankedKnowledgePoint]:
        """The subject's whole catalog ranked weakest first."""
        knowledge_points = await self.catalog.list_knowledge_points(subject=subject)
        mastery = await self.get_mastery_by_knowledge_point(user_id, subject)
        return rank_weakest_first(knowledge_points, mastery)

    async def get_weak_knowledge_points(
        self,
        user_id: uuid.UUID,
        subject: str,
        limit: int = WEAK_POINT_LIMIT,
    ) -> list[RankedKnowledgePoint]:
        return (await self.rank_knowledge_points(user_id, subject))[:limit]

    # =========================================================================
    # Activity windows
    # =========================================================================

    async def get_stats_between(
        self, user_id: uuid.UUID, start: datetime, end: datetime
    ) -> AccuracyStats:
        """Accuracy over attempts with start <= created_at < end."""
        start, end = ensure_utc(start), ensure_utc(end)
        attempts = await self.ledger.get_attempts_by_user(user_id)
        return AccuracyStats.from_attempts(
            a for a in attempts if start <= ensure_utc(a.created_at) < end
        )

    async def get_weekly_stats(
        self, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> AccuracyStats:
        """Accuracy over the last 7 days."""
        since = ensure_utc(now or utcnow()) - timedelta(days=7)
        attempts = await self.ledger.get_attempts_by_user(user_id)
        return AccuracyStats.from_attempts(a for a in attempts if ensure_utc(a.created_at) >= since)

    async def get_daily_accuracy(
        self, user_id: uuid.UUID, days: int, now: Optional[datetime] = None
    ) -> list[DailyAccuracy]:
        """One bucket per UTC day for the last ``days`` days, oldest first."""
        today = ensure_utc(now or utcnow()).date()
        buckets: dict[date, MasteryStat] = {}
        for attempt in await self.ledger.get_attempts_by_user(user_id):
            day = ensure_utc(attempt.created_at).date()
            buckets.setdefault(day, MasteryStat()).add(attempt.correct)

        trend = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            stat = buckets.get(day, MasteryStat())
            trend.append(DailyAccuracy(date=day, total=stat.total, correct=stat.correct, accuracy=stat.percent))
        return trend

    async def get_streak(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> int:
        """Consecutive days with at least one attempt, counting back from today."""
        active_days = {
            ensure_utc(a.created_at).date()
            for a in await self.ledger.get_attempts_by_user(user_id)
        }
        cursor = ensure_utc(now or utcnow()).date()
        streak = 0
        while cursor in active_days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    async def get_badges(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> list[Badge]:
        total_attempts = len(await self.ledger.get_attempts_by_user(user_id))
        streak = await self.get_streak(user_id, now=now)
        weekly = await self.get_weekly_stats(user_id, now=now)
        return earned_badges(total_attempts, streak, weekly)

    # =========================================================================
    # Teacher insights
    # =========================================================================

    async def get_knowledge_point_heatmap(
        self,
        user_ids: Iterable[uuid.UUID],
        subject: Optional[str] = None,
        grade: Optional[int] = None,
    ) -> list[tuple[KnowledgePoint, MasteryStat]]:
        """Class-wide mastery per attempted knowledge point, weakest first."""
        attempts = await self.ledger.get_attempts_by_users(user_ids)
        totals = fold_mastery(attempts)
        knowledge_points = await self.catalog.get_knowledge_point_map(totals.keys())

        rows = []
        for kp_id, stat in totals.items():
            kp = knowledge_points.get(kp_id)
            if kp is None:
                continue
            if subject and kp.subject != subject:
                continue
            if grade is not None and kp.grade != grade:
                continue
            rows.append((kp, stat))
        rows.sort(key=lambda row: (row[1].ratio, row[0].display_order, str(row[0].id)))
        return rows
