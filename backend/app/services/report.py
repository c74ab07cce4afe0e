"""
K12 Tutor - Report Service
Weekly progress reports for students and their parents
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ensure_utc, utcnow
from app.core.telemetry import service_span
from app.models.user import User
from app.services.mastery import AccuracyStats, Badge, DailyAccuracy, MasteryService

logger = logging.getLogger(__name__)


@dataclass
class WeakPoint:
    id: uuid.UUID
    title: str
    subject: str
    ratio: int  # percent
    total: int


@dataclass
class WeeklyReport:
    student: User
    stats: AccuracyStats
    previous_stats: AccuracyStats
    trend: list[DailyAccuracy]
    weak_points: list[WeakPoint] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    streak: int = 0
    badges: list[Badge] = field(default_factory=list)


def build_suggestions(
    stats: AccuracyStats,
    previous: AccuracyStats,
    weak_points: list[WeakPoint],
) -> list[str]:
    """Rule-based study advice from this week's numbers."""
    suggestions = []
    if stats.total < ReportService.MIN_WEEKLY_PRACTICE:
        suggestions.append("Practice volume was low this week; aim for 5-8 questions a day.")
    if stats.accuracy < ReportService.LOW_ACCURACY:
        suggestions.append(
            "Accuracy is below 60%; consolidate the basics before moving to harder questions."
        )
    if stats.accuracy >= previous.accuracy + ReportService.TREND_MARGIN:
        suggestions.append("Accuracy improved noticeably; keep up the current pace.")
    elif stats.accuracy + ReportService.TREND_MARGIN < previous.accuracy:
        suggestions.append(
            "Accuracy dropped compared with last week; review your mistakes in the wrong-book."
        )
    if weak_points:
        suggestions.append(f"Focus first on: {weak_points[0].title}.")
    return suggestions


class ReportService:
    """Builds weekly reports from mastery analytics."""

    TREND_DAYS = 7
    WEAK_POINT_LIMIT = 5
    MIN_WEEKLY_PRACTICE = 5
    LOW_ACCURACY = 60
    TREND_MARGIN = 5

    def __init__(self, db: AsyncSession):
        self.db = db
        self.mastery = MasteryService(db)

    async def get_weekly_report(self, student: User, now: Optional[datetime] = None) -> WeeklyReport:
        now = ensure_utc(now or utcnow())
        week_start = now - timedelta(days=7)
        previous_start = now - timedelta(days=14)

        with service_span("report.weekly", {"student_id": student.id}):
            stats = await self.mastery.get_weekly_stats(student.id, now=now)
            previous_stats = await self.mastery.get_stats_between(student.id, previous_start, week_start)
            trend = await self.mastery.get_daily_accuracy(student.id, self.TREND_DAYS, now=now)
            streak = await self.mastery.get_streak(student.id, now=now)
            badges = await self.mastery.get_badges(student.id, now=now)

            weak_points: list[WeakPoint] = []
            for subject in student.study_subjects:
                for entry in await self.mastery.get_weak_knowledge_points(student.id, subject):
                    weak_points.append(WeakPoint(
                        id=entry.knowledge_point.id,
                        title=entry.knowledge_point.title,
                        subject=subject,
                        ratio=round(entry.ratio * 100),
                        total=entry.total,
                    ))
            weak_points.sort(key=lambda w: w.ratio)
            weak_points = weak_points[: self.WEAK_POINT_LIMIT]

            logger.info(
                "Weekly report for %s: %d attempts, %d%% accuracy",
                student.id, stats.total, stats.accuracy,
            )
            return WeeklyReport(
                student=student,
                stats=stats,
                previous_stats=previous_stats,
                trend=trend,
                weak_points=weak_points,
                suggestions=build_suggestions(stats, previous_stats, weak_points),
                streak=streak,
                badges=badges,
            )
