"""
K12 Tutor - Mastery Aggregation Tests
"""
import uuid
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_user
from app.models.catalog import KnowledgePoint
from app.models.user import UserRole
from app.services.attempts import AttemptLedger
from app.services.mastery import (
    AccuracyStats,
    MasteryService,
    MasteryStat,
    earned_badges,
    rank_weakest_first,
)


def test_ratio_of_unattempted_point_is_zero():
    stat = MasteryStat()
    assert stat.ratio == 0.0
    assert stat.percent == 0

    stat.add(True)
    stat.add(False)
    stat.add(True)
    assert (stat.correct, stat.total) == (2, 3)
    assert stat.percent == 67


def test_rank_breaks_ties_by_display_order_then_id():
    low_id = uuid.UUID(int=1)
    high_id = uuid.UUID(int=2)
    kps = [
        KnowledgePoint(id=high_id, subject="math", grade=4, title="b", display_order=0),
        KnowledgePoint(id=uuid.UUID(int=3), subject="math", grade=4, title="c", display_order=1),
        KnowledgePoint(id=low_id, subject="math", grade=4, title="a", display_order=0),
    ]
    ranked = rank_weakest_first(kps, {})
    assert [r.knowledge_point.id for r in ranked] == [low_id, high_id, uuid.UUID(int=3)]


@pytest.mark.asyncio
async def test_mastery_by_knowledge_point(db_session, student, catalog, questions):
    ledger = AttemptLedger(db_session)
    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[1], "B", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[3], "A", now=FIXED_NOW)

    mastery = await MasteryService(db_session).get_mastery_by_knowledge_point(student.id, "math")

    assert mastery[catalog[0].id].correct == 1
    assert mastery[catalog[0].id].total == 2
    assert mastery[catalog[1].id].ratio == 1.0
    assert catalog[2].id not in mastery
    assert await MasteryService(db_session).get_mastery_by_knowledge_point(student.id, "english") == {}


@pytest.mark.asyncio
async def test_weak_points_rank_unattempted_first(db_session, student, catalog, questions):
    ledger = AttemptLedger(db_session)
    # Topic 0 mastered, Topic 1 half right, Topics 2 and 3 untouched
    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[3], "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[4], "B", now=FIXED_NOW)

    weak = await MasteryService(db_session).get_weak_knowledge_points(student.id, "math")

    assert [w.knowledge_point.title for w in weak] == ["Topic 2", "Topic 3", "Topic 1"]
    assert weak[2].ratio == 0.5


@pytest.mark.asyncio
async def test_stats_between_is_half_open(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    start = FIXED_NOW - timedelta(days=7)
    await ledger.record_answer(student.id, questions[0], "A", now=start)
    await ledger.record_answer(student.id, questions[1], "B", now=start + timedelta(days=1))
    await ledger.record_answer(student.id, questions[2], "A", now=FIXED_NOW)

    stats = await MasteryService(db_session).get_stats_between(student.id, start, FIXED_NOW)
    assert (stats.total, stats.correct, stats.accuracy) == (2, 1, 50)


@pytest.mark.asyncio
async def test_weekly_stats_and_daily_trend(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[1], "B", now=FIXED_NOW)
    await ledger.record_answer(student.id, questions[2], "A", now=FIXED_NOW - timedelta(days=1))
    await ledger.record_answer(student.id, questions[3], "A", now=FIXED_NOW - timedelta(days=10))

    service = MasteryService(db_session)
    weekly = await service.get_weekly_stats(student.id, now=FIXED_NOW)
    assert (weekly.total, weekly.correct) == (3, 2)

    trend = await service.get_daily_accuracy(student.id, 7, now=FIXED_NOW)
    assert len(trend) == 7
    assert trend[-1].date == FIXED_NOW.date()
    assert (trend[-1].total, trend[-1].accuracy) == (2, 50)
    assert (trend[-2].total, trend[-2].accuracy) == (1, 100)
    assert all(day.total == 0 for day in trend[:-2])


@pytest.mark.asyncio
async def test_streak_counts_back_from_today(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    service = MasteryService(db_session)
    assert await service.get_streak(student.id, now=FIXED_NOW) == 0

    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW - timedelta(days=1))
    await ledger.record_answer(student.id, questions[1], "A", now=FIXED_NOW - timedelta(days=2))
    assert await service.get_streak(student.id, now=FIXED_NOW) == 0

    await ledger.record_answer(student.id, questions[2], "A", now=FIXED_NOW)
    assert await service.get_streak(student.id, now=FIXED_NOW) == 3


def test_badge_thresholds():
    assert earned_badges(0, 0, AccuracyStats(total=0, correct=0, accuracy=0)) == []

    few = AccuracyStats(total=4, correct=4, accuracy=100)
    assert [b.id for b in earned_badges(4, 2, few)] == ["first"]

    steady = AccuracyStats(total=10, correct=8, accuracy=80)
    assert [b.id for b in earned_badges(50, 3, steady)] == [
        "first", "streak-3", "accuracy-80", "practice-50",
    ]


@pytest.mark.asyncio
async def test_badges_from_attempt_history(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    service = MasteryService(db_session)
    assert await service.get_badges(student.id, now=FIXED_NOW) == []

    for offset in range(3):
        for question in questions[:2]:
            await ledger.record_answer(student.id, question, "A", now=FIXED_NOW - timedelta(days=offset))

    badges = await service.get_badges(student.id, now=FIXED_NOW)
    assert [b.id for b in badges] == ["first", "streak-3", "accuracy-80"]

@pytest.mark.asyncio
async def test_heatmap_across_students(db_session, student, catalog, questions):
    other = await make_user(db_session, "other@example.com", UserRole.STUDENT, grade=4)
    ledger = AttemptLedger(db_session)
    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW)
    await ledger.record_answer(other.id, questions[1], "B", now=FIXED_NOW)
    await ledger.record_answer(other.id, questions[3], "A", now=FIXED_NOW)

    rows = await MasteryService(db_session).get_knowledge_point_heatmap([student.id, other.id])

    assert [(kp.title, stat.correct, stat.total) for kp, stat in rows] == [
        ("Topic 0", 1, 2),
        ("Topic 1", 1, 1),
    ]
