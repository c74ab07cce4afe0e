"""
K12 Tutor - Diagnostic Tests
"""
import random
import uuid
from collections import Counter

import pytest

from conftest import FIXED_NOW
from app.models.catalog import Question
from app.services.diagnostic import DiagnosticAnswer, DiagnosticService, sample_breadth_first
from app.services.mastery import MasteryService
from app.services.memory import MemoryReviewService


def make_questions(groups: dict[str, int]) -> list[Question]:
    kp_ids = {name: uuid.uuid4() for name in groups}
    return [
        Question(id=uuid.uuid4(), knowledge_point_id=kp_ids[name], stem=f"{name}-{n}", answer="A")
        for name, size in groups.items()
        for n in range(size)
    ]


def test_sampler_is_breadth_first():
    questions = make_questions({"a": 3, "b": 3, "c": 3, "d": 3})
    picked = sample_breadth_first(questions, 10, random.Random(7))

    assert len(picked) == 10
    assert len({q.id for q in picked}) == 10
    counts = Counter(q.knowledge_point_id for q in picked)
    assert sorted(counts.values()) == [2, 2, 3, 3]
    # The first pass covers every knowledge point once
    assert len({q.knowledge_point_id for q in picked[:4]}) == 4


def test_sampler_with_uneven_groups():
    questions = make_questions({"a": 5, "b": 1})
    picked = sample_breadth_first(questions, 4, random.Random(1))

    assert [q.stem[0] for q in picked][:2] in (["a", "b"], ["b", "a"])
    assert Counter(q.stem[0] for q in picked) == {"a": 3, "b": 1}


def test_sampler_returns_everything_when_short():
    questions = make_questions({"a": 2, "b": 1})
    assert len(sample_breadth_first(questions, 10, random.Random(0))) == 3
    assert sample_breadth_first([], 10) == []
    assert sample_breadth_first(questions, 0) == []


def test_sampler_is_reproducible_with_seed():
    questions = make_questions({"a": 3, "b": 3, "c": 3})
    first = sample_breadth_first(questions, 5, random.Random(42))
    second = sample_breadth_first(questions, 5, random.Random(42))
    assert [q.id for q in first] == [q.id for q in second]


@pytest.mark.asyncio
async def test_diagnostic_questions_cover_every_knowledge_point(db_session, catalog):
    service = DiagnosticService(db_session, rng=random.Random(3))
    picked = await service.get_diagnostic_questions("math", 4, count=4)

    assert {q.knowledge_point_id for q in picked} == {kp.id for kp in catalog}
    assert await service.get_diagnostic_questions("math", 6) == []


@pytest.mark.asyncio
async def test_submit_diagnostic(db_session, student, catalog, questions):
    answers = [
        DiagnosticAnswer(question_id=questions[0].id, answer="A"),
        DiagnosticAnswer(question_id=questions[1].id, answer="A"),
        DiagnosticAnswer(question_id=questions[3].id, answer="B", reason="careless"),
        DiagnosticAnswer(question_id=questions[4].id, answer="C", reason="careless"),
        DiagnosticAnswer(question_id=questions[6].id, answer="D", reason="concept"),
        DiagnosticAnswer(question_id=uuid.uuid4(), answer="A"),
    ]

    result = await DiagnosticService(db_session).submit_diagnostic(
        student.id, "math", 4, answers, now=FIXED_NOW
    )

    assert result.total == 6
    assert result.correct == 2
    assert result.accuracy == 33
    breakdown = {row["title"]: row for row in result.breakdown}
    assert breakdown["Topic 0"]["accuracy"] == 100
    assert breakdown["Topic 1"]["total"] == 2
    assert breakdown["Topic 2"]["correct"] == 0
    assert sorted((r["reason"], r["count"]) for r in result.wrong_reasons) == [
        ("careless", 2), ("concept", 1),
    ]

    titles = {kp.id: kp.title for kp in catalog}
    assert [titles[item.knowledge_point_id] for item in result.plan.items] == [
        "Topic 1", "Topic 2", "Topic 3", "Topic 0",
    ]

    mastery = await MasteryService(db_session).get_mastery_by_knowledge_point(student.id)
    assert mastery[catalog[0].id].total == 2
    review = await MemoryReviewService(db_session).get_review(student.id, questions[3].id)
    assert review.stage == 0
