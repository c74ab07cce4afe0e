"""
K12 Tutor - Attempt Ledger Tests
"""
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_user
from app.models.user import UserRole
from app.services.attempts import AttemptLedger


@pytest.mark.asyncio
async def test_record_answer_grades_exact_match(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    question = questions[0]

    right = await ledger.record_answer(student.id, question, "A", now=FIXED_NOW)
    wrong = await ledger.record_answer(student.id, question, "a", reason="careless", now=FIXED_NOW)

    assert right.correct is True
    assert wrong.correct is False
    assert wrong.reason == "careless"
    assert right.subject == question.subject
    assert right.knowledge_point_id == question.knowledge_point_id


@pytest.mark.asyncio
async def test_attempts_come_back_in_insertion_order(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    for question in questions[:3]:
        await ledger.record_answer(student.id, question, "A", now=FIXED_NOW)

    attempts = await ledger.get_attempts_by_user(student.id)
    assert [a.question_id for a in attempts] == [q.id for q in questions[:3]]
    assert [a.id for a in attempts] == sorted(a.id for a in attempts)


@pytest.mark.asyncio
async def test_unknown_user_has_no_attempts(db_session, student, questions):
    other = await make_user(db_session, "other@example.com", UserRole.STUDENT, grade=4)
    await AttemptLedger(db_session).record_answer(student.id, questions[0], "A", now=FIXED_NOW)

    assert await AttemptLedger(db_session).get_attempts_by_user(other.id) == []


@pytest.mark.asyncio
async def test_attempts_by_users_merges(db_session, student, questions):
    other = await make_user(db_session, "other@example.com", UserRole.STUDENT, grade=4)
    ledger = AttemptLedger(db_session)
    await ledger.record_answer(student.id, questions[0], "A", now=FIXED_NOW)
    await ledger.record_answer(other.id, questions[1], "B", now=FIXED_NOW)

    attempts = await ledger.get_attempts_by_users([student.id, other.id])
    assert {a.user_id for a in attempts} == {student.id, other.id}
    assert await ledger.get_attempts_by_users([]) == []


@pytest.mark.asyncio
async def test_wrong_book_tracks_latest_attempt(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    fixed, still_wrong, untouched = questions[0], questions[1], questions[2]

    await ledger.record_answer(student.id, fixed, "B", now=FIXED_NOW)
    await ledger.record_answer(student.id, fixed, "A", now=FIXED_NOW + timedelta(minutes=1))
    await ledger.record_answer(student.id, still_wrong, "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, still_wrong, "C", now=FIXED_NOW + timedelta(minutes=1))
    await ledger.record_answer(student.id, untouched, "A", now=FIXED_NOW)

    assert await ledger.get_wrong_question_ids(student.id) == [still_wrong.id]


@pytest.mark.asyncio
async def test_later_entry_wins_timestamp_tie(db_session, student, questions):
    ledger = AttemptLedger(db_session)
    question = questions[0]
    await ledger.record_answer(student.id, question, "A", now=FIXED_NOW)
    await ledger.record_answer(student.id, question, "B", now=FIXED_NOW)

    latest = await ledger.get_last_attempt_by_question(student.id)
    assert latest[question.id].answer == "B"
