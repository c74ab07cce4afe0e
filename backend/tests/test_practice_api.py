"""
K12 Tutor - Practice, Review and Wrong-Book API Tests
"""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from conftest import auth_headers
from app.core.clock import utcnow
from app.models.catalog import KnowledgePoint, Question
from app.services.memory import MemoryReviewService


@pytest.mark.asyncio
async def test_next_question_hides_answer(client: AsyncClient, student_headers, questions):
    response = await client.post("/api/v1/practice/next", json={"subject": "math"}, headers=student_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "normal"
    assert data["question"]["id"] in {str(q.id) for q in questions}
    assert "answer" not in data["question"]
    assert "explanation" not in data["question"]


@pytest.mark.asyncio
async def test_next_question_filters_by_knowledge_point(client: AsyncClient, student_headers, catalog):
    response = await client.post(
        "/api/v1/practice/next",
        json={"subject": "math", "knowledge_point_id": str(catalog[2].id)},
        headers=student_headers,
    )
    assert response.status_code == 200
    assert response.json()["question"]["knowledge_point_id"] == str(catalog[2].id)


@pytest.mark.asyncio
async def test_next_question_empty_scope(client: AsyncClient, student_headers, catalog):
    response = await client.post(
        "/api/v1/practice/next", json={"subject": "english"}, headers=student_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_practice_requires_student_role(client: AsyncClient, admin_headers, catalog):
    response = await client.post("/api/v1/practice/next", json={}, headers=admin_headers)
    assert response.status_code == 403

    response = await client.post("/api/v1/practice/next", json={})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_submit_records_attempt_and_schedules_review(client: AsyncClient, student_headers, questions):
    question = questions[0]
    before = utcnow()

    response = await client.post(
        "/api/v1/practice/submit",
        json={"question_id": str(question.id), "answer": "B", "reason": "careless"},
        headers=student_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["correct"] is False
    assert data["answer"] == "A"
    assert data["explanation"] == question.explanation
    assert data["review"]["stage"] == 0
    next_review = datetime.fromisoformat(data["review"]["next_review_at"])
    assert before + timedelta(days=1) <= next_review <= utcnow() + timedelta(days=1)

    response = await client.post(
        "/api/v1/practice/submit",
        json={"question_id": str(question.id), "answer": "A"},
        headers=student_headers,
    )
    assert response.json()["correct"] is True
    assert response.json()["review"]["stage"] == 1


@pytest.mark.asyncio
async def test_submit_unknown_question(client: AsyncClient, student_headers, catalog):
    response = await client.post(
        "/api/v1/practice/submit",
        json={"question_id": "00000000-0000-0000-0000-000000000000", "answer": "A"},
        headers=student_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_wrong_mode_serves_wrong_book(client: AsyncClient, student_headers, questions):
    response = await client.post(
        "/api/v1/practice/next", json={"subject": "math", "mode": "wrong"}, headers=student_headers
    )
    assert response.status_code == 404

    await client.post(
        "/api/v1/practice/submit",
        json={"question_id": str(questions[5].id), "answer": "C"},
        headers=student_headers,
    )
    response = await client.post(
        "/api/v1/practice/next", json={"subject": "math", "mode": "wrong"}, headers=student_headers
    )
    assert response.status_code == 200
    assert response.json()["question"]["id"] == str(questions[5].id)

    response = await client.get("/api/v1/wrong-book", headers=student_headers)
    data = response.json()
    assert data["total"] == 1
    item = data["items"][0]
    assert item["question"]["answer"] == "A"
    assert item["last_answer"] == "C"
    assert item["review_stage"] == 0


@pytest.mark.asyncio
async def test_wrong_mode_spans_grades_unless_requested(client: AsyncClient, db_session, student_headers, catalog):
    kp = KnowledgePoint(subject="math", grade=5, title="Decimals", display_order=0)
    db_session.add(kp)
    await db_session.flush()
    question = Question(
        subject="math", grade=5, knowledge_point_id=kp.id,
        stem="0.5 + 0.25?", options=["0.75", "0.7"], answer="0.75",
    )
    db_session.add(question)
    await db_session.flush()

    await client.post(
        "/api/v1/practice/submit",
        json={"question_id": str(question.id), "answer": "0.7"},
        headers=student_headers,
    )

    response = await client.post(
        "/api/v1/practice/next", json={"subject": "math", "mode": "wrong"}, headers=student_headers
    )
    assert response.status_code == 200
    assert response.json()["question"]["id"] == str(question.id)

    response = await client.post(
        "/api/v1/practice/next",
        json={"subject": "math", "mode": "wrong", "grade": 4},
        headers=student_headers,
    )
    assert response.status_code == 404

@pytest.mark.asyncio
async def test_review_mode_serves_most_overdue(client: AsyncClient, db_session, student, student_headers, questions):
    memory = MemoryReviewService(db_session)
    now = utcnow()
    await memory.update_memory_schedule(student.id, questions[1].id, False, now=now - timedelta(days=2))
    await memory.update_memory_schedule(student.id, questions[2].id, False, now=now - timedelta(days=5))
    await memory.update_memory_schedule(student.id, questions[3].id, False, now=now)

    response = await client.post(
        "/api/v1/practice/next", json={"subject": "math", "mode": "review"}, headers=student_headers
    )
    assert response.status_code == 200
    assert response.json()["question"]["id"] == str(questions[2].id)

    response = await client.get("/api/v1/review/due", headers=student_headers)
    data = response.json()
    assert data["total"] == 2
    assert [item["question"]["id"] for item in data["items"]] == [str(questions[2].id), str(questions[1].id)]
    assert data["items"][0]["stage"] == 0


@pytest.mark.asyncio
async def test_review_mode_finds_knowledge_point_beyond_most_overdue(
    client: AsyncClient, db_session, student, student_headers, catalog, questions
):
    memory = MemoryReviewService(db_session)
    now = utcnow()
    extra = [
        Question(
            subject="math",
            grade=4,
            knowledge_point_id=catalog[0].id,
            stem=f"Topic 0 extra {n}",
            options=["A", "B"],
            answer="A",
        )
        for n in range(8)
    ]
    db_session.add_all(extra)
    await db_session.flush()

    long_overdue = [q for q in questions if q.knowledge_point_id != catalog[3].id] + extra
    assert len(long_overdue) > MemoryReviewService.DEFAULT_LIMIT
    for question in long_overdue:
        await memory.update_memory_schedule(student.id, question.id, False, now=now - timedelta(days=11))
    target = questions[9]
    assert target.knowledge_point_id == catalog[3].id
    await memory.update_memory_schedule(student.id, target.id, False, now=now - timedelta(days=3))

    response = await client.post(
        "/api/v1/practice/next",
        json={"subject": "math", "mode": "review", "knowledge_point_id": str(catalog[3].id)},
        headers=student_headers,
    )
    assert response.status_code == 200
    assert response.json()["question"]["id"] == str(target.id)

@pytest.mark.asyncio
async def test_explanation_falls_back_without_llm(client: AsyncClient, student_headers, questions):
    response = await client.post(
        "/api/v1/practice/explanation",
        json={"question_id": str(questions[0].id)},
        headers=student_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "rule"
    assert data["text"] == questions[0].explanation
    assert data["visual"]
    assert "Topic 0" in data["analogy"]


@pytest.mark.asyncio
async def test_students_see_questions_without_answers(client: AsyncClient, student, questions):
    response = await client.get(
        "/api/v1/questions", params={"subject": "math", "grade": 4}, headers=auth_headers(student)
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data) == len(questions)
    assert all("answer" not in q for q in data)

    response = await client.get("/api/v1/knowledge-points", params={"subject": "math"}, headers=auth_headers(student))
    assert [kp["title"] for kp in response.json()] == ["Topic 0", "Topic 1", "Topic 2", "Topic 3"]
