"""
K12 Tutor - Test Configuration
Pytest fixtures and configuration for testing
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SEED_DEMO_CATALOG", "false")
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models.catalog import KnowledgePoint, Question
from app.models.user import User, UserRole


# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# NullPool: every test runs on its own event loop, so connections are never reused
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "TestPass123!"
FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Accounts
# ============================================================================

async def make_user(
    db: AsyncSession,
    email: str,
    role: UserRole,
    grade: int | None = None,
    subjects: list[str] | None = None,
    parent: User | None = None,
) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        first_name=role.value.title(),
        last_name="Tester",
        role=role.value,
        grade=grade,
        subjects=subjects,
        parent_id=parent.id if parent else None,
    )
    db.add(user)
    await db.flush()
    return user


def auth_headers(user: User) -> dict[str, str]:
    role = user.role.value if hasattr(user.role, "value") else user.role
    token = create_access_token(str(user.id), role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def parent(db_session: AsyncSession) -> User:
    return await make_user(db_session, "parent@example.com", UserRole.PARENT)


@pytest_asyncio.fixture
async def student(db_session: AsyncSession, parent: User) -> User:
    return await make_user(
        db_session, "student@example.com", UserRole.STUDENT,
        grade=4, subjects=["math"], parent=parent,
    )


@pytest_asyncio.fixture
async def teacher(db_session: AsyncSession) -> User:
    return await make_user(db_session, "teacher@example.com", UserRole.TEACHER)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def student_headers(student: User) -> dict[str, str]:
    return auth_headers(student)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


# ============================================================================
# Catalog
# ============================================================================

@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> list[KnowledgePoint]:
    """Four grade-4 math knowledge points with three questions each."""
    knowledge_points = []
    for order in range(4):
        kp = KnowledgePoint(
            subject="math",
            grade=4,
            title=f"Topic {order}",
            chapter="Chapter 1",
            unit="Unit 1",
            display_order=order,
        )
        db_session.add(kp)
        await db_session.flush()
        for n in range(3):
            db_session.add(Question(
                subject="math",
                grade=4,
                knowledge_point_id=kp.id,
                stem=f"Topic {order} question {n}",
                options=["A", "B", "C", "D"],
                answer="A",
                explanation=f"Topic {order} explanation {n}",
                difficulty="easy",
            ))
        knowledge_points.append(kp)
    await db_session.flush()
    return knowledge_points


@pytest_asyncio.fixture
async def questions(db_session: AsyncSession, catalog: list[KnowledgePoint]) -> list[Question]:
    """The catalog's questions in (display_order, stem) order."""
    result = await db_session.execute(select(Question).order_by(Question.stem))
    return list(result.scalars().all())


@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Sample student registration data."""
    return {
        "email": "test@example.com",
        "password": TEST_PASSWORD,
        "first_name": "Test",
        "last_name": "User",
        "role": "student",
        "grade": 4,
        "subjects": ["math", "english"],
    }
