"""
K12 Tutor - Catalog Models
Knowledge points and the question bank. Reference data authored by admins.
"""
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.core.database import Base, JSONType


class Subject(str, Enum):
    MATH = "math"
    CHINESE = "chinese"
    ENGLISH = "english"


class DifficultyLevel(str, Enum):
    """Question difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class KnowledgePoint(Base):
    """The finest-grained curriculum topic a question is tagged with."""

    __tablename__ = "knowledge_points"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    subject: Mapped[Subject] = mapped_column(String(20), index=True)
    grade: Mapped[int] = mapped_column(Integer, index=True)
    title: Mapped[str] = mapped_column(String(200))
    chapter: Mapped[str] = mapped_column(String(200), default="")
    unit: Mapped[str] = mapped_column(String(200), default="")
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="knowledge_point",
        cascade="all, delete-orphan"
    )


class Question(Base):
    """Multiple-choice question bound to one knowledge point."""

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    subject: Mapped[Subject] = mapped_column(String(20), index=True)
    grade: Mapped[int] = mapped_column(Integer, index=True)
    knowledge_point_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("knowledge_points.id", ondelete="CASCADE"),
        index=True
    )

    stem: Mapped[str] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSONType, default=list)
    answer: Mapped[str] = mapped_column(String(500))
    explanation: Mapped[str] = mapped_column(Text, default="")
    difficulty: Mapped[DifficultyLevel] = mapped_column(
        String(20),
        default=DifficultyLevel.MEDIUM
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now()
    )

    knowledge_point: Mapped["KnowledgePoint"] = relationship(
        "KnowledgePoint",
        back_populates="questions"
    )
