"""K12 Tutor - Models initialization."""
from app.models.user import User, UserRole
from app.models.catalog import (
    Subject,
    DifficultyLevel,
    KnowledgePoint,
    Question,
)
from app.models.progress import (
    QuestionAttempt,
    StudyPlan,
    StudyPlanItem,
    MemoryReview,
)


__all__ = [
    # User models
    "User",
    "UserRole",
    # Catalog models
    "Subject",
    "DifficultyLevel",
    "KnowledgePoint",
    "Question",
    # Progress models
    "QuestionAttempt",
    "StudyPlan",
    "StudyPlanItem",
    "MemoryReview",
]
