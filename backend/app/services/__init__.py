"""K12 Tutor - Services initialization."""
from app.services.auth import (
    AuthService,
    AuthenticationError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from app.services.attempts import AttemptLedger
from app.services.catalog import (
    CatalogError,
    CatalogService,
    InvalidAnswerError,
    KnowledgePointNotFoundError,
)
from app.services.diagnostic import DiagnosticService
from app.services.mastery import MasteryService, MasteryStat
from app.services.memory import FixedIntervalSchedule, MemoryReviewService
from app.services.report import ReportService
from app.services.study_plan import StudyPlanService

__all__ = [
    "AuthService",
    "AuthenticationError",
    "InvalidCredentialsError",
    "InactiveAccountError",
    "AttemptLedger",
    "CatalogError",
    "CatalogService",
    "InvalidAnswerError",
    "KnowledgePointNotFoundError",
    "DiagnosticService",
    "MasteryService",
    "MasteryStat",
    "FixedIntervalSchedule",
    "MemoryReviewService",
    "ReportService",
    "StudyPlanService",
]
