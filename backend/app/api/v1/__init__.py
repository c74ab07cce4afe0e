"""K12 Tutor - API v1 Router."""
from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.catalog import router as catalog_router
from app.api.v1.admin import router as admin_router
from app.api.v1.practice import router as practice_router
from app.api.v1.diagnostic import router as diagnostic_router
from app.api.v1.plan import router as plan_router
from app.api.v1.review import router as review_router
from app.api.v1.wrong_book import router as wrong_book_router
from app.api.v1.report import router as report_router
from app.api.v1.insights import router as insights_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(catalog_router)
api_router.include_router(admin_router)
api_router.include_router(practice_router)
api_router.include_router(diagnostic_router)
api_router.include_router(plan_router)
api_router.include_router(review_router)
api_router.include_router(wrong_book_router)
api_router.include_router(report_router)
api_router.include_router(insights_router)
