from fastapi import APIRouter

from app.features.crawler.routes.crawler import router as crawler_router
from app.features.health.routes.health import router as health_router


api_router = APIRouter()

# Register all feature routes
api_router.include_router(crawler_router)
api_router.include_router(health_router)
