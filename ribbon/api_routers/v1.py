from fastapi import APIRouter

from ribbon.features.health.routes.health import router as health_router
from ribbon.features.links.routes.links import router as links_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(links_router)
api_router.include_router(health_router)
