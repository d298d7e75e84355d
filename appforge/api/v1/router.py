from fastapi import APIRouter

from appforge.api.v1.endpoints import health, preview, projects, runs

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(projects.router)
api_router.include_router(runs.router)
api_router.include_router(preview.router)
