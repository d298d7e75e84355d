from fastapi import APIRouter, Depends
from typing import Any, Dict

from appforge import __version__
from appforge.api.deps import get_services
from appforge.core.services import AppServices


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(services: AppServices = Depends(get_services)) -> Dict[str, Any]:
    """Liveness plus the configuration a client needs to know about"""
    return {
        "status": "healthy",
        "app_name": services.settings.APP_NAME,
        "version": __version__,
        "environment": services.settings.ENVIRONMENT,
        "storage_backend": services.file_store.backend.name,
        "ai_configured": services.gateway.is_configured,
        "generation_running": services.has_active_run,
    }
