from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional

from appforge import __version__
from appforge.api.v1.router import api_router
from appforge.core.config import settings
from appforge.core.exceptions import (
    AIServiceError,
    AppForgeError,
    GenerationInProgressError,
    NotFoundError,
    PreviewNotActiveError,
    ValidationError,
    error_response,
)
from appforge.core.logging_config import logger
from appforge.core.middleware import RequestLoggingMiddleware
from appforge.core.services import AppServices, build_services


def status_code_for(exc: AppForgeError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, (GenerationInProgressError, PreviewNotActiveError)):
        return 409
    if isinstance(exc, AIServiceError):
        return 502
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build services on startup; always flush the file store on shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} {__version__}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)

    services: AppServices = app.state.services
    if not services.gateway.is_configured:
        logger.warning("[Startup] ANTHROPIC_API_KEY is not set - generation requests will fail")

    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await services.aclose()


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Generate runnable React Native / Expo projects from a prose description",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.services = services

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppForgeError)
    async def appforge_exception_handler(request: Request, exc: AppForgeError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"[API] {request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return JSONResponse(status_code=status_code, content=error_response(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "message": str(exc) if settings.DEBUG else "An error occurred",
            },
        )

    app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "appforge.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )
