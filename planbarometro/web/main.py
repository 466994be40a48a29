from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from planbarometro.infrastructure.config import get_settings
from planbarometro.infrastructure.exceptions import (
    PlanbarometroError,
    create_user_friendly_error_message,
    log_error_details,
)
from planbarometro.infrastructure.logging import get_logger
from planbarometro.web.routes import api

logger = get_logger(__name__)


def create_application() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app.title,
        version=settings.app.version,
        debug=settings.app.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router)

    @app.exception_handler(PlanbarometroError)
    async def planbarometro_error_handler(request: Request, exc: PlanbarometroError) -> JSONResponse:
        error_details = log_error_details(exc, {"path": request.url.path})
        logger.error("Unhandled application error", extra=error_details)
        return JSONResponse(
            status_code=500, content={"detail": create_user_friendly_error_message(exc)}
        )

    return app


app = create_application()
