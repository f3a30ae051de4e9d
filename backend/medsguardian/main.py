"""Module: main."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medsguardian.api.v1.api import api_router
from medsguardian.core.config import settings
from medsguardian.core.errors import MedsGuardianError
from medsguardian.core.logging import configure_logging
from medsguardian.db.init_db import init_db
from medsguardian.db.session import engine

logger = logging.getLogger(__name__)


async def handle_app_error(request: Request, exc: MedsGuardianError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(title="MedsGuardian API", version="0.1.0")

    app.include_router(api_router, prefix="/api/v1")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MedsGuardianError, handle_app_error)

    if engine is not None:
        init_db(engine)
    else:
        logger.warning("DATABASE_URL is not set; running without a database")

    return app


app = create_app()
