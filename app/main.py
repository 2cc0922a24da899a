"""Application entrypoint: ``uvicorn app.main:app``."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.router import get_api_router
from app.core.config import get_config
from app.core.startup import run_startup_sweeps
from app.database.init_db import init_db
from app.schemas.common import ErrorEnvelope
from app.services.pdf_store import PdfStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    run_startup_sweeps()
    yield


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "api.database_error",
        extra={"event": "api.database_error", "path": request.url.path, "error": str(exc)},
    )
    body = ErrorEnvelope(error_code="database_error", detail="Database operation failed")
    return JSONResponse(status_code=500, content=body.model_dump())


def create_app(run_lifespan: bool = True) -> FastAPI:
    cfg = get_config()
    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION, lifespan=lifespan if run_lifespan else None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.include_router(get_api_router())

    store = PdfStore(cfg)
    store.ensure_dirs()
    app.mount("/pdfs", StaticFiles(directory=str(store.pdf_dir)), name="pdfs")

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run("app.main:app", host=config.API_HOST, port=config.API_PORT)
