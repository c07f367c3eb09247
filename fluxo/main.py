from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fluxo.core.config import settings
from fluxo.core.exceptions import (
    AccountSelectionRequired,
    DuplicateLedgerEntryError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from fluxo.core.logging import configure_logging
from fluxo.db.mongo import close_mongo_connection, connect_to_mongo
from fluxo.routes.api import api_router

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORAGE_BACKEND == "mongo":
        await connect_to_mongo()
    logger.info("Starting up", environment=settings.ENVIRONMENT, storage=settings.STORAGE_BACKEND)
    yield
    await close_mongo_connection()
    logger.info("Shut down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AccountSelectionRequired)
async def account_selection_handler(request: Request, exc: AccountSelectionRequired):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "obligation_id": exc.obligation_id,
            "accounts": [
                {"id": a.id, "name": a.name, "type": a.type} for a in exc.accounts
            ],
        },
    )


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "field": exc.field},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


@app.exception_handler(DuplicateLedgerEntryError)
async def duplicate_entry_handler(request: Request, exc: DuplicateLedgerEntryError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "source_type": exc.source_type,
            "source_id": exc.source_id,
            "entry_ids": exc.entry_ids,
        },
    )


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError):
    return JSONResponse(
        status_code=503,
        content={
            "detail": str(exc),
            "stage": exc.stage,
            "partial": exc.partial,
            "obligation_id": exc.obligation_id,
        },
    )


@app.get("/")
async def root():
    return {"message": "Welcome to Fluxo API"}

app.include_router(api_router, prefix=settings.API_V1_STR)
