"""FastAPI application for the fund ledger."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fundledger.api.routes.accounts import router as accounts_router
from fundledger.api.routes.categories import router as categories_router
from fundledger.api.routes.contacts import router as contacts_router
from fundledger.api.routes.receipts import router as receipts_router
from fundledger.api.routes.reference import router as reference_router
from fundledger.api.routes.reimbursements import router as reimbursements_router
from fundledger.api.routes.transactions import router as transactions_router
from fundledger.api.routes.transfers import router as transfers_router
from fundledger.config import get_settings
from fundledger.services import async_engine
from fundledger.services.errors import AppError, error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Fund ledger API starting")
    yield
    await async_engine.dispose()
    logger.info("Fund ledger API stopped")


app = FastAPI(
    title=get_settings().api_title,
    description="Accounts, transactions, transfers, reimbursement requests, contacts and receipts",
    version=get_settings().api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate application errors into their HTTP status and JSON body."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.http_status} {exc.code}")
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


app.include_router(reference_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(transfers_router)
app.include_router(reimbursements_router)
app.include_router(contacts_router)
app.include_router(receipts_router)
app.include_router(categories_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app"]
