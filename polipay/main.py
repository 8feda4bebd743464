"""
POLi Pay gateway service.

Initiates POLi transactions, verifies callbacks by querying the gateway
directly, and keeps an audit trail of every interaction.

Start the server:
    uvicorn polipay.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from polipay import __version__
from polipay.api.health import router as health_router
from polipay.api.institutions import router as institutions_router
from polipay.api.transactions import router as transactions_router
from polipay.config import settings
from polipay.database import init_db

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    await init_db()
    yield


app = FastAPI(
    title="POLi Pay Gateway",
    description=(
        "Server-side integration with the POLi online payment gateway: "
        "transaction initiation, token-based verification of callbacks, "
        "and financial institution lookup."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(transactions_router, prefix="/api")
app.include_router(institutions_router, prefix="/api")
