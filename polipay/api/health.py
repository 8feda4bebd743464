"""Liveness endpoint."""

from fastapi import APIRouter

from polipay import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
