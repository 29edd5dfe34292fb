# app/entrypoints/api/routers/health.py
from __future__ import annotations

from fastapi import APIRouter

from ....config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.ENV}
