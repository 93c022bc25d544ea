import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.config import settings
from finboard.core.database import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok", "environment": settings.environment}


@router.get("/health/db")
async def health_db(db: AsyncSession = Depends(get_db)):
    started = time.perf_counter()
    await db.execute(text("SELECT 1"))
    return {
        "status": "ok",
        "database": "connected",
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
    }
