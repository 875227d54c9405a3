# api/health.py
"""
Health check
200 when the database is connected or the service runs on in-memory stores,
503 when a configured MongoDB stops answering.
"""

import time
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config import settings
from .deps import AppServices, get_services

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check(services: AppServices = Depends(get_services)):
    database = services.mongo.status() if services.mongo is not None else {"status": "memory"}
    healthy = database["status"] != "disconnected"

    body = {
        "success": healthy,
        "server": {
            "status": "running",
            "environment": settings.API_ENV,
            "uptime_seconds": round(time.time() - services.started_at, 1),
        },
        "database": database,
        "llm_provider": services.text_generator.provider,
        "timestamp": datetime.utcnow().isoformat(),
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
