"""
Health check endpoints.
"""

import time
from typing import Dict, Any

from fastapi import APIRouter, Depends, Response, status

from shop_insights.database.connection import Database, get_database
from shop_insights.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, bool]:
    """
    Basic liveness check.

    Returns 200 whenever the process is serving requests.
    """
    return {"ok": True}


@router.get("/health/ready", status_code=status.HTTP_200_OK)
async def readiness_check(response: Response,
                          database: Database = Depends(get_database)) -> Dict[str, Any]:
    """
    Readiness check.

    Verifies that the database answers a trivial query.
    """
    start_time = time.time()

    try:
        database.ping()
        check = {"status": "healthy"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        check = {"status": "unhealthy", "error": str(e)[:100]}
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    check["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
    return {"ok": check["status"] == "healthy", "database": check}
