"""
Health API endpoints for Threatboard.

This module provides endpoints for system health monitoring.
"""

import platform
import psutil
from typing import Dict, Any
from fastapi import APIRouter, Request

from threatboard.core.config import settings
from threatboard.api.websocket import manager
from threatboard.core.logging import logger
from threatboard.utils.helpers import utc_now

router = APIRouter()


async def get_system_stats() -> Dict[str, Any]:
    """
    Get system resource statistics.

    Returns:
        Dict[str, Any]: System resource statistics.
    """
    try:
        memory = psutil.virtual_memory()

        return {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": memory.percent,
            "memory_used_gb": round(memory.used / (1024 ** 3), 2),
            "memory_total_gb": round(memory.total / (1024 ** 3), 2),
            "platform": platform.platform(),
            "python_version": platform.python_version()
        }
    except Exception as e:
        logger.error(f"Failed to get system stats: {e}")
        return {
            "error": str(e)
        }


@router.get("/")
async def health_check(request: Request):
    """
    System health check endpoint.

    Returns:
        Dict: Health status of the dashboard session and the host.
    """
    session = getattr(request.app.state, "session", None)
    return {
        "status": "operational" if session is not None and session.running else "idle",
        "version": settings.VERSION,
        "timestamp": utc_now().isoformat(),
        "session": session.status() if session is not None else None,
        "websocket_clients": len(manager.active_connections),
        "system": await get_system_stats()
    }
