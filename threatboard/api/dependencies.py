"""
Shared API dependencies for Threatboard.
"""

from typing import Optional
from fastapi import HTTPException, Request, WebSocket, status

from threatboard.services.dashboard_session import DashboardSession


def get_session(request: Request) -> DashboardSession:
    """
    Get the dashboard session attached to the application.

    Raises:
        HTTPException: If no session is running.
    """
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboard session not started",
        )
    return session


def get_ws_session(websocket: WebSocket) -> Optional[DashboardSession]:
    """WebSocket variant of get_session; returns None when not started."""
    return getattr(websocket.app.state, "session", None)
