"""FastAPI dependencies shared by the routers."""
from __future__ import annotations

from fastapi import Request

from .services.rooms import RoomGateway


def get_gateway(request: Request) -> RoomGateway:
    """Return the gateway built during application startup."""

    return request.app.state.gateway
