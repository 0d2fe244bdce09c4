"""Room lifecycle, token issuance and recording endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_gateway
from ..schemas import rooms as schemas
from ..services.rooms import RoomGateway

router = APIRouter()


@router.post("/room")
async def create_room(
    payload: schemas.CreateRoomRequest,
    gateway: RoomGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Create a LiveKit room and return its descriptor as reported by LiveKit."""

    return await gateway.create_room(payload.name)


@router.post("/token", response_model=schemas.TokenResponse)
async def create_token(
    payload: schemas.TokenRequest,
    gateway: RoomGateway = Depends(get_gateway),
) -> schemas.TokenResponse:
    """Return a room access token; the first identity to ask becomes host."""

    issued = await gateway.issue_token(payload.room, payload.identity)
    return schemas.TokenResponse(token=issued.token, role=issued.role)


@router.post("/start-egress", response_model=schemas.StartEgressResponse)
async def start_egress(
    payload: schemas.StartEgressRequest,
    gateway: RoomGateway = Depends(get_gateway),
) -> schemas.StartEgressResponse:
    """Start a segmented grid recording of the room."""

    job = await gateway.start_recording(payload.room, payload.filename)
    return schemas.StartEgressResponse(egress_id=job.egress_id, status=job.status)


@router.post("/stop-egress")
async def stop_egress(
    payload: schemas.StopEgressRequest,
    gateway: RoomGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """Stop a recording and return LiveKit's final egress payload."""

    return await gateway.stop_recording(payload.egress_id)


@router.post("/room-exists", response_model=schemas.RoomExistsResponse)
async def room_exists(
    request: Request,
    gateway: RoomGateway = Depends(get_gateway),
) -> schemas.RoomExistsResponse:
    """Polling probe that answers 200 for any body, malformed ones included."""

    try:
        body = await request.json()
    except ValueError:
        body = None

    room = body.get("room") if isinstance(body, dict) else None
    if not isinstance(room, str):
        room = None

    return schemas.RoomExistsResponse(exists=await gateway.room_exists(room))


@router.post("/end-room", response_model=schemas.EndRoomResponse)
async def end_room(
    payload: schemas.EndRoomRequest,
    gateway: RoomGateway = Depends(get_gateway),
) -> schemas.EndRoomResponse:
    """Delete the room on LiveKit and forget its host."""

    result = await gateway.end_room(
        payload.room,
        payload.identity,
        wait_for_deletion=payload.wait_for_deletion,
    )
    return schemas.EndRoomResponse(success=result.success, confirmed=result.confirmed)
