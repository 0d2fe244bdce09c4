"""Data contracts for room, token and recording endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..services.rooms import Role


class _Request(BaseModel):
    # Missing fields are reported by the gateway as InvalidArgument, not as 422s.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CreateRoomRequest(_Request):
    name: str | None = Field(default=None, description="Room name to create on LiveKit")


class TokenRequest(_Request):
    room: str | None = Field(default=None, description="Room name to join")
    identity: str | None = Field(default=None, description="Participant identity")


class TokenResponse(BaseModel):
    token: str = Field(..., description="Signed LiveKit access token")
    role: Role = Field(..., description="Role embedded in the token metadata")


class StartEgressRequest(_Request):
    room: str | None = None
    filename: str | None = Field(default=None, description="Prefix for playlist and segment files")


class StartEgressResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    egress_id: str = Field(..., alias="egressId")
    status: str


class StopEgressRequest(_Request):
    egress_id: str | None = Field(default=None, alias="egressId")


class RoomExistsResponse(BaseModel):
    exists: bool


class EndRoomRequest(_Request):
    room: str | None = None
    identity: str | None = Field(default=None, description="Must match the recorded host")
    wait_for_deletion: bool | None = Field(
        default=None,
        alias="waitForDeletion",
        description="Poll LiveKit until the room is gone before replying",
    )


class EndRoomResponse(BaseModel):
    success: bool
    confirmed: bool | None = Field(default=None, description="Null when no deletion poll ran")
