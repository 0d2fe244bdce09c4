"""Room lifecycle, host election and recording control."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ..core.config import Settings
from ..core.errors import ForbiddenError, InvalidArgumentError
from .host_registry import HostRegistry

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    HOST = "host"
    PARTICIPANT = "participant"


class RoomService(Protocol):
    async def create_room(self, name: str) -> dict[str, Any]: ...

    async def delete_room(self, name: str) -> None: ...

    async def list_rooms(self, names: list[str]) -> list[dict[str, Any]]: ...

    async def start_segmented_recording(self, room: str, filename: str) -> dict[str, Any]: ...

    async def stop_recording(self, egress_id: str) -> dict[str, Any]: ...


class Signer(Protocol):
    def sign(self, room: str, identity: str, metadata: dict[str, Any]) -> str: ...


@dataclass(slots=True)
class IssuedToken:
    token: str
    role: Role


@dataclass(slots=True)
class RecordingJob:
    egress_id: str
    status: str


@dataclass(slots=True)
class EndRoomResult:
    success: bool
    confirmed: bool | None = None


async def elect_role(hosts: HostRegistry, room: str, identity: str) -> Role:
    """First identity to ask for a room becomes its host; the same identity keeps it."""

    holder = await hosts.compare_and_insert(room, identity)
    return Role.HOST if holder == identity else Role.PARTICIPANT


async def wait_for_room_deletion(
    media: RoomService,
    room: str,
    *,
    attempts: int,
    interval: float,
) -> bool:
    """Poll the room listing until ``room`` disappears; False when it is still listed."""

    for attempt in range(attempts):
        if not await media.list_rooms([room]):
            return True
        if attempt < attempts - 1:
            await asyncio.sleep(interval)
    return False


class RoomGateway:
    """Front door for every room operation exposed over HTTP."""

    def __init__(self, media: RoomService, signer: Signer, hosts: HostRegistry, settings: Settings) -> None:
        self.media = media
        self.signer = signer
        self.hosts = hosts
        self._settings = settings

    async def create_room(self, name: str | None) -> dict[str, Any]:
        if not name:
            raise InvalidArgumentError("Room name is required")
        room = await self.media.create_room(name)
        logger.info("Created room %s", name)
        return room

    async def issue_token(self, room: str | None, identity: str | None) -> IssuedToken:
        logger.info("Token requested for room=%s identity=%s", room, identity)
        if not room or not identity:
            raise InvalidArgumentError("room and identity are required")

        role = await elect_role(self.hosts, room, identity)
        token = self.signer.sign(room, identity, {"role": role.value})
        logger.info("Issued token for %s in %s with role %s", identity, room, role.value)
        return IssuedToken(token=token, role=role)

    async def room_exists(self, room: str | None) -> bool:
        """Report whether LiveKit lists ``room``; any failure reads as absent."""

        if not room:
            return False
        try:
            rooms = await self.media.list_rooms([room])
        except Exception as exc:  # noqa: BLE001 - polling clients always get a boolean
            logger.debug("Room existence check for %s failed: %s", room, exc)
            return False
        return len(rooms) > 0

    async def start_recording(self, room: str | None, filename: str | None) -> RecordingJob:
        if not room or not filename:
            raise InvalidArgumentError("room and filename are required")

        info = await self.media.start_segmented_recording(room, filename)
        job = RecordingJob(egress_id=info.get("egressId", ""), status=str(info.get("status", "")))
        logger.info("Started recording %s for room %s (%s)", job.egress_id, room, job.status)
        return job

    async def stop_recording(self, egress_id: str | None) -> dict[str, Any]:
        if not egress_id:
            raise InvalidArgumentError("egressId is required")
        info = await self.media.stop_recording(egress_id)
        logger.info("Stopped recording %s", egress_id)
        return info

    async def end_room(
        self,
        room: str | None,
        identity: str | None = None,
        *,
        wait_for_deletion: bool | None = None,
    ) -> EndRoomResult:
        settings = self._settings
        if not room:
            raise InvalidArgumentError("room is required")

        if settings.end_room_require_host:
            if not identity:
                raise InvalidArgumentError("identity is required")
            host = await self.hosts.get(room)
            if host != identity:
                logger.warning("Rejected end-room for %s by %s; host is %s", room, identity, host)
                raise ForbiddenError("Only host can end the room")

        await self.media.delete_room(room)
        await self.hosts.delete(room)
        logger.info("Ended room %s", room)

        if wait_for_deletion is None:
            wait_for_deletion = settings.end_room_wait_for_deletion
        if not wait_for_deletion:
            return EndRoomResult(success=True)

        confirmed = await wait_for_room_deletion(
            self.media,
            room,
            attempts=settings.end_room_poll_attempts,
            interval=settings.end_room_poll_interval_ms / 1000,
        )
        if not confirmed:
            logger.warning("Room %s still listed after %d checks", room, settings.end_room_poll_attempts)
        return EndRoomResult(success=True, confirmed=confirmed)
