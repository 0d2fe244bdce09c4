"""LiveKit collaborators: room/egress management and access token signing.

Everything here is a thin pass-through to ``livekit-api``. Protobuf replies are
flattened to JSON-style dicts so routers can hand them back verbatim, and every
SDK or transport failure is re-raised as ``UpstreamFailureError``."""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import timedelta
from typing import Any, Awaitable, TypeVar

import aiohttp
from google.protobuf.json_format import MessageToDict
from google.protobuf.message import Message
from livekit import api
from livekit.api.twirp_client import TwirpError

from ..core.config import Settings
from ..core.errors import UpstreamFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def to_payload(message: Message) -> dict[str, Any]:
    """Render a protobuf reply with the camelCase field names clients expect."""

    return MessageToDict(message)


def egress_payload(info: api.EgressInfo) -> dict[str, Any]:
    # EGRESS_STARTING is the enum default and would otherwise be dropped.
    payload = to_payload(info)
    payload["status"] = api.EgressStatus.Name(info.status)
    return payload


class MediaServer:
    """Room and egress operations against a LiveKit deployment."""

    def __init__(self, client: api.LiveKitAPI, settings: Settings) -> None:
        self._client = client
        self._layout = settings.egress_layout
        self._segment_duration = settings.egress_segment_duration
        self._output_prefix = settings.egress_output_prefix.strip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediaServer":
        # LiveKitAPI opens an aiohttp session, so this must run inside the event loop.
        client = api.LiveKitAPI(
            settings.livekit_host or None,
            settings.livekit_api_key or None,
            settings.livekit_api_secret or None,
        )
        return cls(client, settings)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_room(self, name: str) -> dict[str, Any]:
        room = await self._call("create_room", self._client.room.create_room(api.CreateRoomRequest(name=name)))
        return to_payload(room)

    async def delete_room(self, name: str) -> None:
        await self._call("delete_room", self._client.room.delete_room(api.DeleteRoomRequest(room=name)))

    async def list_rooms(self, names: list[str]) -> list[dict[str, Any]]:
        response = await self._call("list_rooms", self._client.room.list_rooms(api.ListRoomsRequest(names=names)))
        return [to_payload(room) for room in response.rooms]

    async def start_segmented_recording(self, room: str, filename: str) -> dict[str, Any]:
        """Start a grid composite recording split into fixed-duration HLS segments."""

        base = f"{self._output_prefix}/{filename}" if self._output_prefix else filename
        request = api.RoomCompositeEgressRequest(
            room_name=room,
            layout=self._layout,
            segment_outputs=[
                api.SegmentedFileOutput(
                    filename_prefix=base,
                    playlist_name=f"{base}.m3u8",
                    segment_duration=self._segment_duration,
                )
            ],
        )
        info = await self._call("start_room_composite_egress", self._client.egress.start_room_composite_egress(request))
        return egress_payload(info)

    async def stop_recording(self, egress_id: str) -> dict[str, Any]:
        info = await self._call("stop_egress", self._client.egress.stop_egress(api.StopEgressRequest(egress_id=egress_id)))
        return egress_payload(info)

    async def _call(self, action: str, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except TwirpError as exc:
            logger.warning("LiveKit %s failed (%s): %s", action, exc.code, exc.message)
            raise UpstreamFailureError(exc.message) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning("LiveKit %s unreachable: %s", action, exc)
            raise UpstreamFailureError(str(exc) or exc.__class__.__name__) from exc


class TokenSigner:
    """Mint room-scoped join tokens carrying JSON metadata."""

    def __init__(self, api_key: str, api_secret: str, ttl: timedelta) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSigner":
        return cls(
            settings.livekit_api_key,
            settings.livekit_api_secret,
            timedelta(seconds=settings.token_ttl_seconds),
        )

    def sign(self, room: str, identity: str, metadata: dict[str, Any]) -> str:
        try:
            token = (
                api.AccessToken(self._api_key, self._api_secret)
                .with_identity(identity)
                .with_ttl(self._ttl)
                .with_grants(api.VideoGrants(room_join=True, room=room))
                .with_metadata(json.dumps(metadata))
            )
            return token.to_jwt()
        except ValueError as exc:
            logger.error("Token signing failed for %s in %s: %s", identity, room, exc)
            raise UpstreamFailureError(str(exc)) from exc
