"""Shared fakes for the LiveKit collaborators."""
from __future__ import annotations

import json
from typing import Any

import pytest

from gateway.core.config import Settings
from gateway.core.errors import UpstreamFailureError
from gateway.dependencies import get_gateway
from gateway.main import app
from gateway.services.host_registry import InMemoryHostRegistry
from gateway.services.rooms import RoomGateway


class FakeMediaServer:
    """In-memory stand-in for LiveKit room and egress APIs."""

    def __init__(self) -> None:
        self.rooms: dict[str, dict[str, Any]] = {}
        self.egresses: dict[str, dict[str, Any]] = {}
        self.deleted: list[str] = []
        self.list_calls: list[list[str]] = []
        self.linger_checks = 0
        self.fail_listing = False

    async def create_room(self, name: str) -> dict[str, Any]:
        if name in self.rooms:
            raise UpstreamFailureError("room already exists")
        room = {"sid": f"RM_{len(self.rooms) + 1}", "name": name, "emptyTimeout": 300}
        self.rooms[name] = room
        return room

    async def delete_room(self, name: str) -> None:
        if name not in self.rooms:
            raise UpstreamFailureError("requested room does not exist")
        self.deleted.append(name)

    async def list_rooms(self, names: list[str]) -> list[dict[str, Any]]:
        self.list_calls.append(names)
        if self.fail_listing:
            raise UpstreamFailureError("connection refused")
        visible = []
        for name in names:
            if name not in self.rooms:
                continue
            if name in self.deleted:
                if self.linger_checks <= 0:
                    self.rooms.pop(name)
                    self.deleted.remove(name)
                    continue
                self.linger_checks -= 1
            visible.append(self.rooms[name])
        return visible

    async def start_segmented_recording(self, room: str, filename: str) -> dict[str, Any]:
        if room not in self.rooms:
            raise UpstreamFailureError("requested room does not exist")
        egress_id = f"EG_{len(self.egresses) + 1}"
        info = {"egressId": egress_id, "roomName": room, "status": "EGRESS_STARTING", "filename": filename}
        self.egresses[egress_id] = info
        return info

    async def stop_recording(self, egress_id: str) -> dict[str, Any]:
        info = self.egresses.get(egress_id)
        if info is None:
            raise UpstreamFailureError("egress does not exist")
        info = {**info, "status": "EGRESS_ENDING"}
        self.egresses[egress_id] = info
        return info

    async def aclose(self) -> None:
        pass


class FakeSigner:
    def __init__(self) -> None:
        self.signed: list[tuple[str, str, dict[str, Any]]] = []

    def sign(self, room: str, identity: str, metadata: dict[str, Any]) -> str:
        self.signed.append((room, identity, metadata))
        return f"{room}.{identity}.{json.dumps(metadata, sort_keys=True)}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        livekit_api_key="devkey",
        livekit_api_secret="secret-that-is-long-enough-for-hs256",
        end_room_poll_attempts=3,
        end_room_poll_interval_ms=0,
    )


@pytest.fixture
def media() -> FakeMediaServer:
    return FakeMediaServer()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def hosts() -> InMemoryHostRegistry:
    return InMemoryHostRegistry()


@pytest.fixture
def gateway(media: FakeMediaServer, signer: FakeSigner, hosts: InMemoryHostRegistry, settings: Settings) -> RoomGateway:
    return RoomGateway(media=media, signer=signer, hosts=hosts, settings=settings)


@pytest.fixture
def api_app(gateway: RoomGateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield app
    app.dependency_overrides.clear()
