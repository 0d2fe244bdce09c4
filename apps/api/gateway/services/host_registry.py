"""In-memory registry of the identity elected host for each room."""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Protocol


class HostRegistry(Protocol):
    """Storage seam for host records; swap in a shared backend for multi-instance setups."""

    async def get(self, room: str) -> Optional[str]:
        ...

    async def compare_and_insert(self, room: str, identity: str) -> str:
        ...

    async def delete(self, room: str) -> bool:
        ...


class InMemoryHostRegistry:
    """Process-local host map.

    Records are never expired and are lost on restart. Each gateway replica keeps
    its own map, so running more than one instance gives inconsistent elections.
    """

    def __init__(self) -> None:
        self._hosts: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, room: str) -> Optional[str]:
        async with self._lock:
            return self._hosts.get(room)

    async def compare_and_insert(self, room: str, identity: str) -> str:
        """Record ``identity`` as host if ``room`` has none; return the recorded host."""

        async with self._lock:
            return self._hosts.setdefault(room, identity)

    async def delete(self, room: str) -> bool:
        async with self._lock:
            return self._hosts.pop(room, None) is not None

    def __len__(self) -> int:
        return len(self._hosts)
