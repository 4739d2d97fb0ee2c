import asyncio
import copy
from typing import Any, Dict, List, Optional, Tuple

from sprintrack.logs import get_logger
from sprintrack.recovery import StoreError
from .base import PushIdGenerator, ReferenceStore, split_path

log = get_logger("store.memory")

class MemoryStore(ReferenceStore):
    """
    In-process document tree with Realtime Database semantics.

    Every call yields to the event loop (after `latency` seconds, if set) so
    concurrent callers interleave the way they would against a remote store.
    Empty maps do not exist: removing the last child of a map removes the map.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, latency: float = 0.0):
        self._root: Dict[str, Any] = copy.deepcopy(data) if data else {}
        self.latency = latency
        self.calls: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._next_key = PushIdGenerator()

    async def _round_trip(self, op: str, path: str):
        self.calls.append((op, path))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
        finally:
            self.in_flight -= 1

    async def get(self, path: str) -> Optional[Any]:
        await self._round_trip("get", path)
        node = self._root
        for part in split_path(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    async def push(self, collection_path: str, value: Dict[str, Any]) -> str:
        await self._round_trip("push", collection_path)
        key = self._next_key()
        self._write(split_path(collection_path) + [key], value)
        await self._changed()
        return key

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        await self._round_trip("update", path)
        parts = split_path(path)
        for name, value in fields.items():
            self._write(parts + [name], value)
        await self._changed()

    async def remove(self, path: str) -> None:
        await self._round_trip("remove", path)
        self._write(split_path(path), None)
        await self._changed()

    async def set(self, path: str, value: Any) -> None:
        await self._round_trip("set", path)
        self._write(split_path(path), value)
        await self._changed()

    def snapshot(self) -> Dict[str, Any]:
        """A deep copy of the whole tree."""
        return copy.deepcopy(self._root)

    async def _changed(self):
        """Hook called after every successful write."""
        pass

    def _write(self, parts: List[str], value: Any):
        if not parts:
            raise StoreError("Refusing to write the store root")

        if value is None or value == {}:
            self._delete(parts)
            return

        node = self._root
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)
        log.debug(f"Wrote /{'/'.join(parts)}")

    def _delete(self, parts: List[str]):
        trail = [self._root]
        for part in parts[:-1]:
            child = trail[-1].get(part)
            if not isinstance(child, dict):
                return
            trail.append(child)
        trail[-1].pop(parts[-1], None)

        # Prune maps left empty by the delete
        for depth in range(len(trail) - 1, 0, -1):
            if trail[depth]:
                break
            trail[depth - 1].pop(parts[depth - 1], None)
