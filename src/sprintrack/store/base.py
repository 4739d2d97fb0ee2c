import abc
import random
import time
from typing import Any, Dict, List, Optional

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"

def split_path(path: str) -> List[str]:
    """Split a store path such as '/projects/abc/tasks' into its segments."""
    return [part for part in path.strip("/").split("/") if part]

def join_path(*parts: str) -> str:
    return "/" + "/".join(str(p).strip("/") for p in parts)

class PushIdGenerator:
    """
    Generates chronologically ordered 20 character keys, the same shape the
    Firebase Realtime Database hands out for push().

    The first 8 characters encode the millisecond timestamp; the remaining 12
    are random and get incremented when two keys land in the same millisecond
    so keys from one generator always sort in creation order.
    """

    def __init__(self):
        self._last_ms = 0
        self._last_random: List[int] = [0] * 12

    def __call__(self) -> str:
        now = int(time.time() * 1000)
        if now <= self._last_ms:
            now = self._last_ms
            for i in range(11, -1, -1):
                if self._last_random[i] != 63:
                    self._last_random[i] += 1
                    break
                self._last_random[i] = 0
        else:
            self._last_random = [random.randrange(64) for _ in range(12)]
        self._last_ms = now

        stamp = []
        for _ in range(8):
            stamp.append(PUSH_CHARS[now % 64])
            now //= 64
        return "".join(reversed(stamp)) + "".join(PUSH_CHARS[i] for i in self._last_random)

class ReferenceStore(abc.ABC):
    """
    An abstract base class for keyed document stores.

    Documents are addressed by slash separated paths such as
    '/projects/{id}' or '/tasks/{id}/subtasks'. Every method is a coroutine
    and may suspend pending a round trip to the backing store.
    """

    @abc.abstractmethod
    async def get(self, path: str) -> Optional[Any]:
        """
        Read the value at a path.

        Args:
            path: The document or field path.

        Returns:
            The stored value, or None if nothing is stored there.
        """
        pass

    @abc.abstractmethod
    async def push(self, collection_path: str, value: Dict[str, Any]) -> str:
        """
        Append a value under a collection with a store generated key.

        Args:
            collection_path: The collection to append to, e.g. '/tasks'.
            value: The document to store.

        Returns:
            The generated key.
        """
        pass

    @abc.abstractmethod
    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        """
        Merge the named fields into the value at a path.

        Siblings not named in `fields` are left untouched; a field given as
        None is deleted.
        """
        pass

    @abc.abstractmethod
    async def remove(self, path: str) -> None:
        """Delete the value (and any subtree) at a path."""
        pass

    @abc.abstractmethod
    async def set(self, path: str, value: Any) -> None:
        """Overwrite the value at a path."""
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
