"""
Firebase Realtime Database backend speaking the REST dialect.

Each path maps onto `{database_url}{path}.json`; reads are GET, push is
POST (the server answers with {"name": <key>}), update is PATCH, set is PUT
and remove is DELETE. The credential, if any, goes in the `auth` query
parameter.
"""
from typing import Any, Dict, Optional

import httpx

from sprintrack.logs import get_logger
from sprintrack.recovery import StoreError
from .base import ReferenceStore, split_path

log = get_logger("store.firebase")

def _error_detail(r: httpx.Response) -> str:
    """Extract a human-readable error from a REST response."""
    try:
        data = r.json()
    except ValueError:
        return r.text[:200] if r.text else f"HTTP {r.status_code}"
    if isinstance(data, dict) and "error" in data:
        return str(data["error"])
    return str(data)[:200]

class FirebaseStore(ReferenceStore):

    def __init__(self, database_url: str, auth_token: Optional[str] = None, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.database_url = database_url.rstrip("/")
        self._params = {"auth": auth_token} if auth_token else {}
        self._client = httpx.AsyncClient(base_url=self.database_url, timeout=timeout, transport=transport)

    def _url(self, path: str) -> str:
        return "/" + "/".join(split_path(path)) + ".json"

    async def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = self._url(path)
        try:
            if body is None:
                r = await self._client.request(method, url, params=self._params)
            else:
                r = await self._client.request(method, url, params=self._params, json=body)
        except httpx.HTTPError as e:
            log.error(f"{method} {url} failed: {e}")
            raise StoreError(f"{method} {path} failed: {e}") from e

        if not r.is_success:
            detail = _error_detail(r)
            log.error(f"{method} {url} answered {r.status_code}: {detail}")
            raise StoreError(f"{method} {path} answered {r.status_code} {r.reason_phrase}: {detail}")
        log.debug(f"{method} {url} -> {r.status_code}")
        return r.json() if r.content else None

    async def get(self, path: str) -> Optional[Any]:
        return await self._request("GET", path)

    async def push(self, collection_path: str, value: Dict[str, Any]) -> str:
        data = await self._request("POST", collection_path, value)
        if not isinstance(data, dict) or "name" not in data:
            raise StoreError(f"POST {collection_path} did not return a generated key")
        return data["name"]

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        await self._request("PATCH", path, fields)

    async def remove(self, path: str) -> None:
        await self._request("DELETE", path)

    async def set(self, path: str, value: Any) -> None:
        await self._request("PUT", path, value)

    async def close(self) -> None:
        await self._client.aclose()
