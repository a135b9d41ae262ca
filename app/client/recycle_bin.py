"""
Async HTTP client for the recycle bin and recycle history endpoints.

List calls are last-request-wins: starting a new ``fetch_deleted_items`` (or
``fetch_history``) cancels the previous one still in flight, and the
superseded call returns ``None``. Cancellation is never reported as an error.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional

import httpx

from app.core.enums import RecycleType

logger = logging.getLogger(__name__)

ALLOWED_TYPES = [t.value for t in RecycleType]

_EMPTY_PAGINATION = {"total": 0, "page": 1, "limit": 20, "totalPages": 0}


class RecycleBinClientError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _clean_type(type_key: Optional[str]) -> str:
    clean = str(type_key or "").strip().lower()
    if not clean:
        raise ValueError("Missing required: type")
    if clean not in ALLOWED_TYPES:
        raise ValueError(f"Unsupported recycle-bin type: {clean}")
    return clean


def _clean_ids(ids: Iterable[Any], operation: str) -> List[str]:
    clean = [str(i) for i in (ids or [])]
    if not clean:
        raise ValueError(f"{operation} requires a non-empty ids list")
    return clean


def _drop_empty(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None and v != ""}


class RecycleBinClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=timeout,
        )
        self._inflight: Dict[str, asyncio.Task] = {}

    async def __aenter__(self) -> "RecycleBinClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("detail") or response.text
            except ValueError:
                message = response.text
            raise RecycleBinClientError(response.status_code, str(message))
        return response.json()

    async def _latest(self, key: str, call: Awaitable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Run ``call`` as the only in-flight request for ``key``; older ones are cancelled."""
        previous = self._inflight.get(key)
        if previous is not None and not previous.done():
            previous.cancel()
        task = asyncio.ensure_future(call)
        self._inflight[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._inflight.get(key) is task:
                # The caller itself was cancelled
                raise
            logger.debug("superseded %s request dropped", key)
            return None
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    async def fetch_deleted_items(
        self,
        type: str,
        *,
        page: int = 1,
        limit: int = 20,
        search: str = "",
        sort_by: str = "deletedAt_desc",
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """{'items': [...], 'pagination': {...}}, or None when a newer fetch replaced this one."""
        params = _drop_empty(
            {
                "type": _clean_type(type),
                "page": page,
                "limit": limit,
                "search": search,
                "sortBy": sort_by,
                "fromDate": from_date,
                "toDate": to_date,
            }
        )
        body = await self._latest("recycle-bin", self._request("GET", "/api/admin/recycle-bin", params=params))
        if body is None:
            return None
        return {
            "items": body.get("data") or [],
            "pagination": body.get("pagination") or dict(_EMPTY_PAGINATION),
        }

    async def fetch_history(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        type: Optional[str] = None,
        item_id: Optional[str] = None,
        action: Optional[str] = None,
        search: str = "",
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        sort_by: str = "timestamp_desc",
    ) -> Optional[Dict[str, Any]]:
        params = _drop_empty(
            {
                "page": page,
                "limit": limit,
                "type": type,
                "itemId": item_id,
                "action": action,
                "search": search,
                "fromDate": from_date,
                "toDate": to_date,
                "sortBy": sort_by,
            }
        )
        body = await self._latest("recycle-history", self._request("GET", "/api/admin/recycle-history", params=params))
        if body is None:
            return None
        return {
            "items": body.get("data") or [],
            "pagination": body.get("pagination") or dict(_EMPTY_PAGINATION),
        }

    async def restore_items(self, type: str, ids: Iterable[Any]) -> Dict[str, Any]:
        payload = {"type": _clean_type(type), "ids": _clean_ids(ids, "restore_items")}
        return await self._request("POST", "/api/admin/recycle-bin/restore", json=payload)

    async def hard_delete_items(self, type: str, ids: Iterable[Any]) -> Dict[str, Any]:
        payload = {"type": _clean_type(type), "ids": _clean_ids(ids, "hard_delete_items")}
        return await self._request("DELETE", "/api/admin/recycle-bin/hard-delete", json=payload)

    async def close(self) -> None:
        """Cancel every in-flight list request and release the connection pool."""
        pending = list(self._inflight.values())
        self._inflight.clear()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self._client.aclose()
