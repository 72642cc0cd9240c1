from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..domain.errors import BackendError, BackendUnavailableError
from ..utils.request_id import REQUEST_ID_HEADER, get_request_id

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin JSON client for the booking backend."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        clean_params = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        headers = {}
        request_id = get_request_id()
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id
        try:
            response = await self.http.request(method, path, params=clean_params, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("backend %s %s timed out", method, path)
            raise BackendUnavailableError(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            logger.error("backend %s %s failed: %s", method, path, exc)
            raise BackendUnavailableError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("backend %s %s returned %s: %s", method, path, response.status_code, message)
            raise BackendError(response.status_code, message)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(response.status_code, "response is not valid JSON") from exc

    async def get(self, path: str, **params: Any) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, payload: Any) -> Any:
        return await self.request("POST", path, json=payload)

    async def put(self, path: str, payload: Any) -> Any:
        return await self.request("PUT", path, json=payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


def unwrap(payload: Any, *keys: str) -> Any:
    """Strip the backend's response envelope.

    Endpoints answer with ``{"success": ..., "data": ...}``, a resource-named
    key such as ``{"bookings": [...]}``, or the bare value; ``keys`` lists the
    resource-named keys to try before ``data``.
    """
    if isinstance(payload, dict):
        for key in (*keys, "data"):
            if key in payload and payload[key] is not None:
                return payload[key]
    return payload
