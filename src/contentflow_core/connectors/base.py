"""Shared HTTP plumbing for vendor connectors."""
import logging
from typing import Any, Optional

import httpx

from ..errors import RemoteCallError


def error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable detail from a vendor error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message") or str(error)
        return body.get("message") or body.get("error_description") or error or str(body)
    return str(body)


class BaseConnector:
    """Owns one httpx.AsyncClient and converts vendor failures into RemoteCallError."""

    logger = logging.getLogger("contentflow-core.connectors")

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _request(
        self,
        method: str,
        url: str,
        action: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one vendor call.

        Raises:
            RemoteCallError: "Failed to <action>: <detail>" on HTTP or network failure
        """
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = error_detail(e.response)
            self.logger.error(f"Failed to {action}: {e.response.status_code} {e.request.method} {e.request.url}: {detail}")
            raise RemoteCallError(f"Failed to {action}: {detail}", e.response.status_code) from e
        except httpx.RequestError as e:
            self.logger.error(f"Failed to {action}: {type(e).__name__}: {e}")
            raise RemoteCallError(f"Failed to {action}: {type(e).__name__}: {e}") from e
        return response

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Optional[BaseException]) -> None:
        await self.aclose()
