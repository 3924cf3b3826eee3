"""HTTP client for the flow backend.

Uses aiohttp.ClientSession. Requests are one-shot: no retry, no
cancellation. A failed call raises and the caller decides what to tell
the operator.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from ctaflow.core.errors import BackendError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://your-api.example.com"


class FlowBackend(Protocol):
    """What the builder needs from the backend."""

    async def fetch_flow(self, flow_id: str) -> dict[str, Any]: ...

    async def save_flow(self, payload: dict[str, Any]) -> Any: ...


def normalize_base_url(url: str) -> str:
    """Make sure the base URL ends in exactly one ``/api``.

    Example:
        >>> normalize_base_url("https://crm.example.com/")
        'https://crm.example.com/api'
        >>> normalize_base_url("https://crm.example.com/api")
        'https://crm.example.com/api'
    """
    trimmed = url.strip().rstrip("/")
    return trimmed if trimmed.endswith("/api") else f"{trimmed}/api"


@dataclass
class FlowClientConfig:
    """Configuration for FlowClient."""

    base_url: str = DEFAULT_BASE_URL
    token: str | None = None

    # Timeouts (seconds)
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> FlowClientConfig:
        """Build a config from environment variables.

        CTAFLOW_API_BASE_URL, CTAFLOW_API_TOKEN, CTAFLOW_CONNECT_TIMEOUT,
        CTAFLOW_READ_TIMEOUT.
        """
        return cls(
            base_url=os.environ.get("CTAFLOW_API_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            token=os.environ.get("CTAFLOW_API_TOKEN") or None,
            connect_timeout=float(os.environ.get("CTAFLOW_CONNECT_TIMEOUT", "10")),
            read_timeout=float(os.environ.get("CTAFLOW_READ_TIMEOUT", "30")),
        )

    @property
    def api_url(self) -> str:
        return normalize_base_url(self.base_url)


class FlowClient:
    """Backend client for CTA flows.

    Example:
        >>> async with FlowClient(FlowClientConfig(base_url="https://crm.example.com")) as client:
        ...     document = await client.fetch_flow("flow-42")
    """

    def __init__(self, config: FlowClientConfig | None = None) -> None:
        self.config = config or FlowClientConfig()
        self._session: aiohttp.ClientSession | None = None

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._session is not None:
            return
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        timeout = aiohttp.ClientTimeout(
            connect=self.config.connect_timeout,
            total=self.config.read_timeout,
        )
        self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)
        logger.debug("flow client connected to %s", self.config.api_url)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> FlowClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if self._session is None:
            await self.connect()
        assert self._session is not None

        url = f"{self.config.api_url}{path}"
        async with self._session.request(method, url, **kwargs) as response:
            if response.status >= 400:
                body = await response.text()
                logger.warning("%s %s failed: status=%d", method, path, response.status)
                raise BackendError(
                    f"{method} {path} failed with status {response.status}",
                    status_code=response.status,
                    response_body=body,
                )
            if response.status == 204 or response.content_length == 0:
                return None
            return await response.json(content_type=None)

    async def fetch_flow(self, flow_id: str) -> dict[str, Any]:
        """Fetch one flow document by id."""
        return await self._request("GET", f"/cta-flow/by-id/{flow_id}")

    async def save_flow(self, payload: dict[str, Any]) -> Any:
        """Create or overwrite a flow. Last write wins."""
        return await self._request("POST", "/cta-flow/save-visual", json=payload)

    async def list_flows(self, published: bool = False) -> list[dict[str, Any]]:
        """List draft or published flows.

        Args:
            published: List published flows instead of drafts.

        Returns:
            Flow summaries. A single-object response is wrapped in a list.
        """
        path = "/cta-flow/all-published" if published else "/cta-flow/all-draft"
        data = await self._request("GET", path)
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    async def delete_flow(self, flow_id: str) -> None:
        """Delete a flow."""
        await self._request("DELETE", f"/cta-flow/delete/{flow_id}")
