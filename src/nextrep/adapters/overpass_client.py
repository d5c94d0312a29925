"""OpenStreetMap Overpass API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class OverpassClient(Protocol):
    """Interface for running Overpass QL queries."""

    async def query(self, overpass_ql: str) -> dict[str, object]:
        """Run a query and return the raw JSON answer."""


@dataclass
class HttpxOverpassClient(OverpassClient):
    """HTTPX-backed Overpass client."""

    url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30

    @classmethod
    def create(cls, url: str, timeout_seconds: float = 30) -> "HttpxOverpassClient":
        """Create a client with a managed httpx session."""
        return cls(
            url=url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def query(self, overpass_ql: str) -> dict[str, object]:
        """POST the query as form data."""
        response = await self.http_client.post(
            self.url,
            data={"data": overpass_ql},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
