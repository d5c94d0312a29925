"""Spoonacular food API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from nextrep.errors import NextRepError


class SpoonacularClient(Protocol):
    """Interface for Spoonacular API interactions."""

    async def search_recipes(self, query: str, number: int) -> dict[str, object]:
        """Search recipes by name and return raw API data."""

    async def get_food_information(self, food_id: int) -> dict[str, object]:
        """Fetch a food by id and return raw API data."""


@dataclass
class HttpxSpoonacularClient(SpoonacularClient):
    """HTTPX-backed Spoonacular client."""

    api_key: str | None
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, api_key: str | None, base_url: str) -> "HttpxSpoonacularClient":
        """Create a client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_recipes(self, query: str, number: int) -> dict[str, object]:
        """Search recipes by name, including their nutrition."""
        response = await self.http_client.get(
            f"{self.base_url}/recipes/complexSearch",
            params={
                "apiKey": self._require_key(),
                "query": query,
                "number": number,
                "addRecipeInformation": "true",
                "addRecipeNutrition": "true",
                "fillIngredients": "false",
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_food_information(self, food_id: int) -> dict[str, object]:
        """Fetch a food's information and nutrition."""
        response = await self.http_client.get(
            f"{self.base_url}/food/{food_id}/information",
            params={"apiKey": self._require_key()},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _require_key(self) -> str:
        if not self.api_key:
            raise NextRepError("Spoonacular API key not configured", status_code=500)
        return self.api_key
