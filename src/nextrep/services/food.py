"""Food search backed by Spoonacular."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from nextrep.adapters.spoonacular_client import SpoonacularClient
from nextrep.domain.food import FoodSearchResult, Nutrition
from nextrep.errors import UpstreamServiceError, ValidationError
from nextrep.services.cache import Cache

MAX_RESULTS = 5

_NUTRIENT_NAMES = {
    "calories": "Calories",
    "protein": "Protein",
    "fat": "Fat",
    "carbs": "Carbohydrates",
}

_logger = logging.getLogger(__name__)


@dataclass
class FoodSearchService:
    """Searches foods and their nutrition with caching."""

    client: SpoonacularClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, number: int = MAX_RESULTS
    ) -> list[FoodSearchResult]:
        """Search foods by name; at most five results are returned."""
        cleaned = query.strip()
        if not cleaned:
            raise ValidationError("Search query is required")
        number = max(1, min(number, MAX_RESULTS))
        cache_key = f"spoonacular:search:{cleaned.lower()}:{number}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call(
            lambda: self.client.search_recipes(cleaned, number), action="search"
        )
        results = [
            FoodSearchResult(
                id=int(item["id"]),
                title=str(item.get("title", "")),
                nutrition=_extract_nutrition(item),
                image=str(item.get("image") or ""),
            )
            for item in payload.get("results", [])
        ]
        self.cache.set(cache_key, results, ttl_seconds=self.search_ttl_seconds)
        return results

    async def nutrition(self, food_id: int) -> Nutrition:
        """Return the nutrition of a single food."""
        cache_key = f"spoonacular:food:{food_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, Nutrition):
            return cached

        payload = await self._call(
            lambda: self.client.get_food_information(food_id),
            action=f"food:{food_id}",
        )
        nutrition = _extract_nutrition(payload)
        self.cache.set(cache_key, nutrition, ttl_seconds=self.food_ttl_seconds)
        return nutrition

    async def _call(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Call the provider, retrying transport failures and mapping errors."""
        attempt = 0
        while True:
            try:
                return await func()
            except httpx.HTTPStatusError as exc:
                raise _status_error(exc) from exc
            except httpx.TimeoutException as exc:
                _logger.warning("Spoonacular %s timed out: %s", action, exc)
                raise UpstreamServiceError(
                    "Food search timed out", status_code=504
                ) from exc
            except httpx.TransportError as exc:
                attempt += 1
                _logger.warning(
                    "Spoonacular %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise UpstreamServiceError("Failed to search food") from exc
                await asyncio.sleep(self.retry_delay_seconds)


def _status_error(exc: httpx.HTTPStatusError) -> UpstreamServiceError:
    status = exc.response.status_code
    _logger.warning("Spoonacular answered %s for %s", status, exc.request.url.path)
    if status == httpx.codes.UNAUTHORIZED:
        return UpstreamServiceError("Invalid API key", status_code=401)
    if status == httpx.codes.PAYMENT_REQUIRED:
        return UpstreamServiceError("API quota exceeded", status_code=429)
    if status == httpx.codes.TOO_MANY_REQUESTS:
        return UpstreamServiceError("Rate limit exceeded", status_code=429)
    if status == httpx.codes.NOT_FOUND:
        return UpstreamServiceError("Food not found", status_code=404)
    return UpstreamServiceError(f"API request failed: {status}")


def _extract_nutrition(payload: dict[str, object]) -> Nutrition:
    """Pick calories and macros by nutrient name; missing ones are 0."""
    nutrients = (payload.get("nutrition") or {}).get("nutrients") or []
    amounts = {str(item.get("name")): item.get("amount") for item in nutrients}
    values = {
        key: float(amounts.get(name) or 0.0) for key, name in _NUTRIENT_NAMES.items()
    }
    return Nutrition(**values)
