"""AI food estimation client.

Sends a free-text meal description to the estimation service and maps the
outcome onto three result variants:

- EstimateSuccess: items to review in the confirmation flow
- EstimateRetryableError: transient failure (timeout, network, rate limit, 5xx)
- EstimateNeedsManualEntry: the service cannot help (4xx, empty or unparseable reply)

Cancelling the awaiting task cancels the request; asyncio.CancelledError is
never converted into a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from justwalk.config.settings import Settings
from justwalk.config.settings import settings as default_settings
from justwalk.food.models import FoodEstimate


@dataclass(frozen=True)
class EstimateSuccess:
    estimate: FoodEstimate


@dataclass(frozen=True)
class EstimateRetryableError:
    code: str
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class EstimateNeedsManualEntry:
    code: str
    message: str
    status_code: int | None = None


EstimateResult = EstimateSuccess | EstimateRetryableError | EstimateNeedsManualEntry


class FoodEstimationClient:
    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or default_settings
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.settings.food_estimation_timeout_seconds)
            self._owns_client = True
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.food_estimation_api_key:
            headers["Authorization"] = f"Bearer {self.settings.food_estimation_api_key}"
        return headers

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def estimate(self, description: str) -> EstimateResult:
        """Estimate calories and macros for a meal description."""
        text = description.strip()
        if not text:
            return EstimateNeedsManualEntry("EMPTY_DESCRIPTION", "Describe the meal to get an estimate")

        url = self.settings.food_estimation_url
        logger.debug(f"Food estimate request: url={url}, chars={len(text)}")

        try:
            response = await self._get_client().post(url, json={"description": text}, headers=self._headers())
        except httpx.TimeoutException as e:
            logger.warning(f"Food estimate timed out: {e}")
            return EstimateRetryableError("TIMEOUT", "The estimate took too long")
        except httpx.TransportError as e:
            logger.warning(f"Food estimate network error: {e}")
            return EstimateRetryableError("NETWORK_ERROR", "Network unavailable")

        return self._interpret(response)

    def _interpret(self, response: httpx.Response) -> EstimateResult:
        status = response.status_code
        if status == 429:
            logger.warning("Food estimate rate limited")
            return EstimateRetryableError("RATE_LIMITED", "Too many requests, try again shortly", status)
        if status >= 500:
            logger.warning(f"Food estimate server error: status={status}")
            return EstimateRetryableError("SERVER_ERROR", "Estimation service unavailable", status)
        if status >= 400:
            logger.error(f"Food estimate rejected: status={status}, body={response.text[:200]}")
            return EstimateNeedsManualEntry("HTTP_ERROR", "Estimate unavailable, enter the meal manually", status)

        try:
            payload: Any = response.json()
            estimate = FoodEstimate.model_validate(payload)
        except (ValueError, ValidationError) as e:
            logger.error(f"Food estimate response could not be parsed: {e}")
            return EstimateNeedsManualEntry("PARSE_ERROR", "Could not read the estimate, enter the meal manually", status)

        if not estimate.items:
            return EstimateNeedsManualEntry("NO_CONTENT", "No foods recognised, enter the meal manually", status)

        logger.info(f"Food estimate: {len(estimate.items)} item(s), {estimate.totals.calories} kcal")
        return EstimateSuccess(estimate)
