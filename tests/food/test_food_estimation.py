import asyncio
import json

import httpx
import pytest

from justwalk.config.settings import Settings
from justwalk.food.estimation import (
    EstimateNeedsManualEntry,
    EstimateRetryableError,
    EstimateSuccess,
    FoodEstimationClient,
)
from justwalk.food.models import FoodEstimate, FoodItem, recalculate_totals

ESTIMATE_URL = "https://food.example.test/estimate"

SAMPLE_PAYLOAD = {
    "items": [
        {"name": "Scrambled eggs", "quantity": "2 large", "calories": 182, "protein_g": 12.2, "carbs_g": 2.0, "fat_g": 13.4, "confidence": "high"},
        {"name": "Whole wheat toast", "quantity": "1 slice", "calories": 81, "protein_g": 4.0, "carbs_g": 13.8, "fat_g": 1.1},
    ],
    "notes": "Butter not included",
}


@pytest.fixture
def food_settings() -> Settings:
    return Settings(
        food_estimation_url=ESTIMATE_URL,
        food_estimation_api_key="test-key",
        food_estimation_timeout_seconds=5.0,
    )


def _client(food_settings: Settings, handler) -> FoodEstimationClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FoodEstimationClient(food_settings, client=http_client)


@pytest.mark.asyncio
async def test_estimate_success(food_settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SAMPLE_PAYLOAD)

    client = _client(food_settings, handler)
    result = await client.estimate("  2 eggs and a slice of toast ")

    assert isinstance(result, EstimateSuccess)
    assert [item.name for item in result.estimate.items] == ["Scrambled eggs", "Whole wheat toast"]
    assert result.estimate.totals.calories == 263
    assert result.estimate.totals.protein_g == 16.2

    request = seen[0]
    assert str(request.url) == ESTIMATE_URL
    assert request.headers["Authorization"] == "Bearer test-key"
    assert json.loads(request.content) == {"description": "2 eggs and a slice of toast"}


@pytest.mark.asyncio
async def test_empty_description_needs_manual_entry(food_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    result = await _client(food_settings, handler).estimate("   ")

    assert isinstance(result, EstimateNeedsManualEntry)
    assert result.code == "EMPTY_DESCRIPTION"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "code"),
    [(429, "RATE_LIMITED"), (500, "SERVER_ERROR"), (503, "SERVER_ERROR")],
)
async def test_retryable_statuses(food_settings, status, code):
    result = await _client(food_settings, lambda request: httpx.Response(status)).estimate("banana")

    assert isinstance(result, EstimateRetryableError)
    assert result.code == code
    assert result.status_code == status


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 422])
async def test_client_errors_need_manual_entry(food_settings, status):
    result = await _client(food_settings, lambda request: httpx.Response(status, text="bad")).estimate("banana")

    assert isinstance(result, EstimateNeedsManualEntry)
    assert result.code == "HTTP_ERROR"
    assert result.status_code == status


@pytest.mark.asyncio
async def test_timeout_is_retryable(food_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = await _client(food_settings, handler).estimate("banana")

    assert isinstance(result, EstimateRetryableError)
    assert result.code == "TIMEOUT"


@pytest.mark.asyncio
async def test_network_error_is_retryable(food_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _client(food_settings, handler).estimate("banana")

    assert isinstance(result, EstimateRetryableError)
    assert result.code == "NETWORK_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "code"),
    [
        (httpx.Response(200, text="not json"), "PARSE_ERROR"),
        (httpx.Response(200, json={"items": [{"name": "soup", "calories": -10}]}), "PARSE_ERROR"),
        (httpx.Response(200, json={"items": []}), "NO_CONTENT"),
    ],
)
async def test_unusable_payload_needs_manual_entry(food_settings, response, code):
    result = await _client(food_settings, lambda request: response).estimate("soup")

    assert isinstance(result, EstimateNeedsManualEntry)
    assert result.code == code


@pytest.mark.asyncio
async def test_cancellation_propagates(food_settings):
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200, json=SAMPLE_PAYLOAD)

    client = _client(food_settings, handler)
    task = asyncio.create_task(client.estimate("banana"))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open(food_settings):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    client = FoodEstimationClient(food_settings, client=http_client)

    await client.aclose()

    assert not http_client.is_closed
    await http_client.aclose()


def test_edit_and_remove_items_recalculate_totals():
    estimate = FoodEstimate.model_validate(SAMPLE_PAYLOAD)

    edited = estimate.replace_item(1, FoodItem(name="Rye toast", calories=100, protein_g=3.5))
    trimmed = edited.remove_item(0)

    assert edited.totals.calories == 282
    assert [item.name for item in trimmed.items] == ["Rye toast"]
    assert trimmed.totals.calories == 100
    assert estimate.totals.calories == 263


def test_recalculate_totals_rounds_macros():
    items = [
        FoodItem(name="a", calories=10, protein_g=0.15, carbs_g=0.11),
        FoodItem(name="b", calories=20, protein_g=0.15, carbs_g=0.11),
    ]

    totals = recalculate_totals(items)

    assert totals.calories == 30
    assert totals.protein_g == 0.3
    assert totals.carbs_g == 0.2
