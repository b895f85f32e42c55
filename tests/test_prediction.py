import json

import httpx
import pytest

from app.services.prediction import (
    HttpPredictionService,
    MockForecastService,
    MockRecommendationService,
    get_forecast_service,
    get_recommendation_service,
    reset_prediction_services,
)


def service_with(handler) -> HttpPredictionService:
    return HttpPredictionService(
        "http://ml.local/",
        "/forecast",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("slow", request=request)


def refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("refused", request=request)


async def test_http_service_posts_json_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"next_7_days_forecast": [1, 2, 3]})

    result = await service_with(handler).predict({"days": [1, 2], "sales": [10.0, 12.5]})

    assert result.success
    assert result.provider == "http"
    assert result.data == {"next_7_days_forecast": [1, 2, 3]}
    assert seen == {"url": "http://ml.local/forecast", "body": {"days": [1, 2], "sales": [10.0, 12.5]}}


@pytest.mark.parametrize(
    "handler, code",
    [
        (timeout, "timeout"),
        (refused, "transport_error"),
        (lambda request: httpx.Response(503, json={"detail": "down"}), "bad_status"),
        (lambda request: httpx.Response(200, content=b"<html>oops</html>"), "invalid_response"),
        (lambda request: httpx.Response(200, json=["not", "an", "object"]), "invalid_response"),
    ],
)
async def test_http_service_reports_failures(handler, code):
    result = await service_with(handler).predict({"orders": ["Kottu"]})

    assert not result.success
    assert result.error_code == code
    assert result.error_message


async def test_http_health_check():
    healthy = service_with(lambda request: httpx.Response(200, json={"ok": True}))
    broken = service_with(refused)

    assert await healthy.health_check() is True
    assert await broken.health_check() is False


async def test_mock_services_answer_like_the_real_one():
    recommend = await MockRecommendationService().predict({"orders": ["Kottu", "Tea", "Kottu"]})
    forecast = await MockForecastService().predict({"days": [1, 2], "sales": [100, 200]})
    empty = await MockForecastService().predict({"days": [], "sales": []})

    assert recommend.data == {"recommended_food": ["Kottu", "Tea"]}
    assert forecast.data == {"next_7_days_forecast": [150.0] * 7}
    assert not empty.success


def test_factory_uses_mocks_in_development():
    reset_prediction_services()

    assert isinstance(get_recommendation_service(), MockRecommendationService)
    assert isinstance(get_forecast_service(), MockForecastService)
    assert get_forecast_service() is get_forecast_service()

    reset_prediction_services()
