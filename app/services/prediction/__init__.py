"""
Prediction Service Factory

Provides the entry points for obtaining prediction clients.
Automatically selects Mock or HTTP implementations based on ENV_MODE.

Usage:
    from app.services.prediction import get_forecast_service

    service = get_forecast_service()
    result = await service.predict({"days": [1, 2, 3], "sales": [40, 52, 47]})

Routes receive these through FastAPI ``Depends`` so tests can swap them
with ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.prediction.base import BasePredictionService, PredictionResult
from app.services.prediction.http import HttpPredictionService
from app.services.prediction.mock import MockForecastService, MockRecommendationService

logger = logging.getLogger(__name__)

RECOMMEND_PATH = "/recommend_ml"
FORECAST_PATH = "/forecast"


@lru_cache()
def get_recommendation_service() -> BasePredictionService:
    """Get the configured recommendation client."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Recommendation Service: Using MockRecommendationService (development mode)")
        return MockRecommendationService()

    logger.info(f"Recommendation Service: Using HttpPredictionService ({settings.env_mode.value} mode)")
    return HttpPredictionService(
        settings.ml_service_url,
        RECOMMEND_PATH,
        timeout=settings.ml_timeout_seconds,
    )


@lru_cache()
def get_forecast_service() -> BasePredictionService:
    """Get the configured forecast client."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Forecast Service: Using MockForecastService (development mode)")
        return MockForecastService()

    logger.info(f"Forecast Service: Using HttpPredictionService ({settings.env_mode.value} mode)")
    return HttpPredictionService(
        settings.ml_service_url,
        FORECAST_PATH,
        timeout=settings.ml_timeout_seconds,
    )


def reset_prediction_services() -> None:
    """
    Clear the cached client instances.

    Useful for testing or when configuration changes at runtime.
    """
    get_recommendation_service.cache_clear()
    get_forecast_service.cache_clear()
    logger.debug("Prediction service cache cleared")


__all__ = [
    "get_recommendation_service",
    "get_forecast_service",
    "reset_prediction_services",
    "BasePredictionService",
    "PredictionResult",
    "HttpPredictionService",
    "MockRecommendationService",
    "MockForecastService",
]
