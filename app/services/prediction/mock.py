"""
Mock Prediction Service Implementations

Stand-ins for the ML service in development mode (ENV_MODE=development):
    - MockRecommendationService echoes back previously ordered items
    - MockForecastService projects the mean of recent sales over 7 days

Answers have the same shape as the real service so the degrade paths
and response shaping can be exercised without the ML server.
"""

import logging
from decimal import Decimal
from typing import Any

from app.services.prediction.base import BasePredictionService, PredictionResult

logger = logging.getLogger(__name__)


class MockRecommendationService(BasePredictionService):
    """Recommends the customer's own order history, most frequent first."""

    def __init__(self):
        logger.info("MockRecommendationService initialized")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def predict(self, payload: dict[str, Any]) -> PredictionResult:
        orders = payload.get("orders") or []
        if not orders:
            return PredictionResult(
                success=False,
                error_message="Orders must be a non-empty array",
                error_code="invalid_payload",
                provider=self.provider_name,
            )

        # Stable de-duplication
        recommended = list(dict.fromkeys(str(o) for o in orders))
        return PredictionResult(
            success=True,
            data={"recommended_food": recommended},
            provider=self.provider_name,
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True


class MockForecastService(BasePredictionService):
    """Flat forecast: next 7 days at the mean of the given sales."""

    HORIZON_DAYS = 7

    def __init__(self):
        logger.info("MockForecastService initialized")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def predict(self, payload: dict[str, Any]) -> PredictionResult:
        sales = payload.get("sales") or []
        if not sales:
            return PredictionResult(
                success=False,
                error_message="Sales must be a non-empty array",
                error_code="invalid_payload",
                provider=self.provider_name,
            )

        mean = sum(Decimal(str(s)) for s in sales) / len(sales)
        value = float(round(mean, 2))
        return PredictionResult(
            success=True,
            data={"next_7_days_forecast": [value] * self.HORIZON_DAYS},
            provider=self.provider_name,
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
