"""
HTTP Prediction Service Implementation

Talks to the external ML service over HTTP/JSON.
Used when ENV_MODE=production or ENV_MODE=staging.

Every call is bounded by ML_TIMEOUT_SECONDS; failures are reported in the
result instead of raised.
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from app.services.prediction.base import BasePredictionService, PredictionResult

logger = logging.getLogger(__name__)


class HttpPredictionService(BasePredictionService):
    """
    Client for one ML endpoint.

    Example:
        >>> service = HttpPredictionService("http://127.0.0.1:8000", "/forecast")
        >>> result = await service.predict({"days": [1, 2], "sales": [10, 12]})
        >>> result.data.get("next_7_days_forecast")
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.timeout = timeout
        self._transport = transport

        logger.info(f"HttpPredictionService initialized ({self.url}, timeout={timeout}s)")

    @property
    def provider_name(self) -> str:
        return "http"

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"accept": "application/json"},
        )

    def _failure(self, start_time: datetime, code: str, message: str) -> PredictionResult:
        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        return PredictionResult(
            success=False,
            error_message=message,
            error_code=code,
            provider=self.provider_name,
            response_time_ms=elapsed_ms,
        )

    async def predict(self, payload: dict[str, Any]) -> PredictionResult:
        start_time = datetime.now()
        logger.debug(f"ML: POST {self.url} {payload}")

        try:
            async with self._client() as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException:
            logger.error(f"ML: timeout after {self.timeout}s calling {self.url}")
            return self._failure(start_time, "timeout", "Prediction service timed out")

        except httpx.HTTPStatusError as e:
            logger.error(f"ML: {self.url} answered {e.response.status_code}")
            return self._failure(
                start_time,
                "bad_status",
                f"Prediction service returned {e.response.status_code}",
            )

        except httpx.HTTPError as e:
            logger.error(f"ML: transport error calling {self.url} - {e}")
            return self._failure(start_time, "transport_error", "Unable to reach prediction service")

        except ValueError as e:
            logger.error(f"ML: invalid JSON from {self.url} - {e}")
            return self._failure(start_time, "invalid_response", "Prediction service sent an invalid response")

        if not isinstance(data, dict):
            return self._failure(start_time, "invalid_response", "Prediction service sent an invalid response")

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.info(f"ML: {self.path} answered in {elapsed_ms:.0f}ms")

        return PredictionResult(
            success=True,
            data=data,
            provider=self.provider_name,
            response_time_ms=elapsed_ms,
        )

    async def health_check(self) -> bool:
        try:
            async with self._client() as client:
                response = await client.get(self.base_url + "/")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"ML: Health check failed - {e}")
            return False
