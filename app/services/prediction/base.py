"""
Prediction Service Abstract Base Class

Defines the contract for the external analytics/ML collaborator.
Both the HTTP client and the mock implement a single operation:

    predict(payload) -> PredictionResult

Two endpoints exist on the ML side:
    - recommend: {"orders": [item names]} -> {"recommended_food": ...}
    - forecast:  {"days": [int], "sales": [number]} -> {"next_7_days_forecast": [...]}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class PredictionResult:
    """
    Standardized result from a prediction call.

    Attributes:
        success: Whether the service answered with a usable payload
        data: Decoded JSON body returned by the service
        error_message: Error description if the call failed
        error_code: Machine-readable error code
        provider: Name of the implementation that answered
        response_time_ms: Round-trip time
    """
    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    provider: str = "unknown"
    response_time_ms: float = 0.0


class BasePredictionService(ABC):
    """
    Abstract base class for prediction services.

    Implementations never raise on transport or service failures; they
    return ``PredictionResult(success=False, ...)`` so callers can degrade.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g. "mock", "http")."""
        pass

    @abstractmethod
    async def predict(self, payload: dict[str, Any]) -> PredictionResult:
        """
        Send a payload to the model and return its answer.

        Args:
            payload: JSON-serializable request body

        Returns:
            PredictionResult: Standardized result object
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check that the service is reachable."""
        pass
