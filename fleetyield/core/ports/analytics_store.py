"""
AnalyticsStore Port - Interface for persisting engine outputs.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime

from fleetyield.core.domain.analytics import TripAnalytics
from fleetyield.core.domain.forecast import ForecastResult
from fleetyield.core.domain.pricing import PriceRecommendation


class AnalyticsStore(ABC):
    """
    Abstract storage for forecasts, trip analytics and price recommendations.

    Upserts must be single-record atomic writes so concurrent recomputation
    of the same key never interleaves partial documents.
    """

    @abstractmethod
    async def upsert_forecast(self, forecast: ForecastResult) -> ForecastResult:
        """
        Insert or replace the forecast keyed by (route_id, forecast_date).

        Returns:
            The stored forecast with a refreshed created_at
        """
        ...

    @abstractmethod
    async def get_forecasts(self, route_id: int, start: date, end: date) -> list[ForecastResult]:
        """
        Get stored forecasts of a route with start <= forecast_date <= end.

        Returns:
            Forecasts ordered by date
        """
        ...

    @abstractmethod
    async def upsert_trip_analytics(self, analytics: TripAnalytics) -> TripAnalytics:
        """
        Insert or replace the analytics keyed by trip_id.

        Returns:
            The stored analytics
        """
        ...

    @abstractmethod
    async def get_trip_analytics(self, trip_id: int) -> TripAnalytics | None:
        ...

    @abstractmethod
    async def list_trip_analytics(
        self,
        start: datetime,
        end: datetime,
        route_id: int | None = None,
    ) -> list[TripAnalytics]:
        """
        Get analytics of trips scheduled to depart between start and end.

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive)
            route_id: Restrict to a single route if given
        """
        ...

    @abstractmethod
    async def append_price_recommendation(self, recommendation: PriceRecommendation) -> None:
        """Append an immutable price recommendation record."""
        ...
