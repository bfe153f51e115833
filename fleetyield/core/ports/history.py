"""
HistoricalDataProvider Port - Interface for weekly passenger history.
"""

from abc import ABC, abstractmethod


class HistoricalDataProvider(ABC):
    """
    Abstract source of historical weekly passenger totals.
    """

    @abstractmethod
    async def get_historical_passengers(
        self,
        route_id: int,
        day_of_week: int,
        weeks: int,
    ) -> list[int]:
        """
        Get passenger totals of a route on a weekday for recent weeks.

        Args:
            route_id: Route identifier
            day_of_week: 0 = Sunday .. 6 = Saturday
            weeks: Maximum number of weeks to return

        Returns:
            Non-negative totals, most recent week first, length 0..weeks
        """
        ...
