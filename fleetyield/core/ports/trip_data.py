"""
TripDataProvider Port - Interface for trip, route and telemetry lookups.

Implementations assemble cost inputs by joining trip, route, bus,
passenger event and price recommendation records.
"""

from abc import ABC, abstractmethod

from fleetyield.core.domain.analytics import RouteRef, TripCostInputs


class TripDataProvider(ABC):

    @abstractmethod
    async def get_trip_cost_inputs(self, trip_id: int) -> TripCostInputs:
        """
        Get the aggregated cost inputs of a trip.

        Revenue is the sum of submitted price recommendations for the trip,
        or base price times boarded passengers when none were submitted.

        Raises:
            MissingUpstreamData: if the trip, its route or its bus is unknown
        """
        ...

    @abstractmethod
    async def route_for_trip(self, trip_id: int) -> RouteRef | None:
        """Get the route a trip runs on, None if unknown."""
        ...

    @abstractmethod
    async def get_route(self, route_id: int) -> RouteRef | None:
        """Get a route by id, None if unknown."""
        ...

    @abstractmethod
    async def count_active_trips(self) -> int:
        """Count trips currently in progress."""
        ...
