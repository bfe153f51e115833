"""
Trip Profitability Calculator - Cost model and profitability of a single trip.

    fuel_cost   = distance_km * fuel_consumption_per_100km / 100 * fuel_cost_per_km
    driver_cost = driver_cost_per_trip
    other_costs = sum of registered cost contributors (none by default)
    profit      = revenue - (fuel_cost + driver_cost + other_costs)
"""

import logging
from datetime import datetime, timezone
from typing import Callable, NamedTuple

from fleetyield.common.numeric import clamp
from fleetyield.core.domain.analytics import TripAnalytics, TripCostInputs

logger = logging.getLogger(__name__)

# Storage is DECIMAL(6,2); values beyond it saturate.
PROFITABILITY_MIN = -9999.99
PROFITABILITY_MAX = 9999.99


class CostContributor(NamedTuple):
    """A named extra cost category (depreciation, insurance, tolls...)."""

    name: str
    compute: Callable[[TripCostInputs], float]


def fuel_cost(inputs: TripCostInputs) -> float:
    return inputs.distance_km * inputs.fuel_consumption_per_100km / 100 * inputs.fuel_cost_per_km


def profitability_percent(profit: float, total_costs: float) -> float:
    if total_costs <= 0:
        return 0.0
    return clamp(profit / total_costs * 100, PROFITABILITY_MIN, PROFITABILITY_MAX)


def occupancy_percent(passengers: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return passengers / capacity * 100


class TripProfitabilityCalculator:
    """
    Stateless calculator; identical inputs give identical results apart
    from `calculated_at`.
    """

    def __init__(self, contributors: list[CostContributor] | None = None):
        """
        Args:
            contributors: Extra cost categories summed into other_costs
        """
        self.contributors = list(contributors or [])

    def calculate(self, inputs: TripCostInputs, now: datetime | None = None) -> TripAnalytics:
        fuel = fuel_cost(inputs)
        driver = inputs.driver_cost_per_trip

        breakdown = {c.name: float(c.compute(inputs)) for c in self.contributors}
        other = sum(breakdown.values(), 0.0)

        total_costs = fuel + driver + other
        profit = inputs.revenue - total_costs
        percent = profitability_percent(profit, total_costs)

        if total_costs > 0 and percent in (PROFITABILITY_MIN, PROFITABILITY_MAX):
            logger.warning(f"Profitability of trip {inputs.trip_id} saturated at {percent}%")

        return TripAnalytics(
            trip_id=inputs.trip_id,
            total_passengers=inputs.total_passengers,
            max_passengers=inputs.max_passengers,
            avg_occupancy_rate=occupancy_percent(inputs.max_passengers, inputs.capacity),
            revenue=inputs.revenue,
            fuel_cost=fuel,
            driver_cost=driver,
            other_costs=other,
            cost_breakdown=breakdown,
            profit=profit,
            profitability_percent=percent,
            calculated_at=now or datetime.now(timezone.utc),
        )
