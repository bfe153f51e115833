"""
Analytics Domain Models - Trip profitability and its rollups.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TripCostInputs(BaseModel):
    """Aggregated telemetry and cost parameters of a single trip."""

    trip_id: int
    capacity: int
    fuel_consumption_per_100km: float
    distance_km: float
    fuel_cost_per_km: float
    driver_cost_per_trip: float
    total_passengers: int  # distinct boarded passengers
    max_passengers: int  # max simultaneous passengers observed
    revenue: float


class TripAnalytics(BaseModel):
    """
    Cost, revenue and profitability of one trip.

    At most one record per trip; recomputation overwrites it.
    """

    trip_id: int
    total_passengers: int
    max_passengers: int
    avg_occupancy_rate: float
    revenue: float
    fuel_cost: float
    driver_cost: float
    other_costs: float = 0.0
    cost_breakdown: dict[str, float] = Field(default_factory=dict)
    profit: float
    profitability_percent: float
    calculated_at: datetime | None = None

    @property
    def total_costs(self) -> float:
        return self.fuel_cost + self.driver_cost + self.other_costs


class RouteRef(BaseModel):
    """Route identity resolved for a trip."""

    route_id: int
    route_name: str


class ProfitabilitySummary(BaseModel):
    """Totals over every trip in a period."""

    total_trips: int = 0
    total_passengers: int = 0
    total_revenue: float = 0.0
    total_costs: float = 0.0
    total_profit: float = 0.0
    profitability_percent: float = 0.0
    avg_occupancy: float = 0.0


class RouteProfitability(BaseModel):
    """Totals over the trips of one route."""

    route_id: int
    route_name: str
    trips_count: int = 0
    total_passengers: int = 0
    avg_occupancy: float = 0.0
    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0
    profitability_percent: float = 0.0
    category: str = "unprofitable"


class ProfitabilityReport(BaseModel):
    period_from: str | None = None
    period_to: str | None = None
    summary: ProfitabilitySummary = Field(default_factory=ProfitabilitySummary)
    by_route: list[RouteProfitability] = Field(default_factory=list)


class DashboardData(BaseModel):
    """Headline figures for the operations dashboard."""

    active_trips: int = 0
    total_passengers: int = 0
    total_revenue: float = 0.0
    total_profit: float = 0.0
    avg_occupancy: float = 0.0
    avg_profitability: float = 0.0
    profitable_trips: int = 0
    unprofitable_trips: int = 0
    trips_by_category: dict[str, int] = Field(default_factory=dict)
