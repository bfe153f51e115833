"""
Forecast Domain Models - Demand forecast results for a route and date.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class ForecastResult(BaseModel):
    """
    Point forecast with a 95% confidence band for one route on one date.

    Stored keyed by (route_id, forecast_date); a later computation for the
    same key replaces the earlier one.
    """

    route_id: int
    forecast_date: date
    day_of_week: int  # 0 = Sunday .. 6 = Saturday
    predicted_passengers: int
    confidence_lower: int
    confidence_upper: int
    trend_coefficient: float
    season_coefficient: float
    algorithm: str
    actual_passengers: int | None = None
    created_at: datetime | None = None


class CapacityRecommendation(BaseModel):
    """Operational hint derived from a forecast and a bus capacity."""

    action: str
    details: str


class ForecastResponse(BaseModel):
    """Forecast enriched for presentation."""

    forecast: ForecastResult
    day_name: str
    recommendation: CapacityRecommendation


class ForecastsResponse(BaseModel):
    """Stored forecasts of a route over a date window."""

    route_id: int
    forecasts: list[ForecastResult] = Field(default_factory=list)
