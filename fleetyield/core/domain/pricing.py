"""
Pricing Domain Models.
"""

from datetime import datetime

from pydantic import BaseModel


class PriceRecommendation(BaseModel):
    """
    Recommended ticket price with the coefficients that produced it.

    Created fresh on every pricing request. Appended (never updated) when a
    caller submits it for a trip.
    """

    base_price: float
    recommended_price: float
    occupancy_rate: float
    demand_coefficient: float
    time_coefficient: float
    day_coefficient: float
    price_change: float
    price_change_percent: float
    category: str
    recommendation: str

    trip_id: int | None = None
    created_at: datetime | None = None
