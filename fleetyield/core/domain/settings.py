from datetime import datetime

from pydantic import BaseModel, Field

from fleetyield.core.domain.errors import InvalidSettings


class SystemSettings(BaseModel):
    """
    Tunable business coefficients used by pricing and cost calculations.
    """
    fuel_price_per_liter: float = Field(default=50.00, description="Fuel price per liter")
    peak_hours_coefficient: float = Field(default=1.20, description="Multiplier for peak departure hours")
    weekend_coefficient: float = Field(default=1.15, description="Multiplier for Saturday and Sunday")
    high_demand_threshold: int = Field(default=85, description="Occupancy % at which demand is high")
    low_demand_threshold: int = Field(default=30, description="Occupancy % below which demand is low")
    price_min_coefficient: float = Field(default=0.70, description="Price floor as a fraction of base price")
    price_max_coefficient: float = Field(default=1.50, description="Price ceiling as a fraction of base price")
    seasonal_coefficients: dict[str, float] = Field(
        default_factory=lambda: {"new_year": 1.30, "summer": 1.15, "regular": 1.00},
        description="Season name -> price multiplier",
    )

    updated_at: datetime | None = None
    updated_by: int | None = None


DEFAULT_SETTINGS = SystemSettings()


def validate_settings(settings: SystemSettings) -> None:
    """
    Check every coefficient against its allowed range.

    Raises:
        InvalidSettings: naming the first violated constraint
    """
    if not 10 <= settings.fuel_price_per_liter <= 200:
        raise InvalidSettings("fuel price must be between 10 and 200")

    if not 0.5 <= settings.peak_hours_coefficient <= 3.0:
        raise InvalidSettings("peak hours coefficient must be between 0.5 and 3.0")

    if not 0.5 <= settings.weekend_coefficient <= 3.0:
        raise InvalidSettings("weekend coefficient must be between 0.5 and 3.0")

    if settings.high_demand_threshold <= settings.low_demand_threshold:
        raise InvalidSettings("high demand threshold must be greater than low demand threshold")

    if not 0 <= settings.low_demand_threshold <= 100:
        raise InvalidSettings("low demand threshold must be between 0 and 100")

    if not 0 <= settings.high_demand_threshold <= 100:
        raise InvalidSettings("high demand threshold must be between 0 and 100")

    if not 0 < settings.price_min_coefficient <= 1.0:
        raise InvalidSettings("price min coefficient must be greater than 0 and at most 1.0")

    if not 1.0 <= settings.price_max_coefficient <= 5.0:
        raise InvalidSettings("price max coefficient must be between 1.0 and 5.0")

    if settings.price_min_coefficient >= settings.price_max_coefficient:
        raise InvalidSettings("price min coefficient must be less than price max coefficient")

    for season, coeff in settings.seasonal_coefficients.items():
        if not 0.5 <= coeff <= 3.0:
            raise InvalidSettings(f"seasonal coefficient for {season} must be between 0.5 and 3.0")
