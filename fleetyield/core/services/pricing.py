"""
Pricing Calculator - Dynamic ticket price from occupancy, time, day and season.

    recommended = base * K_demand * K_time * K_day

clamped to [base * price_min_coefficient, base * price_max_coefficient] and
rounded to the nearest multiple of 5 currency units (half rounds up).
"""

import logging
import math
from datetime import datetime

from fleetyield.common.numeric import clamp, round_to_multiple
from fleetyield.core.domain.pricing import PriceRecommendation
from fleetyield.core.domain.settings import SystemSettings
from fleetyield.core.services.forecaster import is_new_year_window, is_summer

logger = logging.getLogger(__name__)

# --- Policy constants ---
ROUNDING_UNIT = 5.0

DEMAND_LOW = 0.75  # occupancy < low threshold
DEMAND_MODERATE = 0.95  # occupancy < MODERATE_OCCUPANCY
DEMAND_HIGH = 1.10  # occupancy < high threshold
DEMAND_CRITICAL = 1.40  # occupancy >= high threshold
MODERATE_OCCUPANCY = 60.0

PEAK_HOURS = ((7, 9), (17, 19))  # inclusive hour ranges
NIGHT_START_HOUR = 23
NIGHT_END_HOUR = 6
NIGHT_COEFFICIENT = 0.80
REGULAR_TIME_COEFFICIENT = 1.00

WEEKDAY_COEFFICIENT = 1.00
DEFAULT_SEASON_COEFFICIENT = 1.00
BOUND_PRECISION = 6  # decimals kept on clamp bounds

# (threshold, label); first match wins
CATEGORY_DISCOUNT = ((-20.0, "very_low"), (-10.0, "low"))
CATEGORY_MARKUP = ((30.0, "very_high"), (15.0, "high"))

RECOMMENDATION_MARKUP = (
    (20.0, "Price increase due to high occupancy and peak hours"),
    (10.0, "Moderate price increase due to elevated demand"),
)
RECOMMENDATION_DISCOUNT = (
    (-15.0, "Significant discount to stimulate demand"),
    (-5.0, "Small discount due to low occupancy"),
)
RECOMMENDATION_DEFAULT = "Standard price matches current demand"


def occupancy_rate(current_passengers: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return current_passengers / capacity * 100


def demand_coefficient(occupancy: float, low_threshold: int, high_threshold: int) -> float:
    if occupancy < low_threshold:
        return DEMAND_LOW
    if occupancy < MODERATE_OCCUPANCY:
        return DEMAND_MODERATE
    if occupancy < high_threshold:
        return DEMAND_HIGH
    return DEMAND_CRITICAL


def time_coefficient(departure_time: datetime, peak_coefficient: float) -> float:
    hour = departure_time.hour
    if any(start <= hour <= end for start, end in PEAK_HOURS):
        return peak_coefficient
    if hour >= NIGHT_START_HOUR or hour <= NIGHT_END_HOUR:
        return NIGHT_COEFFICIENT
    return REGULAR_TIME_COEFFICIENT


def season_name(departure_time: datetime) -> str:
    if is_new_year_window(departure_time):
        return "new_year"
    if is_summer(departure_time):
        return "summer"
    return "regular"


def day_coefficient(departure_time: datetime, weekend_coefficient: float, seasonal: dict[str, float]) -> float:
    # weekday(): Saturday = 5, Sunday = 6
    base = weekend_coefficient if departure_time.weekday() >= 5 else WEEKDAY_COEFFICIENT
    return base * seasonal.get(season_name(departure_time), DEFAULT_SEASON_COEFFICIENT)


def apply_price_bounds(base_price: float, raw_price: float, min_coeff: float, max_coeff: float) -> float:
    """
    Clamp to the allowed band and round to the rounding unit.

    A rounded price that leaves the band is moved to the nearest multiple of
    the unit inside it; if the band holds no multiple, rounding wins.
    """
    lower = round(base_price * min_coeff, BOUND_PRECISION)
    upper = round(base_price * max_coeff, BOUND_PRECISION)

    price = round_to_multiple(clamp(raw_price, lower, upper), ROUNDING_UNIT)
    if price < lower:
        inside = math.ceil(lower / ROUNDING_UNIT) * ROUNDING_UNIT
        if inside <= upper:
            price = inside
    elif price > upper:
        inside = math.floor(upper / ROUNDING_UNIT) * ROUNDING_UNIT
        if inside >= lower:
            price = inside
    return float(price)


def price_category(change_percent: float) -> str:
    for threshold, label in CATEGORY_DISCOUNT:
        if change_percent <= threshold:
            return label
    for threshold, label in CATEGORY_MARKUP:
        if change_percent >= threshold:
            return label
    return "normal"


def price_recommendation_text(change_percent: float, occupancy: float) -> str:
    for threshold, text in RECOMMENDATION_MARKUP:
        if change_percent >= threshold:
            return text
    for threshold, text in RECOMMENDATION_DISCOUNT:
        if change_percent <= threshold:
            return text
    return RECOMMENDATION_DEFAULT


class PricingCalculator:
    """
    Stateless price calculator. The settings passed in are treated as a
    single snapshot for the whole calculation.
    """

    def calculate_price(
        self,
        base_price: float,
        current_passengers: int,
        capacity: int,
        departure_time: datetime,
        settings: SystemSettings,
    ) -> PriceRecommendation:
        occupancy = occupancy_rate(current_passengers, capacity)
        demand = demand_coefficient(occupancy, settings.low_demand_threshold, settings.high_demand_threshold)
        time_coeff = time_coefficient(departure_time, settings.peak_hours_coefficient)
        day_coeff = day_coefficient(departure_time, settings.weekend_coefficient, settings.seasonal_coefficients)

        recommended = self.calculate_price_with_coefficients(
            base_price,
            demand,
            time_coeff,
            day_coeff,
            settings.price_min_coefficient,
            settings.price_max_coefficient,
        )

        change = recommended - base_price
        change_percent = change / base_price * 100 if base_price > 0 else 0.0

        logger.debug(
            f"Price {base_price} -> {recommended} (occupancy={occupancy:.1f}%, "
            f"demand={demand}, time={time_coeff}, day={day_coeff})"
        )

        return PriceRecommendation(
            base_price=base_price,
            recommended_price=recommended,
            occupancy_rate=occupancy,
            demand_coefficient=demand,
            time_coefficient=time_coeff,
            day_coefficient=day_coeff,
            price_change=change,
            price_change_percent=change_percent,
            category=price_category(change_percent),
            recommendation=price_recommendation_text(change_percent, occupancy),
        )

    def calculate_price_with_coefficients(
        self,
        base_price: float,
        demand_coeff: float,
        time_coeff: float,
        day_coeff: float,
        min_coeff: float,
        max_coeff: float,
    ) -> float:
        """Apply explicit coefficients to a base price, then clamp and round."""
        raw = base_price * demand_coeff * time_coeff * day_coeff
        return apply_price_bounds(base_price, raw, min_coeff, max_coeff)
