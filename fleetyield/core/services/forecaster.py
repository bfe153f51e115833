"""
Demand Forecaster - Moving average with trend and seasonality.

Turns a weekly passenger history (most recent week first) into a point
forecast and a 95% confidence band:

1. Moving average of the most recent `window` weeks
2. Trend coefficient: most recent 4 weeks vs the 4 before, once `trend_window` weeks exist
3. Season coefficient from fixed calendar windows
4. forecast = moving_average * trend * season
5. Confidence band from the population stdev of the most recent weeks
"""

import logging
from datetime import date, datetime

import numpy as np

from fleetyield.common.numeric import clamp, round_half_up
from fleetyield.core.domain.forecast import CapacityRecommendation, ForecastResult

logger = logging.getLogger(__name__)

ALGORITHM = "moving_average_4w_trend_seasonality"

# --- Policy constants ---
DEFAULT_WINDOW = 4
DEFAULT_TREND_WINDOW = 8
FALLBACK_BASE_PASSENGERS = 30.0  # moving average when history is empty
NEUTRAL_TREND = 1.0
TREND_HALF = 4  # weeks on each side of the trend ratio
TREND_MIN = 0.7
TREND_MAX = 1.5
STDEV_WINDOW = 4
MIN_STDEV_POINTS = 2
FALLBACK_STDEV = 5.0
CONFIDENCE_Z = 1.96  # 95% two-sided

SEASON_NEW_YEAR = 1.30  # Dec 25 - Jan 10
SEASON_SPRING_HOLIDAY = 1.25  # Apr 10 - Apr 25
SEASON_SUMMER = 1.15  # Jun - Aug
SEASON_WINTER_BREAK = 1.10  # Jan 11 - Jan 31
SEASON_REGULAR = 1.00

DEFAULT_CAPACITY = 50
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_of_week(target: date) -> int:
    """Weekday number with 0 = Sunday .. 6 = Saturday."""
    return target.isoweekday() % 7


def day_name(dow: int) -> str:
    if 0 <= dow < len(DAY_NAMES):
        return DAY_NAMES[dow]
    return "Unknown"


def is_new_year_window(target: date) -> bool:
    return (target.month == 12 and target.day >= 25) or (target.month == 1 and target.day <= 10)


def is_summer(target: date) -> bool:
    return 6 <= target.month <= 8


def season_coefficient(target: date) -> float:
    """Calendar multiplier, independent of history."""
    if is_new_year_window(target):
        return SEASON_NEW_YEAR
    if target.month == 4 and 10 <= target.day <= 25:
        return SEASON_SPRING_HOLIDAY
    if is_summer(target):
        return SEASON_SUMMER
    if target.month == 1 and 11 <= target.day <= 31:
        return SEASON_WINTER_BREAK
    return SEASON_REGULAR


def moving_average(series: list[int], window: int = DEFAULT_WINDOW) -> float:
    """Mean of the first `window` entries; the fallback base when empty."""
    if window < 1:
        raise ValueError(f"window must be at least 1, got {window}")
    if not series:
        return FALLBACK_BASE_PASSENGERS
    count = min(window, len(series))
    return float(np.mean(series[:count]))


def trend_coefficient(series: list[int], trend_window: int = DEFAULT_TREND_WINDOW) -> float:
    """
    Ratio of the most recent 4 weeks to the 4 before, clamped to [0.7, 1.5].

    `trend_window` only gates how much history is required; neutral below it.
    """
    if len(series) < trend_window:
        return NEUTRAL_TREND

    recent = sum(series[:TREND_HALF])
    previous = sum(series[TREND_HALF:2 * TREND_HALF])
    if previous == 0:
        return NEUTRAL_TREND

    return clamp(recent / previous, TREND_MIN, TREND_MAX)


def std_dev(series: list[int], mean: float) -> float:
    """Population stdev of the most recent weeks around `mean`."""
    if len(series) < MIN_STDEV_POINTS:
        return FALLBACK_STDEV

    count = min(STDEV_WINDOW, len(series))
    points = np.asarray(series[:count], dtype=float)
    return float(np.sqrt(np.mean((points - mean) ** 2)))


def capacity_recommendation(predicted: int, capacity: int = DEFAULT_CAPACITY) -> CapacityRecommendation:
    """Suggest an operational action for the forecast occupancy."""
    occupancy = predicted / capacity if capacity > 0 else 0.0

    if occupancy > 0.95:
        return CapacityRecommendation(action="add_trip", details="Add an extra trip, demand is expected to exceed capacity")
    if occupancy < 0.25:
        return CapacityRecommendation(action="cancel_trip", details="Consider cancelling the trip, demand is expected to be very low")
    if occupancy < 0.40:
        return CapacityRecommendation(action="reduce_price", details="Lower the price to attract passengers")
    if occupancy > 0.80:
        return CapacityRecommendation(action="increase_price", details="A price increase is possible due to high demand")
    return CapacityRecommendation(action="normal", details="Standard occupancy expected")


class DemandForecaster:
    """
    Stateless demand forecaster. Safe to share between concurrent requests.
    """

    algorithm = ALGORITHM

    def forecast(
        self,
        route_id: int,
        target_date: date | datetime,
        historical_series: list[int],
        window: int = DEFAULT_WINDOW,
        trend_window: int = DEFAULT_TREND_WINDOW,
    ) -> ForecastResult:
        """
        Forecast passengers of a route on a target date.

        Args:
            route_id: Route identifier
            target_date: Date to forecast
            historical_series: Weekly totals for the same weekday, most recent first
            window: Weeks in the moving average, at least 1
            trend_window: Weeks needed to compute a trend

        Returns:
            ForecastResult; never raises for empty or short histories

        Raises:
            ValueError: if window is below 1
        """
        if isinstance(target_date, datetime):
            target_date = target_date.date()

        series = list(historical_series)
        if not series:
            logger.warning(
                f"No history for route {route_id}, using fallback base of {FALLBACK_BASE_PASSENGERS:g} passengers"
            )

        avg = moving_average(series, window)
        trend = trend_coefficient(series, trend_window)
        season = season_coefficient(target_date)

        predicted = max(0.0, avg * trend * season)
        spread = CONFIDENCE_Z * std_dev(series, avg)

        return ForecastResult(
            route_id=route_id,
            forecast_date=target_date,
            day_of_week=day_of_week(target_date),
            predicted_passengers=round_half_up(predicted),
            confidence_lower=max(0, round_half_up(predicted - spread)),
            confidence_upper=round_half_up(predicted + spread),
            trend_coefficient=trend,
            season_coefficient=season,
            algorithm=ALGORITHM,
        )
