"""
Analytics Service - Request-level orchestration of the analytics engine.

Each operation follows the same cycle:
1. Fetch inputs from collaborators (history, settings snapshot, trip data)
2. Run the pure calculator
3. Persist the result through the store
4. Publish an audit event
"""

import logging
from datetime import date, datetime, time, timedelta, timezone

from fleetyield.core.domain.analytics import DashboardData, ProfitabilityReport, TripAnalytics
from fleetyield.core.domain.audit import AuditEvent
from fleetyield.core.domain.errors import MissingUpstreamData
from fleetyield.core.domain.forecast import ForecastResponse, ForecastsResponse
from fleetyield.core.domain.pricing import PriceRecommendation
from fleetyield.core.ports.analytics_store import AnalyticsStore
from fleetyield.core.ports.audit import AuditPublisher
from fleetyield.core.ports.history import HistoricalDataProvider
from fleetyield.core.ports.trip_data import TripDataProvider
from fleetyield.core.services.aggregation import ProfitabilityAggregator
from fleetyield.core.services.forecaster import (
    DEFAULT_CAPACITY,
    DEFAULT_TREND_WINDOW,
    DEFAULT_WINDOW,
    DemandForecaster,
    capacity_recommendation,
    day_name,
    day_of_week,
)
from fleetyield.core.services.pricing import PricingCalculator
from fleetyield.core.services.profitability import TripProfitabilityCalculator
from fleetyield.core.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

HISTORICAL_WEEKS = 12
DASHBOARD_DAYS = 7


class AnalyticsService:
    """
    Wires the calculators to their collaborators.
    """

    def __init__(
        self,
        history: HistoricalDataProvider,
        trips: TripDataProvider,
        store: AnalyticsStore,
        settings: SettingsService,
        audit: AuditPublisher | None = None,
        profitability: TripProfitabilityCalculator | None = None,
        historical_weeks: int = HISTORICAL_WEEKS,
        forecast_window: int = DEFAULT_WINDOW,
        trend_window: int = DEFAULT_TREND_WINDOW,
        default_capacity: int = DEFAULT_CAPACITY,
    ):
        """
        Initialize the service.

        Args:
            history: Port for weekly passenger history
            trips: Port for trip cost inputs and route lookups
            store: Port to persist engine outputs
            settings: Settings service providing validated snapshots
            audit: Optional audit event sink
            profitability: Calculator with custom cost contributors
        """
        self.history = history
        self.trips = trips
        self.store = store
        self.settings = settings
        self.audit = audit

        self.forecaster = DemandForecaster()
        self.pricing = PricingCalculator()
        self.profitability = profitability or TripProfitabilityCalculator()
        self.aggregator = ProfitabilityAggregator()

        self.historical_weeks = historical_weeks
        self.forecast_window = forecast_window
        self.trend_window = trend_window
        self.default_capacity = default_capacity

    def _publish(self, action: str, entity_type: str, entity_id, values: dict) -> None:
        if self.audit:
            self.audit.publish(AuditEvent(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                new_values=values,
            ))

    async def _require_route(self, route_id: int) -> None:
        if await self.trips.get_route(route_id) is None:
            raise MissingUpstreamData("route", route_id)

    # --- Demand forecast ---

    async def forecast_demand(self, route_id: int, target_date: date | None = None) -> ForecastResponse:
        """
        Forecast and store the demand of a route on a date (default: tomorrow).

        Raises:
            MissingUpstreamData: if the route is unknown
        """
        await self._require_route(route_id)
        target_date = target_date or (datetime.now(timezone.utc).date() + timedelta(days=1))

        series = await self.history.get_historical_passengers(
            route_id, day_of_week(target_date), self.historical_weeks
        )
        logger.info(f"Forecasting route {route_id} for {target_date} from {len(series)} weeks of history")

        result = self.forecaster.forecast(
            route_id,
            target_date,
            series,
            window=self.forecast_window,
            trend_window=self.trend_window,
        )
        stored = await self.store.upsert_forecast(result)
        self._publish("forecast.upsert", "demand_forecast", route_id, stored.model_dump(mode="json"))

        return ForecastResponse(
            forecast=stored,
            day_name=day_name(stored.day_of_week),
            recommendation=capacity_recommendation(stored.predicted_passengers, self.default_capacity),
        )

    async def get_forecasts(self, route_id: int, start: date, end: date) -> ForecastsResponse:
        await self._require_route(route_id)
        forecasts = await self.store.get_forecasts(route_id, start, end)
        return ForecastsResponse(route_id=route_id, forecasts=forecasts)

    # --- Pricing ---

    async def calculate_price(
        self,
        base_price: float,
        current_passengers: int,
        capacity: int,
        departure_time: datetime,
    ) -> PriceRecommendation:
        settings = await self.settings.get_settings()
        return self.pricing.calculate_price(base_price, current_passengers, capacity, departure_time, settings)

    async def submit_price(
        self,
        trip_id: int,
        base_price: float,
        current_passengers: int,
        capacity: int,
        departure_time: datetime,
    ) -> PriceRecommendation:
        """Compute a price for a trip and append it to the price history."""
        recommendation = await self.calculate_price(base_price, current_passengers, capacity, departure_time)
        recommendation = recommendation.model_copy(update={
            "trip_id": trip_id,
            "created_at": datetime.now(timezone.utc),
        })

        await self.store.append_price_recommendation(recommendation)
        logger.info(f"Stored price {recommendation.recommended_price} for trip {trip_id}")
        self._publish(
            "price_recommendation.append", "price_recommendation", trip_id, recommendation.model_dump(mode="json")
        )
        return recommendation

    # --- Trip profitability ---

    async def calculate_trip_analytics(self, trip_id: int) -> TripAnalytics:
        """
        Recompute and store the analytics of a trip, replacing any prior result.

        Raises:
            MissingUpstreamData: if the trip has no cost inputs
        """
        inputs = await self.trips.get_trip_cost_inputs(trip_id)
        analytics = self.profitability.calculate(inputs)

        stored = await self.store.upsert_trip_analytics(analytics)
        logger.info(f"Trip {trip_id} analytics: profit={stored.profit:.2f} ({stored.profitability_percent:.2f}%)")
        self._publish("trip_analytics.upsert", "trip_analytics", trip_id, stored.model_dump(mode="json"))
        return stored

    async def get_trip_analytics(self, trip_id: int) -> TripAnalytics:
        analytics = await self.store.get_trip_analytics(trip_id)
        if analytics is None:
            raise MissingUpstreamData("trip_analytics", trip_id)
        return analytics

    # --- Rollups ---

    async def get_profitability(self, start: date, end: date, route_id: int | None = None) -> ProfitabilityReport:
        window_start = datetime.combine(start, time.min, tzinfo=timezone.utc)
        window_end = datetime.combine(end, time.max, tzinfo=timezone.utc)
        analytics = await self.store.list_trip_analytics(window_start, window_end, route_id)

        routes = {a.trip_id: await self.trips.route_for_trip(a.trip_id) for a in analytics}
        report = self.aggregator.aggregate(analytics, routes.get)
        report.period_from = start.isoformat()
        report.period_to = end.isoformat()
        return report

    async def get_dashboard(self, now: datetime | None = None) -> DashboardData:
        now = now or datetime.now(timezone.utc)
        start = datetime.combine(now.date() - timedelta(days=DASHBOARD_DAYS), time.min, tzinfo=timezone.utc)
        end = now + timedelta(days=1)

        active = await self.trips.count_active_trips()
        analytics = await self.store.list_trip_analytics(start, end)
        return self.aggregator.dashboard(analytics, active)
