import pytest
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import MagicMock, AsyncMock, patch

from fleetyield.adapters.storage.mongo_store import MongoAnalyticsStore
from fleetyield.config.schema import MongoSettings
from fleetyield.core.domain.errors import MissingUpstreamData
from fleetyield.core.domain.forecast import ForecastResult


class AsyncCursor:
    """Stands in for a motor cursor: iterable with `async for`, chainable sort."""

    def __init__(self, docs):
        self.docs = list(docs)

    def sort(self, *args, **kwargs):
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield doc


@pytest.fixture
def mock_settings():
    return MongoSettings(url="mongodb://test:27017", db_name="test_db")


@pytest.fixture
def collections():
    with patch("fleetyield.adapters.storage.mongo_store.AsyncIOMotorClient") as client_cls:
        client = client_cls.return_value
        db = client.__getitem__.return_value  # client["db"]
        by_name = defaultdict(MagicMock)
        db.__getitem__.side_effect = lambda name: by_name[name]
        yield by_name


def _trip_documents(collections):
    collections["trips"].find_one = AsyncMock(return_value={"_id": 17, "route_id": 3, "bus_id": 9})
    collections["routes"].find_one = AsyncMock(return_value={
        "_id": 3,
        "origin_city": "Kharkiv",
        "destination_city": "Kyiv",
        "distance_km": 480.1,
        "base_price": 400.0,
        "fuel_cost_per_km": 10.0,
        "driver_cost_per_trip": 800.0,
    })
    collections["buses"].find_one = AsyncMock(return_value={
        "_id": 9, "capacity": 50, "fuel_consumption_per_100km": 25.0,
    })
    events = collections["passenger_events"]
    events.distinct = AsyncMock(return_value=["a1", "b2", "c3"])
    events.aggregate = MagicMock(return_value=AsyncCursor([{"_id": None, "max": 3}]))


def test_client_options(mock_settings):
    with patch("fleetyield.adapters.storage.mongo_store.AsyncIOMotorClient") as client_cls:
        MongoAnalyticsStore(mock_settings)

    client_cls.assert_called_once_with("mongodb://test:27017", tz_aware=True)
    client_cls.return_value.__getitem__.assert_called_with("test_db")


@pytest.mark.asyncio
async def test_upsert_forecast(mock_settings, collections):
    forecasts = collections["demand_forecasts"]
    forecasts.replace_one = AsyncMock()

    forecast = ForecastResult(
        route_id=3,
        forecast_date=date(2025, 10, 14),
        day_of_week=2,
        predicted_passengers=50,
        confidence_lower=45,
        confidence_upper=56,
        trend_coefficient=1.3,
        season_coefficient=1.0,
        algorithm="moving_average_4w_trend_seasonality",
    )

    store = MongoAnalyticsStore(mock_settings)
    stored = await store.upsert_forecast(forecast)

    assert stored.created_at is not None
    args, kwargs = forecasts.replace_one.call_args
    midnight = datetime(2025, 10, 14, tzinfo=timezone.utc)
    assert args[0] == {"route_id": 3, "forecast_date": midnight}
    assert args[1]["forecast_date"] == midnight
    assert args[1]["predicted_passengers"] == 50
    assert kwargs["upsert"] is True


@pytest.mark.asyncio
async def test_get_forecasts(mock_settings, collections):
    collections["demand_forecasts"].find = MagicMock(return_value=AsyncCursor([{
        "_id": "abc",
        "route_id": 3,
        "forecast_date": datetime(2025, 10, 14, tzinfo=timezone.utc),
        "day_of_week": 2,
        "predicted_passengers": 50,
        "confidence_lower": 45,
        "confidence_upper": 56,
        "trend_coefficient": 1.3,
        "season_coefficient": 1.0,
        "algorithm": "moving_average_4w_trend_seasonality",
    }]))

    store = MongoAnalyticsStore(mock_settings)
    forecasts = await store.get_forecasts(3, date(2025, 10, 1), date(2025, 10, 31))

    assert len(forecasts) == 1
    assert forecasts[0].forecast_date == date(2025, 10, 14)


@pytest.mark.asyncio
async def test_trip_cost_inputs_from_price_history(mock_settings, collections):
    _trip_documents(collections)
    collections["price_recommendations"].aggregate = MagicMock(
        return_value=AsyncCursor([{"_id": None, "total": 1050.0}])
    )

    store = MongoAnalyticsStore(mock_settings)
    inputs = await store.get_trip_cost_inputs(17)

    assert inputs.trip_id == 17
    assert inputs.capacity == 50
    assert inputs.distance_km == 480.1
    assert inputs.total_passengers == 3
    assert inputs.max_passengers == 3
    assert inputs.revenue == 1050.0


@pytest.mark.asyncio
async def test_trip_cost_inputs_revenue_fallback(mock_settings, collections):
    _trip_documents(collections)
    collections["price_recommendations"].aggregate = MagicMock(return_value=AsyncCursor([]))

    store = MongoAnalyticsStore(mock_settings)
    inputs = await store.get_trip_cost_inputs(17)

    # base price times boarded passengers
    assert inputs.revenue == 1200.0


@pytest.mark.asyncio
async def test_trip_cost_inputs_missing_trip(mock_settings, collections):
    collections["trips"].find_one = AsyncMock(return_value=None)

    store = MongoAnalyticsStore(mock_settings)
    with pytest.raises(MissingUpstreamData) as exc_info:
        await store.get_trip_cost_inputs(404)

    assert str(exc_info.value) == "trip 404 not found"


@pytest.mark.asyncio
async def test_route_for_trip(mock_settings, collections):
    _trip_documents(collections)

    store = MongoAnalyticsStore(mock_settings)
    route = await store.route_for_trip(17)

    assert route.route_id == 3
    assert route.route_name == "Kharkiv - Kyiv"


@pytest.mark.asyncio
async def test_route_for_unknown_trip(mock_settings, collections):
    collections["trips"].find_one = AsyncMock(return_value=None)

    store = MongoAnalyticsStore(mock_settings)
    assert await store.route_for_trip(404) is None


@pytest.mark.asyncio
async def test_historical_passengers_per_week(mock_settings, collections):
    today = datetime.now(timezone.utc).date()
    noon = time(12, 0, tzinfo=timezone.utc)
    one_week = datetime.combine(today - timedelta(weeks=1), noon)
    two_weeks = datetime.combine(today - timedelta(weeks=2), noon)
    other_day = datetime.combine(today - timedelta(days=8), noon)

    collections["trips"].find = MagicMock(return_value=AsyncCursor([
        {"_id": 1, "scheduled_departure": one_week},
        {"_id": 2, "scheduled_departure": one_week},
        {"_id": 3, "scheduled_departure": two_weeks},
        {"_id": 4, "scheduled_departure": other_day},
    ]))
    collections["trip_analytics"].find = MagicMock(return_value=AsyncCursor([
        {"trip_id": 1, "total_passengers": 30},
        {"trip_id": 2, "total_passengers": 31},
        {"trip_id": 3, "total_passengers": 40},
    ]))

    store = MongoAnalyticsStore(mock_settings)
    series = await store.get_historical_passengers(3, today.isoweekday() % 7, 12)

    # most recent week first; 30.5 rounds half up
    assert series == [31, 40]
    query = collections["trip_analytics"].find.call_args[0][0]
    assert sorted(query["trip_id"]["$in"]) == [1, 2, 3]


@pytest.mark.asyncio
async def test_historical_passengers_without_trips(mock_settings, collections):
    collections["trips"].find = MagicMock(return_value=AsyncCursor([]))

    store = MongoAnalyticsStore(mock_settings)
    assert await store.get_historical_passengers(3, 2, 12) == []


@pytest.mark.asyncio
async def test_list_trip_analytics_keeps_departure_order(mock_settings, collections):
    collections["trips"].find = MagicMock(return_value=AsyncCursor([{"_id": 5}, {"_id": 4}, {"_id": 3}]))
    collections["trip_analytics"].find = MagicMock(return_value=AsyncCursor([
        {"_id": "x", "trip_id": 3, "total_passengers": 1, "max_passengers": 1, "avg_occupancy_rate": 2.0,
         "revenue": 100.0, "fuel_cost": 10.0, "driver_cost": 10.0, "profit": 80.0,
         "profitability_percent": 400.0},
        {"_id": "y", "trip_id": 5, "total_passengers": 2, "max_passengers": 2, "avg_occupancy_rate": 4.0,
         "revenue": 200.0, "fuel_cost": 10.0, "driver_cost": 10.0, "profit": 180.0,
         "profitability_percent": 900.0},
    ]))

    store = MongoAnalyticsStore(mock_settings)
    start = datetime(2025, 12, 1, tzinfo=timezone.utc)
    end = datetime(2025, 12, 31, tzinfo=timezone.utc)
    analytics = await store.list_trip_analytics(start, end, route_id=3)

    assert [a.trip_id for a in analytics] == [5, 3]
    query = collections["trips"].find.call_args[0][0]
    assert query["route_id"] == 3


@pytest.mark.asyncio
async def test_get_settings_not_found(mock_settings, collections):
    collections["system_settings"].find_one = AsyncMock(return_value=None)

    store = MongoAnalyticsStore(mock_settings)
    assert await store.get_settings() is None


@pytest.mark.asyncio
async def test_get_settings_found(mock_settings, collections):
    collections["system_settings"].find_one = AsyncMock(return_value={
        "_id": "current",
        "fuel_price_per_liter": 55.0,
        "peak_hours_coefficient": 1.3,
    })

    store = MongoAnalyticsStore(mock_settings)
    settings = await store.get_settings()

    assert settings.fuel_price_per_liter == 55.0
    assert settings.peak_hours_coefficient == 1.3
    assert settings.weekend_coefficient == 1.15
    collections["system_settings"].find_one.assert_called_with({"_id": "current"})


@pytest.mark.asyncio
async def test_save_settings(mock_settings, collections, default_settings):
    collections["system_settings"].replace_one = AsyncMock()

    store = MongoAnalyticsStore(mock_settings)
    await store.save_settings(default_settings)

    args, kwargs = collections["system_settings"].replace_one.call_args
    assert args[0] == {"_id": "current"}
    assert args[1]["fuel_price_per_liter"] == 50.0
    assert kwargs["upsert"] is True
