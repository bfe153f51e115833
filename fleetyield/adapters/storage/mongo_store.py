"""
MongoDB Store Adapter - Motor-backed implementation of the storage ports.

Collections:
- routes:                 {_id, origin_city, destination_city, distance_km, base_price,
                           fuel_cost_per_km, driver_cost_per_trip}
- buses:                  {_id, capacity, fuel_consumption_per_100km}
- trips:                  {_id, route_id, bus_id, scheduled_departure, status}
- passenger_events:       {trip_id, event_type ("board" | "alight"), device_local_id,
                           passenger_count_after, timestamp}
- price_recommendations:  append-only
- trip_analytics:         one document per trip_id
- demand_forecasts:       one document per (route_id, forecast_date)
- system_settings:        single document with _id "current"
"""

import logging
from datetime import date, datetime, time, timedelta, timezone

from motor.motor_asyncio import AsyncIOMotorClient

from fleetyield.common.numeric import round_half_up
from fleetyield.config.schema import MongoSettings
from fleetyield.core.domain.analytics import RouteRef, TripAnalytics, TripCostInputs
from fleetyield.core.domain.errors import MissingUpstreamData
from fleetyield.core.domain.forecast import ForecastResult
from fleetyield.core.domain.pricing import PriceRecommendation
from fleetyield.core.domain.settings import SystemSettings
from fleetyield.core.ports.analytics_store import AnalyticsStore
from fleetyield.core.ports.history import HistoricalDataProvider
from fleetyield.core.ports.settings_provider import SettingsProvider
from fleetyield.core.ports.trip_data import TripDataProvider

logger = logging.getLogger(__name__)

SETTINGS_ID = "current"
UNKNOWN_ROUTE_NAME = "Unknown route"


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _route_name(route: dict) -> str:
    return f"{route.get('origin_city', '?')} - {route.get('destination_city', '?')}"


class MongoAnalyticsStore(AnalyticsStore, HistoricalDataProvider, TripDataProvider, SettingsProvider):
    """
    MongoDB-backed implementation of every storage collaborator of the engine.
    """

    def __init__(self, settings: MongoSettings):
        self.settings = settings
        self.client = AsyncIOMotorClient(settings.url, tz_aware=True)
        self.db = self.client[settings.db_name]

    # --- HistoricalDataProvider ---

    async def get_historical_passengers(self, route_id: int, day_of_week: int, weeks: int) -> list[int]:
        """
        Mean analytics passengers per week of completed trips on the weekday.

        Weeks without completed, analysed trips contribute no entry.
        """
        today = datetime.now(timezone.utc).date()
        start = _midnight(today - timedelta(weeks=weeks))
        end = _midnight(today)

        trips = {}
        cursor = self.db["trips"].find({
            "route_id": route_id,
            "status": "completed",
            "scheduled_departure": {"$gte": start, "$lt": end},
        })
        async for doc in cursor:
            departure = _as_utc(doc["scheduled_departure"])
            if departure.isoweekday() % 7 != day_of_week:
                continue
            days_ago = (today - departure.date()).days
            trips[doc["_id"]] = (days_ago + 6) // 7  # week index, 1 = most recent

        if not trips:
            return []

        per_week: dict[int, list[int]] = {}
        async for doc in self.db["trip_analytics"].find({"trip_id": {"$in": list(trips)}}):
            week = trips[doc["trip_id"]]
            per_week.setdefault(week, []).append(doc["total_passengers"])

        return [
            round_half_up(sum(per_week[week]) / len(per_week[week]))
            for week in sorted(per_week)
            if 1 <= week <= weeks
        ]

    # --- TripDataProvider ---

    async def _get_or_raise(self, collection: str, entity: str, entity_id: int) -> dict:
        doc = await self.db[collection].find_one({"_id": entity_id})
        if not doc:
            raise MissingUpstreamData(entity, entity_id)
        return doc

    async def get_trip_cost_inputs(self, trip_id: int) -> TripCostInputs:
        trip = await self._get_or_raise("trips", "trip", trip_id)
        route = await self._get_or_raise("routes", "route", trip["route_id"])
        bus = await self._get_or_raise("buses", "bus", trip["bus_id"])

        events = self.db["passenger_events"]
        boarded_ids = await events.distinct(
            "device_local_id",
            {"trip_id": trip_id, "event_type": "board", "device_local_id": {"$ne": None}},
        )
        boarded = len(boarded_ids)

        max_passengers = 0
        async for row in events.aggregate([
            {"$match": {"trip_id": trip_id}},
            {"$group": {"_id": None, "max": {"$max": "$passenger_count_after"}}},
        ]):
            max_passengers = row["max"] or 0

        revenue = None
        async for row in self.db["price_recommendations"].aggregate([
            {"$match": {"trip_id": trip_id}},
            {"$group": {"_id": None, "total": {"$sum": "$recommended_price"}}},
        ]):
            revenue = float(row["total"])
        if revenue is None:
            revenue = float(route["base_price"]) * boarded

        return TripCostInputs(
            trip_id=trip_id,
            capacity=bus["capacity"],
            fuel_consumption_per_100km=bus["fuel_consumption_per_100km"],
            distance_km=route["distance_km"],
            fuel_cost_per_km=route["fuel_cost_per_km"],
            driver_cost_per_trip=route["driver_cost_per_trip"],
            total_passengers=boarded,
            max_passengers=max_passengers,
            revenue=revenue,
        )

    async def route_for_trip(self, trip_id: int) -> RouteRef | None:
        trip = await self.db["trips"].find_one({"_id": trip_id})
        if not trip:
            return None

        route = await self.db["routes"].find_one({"_id": trip["route_id"]})
        name = _route_name(route) if route else UNKNOWN_ROUTE_NAME
        return RouteRef(route_id=trip["route_id"], route_name=name)

    async def get_route(self, route_id: int) -> RouteRef | None:
        route = await self.db["routes"].find_one({"_id": route_id})
        if not route:
            return None
        return RouteRef(route_id=route_id, route_name=_route_name(route))

    async def count_active_trips(self) -> int:
        return await self.db["trips"].count_documents({"status": "in_progress"})

    # --- AnalyticsStore ---

    async def upsert_forecast(self, forecast: ForecastResult) -> ForecastResult:
        stored = forecast.model_copy(update={"created_at": datetime.now(timezone.utc)})
        data = stored.model_dump()
        data["forecast_date"] = _midnight(stored.forecast_date)

        # Upsert based on (route_id, forecast_date)
        await self.db["demand_forecasts"].replace_one(
            {"route_id": stored.route_id, "forecast_date": data["forecast_date"]},
            data,
            upsert=True
        )
        return stored

    async def get_forecasts(self, route_id: int, start: date, end: date) -> list[ForecastResult]:
        cursor = self.db["demand_forecasts"].find({
            "route_id": route_id,
            "forecast_date": {"$gte": _midnight(start), "$lte": _midnight(end)},
        }).sort("forecast_date", 1)

        forecasts = []
        async for doc in cursor:
            doc.pop("_id", None)
            doc["forecast_date"] = _as_utc(doc["forecast_date"]).date()
            forecasts.append(ForecastResult(**doc))
        return forecasts

    async def upsert_trip_analytics(self, analytics: TripAnalytics) -> TripAnalytics:
        await self.db["trip_analytics"].replace_one(
            {"trip_id": analytics.trip_id},
            analytics.model_dump(),
            upsert=True
        )
        return analytics

    async def get_trip_analytics(self, trip_id: int) -> TripAnalytics | None:
        doc = await self.db["trip_analytics"].find_one({"trip_id": trip_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return TripAnalytics(**doc)

    async def list_trip_analytics(
        self,
        start: datetime,
        end: datetime,
        route_id: int | None = None,
    ) -> list[TripAnalytics]:
        query = {"scheduled_departure": {"$gte": start, "$lte": end}}
        if route_id is not None:
            query["route_id"] = route_id

        trip_ids = []
        async for doc in self.db["trips"].find(query, {"_id": 1}).sort("scheduled_departure", -1):
            trip_ids.append(doc["_id"])
        if not trip_ids:
            return []

        found = {}
        async for doc in self.db["trip_analytics"].find({"trip_id": {"$in": trip_ids}}):
            doc.pop("_id", None)
            found[doc["trip_id"]] = TripAnalytics(**doc)

        return [found[trip_id] for trip_id in trip_ids if trip_id in found]

    async def append_price_recommendation(self, recommendation: PriceRecommendation) -> None:
        await self.db["price_recommendations"].insert_one(recommendation.model_dump())

    # --- SettingsProvider ---

    async def get_settings(self) -> SystemSettings | None:
        doc = await self.db["system_settings"].find_one({"_id": SETTINGS_ID})
        if not doc:
            return None
        doc.pop("_id", None)
        return SystemSettings(**doc)

    async def save_settings(self, settings: SystemSettings) -> None:
        await self.db["system_settings"].replace_one(
            {"_id": SETTINGS_ID},
            settings.model_dump(),
            upsert=True
        )
