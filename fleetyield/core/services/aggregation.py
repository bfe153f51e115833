"""
Profitability Aggregator - Rolls per-trip analytics up to routes and periods.

Profitability of a group is recomputed from its summed totals
(total_profit / total_costs * 100), it is not a mean of trip percentages.
"""

import logging
from typing import Callable

import pandas as pd

from fleetyield.core.domain.analytics import (
    DashboardData,
    ProfitabilityReport,
    ProfitabilitySummary,
    RouteProfitability,
    RouteRef,
    TripAnalytics,
)
from fleetyield.core.domain.errors import MissingUpstreamData

logger = logging.getLogger(__name__)

RouteLookup = Callable[[int], RouteRef | None]

# (upper bound exclusive, category); profitability >= last bound is high_profit
PROFITABILITY_CATEGORIES = (
    (0.0, "unprofitable"),
    (20.0, "low_profit"),
    (50.0, "normal"),
)
TOP_CATEGORY = "high_profit"

COLUMNS = ["trip_id", "total_passengers", "avg_occupancy_rate", "revenue", "costs", "profit", "profitability_percent"]


def categorize_profitability(profitability: float) -> str:
    for bound, category in PROFITABILITY_CATEGORIES:
        if profitability < bound:
            return category
    return TOP_CATEGORY


def cost_weighted_profitability(profit: float, costs: float) -> float:
    if costs <= 0:
        return 0.0
    return profit / costs * 100


def _to_frame(analytics: list[TripAnalytics]) -> pd.DataFrame:
    rows = [
        {
            "trip_id": a.trip_id,
            "total_passengers": a.total_passengers,
            "avg_occupancy_rate": a.avg_occupancy_rate,
            "revenue": a.revenue,
            "costs": a.total_costs,
            "profit": a.profit,
            "profitability_percent": a.profitability_percent,
        }
        for a in analytics
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def _resolve_route(lookup: RouteLookup, trip_id: int) -> RouteRef | None:
    try:
        return lookup(trip_id)
    except MissingUpstreamData:
        return None


class ProfitabilityAggregator:
    """
    Stateless rollup of trip analytics.
    """

    def aggregate(self, analytics_list: list[TripAnalytics], trip_to_route_lookup: RouteLookup) -> ProfitabilityReport:
        """
        Build the period summary and the per-route breakdown.

        Args:
            analytics_list: Trip analytics of the period
            trip_to_route_lookup: trip id -> RouteRef, None (or MissingUpstreamData) if unknown

        Returns:
            ProfitabilityReport; trips without a route count only in the summary
        """
        if not analytics_list:
            return ProfitabilityReport()

        df = _to_frame(analytics_list)
        summary = self._summarize(df)

        names: dict[int, str] = {}
        route_ids = []
        for trip_id in df["trip_id"]:
            ref = _resolve_route(trip_to_route_lookup, int(trip_id))
            if ref is None:
                logger.warning(f"No route for trip {trip_id}, excluded from route breakdown")
                route_ids.append(None)
                continue
            names.setdefault(ref.route_id, ref.route_name)
            route_ids.append(ref.route_id)

        df["route_id"] = pd.Series(route_ids, index=df.index, dtype="object")
        routed = df[df["route_id"].notna()]

        return ProfitabilityReport(summary=summary, by_route=self._by_route(routed, names))

    def _summarize(self, df: pd.DataFrame) -> ProfitabilitySummary:
        total_costs = float(df["costs"].sum())
        total_profit = float(df["profit"].sum())
        return ProfitabilitySummary(
            total_trips=int(len(df)),
            total_passengers=int(df["total_passengers"].sum()),
            total_revenue=float(df["revenue"].sum()),
            total_costs=total_costs,
            total_profit=total_profit,
            profitability_percent=cost_weighted_profitability(total_profit, total_costs),
            avg_occupancy=float(df["avg_occupancy_rate"].mean()),
        )

    def _by_route(self, routed: pd.DataFrame, names: dict[int, str]) -> list[RouteProfitability]:
        if routed.empty:
            return []

        grouped = routed.groupby("route_id", sort=True).agg(
            trips_count=("trip_id", "count"),
            total_passengers=("total_passengers", "sum"),
            avg_occupancy=("avg_occupancy_rate", "mean"),
            revenue=("revenue", "sum"),
            costs=("costs", "sum"),
            profit=("profit", "sum"),
        )

        result = []
        for route_id, row in grouped.iterrows():
            percent = cost_weighted_profitability(float(row["profit"]), float(row["costs"]))
            result.append(RouteProfitability(
                route_id=int(route_id),
                route_name=names[route_id],
                trips_count=int(row["trips_count"]),
                total_passengers=int(row["total_passengers"]),
                avg_occupancy=float(row["avg_occupancy"]),
                revenue=float(row["revenue"]),
                costs=float(row["costs"]),
                profit=float(row["profit"]),
                profitability_percent=percent,
                category=categorize_profitability(percent),
            ))
        return result

    def dashboard(self, analytics_list: list[TripAnalytics], active_trips: int = 0) -> DashboardData:
        """
        Headline figures; avg_profitability is the plain mean of trip percentages.
        """
        data = DashboardData(active_trips=active_trips)
        if not analytics_list:
            return data

        df = _to_frame(analytics_list)
        categories = df["profitability_percent"].map(categorize_profitability).value_counts()

        data.total_passengers = int(df["total_passengers"].sum())
        data.total_revenue = float(df["revenue"].sum())
        data.total_profit = float(df["profit"].sum())
        data.avg_occupancy = float(df["avg_occupancy_rate"].mean())
        data.avg_profitability = float(df["profitability_percent"].mean())
        data.profitable_trips = int((df["profitability_percent"] >= 0).sum())
        data.unprofitable_trips = int((df["profitability_percent"] < 0).sum())
        data.trips_by_category = {str(k): int(v) for k, v in categories.items()}
        return data
