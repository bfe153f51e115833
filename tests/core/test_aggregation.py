"""
Tests for the Profitability Aggregator.
"""
import pytest

from fleetyield.core.domain.analytics import RouteRef
from fleetyield.core.domain.errors import MissingUpstreamData
from fleetyield.core.services.aggregation import ProfitabilityAggregator, categorize_profitability

KHARKIV_KYIV = RouteRef(route_id=1, route_name="Kharkiv - Kyiv")
LVIV_ODESA = RouteRef(route_id=2, route_name="Lviv - Odesa")


@pytest.fixture
def aggregator():
    return ProfitabilityAggregator()


@pytest.fixture
def trips(analytics_factory):
    return [
        analytics_factory(1, revenue=200.0, costs=100.0, passengers=20, occupancy=80.0),
        analytics_factory(2, revenue=100.0, costs=300.0, passengers=5, occupancy=20.0),
        analytics_factory(3, revenue=900.0, costs=500.0, passengers=40, occupancy=90.0),
        analytics_factory(4, revenue=50.0, costs=40.0, passengers=3, occupancy=10.0),
    ]


ROUTES = {1: KHARKIV_KYIV, 2: KHARKIV_KYIV, 3: LVIV_ODESA}


def test_route_profitability_is_cost_weighted(aggregator, trips):
    report = aggregator.aggregate(trips[:2], ROUTES.get)

    route = report.by_route[0]
    assert route.route_id == 1
    assert route.route_name == "Kharkiv - Kyiv"
    assert route.trips_count == 2
    assert route.total_passengers == 25
    assert route.revenue == 300.0
    assert route.costs == 400.0
    assert route.profit == -100.0
    # mean of trip percentages would be +16.7%
    assert route.profitability_percent == pytest.approx(-25.0)
    assert route.category == "unprofitable"
    assert route.avg_occupancy == pytest.approx(50.0)


def test_unknown_route_counts_only_in_summary(aggregator, trips):
    report = aggregator.aggregate(trips, ROUTES.get)

    assert report.summary.total_trips == 4
    assert report.summary.total_passengers == 68
    assert report.summary.total_revenue == 1250.0
    assert report.summary.total_costs == 940.0
    assert report.summary.total_profit == 310.0
    assert report.summary.profitability_percent == pytest.approx(310.0 / 940.0 * 100)
    assert report.summary.avg_occupancy == pytest.approx(50.0)

    assert [r.route_id for r in report.by_route] == [1, 2]
    assert sum(r.trips_count for r in report.by_route) == 3


def test_lookup_errors_are_skipped(aggregator, trips):
    def lookup(trip_id):
        if trip_id == 3:
            raise MissingUpstreamData("trip", trip_id)
        return ROUTES.get(trip_id)

    report = aggregator.aggregate(trips, lookup)

    assert report.summary.total_trips == 4
    assert [r.route_id for r in report.by_route] == [1]


def test_route_profits_add_up_to_summary(aggregator, trips):
    routes = {1: KHARKIV_KYIV, 2: LVIV_ODESA, 3: KHARKIV_KYIV, 4: LVIV_ODESA}
    report = aggregator.aggregate(trips, routes.get)

    assert report.summary.total_profit == pytest.approx(sum(t.profit for t in trips))
    assert sum(r.profit for r in report.by_route) == pytest.approx(report.summary.total_profit)


def test_zero_cost_route(aggregator, analytics_factory):
    report = aggregator.aggregate([analytics_factory(1, revenue=10.0, costs=0.0)], ROUTES.get)

    assert report.by_route[0].profitability_percent == 0.0
    assert report.by_route[0].category == "low_profit"
    assert report.summary.profitability_percent == 0.0


def test_empty_input(aggregator):
    report = aggregator.aggregate([], ROUTES.get)

    assert report.summary.total_trips == 0
    assert report.by_route == []


@pytest.mark.parametrize("profitability,category", [
    (-0.01, "unprofitable"),
    (0.0, "low_profit"),
    (19.99, "low_profit"),
    (20.0, "normal"),
    (49.99, "normal"),
    (50.0, "high_profit"),
    (9999.99, "high_profit"),
])
def test_categorize_profitability(profitability, category):
    assert categorize_profitability(profitability) == category


def test_dashboard(aggregator, trips):
    data = aggregator.dashboard(trips, active_trips=3)

    assert data.active_trips == 3
    assert data.total_passengers == 68
    assert data.total_profit == 310.0
    assert data.profitable_trips == 3
    assert data.unprofitable_trips == 1
    # 100%, -66.7%, 80%, 25%
    assert data.avg_profitability == pytest.approx((100.0 - 200.0 / 3 + 80.0 + 25.0) / 4)
    assert data.trips_by_category == {"high_profit": 2, "unprofitable": 1, "normal": 1}


def test_dashboard_without_analytics(aggregator):
    data = aggregator.dashboard([], active_trips=2)

    assert data.active_trips == 2
    assert data.total_revenue == 0.0
    assert data.trips_by_category == {}
