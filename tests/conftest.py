"""
Shared fixtures for FleetYield tests.
"""
import pytest

from fleetyield.core.domain.analytics import TripAnalytics, TripCostInputs
from fleetyield.core.domain.settings import SystemSettings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )


@pytest.fixture
def default_settings():
    return SystemSettings()


@pytest.fixture
def cost_inputs():
    """A 480 km trip with a 50-seat bus."""
    return TripCostInputs(
        trip_id=17,
        capacity=50,
        fuel_consumption_per_100km=25.0,
        distance_km=480.1,
        fuel_cost_per_km=10.0,
        driver_cost_per_trip=800.0,
        total_passengers=52,
        max_passengers=45,
        revenue=3550.0,
    )


def make_analytics(trip_id, revenue, costs, passengers=10, occupancy=50.0):
    """Build a TripAnalytics whose whole cost is driver cost."""
    profit = revenue - costs
    percent = profit / costs * 100 if costs > 0 else 0.0
    return TripAnalytics(
        trip_id=trip_id,
        total_passengers=passengers,
        max_passengers=passengers,
        avg_occupancy_rate=occupancy,
        revenue=revenue,
        fuel_cost=0.0,
        driver_cost=costs,
        profit=profit,
        profitability_percent=percent,
    )


@pytest.fixture
def analytics_factory():
    return make_analytics
