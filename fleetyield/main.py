"""
FleetYield command-line entry point.

    fleetyield forecast --route-id 3 --date 2025-12-15
    fleetyield price --base-price 200 --passengers 45 --capacity 50 --departure 2025-12-15T08:00
    fleetyield trip-analytics --trip-id 17 --recompute
    fleetyield profitability --from 2025-12-01 --to 2025-12-31
    fleetyield dashboard
    fleetyield settings [--validate-file settings.yaml]
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime

from fleetyield.adapters.config.settings_loader import load_config
from fleetyield.adapters.config.yaml_store import YamlSettingsProvider
from fleetyield.adapters.storage.mongo_store import MongoAnalyticsStore
from fleetyield.config.schema import AppConfig
from fleetyield.core.domain.errors import EngineError
from fleetyield.core.services.analytics_service import AnalyticsService
from fleetyield.core.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


def build_service(config: AppConfig) -> tuple[AnalyticsService, SettingsService]:
    """Instantiate adapters from configuration and wire the services."""
    store = MongoAnalyticsStore(config.mongo)

    if config.settings_store == "mongo":
        provider = store
    else:
        provider = YamlSettingsProvider(config.settings_file)

    audit = None
    if config.kafka.enabled:
        from fleetyield.adapters.messaging.kafka_audit import KafkaAuditPublisher
        audit = KafkaAuditPublisher(config.kafka)

    settings_service = SettingsService(provider, audit=audit)
    service = AnalyticsService(
        history=store,
        trips=store,
        store=store,
        settings=settings_service,
        audit=audit,
        historical_weeks=config.engine.historical_weeks,
        forecast_window=config.engine.forecast_window,
        trend_window=config.engine.trend_window,
        default_capacity=config.engine.default_capacity,
    )
    return service, settings_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fleetyield", description="Demand and revenue analytics engine")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    forecast = sub.add_parser("forecast", help="Forecast demand of a route")
    forecast.add_argument("--route-id", type=int, required=True)
    forecast.add_argument("--date", type=date.fromisoformat, default=None, help="YYYY-MM-DD, default tomorrow")

    forecasts = sub.add_parser("forecasts", help="List stored forecasts of a route")
    forecasts.add_argument("--route-id", type=int, required=True)
    forecasts.add_argument("--from", dest="start", type=date.fromisoformat, required=True)
    forecasts.add_argument("--to", dest="end", type=date.fromisoformat, required=True)

    price = sub.add_parser("price", help="Calculate a recommended price")
    price.add_argument("--base-price", type=float, required=True)
    price.add_argument("--passengers", type=int, required=True)
    price.add_argument("--capacity", type=int, required=True)
    price.add_argument("--departure", type=datetime.fromisoformat, required=True)
    price.add_argument("--trip-id", type=int, default=None, help="Store the recommendation for this trip")

    trip = sub.add_parser("trip-analytics", help="Show or recompute trip profitability")
    trip.add_argument("--trip-id", type=int, required=True)
    trip.add_argument("--recompute", action="store_true")

    profit = sub.add_parser("profitability", help="Profitability report for a period")
    profit.add_argument("--from", dest="start", type=date.fromisoformat, required=True)
    profit.add_argument("--to", dest="end", type=date.fromisoformat, required=True)
    profit.add_argument("--route-id", type=int, default=None)

    sub.add_parser("dashboard", help="Headline figures for the last 7 days")

    settings = sub.add_parser("settings", help="Show current settings")
    settings.add_argument("--validate-file", default=None, help="Validate a settings YAML file and exit")

    return parser


async def run_command(args: argparse.Namespace, service: AnalyticsService, settings_service: SettingsService):
    if args.command == "forecast":
        return await service.forecast_demand(args.route_id, args.date)
    if args.command == "forecasts":
        return await service.get_forecasts(args.route_id, args.start, args.end)
    if args.command == "price":
        if args.trip_id is not None:
            return await service.submit_price(
                args.trip_id, args.base_price, args.passengers, args.capacity, args.departure
            )
        return await service.calculate_price(args.base_price, args.passengers, args.capacity, args.departure)
    if args.command == "trip-analytics":
        if args.recompute:
            return await service.calculate_trip_analytics(args.trip_id)
        return await service.get_trip_analytics(args.trip_id)
    if args.command == "profitability":
        return await service.get_profitability(args.start, args.end, args.route_id)
    if args.command == "dashboard":
        return await service.get_dashboard()
    if args.command == "settings":
        if args.validate_file:
            candidate = await YamlSettingsProvider(args.validate_file).get_settings()
            if candidate is None:
                raise EngineError(f"no settings found in {args.validate_file}")
            settings_service.validate_settings(candidate)
            return candidate
        return await settings_service.get_settings()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    logging.basicConfig(level=config.log_level.upper())

    service, settings_service = build_service(config)
    try:
        result = asyncio.run(run_command(args, service, settings_service))
    except EngineError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        if service.audit is not None:
            service.audit.close()

    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
