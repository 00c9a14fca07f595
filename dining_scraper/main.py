"""CLI entry point for the MacEats dining scraper."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Sequence

from .config import Settings, configure_logging
from .errors import ScraperError
from .models import CoffeeBrand, FoodType, Location, Restaurant
from .upstream import Upstream

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> None:
    """Execute the CLI."""

    settings = Settings.from_env()
    args = _parse_args(argv, settings)
    configure_logging(args.log_level)

    if args.command == "serve":
        _serve(args.host, args.port, args.log_level)
        return

    try:
        payload = asyncio.run(_query(args, settings))
    except ScraperError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def _parse_args(argv: Sequence[str] | None, settings: Settings) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (e.g. INFO, DEBUG)",
    )

    parser = argparse.ArgumentParser(description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", parents=[common], help="Run the JSON API")
    serve.add_argument("--host", default=settings.host, help="Interface to bind")
    serve.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="The port for the server to listen on",
    )

    subparsers.add_parser("locations", parents=[common], help="Print every location as JSON")

    restaurants = subparsers.add_parser(
        "restaurants", parents=[common], help="Print restaurants as JSON"
    )
    selection = restaurants.add_mutually_exclusive_group()
    selection.add_argument("--location", help="Location display name or slug")
    selection.add_argument(
        "--food-type",
        help="Food type slug, e.g. 'pizza' or 'coffee/starbucks'",
    )
    selection.add_argument("--coffee-brand", help="Coffee brand slug, e.g. 'tim-hortons'")
    selection.add_argument(
        "--open-now",
        action="store_true",
        help="Only restaurants open right now",
    )

    return parser.parse_args(argv)


def _serve(host: str, port: int, log_level: str) -> None:
    import uvicorn

    logger.info("Listening on %s:%d", host, port)
    uvicorn.run("web.app:app", host=host, port=port, log_level=log_level.lower())


async def _query(args: argparse.Namespace, settings: Settings) -> list[dict[str, object]]:
    upstream = Upstream.from_settings(settings)
    try:
        if args.command == "locations":
            return [location.to_dict() for location in await upstream.locations()]
        restaurants = await _select_restaurants(upstream, args)
        return [restaurant.to_dict() for restaurant in restaurants]
    finally:
        await upstream.aclose()


async def _select_restaurants(upstream: Upstream, args: argparse.Namespace) -> list[Restaurant]:
    if args.location:
        return await upstream.location_restaurants(Location.from_name(args.location))
    if args.food_type:
        return await upstream.food_type_restaurants(FoodType.from_slug(args.food_type))
    if args.coffee_brand:
        return await upstream.coffee_brand_restaurants(CoffeeBrand.from_slug(args.coffee_brand))
    if args.open_now:
        return await upstream.open_now()
    return await upstream.all_restaurants()


if __name__ == "__main__":
    main()
