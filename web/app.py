"""Read-only JSON API over the cached MacEats data."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from datetime import datetime, time, timedelta

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dining_scraper.cache import RestaurantCache
from dining_scraper.config import Settings, configure_logging
from dining_scraper.errors import EnumParseError, ScraperError
from dining_scraper.models import CoffeeBrand, FoodType, Location, Restaurant
from dining_scraper.upstream import Upstream

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

_invalidation_task: asyncio.Task | None = None

app = FastAPI(title="MacEats Dining API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def seconds_until_midnight(now: datetime) -> float:
    """Seconds from *now* until the next local midnight."""

    next_day = (now + timedelta(days=1)).date()
    midnight = datetime.combine(next_day, time.min, tzinfo=now.tzinfo)
    return (midnight - now).total_seconds()


async def _invalidation_loop(cache: RestaurantCache) -> None:
    while True:
        delay = seconds_until_midnight(datetime.now())
        logger.debug("Next cache invalidation in %.0f seconds", delay)
        await asyncio.sleep(delay)
        await cache.invalidate()


@app.on_event("startup")
async def _on_startup() -> None:
    global _invalidation_task
    upstream = Upstream.from_settings(settings)
    app.state.upstream = upstream
    app.state.cache = RestaurantCache(upstream)
    if _invalidation_task is None:
        _invalidation_task = asyncio.create_task(_invalidation_loop(app.state.cache))
    logger.info("Serving MacEats data from %s", upstream.base_url)


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    global _invalidation_task
    if _invalidation_task is not None:
        _invalidation_task.cancel()
        with suppress(asyncio.CancelledError):
            await _invalidation_task
        _invalidation_task = None
    upstream = getattr(app.state, "upstream", None)
    if upstream is not None:
        await upstream.aclose()


def get_cache(request: Request) -> RestaurantCache:
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        raise HTTPException(status_code=503, detail="Cache not initialized yet")
    return cache


def get_upstream(request: Request) -> Upstream:
    upstream = getattr(request.app.state, "upstream", None)
    if upstream is None:
        raise HTTPException(status_code=503, detail="Upstream not initialized yet")
    return upstream


@app.exception_handler(StarletteHTTPException)
async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(ScraperError)
async def _scraper_error(request: Request, exc: ScraperError) -> JSONResponse:
    logger.error("Failed to serve %s: %s", request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=500)


def _data(items: list[Restaurant] | list[Location]) -> dict[str, object]:
    return {"data": [item.to_dict() for item in items]}


def _food_type_from_path(slug: str) -> FoodType:
    try:
        return FoodType.from_slug(slug)
    except EnumParseError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _coffee_brand_from_path(slug: str) -> CoffeeBrand:
    try:
        return CoffeeBrand.from_slug(slug)
    except EnumParseError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/restaurants")
async def restaurants_all(cache: RestaurantCache = Depends(get_cache)):
    return _data(await cache.all_restaurants())


@app.get("/restaurants/open-now")
async def restaurants_open_now(upstream: Upstream = Depends(get_upstream)):
    return _data(await upstream.open_now())


@app.get("/restaurants/food-type/{slug:path}")
async def restaurants_by_food_type(slug: str, cache: RestaurantCache = Depends(get_cache)):
    food_type = _food_type_from_path(slug)
    return _data(await cache.restaurants_by_food_type(food_type))


@app.get("/restaurants/coffee-brand/{slug}")
async def restaurants_by_coffee_brand(slug: str, cache: RestaurantCache = Depends(get_cache)):
    brand = _coffee_brand_from_path(slug)
    return _data(await cache.restaurants_by_coffee_brand(brand))


@app.get("/locations")
async def locations_all(cache: RestaurantCache = Depends(get_cache)):
    return _data(await cache.all_locations())


@app.get("/locations/{slug}")
async def location_restaurants(slug: str, cache: RestaurantCache = Depends(get_cache)):
    return _data(await cache.restaurants_by_location(Location.from_name(slug)))
