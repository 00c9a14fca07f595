"""Memoizing front for the MacEats queries served by the API.

Every public coroutine holds a single :class:`asyncio.Lock` for its whole
duration, upstream fetch included. Concurrent callers of a missing key thus
queue behind the first one and find the entry already populated, at the
price of one slow fetch stalling every other lookup until it completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Hashable, TypeVar

from .errors import CacheConsistencyError
from .models import CoffeeBrand, FoodType, Location, Restaurant
from .upstream import Upstream

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class RestaurantCache:
    def __init__(self, upstream: Upstream) -> None:
        self._upstream = upstream
        self._lock = asyncio.Lock()
        self._reset()

    def _reset(self) -> None:
        self._restaurants_all: list[Restaurant] | None = None
        self._restaurants_by_food_type: dict[FoodType, list[Restaurant]] = {}
        self._restaurants_by_coffee_brand: dict[CoffeeBrand, list[Restaurant]] = {}
        self._locations_all: list[Location] | None = None
        self._restaurants_by_location: dict[str, list[Restaurant]] = {}

    async def invalidate(self) -> None:
        """Drop every cached entry; later calls fetch again."""

        async with self._lock:
            self._reset()
        logger.info("Restaurant cache invalidated")

    async def all_restaurants(self) -> list[Restaurant]:
        async with self._lock:
            return list(await self._all_restaurants())

    async def restaurants_by_food_type(self, food_type: FoodType) -> list[Restaurant]:
        """Restaurants tagged with *food_type*.

        Branded coffee has its own upstream page; every other food type,
        coffee of any brand included, is filtered from :meth:`all_restaurants`.
        """

        async with self._lock:
            if food_type.brand is not None:
                return await self._coffee_brand_restaurants(food_type.brand)

            store = self._restaurants_by_food_type
            if food_type not in store:
                logger.debug("Cache miss for food type %s", food_type.slug)
                restaurants = await self._all_restaurants()
                store[food_type] = [r for r in restaurants if r.serves(food_type)]
            else:
                logger.debug("Cache hit for food type %s", food_type.slug)
            return _snapshot(store, food_type)

    async def restaurants_by_coffee_brand(self, brand: CoffeeBrand) -> list[Restaurant]:
        async with self._lock:
            return await self._coffee_brand_restaurants(brand)

    async def all_locations(self) -> list[Location]:
        async with self._lock:
            if self._locations_all is None:
                logger.debug("Cache miss for all locations")
                self._locations_all = await self._upstream.locations()
            else:
                logger.debug("Cache hit for all locations")
            if self._locations_all is None:
                raise CacheConsistencyError("locations missing after population")
            return list(self._locations_all)

    async def restaurants_by_location(self, location: Location) -> list[Restaurant]:
        async with self._lock:
            store = self._restaurants_by_location
            if location.slug not in store:
                logger.debug("Cache miss for location %s", location.slug)
                restaurants = await self._all_restaurants()
                store[location.slug] = [
                    r for r in restaurants if r.location.slug == location.slug
                ]
            else:
                logger.debug("Cache hit for location %s", location.slug)
            return _snapshot(store, location.slug)

    # The helpers below expect the lock to be held already.

    async def _all_restaurants(self) -> list[Restaurant]:
        if self._restaurants_all is None:
            logger.debug("Cache miss for all restaurants")
            self._restaurants_all = await self._upstream.all_restaurants()
        else:
            logger.debug("Cache hit for all restaurants")
        if self._restaurants_all is None:
            raise CacheConsistencyError("restaurants missing after population")
        return self._restaurants_all

    async def _coffee_brand_restaurants(self, brand: CoffeeBrand) -> list[Restaurant]:
        store = self._restaurants_by_coffee_brand
        if brand not in store:
            logger.debug("Cache miss for coffee brand %s", brand.slug)
            store[brand] = await self._upstream.coffee_brand_restaurants(brand)
        else:
            logger.debug("Cache hit for coffee brand %s", brand.slug)
        return _snapshot(store, brand)


def _snapshot(store: dict[K, list[V]], key: K) -> list[V]:
    try:
        return list(store[key])
    except KeyError:
        raise CacheConsistencyError(f"cache entry {key!r} missing after population") from None
