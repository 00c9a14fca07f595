"""Uncached queries against the MacEats site."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from .config import DEFAULT_BASE_URL, Settings
from .crawler import AsyncCrawler
from .models import CoffeeBrand, FoodType, Location, Restaurant
from .parser import parse_locations, parse_restaurants

logger = logging.getLogger(__name__)

LOCATIONS_PATH = "/locations"
OPEN_NOW_PATH = "/open-now"


class Upstream:
    """One method per logical MacEats query; each fetches and parses fresh data."""

    def __init__(
        self,
        crawler: AsyncCrawler,
        *,
        base_url: str = DEFAULT_BASE_URL,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._crawler = crawler
        self._base_url = base_url.rstrip("/")
        self._today = today

    @classmethod
    def from_settings(cls, settings: Settings) -> "Upstream":
        crawler = AsyncCrawler(
            user_agent=settings.user_agent,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )
        return cls(crawler, base_url=settings.base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._crawler.aclose()

    def url_for(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def locations(self) -> list[Location]:
        url = self.url_for(LOCATIONS_PATH)
        html = await self._crawler.fetch(url)
        locations = parse_locations(html, base_url=self._base_url)
        logger.info("Parsed %d locations from %s", len(locations), url)
        return locations

    async def location_restaurants(self, location: Location) -> list[Restaurant]:
        return await self._restaurant_list(self.url_for(location.path))

    async def all_restaurants(self) -> list[Restaurant]:
        """Every restaurant, gathered location by location in listing order."""

        restaurants: list[Restaurant] = []
        for location in await self.locations():
            restaurants.extend(await self.location_restaurants(location))
        return restaurants

    async def open_now(self) -> list[Restaurant]:
        return await self._restaurant_list(self.url_for(OPEN_NOW_PATH))

    async def food_type_restaurants(self, food_type: FoodType) -> list[Restaurant]:
        """Restaurants tagged with *food_type*.

        MacEats has no page listing coffee of any brand, so that case falls
        back to filtering every restaurant.
        """

        path = food_type.path
        if path is None:
            return [r for r in await self.all_restaurants() if r.serves(food_type)]
        return await self._restaurant_list(self.url_for(path))

    async def coffee_brand_restaurants(self, brand: CoffeeBrand) -> list[Restaurant]:
        return await self._restaurant_list(self.url_for(brand.path))

    async def _restaurant_list(self, url: str) -> list[Restaurant]:
        html = await self._crawler.fetch(url)
        restaurants = parse_restaurants(html, today=self._today())
        logger.info("Parsed %d restaurants from %s", len(restaurants), url)
        return restaurants
