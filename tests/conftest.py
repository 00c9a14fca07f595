"""Shared fixtures: sample MacEats documents and a counting fake upstream."""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import date

import pytest

from dining_scraper.models import CoffeeBrand, FoodType, Location, Restaurant
from dining_scraper.parser import parse_locations, parse_restaurants

TODAY = date(2024, 3, 4)

LOCATIONS_HTML = """
<html><body>
  <div class="unit unit-location">
    <a href="/locations/student-centre"> Student Centre </a>
  </div>
  <div class="unit unit-location">
    <a href="https://maceats.mcmaster.ca/locations/centro-food">Centro for Food</a>
  </div>
</body></html>
"""

STUDENT_CENTRE_HTML = """
<html><body>
  <div class="unit">
    <h1 class="title">Burrito Boyz</h1>
    <h2 class="location">Student Centre</h2>
    <div class="location-data">Lower Level</div>
    <div class="location-phone">905-525-9140</div>
    <div class="schedule">
      <table>
        <tr><td class="day">Mon</td><td class="time">9 am - 5 pm</td></tr>
        <tr><td class="day">Tue</td><td class="time">9:00 am - 5:00 pm</td></tr>
        <tr><td class="day">Wed</td><td class="time">7:30 am - 11 am, 12 pm - 8:30 pm</td></tr>
        <tr><td class="day">Thu</td><td class="time">Closed</td></tr>
        <tr><td class="day">Fri</td><td class="time">9 am - 5 pm</td></tr>
        <tr><td class="day">Sat</td><td class="time">Closed</td></tr>
        <tr><td class="day">Sun</td><td class="time">Closed</td></tr>
      </table>
    </div>
    <ul class="tags"><li>Halal</li><li>Grill</li><li>Halal</li></ul>
  </div>
  <div class="unit">
    <h1 class="title">Starbucks</h1>
    <h2 class="location">Student Centre</h2>
    <ul class="tags"><li>Coffee</li><li>Snacks</li></ul>
  </div>
</body></html>
"""

CENTRO_HTML = """
<html><body>
  <div class="unit">
    <h1 class="title">Centro Pizza</h1>
    <h2 class="location">Centro for Food</h2>
    <ul class="tags"><li>Pizza</li><li>Vegetarian</li></ul>
  </div>
</body></html>
"""

OPEN_NOW_HTML = """
<html><body>
  <div class="unit">
    <h1 class="title">Starbucks</h1>
    <h2 class="location">Student Centre</h2>
    <ul class="tags"><li>Coffee</li></ul>
  </div>
</body></html>
"""


@pytest.fixture
def locations() -> list[Location]:
    return parse_locations(LOCATIONS_HTML)


@pytest.fixture
def restaurants() -> list[Restaurant]:
    return parse_restaurants(STUDENT_CENTRE_HTML, today=TODAY) + parse_restaurants(
        CENTRO_HTML, today=TODAY
    )


class FakeUpstream:
    """Stands in for :class:`dining_scraper.upstream.Upstream` and counts calls."""

    def __init__(
        self,
        locations: list[Location],
        restaurants: list[Restaurant],
        *,
        brand_restaurants: dict[CoffeeBrand, list[Restaurant]] | None = None,
    ) -> None:
        self.calls: Counter[str] = Counter()
        self.failures: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None
        self._locations = locations
        self._restaurants = restaurants
        self._brand_restaurants = brand_restaurants or {}
        self.closed = False
        self.base_url = "https://maceats.mcmaster.ca"

    async def _enter(self, name: str) -> None:
        self.calls[name] += 1
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        failure = self.failures.pop(name, None)
        if failure is not None:
            raise failure

    async def locations(self) -> list[Location]:
        await self._enter("locations")
        return list(self._locations)

    async def all_restaurants(self) -> list[Restaurant]:
        await self._enter("all_restaurants")
        return list(self._restaurants)

    async def open_now(self) -> list[Restaurant]:
        await self._enter("open_now")
        return list(self._restaurants[:1])

    async def coffee_brand_restaurants(self, brand: CoffeeBrand) -> list[Restaurant]:
        await self._enter(f"coffee_brand:{brand.slug}")
        return list(self._brand_restaurants.get(brand, []))

    async def location_restaurants(self, location: Location) -> list[Restaurant]:
        await self._enter(f"location:{location.slug}")
        return [r for r in self._restaurants if r.location == location]

    async def food_type_restaurants(self, food_type: FoodType) -> list[Restaurant]:
        await self._enter(f"food_type:{food_type.slug}")
        return [r for r in self._restaurants if r.serves(food_type)]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_upstream(locations, restaurants) -> FakeUpstream:
    starbucks = [r for r in restaurants if r.name == "Starbucks"]
    return FakeUpstream(
        locations,
        restaurants,
        brand_restaurants={CoffeeBrand.STARBUCKS: starbucks},
    )
