"""Turn MacEats HTML documents into domain records.

Both listing pages share the same layout: every entry lives in a
``div.unit`` container. Location listings mark theirs with the extra
``unit-location`` class and hold a single link; restaurant listings carry a
title, a location heading, optional contact details, a weekly schedule table
and a list of food type tags.

Parsing is strict. The first malformed container aborts the whole document
and no partial list is ever returned.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import PurePosixPath
from typing import Iterable
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import DEFAULT_BASE_URL
from .errors import (
    AttributeNotFoundError,
    ElementNotFoundError,
    TextNotFoundError,
    UrlParseError,
)
from .models import FoodType, Location, Restaurant
from .times import Times

LOCATION_SELECTOR = "div.unit.unit-location"
RESTAURANT_SELECTOR = "div.unit"
SCHEDULE_DAYS = 7


def parse_locations(html: str, *, base_url: str = DEFAULT_BASE_URL) -> list[Location]:
    """Return every location listed in a locations document."""

    soup = BeautifulSoup(html, "lxml")
    return [
        parse_location_element(element, base_url=base_url)
        for element in soup.select(LOCATION_SELECTOR)
    ]


def parse_restaurants(html: str, *, today: date | None = None) -> list[Restaurant]:
    """Return every restaurant listed in a restaurant listing document.

    Schedule cells are dated from *today*, which defaults to the server's
    local calendar date.
    """

    if today is None:
        today = date.today()
    soup = BeautifulSoup(html, "lxml")
    return [
        parse_restaurant_element(element, today=today)
        for element in soup.select(RESTAURANT_SELECTOR)
    ]


def parse_location_element(element: Tag, *, base_url: str = DEFAULT_BASE_URL) -> Location:
    _require_shape(element, "div", ("unit", "unit-location"), "location")

    anchor = element.find("a")
    if not isinstance(anchor, Tag):
        raise ElementNotFoundError("location link")

    name = _first_text(anchor, "location")

    href = anchor.get("href")
    if not isinstance(href, str) or not href.strip():
        raise AttributeNotFoundError("location href")

    try:
        url = urljoin(base_url, href.strip())
        parts = urlsplit(url)
    except ValueError as exc:
        raise UrlParseError(href) from exc
    if not parts.scheme or not parts.netloc:
        raise UrlParseError(href)

    slug = PurePosixPath(parts.path).name
    if not slug:
        raise AttributeNotFoundError("location href")

    return Location(name=name, slug=slug)


def parse_restaurant_element(element: Tag, *, today: date) -> Restaurant:
    _require_shape(element, "div", ("unit",), "restaurant")

    name = _required_text(element, "h1.title", "name")
    location = Location.from_name(_required_text(element, "h2.location", "location"))
    location_details = _optional_text(element, "div.location-data", "location details")
    location_phone = _optional_text(element, "div.location-phone", "location phone")

    schedule = None
    schedule_element = element.select_one("div.schedule")
    if schedule_element is not None:
        schedule = _parse_schedule(schedule_element.select("td.time"), today)

    tags: tuple[FoodType, ...] = ()
    tags_element = element.select_one("ul.tags")
    if tags_element is not None:
        tags = tuple(
            FoodType.parse(_first_text(item, "food type"))
            for item in tags_element.select("li")
        )

    return Restaurant(
        name=name,
        location=location,
        location_details=location_details,
        location_phone=location_phone,
        schedule=schedule,
        tags=tags,
    )


def _parse_schedule(cells: Iterable[Tag], today: date) -> dict[date, Times]:
    schedule: dict[date, Times] = {}
    for offset, cell in zip(range(SCHEDULE_DAYS), cells):
        schedule[today + timedelta(days=offset)] = Times.parse(_first_text(cell, "time"))
    return schedule


def _require_shape(element: Tag, tag: str, classes: tuple[str, ...], what: str) -> None:
    element_classes = element.get("class") or []
    if element.name != tag or any(cls not in element_classes for cls in classes):
        raise ElementNotFoundError(what)


def _first_text(element: Tag, what: str) -> str:
    text = next(element.stripped_strings, None)
    if text is None:
        raise TextNotFoundError(what)
    return text


def _required_text(element: Tag, selector: str, what: str) -> str:
    found = element.select_one(selector)
    if found is None:
        raise ElementNotFoundError(what)
    return _first_text(found, what)


def _optional_text(element: Tag, selector: str, what: str) -> str | None:
    found = element.select_one(selector)
    if found is None:
        return None
    return _first_text(found, what)
