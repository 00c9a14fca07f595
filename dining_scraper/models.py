"""Domain records scraped from MacEats."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .errors import EnumParseError
from .times import Times

SLUG_STOPWORDS = frozenset({"for", "off"})

_ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CASE_BOUNDARY_RE = re.compile(r"([a-z]\d*)([A-Z])")
_NON_WORD_RE = re.compile(r"[\W_]+")
_BRANDED_COFFEE_RE = re.compile(r"^Coffee \((?P<brand>.+)\)$")


def kebab_case(value: str) -> str:
    """Lowercase *value* and join its words with hyphens.

    Words break on any non-alphanumeric character and on case changes, so
    ``"Student Centre"``, ``"studentCentre"`` and ``"student_centre"`` all
    become ``"student-centre"``. Digits never end a word on their own:
    ``"Building 2A"`` is ``"building-2a"`` while ``"room2B"`` is ``"room2-b"``.
    """

    value = _ACRONYM_BOUNDARY_RE.sub(r"\1 \2", value)
    value = _CASE_BOUNDARY_RE.sub(r"\1 \2", value)
    words = [word.lower() for word in _NON_WORD_RE.split(value) if word]
    return "-".join(words)


def location_slug(name: str) -> str:
    """Derive the MacEats URL slug for a location display name."""

    kept = [token for token in name.split() if token.lower() not in SLUG_STOPWORDS]
    return kebab_case(" ".join(kept))


class CoffeeBrand(Enum):
    MARLEY = "Marley"
    REJUVENATE = "Rejuvenate"
    STARBUCKS = "Starbucks"
    TIM_HORTONS = "Tim Hortons"
    WILLIAMS = "Williams"

    @property
    def label(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        return kebab_case(self.value)

    @property
    def path(self) -> str:
        return f"/types/coffee/{self.slug}"

    @classmethod
    def parse(cls, text: str) -> "CoffeeBrand":
        try:
            return cls(text)
        except ValueError:
            raise EnumParseError("coffee brand", text) from None

    @classmethod
    def from_slug(cls, slug: str) -> "CoffeeBrand":
        for brand in cls:
            if brand.slug == slug:
                return brand
        raise EnumParseError("coffee brand", slug)

    def __str__(self) -> str:
        return self.value


class FoodCategory(Enum):
    BREAKFAST = "Breakfast"
    COFFEE = "Coffee"
    CONVENIENCE = "Convenience"
    DESSERT = "Dessert"
    GLUTEN_FREE = "Gluten Free"
    GRILL = "Grill"
    HALAL = "Halal"
    KOSHER = "Kosher"
    NOODLES = "Noodles"
    PASTA = "Pasta"
    PIZZA = "Pizza"
    SANDWICHES = "Sandwiches"
    SNACKS = "Snacks"
    SOUP = "Soup"
    SUSHI = "Sushi"
    VEGETARIAN = "Vegetarian"

    @property
    def label(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        return kebab_case(self.value)

    def __str__(self) -> str:
        return self.value


_CATEGORY_ORDER = {category: index for index, category in enumerate(FoodCategory)}
_BRAND_ORDER = {brand: index for index, brand in enumerate(CoffeeBrand)}
_CATEGORY_BY_LABEL = {category.label: category for category in FoodCategory}
_CATEGORY_BY_SLUG = {category.slug: category for category in FoodCategory}
_BRAND_BY_LABEL = {brand.label: brand for brand in CoffeeBrand}


@dataclass(frozen=True, slots=True)
class FoodType:
    """A food type tag; only coffee may be narrowed down to one brand.

    ``FoodType(FoodCategory.COFFEE)`` means coffee of any brand while
    ``FoodType(FoodCategory.COFFEE, CoffeeBrand.STARBUCKS)`` means Starbucks.
    """

    category: FoodCategory
    brand: Optional[CoffeeBrand] = None

    def __post_init__(self) -> None:
        if self.brand is not None and self.category is not FoodCategory.COFFEE:
            raise ValueError(f"{self.category.label} cannot carry a coffee brand")

    @classmethod
    def coffee(cls, brand: CoffeeBrand | None = None) -> "FoodType":
        return cls(FoodCategory.COFFEE, brand)

    @property
    def label(self) -> str:
        if self.brand is None:
            return self.category.label
        return f"{self.category.label} ({self.brand.label})"

    @property
    def slug(self) -> str:
        if self.brand is None:
            return self.category.slug
        return f"{self.category.slug}/{self.brand.slug}"

    @property
    def path(self) -> str | None:
        """Upstream listing path, or ``None`` for coffee of any brand."""

        if self.brand is not None:
            return self.brand.path
        if self.category is FoodCategory.COFFEE:
            return None
        return f"/types/{self.category.slug}"

    def sort_key(self) -> tuple[int, int]:
        brand_index = -1 if self.brand is None else _BRAND_ORDER[self.brand]
        return _CATEGORY_ORDER[self.category], brand_index

    @classmethod
    def parse(cls, text: str) -> "FoodType":
        """Parse tag text as shown upstream (case-sensitive)."""

        category = _CATEGORY_BY_LABEL.get(text)
        if category is not None:
            return cls(category)

        match = _BRANDED_COFFEE_RE.match(text)
        if match is not None and match.group("brand") in _BRAND_BY_LABEL:
            return cls.coffee(_BRAND_BY_LABEL[match.group("brand")])
        raise EnumParseError("food type", text)

    @classmethod
    def from_slug(cls, slug: str) -> "FoodType":
        """Parse the kebab-case form used in API paths and JSON output."""

        category_slug, _, brand_slug = slug.partition("/")
        category = _CATEGORY_BY_SLUG.get(category_slug)
        if category is None:
            raise EnumParseError("food type", slug)
        if not brand_slug:
            return cls(category)
        if category is not FoodCategory.COFFEE:
            raise EnumParseError("food type", slug)
        try:
            return cls.coffee(CoffeeBrand.from_slug(brand_slug))
        except EnumParseError:
            raise EnumParseError("food type", slug) from None

    def __str__(self) -> str:
        return self.label


def sorted_tags(tags: Iterable[FoodType]) -> tuple[FoodType, ...]:
    return tuple(sorted(set(tags), key=FoodType.sort_key))


@dataclass(frozen=True, slots=True)
class Location:
    """A building or area hosting restaurants; identified by its slug."""

    name: str = field(compare=False)
    slug: str

    @classmethod
    def from_name(cls, name: str) -> "Location":
        return cls(name=name, slug=location_slug(name))

    @property
    def path(self) -> str:
        return f"/locations/{self.slug}"

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "slug": self.slug}

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Restaurant:
    """A restaurant listing with its weekly schedule and food type tags."""

    name: str
    location: Location
    location_details: Optional[str] = None
    location_phone: Optional[str] = None
    schedule: Optional[Mapping[date, Times]] = field(default=None, hash=False)
    tags: tuple[FoodType, ...] = ()

    def __post_init__(self) -> None:
        if self.schedule is not None and not isinstance(self.schedule, MappingProxyType):
            object.__setattr__(
                self, "schedule", MappingProxyType(dict(sorted(self.schedule.items())))
            )
        object.__setattr__(self, "tags", sorted_tags(self.tags))

    def serves(self, food_type: FoodType) -> bool:
        return food_type in self.tags

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "name": self.name,
            "location": self.location.to_dict(),
        }
        if self.location_details is not None:
            data["location_details"] = self.location_details
        if self.location_phone is not None:
            data["location_phone"] = self.location_phone
        if self.schedule is not None:
            data["schedule"] = {
                day.isoformat(): times.to_dict() for day, times in self.schedule.items()
            }
        data["tags"] = [tag.slug for tag in self.tags]
        return data

    def __str__(self) -> str:
        return self.name
