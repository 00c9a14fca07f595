"""Opening hours as published on MacEats schedule cells.

A cell either reads ``Closed`` or holds one or more comma separated ranges
such as ``7:30 am - 11 am, 12:00 pm - 8:00 pm``. Hours without minutes are
accepted and normalised to ``H:00``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

from .errors import TimeParseError

CLOSED_TEXT = "Closed"
RANGE_SEPARATOR = ", "
BOUND_SEPARATOR = " - "

_HOUR_ONLY_RE = re.compile(r"^(?P<hour>\d{1,2}) (?P<meridiem>am|pm)$")
_TIME_RE = re.compile(
    r"^(?P<hour>\d{1,2}):(?P<minute>\d{2}) (?P<meridiem>am|pm)$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class Open:
    """A single opening interval within one calendar day."""

    start: time
    end: time

    @classmethod
    def parse(cls, text: str) -> "Open":
        start_text, separator, end_text = text.partition(BOUND_SEPARATOR)
        if not separator:
            raise TimeParseError(text)
        return cls(start=parse_time_of_day(start_text), end=parse_time_of_day(end_text))

    def to_dict(self) -> dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


@dataclass(frozen=True, slots=True)
class Times:
    """Opening hours for one day; no intervals means the restaurant is closed."""

    intervals: tuple[Open, ...] = ()

    @property
    def closed(self) -> bool:
        return not self.intervals

    @classmethod
    def parse(cls, text: str) -> "Times":
        """Parse a schedule cell, failing on the first malformed range."""

        if text == CLOSED_TEXT:
            return CLOSED
        return cls(intervals=tuple(Open.parse(part) for part in text.split(RANGE_SEPARATOR)))

    def to_dict(self) -> str | dict[str, list[dict[str, str]]]:
        if self.closed:
            return "closed"
        return {"open": [interval.to_dict() for interval in self.intervals]}


CLOSED = Times()


def parse_time_of_day(token: str) -> time:
    """Parse ``9 am``, ``9:30 pm`` and friends into a naive :class:`time`."""

    normalized = _HOUR_ONLY_RE.sub(r"\g<hour>:00 \g<meridiem>", token)
    match = _TIME_RE.match(normalized)
    if match is None:
        raise TimeParseError(token)

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        raise TimeParseError(token)

    hour %= 12
    if match.group("meridiem").lower() == "pm":
        hour += 12
    return time(hour, minute)
