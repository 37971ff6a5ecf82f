"""
Day grouping.

Assigns raw segments to itinerary days from their start dates and
synthesizes a title for each day.

Dependencies: None
System role: Day-level transform
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from itinerary_pipeline.core.transform.blocks import segment_location, segment_name, segment_type

_STAY_TYPES = frozenset({"stay", "accommodation"})
_ACTIVITY_TYPES = frozenset({"service", "activity"})
_TITLED_TRANSFER_TYPES = frozenset({"entry", "exit", "flight"})


@dataclass
class DayGroup:
    day_number: int
    date: str | None
    location: str | None = None
    title: str = ""
    segments: list[dict[str, Any]] = field(default_factory=list)


def _calendar_date(value: str | None) -> date | None:
    """Parse the date part of an ISO timestamp; times and offsets are ignored."""
    if not value:
        return None
    return date.fromisoformat(value[:10])


def day_number_for(segment_start: str | None, trip_start: str | None) -> int:
    """
    Day number of a segment: ``max(1, floor(days since trip start) + 1)``.

    Segments without a start date, or trips without one, land on day 1.
    """
    start = _calendar_date(trip_start)
    current = _calendar_date(segment_start)
    if start is None or current is None:
        return 1
    return max(1, (current - start).days + 1)


def generate_day_title(day: DayGroup) -> str:
    """
    Title for a day, by priority: stay name, location + activity, a named
    (non-generic) transfer, ``Day n - location``, ``Day n``.
    """
    stay = next((s for s in day.segments if segment_type(s) in _STAY_TYPES), None)
    if stay is not None and segment_name(stay):
        return segment_name(stay)

    activity = next((s for s in day.segments if segment_type(s) in _ACTIVITY_TYPES), None)
    if activity is not None:
        activity_name = activity.get("name") or activity.get("title")
        if activity_name and day.location:
            return f"{day.location} - {activity_name}"
        if activity_name:
            return activity_name

    transfer = next((s for s in day.segments if segment_type(s) in _TITLED_TRANSFER_TYPES), None)
    if transfer is not None:
        transfer_title = transfer.get("name") or transfer.get("title")
        if transfer_title and "transfer" not in transfer_title.lower():
            return transfer_title

    if day.location:
        return f"Day {day.day_number} - {day.location}"
    return f"Day {day.day_number}"


def group_segments_by_day(segments: list[dict[str, Any]], trip_start: str | None) -> list[DayGroup]:
    """
    Group raw segments into days ordered by day number.

    Args:
        segments: Raw portal segments in portal order
        trip_start: Trip start date (ISO date or timestamp)

    Returns:
        list of DayGroup, each with a generated title
    """
    days: dict[int, DayGroup] = {}
    for segment in segments:
        start = segment.get("startDate")
        number = day_number_for(start, trip_start)
        day = days.get(number)
        if day is None:
            if start:
                day_date = start[:10]
            elif number == 1 and trip_start:
                day_date = trip_start[:10]
            else:
                day_date = None
            day = days[number] = DayGroup(day_number=number, date=day_date)
        if day.location is None:
            day.location = segment_location(segment)
        day.segments.append(segment)

    ordered = [days[number] for number in sorted(days)]
    for day in ordered:
        day.title = generate_day_title(day)
    return ordered
