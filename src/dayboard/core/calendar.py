"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable

from .timestamps import parse_timestamp

RECURRENCE_YEARS = 5
ANNIVERSARY_RETENTION_YEARS = 2


class EventType(Enum):
    NORMAL = "normal"
    BIRTHDAY = "birthday"
    HOLIDAY = "holiday"
    TASK_BLOCK = "task-block"

    @property
    def is_yearly(self) -> bool:
        """Birthdays and holidays repeat every year."""
        return self in (EventType.BIRTHDAY, EventType.HOLIDAY)


@dataclass
class CalendarEvent:
    """A calendar event in local wall-clock time."""

    id: str
    title: str
    start_date: datetime
    end_date: datetime
    type: EventType = EventType.NORMAL
    is_all_day: bool = False
    related_task_id: str | None = None
    is_recurring: bool | None = None
    recurrence_type: str | None = None
    series_id: str | None = None

    def __post_init__(self):
        # Overnight ranges end on a following day
        if self.end_date < self.start_date:
            days = -(-(self.start_date - self.end_date) // timedelta(days=1))
            self.end_date = self.end_date + timedelta(days=days)

    def duration_minutes(self) -> int:
        return int((self.end_date - self.start_date).total_seconds() / 60)

    def format_time(self) -> str:
        """Format the event time range for display."""
        if self.is_all_day:
            return "All day"
        return f"{self.start_date.strftime('%H:%M')}-{self.end_date.strftime('%H:%M')}"

    def to_dict(self) -> dict:
        """Serialize using the persisted camelCase field names."""
        data = {
            "id": self.id,
            "title": self.title,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "type": self.type.value,
            "isAllDay": self.is_all_day,
        }
        optional = {
            "relatedTaskId": self.related_task_id,
            "isRecurring": self.is_recurring,
            "recurrenceType": self.recurrence_type,
            "seriesId": self.series_id,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarEvent":
        """Create CalendarEvent from its persisted form, reviving dates."""
        return cls(
            id=data["id"],
            title=data["title"],
            start_date=parse_timestamp(data["startDate"]),
            end_date=parse_timestamp(data["endDate"]),
            type=EventType(data.get("type", "normal")),
            is_all_day=bool(data.get("isAllDay", False)),
            related_task_id=data.get("relatedTaskId"),
            is_recurring=data.get("isRecurring"),
            recurrence_type=data.get("recurrenceType"),
            series_id=data.get("seriesId"),
        )


def add_years(dt: datetime, years: int) -> datetime:
    """Shift by whole years; Feb 29 lands on Feb 28 in non-leap years."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)


def start_of_day(d: date | datetime) -> datetime:
    day = d.date() if isinstance(d, datetime) else d
    return datetime.combine(day, time.min)


def end_of_day(d: date | datetime) -> datetime:
    day = d.date() if isinstance(d, datetime) else d
    return datetime.combine(day, time.max)


def build_event_window(
    day: date,
    start: time,
    end: time,
    event_type: EventType = EventType.NORMAL,
) -> tuple[datetime, datetime, bool]:
    """
    Turn a day plus wall-clock times into an event range.

    Birthdays and holidays always span 00:00-23:59 and are all-day.
    Otherwise an end time before the start time rolls into the next day
    (e.g. 23:00-01:00).

    Returns: (start_date, end_date, is_all_day)
    """
    if event_type.is_yearly:
        return start_of_day(day), datetime.combine(day, time(23, 59)), True

    start_dt = datetime.combine(day, start)
    end_dt = datetime.combine(day, end)
    if end_dt < start_dt:
        end_dt += timedelta(days=1)
    return start_dt, end_dt, False


def _yearly_copy(event: CalendarEvent, event_id: str, years: int) -> CalendarEvent:
    return replace(
        event,
        id=event_id,
        start_date=add_years(event.start_date, years),
        end_date=add_years(event.end_date, years),
        is_recurring=True,
        recurrence_type="yearly",
    )


def expand_event(
    event: CalendarEvent,
    make_id: Callable[[], str],
    years: int = RECURRENCE_YEARS,
) -> list[CalendarEvent]:
    """
    Expand an event into its stored occurrences.

    Birthdays and holidays get one copy per year offset 1..years, all
    sharing the base event's series_id. Other types expand to themselves.
    """
    expanded = [event]
    if event.type.is_yearly:
        for offset in range(1, years + 1):
            expanded.append(_yearly_copy(event, make_id(), offset))
    return expanded


def add_event(
    events: list[CalendarEvent],
    event: CalendarEvent,
    make_id: Callable[[], str],
    years: int = RECURRENCE_YEARS,
) -> list[CalendarEvent]:
    """Append the event and its yearly occurrences in one step."""
    return [*events, *expand_event(event, make_id, years)]


def delete_event(events: list[CalendarEvent], event_id: str) -> list[CalendarEvent]:
    """
    Delete an event, or its whole series when it belongs to one.

    Events without a series_id are removed by id only. Unknown ids leave
    the collection unchanged.
    """
    target = next((e for e in events if e.id == event_id), None)
    if target is None:
        return events
    if target.series_id:
        return [e for e in events if e.series_id != target.series_id]
    return [e for e in events if e.id != event_id]


def cleanup_past_events(
    events: list[CalendarEvent],
    now: datetime,
    retention_years: int = ANNIVERSARY_RETENTION_YEARS,
) -> list[CalendarEvent]:
    """
    Drop events that ended before today.

    Birthdays and holidays are kept until they ended more than
    retention_years before today.
    """
    today = start_of_day(now)
    anniversary_cutoff = add_years(today, -retention_years)

    def keep(event: CalendarEvent) -> bool:
        if event.type.is_yearly:
            return not event.end_date < anniversary_cutoff
        return not event.end_date < today

    return [e for e in events if keep(e)]


def _series_anchor(members: list[CalendarEvent]) -> CalendarEvent:
    base = next((e for e in members if not e.is_recurring), None)
    if base is not None:
        return base
    leap_day = [e for e in members if (e.start_date.month, e.start_date.day) == (2, 29)]
    return min(leap_day or members, key=lambda e: e.start_date)


def generate_recurring_events(
    events: list[CalendarEvent],
    now: datetime,
    make_id: Callable[[], str],
    years: int = RECURRENCE_YEARS,
) -> list[CalendarEvent]:
    """
    Top up yearly series so they reach `years` years past today.

    Each series is anchored on its original event while it survives, then
    on a surviving Feb 29 occurrence (so leap years keep the leap day),
    then on its earliest member. Years that already have an occurrence
    are skipped. Returns the input list when nothing needs adding.
    """
    series: dict[str, list[CalendarEvent]] = {}
    for e in events:
        if e.type.is_yearly and e.series_id:
            series.setdefault(e.series_id, []).append(e)

    horizon_year = now.year + years
    added: list[CalendarEvent] = []
    for members in series.values():
        anchor = _series_anchor(members)
        have_years = {e.start_date.year for e in members}
        offset = 1
        while anchor.start_date.year + offset <= horizon_year:
            if anchor.start_date.year + offset not in have_years:
                added.append(_yearly_copy(anchor, make_id(), offset))
            offset += 1

    if not added:
        return events
    return [*events, *added]


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    a_day = a.date() if isinstance(a, datetime) else a
    b_day = b.date() if isinstance(b, datetime) else b
    return a_day == b_day


def overlaps_day(event: CalendarEvent, day: date | datetime) -> bool:
    """Check if the event's [start, end] interval intersects the day."""
    return event.start_date <= end_of_day(day) and event.end_date >= start_of_day(day)


def sort_events_by_start(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start_date)


def events_on_day(events: list[CalendarEvent], day: date | datetime) -> list[CalendarEvent]:
    """
    Events that are present at any point during the day.

    Used by the day and agenda views. Pure function - no I/O.
    """
    return sort_events_by_start([e for e in events if overlaps_day(e, day)])


def events_starting_on(events: list[CalendarEvent], day: date | datetime) -> list[CalendarEvent]:
    """Events whose start falls on the day (month-grid dots)."""
    return [e for e in events if is_same_day(e.start_date, day)]


def month_markers(
    events: list[CalendarEvent],
    year: int,
    month: int,
) -> dict[date, list[CalendarEvent]]:
    """
    Map each day of the month that has events starting on it to those events.

    Pure function - no I/O.
    """
    markers: dict[date, list[CalendarEvent]] = {}
    for e in sort_events_by_start(events):
        d = e.start_date.date()
        if d.year == year and d.month == month:
            markers.setdefault(d, []).append(e)
    return markers
