"""Stay windows and the weekly stay policy.

A window is the half-open interval ``[start, end)`` of whole UTC days. The
renter-facing check-out day is the last day inside the window, so a Tuesday
to Monday stay covers seven days and ends at the following Tuesday 00:00 UTC.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from weekstay.booking.errors import InvalidWindow

RawDate = date | datetime | str

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Window:
    """Half-open span of UTC calendar days."""

    start: date
    end: date

    @classmethod
    def from_stay(cls, check_in: date, check_out: date) -> "Window":
        """Build the window of a stored booking (``check_out`` is the departure day)."""
        return cls(start=check_in, end=check_out + _ONE_DAY)

    @property
    def check_in(self) -> date:
        return self.start

    @property
    def check_out(self) -> date:
        return self.end - _ONE_DAY

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.end, time.min, tzinfo=timezone.utc)


def to_utc_date(value: RawDate) -> date:
    """Interpret a raw input as a UTC calendar day.

    Naive datetimes are taken to be UTC already; aware ones are converted.
    Strings must be ISO-8601 dates or datetimes.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidWindow(f"Invalid date: {text!r}") from None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc)
            except OverflowError:
                raise InvalidWindow(f"Invalid date: {value.isoformat()!r}") from None
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidWindow(f"Invalid date: {value!r}")


@dataclass(frozen=True)
class StayPolicy:
    """Which weekdays a stay starts and ends on, and how long it lasts.

    Weekdays use ``date.weekday()`` numbering (Monday=0). ``stay_days`` counts
    calendar days including the check-out day, so the default Tuesday to
    Monday rule is seven days (six nights).
    """

    check_in_weekday: int = calendar.TUESDAY
    check_out_weekday: int = calendar.MONDAY
    stay_days: int = 7

    def __post_init__(self) -> None:
        for weekday in (self.check_in_weekday, self.check_out_weekday):
            if not 0 <= weekday <= 6:
                raise ValueError(f"Weekday must be between 0 and 6, got {weekday}")
        if self.stay_days < 1:
            raise ValueError("stay_days must be at least 1")
        if (self.check_in_weekday + self.stay_days - 1) % 7 != self.check_out_weekday:
            raise ValueError(
                f"A {self.stay_days}-day stay starting on {calendar.day_name[self.check_in_weekday]} "
                f"cannot end on {calendar.day_name[self.check_out_weekday]}"
            )

    def anchor(self, raw_start: RawDate, raw_end: RawDate) -> Window:
        """Parse both ends and align them to UTC day boundaries.

        The start goes to the start of its day and the end to the end of its
        day. Only ordering is checked here; see ``validate`` for the policy.
        """
        start = to_utc_date(raw_start)
        last_day = to_utc_date(raw_end)
        try:
            end = last_day + _ONE_DAY
        except OverflowError:
            # No window can end after date.max.
            raise InvalidWindow(f"Invalid date: {last_day.isoformat()!r}") from None
        if start >= end:
            raise InvalidWindow(
                "End date must be after start date",
                details={"start": start.isoformat(), "end": (end - _ONE_DAY).isoformat()},
            )
        return Window(start=start, end=end)

    def validate(self, window: Window) -> Window:
        """Check the weekday and length rules, raising ``InvalidWindow``."""
        problems: list[str] = []
        if window.check_in.weekday() != self.check_in_weekday:
            problems.append(f"Check-in must be on a {calendar.day_name[self.check_in_weekday]}")
        if window.check_out.weekday() != self.check_out_weekday:
            problems.append(f"Check-out must be on a {calendar.day_name[self.check_out_weekday]}")
        if window.days != self.stay_days:
            problems.append(f"Booking must be exactly {self.stay_days} days long")

        if problems:
            raise InvalidWindow("; ".join(problems), details={"errors": problems})
        return window

    def normalize(self, raw_start: RawDate, raw_end: RawDate) -> Window:
        """Turn raw dates into a canonical window that satisfies the policy."""
        return self.validate(self.anchor(raw_start, raw_end))


def overlaps(a: Window, b: Window) -> bool:
    """Half-open interval overlap."""
    return a.start < b.end and b.start < a.end
