"""FlexTime: a time of day parsed from loose, possibly ambiguous strings.

Handles:
    "0800", "23:59", "1312"       unambiguous 24-hour times
    "8:00 pm", "1212a", "11:11p"  12-hour times with am/pm
    "830", "11:59", "115"         ambiguous 12-hour times, resolved to the
                                  next occurrence after a reference moment

Examples:
    >>> FlexTime.parse("830", datetime(2018, 2, 1, 7, 0))
    FlexTime(hour=8, minute=30)
    >>> FlexTime.parse("830", datetime(2018, 2, 1, 12, 0))
    FlexTime(hour=20, minute=30)
    >>> FlexTime.parse("2:15p").format("HH:mm")
    '14:15'
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from flexcmd.errors import InvalidTimeStringError, InvalidInitializerError

logger = logging.getLogger("flexcmd.clock.flextime")

DEFAULT_FORMAT = "hh:mm tt"
MINUTES_PER_DAY = 24 * 60
HALF_DAY_MINUTES = 12 * 60

# Whole-string grammar: groups are hour digits, minute digits, am/pm marker.
_FLEX_TIME_RE = re.compile(r"\s*([0-9]?[0-9]):?([0-9][0-9])\s*([ap]m?)?\s*", re.IGNORECASE)

# Same grammar as a single capture group, unanchored and without flags, for
# embedding a flex time into a larger pattern.
FLEX_TIME_PATTERN = r"((?:[0-9]?[0-9]):?(?:[0-9][0-9])\s*(?:[aApP][mM]?)?)"
FLEX_TIME_SUBSTRING_RE = re.compile(FLEX_TIME_PATTERN)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _resolve_moment(value):
    """Turn None, a POSIX timestamp or a datetime into a datetime."""
    if value is None:
        return datetime.now()
    if isinstance(value, datetime):
        return value
    if _is_number(value):
        return datetime.fromtimestamp(value)
    raise InvalidInitializerError(value, "expected a datetime or a timestamp")


def _resolve_reference(value):
    """Like _resolve_moment, but anything with hour and minute will do."""
    if isinstance(value, (FlexTime, time)):
        return value
    return _resolve_moment(value)


def _find_future_hour(reference, hour, minute):
    """Resolve an ambiguous 12-hour hour to the next occurrence after reference."""
    hour = 0 if hour == 12 else hour
    while hour < reference.hour:
        hour += 12
    if hour == reference.hour and minute < reference.minute:
        hour += 12
    return hour % 24


def _parse_values(text, reference):
    """Return (hour, minute) for text, or None if it is not a valid flex time."""
    m = _FLEX_TIME_RE.fullmatch(text)
    if m is None:
        return None

    hour_token, minute_token, ampm = m.groups()
    hour, minute = int(hour_token), int(minute_token)
    if hour > 23 or minute > 59:
        return None

    if ampm:
        # am/pm only makes sense on 1..12; "2300 am" and "0 pm" are nonsense
        if not 1 <= hour <= 12:
            return None
        hour = 0 if hour == 12 else hour
        if ampm[0].lower() == "p":
            hour += 12
        return hour, minute

    # "0800" is unambiguously morning, but "800" could be either
    if hour == 0 or hour > 12 or hour_token[0] == "0":
        return hour, minute

    return _find_future_hour(_resolve_reference(reference), hour, minute), minute


@dataclass(frozen=True, order=True)
class FlexTime:
    """A wall-clock time of day with no date attached."""

    hour: int
    minute: int

    def __post_init__(self):
        for name, value, limit in (("hour", self.hour, 24), ("minute", self.minute, 60)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidInitializerError(value, f"{name} must be an int")
            if not 0 <= value < limit:
                raise InvalidInitializerError(value, f"{name} out of range")

    # --- Construction ---

    @classmethod
    def of(cls, init=None, reference=None):
        """Build a FlexTime from whatever the caller has.

        Args:
            init: None or "" (the time of reference), a time string, a
                FlexTime, a datetime or time, or a POSIX timestamp in seconds.
            reference: Moment used to resolve ambiguous 12-hour strings and
                to supply the time when init is empty. Defaults to now.

        Raises:
            InvalidTimeStringError: init is a string that does not parse.
            InvalidInitializerError: init is of an unsupported type.
        """
        if init is None or init == "":
            return cls.now(reference)
        if isinstance(init, str):
            return cls.parse(init, reference)
        if isinstance(init, FlexTime):
            return init
        if isinstance(init, (datetime, time)):
            return cls.from_datetime(init)
        if _is_number(init):
            return cls.from_timestamp(init)
        raise InvalidInitializerError(init)

    @classmethod
    def now(cls, reference=None):
        """The time of day of reference, or of the current moment."""
        ref = _resolve_reference(reference)
        return cls(ref.hour, ref.minute)

    @classmethod
    def parse(cls, text, reference=None):
        """Parse a time string, resolving ambiguous 12-hour times against reference."""
        values = _parse_values(text, reference)
        if values is None:
            logger.debug("Rejected time string %r", text)
            raise InvalidTimeStringError(text)
        return cls(*values)

    @classmethod
    def from_datetime(cls, value):
        return cls(value.hour, value.minute)

    @classmethod
    def from_timestamp(cls, seconds):
        return cls.from_datetime(datetime.fromtimestamp(seconds))

    @classmethod
    def at(cls, from_moment=None, delta_minutes=0):
        """The time of day delta_minutes after from_moment.

        from_moment may be None (now), a datetime, a POSIX timestamp, or a
        FlexTime, which is first placed on its next occurrence with
        to_datetime(). Negative deltas and day boundaries are fine.
        """
        if isinstance(from_moment, FlexTime):
            moment = from_moment.to_datetime()
        else:
            moment = _resolve_moment(from_moment)
        if delta_minutes:
            moment += timedelta(minutes=int(delta_minutes))
        return cls.from_datetime(moment)

    # --- Projection and arithmetic ---

    @property
    def minutes_since_midnight(self):
        return self.hour * 60 + self.minute

    def to_datetime(self, fudge_minutes=0, base=None):
        """Place this time on the calendar relative to base (default now).

        Stays on base's day unless this time is already behind base by
        more than fudge_minutes (by nearest-occurrence delta), in which
        case it moves to the following day. Seconds are zeroed.
        """
        date = _resolve_moment(base)
        fudge_minutes = fudge_minutes or 0

        if self.delta_minutes(date) - fudge_minutes > 0:
            date += timedelta(days=1)

        return date.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)

    def absolute_delta_minutes(self, other):
        """Minutes from this time to other's time of day, ignoring wraparound."""
        return (other.hour * 60 + other.minute) - self.minutes_since_midnight

    def delta_minutes(self, other):
        """Signed minutes from this time to other's time of day, the short way round.

        00:15 is 30 minutes after 23:45, not 1410 minutes before it.
        """
        delta = self.absolute_delta_minutes(other)
        if delta > HALF_DAY_MINUTES:
            delta -= MINUTES_PER_DAY
        elif delta < -HALF_DAY_MINUTES:
            delta += MINUTES_PER_DAY
        return delta

    # --- Formatting ---

    def format(self, fmt=None):
        """Render using tokens HH, hh, mm (or MM), TT, tt, T, t.

        Each token is replaced at most once, in that order, so that earlier
        substitutions can't be mistaken for later tokens.
        """
        result = fmt or DEFAULT_FORMAT
        is_am = self.hour < 12
        result = result.replace("HH", f"{self.hour:02d}", 1)
        result = result.replace("hh", str(self.hour % 12 or 12), 1)
        result = re.sub("mm", f"{self.minute:02d}", result, count=1, flags=re.IGNORECASE)
        result = result.replace("TT", "AM" if is_am else "PM", 1)
        result = result.replace("tt", "am" if is_am else "pm", 1)
        result = result.replace("T", "A" if is_am else "P", 1)
        result = result.replace("t", "a" if is_am else "p", 1)
        return result

    def __str__(self):
        return self.format()
