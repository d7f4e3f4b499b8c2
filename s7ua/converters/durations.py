"""Converters for DATE and the integer based duration types."""

from datetime import date, timedelta
from typing import Any, Optional

from .base import expect_range, expect_type
from ..error import ConversionError
from ..util import get_date, set_date

ONE_DAY = timedelta(days=1)
NS_PER_MS = 1_000_000


def _div_toward_zero(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


class DurationConverter:
    """TIME, LTIME, TIME_OF_DAY and LTIME_OF_DAY.

    The server delivers an integer count of `resolution_ns` nanoseconds.
    Python timedeltas resolve microseconds, so LTIME values lose their
    nanosecond digits.
    """

    target_type = timedelta

    def __init__(self, name: str, resolution_ns: int, low: int, high: int, time_of_day: bool = False):
        self.name = name
        self.resolution_ns = resolution_ns
        self.low = low
        self.high = high
        self.time_of_day = time_of_day

    def from_protocol(self, raw: Any) -> Optional[timedelta]:
        if raw is None:
            return None
        expect_type(raw, (int,), self.name)
        expect_range(raw, self.low, self.high, self.name)
        return timedelta(microseconds=_div_toward_zero(raw * self.resolution_ns, 1000))

    def to_protocol(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        expect_type(value, (timedelta,), self.name)
        if self.time_of_day and not timedelta(0) <= value < ONE_DAY:
            raise ConversionError(f"{self.name} must be within one day, got {value}")
        raw = _div_toward_zero((value // timedelta(microseconds=1)) * 1000, self.resolution_ns)
        expect_range(raw, self.low, self.high, self.name)
        return raw


class DateConverter:
    target_type = date

    def from_protocol(self, raw: Any) -> Optional[date]:
        if raw is None:
            return None
        expect_type(raw, (int,), "DATE")
        return get_date(raw)

    def to_protocol(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return set_date(value)


TIME = DurationConverter("TIME", NS_PER_MS, -(2**31), 2**31 - 1)
LTIME = DurationConverter("LTIME", 1, -(2**63), 2**63 - 1)
TIME_OF_DAY = DurationConverter("TIME_OF_DAY", NS_PER_MS, 0, 86_399_999, time_of_day=True)
LTIME_OF_DAY = DurationConverter("LTIME_OF_DAY", 1, 0, 86_399_999_999_999, time_of_day=True)
