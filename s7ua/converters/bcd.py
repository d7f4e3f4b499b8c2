"""Converters for the BCD encoded S7 types."""

from datetime import datetime, timedelta
from typing import Any, Optional

from .base import expect_type
from ..util import get_counter, get_dt, get_s5time, set_counter, set_dt, set_s5time


class DateAndTimeConverter:
    """DATE_AND_TIME, delivered by the server as an array of 8 bytes."""

    target_type = datetime

    def from_protocol(self, raw: Any) -> Optional[datetime]:
        if raw is None:
            return None
        expect_type(raw, (bytes, bytearray, list, tuple), "DATE_AND_TIME")
        return get_dt(raw)

    def to_protocol(self, value: Any) -> Optional[bytes]:
        if value is None:
            return None
        return bytes(set_dt(value))


class S5TimeConverter:
    target_type = timedelta

    def from_protocol(self, raw: Any) -> Optional[timedelta]:
        if raw is None:
            return None
        expect_type(raw, (int,), "S5TIME")
        return get_s5time(raw)

    def to_protocol(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return set_s5time(value)


class CounterConverter:
    target_type = int

    def from_protocol(self, raw: Any) -> Optional[int]:
        if raw is None:
            return None
        expect_type(raw, (int,), "COUNTER")
        return get_counter(raw)

    def to_protocol(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return set_counter(value)
