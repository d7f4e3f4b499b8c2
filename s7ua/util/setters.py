import struct
from datetime import date, datetime, timedelta

from ..error import ConversionError
from .getters import DATE_EPOCH, DATE_MAX, DTL_FORMAT, S5TIME_BASES

S5TIME_MAX = timedelta(seconds=9990)
DT_MIN = datetime(1990, 1, 1)
DT_MAX = datetime(2089, 12, 31, 23, 59, 59, 999999)
DTL_MIN_YEAR = 1970
DTL_MAX_YEAR = 2554


def byte_to_bcd(value: int) -> int:
    """Encode a number from 0 to 99 as one BCD byte.

    Examples:
        >>> hex(byte_to_bcd(85))
        '0x85'
    """
    if not 0 <= value <= 99:
        raise ConversionError(f"{value} doesn't fit in one BCD byte")
    return (value // 10) << 4 | value % 10


def _int_to_bcd3(value: int) -> int:
    return (value // 100) << 8 | (value // 10 % 10) << 4 | value % 10


def _s7_weekday(dt: date) -> int:
    # 1 is Sunday, 7 is Saturday
    return dt.isoweekday() % 7 + 1


def set_dt(dt: datetime) -> bytearray:
    """Set a DATE_AND_TIME value.

    Notes:
        Only 1990-01-01 to 2089-12-31 can be represented. Sub-millisecond
        digits are truncated.

    Args:
        dt: the timestamp to encode.

    Returns:
        The 8 BCD bytes.

    Raises:
        ConversionError: if `dt` is outside the range or not a datetime.

    Examples:
        >>> list(set_dt(datetime(2020, 7, 12, 17, 32, 2, 854000)))
        [32, 7, 18, 23, 50, 2, 133, 65]
    """
    if not isinstance(dt, datetime):
        raise ConversionError(f"DATE_AND_TIME expects a datetime, got {type(dt).__name__}")
    dt = dt.replace(tzinfo=None)
    if not DT_MIN <= dt <= DT_MAX:
        raise ConversionError(f"{dt} is outside the DATE_AND_TIME range {DT_MIN} to {DT_MAX}")
    millisecond = dt.microsecond // 1000
    return bytearray(
        [
            byte_to_bcd(dt.year % 100),
            byte_to_bcd(dt.month),
            byte_to_bcd(dt.day),
            byte_to_bcd(dt.hour),
            byte_to_bcd(dt.minute),
            byte_to_bcd(dt.second),
            byte_to_bcd(millisecond // 10),
            (millisecond % 10) << 4 | _s7_weekday(dt),
        ]
    )


def set_s5time(duration: timedelta) -> int:
    """Set a S5TIME value.

    Notes:
        The smallest time base that holds the duration in three BCD digits
        is used. Durations that are no multiple of that base are rounded to
        the nearest representable one.

    Args:
        duration: 0 to 9990 seconds.

    Returns:
        The 16 bit word.

    Examples:
        >>> hex(set_s5time(timedelta(seconds=12)))
        '0x1120'
    """
    if not isinstance(duration, timedelta):
        raise ConversionError(f"S5TIME expects a timedelta, got {type(duration).__name__}")
    if duration < timedelta(0) or duration > S5TIME_MAX:
        raise ConversionError(f"{duration} is outside the S5TIME range 0 to {S5TIME_MAX}")
    total_us = duration // timedelta(microseconds=1)
    for code, base in enumerate(S5TIME_BASES):
        base_us = base * 1000
        count = (total_us + base_us // 2) // base_us
        if count <= 999:
            return code << 12 | _int_to_bcd3(count)
    raise ConversionError(f"{duration} doesn't fit in S5TIME")


def set_counter(value: int) -> int:
    """Set a COUNTER value, 0 to 999."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConversionError(f"COUNTER expects an int, got {type(value).__name__}")
    if not 0 <= value <= 999:
        raise ConversionError(f"COUNTER value {value} is outside 0 to 999")
    return _int_to_bcd3(value)


def set_date(date_: date) -> int:
    """Set a DATE value as days since 1990-01-01."""
    if isinstance(date_, datetime):
        date_ = date_.date()
    if not isinstance(date_, date):
        raise ConversionError(f"DATE expects a date, got {type(date_).__name__}")
    if not DATE_EPOCH <= date_ <= DATE_MAX:
        raise ConversionError(f"DATE {date_} is outside {DATE_EPOCH} to {DATE_MAX}")
    return (date_ - DATE_EPOCH).days


def set_dtl(dt: datetime) -> bytes:
    """Set a DTL value as its 12 byte structure body.

    Examples:
        >>> set_dtl(datetime(2024, 3, 5, 6, 7, 8, 123456)).hex()
        'e80703050306070800ca5b07'
    """
    if not isinstance(dt, datetime):
        raise ConversionError(f"DTL expects a datetime, got {type(dt).__name__}")
    if not DTL_MIN_YEAR <= dt.year <= DTL_MAX_YEAR:
        raise ConversionError(f"DTL year {dt.year} is outside {DTL_MIN_YEAR} to {DTL_MAX_YEAR}")
    return struct.pack(
        DTL_FORMAT,
        dt.year,
        dt.month,
        dt.day,
        _s7_weekday(dt),
        dt.hour,
        dt.minute,
        dt.second,
        dt.microsecond * 1000,
    )
