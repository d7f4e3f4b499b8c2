import struct
from datetime import date, datetime, timedelta
from typing import Sequence, Union

from ..error import ConversionError

ByteSequence = Union[bytes, bytearray, Sequence[int]]

# time bases of the S5TIME selector bits, in milliseconds
S5TIME_BASES = (10, 100, 1000, 10000)
DATE_EPOCH = date(1990, 1, 1)
DATE_MAX = date(2168, 12, 31)
DTL_FORMAT = "<HBBBBBBI"
DTL_SIZE = struct.calcsize(DTL_FORMAT)


def bcd_to_byte(byte: int) -> int:
    """Decode a two digit BCD byte.

    Args:
        byte: the BCD encoded value, 0x00 to 0x99.

    Returns:
        The decimal value.

    Raises:
        ConversionError: if a nibble is not a decimal digit.

    Examples:
        >>> bcd_to_byte(0x85)
        85
    """
    high, low = byte >> 4, byte & 0xF
    if byte < 0 or high > 9 or low > 9:
        raise ConversionError(f"0x{byte:02X} is not a valid BCD byte")
    return high * 10 + low


def _bcd3_to_int(word: int) -> int:
    """Decode the three BCD digits in the low 12 bits of a word."""
    digits = [(word >> shift) & 0xF for shift in (8, 4, 0)]
    if any(d > 9 for d in digits):
        raise ConversionError(f"0x{word & 0xFFF:03X} is not a valid 3 digit BCD value")
    return digits[0] * 100 + digits[1] * 10 + digits[2]


def get_dt(data: ByteSequence) -> datetime:
    """Get a DATE_AND_TIME value as python datetime object.

    Notes:
        Datatype `DATE_AND_TIME` consists of 8 BCD bytes in the PLC. Only the
        last two digits of the year are stored, 90-99 are 1990-1999 and 00-89
        are 2000-2089. The low nibble of the last byte is the weekday, which
        is ignored.

    Args:
        data: the 8 bytes as read from the server.

    Returns:
        The timestamp with millisecond precision.

    Raises:
        ConversionError: on a wrong length or a malformed BCD digit.

    Examples:
        >>> get_dt([32, 7, 18, 23, 50, 2, 133, 65])
        datetime.datetime(2020, 7, 12, 17, 32, 2, 854000)
    """
    if len(data) != 8:
        raise ConversionError(f"DATE_AND_TIME needs 8 bytes, got {len(data)}")
    year = bcd_to_byte(data[0])
    year = 2000 + year if year < 90 else 1900 + year
    month = bcd_to_byte(data[1])
    day = bcd_to_byte(data[2])
    hour = bcd_to_byte(data[3])
    minute = bcd_to_byte(data[4])
    second = bcd_to_byte(data[5])
    # first two millisecond digits in byte 6, the last one in the high nibble of byte 7
    last_digit = data[7] >> 4
    if last_digit > 9:
        raise ConversionError(f"0x{data[7]:02X} has no valid millisecond digit")
    millisecond = bcd_to_byte(data[6]) * 10 + last_digit
    try:
        return datetime(year, month, day, hour, minute, second, millisecond * 1000)
    except ValueError as e:
        raise ConversionError(f"DATE_AND_TIME bytes {list(data)} are out of range: {e}") from e


def get_s5time(word: int) -> timedelta:
    """Get a S5TIME value as timedelta.

    Notes:
        Bits 12 and 13 select the time base (10ms, 100ms, 1s, 10s), the low
        12 bits hold the BCD encoded count.

    Args:
        word: the 16 bit value as read from the server.

    Returns:
        The duration.

    Examples:
        >>> get_s5time(0x2127)
        datetime.timedelta(seconds=127)
    """
    base = S5TIME_BASES[(word >> 12) & 0x3]
    return timedelta(milliseconds=_bcd3_to_int(word) * base)


def get_counter(word: int) -> int:
    """Get a COUNTER value, a three digit BCD number.

    Examples:
        >>> get_counter(0x0999)
        999
    """
    return _bcd3_to_int(word & 0x0FFF)


def get_date(days: int) -> date:
    """Get a DATE value, the number of days since 1990-01-01.

    Raises:
        ConversionError: if the date is outside the PLC's range.

    Examples:
        >>> get_date(11204)
        datetime.date(2020, 9, 4)
    """
    if days < 0:
        raise ConversionError(f"DATE can't be negative, got {days}")
    date_val = DATE_EPOCH + timedelta(days=days)
    if date_val > DATE_MAX:
        raise ConversionError(f"DATE {date_val} is higher than the PLC allows")
    return date_val


def get_dtl(body: ByteSequence) -> datetime:
    """Get a DTL value from its 12 byte structure body.

    Notes:
        The body is the binary encoded structure as transported in the OPC UA
        ExtensionObject: year (2 bytes), month, day, weekday, hour, minute,
        second (1 byte each) and nanoseconds (4 bytes), little endian.
        Python datetimes resolve microseconds, finer digits are dropped.

    Raises:
        ConversionError: on a wrong length or a field out of range.
    """
    if len(body) != DTL_SIZE:
        raise ConversionError(f"DTL needs {DTL_SIZE} bytes, got {len(body)}")
    year, month, day, _weekday, hour, minute, second, nanosecond = struct.unpack(DTL_FORMAT, bytes(body))
    if nanosecond >= 1_000_000_000:
        raise ConversionError(f"DTL nanoseconds out of range: {nanosecond}")
    try:
        return datetime(year, month, day, hour, minute, second, nanosecond // 1000)
    except ValueError as e:
        raise ConversionError(f"DTL fields are out of range: {e}") from e
