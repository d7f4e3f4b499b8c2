"""
Byte level codecs for the S7 types the OPC UA server hands over in their
PLC representation: BCD encoded DATE_AND_TIME, S5TIME and COUNTER values, the
12 byte DTL structure and DATE day counts.

The converters in :mod:`s7ua.converters` wrap these functions.
"""

from .getters import bcd_to_byte, get_counter, get_date, get_dt, get_dtl, get_s5time
from .setters import byte_to_bcd, set_counter, set_date, set_dt, set_dtl, set_s5time

__all__ = [
    "bcd_to_byte",
    "byte_to_bcd",
    "get_counter",
    "get_date",
    "get_dt",
    "get_dtl",
    "get_s5time",
    "set_counter",
    "set_date",
    "set_dt",
    "set_dtl",
    "set_s5time",
]
