"""Mapping of OPC UA status codes to the three state :class:`~s7ua.types.StatusCode`."""

from typing import Any

from asyncua import ua

from ..types import StatusCode

SEVERITY_MASK = 0xC0000000
SEVERITY_UNCERTAIN = 0x40000000

GOOD = ua.StatusCodes.Good
BAD_NODE_ID_INVALID = ua.StatusCodes.BadNodeIdInvalid
BAD_WAITING_FOR_INITIAL_DATA = ua.StatusCodes.BadWaitingForInitialData
BAD_INTERNAL_ERROR = ua.StatusCodes.BadInternalError


def status_value(status: Any) -> int:
    """The integer of a status, accepting ints and ``ua.StatusCode`` objects."""
    if isinstance(status, int):
        return status
    return int(status.value)


def is_good(status: Any) -> bool:
    return status_value(status) & SEVERITY_MASK == 0


def to_status_code(status: Any) -> StatusCode:
    """Collapse an OPC UA status to Good, Uncertain or Bad.

    The two severity bits decide: 00 is good, 01 uncertain, anything else bad.

    Examples:
        >>> to_status_code(ua.StatusCodes.UncertainLastUsableValue)
        <StatusCode.UNCERTAIN: 'Uncertain'>
    """
    severity = status_value(status) & SEVERITY_MASK
    if severity == 0:
        return StatusCode.GOOD
    if severity == SEVERITY_UNCERTAIN:
        return StatusCode.UNCERTAIN
    return StatusCode.BAD
