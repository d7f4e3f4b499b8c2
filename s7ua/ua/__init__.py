"""OPC UA side of the client: the session boundary, status codes and type ids."""

from .session import BrowseResult, ReadResult, Session, SessionFactory
from .status import to_status_code
from .type_map import map_data_type

__all__ = ["BrowseResult", "ReadResult", "Session", "SessionFactory", "to_status_code", "map_data_type"]
