"""
Client for the OPC UA server of Siemens S7-1200 and S7-1500 PLCs.

Discovers data blocks, areas and user defined types in the server's address
space and reads and writes their variables as python values.
"""

from importlib.metadata import version, PackageNotFoundError

from .client import S7UaClient
from .config import ClientConfig
from .converters import CustomUdtConverter, MemberValues, get_converter
from .datastore import DataStore
from .pool import SessionPool
from .service import S7Service
from .structure import GlobalDataBlock, InstanceDataBlock, InstanceDbSection, StructureElement, Variable
from .types import S7DataType, StatusCode
from .udt import UdtDefinition, UdtMemberDefinition, UdtTypeRegistry

__all__ = [
    "S7UaClient",
    "S7Service",
    "ClientConfig",
    "SessionPool",
    "DataStore",
    "GlobalDataBlock",
    "InstanceDataBlock",
    "InstanceDbSection",
    "StructureElement",
    "Variable",
    "S7DataType",
    "StatusCode",
    "CustomUdtConverter",
    "MemberValues",
    "get_converter",
    "UdtDefinition",
    "UdtMemberDefinition",
    "UdtTypeRegistry",
]

try:
    __version__ = version("python-s7ua")
except PackageNotFoundError:
    __version__ = "0.0rc0"
