from .definition import UdtDefinition, UdtMemberDefinition
from .registry import UdtTypeRegistry

__all__ = ["UdtDefinition", "UdtMemberDefinition", "UdtTypeRegistry"]
