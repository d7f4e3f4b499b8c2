from datetime import datetime
from typing import Any, Optional

from asyncua import ua

from .base import expect_type
from ..error import ConversionError
from ..ua.type_map import DTL_ENCODING_ID
from ..util import get_dtl, set_dtl


class DtlConverter:
    """DTL, transported as an ExtensionObject with a 12 byte binary body.

    The raw value may also be the bare body.
    """

    target_type = datetime

    def __init__(self, namespace_index: int = 3):
        self.namespace_index = namespace_index

    def from_protocol(self, raw: Any) -> Optional[datetime]:
        if raw is None:
            return None
        if isinstance(raw, ua.ExtensionObject):
            if raw.Body is None:
                raise ConversionError(f"DTL extension object {raw.TypeId} has no body")
            raw = raw.Body
        expect_type(raw, (bytes, bytearray), "DTL")
        return get_dtl(raw)

    def to_protocol(self, value: Any) -> Optional[ua.ExtensionObject]:
        if value is None:
            return None
        return ua.ExtensionObject(TypeId=ua.NodeId(DTL_ENCODING_ID, self.namespace_index), Body=set_dtl(value))
