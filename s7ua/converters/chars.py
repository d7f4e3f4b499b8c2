from typing import Any, Optional

from .base import expect_range, expect_type
from ..error import ConversionError


class CharConverter:
    """CHAR (one Latin-1 byte) and WCHAR (one UTF-16 code unit)."""

    target_type = str

    def __init__(self, name: str, max_code: int):
        self.name = name
        self.max_code = max_code

    def from_protocol(self, raw: Any) -> Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, (bytes, bytearray)):
            if len(raw) != 1:
                raise ConversionError(f"{self.name} needs a single byte, got {len(raw)}")
            raw = raw[0]
        expect_type(raw, (int,), self.name)
        expect_range(raw, 0, self.max_code, self.name)
        return chr(raw)

    def to_protocol(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        expect_type(value, (str,), self.name)
        if len(value) != 1:
            raise ConversionError(f"{self.name} needs exactly one character, got {value!r}")
        code = ord(value)
        expect_range(code, 0, self.max_code, self.name)
        return code


CHAR = CharConverter("CHAR", 0xFF)
WCHAR = CharConverter("WCHAR", 0xFFFF)
