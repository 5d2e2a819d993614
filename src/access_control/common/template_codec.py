"""Conversions between wire representations of binary templates and bytes.

Clients send templates either as base64 strings, as serialized Node-style
buffers (``{"type": "Buffer", "data": [...]}``) or as plain lists of byte
values. Everything is normalized to ``bytes`` before it reaches the matcher
or the store.
"""
from __future__ import annotations

import base64
import binascii
from typing import Any, Optional

from ..core.exceptions import ValidationError


def decode_template(value: Any, field_name: str = "faceTemplate") -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, dict) and value.get("type") == "Buffer":
        value = value.get("data") or []
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name} must contain byte values") from None
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(f"{field_name} is not valid base64") from None
    raise ValidationError(f"{field_name} has an unsupported format")


def encode_template(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")
