"""Reversible text encodings applied to the record at the persistence boundary.

A codec turns serialized record bytes into the text written to disk and back.
Swapping in a stronger transform only requires another object with the same
two methods; the engine never sees the encoded form.
"""

from __future__ import annotations

import base64
import binascii
from typing import Protocol

from .errors import RecordDecodeError


class RecordCodec(Protocol):
    def encode(self, data: bytes) -> str: ...

    def decode(self, text: str) -> bytes: ...


class Base64Codec:
    """Standard-alphabet base64 on a single line."""

    def encode(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    def decode(self, text: str) -> bytes:
        try:
            return base64.b64decode(text.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise RecordDecodeError(f"Invalid base64 payload: {exc}") from exc


__all__ = ["RecordCodec", "Base64Codec"]
