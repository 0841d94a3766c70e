"""Payload codec — canonical JSON encoding for message bodies.

Canonical form: sorted keys, compact separators, ASCII-only, UTF-8.  Two
equal payloads always encode to the same bytes.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from modelsync.errors import CodecError


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


@runtime_checkable
class Codec(Protocol):
    """Serialization capability for message payloads."""

    def encode(self, value: Any) -> bytes:
        ...

    def decode(self, data: bytes | str) -> Any:
        ...


class JsonCodec:
    """The default codec."""

    content_type = "application/json"

    def encode(self, value: Any) -> bytes:
        try:
            return canonical_json_bytes(value)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"Cannot encode payload: {exc}") from exc

    def decode(self, data: bytes | str) -> Any:
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise CodecError(f"Payload is not UTF-8: {exc}") from exc
        try:
            return json.loads(data)
        except json.JSONDecodeError as exc:
            raise CodecError(f"Invalid JSON: {exc}") from exc
