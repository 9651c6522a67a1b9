"""Token redaction for debug logs.

Track payloads carry the project token at ``properties.token``; engage
payloads carry it at the top level as ``$token``. Both are masked before a
payload is logged so debug output can be shared.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

_TOKEN_KEYS: tuple[str, ...] = ("token", "$token")


def _mask_tokens(mapping: Mapping[str, Any]) -> dict[str, Any]:
    masked = dict(mapping)
    for key in _TOKEN_KEYS:
        if key in masked:
            masked[key] = REDACTED
    return masked


def redact_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a shallow copy of a track or engage payload with tokens masked."""
    redacted = _mask_tokens(payload)
    properties = redacted.get("properties")
    if isinstance(properties, Mapping):
        redacted["properties"] = _mask_tokens(properties)
    return redacted
