"""Payload encoding for the Mixpanel ingestion endpoints.

Both ``/track`` and ``/engage`` take the payload as base64-encoded JSON in
the ``data`` query parameter.
"""

from __future__ import annotations

import base64
import json
from typing import Any
from urllib.parse import urlencode


def encode_payload(payload: Any) -> str:
    """JSON-serialize *payload* and return it as standard base64 text."""
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def build_query(payload: Any, *, test: bool = False) -> str:
    """Build the ``data=...&ip=0[&test=1]`` query string for *payload*."""
    fields: dict[str, str] = {
        "data": encode_payload(payload),
        "ip": "0",
    }
    if test:
        fields["test"] = "1"
    return urlencode(fields)


def decode_query_data(data: str) -> Any:
    """Inverse of :func:`encode_payload`, used by tooling and tests."""
    return json.loads(base64.b64decode(data).decode("utf-8"))
