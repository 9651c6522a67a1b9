"""Payload and result models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from pymixpanel.exceptions import MixpanelError


class EventPayload(BaseModel):
    """The ``{event, properties}`` body sent to ``/track``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    event: str
    properties: dict[str, Any] = Field(default_factory=dict)


_PROFILE_ADAPTER: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])


def dump_profile_update(properties: dict[str, Any]) -> dict[str, Any]:
    """JSON-ready copy of an engage mapping, serialized like event properties."""
    return _PROFILE_ADAPTER.dump_python(properties, mode="json")


@dataclass(slots=True)
class Identity:
    """Sticky identity applied to every tracked event.

    ``None`` means unset; unset values are not injected.
    """

    distinct_id: str | None = None
    name_tag: str | None = None


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of one dispatched request.

    ``error`` is ``None`` on success, otherwise a
    :class:`~pymixpanel.exceptions.MixpanelServerError` or
    :class:`~pymixpanel.exceptions.MixpanelTransportError`.
    """

    endpoint: str
    error: MixpanelError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error
