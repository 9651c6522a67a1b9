"""High-level async client for the Mixpanel tracking API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from pymixpanel._codec import build_query
from pymixpanel._constants import ENGAGE_ENDPOINT, FUNNEL_EVENT, SUCCESS_BODY, TRACK_ENDPOINT
from pymixpanel._redact import redact_payload
from pymixpanel._transport import HttpTransport, Transport
from pymixpanel.config import MixpanelConfig
from pymixpanel.exceptions import (
    MixpanelConfigError,
    MixpanelError,
    MixpanelServerError,
    MixpanelTransportError,
)
from pymixpanel.models import DeliveryResult, EventPayload, Identity, dump_profile_update

_logger = logging.getLogger(__name__)

Callback = Callable[[MixpanelError | None], Any]


def _unixtime() -> int:
    """Current epoch timestamp in whole seconds."""
    return int(time.time())


class MixpanelClient:
    """Async client for the Mixpanel tracking API.

    Every ``track``/``engage`` call schedules exactly one GET request and
    returns the :class:`asyncio.Task` for it right away. The task resolves to
    a :class:`DeliveryResult` and never raises for delivery failures.

    Calls must come from a running event loop. Without ``async with`` the
    client opens its HTTP session on the first request; call :meth:`aclose`
    to release it.

    Usage::

        async with MixpanelClient("project-token") as mp:
            mp.identify("user-42")
            result = await mp.track("Signed Up", {"plan": "pro"})
    """

    def __init__(
        self,
        token: str,
        config: MixpanelConfig | Mapping[str, Any] | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        **options: Any,
    ) -> None:
        if not token:
            raise MixpanelConfigError("The Mixpanel Client needs a Mixpanel token")
        self._token = token

        if isinstance(config, MixpanelConfig):
            self._config = config.with_overrides(options)
        else:
            self._config = MixpanelConfig().with_overrides(config, **options)

        self._identity = Identity()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        if transport is None and session is not None:
            self._transport = HttpTransport(self._config, session)
        self._pending: set[asyncio.Task[DeliveryResult]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MixpanelClient:
        self._ensure_transport()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for in-flight requests, then release the owned HTTP session."""
        await self.drain()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    async def drain(self) -> list[DeliveryResult]:
        """Wait until no request is in flight, including ones dispatched meanwhile."""
        results: list[DeliveryResult] = []
        while self._pending:
            batch = list(self._pending)
            results.extend(await asyncio.gather(*batch))
            self._pending.difference_update(batch)
        return results

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def token(self) -> str:
        return self._token

    @property
    def config(self) -> MixpanelConfig:
        return self._config

    @property
    def identity(self) -> Identity:
        """A copy of the current identity state."""
        return Identity(self._identity.distinct_id, self._identity.name_tag)

    def set_config(self, overrides: Mapping[str, Any] | None = None, **options: Any) -> None:
        """Apply ``test``/``debug`` overrides; unknown keys raise."""
        self._config = self._config.with_overrides(overrides, **options)

    def identify(self, distinct_id: str) -> None:
        """Tie all subsequent events to *distinct_id*."""
        self._identity.distinct_id = distinct_id

    def set_name_tag(self, name: str) -> None:
        """Label the user with a human-readable (non-unique) name."""
        self._identity.name_tag = name

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def track(
        self,
        event: str,
        properties: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Task[DeliveryResult]:
        """Send *event* to ``/track``.

        ``token`` and ``time`` are filled in unless the caller set them.
        The identified ``distinct_id`` always overrides the caller's.
        """
        props: dict[str, Any] = dict(properties or {})
        if props.get("token") is None:
            props["token"] = self._token
        if props.get("time") is None:
            props["time"] = _unixtime()

        if self._identity.distinct_id is not None:
            props["distinct_id"] = self._identity.distinct_id
        if self._identity.name_tag is not None:
            props["mp_name_tag"] = self._identity.name_tag

        payload = EventPayload(event=event, properties=props).model_dump(mode="json")

        if self._config.debug:
            _logger.info("Sending the following event to Mixpanel: %s", redact_payload(payload))

        return self._send_request(TRACK_ENDPOINT, payload, callback)

    def engage(
        self,
        properties: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Task[DeliveryResult]:
        """Send a profile update to ``/engage``."""
        props: dict[str, Any] = dict(properties or {})
        if props.get("$token") is None:
            props["$token"] = self._token
        payload = dump_profile_update(props)

        if self._config.debug:
            _logger.info("Sending the following engage to Mixpanel: %s", redact_payload(payload))

        return self._send_request(ENGAGE_ENDPOINT, payload, callback)

    def track_funnel(
        self,
        funnel: str,
        step: int,
        goal: str,
        properties: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Task[DeliveryResult]:
        """Track one step of a funnel as an ``mp_funnel`` event."""
        props: dict[str, Any] = dict(properties or {})
        props["funnel"] = funnel
        props["step"] = step
        props["goal"] = goal
        return self.track(FUNNEL_EVENT, props, callback)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_transport(self) -> Transport:
        if self._transport is None:
            self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self._transport

    def _send_request(
        self,
        endpoint: str,
        payload: Any,
        callback: Callback | None,
    ) -> asyncio.Task[DeliveryResult]:
        loop = asyncio.get_running_loop()
        transport = self._ensure_transport()
        if callback is not None and not callable(callback):
            _logger.debug("Ignoring non-callable callback %r", callback)
            callback = None

        # Encode now so later config/identity changes cannot leak into this request.
        query = build_query(payload, test=self._config.test)
        task = loop.create_task(
            self._deliver(transport, endpoint, query, callback),
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(
        self,
        transport: Transport,
        endpoint: str,
        query: str,
        callback: Callback | None,
    ) -> DeliveryResult:
        error: MixpanelError | None = None
        try:
            status, body = await transport.get(endpoint, query)
        except MixpanelTransportError as exc:
            if self._config.debug:
                _logger.info("Got Error: %s", exc.cause if exc.cause is not None else exc)
            error = exc
        else:
            if body != SUCCESS_BODY:
                error = MixpanelServerError(body, status_code=status, endpoint=endpoint)

        if callback is not None:
            try:
                callback(error)
            except Exception:
                _logger.exception("Mixpanel callback for %s raised", endpoint)

        return DeliveryResult(endpoint=endpoint, error=error)
