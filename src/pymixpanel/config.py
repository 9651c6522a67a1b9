"""Client configuration for pymixpanel."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pymixpanel._constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_SCHEME
from pymixpanel.exceptions import MixpanelConfigError

#: Options that may be changed on a live client via ``set_config``.
RUNTIME_OPTIONS: frozenset[str] = frozenset({"test", "debug"})


_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "n", "off"})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_STRINGS:
        return True
    if normalized in _FALSE_STRINGS:
        return False
    return default


def _option_bool(key: str, value: Any) -> bool:
    """Strictly convert a runtime option value; anything ambiguous raises."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise MixpanelConfigError(f"Config option {key!r} must be a boolean, got {value!r}")


@dataclasses.dataclass(frozen=True)
class MixpanelConfig:
    """Client configuration.

    Parameters
    ----------
    test : bool
        Mark every outgoing request with ``test=1``.
    debug : bool
        Log outgoing payloads and transport errors at INFO level.
    host : str
        API host. Defaults to ``api.mixpanel.com``.
    port : int
        API port. Defaults to the standard HTTP port.
    scheme : str
        URL scheme, ``http`` or ``https``.
    """

    test: bool = False
    debug: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    scheme: str = DEFAULT_SCHEME

    def __post_init__(self) -> None:
        if self.scheme not in {"http", "https"}:
            raise MixpanelConfigError(f"scheme must be 'http' or 'https', got {self.scheme!r}")
        if not self.host:
            raise MixpanelConfigError("host must be non-empty")
        if not 0 < self.port < 65536:
            raise MixpanelConfigError(f"port out of range: {self.port}")

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def with_overrides(self, overrides: Mapping[str, Any] | None = None, **options: Any) -> MixpanelConfig:
        """Return a copy with the runtime options in *overrides* applied.

        Only ``test`` and ``debug`` are accepted; any other key raises
        :class:`MixpanelConfigError`. Values must be booleans or
        boolean strings such as ``"false"``; others raise.
        """
        merged: dict[str, Any] = dict(overrides or {})
        merged.update(options)
        unknown = sorted(set(merged) - RUNTIME_OPTIONS)
        if unknown:
            raise MixpanelConfigError(f"Unknown config option(s): {', '.join(unknown)}")
        if not merged:
            return self
        return dataclasses.replace(self, **{key: _option_bool(key, value) for key, value in merged.items()})

    @classmethod
    def from_env(cls, **overrides: Any) -> MixpanelConfig:
        """Create configuration from ``MIXPANEL_*`` environment variables.

        Reads ``MIXPANEL_TEST``, ``MIXPANEL_DEBUG``, ``MIXPANEL_API_HOST``,
        ``MIXPANEL_API_PORT`` and ``MIXPANEL_API_SCHEME``. Explicit keyword
        arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "test" not in overrides:
            config_kwargs["test"] = _env_bool(env.get("MIXPANEL_TEST"), False)
        if "debug" not in overrides:
            config_kwargs["debug"] = _env_bool(env.get("MIXPANEL_DEBUG"), False)

        host = env.get("MIXPANEL_API_HOST")
        if host is not None:
            config_kwargs["host"] = host
        scheme = env.get("MIXPANEL_API_SCHEME")
        if scheme is not None:
            config_kwargs["scheme"] = scheme.strip().lower()

        # port is numeric, handle separately
        port_env = env.get("MIXPANEL_API_PORT")
        if port_env is not None and "port" not in overrides:
            try:
                config_kwargs["port"] = int(port_env)
            except ValueError as exc:
                raise MixpanelConfigError(f"MIXPANEL_API_PORT is not an integer: {port_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
