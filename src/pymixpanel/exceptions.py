"""Custom exception hierarchy for pymixpanel."""

from __future__ import annotations


class MixpanelError(Exception):
    """Base exception for all pymixpanel errors."""


class MixpanelConfigError(MixpanelError, ValueError):
    """Invalid or missing configuration (empty token, unknown option)."""


class MixpanelServerError(MixpanelError):
    """The API answered, but not with the success sentinel.

    ``body`` holds the raw response text for diagnostics.
    """

    def __init__(
        self,
        body: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(f"Mixpanel Server Error: {body}")


class MixpanelTransportError(MixpanelError):
    """The HTTP request could not complete (DNS, connection reset, ...)."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(message)
