"""pymixpanel - Async Python client for the Mixpanel tracking API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymixpanel")
except PackageNotFoundError:
    __version__ = "0+local"
from pymixpanel.client import MixpanelClient
from pymixpanel.config import MixpanelConfig
from pymixpanel.exceptions import (
    MixpanelConfigError,
    MixpanelError,
    MixpanelServerError,
    MixpanelTransportError,
)
from pymixpanel.models import DeliveryResult, EventPayload, Identity

__all__ = [
    "__version__",
    "DeliveryResult",
    "EventPayload",
    "Identity",
    "MixpanelClient",
    "MixpanelConfig",
    "MixpanelConfigError",
    "MixpanelError",
    "MixpanelServerError",
    "MixpanelTransportError",
]
