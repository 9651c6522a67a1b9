"""Internal constants shared across the library."""

DEFAULT_HOST = "api.mixpanel.com"
DEFAULT_PORT = 80
DEFAULT_SCHEME = "http"

TRACK_ENDPOINT = "/track"
ENGAGE_ENDPOINT = "/engage"

#: Exact response body the tracking API returns on success.
SUCCESS_BODY = "1"

FUNNEL_EVENT = "mp_funnel"
USER_AGENT = "pymixpanel"
