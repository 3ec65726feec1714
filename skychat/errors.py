"""Error hierarchy for the forecast core.

Two tiers: GeocodeUnavailable is recoverable (the orchestrator substitutes a
coordinate label), every other SkychatError is terminal for the request.
"""


class SkychatError(Exception):
    """Base class for forecast core errors."""


class InvalidInput(SkychatError):
    """Coordinates are missing, unparseable or out of range."""


class ConfigurationMissing(SkychatError):
    """No upstream credential is configured."""


class UpstreamUnavailable(SkychatError):
    """The upstream provider failed, timed out or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GeocodeUnavailable(UpstreamUnavailable):
    """Reverse geocoding failed. Recoverable."""
