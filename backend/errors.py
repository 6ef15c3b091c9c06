"""Exceptions raised while building a city report.

Every error carries the HTTP status it maps to; the message is what the
client sees in the ``error`` field.
"""


class CityDataError(Exception):
    """Base exception for city report errors."""
    status_code = 500


class MissingParameterError(CityDataError):
    """Raised when the request has no usable city name."""
    status_code = 400


class NotFoundError(CityDataError):
    """Raised when geocoding returns no place."""
    pass


class NoLocationDataError(CityDataError):
    """Raised when the local dataset has no row for the place."""
    pass


class AllEndpointsFailedError(CityDataError):
    """Raised when every candidate endpoint of a failover fetch failed."""

    def __init__(self, message: str, endpoints: list[str] | None = None):
        super().__init__(message)
        self.endpoints = list(endpoints or [])


class UpstreamTransportError(CityDataError):
    """Raised when a single-endpoint upstream call fails or returns garbage."""
    pass


class DeadlineExceededError(CityDataError):
    """Raised when the whole report takes longer than the request deadline."""
    pass
