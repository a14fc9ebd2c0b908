"""Connector exceptions surfaced to the identity-governance host."""
from __future__ import annotations


class ConnectorError(Exception):
    """Base exception for all connector operations."""
    pass


class ConfigurationError(ConnectorError):
    """Connector configuration is incomplete or invalid.

    The message is a short key (e.g. ``host.blank``) so the host can
    localize it.
    """
    pass


class ConnectorIOError(ConnectorError):
    """GitLab could not be reached or rejected the request.

    Attributes:
        response_code: HTTP status code from GitLab, if any
    """

    def __init__(self, message: str, response_code: int | None = None):
        self.response_code = response_code
        super().__init__(message)


class InvalidAttributeValueError(ConnectorError):
    """Missing mandatory attribute, immutable attribute change, or bad value."""
    pass


class UnknownUidError(ConnectorError):
    """Object with the given UID does not exist in GitLab."""
    pass


class UnsupportedObjectClassError(ConnectorError):
    """Object class is not part of the connector schema."""
    pass
