"""
bus_client/errors.py

Exception hierarchy for the event bus client.

Taxonomy:
- ValidationError: bad argument, raised before any network call
- ConfigurationError: bad client configuration, raised at construction
- TransportError: connect/timeout/abort, raised after bounded retries
- DeliveryRejectedError: the bus answered with a non-2xx status
- MalformedResponseError: the bus answered 2xx with an unreadable body
- QueueUnavailableError: the background job queue refused the submission
"""

from typing import Optional


class BusClientError(Exception):
    """Base class for every error raised by bus_client."""


class ValidationError(BusClientError, ValueError):
    """An argument failed validation. Never retried."""


class ConfigurationError(ValidationError):
    """The client configuration is invalid. Never retried."""


class TransportError(BusClientError):
    """The request never produced an HTTP response."""


class BusTimeoutError(TransportError):
    """The request exceeded the configured timeout."""


class DeliveryRejectedError(BusClientError):
    """
    The bus responded with a non-2xx status.

    Attributes:
        operation: Client operation that was rejected (e.g. "send_event")
        status_code: HTTP status returned by the bus
        body: First 200 characters of the response body
    """

    def __init__(self, operation: str, status_code: int, body: Optional[str] = None):
        self.operation = operation
        self.status_code = status_code
        self.body = (body or "")[:200]
        super().__init__(f"{operation} rejected ({status_code})")

    def __reduce__(self):
        return (self.__class__, (self.operation, self.status_code, self.body))


class BusUnavailableError(DeliveryRejectedError):
    """The startup pulse check did not succeed."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__("pulse", status_code, body)
        self.args = (f"cannot connect to bus ({status_code})",)

    def __reduce__(self):
        return (self.__class__, (self.status_code, self.body))


class MalformedResponseError(BusClientError):
    """The bus returned a body that could not be decoded."""


class QueueUnavailableError(BusClientError):
    """The job queue could not accept an event for background delivery."""
