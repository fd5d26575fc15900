"""
bus_client/__init__.py

Client library for publishing entity lifecycle events to the event bus
and managing topics and subscriptions.

Usage:
    from bus_client import Client

    client = Client(url="https://bus.example.com", uuid="demo")
    client.created("widgets", "https://app.example.com/widgets/123")
    client.subscribe(topics=["widgets"], callback="https://app.example.com/events")

Dispatch strategies:
    - inline: events are sent on the calling thread (default)
    - queued: events are handed to a Celery worker for background delivery
"""

from bus_client.client import Client
from bus_client.connection import Connection
from bus_client.dispatch import DispatchMode, InlineStrategy, QueuedStrategy
from bus_client.errors import (
    BusClientError,
    BusTimeoutError,
    BusUnavailableError,
    ConfigurationError,
    DeliveryRejectedError,
    MalformedResponseError,
    QueueUnavailableError,
    TransportError,
    ValidationError,
)
from bus_client.schemas.models import (
    ClientConfig,
    ConnectionConfig,
    Event,
    EventKind,
    SubscriptionRequest,
    Topic,
)

__version__ = "1.0.0"

__all__ = [
    "Client",
    "Connection",
    "DispatchMode",
    "InlineStrategy",
    "QueuedStrategy",
    "BusClientError",
    "BusTimeoutError",
    "BusUnavailableError",
    "ConfigurationError",
    "DeliveryRejectedError",
    "MalformedResponseError",
    "QueueUnavailableError",
    "TransportError",
    "ValidationError",
    "ClientConfig",
    "ConnectionConfig",
    "Event",
    "EventKind",
    "SubscriptionRequest",
    "Topic",
]
