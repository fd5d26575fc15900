from bus_client.schemas.models import (
    ClientConfig,
    ConnectionConfig,
    Event,
    EventKind,
    SubscriptionRequest,
    Topic,
)

__all__ = [
    "ClientConfig",
    "ConnectionConfig",
    "Event",
    "EventKind",
    "SubscriptionRequest",
    "Topic",
]
