"""
bus_client/dispatch/__init__.py

Event dispatch strategies.

Available modes:
- inline: synchronous delivery on the calling thread (default)
- queued: background delivery through the Celery job queue
"""

from bus_client.dispatch.strategy import (
    DELIVER_EVENT_TASK,
    DispatchMode,
    DispatchStrategy,
    InlineStrategy,
    QueuedStrategy,
    build_strategy,
)

__all__ = [
    "DELIVER_EVENT_TASK",
    "DispatchMode",
    "DispatchStrategy",
    "InlineStrategy",
    "QueuedStrategy",
    "build_strategy",
]
