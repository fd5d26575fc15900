"""
bus_client/dispatch/strategy.py

Dispatch strategies decide when and where an event is actually sent.

Two strategies exist:
- inline: Connection.send_event on the calling thread
- queued: hand the event to the Celery job queue for background delivery

The mode is chosen once when the Client is built. The set of modes is
closed; an unknown name fails with ConfigurationError.
"""

import logging
from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from kombu.exceptions import OperationalError

from bus_client import validators
from bus_client.errors import QueueUnavailableError
from bus_client.schemas.models import DEFAULT_QUEUE, ConnectionConfig, Event

logger = logging.getLogger("bus_client")

DELIVER_EVENT_TASK = "bus_client.deliver_event"


class DispatchMode(str, Enum):
    INLINE = "inline"
    QUEUED = "queued"


@runtime_checkable
class DispatchStrategy(Protocol):
    """Anything that can take an event and get it delivered."""

    mode: DispatchMode

    def dispatch(self, event: Event, connection_config: ConnectionConfig) -> Any:
        ...


class InlineStrategy:
    """
    Send the event synchronously through the client's own connection.

    Every failure (transport, non-2xx) propagates to the caller.
    """

    mode = DispatchMode.INLINE

    def __init__(self, connection_provider: Callable[[], Any]):
        self._connection_provider = connection_provider

    def dispatch(self, event: Event, connection_config: ConnectionConfig) -> None:
        self._connection_provider().send_event(event)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class QueuedStrategy:
    """
    Submit the event to the job queue and return immediately.

    The job payload carries the event fields and a plain-dict copy of the
    connection config, so the worker can rebuild its own Connection.
    Delivery failures surface through Celery, not to the caller.
    """

    mode = DispatchMode.QUEUED

    def __init__(self, app=None, queue: str = DEFAULT_QUEUE):
        if app is None:
            from bus_client.celery_app import celery_app as app
        self.app = app
        self.queue = queue

    def dispatch(self, event: Event, connection_config: ConnectionConfig) -> str:
        """
        Returns:
            The id of the submitted job

        Raises:
            QueueUnavailableError: the broker refused the submission
        """
        args = (
            event.kind.value,
            event.topic,
            event.callback,
            event.timestamp,
            connection_config.model_dump(),
        )
        try:
            result = self.app.send_task(DELIVER_EVENT_TASK, args=args, queue=self.queue)
        except (OperationalError, OSError) as e:
            logger.error(
                f"event_enqueue_failed: {e}",
                extra={"topic": event.topic, "type": event.kind.value, "queue": self.queue},
            )
            raise QueueUnavailableError(f"cannot enqueue event: {e}") from e

        logger.info(
            "event_enqueued",
            extra={"topic": event.topic, "type": event.kind.value, "task_id": result.id},
        )
        return result.id

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(queue={self.queue!r})"


def build_strategy(
    mode: str,
    connection_provider: Callable[[], Any],
    app=None,
    queue: str = DEFAULT_QUEUE,
) -> DispatchStrategy:
    """
    Build the strategy for a dispatch mode name.

    Raises:
        ConfigurationError: unknown mode
    """
    resolved = DispatchMode(validators.validate_dispatch_mode(mode))

    builders = {
        DispatchMode.INLINE: lambda: InlineStrategy(connection_provider),
        DispatchMode.QUEUED: lambda: QueuedStrategy(app=app, queue=queue),
    }
    return builders[resolved]()
