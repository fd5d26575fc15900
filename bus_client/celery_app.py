"""
bus_client/celery_app.py

Defines the Celery application and the background event delivery task
used by queued dispatch.

The task receives plain JSON-serializable arguments, rebuilds its own
Connection from the connection config and performs the same send_event
call inline dispatch would have made. Transport failures go through
Celery's retry channel; a rejected event fails the job.
"""

import logging
from typing import Any, Dict, Optional, Union

from celery import Celery
from celery import signals

from bus_client.connection import Connection
from bus_client.dispatch.strategy import DELIVER_EVENT_TASK
from bus_client.errors import TransportError
from bus_client.schemas.models import ConnectionConfig, Event, EventKind
from bus_client.utils.config_manager import ConfigManager
from bus_client.utils.logger import setup_logging

settings = ConfigManager.get_settings()
logger = logging.getLogger("bus_client")

# Initialize the Celery app with broker/backend from settings.
celery_app = Celery(
    "bus_client",
    broker=settings.celery.broker_url,
    backend=settings.celery.result_backend
)

celery_app.conf.update(
    task_acks_late=settings.celery.task_acks_late,
    worker_prefetch_multiplier=settings.celery.worker_prefetch_multiplier,
    task_default_queue=settings.celery.default_queue,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_reject_on_worker_lost=True,
    broker_connection_retry_on_startup=True,
)


@signals.worker_process_init.connect
def initialize_worker_logging(**kwargs):
    """Configure logging in each worker process."""
    setup_logging()
    logger.info("Celery worker process initialized for event delivery.")


@celery_app.task(
    name=DELIVER_EVENT_TASK,
    bind=True,
    max_retries=settings.celery.max_retries,
    autoretry_for=(TransportError,),  # Rejected events are not retried
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    acks_late=True,
    reject_on_worker_lost=True
)
def deliver_event_task(
    self,
    kind: str,
    topic: str,
    callback: str,
    timestamp: Optional[Union[int, float]],
    connection_config: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Deliver one event to the bus from a worker process.

    Args:
        kind: Event kind (create, update, delete, noop)
        topic: Topic name
        callback: Entity URL
        timestamp: Optional epoch timestamp
        connection_config: ConnectionConfig as a plain dict

    Returns:
        Summary of the delivered event
    """
    config = ConnectionConfig.model_validate(connection_config)
    event = Event(kind=EventKind(kind), topic=topic, callback=callback, timestamp=timestamp)

    logger.info(
        "delivering_queued_event",
        extra={"task_id": self.request.id, "topic": topic, "type": kind, "retries": self.request.retries},
    )

    with Connection(config) as conn:
        conn.send_event(event)

    return {"status": "delivered", "topic": topic, "type": kind, "url": callback}
