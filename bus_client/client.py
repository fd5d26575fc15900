"""
bus_client/client.py

Public entry point for publishing events and managing topics and
subscriptions on the bus.

Every operation validates its arguments before any network access.
Events go through the configured dispatch strategy; every other
operation goes straight through the Connection.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional, Union

import httpx

from bus_client import validators
from bus_client.connection import Connection
from bus_client.dispatch import DispatchStrategy, build_strategy
from bus_client.errors import (
    BusUnavailableError,
    ConfigurationError,
    DeliveryRejectedError,
    MalformedResponseError,
    TransportError,
    ValidationError,
)
from bus_client.schemas.models import (
    ClientConfig,
    Event,
    EventKind,
    SubscriptionRequest,
    Topic,
    validate_client_options,
)

logger = logging.getLogger("bus_client")


class Client:
    """
    Event bus client.

    Usage:
        client = Client(url="https://bus.example.com", uuid="demo")
        client.created("widgets", "https://app.example.com/widgets/1")

    Options (keyword arguments or a ClientConfig):
    - url: bus base URL, https only
    - uuid: client identifier
    - timeout: per-request timeout in milliseconds (default 1000)
    - worker_type: "inline" (default) or "queued"
    - lazy: skip the /pulse check at construction
    - verify_ssl: verify the bus certificate (default True)
    - queue: Celery queue used by queued dispatch
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        celery_app=None,
        **options: Any,
    ):
        """
        Args:
            config: Prebuilt configuration; mutually exclusive with options
            transport: Optional httpx transport for the connection
            celery_app: Celery app used by queued dispatch (defaults to
                bus_client.celery_app.celery_app)

        Raises:
            ConfigurationError: invalid configuration
            BusUnavailableError: /pulse did not answer 2xx
            TransportError: /pulse could not be reached
        """
        if config is not None and options:
            raise ConfigurationError("pass either a ClientConfig or options, not both")
        if config is None:
            config = ClientConfig.from_options(**options)
        else:
            try:
                validate_client_options(config.model_dump())
            except ValidationError as e:
                raise ConfigurationError(str(e)) from e

        self.config = config
        self._transport = transport
        self._conn: Optional[Connection] = None
        self._strategy: DispatchStrategy = build_strategy(
            config.worker_type,
            self._connection,
            app=celery_app,
            queue=config.queue,
        )

        if not config.lazy:
            try:
                self.pulse()
            except (BusUnavailableError, TransportError):
                self.close()
                raise

    @classmethod
    def from_settings(cls, settings=None, **overrides: Any) -> "Client":
        """Build a client from the `client` section of the loaded settings."""
        if settings is None:
            from bus_client.utils.config_manager import ConfigManager
            settings = ConfigManager.get_settings()

        options = settings.client.model_dump()
        transport = overrides.pop("transport", None)
        celery_app = overrides.pop("celery_app", None)
        options.update({k: v for k, v in overrides.items() if v is not None})
        return cls(transport=transport, celery_app=celery_app, **options)

    @property
    def strategy(self) -> DispatchStrategy:
        return self._strategy

    def _connection(self) -> Connection:
        if self._conn is None:
            self._conn = Connection(self.config.connection_config(), transport=self._transport)
        return self._conn

    def pulse(self):
        """Check the bus is alive."""
        response = self._connection().get("/pulse")
        if not response.is_success:
            logger.error("bus_pulse_failed", extra={"status_code": response.status_code})
            raise BusUnavailableError(response.status_code, response.text)

    def created(self, topic: str, callback: str, timestamp=None):
        return self._send_event(EventKind.CREATE, topic, callback, timestamp)

    def updated(self, topic: str, callback: str, timestamp=None):
        return self._send_event(EventKind.UPDATE, topic, callback, timestamp)

    def deleted(self, topic: str, callback: str, timestamp=None):
        return self._send_event(EventKind.DELETE, topic, callback, timestamp)

    def noop(self, topic: str, callback: str, timestamp=None):
        return self._send_event(EventKind.NOOP, topic, callback, timestamp)

    def send_event(self, kind: Union[str, EventKind], topic: str, callback: str, timestamp=None):
        """Publish an event whose kind is given by name."""
        kind = EventKind(validators.validate_event_kind(kind))
        return self._send_event(kind, topic, callback, timestamp)

    def _send_event(self, kind: EventKind, topic: str, callback: str, timestamp=None):
        validators.validate_url(callback)
        validators.validate_topic(topic)
        if timestamp is not None:
            validators.validate_timestamp(timestamp)

        event = Event(kind=kind, topic=topic, callback=callback, timestamp=timestamp)
        return self._strategy.dispatch(event, self.config.connection_config())

    def subscribe(self, request: Union[SubscriptionRequest, Mapping, None] = None, **options: Any):
        """
        Register a callback for a set of topics.

        Accepts a SubscriptionRequest, a mapping, or keyword options with the
        keys topics, callback, timeout, max and uuid.
        """
        if isinstance(request, SubscriptionRequest):
            if options:
                raise ValidationError("bad options: pass a request or options, not both")
            options = request.to_payload()
        elif request is not None:
            options = {**request, **options}

        topics = options.get("topics")
        if isinstance(topics, Iterable) and not isinstance(topics, (str, bytes)):
            options["topics"] = list(topics)

        validators.validate_subscription_options(options)
        subscription = SubscriptionRequest.model_validate(options)
        self._connection().subscribe(subscription)

    def unsubscribe(self, *topics: str):
        """
        Remove this client's subscription to each topic.

        Topics are processed in order; the first rejection raises and the
        remaining topics are left untouched. Earlier removals are not rolled back.
        """
        for topic in topics:
            validators.validate_topic(topic)

        for topic in topics:
            response = self._connection().delete(f"/subscriber/topics/{topic}")
            if not response.is_success:
                raise DeliveryRejectedError("unsubscribe", response.status_code, response.text)
            logger.info("unsubscribed", extra={"topic": topic})

    def unsubscribe_all(self):
        response = self._connection().delete("/subscriber")
        if not response.is_success:
            raise DeliveryRejectedError("unsubscribe_all", response.status_code, response.text)
        logger.info("unsubscribed_all")

    def delete_topic(self, topic: str):
        validators.validate_topic(topic)

        response = self._connection().delete(f"/topics/{topic}")
        if not response.is_success:
            raise DeliveryRejectedError("delete_topic", response.status_code, response.text)
        logger.info("topic_deleted", extra={"topic": topic})

    def list_topics(self) -> List[Topic]:
        """
        Fetch every topic known to the bus.

        Raises:
            DeliveryRejectedError: non-2xx response
            MalformedResponseError: body is not a list of topic records
        """
        response = self._connection().get("/topics")
        if not response.is_success:
            raise DeliveryRejectedError("list_topics", response.status_code, response.text)

        try:
            raw_topics = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"/topics returned invalid JSON: {e}") from e

        if not isinstance(raw_topics, list):
            raise MalformedResponseError("/topics did not return a list")

        try:
            return [Topic.model_validate(raw) for raw in raw_topics]
        except ValueError as e:
            raise MalformedResponseError(f"/topics returned a bad topic record: {e}") from e

    monitor_topics = list_topics

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(url={self.config.url!r}, "
            f"uuid={self.config.uuid!r}, worker_type={self.config.worker_type!r})"
        )
