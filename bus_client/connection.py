"""
bus_client/connection.py

HTTPS connection to the event bus.

Features:
- Basic-Auth with the client uuid and the fixed password "x"
- JSON request bodies
- Per-request timeout (milliseconds)
- Retry with exponential backoff on connect/timeout failures
- Full reconnect when the underlying transport breaks mid-call

HTTP error statuses are never retried here; they are returned to the
caller (get/post/delete) or raised as DeliveryRejectedError
(send_event/subscribe).
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from bus_client.errors import BusTimeoutError, DeliveryRejectedError, TransportError
from bus_client.schemas.models import ConnectionConfig, Event, SubscriptionRequest

logger = logging.getLogger("bus_client")

PASSWORD = "x"

MAX_RETRIES = 2
RETRY_INTERVAL_SECONDS = 0.1
BACKOFF_FACTOR = 2
MAX_RECONNECTS = 5

RETRYABLE_ERRORS = (httpx.ConnectError, httpx.TimeoutException)
BROKEN_TRANSPORT_ERRORS = (
    httpx.ReadError,
    httpx.WriteError,
    httpx.CloseError,
    httpx.RemoteProtocolError,
)


class Connection:
    """
    One HTTP client bound to one bus URL and one set of credentials.

    The httpx client is built lazily on first use and reused afterwards.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Args:
            config: Bus URL, credentials, timeout and TLS settings
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            sleep: Backoff sleep function (defaults to time.sleep)
        """
        self.config = config
        self._transport = transport
        self._sleep = sleep
        self._http: Optional[httpx.Client] = None

    def _build_http_client(self) -> httpx.Client:
        timeout = self.config.timeout / 1000 if self.config.timeout else None
        return httpx.Client(
            base_url=self.config.url,
            auth=httpx.BasicAuth(self.config.uuid, PASSWORD),
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
            verify=self.config.verify_ssl,
            transport=self._transport,
        )

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = self._build_http_client()
        return self._http

    def reconnect(self):
        """Drop the current HTTP client and build a fresh one."""
        self.close()
        self._http = self._build_http_client()
        logger.info("bus_connection_rebuilt", extra={"url": self.config.url})

    def close(self):
        if self._http is not None:
            try:
                self._http.close()
            finally:
                self._http = None

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Perform one HTTP call with the retry and reconnect policy.

        Returns:
            The httpx response, whatever its status code

        Raises:
            TransportError: retries or reconnects exhausted
            BusTimeoutError: the last attempt timed out
        """
        content = json.dumps(body) if body is not None else None
        retries = 0
        reconnects = 0

        while True:
            try:
                response = self.http.request(method, path, content=content)
                logger.debug(
                    "bus_request_completed",
                    extra={"method": method, "path": path, "status_code": response.status_code},
                )
                return response

            except RETRYABLE_ERRORS as e:
                if retries >= MAX_RETRIES:
                    logger.error(
                        f"bus_request_failed: {e}",
                        extra={"method": method, "path": path, "attempts": retries + 1},
                    )
                    if isinstance(e, httpx.TimeoutException):
                        raise BusTimeoutError(f"{method} {path} timed out: {e}") from e
                    raise TransportError(f"{method} {path} failed: {e}") from e

                backoff = RETRY_INTERVAL_SECONDS * BACKOFF_FACTOR ** retries  # 0.1, 0.2 seconds
                retries += 1
                logger.warning(
                    f"bus_request_retry: {e}",
                    extra={"method": method, "path": path, "attempt": retries, "backoff": backoff},
                )
                (self._sleep or time.sleep)(backoff)

            except BROKEN_TRANSPORT_ERRORS as e:
                if reconnects >= MAX_RECONNECTS:
                    logger.error(
                        f"bus_transport_broken: {e}",
                        extra={"method": method, "path": path, "reconnects": reconnects},
                    )
                    raise TransportError(f"{method} {path} aborted: {e}") from e

                reconnects += 1
                logger.warning(
                    f"bus_transport_reconnecting: {e}",
                    extra={"method": method, "path": path, "reconnect": reconnects},
                )
                self.reconnect()

    def get(self, path: str) -> httpx.Response:
        return self.request("GET", path)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        return self.request("POST", path, body)

    def delete(self, path: str) -> httpx.Response:
        return self.request("DELETE", path)

    def send_event(self, event: Event):
        """
        Publish one event to /topics/{topic}.

        Raises:
            DeliveryRejectedError: the bus did not answer 2xx
        """
        response = self.post(f"/topics/{event.topic}", event.to_payload())
        if not response.is_success:
            logger.warning(
                "event_rejected",
                extra={"topic": event.topic, "type": event.kind.value, "status_code": response.status_code},
            )
            raise DeliveryRejectedError("send_event", response.status_code, response.text)

        logger.info(
            "event_published",
            extra={"topic": event.topic, "type": event.kind.value, "url": event.callback},
        )

    def subscribe(self, request: SubscriptionRequest):
        response = self.post("/subscription", request.to_payload())
        if not response.is_success:
            raise DeliveryRejectedError("subscribe", response.status_code, response.text)

        logger.info("subscribed", extra={"topics": request.topics, "callback": request.callback})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(url={self.config.url!r}, uuid={self.config.uuid!r})"
