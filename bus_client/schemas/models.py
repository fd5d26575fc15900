"""
bus_client/schemas/models.py

Value objects exchanged between the Client, its Connection and the job queue.

Provides:
- ClientConfig: immutable client configuration
- ConnectionConfig: serializable subset handed to queued jobs
- EventKind / Event: one entity lifecycle notification
- SubscriptionRequest: callback registration for a set of topics
- Topic: read-only projection of a topic as reported by the bus
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from bus_client import validators
from bus_client.errors import ConfigurationError, ValidationError

DEFAULT_TIMEOUT_MS = 1000
DEFAULT_QUEUE = "realtime"


class EventKind(str, Enum):
    """Entity lifecycle changes a publisher can announce."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


class ConnectionConfig(BaseModel):
    """
    Everything needed to rebuild a Connection in another process.

    Passed by value (as a plain dict) into queued jobs; never carries a
    live HTTP client.
    """
    url: str
    uuid: str
    timeout: int = DEFAULT_TIMEOUT_MS
    verify_ssl: bool = True

    model_config = ConfigDict(frozen=True)


class ClientConfig(BaseModel):
    """Client configuration. Built once and never mutated."""
    url: str = Field(..., description="Bus base URL, must be https")
    uuid: str = Field(..., description="Credential identifier sent as the Basic-Auth user")
    timeout: int = Field(DEFAULT_TIMEOUT_MS, description="Per-request timeout in milliseconds")
    worker_type: str = Field("inline", description="Dispatch strategy: inline or queued")
    lazy: bool = Field(False, description="Skip the /pulse probe at construction")
    verify_ssl: bool = Field(True, description="Verify the bus TLS certificate")
    queue: str = Field(DEFAULT_QUEUE, description="Job queue used by queued dispatch")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_options(cls, **options: Any) -> "ClientConfig":
        """
        Validate raw options and build a config.

        Raises:
            ConfigurationError: on any invalid or unknown option
        """
        known = set(cls.model_fields)
        unknown = set(options) - known
        if unknown:
            raise ConfigurationError(f"unknown options: {', '.join(sorted(unknown))}")

        options = {k: v for k, v in options.items() if v is not None}
        options.setdefault("timeout", DEFAULT_TIMEOUT_MS)
        options.setdefault("worker_type", "inline")

        try:
            validate_client_options(options)
            options["worker_type"] = validators.validate_dispatch_mode(options["worker_type"])
            return cls(**options)
        except ConfigurationError:
            raise
        except (ValidationError, PydanticValidationError) as e:
            raise ConfigurationError(str(e)) from e

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            url=self.url,
            uuid=self.uuid,
            timeout=self.timeout,
            verify_ssl=self.verify_ssl,
        )


def validate_client_options(options: Dict[str, Any]) -> None:
    """Run the validator checks for a raw option mapping or a dumped ClientConfig."""
    validators.validate_url(options.get("url"))
    validators.validate_uuid(options.get("uuid"))
    validators.validate_timeout(options.get("timeout"))
    validators.validate_dispatch_mode(options.get("worker_type"))


class Event(BaseModel):
    """A single lifecycle event. Serialized once and discarded."""
    kind: EventKind
    topic: str
    callback: str
    timestamp: Optional[Union[int, float]] = None

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        """Request body for POST /topics/{topic}."""
        return {
            "type": self.kind.value,
            "url": self.callback,
            "timestamp": self.timestamp,
        }


class SubscriptionRequest(BaseModel):
    """Callback registration for one or more topics."""
    topics: List[str]
    callback: str
    timeout: Optional[int] = None
    max_events: Optional[int] = Field(None, alias="max")
    uuid: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Request body for POST /subscription, absent optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Topic(BaseModel):
    """A topic as reported by GET /topics."""
    name: str
    publisher: str
    events: int

    model_config = ConfigDict(frozen=True)

    def attributes(self) -> Dict[str, Any]:
        return {"name": self.name, "publisher": self.publisher, "events": self.events}
