"""
bus_client/validators.py

Argument checks run by the Client before it touches the network.

Every check takes one value and either returns it unchanged or raises
ValidationError (ConfigurationError for the dispatch mode) with a
descriptive message. No function here performs I/O or keeps state.
"""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlparse

from bus_client.errors import ConfigurationError, ValidationError

TOPIC_PATTERN = re.compile(r"^[a-z_]{1,64}$")
UUID_PATTERN = re.compile(r"^[a-z0-9_-]{1,64}$")

MAX_TIMEOUT_MS = 3_600_000
MAX_EVENTS = 10_000

EVENT_KINDS = ("create", "update", "delete", "noop")
DISPATCH_MODES = ("inline", "queued")
DISPATCH_MODE_ALIASES = {"null": "inline"}

SUBSCRIPTION_KEYS = frozenset({"topics", "callback", "timeout", "max", "uuid"})


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_url(url: Any) -> str:
    """Require the https scheme."""
    if not isinstance(url, str):
        raise ValidationError("HTTPS required: URL must be a string")
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"bad URL: {url!r}") from e
    if parsed.scheme != "https":
        raise ValidationError(f"HTTPS required: {url!r}")
    return url


def validate_topic(topic: Any) -> str:
    if not isinstance(topic, str) or not TOPIC_PATTERN.match(topic):
        raise ValidationError(
            "bad topic name: must only include letters and underscores")
    return topic


def validate_uuid(uuid: Any) -> str:
    if not isinstance(uuid, str) or not UUID_PATTERN.match(uuid):
        raise ValidationError(
            "bad uuid: must be 1-64 lowercase letters, digits, '_' or '-'")
    return uuid


def validate_timeout(timeout: Any) -> int:
    """Timeouts are integer milliseconds within [0, 3_600_000]."""
    if not _is_integer(timeout) or not 0 <= timeout <= MAX_TIMEOUT_MS:
        raise ValidationError(f"bad timeout: {timeout!r}")
    return timeout


def validate_max_events(max_events: Any) -> int:
    if not _is_integer(max_events) or not 0 <= max_events <= MAX_EVENTS:
        raise ValidationError(f"bad max # events: {max_events!r}")
    return max_events


def validate_timestamp(timestamp: Any):
    """Timestamps are numeric epochs, integer or finite float."""
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise ValidationError(f"timestamp must be numeric, got {timestamp!r}")
    if isinstance(timestamp, float) and not math.isfinite(timestamp):
        raise ValidationError(f"timestamp must be finite, got {timestamp!r}")
    return timestamp


def validate_event_kind(kind: Any) -> str:
    value = getattr(kind, "value", kind)
    if value not in EVENT_KINDS:
        raise ValidationError(
            f"unknown event kind {kind!r}, must be one of {', '.join(EVENT_KINDS)}")
    return value


def validate_dispatch_mode(mode: Any) -> str:
    """Resolve a dispatch strategy name, failing on anything outside the closed set."""
    value = getattr(mode, "value", mode)
    if isinstance(value, str):
        value = DISPATCH_MODE_ALIASES.get(value, value)
    if value not in DISPATCH_MODES:
        raise ConfigurationError(
            f"unknown worker type {mode!r}, must be one of {', '.join(DISPATCH_MODES)}")
    return value


def validate_subscription_options(options: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Check a raw subscription options mapping.

    The key set is checked first, then presence of topics and callback,
    then the optional numeric fields, then each topic and the callback URL.
    """
    unknown = set(options) - SUBSCRIPTION_KEYS
    if unknown:
        raise ValidationError(f"bad options: {', '.join(sorted(unknown))}")

    topics = options.get("topics")
    if isinstance(topics, (str, bytes)) or not isinstance(topics, Iterable):
        raise ValidationError("topics required")
    if not options.get("callback"):
        raise ValidationError("callback required")

    if options.get("timeout") is not None:
        validate_timeout(options["timeout"])
    if options.get("max") is not None:
        validate_max_events(options["max"])
    if options.get("uuid") is not None:
        validate_uuid(options["uuid"])

    for topic in topics:
        validate_topic(topic)
    validate_url(options["callback"])
    return options


def is_valid_url(url: Any) -> bool:
    try:
        validate_url(url)
    except ValidationError:
        return False
    return True


def is_valid_topic(topic: Any) -> bool:
    try:
        validate_topic(topic)
    except ValidationError:
        return False
    return True


def is_valid_timeout(timeout: Any) -> bool:
    try:
        validate_timeout(timeout)
    except ValidationError:
        return False
    return True
