"""
tests/unit/test_validators.py

Unit tests for the argument validators.

Tests cover:
- URL, topic, uuid, timeout, max events and timestamp checks
- Event kind and dispatch mode resolution
- Subscription option key set and field checks
"""

import pytest

from bus_client import validators
from bus_client.errors import ConfigurationError, ValidationError


class TestUrl:
    """Test URL validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("url", [
        "https://bus.example.com",
        "https://bus.example.com:8443/base",
        "https://app.example.com/widgets/123",
    ])
    def test_https_urls_pass(self, url):
        assert validators.validate_url(url) == url
        assert validators.is_valid_url(url) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("url", ["https://", "https:foo", "https:///path"])
    def test_scheme_is_the_only_check(self, url):
        assert validators.is_valid_url(url) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("url", [
        "http://example.com",
        "http.foo.bar",
        "foobar",
        "ftp://example.com",
        "",
        None,
        42,
    ])
    def test_non_https_urls_fail(self, url):
        with pytest.raises(ValidationError):
            validators.validate_url(url)
        assert validators.is_valid_url(url) is False


class TestTopic:
    """Test topic name validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("topic", ["widgets", "kitten", "a", "with_underscore", "z" * 64])
    def test_valid_topics(self, topic):
        assert validators.is_valid_topic(topic) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("topic", ["", "Widgets", "foo123$bar", "foo-bar", "z" * 65, "foo bar", None])
    def test_invalid_topics(self, topic):
        assert validators.is_valid_topic(topic) is False

    @pytest.mark.unit
    def test_error_message(self):
        with pytest.raises(ValidationError, match="bad topic name"):
            validators.validate_topic("foo123$bar")


class TestUuid:
    """Test credential identifier validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("uuid", ["john_doe", "demo", "a-b_c-123"])
    def test_valid(self, uuid):
        assert validators.validate_uuid(uuid) == uuid

    @pytest.mark.unit
    @pytest.mark.parametrize("uuid", ["123 $%", "", "John", "x" * 65, None])
    def test_invalid(self, uuid):
        with pytest.raises(ValidationError):
            validators.validate_uuid(uuid)


class TestNumericBounds:
    """Test timeout, max events and timestamp validation."""

    @pytest.mark.unit
    @pytest.mark.parametrize("timeout,expected", [
        (0, True),
        (1000, True),
        (3_600_000, True),
        (-5, False),
        (3_600_001, False),
        ("timeout", False),
        (1.5, False),
        (True, False),
        (None, False),
    ])
    def test_timeout(self, timeout, expected):
        assert validators.is_valid_timeout(timeout) is expected

    @pytest.mark.unit
    @pytest.mark.parametrize("max_events", [0, 500, 10_000])
    def test_max_events_in_range(self, max_events):
        assert validators.validate_max_events(max_events) == max_events

    @pytest.mark.unit
    @pytest.mark.parametrize("max_events", [-1, 10_001, 1_000_000, "10"])
    def test_max_events_out_of_range(self, max_events):
        with pytest.raises(ValidationError, match="bad max"):
            validators.validate_max_events(max_events)

    @pytest.mark.unit
    @pytest.mark.parametrize("timestamp", [1700000000, 1700000000.25, 0])
    def test_numeric_timestamps(self, timestamp):
        assert validators.validate_timestamp(timestamp) == timestamp

    @pytest.mark.unit
    @pytest.mark.parametrize("timestamp", ["foo", "1700000000", True, [1], float("nan"), float("inf"), float("-inf")])
    def test_non_numeric_timestamps(self, timestamp):
        with pytest.raises(ValidationError):
            validators.validate_timestamp(timestamp)


class TestEventKindAndMode:
    """Test closed-set lookups."""

    @pytest.mark.unit
    @pytest.mark.parametrize("kind", ["create", "update", "delete", "noop"])
    def test_event_kinds(self, kind):
        assert validators.validate_event_kind(kind) == kind

    @pytest.mark.unit
    @pytest.mark.parametrize("kind", ["created", "upsert", "", None])
    def test_unknown_event_kind(self, kind):
        with pytest.raises(ValidationError):
            validators.validate_event_kind(kind)

    @pytest.mark.unit
    def test_dispatch_modes(self):
        assert validators.validate_dispatch_mode("inline") == "inline"
        assert validators.validate_dispatch_mode("queued") == "queued"

    @pytest.mark.unit
    def test_null_is_inline(self):
        assert validators.validate_dispatch_mode("null") == "inline"

    @pytest.mark.unit
    def test_unknown_dispatch_mode_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="unknown worker type"):
            validators.validate_dispatch_mode("sidekiq")


class TestSubscriptionOptions:
    """Test subscription option validation."""

    @pytest.fixture
    def options(self):
        return {
            "topics": ["widgets", "kitten"],
            "callback": "https://app.example.com/events",
            "timeout": 60_000,
            "max": 500,
        }

    @pytest.mark.unit
    def test_valid_options(self, options):
        assert validators.validate_subscription_options(options) is options

    @pytest.mark.unit
    def test_uuid_is_accepted(self, options):
        options["uuid"] = "hello"
        validators.validate_subscription_options(options)

    @pytest.mark.unit
    def test_unknown_key_rejected_first(self, options):
        options["callback"] = "http://not-checked.example.com"
        options["color"] = "blue"
        with pytest.raises(ValidationError, match="bad options: color"):
            validators.validate_subscription_options(options)

    @pytest.mark.unit
    @pytest.mark.parametrize("topics", [None, "widgets", 42])
    def test_topics_required(self, options, topics):
        options["topics"] = topics
        with pytest.raises(ValidationError, match="topics required"):
            validators.validate_subscription_options(options)

    @pytest.mark.unit
    def test_callback_required(self, options):
        del options["callback"]
        with pytest.raises(ValidationError, match="callback required"):
            validators.validate_subscription_options(options)

    @pytest.mark.unit
    @pytest.mark.parametrize("field,value", [
        ("timeout", -5),
        ("max", 1_000_000),
        ("callback", "http://example.com"),
        ("topics", ["widgets", "foo123$%bar"]),
        ("uuid", "Not Valid"),
    ])
    def test_bad_fields(self, options, field, value):
        options[field] = value
        with pytest.raises(ValidationError):
            validators.validate_subscription_options(options)
