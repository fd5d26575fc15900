"""
tests/unit/dispatch/test_strategy.py

Unit tests for dispatch strategies.

Tests cover:
- Strategy factory over the closed set of modes
- Inline dispatch through the connection provider
- Queued dispatch job payload and queue selection
- Broker failures surfacing as QueueUnavailableError
"""

from unittest.mock import Mock

import pytest
from kombu.exceptions import OperationalError

from bus_client.dispatch import (
    DELIVER_EVENT_TASK,
    DispatchMode,
    DispatchStrategy,
    InlineStrategy,
    QueuedStrategy,
    build_strategy,
)
from bus_client.errors import ConfigurationError, DeliveryRejectedError, QueueUnavailableError
from bus_client.schemas.models import ConnectionConfig, Event, EventKind


@pytest.fixture
def event():
    return Event(
        kind=EventKind.UPDATE,
        topic="widgets",
        callback="https://app.example.com/widgets/123",
        timestamp=1700000000,
    )


@pytest.fixture
def conn_config():
    return ConnectionConfig(url="https://bus.example.com", uuid="john_doe", timeout=2000, verify_ssl=False)


class TestBuildStrategy:
    """Test the strategy factory."""

    @pytest.mark.unit
    def test_inline(self):
        strategy = build_strategy("inline", Mock())

        assert isinstance(strategy, InlineStrategy)
        assert strategy.mode is DispatchMode.INLINE

    @pytest.mark.unit
    def test_null_alias_builds_inline(self):
        assert isinstance(build_strategy("null", Mock()), InlineStrategy)

    @pytest.mark.unit
    def test_queued(self, mock_celery_app):
        strategy = build_strategy("queued", Mock(), app=mock_celery_app, queue="events")

        assert isinstance(strategy, QueuedStrategy)
        assert strategy.app is mock_celery_app
        assert strategy.queue == "events"

    @pytest.mark.unit
    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            build_strategy("sidekiq", Mock())

    @pytest.mark.unit
    def test_strategies_satisfy_protocol(self, mock_celery_app):
        assert isinstance(InlineStrategy(Mock()), DispatchStrategy)
        assert isinstance(QueuedStrategy(app=mock_celery_app), DispatchStrategy)


class TestInlineStrategy:
    """Test inline dispatch."""

    @pytest.mark.unit
    def test_sends_through_connection(self, event, conn_config):
        connection = Mock()
        strategy = InlineStrategy(lambda: connection)

        result = strategy.dispatch(event, conn_config)

        assert result is None
        connection.send_event.assert_called_once_with(event)

    @pytest.mark.unit
    def test_failures_propagate(self, event, conn_config):
        connection = Mock()
        connection.send_event.side_effect = DeliveryRejectedError("send_event", 500)
        strategy = InlineStrategy(lambda: connection)

        with pytest.raises(DeliveryRejectedError):
            strategy.dispatch(event, conn_config)


class TestQueuedStrategy:
    """Test queued dispatch."""

    @pytest.mark.unit
    def test_submits_job(self, event, conn_config, mock_celery_app):
        strategy = QueuedStrategy(app=mock_celery_app, queue="realtime")

        task_id = strategy.dispatch(event, conn_config)

        assert task_id == "task-123"
        mock_celery_app.send_task.assert_called_once_with(
            DELIVER_EVENT_TASK,
            args=(
                "update",
                "widgets",
                "https://app.example.com/widgets/123",
                1700000000,
                {
                    "url": "https://bus.example.com",
                    "uuid": "john_doe",
                    "timeout": 2000,
                    "verify_ssl": False,
                },
            ),
            queue="realtime",
        )

    @pytest.mark.unit
    def test_broker_unavailable(self, event, conn_config, mock_celery_app):
        mock_celery_app.send_task.side_effect = OperationalError("connection refused")
        strategy = QueuedStrategy(app=mock_celery_app)

        with pytest.raises(QueueUnavailableError):
            strategy.dispatch(event, conn_config)

    @pytest.mark.unit
    def test_defaults_to_package_celery_app(self):
        from bus_client.celery_app import celery_app

        assert QueuedStrategy().app is celery_app
