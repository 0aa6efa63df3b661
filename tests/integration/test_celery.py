"""Integration tests for the Celery setup and the outbox relay task."""

from unittest import mock

import pytest

from modules.core.models import OUTBOX_MAX_RETRIES, EventStatus, OutboxEvent
from modules.orders.handlers import OrderPlacedHandler

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously in the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "bookstore"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_relay_is_scheduled(self):
        from config import celery_app

        schedule = celery_app.conf.beat_schedule
        assert schedule["publish-outbox-events"]["task"] == "core.publish_outbox_events"


class TestDebugTask:
    def test_debug_task_direct_call(self):
        from modules.core.tasks import debug_task

        assert debug_task() == {"status": "ok", "message": "Celery is working"}


class TestPublishOutboxEvents:
    def test_relays_checkout_events(self, customer, make_book, place_order):
        from modules.core.tasks import publish_outbox_events

        place_order(customer, (make_book(), 1))

        with mock.patch.object(OrderPlacedHandler, "handle") as handle:
            result = publish_outbox_events.apply().get()

        assert result == {"published": 1, "failed": 0}
        assert handle.call_args.args[0].customer_id == customer.pk
        assert OutboxEvent.objects.get().status == EventStatus.PUBLISHED

    def test_handler_failure_marks_row_failed(self, customer, make_book, place_order):
        from modules.core.tasks import publish_outbox_events

        place_order(customer, (make_book(), 1))

        with mock.patch.object(OrderPlacedHandler, "handle", side_effect=RuntimeError("down")):
            result = publish_outbox_events()

        assert result == {"published": 0, "failed": 1}
        row = OutboxEvent.objects.get()
        assert row.status == EventStatus.FAILED
        assert row.retry_count == 1
        assert row.error_message == "down"

    def test_exhausted_rows_are_skipped(self):
        from modules.core.tasks import publish_outbox_events

        OutboxEvent.objects.create(
            event_type="OrderPlaced",
            payload={"aggregate_id": "0190a0a0-0000-7000-8000-000000000000"},
            aggregate_id="x",
            topic="orders",
            status=EventStatus.FAILED,
            retry_count=OUTBOX_MAX_RETRIES,
        )
        assert publish_outbox_events() == {"published": 0, "failed": 0}

    def test_unknown_event_type_fails_row(self):
        from modules.core.tasks import publish_outbox_events

        OutboxEvent.objects.create(
            event_type="Retired", payload={}, aggregate_id="x", topic="orders"
        )
        assert publish_outbox_events() == {"published": 0, "failed": 1}
