"""Celery tasks for the core module."""

from typing import Dict

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import event_from_outbox
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.debug_task")
def debug_task():
    """Diagnostic task used to check that a worker is consuming the queue."""
    logger.info("debug_task.executed", status="ok")
    return {"status": "ok", "message": "Celery is working"}


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int | None = None) -> Dict[str, int]:
    """Relay committed outbox rows to the in-process event bus.

    Each row is locked while it is handled so two workers never publish the
    same event.  A handler failure marks only that row as failed; it is
    retried on a later run until ``OUTBOX_MAX_RETRIES`` is reached.
    """
    limit = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    candidate_ids = list(
        OutboxEvent.objects.deliverable().values_list("id", flat=True)[:limit]
    )
    for event_id in candidate_ids:
        with transaction.atomic():
            row = (
                OutboxEvent.objects.select_for_update()
                .deliverable()
                .filter(id=event_id)
                .first()
            )
            if row is None:
                continue
            try:
                event_bus.publish(event_from_outbox(row.event_type, row.payload))
            except Exception as exc:
                logger.warning(
                    "outbox.publish_failed",
                    event_id=str(row.id),
                    event_type=row.event_type,
                    error=str(exc),
                )
                row.mark_as_failed(str(exc))
                failed += 1
                continue
            row.mark_as_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
