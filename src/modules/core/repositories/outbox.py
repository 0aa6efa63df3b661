"""Persist an aggregate's pending domain events as outbox rows."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent


def record_domain_events(entity: Any, topic: str) -> List[OutboxEvent]:
    """Write one ``OutboxEvent`` per collected event and clear the buffer.

    Must be called inside the transaction that persists ``entity``.
    """
    events: List[DomainEvent] = list(getattr(entity, "domain_events", []))
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=serialize_event_payload(event),
            topic=topic,
        )
        for event in events
    ]
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    return rows


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    return json.loads(json.dumps(_normalize_for_json(data)))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
