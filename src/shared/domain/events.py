"""Domain events primitives for the modular monolith."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Mapping, Type
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable).

    Concrete subclasses register themselves by class name so events read
    back from the outbox can be rebuilt with ``event_from_outbox``.
    """

    registry: ClassVar[Dict[str, Type["DomainEvent"]]] = {}

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        DomainEvent.registry[cls.__name__] = cls

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)


class UnknownEventType(LookupError):
    """An outbox row names an event class that is not registered."""


def event_from_outbox(event_type: str, payload: Mapping[str, Any]) -> DomainEvent:
    """Rebuild a domain event from its JSON outbox payload."""
    try:
        cls = DomainEvent.registry[event_type]
    except KeyError as exc:
        raise UnknownEventType(event_type) from exc

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if not f.init or f.name not in payload:
            continue
        kwargs[f.name] = payload[f.name]
    kwargs["aggregate_id"] = UUID(str(kwargs["aggregate_id"]))
    if "event_id" in kwargs:
        kwargs["event_id"] = UUID(str(kwargs["event_id"]))
    if isinstance(kwargs.get("occurred_on"), str):
        kwargs["occurred_on"] = datetime.fromisoformat(kwargs["occurred_on"])
    return cls(**kwargs)


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
