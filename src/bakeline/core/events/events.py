"""Domain events published on the Bakeline event bus.

Events are dataclasses stamped with a UTC creation time.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone


class Event(ABC):
    """Base class for all events.

    Attributes:
        timestamp: UTC timestamp when event was created
    """

    timestamp: datetime


@dataclass
class RecordSubmittedEvent(Event):
    """Emitted after a unit-of-work record has been persisted.

    Attributes:
        record_id: Database ID assigned by the persistence layer
        panel: Station the record came from
        unit: Unit (machine or slot) within the panel
        lot_id: Resolved lot id, None when untracked
        duration_ms: Machine time of the record
        overall_ms: Machine time plus dead time
    """

    record_id: int
    panel: str
    unit: str
    lot_id: str | None
    duration_ms: int | None
    overall_ms: int | None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class LotTransitionRecordedEvent(Event):
    """Emitted when a submission carried a lot transition.

    ``delta_ms`` is published as computed; negative values point at a
    clock or data-entry inconsistency upstream.
    """

    lot_id: str
    from_panel: str
    to_panel: str
    delta_ms: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
