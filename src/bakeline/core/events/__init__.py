"""Event bus and event definitions for Bakeline.

The bus instance is owned by the application (``app.state.event_bus``)
and injected into the services that publish on it.
"""

from bakeline.core.events.bus import EventBus, EventHandler
from bakeline.core.events.events import (
    Event,
    LotTransitionRecordedEvent,
    RecordSubmittedEvent,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "Event",
    "LotTransitionRecordedEvent",
    "RecordSubmittedEvent",
]
