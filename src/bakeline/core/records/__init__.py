"""Submission records, lot correlation and the unit registry."""

from bakeline.core.records.builder import (
    RecordBuilder,
    default_daily_lot,
    format_history_entry,
    resolve_lot_id,
)
from bakeline.core.records.lot_tracker import LotTransitionTracker
from bakeline.core.records.models import (
    PANEL_SEQUENCE,
    Panel,
    ProcessRecord,
    StageTiming,
    Timing,
    Totals,
    Transition,
    previous_panel,
)
from bakeline.core.records.submission import (
    RecordPersister,
    SubmissionResult,
    SubmissionService,
)
from bakeline.core.records.units import UnitOfWork, UnitRegistry

__all__ = [
    "LotTransitionTracker",
    "PANEL_SEQUENCE",
    "Panel",
    "ProcessRecord",
    "RecordBuilder",
    "RecordPersister",
    "StageTiming",
    "SubmissionResult",
    "SubmissionService",
    "Timing",
    "Totals",
    "Transition",
    "UnitOfWork",
    "UnitRegistry",
    "default_daily_lot",
    "format_history_entry",
    "previous_panel",
    "resolve_lot_id",
]
