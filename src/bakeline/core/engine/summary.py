"""Average/min/max summaries over a filtered record set."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from bakeline.core.engine.metrics import MetricKind, PersistedRecordLike, metric_value


@dataclass(frozen=True)
class MetricSummary:
    """Summary of one metric; all fields are None when there is no data."""

    avg: float | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class SummaryMetrics:
    count: int
    duration: MetricSummary
    dead: MetricSummary
    overall: MetricSummary


def summarize_values(values: Sequence[float]) -> MetricSummary:
    """Summarize a series; an empty series yields nulls, not zeros."""
    if len(values) == 0:
        return MetricSummary()
    arr = np.asarray(values, dtype=np.float64)
    return MetricSummary(
        avg=float(np.mean(arr)),
        min=float(np.min(arr)),
        max=float(np.max(arr)),
    )


def compute_summary(records: Sequence[PersistedRecordLike]) -> SummaryMetrics:
    """Summarize machine, dead and overall time across records.

    Non-numeric metric values are skipped per metric; ``count`` is the
    number of records given.
    """

    def collect(metric: MetricKind) -> list[float]:
        values = (metric_value(record, metric) for record in records)
        return [v for v in values if v is not None]

    return SummaryMetrics(
        count=len(records),
        duration=summarize_values(collect(MetricKind.DURATION)),
        dead=summarize_values(collect(MetricKind.DEAD)),
        overall=summarize_values(collect(MetricKind.OVERALL)),
    )
