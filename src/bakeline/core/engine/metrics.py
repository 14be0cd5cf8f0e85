"""Metric kinds analysed by the SPC engines and the points built from them.

Persisted records expose three duration metrics. Callers name a metric by
its wire name (``durationMs``, ``deadMs``, ``overallMs``); the name is
validated once at the boundary and mapped to a closed enumeration.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

from bakeline.core.exceptions import InvalidArgumentError


class MetricKind(str, Enum):
    """Duration metrics stored on every persisted record."""

    DURATION = "durationMs"
    DEAD = "deadMs"
    OVERALL = "overallMs"


DEFAULT_METRIC = MetricKind.OVERALL


class PersistedRecordLike(Protocol):
    """Fields of a persisted record read by the analytics engines."""

    id: int
    lot_id: str | None
    panel: str
    unit: str
    shift_date: date | None
    created_at: datetime
    duration_ms: Any
    dead_ms: Any
    overall_ms: Any


def parse_metric(value: str | MetricKind | None) -> MetricKind:
    """Validate a metric name.

    A missing name selects ``overallMs``.

    Raises:
        InvalidArgumentError: If the name is not a known metric
    """
    if value is None or value == "":
        return DEFAULT_METRIC
    if isinstance(value, MetricKind):
        return value
    try:
        return MetricKind(value)
    except ValueError:
        allowed = ", ".join(kind.value for kind in MetricKind)
        raise InvalidArgumentError(
            f"Unknown metric {value!r}; expected one of: {allowed}"
        ) from None


def coerce_duration(value: Any) -> float | None:
    """Read a stored duration as a float, or None when it is not numeric.

    Zero is a real duration; only missing or non-numeric values are
    treated as absent.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    return None


def metric_value(record: PersistedRecordLike, metric: MetricKind) -> float | None:
    match metric:
        case MetricKind.DURATION:
            raw = record.duration_ms
        case MetricKind.DEAD:
            raw = record.dead_ms
        case MetricKind.OVERALL:
            raw = record.overall_ms
    return coerce_duration(raw)


@dataclass(frozen=True)
class MetricPoint:
    """One observation on a control chart, traceable to its record."""

    id: int
    lot_id: str | None
    panel: str
    unit: str
    shift_date: date | None
    created_at: datetime
    value: float


def build_metric_points(
    records: Iterable[PersistedRecordLike], metric: MetricKind
) -> list[MetricPoint]:
    """Project records onto one metric, keeping order and dropping absent values."""
    points: list[MetricPoint] = []
    for record in records:
        value = metric_value(record, metric)
        if value is None:
            continue
        points.append(
            MetricPoint(
                id=record.id,
                lot_id=record.lot_id,
                panel=record.panel,
                unit=record.unit,
                shift_date=record.shift_date,
                created_at=record.created_at,
                value=value,
            )
        )
    return points
