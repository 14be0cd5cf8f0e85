"""Derivation of stored columns from a submitted record payload.

Payloads arrive as the JSON form of a ProcessRecord, possibly produced by
older clients, so every field is read defensively: anything missing or
non-numeric becomes None rather than zero.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date
from typing import Any

from bakeline.core.records.builder import LOT_FORM_FIELDS
from bakeline.core.records.models import Panel

UNKNOWN_PANEL = "unknown"
UNKNOWN_UNIT = "sin-unidad"

_SHIFT_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def resolve_number(value: Any) -> int | None:
    """Round a numeric or numeric-string value; None when not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    # Half-up rounding, as durations are reported by the clients
    return int(math.floor(value + 0.5))


def sanitize_panel(value: Any) -> str:
    """Known panels pass through; other values are kept verbatim."""
    panel = Panel.parse(value)
    if panel is not None:
        return panel.value
    return str(value) if value else UNKNOWN_PANEL


def resolve_lote(payload: Mapping[str, Any]) -> str | None:
    form = _mapping(payload.get("form"))
    shift = _mapping(payload.get("shift"))
    candidates = [form.get(name) for name in LOT_FORM_FIELDS]
    candidates += [shift.get("dailyLot"), shift.get("lote")]
    for candidate in candidates:
        text = _text(candidate)
        if text:
            return text
    return None


def parse_shift_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if not value:
        return None
    match = _SHIFT_DATE.search(str(value).strip())
    if match is None:
        return None
    try:
        return date.fromisoformat(match.group(0))
    except ValueError:
        return None


def _sum_numbers(values: list[Any]) -> int:
    return sum(resolve_number(value) or 0 for value in values)


def derive_record_columns(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compute the stored columns for a submission payload.

    Returns:
        Keyword arguments for ``ProductionRecord`` (the payload itself is
        stored under ``data``)
    """
    shift = _mapping(payload.get("shift"))
    timing = _mapping(payload.get("timing"))
    totals = _mapping(payload.get("totals"))
    transition = _mapping(payload.get("transition"))
    stages = payload.get("stages")
    dead_times = payload.get("deadTimesMs")

    unit = _text(payload.get("unit") or payload.get("cardId") or payload.get("unitName"))
    lote = resolve_lote(payload)
    lot_id = _text(transition.get("lotId")) or _text(shift.get("dailyLot")) or lote

    if timing.get("durationMs") is not None:
        duration_ms = resolve_number(timing.get("durationMs"))
    elif totals.get("machineTotalMs") is not None:
        duration_ms = resolve_number(totals.get("machineTotalMs"))
    elif isinstance(stages, list):
        duration_ms = _sum_numbers([_mapping(stage).get("durationMs") for stage in stages])
    else:
        duration_ms = None

    if totals.get("deadTotalMs") is not None:
        dead_ms = resolve_number(totals.get("deadTotalMs"))
    elif isinstance(dead_times, list):
        dead_ms = _sum_numbers(dead_times)
    else:
        dead_ms = None

    if totals.get("overallMs") is not None:
        overall_ms = resolve_number(totals.get("overallMs"))
    elif duration_ms is None and dead_ms is None:
        overall_ms = None
    else:
        overall_ms = (duration_ms or 0) + (dead_ms or 0)

    shift_date_raw = shift.get("shiftDate") or payload.get("shiftDate")
    return {
        "panel": sanitize_panel(payload.get("panel")),
        "unit": unit or UNKNOWN_UNIT,
        "lote": lote,
        "lot_id": lot_id,
        "shift_date": parse_shift_date(shift_date_raw),
        "fecha_texto": _text(shift.get("shiftDate")) or _text(payload.get("fecha")),
        "duration_ms": duration_ms,
        "dead_ms": dead_ms,
        "overall_ms": overall_ms,
    }
