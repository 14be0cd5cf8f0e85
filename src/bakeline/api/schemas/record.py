"""Pydantic schemas for production records and analytics views."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from bakeline.api.schemas.common import CamelModel
from bakeline.core.engine import ControlChart, MetricKind, SummaryMetrics


class RecordPayload(BaseModel):
    """Submitted ProcessRecord JSON.

    Only ``panel`` and ``unit`` are named; every other field of the record
    (timing, stages, shift, form, transition, ...) is accepted as sent.
    """

    model_config = ConfigDict(extra="allow")

    panel: str | None = None
    unit: str | None = None


class RecordResponse(CamelModel):
    """Stored record with its derived metrics."""

    id: int
    created_at: datetime
    panel: str
    unit: str
    lote: str | None = None
    lot_id: str | None = None
    shift_date: date | None = None
    fecha_texto: str | None = None
    duration_ms: int | None = None
    dead_ms: int | None = None
    overall_ms: int | None = None
    data: dict[str, Any]


class RecordListResponse(BaseModel):
    items: list[RecordResponse]
    total: int
    offset: int
    limit: int | None


class ChartPointResponse(CamelModel):
    id: int
    lot_id: str | None
    panel: str
    unit: str
    shift_date: date | None
    created_at: datetime
    value: float
    out_of_control: bool


class ControlChartResponse(CamelModel):
    """Control chart payload; limits are null when there are no points."""

    metric: MetricKind
    panel: str
    count: int
    center_line: float | None
    ucl: float | None
    lcl: float | None
    std_dev: float | None
    points: list[ChartPointResponse]

    @classmethod
    def from_chart(
        cls, chart: ControlChart, metric: MetricKind, panel: str | None
    ) -> "ControlChartResponse":
        return cls(
            metric=metric,
            panel=panel or "all",
            count=chart.count,
            center_line=chart.center_line,
            ucl=chart.ucl,
            lcl=chart.lcl,
            std_dev=chart.std_dev,
            points=[
                ChartPointResponse(
                    id=p.point.id,
                    lot_id=p.point.lot_id,
                    panel=p.point.panel,
                    unit=p.point.unit,
                    shift_date=p.point.shift_date,
                    created_at=p.point.created_at,
                    value=p.point.value,
                    out_of_control=p.out_of_control,
                )
                for p in chart.points
            ],
        )


class MetricSummaryResponse(BaseModel):
    avg: float | None
    min: float | None
    max: float | None


class SummaryResponse(BaseModel):
    """Average/min/max per metric; nulls mean no data, not zero."""

    count: int
    duration: MetricSummaryResponse
    dead: MetricSummaryResponse
    overall: MetricSummaryResponse

    @classmethod
    def from_summary(cls, summary: SummaryMetrics) -> "SummaryResponse":
        def convert(metric) -> MetricSummaryResponse:
            return MetricSummaryResponse(avg=metric.avg, min=metric.min, max=metric.max)

        return cls(
            count=summary.count,
            duration=convert(summary.duration),
            dead=convert(summary.dead),
            overall=convert(summary.overall),
        )
