"""Pydantic schemas for the Bakeline REST API, organized by resource."""

from bakeline.api.schemas.common import CamelModel, DeleteResult
from bakeline.api.schemas.record import (
    ChartPointResponse,
    ControlChartResponse,
    MetricSummaryResponse,
    RecordListResponse,
    RecordPayload,
    RecordResponse,
    SummaryResponse,
)
from bakeline.api.schemas.unit import (
    StageActionResponse,
    StageResponse,
    SubmitRequest,
    SubmitResponse,
    TotalsResponse,
    UnitResponse,
)

__all__ = [
    "CamelModel",
    "ChartPointResponse",
    "ControlChartResponse",
    "DeleteResult",
    "MetricSummaryResponse",
    "RecordListResponse",
    "RecordPayload",
    "RecordResponse",
    "StageActionResponse",
    "StageResponse",
    "SubmitRequest",
    "SubmitResponse",
    "SummaryResponse",
    "TotalsResponse",
    "UnitResponse",
]
