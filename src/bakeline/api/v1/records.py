"""Production record REST endpoints.

Stores submitted records and serves the analytics views (control chart and
summary metrics) computed over a filtered read of them.
"""

from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from bakeline.api.deps import bad_request, get_record_repo
from bakeline.api.schemas.common import DeleteResult
from bakeline.api.schemas.record import (
    ControlChartResponse,
    RecordListResponse,
    RecordPayload,
    RecordResponse,
    SummaryResponse,
)
from bakeline.core.engine import (
    RecordQuery,
    build_metric_points,
    compute_control_chart,
    compute_summary,
    parse_filter_date,
)
from bakeline.core.exceptions import InvalidArgumentError
from bakeline.db.repositories import RecordRepository

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/records", tags=["records"])


@router.post("/", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: RecordPayload,
    repo: RecordRepository = Depends(get_record_repo),
) -> RecordResponse:
    """Store a submitted ProcessRecord and its derived metrics."""
    record = await repo.create_from_payload(payload.model_dump())
    logger.info(
        "record_stored",
        record_id=record.id,
        panel=record.panel,
        unit=record.unit,
        lot_id=record.lot_id,
    )
    return RecordResponse.model_validate(record)


@router.get("/", response_model=RecordListResponse)
async def list_records(
    panel: str | None = Query(None, description="Filter by panel"),
    lot_id: str | None = Query(None, description="Filter by lot id"),
    date_from: str | None = Query(None, description="Shift date lower bound (YYYY-MM-DD)"),
    date_to: str | None = Query(None, description="Shift date upper bound (YYYY-MM-DD)"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int | None = Query(None, ge=1, le=1000, description="Maximum number of items"),
    repo: RecordRepository = Depends(get_record_repo),
) -> RecordListResponse:
    """List stored records, newest first."""
    try:
        start: date | None = parse_filter_date(date_from, "date_from")
        end: date | None = parse_filter_date(date_to, "date_to")
    except InvalidArgumentError as e:
        raise bad_request(e)

    records, total = await repo.list_records(
        panel=panel,
        lot_id=lot_id,
        date_from=start,
        date_to=end,
        offset=offset,
        limit=limit,
    )
    return RecordListResponse(
        items=[RecordResponse.model_validate(r) for r in records],
        total=total,
        offset=offset,
        limit=limit,
    )


@router.delete("/", response_model=DeleteResult)
async def delete_all_records(
    repo: RecordRepository = Depends(get_record_repo),
) -> DeleteResult:
    deleted = await repo.delete_all()
    logger.warning("records_purged", deleted=deleted)
    return DeleteResult(deleted=deleted)


@router.get("/control-chart", response_model=ControlChartResponse)
async def get_control_chart(
    metric: str | None = Query(None, description="durationMs, deadMs or overallMs"),
    panel: str | None = Query(None, description="Filter by panel"),
    date_from: str | None = Query(None, description="Shift date lower bound (YYYY-MM-DD)"),
    date_to: str | None = Query(None, description="Shift date upper bound (YYYY-MM-DD)"),
    repo: RecordRepository = Depends(get_record_repo),
) -> ControlChartResponse:
    """Individuals control chart for one metric, in record creation order.

    Raises:
        HTTPException: 400 on an unknown metric or malformed date
    """
    try:
        query = RecordQuery.parse(panel, date_from, date_to, metric)
    except InvalidArgumentError as e:
        raise bad_request(e)

    records = await repo.get_for_analytics(query.panel, query.date_from, query.date_to)
    chart = compute_control_chart(build_metric_points(records, query.metric))
    if chart.out_of_control_count:
        logger.info(
            "out_of_control_points",
            metric=query.metric.value,
            panel=query.panel or "all",
            count=chart.out_of_control_count,
        )
    return ControlChartResponse.from_chart(chart, query.metric, query.panel)


@router.get("/metrics", response_model=SummaryResponse)
async def get_summary_metrics(
    panel: str | None = Query(None, description="Filter by panel"),
    date_from: str | None = Query(None, description="Shift date lower bound (YYYY-MM-DD)"),
    date_to: str | None = Query(None, description="Shift date upper bound (YYYY-MM-DD)"),
    repo: RecordRepository = Depends(get_record_repo),
) -> SummaryResponse:
    """Average/min/max of machine, dead and overall time."""
    try:
        query = RecordQuery.parse(panel, date_from, date_to)
    except InvalidArgumentError as e:
        raise bad_request(e)

    records = await repo.get_for_analytics(query.panel, query.date_from, query.date_to)
    return SummaryResponse.from_summary(compute_summary(records))


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: int,
    repo: RecordRepository = Depends(get_record_repo),
) -> RecordResponse:
    record = await repo.get_by_id(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record {record_id} not found",
        )
    return RecordResponse.model_validate(record)


@router.delete("/{record_id}", response_model=DeleteResult)
async def delete_record(
    record_id: int,
    repo: RecordRepository = Depends(get_record_repo),
) -> DeleteResult:
    if not await repo.delete(record_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record {record_id} not found",
        )
    return DeleteResult(deleted=record_id)
