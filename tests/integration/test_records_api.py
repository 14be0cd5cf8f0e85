"""Integration tests for the production record REST endpoints.

Tests the record storage and analytics workflow including:
- Storing submitted records with derived metrics
- Listing with filters and pagination
- Control chart and summary views over filtered records
- Validation failures mapped to 400 responses
"""

import pytest
import pytest_asyncio
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bakeline.api.schemas.record import RecordPayload
from bakeline.api.v1.records import (
    create_record,
    delete_all_records,
    delete_record,
    get_control_chart,
    get_record,
    get_summary_metrics,
    list_records,
)
from bakeline.db.repositories import RecordRepository

MINUTE = 60_000


def payload(
    panel: str,
    unit: str,
    duration_ms: int,
    dead_ms: int = 0,
    lote: str | None = None,
    shift_date: str = "2026-01-18",
) -> RecordPayload:
    data = {
        "panel": panel,
        "unit": unit,
        "timestamp": "2026-01-18T06:20:00.000Z",
        "shift": {"shiftDate": shift_date},
        "form": {"lote": lote} if lote else {},
        "env": {},
        "timing": {"start": "", "end": "", "durationMs": duration_ms},
    }
    if dead_ms:
        data["deadTimesMs"] = [dead_ms]
    return RecordPayload.model_validate(data)


@pytest_asyncio.fixture
async def repo(async_session: AsyncSession) -> RecordRepository:
    return RecordRepository(async_session)


@pytest_asyncio.fixture
async def seeded(repo: RecordRepository) -> list[int]:
    """Five mixer records on 2026-01-18 and one oven record on 2026-01-19."""
    ids = []
    for minutes in [20, 20, 20, 20, 30]:
        response = await create_record(
            payload("mixers", "mixer-1", minutes * MINUTE, dead_ms=MINUTE, lote="L-1"), repo=repo
        )
        ids.append(response.id)
    response = await create_record(
        payload("ovens", "oven-1", 15 * MINUTE, shift_date="2026-01-19"), repo=repo
    )
    ids.append(response.id)
    return ids


class TestCreateRecord:
    @pytest.mark.asyncio
    async def test_derived_columns(self, repo):
        response = await create_record(
            payload("mixers", "mixer-1", 18 * MINUTE, dead_ms=2 * MINUTE, lote="L-7"), repo=repo
        )

        assert response.id is not None
        assert response.panel == "mixers"
        assert response.lot_id == "L-7"
        assert response.duration_ms == 18 * MINUTE
        assert response.dead_ms == 2 * MINUTE
        assert response.overall_ms == 20 * MINUTE
        assert response.data["form"] == {"lote": "L-7"}

    @pytest.mark.asyncio
    async def test_camel_case_serialization(self, repo):
        response = await create_record(payload("ovens", "oven-1", MINUTE), repo=repo)

        body = response.model_dump(by_alias=True)
        assert body["overallMs"] == MINUTE
        assert body["shiftDate"].isoformat() == "2026-01-18"


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_newest_first(self, repo, seeded):
        result = await list_records(
            panel=None, lot_id=None, date_from=None, date_to=None, offset=0, limit=None, repo=repo
        )

        assert result.total == 6
        assert [r.id for r in result.items] == list(reversed(seeded))

    @pytest.mark.asyncio
    async def test_filters_and_pagination(self, repo, seeded):
        result = await list_records(
            panel="mixers",
            lot_id="L-1",
            date_from="2026-01-18",
            date_to="2026-01-18",
            offset=1,
            limit=2,
            repo=repo,
        )

        assert result.total == 5
        assert len(result.items) == 2

    @pytest.mark.asyncio
    async def test_bad_date_is_400(self, repo):
        with pytest.raises(HTTPException) as exc_info:
            await list_records(
                panel=None,
                lot_id=None,
                date_from="18-01-2026",
                date_to=None,
                offset=0,
                limit=None,
                repo=repo,
            )

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_get_and_delete(self, repo, seeded):
        record = await get_record(seeded[0], repo=repo)
        assert record.id == seeded[0]

        deleted = await delete_record(seeded[0], repo=repo)
        assert deleted.deleted == seeded[0]

        with pytest.raises(HTTPException) as exc_info:
            await get_record(seeded[0], repo=repo)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_is_404(self, repo):
        with pytest.raises(HTTPException) as exc_info:
            await delete_record(999, repo=repo)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_all(self, repo, seeded):
        result = await delete_all_records(repo=repo)

        assert result.deleted == 6
        assert await repo.count() == 0


class TestControlChart:
    @pytest.mark.asyncio
    async def test_chart_for_panel(self, repo, seeded):
        chart = await get_control_chart(
            metric="durationMs", panel="mixers", date_from=None, date_to=None, repo=repo
        )

        assert chart.metric.value == "durationMs"
        assert chart.panel == "mixers"
        assert chart.count == 5
        assert chart.center_line == pytest.approx(22 * MINUTE)
        assert chart.lcl >= 0
        assert [p.id for p in chart.points] == seeded[:5]

    @pytest.mark.asyncio
    async def test_default_metric_is_overall(self, repo, seeded):
        chart = await get_control_chart(
            metric=None, panel=None, date_from=None, date_to=None, repo=repo
        )

        assert chart.metric.value == "overallMs"
        assert chart.panel == "all"
        assert chart.count == 6

    @pytest.mark.asyncio
    async def test_date_filter(self, repo, seeded):
        chart = await get_control_chart(
            metric="overallMs",
            panel=None,
            date_from="2026-01-19",
            date_to="2026-01-19",
            repo=repo,
        )

        assert chart.count == 1
        assert chart.points[0].unit == "oven-1"
        assert chart.std_dev == 0.0

    @pytest.mark.asyncio
    async def test_record_without_timing_is_not_charted(self, repo, seeded):
        untimed = await create_record(
            RecordPayload.model_validate(
                {"panel": "ovens", "unit": "oven-2", "shift": {"shiftDate": "2026-01-19"}}
            ),
            repo=repo,
        )

        assert untimed.overall_ms is None

        chart = await get_control_chart(
            metric=None, panel="ovens", date_from=None, date_to=None, repo=repo
        )

        assert chart.count == 1
        assert [p.unit for p in chart.points] == ["oven-1"]

    @pytest.mark.asyncio
    async def test_empty_chart_has_null_limits(self, repo):
        chart = await get_control_chart(
            metric="deadMs", panel="fermenter", date_from=None, date_to=None, repo=repo
        )

        assert chart.count == 0
        assert chart.ucl is None
        assert chart.points == []

    @pytest.mark.asyncio
    async def test_unknown_metric_is_400(self, repo):
        with pytest.raises(HTTPException) as exc_info:
            await get_control_chart(
                metric="cycleMs", panel=None, date_from=None, date_to=None, repo=repo
            )

        assert exc_info.value.status_code == 400


class TestSummaryMetrics:
    @pytest.mark.asyncio
    async def test_summary_for_panel(self, repo, seeded):
        summary = await get_summary_metrics(
            panel="mixers", date_from=None, date_to=None, repo=repo
        )

        assert summary.count == 5
        assert summary.duration.avg == pytest.approx(22 * MINUTE)
        assert summary.duration.max == 30 * MINUTE
        assert summary.dead.min == MINUTE
        assert summary.overall.min == 21 * MINUTE

    @pytest.mark.asyncio
    async def test_single_timer_records_have_no_dead_time(self, repo, seeded):
        summary = await get_summary_metrics(
            panel="ovens", date_from=None, date_to=None, repo=repo
        )

        assert summary.count == 1
        assert summary.dead.avg is None
        assert summary.overall.avg == 15 * MINUTE

    @pytest.mark.asyncio
    async def test_empty_summary_is_null(self, repo):
        summary = await get_summary_metrics(
            panel=None, date_from=None, date_to=None, repo=repo
        )

        assert summary.count == 0
        assert summary.overall.avg is None

    @pytest.mark.asyncio
    async def test_reversed_range_is_400(self, repo):
        with pytest.raises(HTTPException) as exc_info:
            await get_summary_metrics(
                panel=None, date_from="2026-02-01", date_to="2026-01-01", repo=repo
            )

        assert exc_info.value.status_code == 400
