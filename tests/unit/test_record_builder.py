"""Unit tests for RecordBuilder and lot id resolution.

Tests verify:
- Single-timer records report live duration and default end to now
- Staged records carry stages, dead times and totals
- Building never mutates timer state and is repeatable
- Lot ids resolve from form fields first, then the shift's daily lot
"""

import json
from datetime import date

import pytest

from bakeline.core.records import (
    Panel,
    RecordBuilder,
    default_daily_lot,
    format_history_entry,
    resolve_lot_id,
)
from bakeline.core.records.models import Transition
from bakeline.core.timing import StageCoordinator, Timer, TimerState

MINUTE = 60_000


@pytest.fixture
def builder(clock) -> RecordBuilder:
    return RecordBuilder(clock=clock)


@pytest.fixture
def finished_timer(clock) -> Timer:
    """A bench timer that ran 06:00 to 06:20."""
    timer = Timer(clock=clock)
    timer.start()
    clock.advance(20 * MINUTE)
    timer.finish()
    return timer


@pytest.fixture
def mixer(clock) -> StageCoordinator:
    """Mixer with kneading 06:00-06:10, a 2 min gap, then 06:12-06:20."""
    coordinator = StageCoordinator("mixer-1", ["kneading-1", "kneading-2"], clock=clock)
    coordinator.activate("kneading-1")
    clock.advance(10 * MINUTE)
    coordinator.finish("kneading-1")
    clock.advance(2 * MINUTE)
    coordinator.activate("kneading-2")
    clock.advance(8 * MINUTE)
    coordinator.finish("kneading-2")
    return coordinator


class TestBuildSingle:
    def test_finished_timer(self, builder, finished_timer, clock):
        record = builder.build_single(
            Panel.BENCH_REST,
            "mesa-1",
            finished_timer,
            form={"lote": "L-1"},
            submitted_at=clock(),
        )

        assert record.panel == Panel.BENCH_REST
        assert record.unit == "mesa-1"
        assert record.lot_id == "L-1"
        assert record.timing.start == "2026-01-18T06:00:00.000Z"
        assert record.timing.end == "2026-01-18T06:20:00.000Z"
        assert record.timing.duration_ms == 20 * MINUTE
        assert record.timestamp == "2026-01-18T06:20:00.000Z"
        assert not record.is_staged

    def test_running_timer_ends_now_without_mutation(self, builder, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(5 * MINUTE)

        record = builder.build_single(Panel.BAKING, "oven-1", timer)

        assert record.timing.end == "2026-01-18T06:05:00.000Z"
        assert record.timing.duration_ms == 5 * MINUTE
        assert timer.state == TimerState.RUNNING
        assert timer.end_at is None

    def test_idle_timer_has_empty_start(self, builder):
        record = builder.build_single(Panel.BAKING, "oven-1", Timer())

        assert record.timing.start == ""
        assert record.timing.duration_ms == 0

    def test_product_copied_from_shift(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BAKING,
            "oven-1",
            finished_timer,
            shift={"producto": "Canilla"},
            form={},
        )

        assert record.form["producto"] == "Canilla"
        assert record.form["producto1"] == "Canilla"

    def test_form_product_wins_over_shift(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BAKING,
            "oven-1",
            finished_timer,
            shift={"producto": "Canilla"},
            form={"producto": "Pan dulce"},
        )

        assert record.form["producto"] == "Pan dulce"

    def test_inputs_are_not_mutated(self, builder, finished_timer):
        form = {"lote": "L-1"}
        shift = {"producto": "Canilla"}

        builder.build_single(Panel.BAKING, "oven-1", finished_timer, shift, form)

        assert form == {"lote": "L-1"}
        assert shift == {"producto": "Canilla"}

    def test_repeated_builds_are_identical(self, builder, finished_timer):
        args = (
            Panel.BENCH_REST,
            "mesa-1",
            finished_timer,
            {"shiftDate": "2026-01-18"},
            {"lote": "L-1"},
            {"temp": 24},
        )

        first = json.dumps(builder.build_single(*args).to_dict())
        second = json.dumps(builder.build_single(*args).to_dict())

        assert first == second

    def test_timestamp_is_empty_unless_supplied(self, builder, finished_timer):
        record = builder.build_single(Panel.BENCH_REST, "mesa-1", finished_timer)

        assert record.timestamp == ""

    def test_single_record_dict_shape(self, builder, finished_timer):
        payload = builder.build_single(Panel.BENCH_REST, "mesa-1", finished_timer).to_dict()

        assert list(payload) == ["panel", "unit", "timestamp", "shift", "form", "env", "timing"]
        assert payload["panel"] == "mesa"
        assert payload["timing"] == {
            "start": "2026-01-18T06:00:00.000Z",
            "end": "2026-01-18T06:20:00.000Z",
            "durationMs": 20 * MINUTE,
        }


class TestBuildStaged:
    def test_staged_record(self, builder, mixer):
        record = builder.build_staged(Panel.MIXING, mixer, form={"lote1": "L-7"})

        assert record.unit == "mixer-1"
        assert record.lot_id == "L-7"
        assert record.is_staged
        assert [s.stage_id for s in record.stages] == ["kneading-1", "kneading-2"]
        assert record.dead_times_ms == (2 * MINUTE,)
        assert record.totals.machine_total_ms == 18 * MINUTE
        assert record.totals.dead_total_ms == 2 * MINUTE
        assert record.totals.overall_ms == 20 * MINUTE
        assert record.timing.start == "2026-01-18T06:00:00.000Z"
        assert record.timing.end == "2026-01-18T06:20:00.000Z"
        assert record.timing.duration_ms == 18 * MINUTE

    def test_staged_dict_shape(self, builder, mixer):
        payload = builder.build_staged(Panel.MIXING, mixer).to_dict()

        assert list(payload) == [
            "panel",
            "unit",
            "timestamp",
            "shift",
            "form",
            "env",
            "stages",
            "deadTimesMs",
            "totals",
            "timing",
        ]
        assert payload["stages"][1] == {
            "id": "kneading-2",
            "start": "2026-01-18T06:12:00.000Z",
            "end": "2026-01-18T06:20:00.000Z",
            "durationMs": 8 * MINUTE,
        }
        assert payload["totals"] == {
            "machineTotalMs": 18 * MINUTE,
            "deadTotalMs": 2 * MINUTE,
            "overallMs": 20 * MINUTE,
        }

    def test_rebuild_after_clock_moves_is_identical(self, builder, mixer, clock):
        args = (Panel.MIXING, mixer, {"shiftDate": "2026-01-18"}, {"lote": "L-1"}, {})

        first = json.dumps(builder.build_staged(*args).to_dict())
        clock.advance(1)
        second = json.dumps(builder.build_staged(*args).to_dict())
        clock.advance(5 * MINUTE)
        third = json.dumps(builder.build_staged(*args).to_dict())

        assert first == second == third

    def test_staged_does_not_fill_product_slot(self, builder, mixer):
        record = builder.build_staged(Panel.MIXING, mixer, shift={"producto": "Canilla"})

        assert record.form["producto"] == "Canilla"
        assert "producto1" not in record.form

    def test_unstarted_stage_has_empty_times(self, builder, clock):
        coordinator = StageCoordinator("mixer-2", ["kneading-1", "kneading-2"], clock=clock)
        coordinator.activate("kneading-1")
        clock.advance(MINUTE)
        coordinator.finish("kneading-1")

        record = builder.build_staged(Panel.MIXING, coordinator)

        assert record.stages[1].start == ""
        assert record.stages[1].end == ""
        assert record.timing.end == "2026-01-18T06:01:00.000Z"


class TestResolveLotId:
    def test_lote_first(self):
        assert resolve_lot_id({"lote": "A", "lote1": "B"}, {"dailyLot": "LD"}) == "A"

    def test_blank_fields_are_skipped(self):
        form = {"lote": "  ", "lote1": "", "lote2": " B2 "}

        assert resolve_lot_id(form, {"dailyLot": "LD"}) == "B2"

    def test_falls_back_to_daily_lot(self):
        assert resolve_lot_id({}, {"dailyLot": "LD-20260118"}) == "LD-20260118"

    def test_untracked(self):
        assert resolve_lot_id({"lote": None}, {}) is None
        assert resolve_lot_id(None, None) is None

    def test_default_daily_lot(self):
        assert default_daily_lot(date(2026, 1, 18)) == "LD-20260118"


class TestHistoryEntry:
    def test_plain_entry(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BENCH_REST, "mesa-1", finished_timer, shift={"producto": "Canilla"}
        )

        assert format_history_entry(record) == (
            "MESA · mesa-1 · Canilla · 06:00:00 - 06:20:00 (00:20:00)"
        )

    def test_entry_with_transition(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BENCH_REST, "mesa-1", finished_timer, form={"lote": "L-1"}
        ).with_transition(
            Transition(
                from_panel=Panel.MIXING,
                to_panel=Panel.BENCH_REST,
                from_end="2026-01-18T05:55:00.000Z",
                delta_ms=5 * MINUTE,
                delta="00:05:00",
                lot_id="L-1",
            )
        )

        assert format_history_entry(record).endswith("· L-1 · 06:00:00 - 06:20:00 (00:20:00) · Δ 00:05:00")

    def test_daily_lot_is_not_a_label(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BENCH_REST, "mesa-1", finished_timer, shift={"dailyLot": "LD-20260118"}
        )

        assert record.lot_id == "LD-20260118"
        assert " · Sin etiqueta · " in format_history_entry(record)

    def test_later_lot_field_labels_entry(self, builder, finished_timer):
        record = builder.build_single(
            Panel.BENCH_REST, "mesa-1", finished_timer, form={"lote2": "L-9"}
        )

        assert " · L-9 · " in format_history_entry(record)

    def test_unlabelled_entry(self, builder):
        record = builder.build_single(Panel.BAKING, "oven-2", Timer())

        assert format_history_entry(record) == (
            "OVENS · oven-2 · Sin etiqueta · sin inicio - 06:00:00 (00:00:00)"
        )
