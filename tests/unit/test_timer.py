"""Unit tests for the single-stage Timer.

Tests verify:
- Running time accumulates across pause/resume and excludes paused time
- Start/pause are no-ops in the wrong state
- finish() stamps end_at and re-stamps it on a complete timer
- reset() clears every field and notifies unless silent
"""

from bakeline.core.timing import Timer, TimerState


class TestStartPause:
    def test_new_timer_is_idle(self, clock):
        timer = Timer(clock=clock)

        assert timer.state == TimerState.IDLE
        assert timer.start_at is None
        assert timer.end_at is None
        assert timer.duration_ms() == 0

    def test_running_duration_is_live(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(1500)

        assert timer.running
        assert timer.start_at == clock.origin
        assert timer.duration_ms() == 1500

    def test_paused_interval_is_excluded(self, clock):
        """Run 500ms, pause 1000ms, run 300ms: elapsed is 800ms."""
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(500)
        timer.pause()

        assert timer.state == TimerState.PAUSED
        assert timer.elapsed == 500

        clock.advance(1000)
        assert timer.duration_ms() == 500

        timer.start()
        assert timer.start_at == clock() - 500
        clock.advance(300)

        assert timer.duration_ms() == 800

    def test_start_while_running_is_noop(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(200)
        timer.start()

        assert timer.start_at == clock.origin
        assert timer.duration_ms() == 200

    def test_pause_when_not_running_is_noop(self, clock):
        timer = Timer(clock=clock)
        timer.pause()

        assert timer.state == TimerState.IDLE
        assert timer.elapsed == 0

    def test_start_clears_end_after_completion(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(100)
        timer.finish()
        clock.advance(100)
        timer.start()

        assert timer.end_at is None
        assert timer.running
        clock.advance(50)
        assert timer.duration_ms() == 150


class TestFinish:
    def test_finish_running_timer(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(2000)
        timer.finish()

        assert timer.state == TimerState.COMPLETE
        assert timer.elapsed == 2000
        assert timer.end_at == clock.origin + 2000

    def test_finish_paused_timer_keeps_elapsed(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(700)
        timer.pause()
        clock.advance(5000)
        timer.finish()

        assert timer.elapsed == 700
        assert timer.end_at == clock.origin + 5700

    def test_finish_idle_timer(self, clock):
        timer = Timer(clock=clock)
        timer.finish()

        assert timer.state == TimerState.COMPLETE
        assert timer.elapsed == 0
        assert timer.end_at == clock.origin

    def test_finish_again_restamps_end(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(1000)
        timer.finish()
        clock.advance(400)
        timer.finish()

        assert timer.end_at == clock.origin + 1400
        assert timer.elapsed == 1000


class TestReset:
    def test_reset_clears_everything(self, clock):
        timer = Timer(clock=clock)
        timer.start()
        clock.advance(1000)
        timer.finish()
        timer.reset()

        assert timer.state == TimerState.IDLE
        assert timer.start_at is None
        assert timer.end_at is None
        assert timer.elapsed == 0
        assert timer.duration_ms() == 0

    def test_listener_sees_every_transition(self, clock):
        seen: list[TimerState] = []
        timer = Timer(clock=clock, on_state_change=lambda t, state: seen.append(state))

        timer.start()
        timer.pause()
        timer.finish()
        timer.reset()

        assert seen == [
            TimerState.RUNNING,
            TimerState.PAUSED,
            TimerState.COMPLETE,
            TimerState.IDLE,
        ]

    def test_silent_reset_does_not_notify(self, clock):
        seen: list[TimerState] = []
        timer = Timer(clock=clock, on_state_change=lambda t, state: seen.append(state))
        timer.start()
        seen.clear()

        timer.reset(silent=True)

        assert seen == []
        assert timer.state == TimerState.IDLE
