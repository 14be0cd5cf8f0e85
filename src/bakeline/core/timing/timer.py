"""Single-stage production timer.

A Timer accumulates running time across pause/resume cycles. It has no
error conditions: every operation is a total function of the current
state and the clock.
"""

from collections.abc import Callable
from enum import Enum

from bakeline.core.timing.clock import Clock, system_clock


class TimerState(str, Enum):
    """Lifecycle states of a Timer."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


StateListener = Callable[["Timer", TimerState], None]


class Timer:
    """Clock for one production stage.

    Attributes:
        start_at: Epoch-ms anchor such that ``now - start_at`` is the elapsed
            running time while running. Shifted back by prior elapsed time
            on resume.
        end_at: Epoch-ms stamp set when the timer is finished.
        elapsed: Accumulated running time in ms, excluding paused intervals.

    Example:
        >>> timer = Timer(clock=lambda: 1_000)
        >>> timer.start()
        >>> timer.state
        <TimerState.RUNNING: 'running'>
    """

    def __init__(
        self,
        clock: Clock = system_clock,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._clock = clock
        self._on_state_change = on_state_change
        self.state = TimerState.IDLE
        self.start_at: int | None = None
        self.end_at: int | None = None
        self.elapsed = 0

    @property
    def running(self) -> bool:
        return self.state == TimerState.RUNNING

    def start(self) -> None:
        """Start or resume the timer. No-op while already running."""
        if self.running:
            return
        self.start_at = self._clock() - self.elapsed
        self.end_at = None
        self._set_state(TimerState.RUNNING)

    def pause(self) -> None:
        """Freeze elapsed time. No-op unless running."""
        if not self.running:
            return
        self.elapsed = self._clock() - self.start_at
        self._set_state(TimerState.PAUSED)

    def finish(self) -> None:
        """Stop the timer and stamp ``end_at``.

        Calling it on a complete timer re-stamps ``end_at``.
        """
        if self.running:
            self.pause()
        self.end_at = self._clock()
        self._set_state(TimerState.COMPLETE)

    def reset(self, silent: bool = False) -> None:
        """Return to idle with every field cleared.

        Args:
            silent: Suppress the state-change notification.
        """
        self.start_at = None
        self.end_at = None
        self.elapsed = 0
        self.state = TimerState.IDLE
        if not silent:
            self._notify()

    def duration_ms(self) -> int:
        """Running time at this instant, live or final."""
        if self.running:
            return self._clock() - self.start_at
        return self.elapsed

    def _set_state(self, state: TimerState) -> None:
        self.state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self, self.state)

    def __repr__(self) -> str:
        return (
            f"<Timer(state={self.state.value}, start_at={self.start_at}, "
            f"end_at={self.end_at}, elapsed={self.elapsed})>"
        )
