"""Phase clock.

Single source of elapsed and remaining time for the active phase. The clock
advances one second per tick and asks the sequencer for the next phase when
the remaining time reaches zero.

Long suspensions (app backgrounded, timer not firing) are absorbed with
catch_up(), which either fast-forwards through every boundary crossed during
the gap or clamps at the next boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from loguru import logger

from justwalk.intervals.models import IntervalConfiguration, Phase
from justwalk.intervals.sequencer import next_phase_index

TICK_SECONDS = 1


class CatchUpPolicy(StrEnum):
    FAST_FORWARD = "fast_forward"
    CLAMP = "clamp"


@dataclass(frozen=True)
class PhaseTransition:
    """A boundary crossed by the clock.

    Attributes:
        from_index: Index of the phase that ended
        to_index: Index of the phase entered, None when the session completed
        elapsed_seconds: Session elapsed time at the boundary
        skipped: True when the transition came from a manual skip
    """

    from_index: int
    to_index: int | None
    elapsed_seconds: int
    skipped: bool = False

    @property
    def completed(self) -> bool:
        return self.to_index is None


@dataclass
class SessionState:
    """Mutable clock state.

    Invariants:
    - remaining_seconds is within [0, duration of the current phase]
      (None for open-ended phases)
    - elapsed_seconds never decreases and does not grow while paused
    """

    phase_index: int
    remaining_seconds: int | None
    elapsed_seconds: int = 0
    paused: bool = False
    completed: bool = False


class PhaseClock:
    def __init__(self, config: IntervalConfiguration):
        self.config = config
        self._state = SessionState(
            phase_index=0,
            remaining_seconds=config.phases[0].duration_seconds,
        )

    @property
    def state(self) -> SessionState:
        """Copy of the current state."""
        return replace(self._state)

    @property
    def phase_index(self) -> int:
        return self._state.phase_index

    @property
    def current_phase(self) -> Phase:
        return self.config.phases[self._state.phase_index]

    @property
    def remaining_seconds(self) -> int | None:
        return self._state.remaining_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self._state.elapsed_seconds

    @property
    def is_paused(self) -> bool:
        return self._state.paused

    @property
    def is_complete(self) -> bool:
        return self._state.completed

    def tick(self) -> PhaseTransition | None:
        """Advance one second.

        No-op while paused or after completion. At most one transition per tick.
        """
        if self._state.paused or self._state.completed:
            return None
        return self._advance(TICK_SECONDS)

    def pause(self) -> bool:
        if self._state.paused or self._state.completed:
            return False
        self._state.paused = True
        return True

    def resume(self) -> bool:
        if not self._state.paused or self._state.completed:
            return False
        self._state.paused = False
        return True

    def skip_phase(self) -> PhaseTransition | None:
        """Leave the current phase now; the next phase starts with its full duration."""
        if self._state.completed or self._state.paused or self.current_phase.is_open_ended:
            return None
        return self._enter_next(skipped=True)

    def catch_up(self, seconds: int, policy: CatchUpPolicy = CatchUpPolicy.FAST_FORWARD) -> list[PhaseTransition]:
        """Absorb a gap of several seconds in one call.

        FAST_FORWARD consumes the whole gap and reports every crossed boundary.
        CLAMP stops at the next boundary and drops the rest of the gap.
        """
        if seconds <= 0 or self._state.paused or self._state.completed:
            return []

        transitions: list[PhaseTransition] = []
        remaining_gap = seconds

        while remaining_gap > 0 and not self._state.completed:
            step = remaining_gap
            if self._state.remaining_seconds is not None:
                step = min(remaining_gap, self._state.remaining_seconds)

            transition = self._advance(step)
            remaining_gap -= step
            if transition is not None:
                transitions.append(transition)
                if policy == CatchUpPolicy.CLAMP:
                    break

        if transitions or remaining_gap:
            logger.info(
                f"Caught up {seconds}s with policy={policy}: "
                f"{len(transitions)} transition(s), {remaining_gap}s dropped"
            )
        return transitions

    def _advance(self, seconds: int) -> PhaseTransition | None:
        self._state.elapsed_seconds += seconds
        if self._state.remaining_seconds is None:
            return None

        self._state.remaining_seconds -= seconds
        if self._state.remaining_seconds > 0:
            return None
        return self._enter_next()

    def _enter_next(self, skipped: bool = False) -> PhaseTransition:
        from_index = self._state.phase_index
        following = next_phase_index(self.config, from_index)

        if following is None:
            self._state.completed = True
            self._state.remaining_seconds = 0
        else:
            self._state.phase_index = following
            self._state.remaining_seconds = self.config.phases[following].duration_seconds

        return PhaseTransition(
            from_index=from_index,
            to_index=following,
            elapsed_seconds=self._state.elapsed_seconds,
            skipped=skipped,
        )
