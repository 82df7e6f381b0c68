"""Phase sequencing.

Pure functions over an immutable configuration. Deterministic, no retries.
Schedules are built with cursor-based accumulation of phase durations.
"""

from __future__ import annotations

from dataclasses import dataclass

from justwalk.intervals.models import IntervalConfiguration, Phase


@dataclass(frozen=True)
class ScheduledPhase:
    """A phase placed on the session timeline (offsets in seconds from start)."""

    index: int
    phase: Phase
    start_second: int
    end_second: int | None


def next_phase_index(config: IntervalConfiguration, current_index: int) -> int | None:
    """Return the index following current_index, or None when the sequence is exhausted.

    Raises:
        ValueError: If current_index is not a valid phase index
    """
    if current_index < 0 or current_index >= config.phase_count:
        raise ValueError(f"phase index {current_index} out of range for {config.phase_count} phases")

    following = current_index + 1
    if following >= config.phase_count:
        return None
    return following


def build_phase_schedule(config: IntervalConfiguration) -> list[ScheduledPhase]:
    """Place every phase on the session timeline.

    Open-ended phases get end_second=None.
    """
    schedule: list[ScheduledPhase] = []
    cursor = 0

    for index, phase in enumerate(config.phases):
        if phase.duration_seconds is None:
            schedule.append(ScheduledPhase(index=index, phase=phase, start_second=cursor, end_second=None))
            continue

        end = cursor + phase.duration_seconds
        schedule.append(ScheduledPhase(index=index, phase=phase, start_second=cursor, end_second=end))
        cursor = end

    return schedule


def phase_index_at(config: IntervalConfiguration, elapsed_seconds: int) -> int | None:
    """Index of the phase active at elapsed_seconds, None once the schedule is exhausted."""
    if elapsed_seconds < 0:
        raise ValueError(f"elapsed_seconds must be >= 0, got {elapsed_seconds}")

    for scheduled in build_phase_schedule(config):
        if scheduled.end_second is None or elapsed_seconds < scheduled.end_second:
            return scheduled.index
    return None


def visit_phases(config: IntervalConfiguration) -> list[Phase]:
    """Walk the sequencer from the first phase until it signals completion."""
    visited = [config.phases[0]]
    index = 0
    while True:
        following = next_phase_index(config, index)
        if following is None:
            return visited
        visited.append(config.phases[following])
        index = following
