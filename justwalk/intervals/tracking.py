"""Workout tracker seam.

Live step and distance counters come from an external motion/location
service. The session controller only reads the latest snapshot once per tick.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class TrackerSnapshot(BaseModel):
    """Counters for the current session (not for the whole day).

    Attributes:
        steps: Steps walked since the session started
        distance_meters: Distance covered since the session started
        on_route: Route adherence for routed walks, None when not following a route
    """

    model_config = ConfigDict(frozen=True)

    steps: int = Field(default=0, ge=0)
    distance_meters: float = Field(default=0.0, ge=0)
    on_route: bool | None = None


class WorkoutTracker(Protocol):
    def snapshot(self) -> TrackerSnapshot: ...


class StaticTracker:
    """Tracker that reports whatever was last set on it."""

    def __init__(self, snapshot: TrackerSnapshot | None = None):
        self.current = snapshot or TrackerSnapshot()

    def snapshot(self) -> TrackerSnapshot:
        return self.current

    def update(self, **changes: object) -> None:
        self.current = self.current.model_copy(update=changes)


class SimulatedTracker:
    """Synthetic walker for local runs.

    Adds steps and distance per call at a steady cadence (~100 steps/min).
    Off-route windows are given as (start_call, end_call) ranges.
    """

    def __init__(
        self,
        steps_per_second: float = 1.67,
        meters_per_second: float = 1.3,
        off_route_windows: list[tuple[int, int]] | None = None,
        routed: bool = False,
    ):
        self.steps_per_second = steps_per_second
        self.meters_per_second = meters_per_second
        self.off_route_windows = off_route_windows or []
        self.routed = routed or bool(self.off_route_windows)
        self._calls = 0
        self._steps = 0.0
        self._distance = 0.0

    def snapshot(self) -> TrackerSnapshot:
        self._calls += 1
        self._steps += self.steps_per_second
        self._distance += self.meters_per_second

        on_route = None
        if self.routed:
            on_route = not any(start <= self._calls < end for start, end in self.off_route_windows)

        return TrackerSnapshot(steps=int(self._steps), distance_meters=round(self._distance, 2), on_route=on_route)
