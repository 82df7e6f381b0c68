"""Interval walk session controller.

Composes the phase clock, the phase sequencer and the cue dispatcher for one
walk. Collaborators (tracker, cue channels, summary sink, settings) are
injected, so the controller runs the same way under tests, the CLI runner
and a real timer.

Per tick the order is fixed:
1. the clock advances (consulting the sequencer at a boundary)
2. the tracker snapshot is read
3. the cue dispatcher is notified of transitions, then of milestones

A session ends on stop() or when the phase sequence is exhausted. Either way
exactly one SessionSummary is produced, built from counters snapshotted
before the session is marked finished.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from loguru import logger
from pydantic import BaseModel

from justwalk.config.settings import Settings
from justwalk.config.settings import settings as default_settings
from justwalk.intervals.clock import CatchUpPolicy, PhaseClock, PhaseTransition
from justwalk.intervals.cues import (
    MILESTONE_CUES,
    Cue,
    CueDispatcher,
    CueKind,
    countdown_cue,
    phase_entry_cue,
    pre_warning_cue,
    step_milestone_cue,
)
from justwalk.intervals.errors import SessionStateError
from justwalk.intervals.formatting import format_phase_time, format_total_time
from justwalk.intervals.goals import DailyGoalContext, GoalType, WalkGoal, is_walk_goal_reached, walk_goal_progress
from justwalk.intervals.models import IntervalConfiguration, Phase, PhaseKind, WalkMode
from justwalk.intervals.sequencer import next_phase_index
from justwalk.intervals.tracking import StaticTracker, TrackerSnapshot, WorkoutTracker


class SessionStatus(StrEnum):
    READY = "ready"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"


FINISHED_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.STOPPED})


class SessionEventType(StrEnum):
    STARTED = "started"
    PHASE_CHANGED = "phase_changed"
    MILESTONE = "milestone"
    PAUSED = "paused"
    RESUMED = "resumed"
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SessionEvent:
    """Event for the display layer (progress ring, phase label)."""

    type: SessionEventType
    elapsed_seconds: int
    phase_index: int | None = None
    phase_kind: PhaseKind | None = None
    cue: CueKind | None = None
    value: int | None = None


@dataclass
class TickResult:
    status: SessionStatus
    elapsed_seconds: int
    remaining_seconds: int | None
    phase_index: int
    events: list[SessionEvent] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.events)


class SessionSummary(BaseModel):
    """Summary record handed to the persistence collaborator."""

    started_at: datetime
    ended_at: datetime
    mode: WalkMode
    configuration_name: str | None = None
    planned_duration_seconds: int | None = None
    total_elapsed_seconds: int
    cycle_count: int
    completed_brisk_intervals: int
    completed_recovery_intervals: int
    completed_successfully: bool
    steps: int
    distance_meters: float
    walk_goal: WalkGoal
    walk_goal_reached: bool
    daily_goal_reached: bool


SummarySink = Callable[[SessionSummary], None]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class IntervalWalkSession:
    """Controller for one walk: warmup, (brisk, recovery) x N, cooldown, or one open-ended phase."""

    def __init__(
        self,
        config: IntervalConfiguration,
        dispatcher: CueDispatcher | None = None,
        tracker: WorkoutTracker | None = None,
        goal: WalkGoal | None = None,
        daily_goal: DailyGoalContext | None = None,
        summary_sink: SummarySink | None = None,
        settings: Settings | None = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.config = config
        self.dispatcher = dispatcher or CueDispatcher()
        self.tracker = tracker or StaticTracker()
        self.goal = goal or WalkGoal.none()
        self.daily_goal = daily_goal
        self.summary_sink = summary_sink
        self.settings = settings or default_settings
        self._now = now

        self.clock = PhaseClock(config)
        self.status = SessionStatus.READY
        self.started_at: datetime | None = None
        self.ended_at: datetime | None = None
        self.summary: SessionSummary | None = None
        self.last_snapshot = TrackerSnapshot()

        self.completed_brisk_intervals = 0
        self.completed_recovery_intervals = 0
        self._last_step_milestone = 0

    # ------------------------------------------------------------------
    # Read-only views for the display layer
    # ------------------------------------------------------------------

    @property
    def current_phase(self) -> Phase:
        return self.clock.current_phase

    @property
    def elapsed_seconds(self) -> int:
        return self.clock.elapsed_seconds

    @property
    def remaining_seconds(self) -> int | None:
        return self.clock.remaining_seconds

    @property
    def is_active(self) -> bool:
        return self.status in {SessionStatus.ACTIVE, SessionStatus.PAUSED}

    @property
    def next_phase(self) -> Phase | None:
        following = next_phase_index(self.config, self.clock.phase_index)
        return None if following is None else self.config.phases[following]

    @property
    def phase_progress(self) -> float:
        duration = self.current_phase.duration_seconds
        remaining = self.clock.remaining_seconds
        if self.clock.is_complete:
            return 1.0
        if not duration or remaining is None:
            return 0.0
        return 1.0 - remaining / duration

    @property
    def session_progress(self) -> float:
        total = self.config.total_duration_seconds
        if not total:
            return 0.0
        return min(1.0, self.clock.elapsed_seconds / total)

    @property
    def goal_progress(self) -> float:
        snapshot = self.last_snapshot
        return walk_goal_progress(
            self.goal,
            self.clock.elapsed_seconds,
            snapshot.steps,
            snapshot.distance_meters,
            self.daily_goal,
        )

    @property
    def formatted_phase_time(self) -> str:
        return format_phase_time(self.clock.remaining_seconds)

    @property
    def formatted_total_time(self) -> str:
        return format_total_time(self.clock.elapsed_seconds)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> list[SessionEvent]:
        """Begin the session and announce the first phase.

        Raises:
            SessionStateError: If the session was already started
        """
        if self.status != SessionStatus.READY:
            raise SessionStateError(f"Cannot start a session in status '{self.status}'")

        self.dispatcher.reset()
        if self.daily_goal is not None and self.daily_goal.already_reached:
            self.dispatcher.latch(CueKind.DAILY_GOAL_REACHED)

        self.started_at = self._now()
        self.status = SessionStatus.ACTIVE
        logger.info(
            f"Walk session started: mode={self.config.mode}, preset={self.config.name}, "
            f"phases={self.config.phase_count}, cycles={self.config.cycle_count}, goal={self.goal.type}"
        )

        self.dispatcher.dispatch(MILESTONE_CUES[CueKind.SESSION_START])
        first = self.current_phase
        self.dispatcher.dispatch(phase_entry_cue(first))
        return [
            SessionEvent(SessionEventType.STARTED, 0, phase_index=0, phase_kind=first.kind),
        ]

    def tick(self) -> TickResult:
        """Advance the session by one second.

        Ticks after completion or stop are ignored. Ticks while paused do not
        move the clock.

        Raises:
            SessionStateError: If the session has not been started
        """
        self._require_started("tick")
        if self.status != SessionStatus.ACTIVE:
            return self._result([])

        transition = self.clock.tick()
        transitions = [transition] if transition is not None else []
        return self._process(transitions)

    def catch_up(self, seconds: int, policy: CatchUpPolicy | None = None) -> TickResult:
        """Absorb a multi-second gap (e.g. the app was suspended).

        Raises:
            SessionStateError: If the session has not been started
        """
        self._require_started("catch up")
        if self.status != SessionStatus.ACTIVE:
            return self._result([])

        chosen = policy or CatchUpPolicy(self.settings.catch_up_policy)
        transitions = self.clock.catch_up(seconds, chosen)
        return self._process(transitions)

    def skip_phase(self) -> TickResult:
        """Move to the next phase now (manual skip)."""
        self._require_started("skip")
        if self.status != SessionStatus.ACTIVE:
            return self._result([])

        transition = self.clock.skip_phase()
        if transition is None:
            logger.debug(f"Skip ignored for phase {self.current_phase.kind}")
            return self._result([])
        logger.info(f"Phase skipped at {self.clock.elapsed_seconds}s: index {transition.from_index} -> {transition.to_index}")
        return self._process([transition])

    def pause(self) -> bool:
        if self.status != SessionStatus.ACTIVE:
            logger.debug(f"Pause ignored in status '{self.status}'")
            return False
        self.clock.pause()
        self.status = SessionStatus.PAUSED
        self.dispatcher.dispatch(MILESTONE_CUES[CueKind.PAUSED])
        logger.info(f"Walk paused at {self.clock.elapsed_seconds}s (remaining={self.clock.remaining_seconds})")
        return True

    def resume(self) -> bool:
        if self.status != SessionStatus.PAUSED:
            logger.debug(f"Resume ignored in status '{self.status}'")
            return False
        self.clock.resume()
        self.status = SessionStatus.ACTIVE
        self.dispatcher.dispatch(MILESTONE_CUES[CueKind.RESUMED])
        logger.info(f"Walk resumed at {self.clock.elapsed_seconds}s (remaining={self.clock.remaining_seconds})")
        return True

    def stop(self) -> SessionSummary:
        """End the session on user request.

        Counters are snapshotted before the session is marked stopped so a
        late tick cannot change the summary. Stopping a finished session
        returns the existing summary.

        Raises:
            SessionStateError: If the session has not been started
        """
        self._require_started("stop")
        if self.summary is not None:
            return self.summary

        snapshot = self._read_tracker()
        self.status = SessionStatus.STOPPED
        logger.info(f"Walk stopped by user at {self.clock.elapsed_seconds}s")
        return self._finish(snapshot, completed=False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_started(self, action: str) -> None:
        if self.status == SessionStatus.READY:
            raise SessionStateError(f"Cannot {action} a session that has not started")

    def _result(self, events: list[SessionEvent]) -> TickResult:
        return TickResult(
            status=self.status,
            elapsed_seconds=self.clock.elapsed_seconds,
            remaining_seconds=self.clock.remaining_seconds,
            phase_index=self.clock.phase_index,
            events=events,
        )

    def _read_tracker(self) -> TrackerSnapshot:
        try:
            self.last_snapshot = self.tracker.snapshot()
        except Exception as e:
            logger.warning(f"Workout tracker unavailable, keeping last snapshot: {e}")
        return self.last_snapshot

    def _process(self, transitions: list[PhaseTransition]) -> TickResult:
        snapshot = self._read_tracker()
        events = self._handle_transitions(transitions)
        events.extend(self._check_milestones(snapshot))
        if self.clock.is_complete and self.summary is None:
            events.append(SessionEvent(SessionEventType.COMPLETED, self.clock.elapsed_seconds))
            self._finish(snapshot, completed=True)
        return self._result(events)

    def _handle_transitions(self, transitions: list[PhaseTransition]) -> list[SessionEvent]:
        events: list[SessionEvent] = []
        for transition in transitions:
            ended = self.config.phases[transition.from_index]
            if ended.kind == PhaseKind.BRISK:
                self.completed_brisk_intervals += 1
            elif ended.kind == PhaseKind.RECOVERY:
                self.completed_recovery_intervals += 1

            if transition.completed:
                continue

            entered = self.config.phases[transition.to_index]
            events.append(
                SessionEvent(
                    SessionEventType.PHASE_CHANGED,
                    transition.elapsed_seconds,
                    phase_index=transition.to_index,
                    phase_kind=entered.kind,
                    value=entered.cycle or None,
                )
            )

        # Several boundaries crossed at once (catch-up): only the phase the
        # walker is in now gets a cue.
        landed = [t for t in transitions if not t.completed]
        if landed and not self.clock.is_complete:
            self.dispatcher.dispatch(phase_entry_cue(self.current_phase))

        if self.clock.is_complete and transitions:
            self.status = SessionStatus.COMPLETED
            self.dispatcher.dispatch(MILESTONE_CUES[CueKind.SESSION_COMPLETE])
            logger.info(f"Walk session complete after {self.clock.elapsed_seconds}s")
        return events

    def _milestone(self, cue: Cue) -> SessionEvent:
        return SessionEvent(
            SessionEventType.MILESTONE,
            self.clock.elapsed_seconds,
            phase_index=self.clock.phase_index,
            phase_kind=cue.phase_kind,
            cue=cue.kind,
            value=cue.value,
        )

    def _fire_once(self, key: str, cue: Cue) -> list[SessionEvent]:
        if self.dispatcher.fire_once(key, cue):
            return [self._milestone(cue)]
        return []

    def _check_milestones(self, snapshot: TrackerSnapshot) -> list[SessionEvent]:
        events: list[SessionEvent] = []
        elapsed = self.clock.elapsed_seconds

        route_cue = self.dispatcher.update_route_status(snapshot.on_route)
        if route_cue is not None:
            events.append(self._milestone(route_cue))

        events.extend(self._check_step_milestones(snapshot.steps))

        if self.daily_goal is not None and self.daily_goal.is_reached(snapshot.steps):
            events.extend(self._fire_once(CueKind.DAILY_GOAL_REACHED, MILESTONE_CUES[CueKind.DAILY_GOAL_REACHED]))

        if is_walk_goal_reached(self.goal, elapsed, snapshot.steps, snapshot.distance_meters):
            events.extend(self._fire_once(CueKind.WALK_GOAL_REACHED, MILESTONE_CUES[CueKind.WALK_GOAL_REACHED]))

        if self._halfway_reached(snapshot):
            events.extend(self._fire_once(CueKind.HALFWAY, MILESTONE_CUES[CueKind.HALFWAY]))

        if not self.clock.is_complete:
            events.extend(self._check_phase_warnings())
        return events

    def _check_step_milestones(self, steps: int) -> list[SessionEvent]:
        interval = self.settings.step_milestone_interval
        if interval <= 0:
            return []

        reached = steps // interval
        if reached <= self._last_step_milestone:
            return []

        # Announce only the latest milestone when several were crossed at once.
        for milestone in range(self._last_step_milestone + 1, reached):
            self.dispatcher.latch(f"steps:{milestone * interval}")
        self._last_step_milestone = reached
        milestone_steps = reached * interval
        return self._fire_once(f"steps:{milestone_steps}", step_milestone_cue(milestone_steps))

    def _halfway_reached(self, snapshot: TrackerSnapshot) -> bool:
        total = self.config.total_duration_seconds
        if total:
            return self.clock.elapsed_seconds * 2 >= total
        if self.goal.type == GoalType.NONE:
            return False
        return walk_goal_progress(self.goal, self.clock.elapsed_seconds, snapshot.steps, snapshot.distance_meters) >= 0.5

    def _check_phase_warnings(self) -> list[SessionEvent]:
        remaining = self.clock.remaining_seconds
        duration = self.current_phase.duration_seconds
        if remaining is None or duration is None or remaining >= duration:
            return []

        index = self.clock.phase_index
        events: list[SessionEvent] = []

        pre_warning = self.settings.pre_warning_seconds
        upcoming = self.next_phase
        if upcoming is not None and 0 < pre_warning and remaining <= pre_warning:
            events.extend(self._fire_once(f"pre_warning:{index}", pre_warning_cue(upcoming, remaining)))

        if 0 < remaining <= self.settings.countdown_seconds:
            events.extend(self._fire_once(f"countdown:{index}:{remaining}", countdown_cue(remaining)))
        return events

    def _finish(self, snapshot: TrackerSnapshot, completed: bool) -> SessionSummary:
        self.ended_at = self._now()
        summary = SessionSummary(
            started_at=self.started_at or self.ended_at,
            ended_at=self.ended_at,
            mode=self.config.mode,
            configuration_name=self.config.name,
            planned_duration_seconds=self.config.total_duration_seconds,
            total_elapsed_seconds=self.clock.elapsed_seconds,
            cycle_count=self.config.cycle_count,
            completed_brisk_intervals=self.completed_brisk_intervals,
            completed_recovery_intervals=self.completed_recovery_intervals,
            completed_successfully=completed,
            steps=snapshot.steps,
            distance_meters=snapshot.distance_meters,
            walk_goal=self.goal,
            walk_goal_reached=self.dispatcher.has_fired(CueKind.WALK_GOAL_REACHED)
            or is_walk_goal_reached(self.goal, self.clock.elapsed_seconds, snapshot.steps, snapshot.distance_meters),
            daily_goal_reached=self.daily_goal is not None and self.daily_goal.is_reached(snapshot.steps),
        )
        self.summary = summary

        if self.summary_sink is not None:
            try:
                self.summary_sink(summary)
            except Exception as e:
                logger.error(f"Summary sink failed: {e}")
        return summary
