"""Interval walk session core: phases, clock, sequencer, cues and goals."""

from justwalk.intervals.clock import CatchUpPolicy, PhaseClock, PhaseTransition, SessionState
from justwalk.intervals.cues import Cue, CueChannel, CueDispatcher, CueKind, HapticPattern, create_cue_dispatcher
from justwalk.intervals.errors import IntervalConfigurationError, SessionStateError
from justwalk.intervals.goals import DailyGoalContext, GoalType, WalkGoal
from justwalk.intervals.models import (
    PRESETS,
    IntervalConfiguration,
    Phase,
    PhaseKind,
    WalkMode,
    build_interval_configuration,
    build_open_walk_configuration,
    build_post_meal_configuration,
    get_preset,
)
from justwalk.intervals.runner import SessionRunner
from justwalk.intervals.sequencer import ScheduledPhase, build_phase_schedule, next_phase_index
from justwalk.intervals.session import (
    IntervalWalkSession,
    SessionEvent,
    SessionEventType,
    SessionStatus,
    SessionSummary,
    TickResult,
)
from justwalk.intervals.tracking import TrackerSnapshot, WorkoutTracker

__all__ = [
    "PRESETS",
    "CatchUpPolicy",
    "Cue",
    "CueChannel",
    "CueDispatcher",
    "CueKind",
    "DailyGoalContext",
    "GoalType",
    "HapticPattern",
    "IntervalConfiguration",
    "IntervalConfigurationError",
    "IntervalWalkSession",
    "Phase",
    "PhaseClock",
    "PhaseKind",
    "PhaseTransition",
    "ScheduledPhase",
    "SessionEvent",
    "SessionEventType",
    "SessionRunner",
    "SessionState",
    "SessionStateError",
    "SessionStatus",
    "SessionSummary",
    "TickResult",
    "TrackerSnapshot",
    "WalkGoal",
    "WalkMode",
    "WorkoutTracker",
    "build_interval_configuration",
    "build_open_walk_configuration",
    "build_phase_schedule",
    "build_post_meal_configuration",
    "create_cue_dispatcher",
    "get_preset",
    "next_phase_index",
]
