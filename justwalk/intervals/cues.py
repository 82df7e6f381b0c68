"""Cue dispatch.

Cues are haptic and audio notifications tied to phase boundaries and
milestones. Delivery is best-effort: a failing channel is logged and skipped,
and never blocks session progression.

One-shot cues (goal reached, halfway, per-phase warnings, step milestones)
are guarded by session-scoped latches. The latch is set in the same call that
dispatches the cue, so each one fires at most once per session.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from loguru import logger

from justwalk.config.settings import Settings
from justwalk.intervals.models import Phase, PhaseKind
from justwalk.intervals.styles import style_for


class CueKind(StrEnum):
    SESSION_START = "session_start"
    PHASE_ENTRY = "phase_entry"
    PRE_WARNING = "pre_warning"
    COUNTDOWN = "countdown"
    HALFWAY = "halfway"
    DAILY_GOAL_REACHED = "daily_goal_reached"
    WALK_GOAL_REACHED = "walk_goal_reached"
    STEP_MILESTONE = "step_milestone"
    OFF_ROUTE = "off_route"
    BACK_ON_ROUTE = "back_on_route"
    PAUSED = "paused"
    RESUMED = "resumed"
    SESSION_COMPLETE = "session_complete"


class HapticPattern(StrEnum):
    WALK_START = "walk_start"
    BRISK_START = "brisk_start"  # 3 quick heavy taps
    EASY_START = "easy_start"  # 2 slow medium taps
    PHASE_CHANGE = "phase_change"
    PRE_WARNING = "pre_warning"
    COUNTDOWN = "countdown"
    MILESTONE = "milestone"
    SUCCESS = "success"
    WARNING = "warning"
    PAUSE = "pause"
    RESUME = "resume"
    WORKOUT_COMPLETE = "workout_complete"


PHASE_HAPTICS: dict[PhaseKind, HapticPattern] = {
    PhaseKind.WARMUP: HapticPattern.PHASE_CHANGE,
    PhaseKind.BRISK: HapticPattern.BRISK_START,
    PhaseKind.RECOVERY: HapticPattern.EASY_START,
    PhaseKind.COOLDOWN: HapticPattern.PHASE_CHANGE,
    PhaseKind.CLASSIC: HapticPattern.WALK_START,
    PhaseKind.SLOW: HapticPattern.WALK_START,
}


@dataclass(frozen=True)
class Cue:
    kind: CueKind
    text: str
    haptic: HapticPattern | None = None
    phase_kind: PhaseKind | None = None
    value: int | None = None


class CueChannel(Protocol):
    name: str

    def deliver(self, cue: Cue) -> None: ...


class LoggingCueChannel:
    """Channel that writes cues to the log."""

    name = "log"

    def deliver(self, cue: Cue) -> None:
        logger.info(f"Cue {cue.kind}: {cue.text}")


def phase_entry_cue(phase: Phase) -> Cue:
    return Cue(
        kind=CueKind.PHASE_ENTRY,
        text=style_for(phase.kind).announcement,
        haptic=PHASE_HAPTICS[phase.kind],
        phase_kind=phase.kind,
        value=phase.cycle or None,
    )


def pre_warning_cue(next_phase: Phase, seconds: int) -> Cue:
    return Cue(
        kind=CueKind.PRE_WARNING,
        text=f"{seconds} seconds to {style_for(next_phase.kind).short_label.lower()}",
        haptic=HapticPattern.PRE_WARNING,
        phase_kind=next_phase.kind,
        value=seconds,
    )


def countdown_cue(seconds: int) -> Cue:
    return Cue(kind=CueKind.COUNTDOWN, text=str(seconds), haptic=HapticPattern.COUNTDOWN, value=seconds)


def step_milestone_cue(steps: int) -> Cue:
    return Cue(kind=CueKind.STEP_MILESTONE, text=f"{steps:,} steps", haptic=HapticPattern.MILESTONE, value=steps)


MILESTONE_CUES: dict[CueKind, Cue] = {
    CueKind.SESSION_START: Cue(CueKind.SESSION_START, "Let's go.", HapticPattern.WALK_START),
    CueKind.HALFWAY: Cue(CueKind.HALFWAY, "Halfway there. Keep going!", HapticPattern.MILESTONE),
    CueKind.DAILY_GOAL_REACHED: Cue(CueKind.DAILY_GOAL_REACHED, "Daily step goal complete! Amazing!", HapticPattern.SUCCESS),
    CueKind.WALK_GOAL_REACHED: Cue(CueKind.WALK_GOAL_REACHED, "Goal complete! Amazing!", HapticPattern.SUCCESS),
    CueKind.OFF_ROUTE: Cue(CueKind.OFF_ROUTE, "You appear to be off route", HapticPattern.WARNING),
    CueKind.BACK_ON_ROUTE: Cue(CueKind.BACK_ON_ROUTE, "Back on route", HapticPattern.SUCCESS),
    CueKind.PAUSED: Cue(CueKind.PAUSED, "Walk paused.", HapticPattern.PAUSE),
    CueKind.RESUMED: Cue(CueKind.RESUMED, "Walk resumed.", HapticPattern.RESUME),
    CueKind.SESSION_COMPLETE: Cue(CueKind.SESSION_COMPLETE, "Walk complete. Great work!", HapticPattern.WORKOUT_COMPLETE),
}


CUE_HISTORY_LIMIT = 200


class CueDispatcher:
    """Fans cues out to haptic/audio channels with per-session one-shot latches."""

    def __init__(self, channels: list[CueChannel] | None = None):
        self.channels: list[CueChannel] = list(channels or [])
        self.history: deque[Cue] = deque(maxlen=CUE_HISTORY_LIMIT)
        self._latches: set[str] = set()
        self._on_route: bool | None = None

    def reset(self) -> None:
        """Clear latches and route state for a new session."""
        self.history.clear()
        self._latches.clear()
        self._on_route = None

    def dispatch(self, cue: Cue) -> None:
        self.history.append(cue)
        for channel in self.channels:
            try:
                channel.deliver(cue)
            except Exception as e:
                logger.warning(f"Cue channel '{getattr(channel, 'name', channel)}' failed to deliver {cue.kind}: {e}")

    def has_fired(self, key: str) -> bool:
        return key in self._latches

    def latch(self, key: str) -> None:
        """Mark a one-shot cue as already handled without delivering it."""
        self._latches.add(key)

    def fire_once(self, key: str, cue: Cue) -> bool:
        """Dispatch cue unless key already fired this session. Returns True when dispatched."""
        if key in self._latches:
            return False
        self._latches.add(key)
        self.dispatch(cue)
        return True

    def update_route_status(self, on_route: bool | None) -> Cue | None:
        """Dispatch off-route/back-on-route only when the route flag changes."""
        if on_route is None:
            return None

        previous = self._on_route
        self._on_route = on_route
        if previous == on_route:
            return None

        cue: Cue | None = None
        if not on_route:
            cue = MILESTONE_CUES[CueKind.OFF_ROUTE]
        elif previous is False:
            cue = MILESTONE_CUES[CueKind.BACK_ON_ROUTE]

        if cue is not None:
            self.dispatch(cue)
        return cue


def create_cue_dispatcher(
    settings: Settings,
    haptic_channel: CueChannel | None = None,
    voice_channel: CueChannel | None = None,
    extra_channels: list[CueChannel] | None = None,
) -> CueDispatcher:
    """Build a dispatcher with only the channels enabled in settings."""
    channels: list[CueChannel] = []
    if haptic_channel is not None and settings.haptics_enabled:
        channels.append(haptic_channel)
    if voice_channel is not None and settings.voice_enabled:
        channels.append(voice_channel)
    channels.extend(extra_channels or [])
    return CueDispatcher(channels)
