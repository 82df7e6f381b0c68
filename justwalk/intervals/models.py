"""Interval walk data model.

Phases are fixed-duration segments of a walk. A configuration is an ordered,
immutable tuple of phases plus the number of brisk/recovery cycles chosen
before the session starts:

    warmup? (brisk recovery){N} cooldown?

Free walks are a single classic/slow phase. A classic walk has no duration
and runs until the walker stops; a post-meal walk is a 10 minute countdown
that completes on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum

from justwalk.intervals.errors import IntervalConfigurationError


class PhaseKind(StrEnum):
    WARMUP = "warmup"
    BRISK = "brisk"
    RECOVERY = "recovery"
    COOLDOWN = "cooldown"
    CLASSIC = "classic"
    SLOW = "slow"


FREE_WALK_KINDS = frozenset({PhaseKind.CLASSIC, PhaseKind.SLOW})


class WalkMode(StrEnum):
    INTERVAL = "interval"
    CLASSIC = "classic"
    POST_MEAL = "post_meal"


SELECTABLE_CYCLE_COUNTS = (3, 5, 7)
POST_MEAL_DURATION_SECONDS = 600


@dataclass(frozen=True)
class Phase:
    """One segment of a walk.

    Attributes:
        kind: Phase kind
        duration_seconds: Fixed duration, None for an open-ended free walk
        cycle: 1-based cycle number for brisk/recovery, 0 otherwise
    """

    kind: PhaseKind
    duration_seconds: int | None
    cycle: int = 0

    @property
    def is_open_ended(self) -> bool:
        return self.duration_seconds is None and self.kind in FREE_WALK_KINDS


@dataclass(frozen=True)
class IntervalConfiguration:
    """Immutable phase list for one session.

    Validated on construction; an invalid configuration never reaches the
    tick loop.

    Attributes:
        phases: Ordered phases
        cycle_count: Number of brisk+recovery pairs
        mode: Walk mode the configuration was built for
        name: Optional preset name for display
    """

    phases: tuple[Phase, ...]
    cycle_count: int
    mode: WalkMode = WalkMode.INTERVAL
    name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "phases", tuple(self.phases))
        validate_configuration(self)

    @property
    def phase_count(self) -> int:
        return len(self.phases)

    @property
    def is_open_ended(self) -> bool:
        return len(self.phases) == 1 and self.phases[0].is_open_ended

    @property
    def is_free_walk(self) -> bool:
        return len(self.phases) == 1 and self.phases[0].kind in FREE_WALK_KINDS

    @property
    def total_duration_seconds(self) -> int | None:
        """Sum of all phase durations, None for open-ended walks."""
        if self.is_open_ended:
            return None
        return sum(phase.duration_seconds or 0 for phase in self.phases)

    @property
    def has_warmup(self) -> bool:
        return self.phases[0].kind == PhaseKind.WARMUP

    @property
    def has_cooldown(self) -> bool:
        return self.phases[-1].kind == PhaseKind.COOLDOWN

    def phase_at(self, index: int) -> Phase:
        return self.phases[index]

    def with_cycle_count(self, cycle_count: int) -> IntervalConfiguration:
        """Rebuild this configuration with a different number of cycles.

        Durations are taken from the existing phases.
        """
        if self.is_free_walk:
            raise IntervalConfigurationError("OPEN_ENDED_MIXED", ["free walks have no cycles"])
        durations = {phase.kind: phase.duration_seconds or 0 for phase in self.phases}
        if self.cycle_count == 0 and cycle_count > 0:
            raise IntervalConfigurationError(
                "INVALID_CYCLE_COUNT",
                ["zero-cycle configuration carries no brisk/recovery durations"],
            )
        rebuilt = build_interval_configuration(
            cycle_count=cycle_count,
            brisk_seconds=durations.get(PhaseKind.BRISK, 0),
            recovery_seconds=durations.get(PhaseKind.RECOVERY, 0),
            warmup_seconds=durations.get(PhaseKind.WARMUP, 0),
            cooldown_seconds=durations.get(PhaseKind.COOLDOWN, 0),
        )
        return replace(rebuilt, name=self.name)


def validate_configuration(config: IntervalConfiguration) -> None:
    """Validate phase list shape and durations.

    Raises:
        IntervalConfigurationError: If the configuration is empty or malformed
    """
    phases = config.phases
    if not phases:
        raise IntervalConfigurationError("EMPTY_PHASES", ["configuration has no phases"])

    if config.cycle_count < 0:
        raise IntervalConfigurationError("INVALID_CYCLE_COUNT", [f"cycle_count={config.cycle_count}"])

    free_walk = [phase for phase in phases if phase.kind in FREE_WALK_KINDS]
    if free_walk:
        if len(phases) != 1 or config.cycle_count != 0:
            raise IntervalConfigurationError(
                "OPEN_ENDED_MIXED",
                [f"free walk phase {free_walk[0].kind} must be the only phase"],
            )
        duration = phases[0].duration_seconds
        if duration is not None and duration <= 0:
            raise IntervalConfigurationError(
                "INVALID_DURATION",
                [f"free walk phase {phases[0].kind} duration={duration}"],
            )
        return

    bad_durations = [
        f"phase {i} ({phase.kind}) duration={phase.duration_seconds}"
        for i, phase in enumerate(phases)
        if phase.duration_seconds is None or phase.duration_seconds <= 0
    ]
    if bad_durations:
        raise IntervalConfigurationError("INVALID_DURATION", bad_durations)

    kinds = [phase.kind for phase in phases]
    start = 1 if kinds[0] == PhaseKind.WARMUP else 0
    end = len(kinds) - 1 if kinds[-1] == PhaseKind.COOLDOWN and len(kinds) > start else len(kinds)
    body = kinds[start:end]

    expected_body = [PhaseKind.BRISK, PhaseKind.RECOVERY] * (len(body) // 2)
    if body != expected_body:
        raise IntervalConfigurationError(
            "MALFORMED_SEQUENCE",
            [f"unexpected phase order: {[str(kind) for kind in kinds]}"],
        )

    cycles = len(body) // 2
    if cycles != config.cycle_count:
        raise IntervalConfigurationError(
            "CYCLE_COUNT_MISMATCH",
            [f"phases contain {cycles} cycles, cycle_count={config.cycle_count}"],
        )


def build_interval_configuration(
    cycle_count: int,
    brisk_seconds: int,
    recovery_seconds: int,
    warmup_seconds: int = 0,
    cooldown_seconds: int = 0,
    name: str | None = None,
) -> IntervalConfiguration:
    """Build warmup, N x (brisk, recovery), cooldown.

    Zero-length warm-up and cool-down phases are omitted.
    """
    if cycle_count < 0:
        raise IntervalConfigurationError("INVALID_CYCLE_COUNT", [f"cycle_count={cycle_count}"])

    phases: list[Phase] = []
    if warmup_seconds > 0:
        phases.append(Phase(PhaseKind.WARMUP, warmup_seconds))

    for cycle in range(1, cycle_count + 1):
        phases.append(Phase(PhaseKind.BRISK, brisk_seconds, cycle))
        phases.append(Phase(PhaseKind.RECOVERY, recovery_seconds, cycle))

    if cooldown_seconds > 0:
        phases.append(Phase(PhaseKind.COOLDOWN, cooldown_seconds))

    return IntervalConfiguration(phases=tuple(phases), cycle_count=cycle_count, name=name)


def build_open_walk_configuration(
    kind: PhaseKind = PhaseKind.CLASSIC,
    mode: WalkMode = WalkMode.CLASSIC,
    duration_seconds: int | None = None,
) -> IntervalConfiguration:
    """Single free-walk phase.

    Without a duration the walk runs until the walker stops; with one it counts
    down and completes like the last phase of an interval walk.
    """
    return IntervalConfiguration(
        phases=(Phase(kind, duration_seconds),),
        cycle_count=0,
        mode=mode,
        name=str(mode),
    )


def build_post_meal_configuration(duration_seconds: int = POST_MEAL_DURATION_SECONDS) -> IntervalConfiguration:
    """Gentle post-meal walk: one slow phase, 10 minutes by default."""
    return build_open_walk_configuration(PhaseKind.SLOW, WalkMode.POST_MEAL, duration_seconds)


PRESETS: dict[str, IntervalConfiguration] = {
    "standard": build_interval_configuration(
        cycle_count=5, brisk_seconds=180, recovery_seconds=180, name="standard"
    ),
    "standard_with_warmup": build_interval_configuration(
        cycle_count=5,
        brisk_seconds=180,
        recovery_seconds=180,
        warmup_seconds=120,
        cooldown_seconds=120,
        name="standard_with_warmup",
    ),
    "beginner": build_interval_configuration(
        cycle_count=5, brisk_seconds=60, recovery_seconds=120, name="beginner"
    ),
    "advanced": build_interval_configuration(
        cycle_count=6, brisk_seconds=240, recovery_seconds=120, name="advanced"
    ),
}


def get_preset(name: str, cycle_count: int | None = None) -> IntervalConfiguration:
    """Look up a preset, optionally with a different cycle count.

    Raises:
        KeyError: If the preset name is unknown
    """
    config = PRESETS[name]
    if cycle_count is not None and cycle_count != config.cycle_count:
        config = config.with_cycle_count(cycle_count)
    return config
