"""Root conftest for all tests.

Shared fixtures for the interval walk session tests: a recording cue
channel, a static tracker and settings with default cue timing.
"""

import pytest

from justwalk.config.settings import Settings
from justwalk.intervals.cues import Cue, CueDispatcher, CueKind
from justwalk.intervals.models import IntervalConfiguration, build_interval_configuration
from justwalk.intervals.tracking import StaticTracker


class RecordingCueChannel:
    """Cue channel that keeps every delivered cue."""

    name = "recording"

    def __init__(self) -> None:
        self.cues: list[Cue] = []

    def deliver(self, cue: Cue) -> None:
        self.cues.append(cue)

    def kinds(self) -> list[CueKind]:
        return [cue.kind for cue in self.cues]

    def count(self, kind: CueKind) -> int:
        return sum(1 for cue in self.cues if cue.kind == kind)


class FailingCueChannel:
    """Cue channel whose output device is unavailable."""

    name = "failing"

    def __init__(self) -> None:
        self.attempts = 0

    def deliver(self, cue: Cue) -> None:
        self.attempts += 1
        raise RuntimeError("audio session unavailable")


@pytest.fixture
def walk_settings() -> Settings:
    """Settings with default cue timing, isolated from the environment."""
    return Settings(
        log_level="INFO",
        catch_up_policy="fast_forward",
        pre_warning_seconds=10,
        countdown_seconds=3,
        step_milestone_interval=1000,
        haptics_enabled=True,
        voice_enabled=True,
    )


@pytest.fixture
def recording_channel() -> RecordingCueChannel:
    return RecordingCueChannel()


@pytest.fixture
def failing_channel() -> FailingCueChannel:
    return FailingCueChannel()


@pytest.fixture
def dispatcher(recording_channel: RecordingCueChannel) -> CueDispatcher:
    return CueDispatcher([recording_channel])


@pytest.fixture
def tracker() -> StaticTracker:
    return StaticTracker()


@pytest.fixture
def full_config() -> IntervalConfiguration:
    """warmup 120, brisk 180, recovery 180, cooldown 120 (600 s total)."""
    return build_interval_configuration(
        cycle_count=1,
        brisk_seconds=180,
        recovery_seconds=180,
        warmup_seconds=120,
        cooldown_seconds=120,
        name="single",
    )


@pytest.fixture
def brisk_recovery_config() -> IntervalConfiguration:
    """brisk 180, recovery 180, no warm-up or cool-down."""
    return build_interval_configuration(cycle_count=1, brisk_seconds=180, recovery_seconds=180)
