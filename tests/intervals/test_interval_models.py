import pytest

from justwalk.intervals.errors import IntervalConfigurationError
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
from justwalk.intervals.styles import PHASE_STYLES, style_for


def test_build_interval_configuration_orders_phases():
    config = build_interval_configuration(
        cycle_count=2,
        brisk_seconds=180,
        recovery_seconds=120,
        warmup_seconds=60,
        cooldown_seconds=90,
    )

    assert [phase.kind for phase in config.phases] == [
        PhaseKind.WARMUP,
        PhaseKind.BRISK,
        PhaseKind.RECOVERY,
        PhaseKind.BRISK,
        PhaseKind.RECOVERY,
        PhaseKind.COOLDOWN,
    ]
    assert [phase.cycle for phase in config.phases] == [0, 1, 1, 2, 2, 0]
    assert config.total_duration_seconds == 60 + 2 * (180 + 120) + 90
    assert config.has_warmup
    assert config.has_cooldown
    assert not config.is_open_ended


def test_zero_length_warmup_and_cooldown_are_omitted():
    config = build_interval_configuration(cycle_count=3, brisk_seconds=60, recovery_seconds=60)

    assert config.phase_count == 6
    assert not config.has_warmup
    assert not config.has_cooldown


def test_zero_cycle_configuration_is_legal():
    config = build_interval_configuration(
        cycle_count=0,
        brisk_seconds=180,
        recovery_seconds=180,
        warmup_seconds=120,
        cooldown_seconds=120,
    )

    assert [phase.kind for phase in config.phases] == [PhaseKind.WARMUP, PhaseKind.COOLDOWN]
    assert config.total_duration_seconds == 240


def test_empty_phase_list_rejected():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(phases=(), cycle_count=0)

    assert exc_info.value.code == "EMPTY_PHASES"


@pytest.mark.parametrize("duration", [0, -5, None])
def test_non_positive_duration_rejected(duration):
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(
            phases=(Phase(PhaseKind.BRISK, duration, 1), Phase(PhaseKind.RECOVERY, 180, 1)),
            cycle_count=1,
        )

    assert exc_info.value.code == "INVALID_DURATION"
    assert len(exc_info.value.details) == 1


def test_malformed_sequence_rejected():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(
            phases=(Phase(PhaseKind.RECOVERY, 180, 1), Phase(PhaseKind.BRISK, 180, 1)),
            cycle_count=1,
        )

    assert exc_info.value.code == "MALFORMED_SEQUENCE"


def test_cycle_count_mismatch_rejected():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(
            phases=(Phase(PhaseKind.BRISK, 180, 1), Phase(PhaseKind.RECOVERY, 180, 1)),
            cycle_count=3,
        )

    assert exc_info.value.code == "CYCLE_COUNT_MISMATCH"


def test_open_ended_phase_cannot_mix_with_timed_phases():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(
            phases=(Phase(PhaseKind.WARMUP, 120), Phase(PhaseKind.CLASSIC, None)),
            cycle_count=0,
        )

    assert exc_info.value.code == "OPEN_ENDED_MIXED"


def test_negative_cycle_count_rejected():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        build_interval_configuration(cycle_count=-1, brisk_seconds=180, recovery_seconds=180)

    assert exc_info.value.code == "INVALID_CYCLE_COUNT"


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        IntervalConfiguration(phases=(), cycle_count=0)


def test_open_walk_configuration():
    config = build_open_walk_configuration(PhaseKind.SLOW, WalkMode.POST_MEAL)

    assert config.is_open_ended
    assert config.total_duration_seconds is None
    assert config.mode == WalkMode.POST_MEAL
    assert config.phases[0].duration_seconds is None


def test_post_meal_configuration_is_timed_slow_walk():
    config = build_post_meal_configuration()

    assert not config.is_open_ended
    assert config.is_free_walk
    assert config.total_duration_seconds == 600
    assert config.mode == WalkMode.POST_MEAL
    assert config.phases[0].kind == PhaseKind.SLOW
    assert config.cycle_count == 0


@pytest.mark.parametrize("duration", [0, -60])
def test_free_walk_duration_must_be_positive(duration):
    with pytest.raises(IntervalConfigurationError) as exc_info:
        IntervalConfiguration(phases=(Phase(PhaseKind.SLOW, duration),), cycle_count=0, mode=WalkMode.POST_MEAL)

    assert exc_info.value.code == "INVALID_DURATION"


def test_free_walk_has_no_cycles_to_change():
    with pytest.raises(IntervalConfigurationError) as exc_info:
        build_post_meal_configuration().with_cycle_count(3)

    assert exc_info.value.code == "OPEN_ENDED_MIXED"


def test_presets_durations():
    assert PRESETS["standard"].total_duration_seconds == 30 * 60
    assert PRESETS["standard_with_warmup"].total_duration_seconds == 34 * 60
    assert PRESETS["beginner"].total_duration_seconds == 15 * 60
    assert PRESETS["advanced"].total_duration_seconds == 36 * 60


def test_get_preset_with_cycle_count_keeps_durations_and_name():
    config = get_preset("standard_with_warmup", cycle_count=3)

    assert config.cycle_count == 3
    assert config.phase_count == 2 * 3 + 2
    assert config.name == "standard_with_warmup"
    assert config.phases[0].duration_seconds == 120
    assert config.phases[1].duration_seconds == 180


def test_get_preset_unknown_name():
    with pytest.raises(KeyError):
        get_preset("marathon")


def test_configuration_is_immutable():
    config = get_preset("standard")

    with pytest.raises(AttributeError):
        config.cycle_count = 7  # type: ignore[misc]


def test_every_phase_kind_has_a_style():
    assert set(PHASE_STYLES) == set(PhaseKind)
    assert style_for(PhaseKind.BRISK).label == "Brisk"
    assert style_for(PhaseKind.RECOVERY).instruction == "Walk at a comfortable pace"
