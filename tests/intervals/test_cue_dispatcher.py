from justwalk.intervals.cues import (
    CUE_HISTORY_LIMIT,
    MILESTONE_CUES,
    CueDispatcher,
    CueKind,
    HapticPattern,
    LoggingCueChannel,
    create_cue_dispatcher,
    phase_entry_cue,
    pre_warning_cue,
    step_milestone_cue,
)
from justwalk.intervals.models import Phase, PhaseKind


def test_dispatch_delivers_to_every_channel(recording_channel):
    other = type(recording_channel)()
    dispatcher = CueDispatcher([recording_channel, other])

    dispatcher.dispatch(MILESTONE_CUES[CueKind.HALFWAY])

    assert recording_channel.kinds() == [CueKind.HALFWAY]
    assert other.kinds() == [CueKind.HALFWAY]
    assert list(dispatcher.history) == [MILESTONE_CUES[CueKind.HALFWAY]]


def test_failing_channel_does_not_block_others(failing_channel, recording_channel):
    dispatcher = CueDispatcher([failing_channel, recording_channel])

    dispatcher.dispatch(MILESTONE_CUES[CueKind.SESSION_START])
    dispatcher.dispatch(MILESTONE_CUES[CueKind.HALFWAY])

    assert failing_channel.attempts == 2
    assert recording_channel.kinds() == [CueKind.SESSION_START, CueKind.HALFWAY]


def test_fire_once_is_at_most_once_per_session(dispatcher, recording_channel):
    cue = MILESTONE_CUES[CueKind.WALK_GOAL_REACHED]

    assert dispatcher.fire_once(CueKind.WALK_GOAL_REACHED, cue)
    assert not dispatcher.fire_once(CueKind.WALK_GOAL_REACHED, cue)
    assert not dispatcher.fire_once(CueKind.WALK_GOAL_REACHED, cue)

    assert recording_channel.count(CueKind.WALK_GOAL_REACHED) == 1
    assert dispatcher.has_fired(CueKind.WALK_GOAL_REACHED)


def test_latch_suppresses_cue_without_delivery(dispatcher, recording_channel):
    dispatcher.latch(CueKind.DAILY_GOAL_REACHED)

    assert not dispatcher.fire_once(CueKind.DAILY_GOAL_REACHED, MILESTONE_CUES[CueKind.DAILY_GOAL_REACHED])
    assert recording_channel.cues == []


def test_reset_clears_latches(dispatcher, recording_channel):
    cue = MILESTONE_CUES[CueKind.HALFWAY]
    dispatcher.fire_once(CueKind.HALFWAY, cue)

    dispatcher.reset()

    assert len(dispatcher.history) == 0
    assert not dispatcher.has_fired(CueKind.HALFWAY)
    assert dispatcher.fire_once(CueKind.HALFWAY, cue)
    assert recording_channel.count(CueKind.HALFWAY) == 2


def test_route_cues_only_on_change(dispatcher, recording_channel):
    assert dispatcher.update_route_status(None) is None
    assert dispatcher.update_route_status(True) is None
    assert dispatcher.update_route_status(True) is None

    off = dispatcher.update_route_status(False)
    assert off is not None and off.kind == CueKind.OFF_ROUTE
    assert dispatcher.update_route_status(False) is None

    back = dispatcher.update_route_status(True)
    assert back is not None and back.kind == CueKind.BACK_ON_ROUTE

    assert recording_channel.kinds() == [CueKind.OFF_ROUTE, CueKind.BACK_ON_ROUTE]


def test_off_route_on_first_reading(dispatcher, recording_channel):
    cue = dispatcher.update_route_status(False)

    assert cue is not None and cue.kind == CueKind.OFF_ROUTE


def test_phase_entry_cue_uses_phase_haptics():
    brisk = phase_entry_cue(Phase(PhaseKind.BRISK, 180, 2))
    recovery = phase_entry_cue(Phase(PhaseKind.RECOVERY, 180, 2))

    assert brisk.haptic == HapticPattern.BRISK_START
    assert brisk.text == "Pick up the pace."
    assert brisk.value == 2
    assert recovery.haptic == HapticPattern.EASY_START
    assert recovery.phase_kind == PhaseKind.RECOVERY


def test_pre_warning_and_step_milestone_text():
    warning = pre_warning_cue(Phase(PhaseKind.RECOVERY, 180, 1), 10)

    assert warning.text == "10 seconds to easy"
    assert warning.phase_kind == PhaseKind.RECOVERY
    assert step_milestone_cue(2000).text == "2,000 steps"


def test_create_cue_dispatcher_skips_disabled_channels(walk_settings, recording_channel):
    settings = walk_settings.model_copy(update={"voice_enabled": False})
    voice = type(recording_channel)()

    dispatcher = create_cue_dispatcher(
        settings,
        haptic_channel=recording_channel,
        voice_channel=voice,
        extra_channels=[LoggingCueChannel()],
    )

    assert recording_channel in dispatcher.channels
    assert voice not in dispatcher.channels
    assert len(dispatcher.channels) == 2


def test_history_keeps_only_recent_cues(dispatcher, recording_channel):
    for milestone in range(1, CUE_HISTORY_LIMIT + 51):
        dispatcher.dispatch(step_milestone_cue(milestone * 1000))

    assert len(dispatcher.history) == CUE_HISTORY_LIMIT
    assert dispatcher.history[-1].value == (CUE_HISTORY_LIMIT + 50) * 1000
    assert dispatcher.history[0].value == 51 * 1000
    assert len(recording_channel.cues) == CUE_HISTORY_LIMIT + 50
