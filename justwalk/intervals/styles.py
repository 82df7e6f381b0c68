"""Display and announcement attributes per phase kind.

Pure lookup table consumed by the display layer and the voice channel.
"""

from __future__ import annotations

from dataclasses import dataclass

from justwalk.intervals.models import PhaseKind


@dataclass(frozen=True)
class PhaseStyle:
    label: str
    short_label: str
    icon: str
    color_hex: str
    instructions: tuple[str, ...]
    announcement: str

    @property
    def instruction(self) -> str:
        return self.instructions[0] if self.instructions else ""


PHASE_STYLES: dict[PhaseKind, PhaseStyle] = {
    PhaseKind.WARMUP: PhaseStyle(
        label="Warm Up",
        short_label="Warmup",
        icon="flame",
        color_hex="#FF9500",
        instructions=("Start with an easy pace to warm up",),
        announcement="Warm up. Walk at an easy pace.",
    ),
    PhaseKind.BRISK: PhaseStyle(
        label="Brisk",
        short_label="Brisk",
        icon="hare.fill",
        color_hex="#FF9500",
        instructions=("Pick up the pace", "Walk with purpose", "Push yourself"),
        announcement="Pick up the pace.",
    ),
    PhaseKind.RECOVERY: PhaseStyle(
        label="Easy",
        short_label="Easy",
        icon="tortoise.fill",
        color_hex="#00C7BE",
        instructions=("Walk at a comfortable pace", "Catch your breath", "Nice and easy"),
        announcement="Slow down. Easy pace.",
    ),
    PhaseKind.COOLDOWN: PhaseStyle(
        label="Cool Down",
        short_label="Cooldown",
        icon="snowflake",
        color_hex="#007AFF",
        instructions=("Gradually slow down to cool off",),
        announcement="Cool down. Almost done.",
    ),
    PhaseKind.CLASSIC: PhaseStyle(
        label="Just Walk",
        short_label="Walk",
        icon="figure.walk",
        color_hex="#32D4DE",
        instructions=("Go at your own pace",),
        announcement="Let's walk. Go at your own pace.",
    ),
    PhaseKind.SLOW: PhaseStyle(
        label="Easy Walk",
        short_label="Easy",
        icon="fork.knife",
        color_hex="#00C7BE",
        instructions=("A gentle walk to help digestion",),
        announcement="Easy walk. Nice and gentle.",
    ),
}


def style_for(kind: PhaseKind) -> PhaseStyle:
    return PHASE_STYLES[kind]
