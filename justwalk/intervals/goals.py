"""Walk goals.

A walk goal is a user-selected target read alongside the phase clock to
compute progress and decide when a goal celebration fires. It is not owned
by the clock.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

METERS_PER_MILE = 1609.344


class GoalType(StrEnum):
    NONE = "none"
    TIME = "time"
    DISTANCE = "distance"
    STEPS = "steps"


class WalkGoal(BaseModel):
    """Tagged walk goal.

    Attributes:
        type: Goal kind
        target: Minutes for TIME, miles for DISTANCE, steps for STEPS, ignored for NONE
    """

    model_config = ConfigDict(frozen=True)

    type: GoalType = GoalType.NONE
    target: float = Field(default=0, ge=0)

    @classmethod
    def none(cls) -> "WalkGoal":
        return cls()

    @classmethod
    def time(cls, minutes: float) -> "WalkGoal":
        return cls(type=GoalType.TIME, target=minutes)

    @classmethod
    def distance(cls, miles: float) -> "WalkGoal":
        return cls(type=GoalType.DISTANCE, target=miles)

    @classmethod
    def steps(cls, steps: int) -> "WalkGoal":
        return cls(type=GoalType.STEPS, target=steps)

    @property
    def target_seconds(self) -> float:
        return self.target * 60

    @property
    def target_meters(self) -> float:
        return self.target * METERS_PER_MILE


class DailyGoalContext(BaseModel):
    """Daily step goal as it stood when the walk started."""

    model_config = ConfigDict(frozen=True)

    steps_at_start: int = Field(default=0, ge=0)
    daily_step_goal: int = Field(default=10_000, gt=0)

    @property
    def already_reached(self) -> bool:
        return self.steps_at_start >= self.daily_step_goal

    def progress(self, session_steps: int) -> float:
        return _clamp((self.steps_at_start + session_steps) / self.daily_step_goal)

    def is_reached(self, session_steps: int) -> bool:
        return self.steps_at_start + session_steps >= self.daily_step_goal


def _clamp(ratio: float) -> float:
    return max(0.0, min(1.0, ratio))


def walk_goal_progress(
    goal: WalkGoal,
    elapsed_seconds: float,
    steps: int,
    distance_meters: float,
    daily: DailyGoalContext | None = None,
) -> float:
    """Progress ratio in [0, 1] for the progress ring.

    A NONE goal falls back to daily step goal progress.
    """
    if goal.type == GoalType.NONE:
        return daily.progress(steps) if daily is not None else 0.0

    if goal.type == GoalType.TIME:
        target = goal.target_seconds
        return _clamp(elapsed_seconds / target) if target > 0 else 0.0

    if goal.type == GoalType.DISTANCE:
        target = goal.target_meters
        return _clamp(distance_meters / target) if target > 0 else 0.0

    return _clamp(steps / goal.target) if goal.target > 0 else 0.0


def is_walk_goal_reached(goal: WalkGoal, elapsed_seconds: float, steps: int, distance_meters: float) -> bool:
    """Whether a walk-specific goal is met. NONE goals are never reached here."""
    if goal.type == GoalType.NONE or goal.target <= 0:
        return False
    return walk_goal_progress(goal, elapsed_seconds, steps, distance_meters) >= 1.0
