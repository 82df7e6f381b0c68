"""CLI for the Just Walk session core.

Developer CLI to inspect interval presets, print phase schedules, play back
a simulated walk through the same controller and timer loop used by the app,
and request a food estimate from the estimation service.
"""

import asyncio
import json
from dataclasses import dataclass

import typer
from loguru import logger
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from justwalk.config.settings import settings
from justwalk.core.logger import setup_logger
from justwalk.food.estimation import (
    EstimateNeedsManualEntry,
    EstimateRetryableError,
    EstimateSuccess,
    FoodEstimationClient,
)
from justwalk.intervals.cues import Cue, CueDispatcher, LoggingCueChannel, create_cue_dispatcher
from justwalk.intervals.errors import IntervalConfigurationError
from justwalk.intervals.formatting import format_total_time
from justwalk.intervals.goals import DailyGoalContext, GoalType, WalkGoal
from justwalk.intervals.models import (
    PRESETS,
    IntervalConfiguration,
    PhaseKind,
    WalkMode,
    build_open_walk_configuration,
    build_post_meal_configuration,
    get_preset,
)
from justwalk.intervals.runner import SessionRunner
from justwalk.intervals.sequencer import build_phase_schedule
from justwalk.intervals.session import IntervalWalkSession, SessionEventType, SessionSummary, TickResult
from justwalk.intervals.styles import style_for
from justwalk.intervals.tracking import SimulatedTracker

# Initialize Rich console for output
console = Console()

# Initialize Typer app
app = typer.Typer(
    name="justwalk",
    help="Just Walk CLI - interval walk presets, schedules and simulated sessions",
    add_completion=False,
)

DEFAULT_SIMULATION_INTERVAL = 0.01


@dataclass
class SimulationConfig:
    """Configuration for the simulate command."""

    interval: float
    pause_at: int | None
    pause_for: int
    stop_after: int | None


class ConsoleVoiceChannel:
    """Voice channel that prints announcements instead of speaking them."""

    name = "console-voice"

    def deliver(self, cue: Cue) -> None:
        color = style_for(cue.phase_kind).color_hex if cue.phase_kind else "white"
        console.print(Text(f"  🔊 {cue.text}", style=color))


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    setup_logger(
        level="DEBUG" if debug else settings.log_level,
        log_file=settings.log_file,
        serialize=settings.log_json,
    )


def _resolve_configuration(preset: str, cycles: int | None, mode: WalkMode) -> IntervalConfiguration:
    if mode == WalkMode.CLASSIC:
        return build_open_walk_configuration(PhaseKind.CLASSIC, WalkMode.CLASSIC)
    if mode == WalkMode.POST_MEAL:
        return build_post_meal_configuration()

    if preset not in PRESETS:
        console.print(f"[red]Unknown preset '{preset}'.[/red] Available: {', '.join(PRESETS)}")
        raise typer.Exit(code=1)
    try:
        return get_preset(preset, cycles)
    except IntervalConfigurationError as e:
        console.print(Panel(Text(e.code, style="bold red"), subtitle="; ".join(e.details), border_style="red"))
        raise typer.Exit(code=1) from e


def _build_goal(goal_type: GoalType, goal_target: float) -> WalkGoal:
    if goal_type == GoalType.NONE:
        return WalkGoal.none()
    return WalkGoal(type=goal_type, target=goal_target)


def _print_result(result: TickResult) -> None:
    for event in result.events:
        stamp = format_total_time(event.elapsed_seconds)
        if event.type == SessionEventType.PHASE_CHANGED and event.phase_kind is not None:
            style = style_for(event.phase_kind)
            cycle = f" (cycle {event.value})" if event.value else ""
            console.print(Text(f"[{stamp}] ▶ {style.label}{cycle}", style=f"bold {style.color_hex}"))
        elif event.type == SessionEventType.MILESTONE:
            console.print(f"[dim][{stamp}] ★ {event.cue}[/dim]")
        elif event.type == SessionEventType.COMPLETED:
            console.print(f"[bold green][{stamp}] ✔ session complete[/bold green]")


def _print_summary(summary: SessionSummary) -> None:
    table = Table(title="Walk summary", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Mode", str(summary.mode))
    table.add_row("Preset", summary.configuration_name or "-")
    table.add_row("Elapsed", format_total_time(summary.total_elapsed_seconds))
    if summary.planned_duration_seconds:
        table.add_row("Planned", format_total_time(summary.planned_duration_seconds))
    table.add_row("Brisk intervals", f"{summary.completed_brisk_intervals}/{summary.cycle_count}")
    table.add_row("Recovery intervals", f"{summary.completed_recovery_intervals}/{summary.cycle_count}")
    table.add_row("Steps", f"{summary.steps:,}")
    table.add_row("Distance", f"{summary.distance_meters:.0f} m")
    table.add_row("Walk goal", f"{summary.walk_goal.type} ({'reached' if summary.walk_goal_reached else 'not reached'})")
    table.add_row("Daily goal", "reached" if summary.daily_goal_reached else "not reached")
    table.add_row("Completed", "yes" if summary.completed_successfully else "no")
    console.print(table)


async def _simulate_async(session: IntervalWalkSession, sim: SimulationConfig) -> SessionSummary:
    """Run a session on the real timer loop until it completes or hits stop_after."""
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()
    paused_once = False

    def on_tick(result: TickResult) -> None:
        nonlocal paused_once
        _print_result(result)

        if sim.pause_at is not None and not paused_once and result.elapsed_seconds >= sim.pause_at:
            paused_once = True
            if session.pause():
                console.print(f"[yellow]⏸ paused at {format_total_time(result.elapsed_seconds)} for {sim.pause_for}s[/yellow]")
                loop.call_later(sim.pause_for * sim.interval, session.resume)

        if sim.stop_after is not None and result.elapsed_seconds >= sim.stop_after:
            stop_requested.set()

    runner = SessionRunner(session, tick_interval=sim.interval, on_tick=on_tick)
    timer_task = runner.start()
    stop_waiter = asyncio.create_task(stop_requested.wait())
    await asyncio.wait({timer_task, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
    stop_waiter.cancel()
    return await runner.stop()


@app.command()
def presets() -> None:
    """List interval presets and their durations."""
    table = Table(title="Interval presets")
    table.add_column("Preset", style="cyan")
    table.add_column("Cycles", justify="right")
    table.add_column("Phases", justify="right")
    table.add_column("Total", justify="right")

    for name, config in PRESETS.items():
        table.add_row(
            name,
            str(config.cycle_count),
            str(config.phase_count),
            format_total_time(config.total_duration_seconds or 0),
        )
    console.print(table)


@app.command()
def schedule(
    preset: str = typer.Option("standard", "--preset", "-p", help="Preset name"),
    cycles: int | None = typer.Option(None, "--cycles", "-c", help="Override cycle count (3, 5 or 7)"),
) -> None:
    """Print the phase schedule of a preset."""
    config = _resolve_configuration(preset, cycles, WalkMode.INTERVAL)

    table = Table(title=f"{config.name} - {config.cycle_count} cycles")
    table.add_column("#", justify="right")
    table.add_column("Phase")
    table.add_column("Cycle", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")

    for scheduled in build_phase_schedule(config):
        style = style_for(scheduled.phase.kind)
        table.add_row(
            str(scheduled.index),
            Text(style.label, style=style.color_hex),
            str(scheduled.phase.cycle or "-"),
            format_total_time(scheduled.start_second),
            format_total_time(scheduled.end_second or 0),
        )
    console.print(table)
    console.print(f"Total: [bold]{format_total_time(config.total_duration_seconds or 0)}[/bold]")


@app.command()
def simulate(
    preset: str = typer.Option("standard", "--preset", "-p", help="Preset name"),
    cycles: int | None = typer.Option(None, "--cycles", "-c", help="Override cycle count"),
    mode: WalkMode = typer.Option(WalkMode.INTERVAL, "--mode", "-m", help="Walk mode"),
    goal_type: GoalType = typer.Option(GoalType.NONE, "--goal-type", help="Walk goal type"),
    goal_target: float = typer.Option(0, "--goal-target", help="Minutes, miles or steps depending on goal type"),
    steps_today: int = typer.Option(0, "--steps-today", help="Steps already walked today"),
    daily_goal: int = typer.Option(10_000, "--daily-goal", help="Daily step goal"),
    pause_at: int | None = typer.Option(None, "--pause-at", help="Pause after this many session seconds"),
    pause_for: int = typer.Option(10, "--pause-for", help="Seconds to stay paused"),
    stop_after: int | None = typer.Option(None, "--stop-after", help="Stop after this many session seconds"),
    interval: float = typer.Option(DEFAULT_SIMULATION_INTERVAL, "--interval", help="Real seconds per simulated second"),
    off_route: list[str] = typer.Option([], "--off-route", help="Off-route window START:END in seconds (repeatable)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print spoken cues"),
) -> None:
    """Simulate a walk session with a synthetic walker."""
    config = _resolve_configuration(preset, cycles, mode)
    if config.is_open_ended and stop_after is None:
        stop_after = 20 * 60
        console.print("[dim]Open-ended walk: stopping after 20 minutes (use --stop-after)[/dim]")

    windows: list[tuple[int, int]] = []
    for window in off_route:
        try:
            start, end = (int(part) for part in window.split(":"))
        except ValueError as e:
            console.print(f"[red]Invalid --off-route window '{window}', expected START:END[/red]")
            raise typer.Exit(code=1) from e
        windows.append((start, end))

    dispatcher: CueDispatcher = create_cue_dispatcher(
        settings,
        haptic_channel=LoggingCueChannel(),
        voice_channel=None if quiet else ConsoleVoiceChannel(),
    )
    session = IntervalWalkSession(
        config,
        dispatcher=dispatcher,
        tracker=SimulatedTracker(off_route_windows=windows),
        goal=_build_goal(goal_type, goal_target),
        daily_goal=DailyGoalContext(steps_at_start=steps_today, daily_step_goal=daily_goal),
        settings=settings,
    )

    console.print(
        Panel(
            Text(f"{config.name or config.mode} · {config.phase_count} phase(s) · {config.cycle_count} cycle(s)", style="bold"),
            title="Just Walk simulation",
            border_style="cyan",
        )
    )
    sim = SimulationConfig(interval=interval, pause_at=pause_at, pause_for=pause_for, stop_after=stop_after)
    summary = asyncio.run(_simulate_async(session, sim))
    logger.info(f"Simulation finished: completed={summary.completed_successfully}")
    _print_summary(summary)


async def _estimate_async(description: str) -> int:
    client = FoodEstimationClient(settings)
    try:
        result = await client.estimate(description)
    finally:
        await client.aclose()

    if isinstance(result, EstimateSuccess):
        console.print(JSON(json.dumps(result.estimate.model_dump(), ensure_ascii=False)))
        totals = result.estimate.totals
        console.print(f"[bold]Total:[/bold] {totals.calories} kcal · P {totals.protein_g}g · C {totals.carbs_g}g · F {totals.fat_g}g")
        return 0
    if isinstance(result, EstimateRetryableError):
        console.print(Panel(Text(result.message, style="yellow"), title=f"Retry later ({result.code})", border_style="yellow"))
        return 2
    if isinstance(result, EstimateNeedsManualEntry):
        console.print(Panel(Text(result.message, style="red"), title=f"Manual entry needed ({result.code})", border_style="red"))
    return 1


@app.command()
def estimate_food(
    description: str = typer.Argument(..., help="Meal description, e.g. '2 eggs and toast'"),
) -> None:
    """Ask the AI estimation service for calories and macros."""
    code = asyncio.run(_estimate_async(description))
    if code:
        raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
