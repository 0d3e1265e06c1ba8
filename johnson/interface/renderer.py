"""
Display and rendering helpers for the Johnson CLI.

Handles theming, pool tables, roll narration and the resolution summary.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED

from ..state.schema import Contract, LifecycleState, PlayerState, Runner, StatName
from ..state.schemas import ResolutionEvent, ResolutionSummary
from ..systems.pools import PoolBreakdown


# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme
# -----------------------------------------------------------------------------

THEME = {
    "primary": "steel_blue",
    "secondary": "grey70",
    "warning": "dark_goldenrod",
    "danger": "dark_red",
    "accent": "cyan",
    "dim": "dim",
    "text": "grey85",
}

STAT_COLORS = {
    StatName.DAMAGE: "red3",
    StatName.RISK: "dark_orange",
    StatName.MONEY: "green3",
    StatName.GRIT: "wheat1",
    StatName.VEIL: "medium_purple",
}

LIFECYCLE_COLORS = {
    LifecycleState.READY: "green3",
    LifecycleState.INJURED: THEME["warning"],
    LifecycleState.DEAD: THEME["danger"],
}

OUTCOME_COLORS = {
    "Injury": THEME["warning"],
    "Death": THEME["danger"],
    "Reduce": "dark_orange",
    "Extra": "green3",
    "No Effect": THEME["dim"],
}


def _number(value: float) -> str:
    return f"{value:g}" if value != int(value) else str(int(value))


def render_pools(breakdown: PoolBreakdown, contract: Contract | None = None) -> Panel:
    """Pool, prevention and leftover Damage/Risk as a panel."""
    table = Table(box=ROUNDED, show_header=True, header_style=THEME["primary"])
    table.add_column("Stat")
    table.add_column("Pool", justify="right")

    for stat in StatName:
        table.add_row(
            Text(stat.value, style=STAT_COLORS[stat]),
            _number(breakdown.pool.get(stat)),
        )

    prevention = breakdown.prevention
    table.add_section()
    table.add_row("Damage prevented", str(prevention.damage_prevented))
    table.add_row("Risk prevented", str(prevention.risk_prevented))
    table.add_row(Text("Unprevented Damage", style=STAT_COLORS[StatName.DAMAGE]), str(breakdown.unprevented_damage))
    table.add_row(Text("Unprevented Risk", style=STAT_COLORS[StatName.RISK]), str(breakdown.unprevented_risk))

    title = f"Pools: {contract.name}" if contract else "Pools"
    return Panel(table, title=title, border_style=THEME["primary"])


def render_warnings(warnings: list[str]) -> Text:
    text = Text()
    for message in warnings:
        text.append("! ", style=THEME["warning"])
        text.append(message + "\n", style=THEME["secondary"])
    return text


def render_runners(runners: list[Runner]) -> Table:
    table = Table(box=ROUNDED, header_style=THEME["primary"])
    table.add_column("Runner")
    table.add_column("Type")
    table.add_column("Lvl", justify="right")
    table.add_column("face/muscle/hacker/ninja")
    table.add_column("State")

    for runner in runners:
        stats = runner.stats
        table.add_row(
            runner.name,
            runner.type.value,
            str(runner.level),
            f"{stats.face}/{stats.muscle}/{stats.hacker}/{stats.ninja}",
            Text(runner.lifecycle_state.value, style=LIFECYCLE_COLORS[runner.lifecycle_state]),
        )
    return table


def render_event(event: ResolutionEvent) -> Text:
    """One roll line: index, rolled number, what happened."""
    text = Text()
    text.append(f"Roll {event.index:>3}  ", style=THEME["dim"])
    text.append(f"[{event.rolled_number:>3}] ", style=THEME["accent"])
    text.append(event.outcome_description, style=OUTCOME_COLORS.get(event.effect, THEME["text"]))
    return text


def render_summary(summary: ResolutionSummary, player: PlayerState | None = None) -> Panel:
    """Final reward, risk and per-runner before/after."""
    lines = Table.grid(padding=(0, 2))
    lines.add_column()
    lines.add_column(justify="right")
    lines.add_row("Rolls", str(summary.unprevented_damage))
    lines.add_row("Starting reward", f"${summary.starting_reward}")
    lines.add_row("Final reward", Text(f"${summary.final_reward}", style="green3"))
    lines.add_row("Risk applied", Text(str(summary.risk_applied), style=STAT_COLORS[StatName.RISK]))
    if player is not None:
        lines.add_row("Player money", f"${player.money}")
        lines.add_row("Player risk", str(player.risk))
        lines.add_row("Player level", str(player.level))

    runners = Table(box=ROUNDED, header_style=THEME["primary"])
    runners.add_column("Runner")
    runners.add_column("Before")
    runners.add_column("After")
    runners.add_column("Level", justify="right")
    for outcome in summary.runners:
        runners.add_row(
            outcome.name,
            Text(outcome.lifecycle_before.value, style=LIFECYCLE_COLORS[outcome.lifecycle_before]),
            Text(outcome.lifecycle_after.value, style=LIFECYCLE_COLORS[outcome.lifecycle_after]),
            f"{outcome.level_before} -> {outcome.level_after}",
        )

    body = Table.grid()
    body.add_row(lines)
    if summary.runners:
        body.add_row(runners)
    return Panel(body, title="Contract resolved", border_style=THEME["accent"])
