# display.py
# All terminal output for the browser agent.
#
# This module owns presentation entirely. agent.py and actions.py never
# format strings; they call named functions here. Swap this file to change
# the entire UI.
#
# Colour language:
#   cyan    — loop scaffolding / step boundaries
#   blue    — model calls and responses
#   magenta — action dispatch and browser effects
#   green   — success / completion
#   yellow  — recoverable failures and backoff
#   red     — fatal conditions

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from browser_pilot.models import HistoryRecord, Plan

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: Any, max_len: int = 120) -> str:
    value = str(value)
    if len(value) > max_len:
        return escape(value[:max_len]) + "…"
    return escape(value)


# ---------------------------------------------------------------------------
# Run boundaries
# ---------------------------------------------------------------------------


def banner(task: str, model: str, max_steps: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Browser Pilot[/bold cyan]\n"
            "[dim]Plan → act → record, one model call per step[/dim]\n\n"
            f"[dim]Model     :[/dim] [white]{escape(model)}[/white]\n"
            f"[dim]Max steps :[/dim] [white]{max_steps}[/white]\n"
            f"[dim]Task      :[/dim] [white]{_mono(task, 200)}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def step_start(index: int, max_steps: int) -> None:
    console.print()
    console.print(Rule(f"[cyan]STEP {index + 1}/{max_steps}[/cyan]", style="cyan"))


def calling_model(history_length: int) -> None:
    console.print(
        _label("MODEL", "blue"),
        f"[blue] → Requesting plan ({history_length} history record(s))…[/blue]",
    )


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


def plan_parsed(plan: Plan) -> None:
    state = plan.state
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="blue",
        show_header=True,
        header_style="bold blue",
        padding=(0, 1),
    )
    table.add_column("#", justify="center", width=4)
    table.add_column("Action", style="bold white", width=16)
    table.add_column("Args", style="dim white")

    for i, action in enumerate(plan.actions, start=1):
        table.add_row(str(i), escape(action.name), _mono(json.dumps(action.args, default=str), 80))

    console.print(
        Panel(
            table,
            title=_label("PLAN", "blue"),
            subtitle=(
                f"[dim]Previous goal: {state.previous_goal_evaluation} · "
                f"Next: {_mono(state.next_goal, 80)}[/dim]"
            ),
            border_style="blue",
            padding=(0, 1),
        )
    )


def plan_parse_failed(response: str, reason: str) -> None:
    console.print(
        Panel(
            f"[bold yellow]Failed to parse model response as a plan.[/bold yellow]\n"
            f"[dim]{_mono(reason, 300)}[/dim]\n\n[white]{_mono(response, 500)}[/white]",
            title=_label("PLAN PARSE ERROR", "yellow"),
            border_style="yellow",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Action dispatch
# ---------------------------------------------------------------------------


def action_executing(name: str, args: dict) -> None:
    console.print(
        f"  [magenta]Action[/magenta]   [bold white]{escape(name)}[/bold white]"
        f"  [dim]{_mono(json.dumps(args, default=str), 100)}[/dim]"
    )


def action_succeeded(name: str, result: Any) -> None:
    if result is None:
        console.print("  [green]✓ Done[/green]")
    else:
        console.print(f"  [green]✓ Returned[/green]  [white]{_mono(result, 140)}[/white]")


def action_failed(name: str, error: str) -> None:
    console.print(f"  [bold yellow]✗ {escape(name)} failed[/bold yellow]  [white]{_mono(error, 200)}[/white]")


def action_not_found(name: str) -> None:
    console.print(f"  [bold yellow]✗ Action [white]{escape(repr(name))}[/white] is not registered.[/bold yellow]")


def actions_interrupted(remaining: int) -> None:
    console.print(
        f"  [dim]No longer running — skipping {remaining} remaining action(s).[/dim]"
    )


def browser_action(message: str) -> None:
    console.print(f"  [dim magenta]↳ {_mono(message, 200)}[/dim magenta]")


def history_recorded(record: HistoryRecord, total: int) -> None:
    ok = sum(1 for a in record.actions if a.success)
    console.print(
        f"  [cyan]Recorded step[/cyan] [dim]{ok}/{len(record.actions)} action(s) succeeded · "
        f"{total} record(s) in history[/dim]"
    )


def history_purged(evicted: int, remaining: int) -> None:
    console.print(
        f"  [dim yellow]History compaction evicted {evicted} record(s); {remaining} remain.[/dim yellow]"
    )


# ---------------------------------------------------------------------------
# Request failures
# ---------------------------------------------------------------------------


def rate_limited(error: str, delay: float) -> None:
    console.print(
        Panel(
            f"[bold yellow]Rate limit exceeded.[/bold yellow] Waiting {delay:g}s.\n[dim]{_mono(error, 300)}[/dim]",
            title=_label("RATE LIMIT", "yellow"),
            border_style="yellow",
            padding=(0, 2),
        )
    )


def token_limit_exceeded(error: str) -> None:
    console.print(
        Panel(
            "[bold red]Token limit exceeded. Stopping execution.[/bold red]\n"
            f"[dim]{_mono(error, 300)}[/dim]",
            title=_label("TOKEN LIMIT ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def request_failed(error: str, delay: float) -> None:
    console.print(
        _label("REQUEST ERROR", "yellow"),
        f"[yellow] {_mono(error, 200)} — retrying in {delay:g}s[/yellow]",
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def cleanup_failed(what: str, error: str) -> None:
    console.print(f"[dim red]Could not {what}: {_mono(error, 200)}[/dim red]")


def stopped(steps: int) -> None:
    console.print()
    console.print(Rule(f"[red]STOPPED after {steps} step(s)[/red]", style="red"))


def completed(history_length: int) -> None:
    console.print(
        Panel(
            f"[white]Loop finished with {history_length} history record(s).[/white]",
            title=_label("COMPLETED", "green"),
            border_style="green",
            padding=(0, 2),
        )
    )
    console.print()
