"""
Rich renderables for consensus results and task previews.
"""

from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .instruction import TaskForm, build_instruction
from .models import ConsensusResult, RunnerState, RunnerView
from .scores import reconcile, runner_label


_VALUE_STYLES = {
    RunnerState.SCORED: "bold",
    RunnerState.UNSCORED: "yellow",
    RunnerState.ABSENT: "dim",
}


def build_scores_table(views: list[RunnerView], result: ConsensusResult) -> Table:
    """Table with one row per runner: label, score, and any runner error."""
    errors = result.runner_errors or []
    show_errors = any(errors)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Runner", style="white")
    table.add_column("Score", justify="right")
    if show_errors:
        table.add_column("Error", style="red")

    for view in views:
        label = view.label
        if view.index == result.winner_index:
            label = f"{label} [green](winner)[/]"
        row = [label, Text(view.display_value, style=_VALUE_STYLES[view.state])]
        if show_errors:
            error = errors[view.index] if view.index < len(errors) else None
            row.append(Text(error or ""))
        table.add_row(*row)

    return table


def render_result(console: Console, result: ConsensusResult) -> None:
    """Print answer, judge winner, per-runner scores and the consensus id."""
    answer = Text(result.answer) if result.answer else Text("No answer.", style="dim")
    console.print(Panel(answer, title="Answer", border_style="blue"))

    console.print(f"[cyan]Winner (judge):[/] {runner_label(result.winner_index)}")

    views = reconcile(result)
    if views:
        console.print(build_scores_table(views, result))
    else:
        console.print("[dim]No runners reported.[/]")

    console.print(f"[dim]consensus_id: {escape(result.consensus_id)}[/]")


def render_preview(console: Console, form: TaskForm) -> None:
    """Print the instruction text and the payload JSON for `form`."""
    console.print(Panel(Text(build_instruction(form)), title="Instruction", border_style="blue"))
    console.print(Panel(JSON.from_data(form.payload()), title="Payload JSON"))
