"""
Rich console utilities for dual-mode CLI output.

Human mode (--format text) renders Rich tables, panels and spinners.
Agent mode (--format json) buffers structured data and writes a single JSON
document to stdout via output_mode.flush_json().

Examples:
    >>> from agent_compliance_eval.utils.console import output_mode, spinner
    >>> output_mode.format = "text"
    >>> with spinner("Evaluating..."):
    ...     record = run_evaluation(scenario, response_text)
    >>> print_record(record)
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from agent_compliance_eval.config.schema import Scenario
    from agent_compliance_eval.evaluator.record import EvaluationRecord

_METRIC_FIELDS = (
    ("Coherence", "coherence_score"),
    ("Empathy", "empathy_score"),
    ("Clarity", "clarity_score"),
    ("Professionalism", "professionalism_score"),
    ("Sentiment", "sentiment_score"),
    ("Readability", "readability_score"),
    ("Keyword coverage", "keyword_coverage"),
)

_VERDICT_FIELDS = (
    ("Intent", "intent"),
    ("Policy", "policy"),
    ("Hallucination", "hallucination"),
    ("Tone", "tone"),
    ("Escalation", "escalation"),
)


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: "text" (human) or "json" (agent)
        quiet: Suppress non-essential human output
    """

    def __init__(self, format_type: str = "text", quiet: bool = False):
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Add a key-value pair to the JSON document written by flush_json()."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """Write buffered JSON to stdout and clear the buffer (agent mode only)."""
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2, ensure_ascii=False)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


@contextmanager
def spinner(message: str):
    """Show a spinner in human mode; silent otherwise."""
    if output_mode.is_human() and not output_mode.quiet:
        with console.status(f"[bold blue]{message}", spinner="dots") as status:
            yield status
    else:
        yield None


def success(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {message}")
    elif output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    """Red X to stderr in human mode; buffered as status/error in agent mode."""
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}", style="red")
    elif output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def warning(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")
    elif output_mode.is_agent():
        output_mode.add_json("warning", message)


def info(message: str) -> None:
    if output_mode.is_human() and not output_mode.quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def _status_markup(value: str) -> str:
    if value in ("PASS", "OK"):
        return f"[green]{value}[/green]"
    if value in ("FAIL", "NOT_OK"):
        return f"[red]{value}[/red]"
    return f"[yellow]{value}[/yellow]"


def print_record(record: EvaluationRecord) -> None:
    """
    Print one evaluation record.

    Human mode: verdict panel with the reasoning, then a verdict table and
    a metrics table
    Agent mode: buffer the flat record under "evaluation"
    """
    if output_mode.is_agent():
        output_mode.add_json("evaluation", record.to_flat_dict())
        return

    color = "green" if record.overall == "PASS" else "red"
    console.print(
        Panel(
            record.reasoning,
            title=(
                f"[bold]{record.scenario_name}[/bold] | "
                f"[{color}]{record.overall}[/{color}] "
                f"({record.compliance_score}/100)"
            ),
            border_style=color,
            expand=False,
        )
    )

    if output_mode.quiet:
        return

    verdict_table = Table(title="Verdict", box=box.ROUNDED)
    verdict_table.add_column("Dimension", style="cyan")
    verdict_table.add_column("Result", justify="center")
    for label, field in _VERDICT_FIELDS:
        verdict_table.add_row(label, _status_markup(getattr(record, field)))
    console.print(verdict_table)

    metrics_table = Table(title="Metrics", box=box.ROUNDED)
    metrics_table.add_column("Metric", style="cyan")
    metrics_table.add_column("Score", justify="right")
    for label, field in _METRIC_FIELDS:
        metrics_table.add_row(label, str(getattr(record, field)))
    metrics_table.add_row("Response length", f"{record.response_length} chars")
    console.print(metrics_table)


def print_batch_results(
    records: list[EvaluationRecord], summary: dict[str, Any]
) -> None:
    """
    Print the results of a batch run.

    Human mode: one row per case plus the analytics summary
    Agent mode: buffer "results" (flat records) and "summary"
    """
    if output_mode.is_agent():
        output_mode.add_json("results", [r.to_flat_dict() for r in records])
        output_mode.add_json("summary", summary)
        return

    table = Table(title="Batch Results", box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Scenario", style="cyan", no_wrap=True)
    table.add_column("Agent", style="magenta")
    table.add_column("Overall", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Escalation", justify="center")
    table.add_column("Tone", justify="center")

    for index, record in enumerate(records, start=1):
        table.add_row(
            str(index),
            record.scenario_id,
            record.agent_name,
            _status_markup(record.overall),
            str(record.compliance_score),
            record.escalation,
            _status_markup(record.tone),
        )
    console.print(table)

    print_analytics(summary)


def print_analytics(summary: dict[str, Any]) -> None:
    """
    Print an analytics summary from compute_analytics().

    Human mode: totals panel plus per-scenario and per-agent tables
    Agent mode: buffer under "analytics"
    """
    if output_mode.is_agent():
        output_mode.add_json("analytics", summary)
        return

    pass_color = "green" if summary["failed"] == 0 else "yellow"
    console.print(
        Panel(
            f"Total: {summary['total']}\n"
            f"Passed: [green]{summary['passed']}[/green]\n"
            f"Failed: [red]{summary['failed']}[/red]\n"
            f"Pass rate: [{pass_color}]{summary['pass_rate']}%[/{pass_color}]\n"
            f"Average compliance score: {summary['average_score']}",
            title="[bold]Summary[/bold]",
            border_style=pass_color,
            expand=False,
        )
    )

    if output_mode.quiet:
        return

    for key, label, title in (
        ("by_scenario", "scenario_name", "Scenario"),
        ("by_agent", "agent_name", "Agent"),
    ):
        if not summary.get(key):
            continue
        table = Table(title=f"By {title}", box=box.ROUNDED)
        table.add_column(title, style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Passed", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Pass rate", justify="right")
        for row in summary[key]:
            table.add_row(
                row[label],
                str(row["total"]),
                str(row["passed"]),
                str(row["failed"]),
                f"{row['pass_rate']}%",
            )
        console.print(table)


def print_scenarios_table(scenarios: Iterable[Scenario]) -> None:
    """
    List scenarios.

    Human mode: table of id, name, risk category and action counts
    Agent mode: buffer full scenario dictionaries under "scenarios"
    """
    scenarios = list(scenarios)
    if output_mode.is_agent():
        output_mode.add_json(
            "scenarios", [s.model_dump(mode="json") for s in scenarios]
        )
        return

    table = Table(title="Scenarios", box=box.ROUNDED)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Risk", style="magenta")
    table.add_column("Required", justify="right")
    table.add_column("Forbidden", justify="right")
    table.add_column("Custom", justify="center")

    for scenario in scenarios:
        table.add_row(
            scenario.id,
            scenario.display_name,
            scenario.risk_category,
            str(len(scenario.required_actions)),
            str(len(scenario.forbidden_actions)),
            "✓" if scenario.custom else "",
        )
    console.print(table)
