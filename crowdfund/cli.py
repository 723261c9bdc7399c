"""
Crowdfund CLI

Usage:
    crowdfund demo
    crowdfund demo --scenario cancel-refunds
    crowdfund replay script.json
    crowdfund replay script.json --json
"""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .campaign import Campaign
from .config import get_settings
from .log_config import configure_logging
from .replay import DEMO_SCRIPTS, ReplayOutcome, ReplayScript, run_script

app = typer.Typer(
    name="crowdfund",
    help="Crowdfund campaign engine - replay contributions, claims and refunds",
)
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Override CROWDFUND_LOG_LEVEL"),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level.upper()})
    configure_logging(settings)


@app.command()
def demo(
    scenario: Optional[str] = typer.Option(
        None, help=f"Run one scenario ({', '.join(DEMO_SCRIPTS)}); default runs all"
    ),
):
    """Run the reference scenarios on a simulated clock."""
    if scenario is not None and scenario not in DEMO_SCRIPTS:
        console.print(f"[red]Unknown scenario: {scenario}. Choose from {', '.join(DEMO_SCRIPTS)}.[/red]")
        raise typer.Exit(1)

    names = [scenario] if scenario else list(DEMO_SCRIPTS)
    for name in names:
        console.print(f"\n[bold green]Scenario: {name}[/bold green]")
        _display_outcome(run_script(DEMO_SCRIPTS[name]))


@app.command()
def replay(
    script: Path = typer.Argument(..., help="JSON replay script"),
    as_json: bool = typer.Option(False, "--json", help="Print final campaign details as JSON"),
):
    """Replay a scripted sequence of operations against a fresh campaign."""
    try:
        parsed = ReplayScript.from_file(script)
    except OSError as e:
        console.print(f"[red]Cannot read {script}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except (ValidationError, UnicodeDecodeError) as e:
        console.print(f"[red]Invalid replay script {script}:[/red]\n{escape(str(e))}")
        raise typer.Exit(1)

    outcome = run_script(parsed)

    if as_json:
        typer.echo(outcome.campaign.get_campaign_details().model_dump_json(indent=2))
        return

    _display_outcome(outcome)


def _display_outcome(outcome: ReplayOutcome) -> None:
    _display_steps(outcome)
    _display_details(outcome.campaign)
    _display_top_donors(outcome.campaign)
    _display_payouts(outcome)


def _display_steps(outcome: ReplayOutcome) -> None:
    table = Table(title="Steps")
    table.add_column("#", justify="right")
    table.add_column("Operation", style="cyan")
    table.add_column("Result")

    for result in outcome.results:
        if result.ok:
            detail = "[green]ok[/green]"
            if result.value is not None and result.step.op != "advance":
                detail += f" ({result.value})"
        else:
            detail = f"[red]{result.error}[/red]"
            if result.message and result.message != result.error:
                detail += f": {escape(result.message)}"
        table.add_row(str(result.index), result.step.describe(), detail)

    console.print(table)


def _display_details(campaign: Campaign) -> None:
    details = campaign.get_campaign_details()
    table = Table(title=details.title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Status", details.status.label)
    table.add_row("Owner", details.owner)
    table.add_row("Goal", str(details.goal))
    table.add_row("Raised", str(details.raised_amount))
    table.add_row("Progress", f"{campaign.progress_pct()}%")
    table.add_row("Contributors", str(details.contributors_count))
    table.add_row("Time Remaining", f"{campaign.time_remaining()}s")
    for flag in ("goal_reached", "ended", "cancelled", "funds_claimed"):
        table.add_row(flag.replace("_", " ").title(), str(getattr(details, flag)))

    console.print(table)


def _display_top_donors(campaign: Campaign) -> None:
    rows = campaign.get_top_donor_rows()
    if not rows:
        console.print("[yellow]No ranked contributors[/yellow]")
        return

    table = Table(title="Top Contributors")
    table.add_column("Rank", justify="right")
    table.add_column("Contributor", style="cyan")
    table.add_column("Amount", justify="right")
    for row in rows:
        style = "bold" if row.rank == 1 else None
        table.add_row(str(row.rank), row.identity, str(row.amount), style=style)

    console.print(table)


def _display_payouts(outcome: ReplayOutcome) -> None:
    payouts = outcome.vault.payouts
    if not payouts:
        return
    table = Table(title="Payouts")
    table.add_column("Recipient", style="cyan")
    table.add_column("Amount", justify="right")
    for payout in payouts:
        table.add_row(payout.recipient, str(payout.amount))
    table.add_row("[bold]Balance left[/bold]", str(outcome.vault.balance))
    console.print(table)


if __name__ == "__main__":
    app()
