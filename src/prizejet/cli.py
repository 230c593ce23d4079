"""Command-line interface for PrizeJet operators."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from prizejet.analytics.stats import entry_counts, leaderboard, top_referrers
from prizejet.auth.local import LocalAuthService
from prizejet.auth.models import SubscriptionTier
from prizejet.errors import PrizeJetError
from prizejet.logging_config import configure_logging, get_logger
from prizejet.settings import settings
from prizejet.storage.db import Database
from prizejet.storage.export import export_to_csv
from prizejet.storage.models import utcnow
from prizejet.storage.repo import CampaignRepository, EntryRepository

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="prizejet",
    help="PrizeJet - referral giveaway campaigns",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    database_url: Annotated[
        str | None, typer.Option("--database-url", envvar="PRIZEJET_DATABASE_URL", help="Database URL")
    ] = None,
) -> None:
    """PrizeJet - referral giveaway campaigns."""
    ctx.obj = Database(database_url, echo=False)


def _load(db: Database, campaign_id: str):
    """Campaign and its entries (newest first), or exit if unknown."""
    with db.session() as session:
        campaign = CampaignRepository(session).get_by_id(campaign_id)
        if not campaign:
            console.print(f"[red]Campaign {campaign_id} not found[/red]")
            raise typer.Exit(1)
        entries = EntryRepository(session).list_for_campaign(campaign.id)
    return campaign, entries


@app.command("init")
def init_database(ctx: typer.Context) -> None:
    """Initialize the database and create tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")
    ctx.obj.create_tables()
    console.print("[bold green]✓[/bold green] Database initialized successfully")


@app.command("create-user")
def create_user(
    ctx: typer.Context,
    email: Annotated[str, typer.Argument(help="Owner email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True)],
    name: Annotated[str | None, typer.Option("--name", "-n", help="Display name")] = None,
) -> None:
    """Create a campaign owner account."""
    try:
        user = LocalAuthService(ctx.obj).create_user(email, password, name=name)
    except PrizeJetError as e:
        console.print(f"[bold red]✗[/bold red] {e.message}")
        raise typer.Exit(1)
    console.print(f"[bold green]✓[/bold green] User created with ID: [bold]{user.id}[/bold]")


@app.command("set-tier")
def set_tier(
    ctx: typer.Context,
    email: Annotated[str, typer.Argument(help="Owner email")],
    tier: Annotated[SubscriptionTier, typer.Argument(help="free or pro")],
) -> None:
    """Change an owner's subscription tier."""
    try:
        LocalAuthService(ctx.obj).set_subscription_tier(email, tier)
    except PrizeJetError as e:
        console.print(f"[bold red]✗[/bold red] {e.message}")
        raise typer.Exit(1)
    console.print(f"[bold green]✓[/bold green] {email} is now on the {tier.value} tier")


@app.command("stats")
def show_stats(
    ctx: typer.Context,
    campaign_id: Annotated[str, typer.Argument(help="Campaign ID")],
) -> None:
    """Show entry statistics and top referrers for a campaign."""
    campaign, entries = _load(ctx.obj, campaign_id)
    counts = entry_counts(entries)

    console.print(f"[bold]Campaign:[/bold] {campaign.title} (ID: {campaign.id})")
    console.print(f"[bold]Status:[/bold] {campaign.effective_status(utcnow()).value}")
    console.print(f"[bold]Slug:[/bold] {campaign.slug or '-'}")
    console.print(f"[bold]Total entries:[/bold] {counts.total}")
    console.print(f"[bold]Direct:[/bold] {counts.direct}  [bold]Referral:[/bold] {counts.referral}")
    console.print(f"[bold]Referral rate:[/bold] {counts.referral_rate:.1f}%")

    referrers = top_referrers(entries, limit=settings.top_referrers_limit)
    if referrers:
        console.print("\n[bold]Top Referrers:[/bold]")
        table = Table()
        table.add_column("Name", style="green")
        table.add_column("Email")
        table.add_column("Referrals", justify="right")
        for referrer in referrers:
            table.add_row(referrer.name, referrer.email, str(referrer.referrals))
        console.print(table)


@app.command("leaderboard")
def show_leaderboard(
    ctx: typer.Context,
    campaign_id: Annotated[str, typer.Argument(help="Campaign ID")],
    limit: Annotated[int, typer.Option("--limit", "-l", help="Rows to show")] = settings.leaderboard_limit,
) -> None:
    """Show participants ranked by points."""
    campaign, entries = _load(ctx.obj, campaign_id)
    rows = leaderboard(entries, limit=limit)

    if not rows:
        console.print("[yellow]No entries yet[/yellow]")
        return

    table = Table(title=f"{campaign.title} - Leaderboard")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email")
    table.add_column("Points", justify="right")
    table.add_column("Referrals", justify="right")
    table.add_column("Bonus Actions", justify="right")

    for row in rows:
        table.add_row(
            str(row.rank), row.name, row.email, str(row.points), str(row.referrals), str(row.bonus_actions)
        )

    console.print(table)


@app.command("export")
def export_entries(
    ctx: typer.Context,
    campaign_id: Annotated[str, typer.Argument(help="Campaign ID to export")],
    output_path: Annotated[Path, typer.Option("--output", "-o", help="Output file path")] = Path("entries.csv"),
) -> None:
    """Export a campaign's entries to CSV."""
    console.print(f"[bold blue]Exporting campaign {campaign_id} to {output_path}...[/bold blue]")
    _, entries = _load(ctx.obj, campaign_id)

    export_to_csv(entries, output_path)
    logger.info("cli_export", campaign_id=campaign_id, count=len(entries))
    console.print(f"[bold green]✓[/bold green] Exported {len(entries)} entries to {output_path}")


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Port")] = 8000,
) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run("prizejet.api.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
