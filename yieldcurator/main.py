"""CLI entry point for Yield Curator."""

import asyncio

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from yieldcurator.config import get_settings
from yieldcurator.errors import InvalidInputError
from yieldcurator.logger import get_logger
from yieldcurator.models.pool import PoolMetrics
from yieldcurator.services.allocation_engine import AllocationEngine
from yieldcurator.services.protocol_registry import ProtocolRegistry
from yieldcurator.services.risk_scorer import RiskScorer

console = Console()
logger = get_logger(__name__)

RISK_COLORS = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "very_high": "bold red",
}


@click.group()
@click.version_option(version="0.1.0", prog_name="yieldcurator")
def cli():
    """Yield Curator: risk-scored DeFi yield curation.

    Score pools, build allocations and backtest yields.
    """
    pass


@cli.command()
@click.option("--amount", "-a", type=float, required=True, help="Capital to allocate")
@click.option(
    "--risk",
    "-r",
    type=str,
    default="moderate",
    help="conservative, moderate, or aggressive (default: moderate)",
)
def recommend(amount: float, risk: str):
    """Recommend a multi-pool allocation."""
    logger.info(f"Recommend command: amount={amount}, risk={risk}")
    settings = get_settings()
    engine = AllocationEngine(min_amount=settings.min_amount)

    try:
        result = engine.recommend(amount, risk)
    except InvalidInputError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    table = Table(title=f"{result.risk_tier.value.title()} allocation", show_header=True)
    table.add_column("Pool", style="bold")
    table.add_column("Protocol")
    table.add_column("Allocation", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("APY", justify="right")
    table.add_column("Risk", justify="right")

    for a in result.allocations:
        color = RISK_COLORS.get(a.risk_level.value, "white")
        table.add_row(
            a.pool_name,
            a.protocol,
            f"{a.allocation}%",
            f"${amount * a.allocation / 100:,.2f}",
            f"{a.apy:.2f}%",
            f"[{color}]{a.risk_score}[/{color}]",
        )
    console.print(table)

    summary = result.summary
    console.print(
        Panel(
            f"Expected APY: [bold]{summary.expected_apy:.2f}%[/bold]\n"
            f"Expected yield: [bold]${summary.expected_yield:,.2f}[/bold] / year\n"
            f"Overall risk: {summary.overall_risk}\n"
            f"Diversification: {summary.diversification_score}/100",
            title="Summary",
            border_style="blue",
        )
    )

    for insight in result.insights:
        console.print(f"[green]•[/green] {insight}")
    for warning in result.warnings:
        console.print(f"[yellow]![/yellow] {warning}")


@cli.command()
@click.argument("pool_ids", nargs=-1, required=True)
@click.option("--amount", "-a", type=float, default=10000.0, help="Initial amount (default: 10000)")
@click.option("--days", "-d", type=click.Choice(["7", "30", "90"]), default="30", help="Window length")
@click.option(
    "--compounding",
    "-c",
    type=click.Choice(["daily", "weekly", "none"]),
    default="daily",
    help="Compounding mode (default: daily)",
)
def backtest(pool_ids: tuple[str, ...], amount: float, days: str, compounding: str):
    """Backtest pools against their historical APY."""
    from yieldcurator.api.services.curation_service import CurationService

    logger.info(f"Backtest command: pools={pool_ids}, days={days}, compounding={compounding}")
    service = CurationService(get_settings())

    async def run():
        try:
            return await service.backtest(list(pool_ids), amount, int(days), compounding)
        finally:
            await service.aclose()

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task(f"Fetching history for {len(pool_ids)} pools...", total=None)
            response = asyncio.run(run())
            progress.update(task, completed=True)
    except InvalidInputError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    table = Table(
        title=f"Backtest {response.period.start} to {response.period.end} ({compounding})",
        show_header=True,
    )
    table.add_column("Pool", style="bold")
    table.add_column("Final", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Avg APY", justify="right")
    table.add_column("Min / Max", justify="right")
    table.add_column("Volatility", justify="right")
    table.add_column("Sharpe", justify="right")

    for r in response.results:
        label = f"{r.project} {r.symbol}".strip() or r.pool_id
        if not r.data_available:
            table.add_row(label, "[dim]no data[/dim]", "", "", "", "", "")
            continue
        marker = " [green]★[/green]" if r.pool_id == response.winner else ""
        table.add_row(
            label + marker,
            f"${r.final_amount:,.2f}",
            f"{r.total_return_percent:.3f}%",
            f"{r.avg_apy:.2f}%",
            f"{r.min_apy:.2f}% / {r.max_apy:.2f}%",
            f"{r.volatility:.2f}",
            f"{r.volatility_metrics.sharpe_ratio:.2f}" if r.volatility_metrics else "",
        )

    console.print(table)


@cli.command()
@click.option("--tvl", type=float, required=True, help="Total value locked in USD")
@click.option("--apy", type=float, required=True, help="Total APY in percent")
@click.option("--apy-base", type=float, default=0.0, help="Base APY in percent")
@click.option("--apy-reward", type=float, default=0.0, help="Reward APY in percent")
@click.option("--stablecoin", is_flag=True, help="Pool is a stablecoin pair")
@click.option(
    "--il-risk",
    type=click.Choice(["none", "low", "high"]),
    default="none",
    help="Impermanent-loss exposure",
)
@click.option("--protocol", type=str, default="", help="Protocol slug")
def score(
    tvl: float,
    apy: float,
    apy_base: float,
    apy_reward: float,
    stablecoin: bool,
    il_risk: str,
    protocol: str,
):
    """Score a pool's risk from its metrics."""
    pool = PoolMetrics(
        pool_id="cli",
        tvl_usd=tvl,
        apy=apy,
        apy_base=apy_base,
        apy_reward=apy_reward,
        stablecoin=stablecoin,
        il_risk=il_risk,
        protocol=protocol,
    )
    assessment = RiskScorer().assess(pool)
    b = assessment.breakdown

    table = Table(title="Risk breakdown", show_header=True)
    table.add_column("Factor", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Max", justify="right")
    table.add_row("TVL", str(b.tvl), "30")
    table.add_row("APY sustainability", str(b.apy_sustainability), "25")
    table.add_row("Asset volatility", str(b.asset_volatility), "20")
    table.add_row("Impermanent loss", str(b.impermanent_loss), "15")
    table.add_row("Protocol trust", str(b.protocol_trust), "10")
    console.print(table)

    color = RISK_COLORS.get(assessment.risk_level.value, "white")
    console.print(
        f"Risk score: [{color}]{assessment.risk_score}/100 ({assessment.risk_level.value})[/{color}]"
    )
    if assessment.liquidity:
        console.print(
            f"[dim]Exit liquidity: {assessment.liquidity.exitability_rating}, "
            f"max safe position ${assessment.liquidity.max_safe_allocation:,.0f}[/dim]"
        )


@cli.command()
def protocols():
    """List curated protocols and their trust scores."""
    table = Table(title="Protocol trust registry", show_header=True)
    table.add_column("Protocol", style="bold")
    table.add_column("Trust score", justify="right")
    table.add_column("Level")
    table.add_column("Auditors")

    for entry in ProtocolRegistry().all():
        table.add_row(
            entry.protocol.name,
            str(entry.trust_score),
            entry.trust_level.value,
            ", ".join(entry.protocol.auditors),
        )

    console.print(table)


@cli.command()
@click.option("--host", type=str, default="127.0.0.1", help="Bind address")
@click.option("--port", type=int, default=8000, help="Port (default: 8000)")
def serve(host: str, port: int):
    """Run the HTTP API."""
    import uvicorn

    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("yieldcurator.api.main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
