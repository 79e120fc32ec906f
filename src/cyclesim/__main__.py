import json
import logging

import click
from pydantic import TypeAdapter, ValidationError

from cyclesim.analysis.sim_models import (
    CycleKey,
    ScenarioKey,
    SimulationInputError,
    SimulationRequest,
    SimulationResult,
)
from cyclesim.config import Settings
from cyclesim.logging_config import setup_logging

logger = logging.getLogger(__name__)

CYCLE_CHOICES = [c.value for c in CycleKey]
SCENARIO_CHOICES = [s.value for s in ScenarioKey]


def _pct(value: float) -> str:
    return f"{value * 100:+.2f}%"


def _echo_result(result: SimulationResult, as_json: bool):
    if as_json:
        click.echo(json.dumps(result.as_dict()))
        return
    click.echo(f"  Median return:     {_pct(result.median)}")
    click.echo(f"  Upside (95th):     {_pct(result.upside95)}")
    click.echo(f"  Downside (5th):    {_pct(result.downside5)}")
    click.echo(f"  Tail drawdown 95:  {_pct(result.tail_drawdown95)}")


def _run(request: SimulationRequest, workers: int | None) -> SimulationResult:
    from cyclesim.analysis.simulation import simulate

    settings = Settings()
    try:
        return simulate(
            request,
            max_workers=settings.simulation_max_workers if workers is None else workers,
            chunk_size=settings.simulation_chunk_size,
        )
    except SimulationInputError as e:
        raise click.BadParameter(str(e), param_hint=f"'{e.field}'") from e


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """Cyclesim - portfolio cycle scenario simulator"""
    settings = Settings()
    setup_logging(settings.log_dir, "DEBUG" if verbose else settings.log_level)


@cli.command("simulate")
@click.option("--subject", "-s", default="CURRENT", show_default=True,
              help="Portfolio identifier used for seeding")
@click.option("--beta", "-b", type=float, required=True, help="Portfolio beta")
@click.option("--score", type=float, required=True,
              help="Cycle alignment score (0-100, clamped)")
@click.option("--cycle", "-c", type=click.Choice(CYCLE_CHOICES), default="market",
              show_default=True)
@click.option("--scenario", "-x", type=click.Choice(SCENARIO_CHOICES), default="crisis2008",
              show_default=True)
@click.option("--paths", type=int, default=None, help="Number of paths (default: settings)")
@click.option("--periods", type=int, default=None, help="Horizon in months (default: settings)")
@click.option("--workers", "-w", type=int, default=None, help="Worker processes (default: settings)")
@click.option("--json", "as_json", is_flag=True, help="Emit the result as JSON")
def simulate_cmd(subject: str, beta: float, score: float, cycle: str, scenario: str,
                 paths: int | None, periods: int | None, workers: int | None, as_json: bool):
    """Run a seeded Monte Carlo scenario simulation."""
    settings = Settings()
    request = SimulationRequest(
        subject_key=subject,
        beta=beta,
        environment_score=score,
        cycle_key=cycle,
        scenario_key=scenario,
        path_count=settings.simulation_num_paths if paths is None else paths,
        period_count=settings.simulation_num_periods if periods is None else periods,
    )
    logger.info(
        "Simulating %s under %s/%s (%d paths, %d months)",
        subject, cycle, scenario, request.path_count, request.period_count,
    )
    result = _run(request, workers)
    if not as_json:
        click.echo(f"[{subject}] {cycle} / {scenario}")
    _echo_result(result, as_json)


@cli.command()
@click.argument("holdings_file", type=click.File("r"))
@click.option("--subject", "-s", default="CURRENT", show_default=True)
@click.option("--cycle", "-c", type=click.Choice(CYCLE_CHOICES), default=None,
              help="Also simulate this cycle")
@click.option("--scenario", "-x", type=click.Choice(SCENARIO_CHOICES), default="crisis2008",
              show_default=True)
@click.option("--workers", "-w", type=int, default=None)
def align(holdings_file, subject: str, cycle: str | None, scenario: str, workers: int | None):
    """Score a JSON holdings list against every macro cycle."""
    from cyclesim.analysis.alignment import (
        Holding,
        build_request,
        compute_cycle_alignment,
        portfolio_beta,
    )

    try:
        holdings = TypeAdapter(list[Holding]).validate_json(holdings_file.read())
    except ValidationError as e:
        raise click.ClickException(f"Invalid holdings file: {e}") from e

    click.echo(f"Portfolio beta: {portfolio_beta(holdings):.2f}")
    for key, score in compute_cycle_alignment(holdings).items():
        click.echo(f"  {key.value:<12} {score:>3}")

    if cycle is None:
        return

    settings = Settings()
    request = build_request(
        subject, holdings, cycle, scenario,
        path_count=settings.simulation_num_paths,
        period_count=settings.simulation_num_periods,
    )
    click.echo(f"\n[{subject}] {cycle} / {scenario}")
    _echo_result(_run(request, workers), as_json=False)


@cli.command()
def catalog():
    """List the available cycles and stress scenarios."""
    from cyclesim.analysis.sim_models.params import ENVIRONMENT_PARAMS, SCENARIO_PARAMS

    click.echo("Cycles:")
    for key, ep in ENVIRONMENT_PARAMS.items():
        click.echo(
            f"  {key.value:<12} {ep.title:<18} mean x{ep.mean_multiplier:.2f}  "
            f"vol x{ep.vol_multiplier:.2f}"
        )
    click.echo("Scenarios:")
    for key, sp in SCENARIO_PARAMS.items():
        click.echo(
            f"  {key.value:<12} {sp.label:<22} shift {sp.mean_shift:+.2f}  "
            f"vol x{sp.vol_multiplier:.2f}"
        )


if __name__ == "__main__":
    cli()
