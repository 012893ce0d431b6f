"""
Command-line interface for the option valuation engine.

This CLI provides access to:
- Option pricing (Black-Scholes, binomial lattice, Monte Carlo)
- Greeks calculation
- Implied volatility solving

Usage:
    python -m interfaces.cli price -S 100 -K 100 -T 1 -r 0.05 -v 0.2
    python -m interfaces.cli price -S 100 -K 100 -T 1 -r 0.05 -v 0.2 --method mc --seed 7
    python -m interfaces.cli iv -p 10.45 -S 100 -K 100 -T 1 -r 0.05
"""

import logging

import click

from option_engine.engine import default_method, greeks as compute_greeks, implied_volatility, price
from option_engine.utils.config import EngineConfig
from option_engine.utils.exceptions import OptionEngineError
from option_engine.utils.types import MonteCarloResult, OptionContract


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.group()
@click.version_option(version="1.0.0")
@click.option("--verbose", is_flag=True, help="Log progress information")
@click.option("--debug", is_flag=True, help="Log solver and simulation details")
def cli(verbose, debug):
    """Option Valuation Engine - Black-Scholes, binomial and Monte Carlo pricing."""
    setup_logging(verbose=verbose, debug=debug)


@cli.command(name="price")
@click.option("--spot", "-S", type=float, required=True, help="Spot price")
@click.option("--strike", "-K", type=float, required=True, help="Strike price")
@click.option("--time", "-T", type=float, required=True, help="Time to expiry (years)")
@click.option("--rate", "-r", type=float, required=True, help="Risk-free rate")
@click.option("--vol", "-v", type=float, required=True, help="Volatility (annualized)")
@click.option("--type", "-t", type=click.Choice(["call", "put"]), default="call")
@click.option("--american", is_flag=True, help="American exercise (binomial only)")
@click.option("--method", "-m", type=click.Choice(["bs", "binomial", "mc"]), default="bs")
@click.option("--steps", type=int, default=None, help="Binomial steps")
@click.option("--simulations", type=int, default=None, help="Monte Carlo trials")
@click.option("--seed", type=int, default=None, help="Monte Carlo seed")
@click.option("--workers", type=int, default=1, help="Monte Carlo worker threads")
def price_cmd(spot, strike, time, rate, vol, type, american, method, steps, simulations, seed, workers):
    """Calculate option value with the chosen method."""
    try:
        defaults = EngineConfig()
        config = EngineConfig(
            binomial_steps=steps if steps is not None else defaults.binomial_steps,
            mc_simulations=simulations if simulations is not None else defaults.mc_simulations,
            mc_workers=workers,
            seed=seed,
        )
        contract = OptionContract(
            spot, strike, time, rate, vol, type, "american" if american else "european"
        )
        valuation = price(contract, default_method(method, config))
    except OptionEngineError as e:
        click.echo(f"\nError: {e}", err=True)
        return

    click.echo(f"\n{type.capitalize()} Option Value ({valuation.method}): ${valuation.theoretical_value:.4f}")
    click.echo(f"  Intrinsic:  {valuation.intrinsic_value:>10.4f}")
    click.echo(f"  Time value: {valuation.time_value:>10.4f}")
    if isinstance(valuation, MonteCarloResult):
        low, high = valuation.confidence_interval
        click.echo(f"  Std error:  {valuation.standard_error:>10.4f}")
        click.echo(f"  95% CI:     [{low:.4f}, {high:.4f}]")


@cli.command()
@click.option("--spot", "-S", type=float, required=True, help="Spot price")
@click.option("--strike", "-K", type=float, required=True, help="Strike price")
@click.option("--time", "-T", type=float, required=True, help="Time to expiry (years)")
@click.option("--rate", "-r", type=float, required=True, help="Risk-free rate")
@click.option("--vol", "-v", type=float, required=True, help="Volatility")
@click.option("--type", "-t", type=click.Choice(["call", "put"]), default="call")
def greeks(spot, strike, time, rate, vol, type):
    """Calculate all option Greeks (market units)."""
    try:
        contract = OptionContract(spot, strike, time, rate, vol, type)
    except OptionEngineError as e:
        click.echo(f"\nError: {e}", err=True)
        return

    greeks_values = compute_greeks(contract).to_market_units()

    click.echo(f"\nGreeks for {type.capitalize()} Option:")
    click.echo(f"  Delta:  {greeks_values.delta:>10.6f}")
    click.echo(f"  Gamma:  {greeks_values.gamma:>10.6f}")
    click.echo(f"  Vega:   {greeks_values.vega:>10.6f} (per vol point)")
    click.echo(f"  Theta:  {greeks_values.theta:>10.6f} (per day)")
    click.echo(f"  Rho:    {greeks_values.rho:>10.6f} (per 1% rate)")


@cli.command()
@click.option("--market-price", "-p", type=float, required=True, help="Market price")
@click.option("--spot", "-S", type=float, required=True, help="Spot price")
@click.option("--strike", "-K", type=float, required=True, help="Strike price")
@click.option("--time", "-T", type=float, required=True, help="Time to expiry (years)")
@click.option("--rate", "-r", type=float, required=True, help="Risk-free rate")
@click.option("--type", "-t", type=click.Choice(["call", "put"]), default="call")
def iv(market_price, spot, strike, time, rate, type):
    """Solve for implied volatility."""
    try:
        contract = OptionContract(spot, strike, time, rate, 0.0, type)
        result = implied_volatility(market_price, contract)
    except OptionEngineError as e:
        click.echo(f"\nError: {e}", err=True)
        return

    label = "Implied Volatility" if result.converged else "Implied Volatility (approximate)"
    click.echo(f"\n{label}: {result.volatility:.4f} ({result.volatility*100:.2f}%)")
    click.echo(f"Method: {result.method}")
    click.echo(f"Iterations: {result.iterations}")
    if not result.converged:
        click.echo(f"Solver did not converge: {result.message}", err=True)


if __name__ == "__main__":
    cli()
