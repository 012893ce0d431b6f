"""
Entry points of the option valuation engine.

Callers build an OptionContract, pick a pricing method, and get back a
Valuation (or a PortfolioRisk for a book of positions):

    >>> contract = OptionContract(100, 100, 1.0, 0.05, 0.20, "call")
    >>> round(price(contract).theoretical_value, 4)
    10.4506
    >>> round(price(contract, Binomial(steps=500)).theoretical_value, 2)
    10.45
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from option_engine.core.black_scholes import black_scholes_valuation, contract_greeks
from option_engine.models.binomial import binomial_valuation
from option_engine.models.monte_carlo import monte_carlo_price
from option_engine.portfolio.risk import analyze_portfolio
from option_engine.solvers.implied_vol import implied_volatility as _solve_implied_volatility
from option_engine.utils.config import DEFAULT_CONFIG, EngineConfig
from option_engine.utils.exceptions import InvalidContractError
from option_engine.utils.types import (
    Binomial,
    BlackScholes,
    GreekSet,
    ImpliedVolResult,
    MonteCarlo,
    OptionContract,
    PortfolioPosition,
    PricingMethod,
    Valuation,
)

__all__ = [
    "analyze_portfolio",
    "default_method",
    "greeks",
    "implied_volatility",
    "price",
    "value_positions",
]

logger = logging.getLogger(__name__)


def default_method(name: str, config: Optional[EngineConfig] = None) -> PricingMethod:
    """
    Build a pricing method from its short name using configured defaults.

    Args:
        name: "bs", "binomial", or "mc"
        config: Source of default steps/simulations/seed/workers

    Raises:
        InvalidContractError: For an unknown name
    """
    config = config or DEFAULT_CONFIG
    key = name.lower()
    if key in ("bs", "black-scholes"):
        return BlackScholes()
    if key == "binomial":
        return Binomial(steps=config.binomial_steps)
    if key in ("mc", "monte-carlo"):
        return MonteCarlo(
            num_simulations=config.mc_simulations,
            seed=config.seed,
            workers=config.mc_workers,
        )
    raise InvalidContractError("method", name, "expected one of bs, binomial, mc")


def price(contract: OptionContract, method: PricingMethod = BlackScholes()) -> Valuation:
    """
    Value a contract with the chosen pricing method.

    Args:
        contract: Contract to price
        method: BlackScholes(), Binomial(steps), or MonteCarlo(num_simulations, ...)

    Returns:
        Valuation with analytic Greeks (Black-Scholes), lattice Greeks
        (Binomial), or a MonteCarloResult without Greeks

    Raises:
        TypeError: If method is not one of the pricing method variants
    """
    if isinstance(method, BlackScholes):
        return black_scholes_valuation(contract)
    if isinstance(method, Binomial):
        return binomial_valuation(contract, method.steps)
    if isinstance(method, MonteCarlo):
        return monte_carlo_price(
            contract,
            num_simulations=method.num_simulations,
            seed=method.seed,
            workers=method.workers,
        )
    raise TypeError(f"Unsupported pricing method: {method!r}")


def greeks(contract: OptionContract) -> GreekSet:
    """Analytic Black-Scholes Greeks in raw units (see GreekSet.to_market_units)."""
    return contract_greeks(contract)


def implied_volatility(
    market_price: float,
    contract: OptionContract,
    config: Optional[EngineConfig] = None,
) -> ImpliedVolResult:
    """
    Invert a market price to the Black-Scholes volatility.

    The result's converged flag is False when only a best estimate could
    be found; the solver never raises for non-convergence.
    """
    config = config or DEFAULT_CONFIG
    return _solve_implied_volatility(
        market_price,
        contract,
        initial_guess=config.iv_initial_guess,
        price_tolerance=config.iv_price_tolerance,
        max_iterations=config.iv_max_iterations,
    )


def value_positions(
    contracts: Sequence[OptionContract],
    quantities: Sequence[float],
    method: PricingMethod = BlackScholes(),
    premiums: Optional[Sequence[Optional[float]]] = None,
    workers: Optional[int] = None,
) -> list[PortfolioPosition]:
    """
    Price many contracts concurrently and wrap them as positions.

    Each contract is priced in its own task with no shared state, so the
    results do not depend on scheduling.

    Args:
        contracts: Contracts to value
        quantities: Signed quantity per contract
        method: Pricing method applied to every contract
        premiums: Per-unit premium paid per contract (None: use model value)
        workers: Thread count (default: executor default)

    Returns:
        Positions in the same order as contracts
    """
    if len(quantities) != len(contracts):
        raise InvalidContractError(
            "quantities", len(quantities), f"expected {len(contracts)} to match contracts"
        )
    if premiums is None:
        premiums = [None] * len(contracts)
    elif len(premiums) != len(contracts):
        raise InvalidContractError(
            "premiums", len(premiums), f"expected {len(contracts)} to match contracts"
        )

    if not contracts:
        return []

    with ThreadPoolExecutor(max_workers=workers) as executor:
        valuations = list(executor.map(lambda contract: price(contract, method), contracts))

    logger.debug("Valued %d contracts with %r", len(valuations), method)

    return [
        PortfolioPosition(valuation=valuation, quantity=quantity, premium_paid=premium)
        for valuation, quantity, premium in zip(valuations, quantities, premiums)
    ]
