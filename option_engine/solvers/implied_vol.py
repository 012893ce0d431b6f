"""
Implied volatility solver with automatic method selection.

This module provides a high-level interface for solving implied volatility,
automatically choosing between Newton-Raphson and Brent's method based on
convergence behavior.
"""

import logging
from dataclasses import replace
from typing import Union

from option_engine.core.black_scholes import black_scholes_price
from option_engine.diagnostics.arbitrage import check_price_bounds
from option_engine.solvers.brent import brent_iv
from option_engine.solvers.newton_raphson import newton_raphson_iv
from option_engine.utils.constants import (
    IV_INITIAL_GUESS,
    IV_MAX_ITERATIONS,
    IV_MIN_VOL,
    IV_PRICE_TOLERANCE,
)
from option_engine.utils.exceptions import InvalidContractError
from option_engine.utils.types import (
    ImpliedVolResult,
    OptionContract,
    SolverMethod,
    as_solver_method,
    require_finite,
)

logger = logging.getLogger(__name__)


def _validate_market_price(market_price: float, contract: OptionContract) -> float:
    """
    Check the market price is solvable and return its no-arbitrage lower bound.

    Raises:
        InvalidContractError: If the price is non-finite, negative, outside
            the no-arbitrage bounds, or the contract has expired
    """
    require_finite("market_price", market_price)
    if market_price < 0:
        raise InvalidContractError("market_price", market_price, "cannot be negative")
    if contract.is_expired:
        raise InvalidContractError(
            "time_to_expiry",
            contract.time_to_expiry,
            "implied volatility is undefined for an expired contract",
        )

    bounds = check_price_bounds(market_price, contract)
    if not bounds.is_valid:
        raise InvalidContractError(
            "market_price",
            market_price,
            "arbitrage violation: " + "; ".join(bounds.violations),
        )
    return bounds.details["lower_bound"]


def implied_volatility(
    market_price: float,
    contract: OptionContract,
    method: Union[SolverMethod, str] = SolverMethod.AUTO,
    initial_guess: float = IV_INITIAL_GUESS,
    price_tolerance: float = IV_PRICE_TOLERANCE,
    max_iterations: int = IV_MAX_ITERATIONS,
) -> ImpliedVolResult:
    """
    Solve for implied volatility with automatic method selection.

    This is the main entry point for implied volatility calculation.
    It automatically:
    1. Validates arbitrage bounds
    2. Tries Newton-Raphson first (fast, quadratic convergence)
    3. Falls back to Brent if Newton-Raphson fails (robust bracketing)
    4. Returns the best estimate, flagged as not converged, if both fail

    Args:
        market_price: Observed market price
        contract: Contract being priced; its volatility field is ignored
        method: "auto" (default), "newton", or "brent"
        initial_guess: Starting volatility for Newton-Raphson
        price_tolerance: |BS(σ) - market_price| accepted as converged
        max_iterations: Newton-Raphson iteration cap

    Returns:
        ImpliedVolResult containing:
            - volatility: Solved (or best estimate) implied volatility
            - iterations: Number of iterations used
            - method: Method that produced the volatility
            - converged: False when the volatility is only approximate
            - message: Detailed information about convergence

    Raises:
        InvalidContractError: If the market price violates no-arbitrage
            bounds or the contract has expired. Non-convergence never raises.

    Examples:
        >>> contract = OptionContract(100, 100, 1.0, 0.05, 0.0)
        >>> result = implied_volatility(10.45, contract)
        >>> print(f"IV: {result.volatility:.2%}, Method: {result.method}")
        IV: 20.00%, Method: newton-raphson
    """
    method = as_solver_method(method)
    lower_bound = _validate_market_price(market_price, contract)

    # Zero time value: the price is reproduced by any vanishing volatility
    if market_price <= lower_bound + price_tolerance:
        model_price = black_scholes_price(
            contract.spot_price,
            contract.strike_price,
            contract.time_to_expiry,
            contract.risk_free_rate,
            IV_MIN_VOL,
            contract.option_type,
        )
        price_error = abs(model_price - market_price)
        return ImpliedVolResult(
            volatility=IV_MIN_VOL,
            iterations=0,
            method="intrinsic",
            converged=price_error < price_tolerance,
            price_error=price_error,
            message="Market price carries no time value",
        )

    attempts = []

    if method in (SolverMethod.AUTO, SolverMethod.NEWTON):
        nr_result = newton_raphson_iv(
            market_price, contract, initial_guess, max_iterations, price_tolerance
        )
        if nr_result.converged:
            return nr_result
        attempts.append(nr_result)
        logger.debug("Newton-Raphson did not converge: %s", nr_result.message)

    if method in (SolverMethod.AUTO, SolverMethod.BRENT):
        brent_result = brent_iv(market_price, contract, price_tolerance=price_tolerance)
        if brent_result.converged:
            return brent_result
        attempts.append(brent_result)

    best = min(attempts, key=lambda result: result.price_error)
    logger.warning(
        "Implied volatility did not converge for market price %.6f "
        "(best σ=%.6f, price error %.2e); returning approximate estimate",
        market_price,
        best.volatility,
        best.price_error,
    )
    return best


def implied_volatility_smile(
    market_prices: list[float],
    strikes: list[float],
    contract: OptionContract,
) -> list[ImpliedVolResult]:
    """
    Solve for implied volatilities across a strike ladder (volatility smile).

    Args:
        market_prices: Observed option prices, one per strike
        strikes: Strike prices (must match length of market_prices)
        contract: Template supplying spot, expiry, rate and option type

    Returns:
        List of ImpliedVolResult objects, one per strike

    Raises:
        InvalidContractError: If market_prices and strikes have different lengths
    """
    if len(market_prices) != len(strikes):
        raise InvalidContractError(
            "strikes",
            len(strikes),
            f"expected {len(market_prices)} strikes to match market_prices",
        )

    return [
        implied_volatility(price, replace(contract, strike_price=strike))
        for price, strike in zip(market_prices, strikes)
    ]
