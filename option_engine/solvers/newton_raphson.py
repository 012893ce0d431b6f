"""
Newton-Raphson method for implied volatility calculation.

This module implements the Newton-Raphson algorithm for solving
the Black-Scholes equation for volatility given a market price.
The method uses vega (∂V/∂σ) as the derivative for fast convergence.
"""

import logging

from option_engine.core.black_scholes import black_scholes_price, vega
from option_engine.utils.constants import (
    IV_INITIAL_GUESS,
    IV_MAX_ITERATIONS,
    IV_MAX_VOL,
    IV_MIN_VEGA,
    IV_MIN_VOL,
    IV_PRICE_TOLERANCE,
)
from option_engine.utils.types import ImpliedVolResult, OptionContract

logger = logging.getLogger(__name__)


def newton_raphson_iv(
    market_price: float,
    contract: OptionContract,
    initial_guess: float = IV_INITIAL_GUESS,
    max_iterations: int = IV_MAX_ITERATIONS,
    price_tolerance: float = IV_PRICE_TOLERANCE,
) -> ImpliedVolResult:
    """
    Solve for implied volatility using Newton-Raphson method.

    The Newton-Raphson update is:
        σ_{n+1} = σ_n - (BS(σ_n) - market_price) / vega(σ_n)

    This method has quadratic convergence near the solution but can
    stall if the initial guess is poor or vega is too small.

    Args:
        market_price: Observed market price of the option
        contract: Contract whose volatility field is ignored
        initial_guess: Starting volatility estimate
        max_iterations: Maximum number of iterations
        price_tolerance: Convergence tolerance for price difference

    Returns:
        ImpliedVolResult holding the best volatility seen. converged is
        True only if |BS(σ) - market_price| < price_tolerance.

    Notes:
        - Iterates are clamped into [IV_MIN_VOL, IV_MAX_VOL], so σ never
          goes negative
        - Stops early if vega drops below IV_MIN_VEGA or an iterate is
          pinned at a bound (caller should fall back to Brent)
    """
    S = contract.spot_price
    K = contract.strike_price
    T = contract.time_to_expiry
    r = contract.risk_free_rate
    option_type = contract.option_type

    sigma = min(max(initial_guess, IV_MIN_VOL), IV_MAX_VOL)
    best_sigma = sigma
    best_error = float("inf")
    iterations = 0

    for _ in range(max_iterations):
        iterations += 1

        bs_price = black_scholes_price(S, K, T, r, sigma, option_type)
        price_diff = bs_price - market_price

        if abs(price_diff) < best_error:
            best_error = abs(price_diff)
            best_sigma = sigma

        if abs(price_diff) < price_tolerance:
            logger.debug("Newton-Raphson converged to σ=%.6f in %d iterations", sigma, iterations)
            return ImpliedVolResult(
                volatility=sigma,
                iterations=iterations,
                method="newton-raphson",
                converged=True,
                price_error=abs(price_diff),
                message=f"Converged in {iterations} iterations",
            )

        vega_value = vega(S, K, T, r, sigma)

        if vega_value < IV_MIN_VEGA:
            return ImpliedVolResult(
                volatility=best_sigma,
                iterations=iterations,
                method="newton-raphson",
                converged=False,
                price_error=best_error,
                message=f"Vega too small ({vega_value:.2e}) at iteration {iterations}, need fallback",
            )

        sigma_new = min(max(sigma - price_diff / vega_value, IV_MIN_VOL), IV_MAX_VOL)

        if sigma_new == sigma:
            return ImpliedVolResult(
                volatility=best_sigma,
                iterations=iterations,
                method="newton-raphson",
                converged=False,
                price_error=best_error,
                message=f"Pinned at volatility bound σ={sigma:.4f} at iteration {iterations}",
            )

        sigma = sigma_new

    return ImpliedVolResult(
        volatility=best_sigma,
        iterations=iterations,
        method="newton-raphson",
        converged=False,
        price_error=best_error,
        message=f"Max iterations ({max_iterations}) reached without convergence",
    )
