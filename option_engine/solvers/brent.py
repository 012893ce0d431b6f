"""
Brent's method for implied volatility calculation.

This module implements Brent's method (a hybrid bisection/inverse quadratic
interpolation algorithm) as a robust fallback when Newton-Raphson fails.
Brent's method is guaranteed to converge if a solution exists within the
specified bounds, though it's slower than Newton-Raphson.
"""

import logging

from scipy.optimize import brentq

from option_engine.core.black_scholes import black_scholes_price
from option_engine.utils.constants import IV_MAX_VOL, IV_MIN_VOL, IV_PRICE_TOLERANCE
from option_engine.utils.types import ImpliedVolResult, OptionContract

logger = logging.getLogger(__name__)


def brent_iv(
    market_price: float,
    contract: OptionContract,
    vol_lower: float = IV_MIN_VOL,
    vol_upper: float = IV_MAX_VOL,
    price_tolerance: float = IV_PRICE_TOLERANCE,
) -> ImpliedVolResult:
    """
    Solve for implied volatility using Brent's method.

    Brent's method is a root-finding algorithm that combines:
    - Bisection (reliable but slow)
    - Inverse quadratic interpolation (fast when applicable)
    - Secant method (intermediate speed/reliability)

    Args:
        market_price: Observed market price of the option
        contract: Contract whose volatility field is ignored
        vol_lower: Lower bound for volatility search
        vol_upper: Upper bound for volatility search
        price_tolerance: Price error accepted as converged

    Returns:
        ImpliedVolResult; converged is False if the bounds do not bracket
        a root or the root found misses the price tolerance
    """
    S = contract.spot_price
    K = contract.strike_price
    T = contract.time_to_expiry
    r = contract.risk_free_rate
    option_type = contract.option_type

    def objective(sigma: float) -> float:
        """BS(σ) - market_price; we seek σ such that this equals zero."""
        return black_scholes_price(S, K, T, r, sigma, option_type) - market_price

    try:
        implied_vol, info = brentq(
            objective,
            vol_lower,
            vol_upper,
            xtol=1e-12,
            rtol=1e-10,
            maxiter=200,
            full_output=True,
        )
    except (ValueError, RuntimeError) as e:
        # ValueError: no sign change across the bounds
        obj_lower = objective(vol_lower)
        obj_upper = objective(vol_upper)
        best_sigma, best_error = min(
            ((vol_lower, abs(obj_lower)), (vol_upper, abs(obj_upper))), key=lambda pair: pair[1]
        )
        logger.debug("Brent failed for market price %.6f: %s", market_price, e)
        return ImpliedVolResult(
            volatility=best_sigma,
            iterations=0,
            method="brent",
            converged=False,
            price_error=best_error,
            message=(
                f"Brent method failed: obj({vol_lower:.4f}) = {obj_lower:.6f}, "
                f"obj({vol_upper:.4f}) = {obj_upper:.6f}"
            ),
        )

    price_error = abs(objective(implied_vol))
    converged = price_error < price_tolerance

    return ImpliedVolResult(
        volatility=implied_vol,
        iterations=info.iterations,
        method="brent",
        converged=converged,
        price_error=price_error,
        message=f"Finished in {info.iterations} iterations with price error {price_error:.2e}",
    )
