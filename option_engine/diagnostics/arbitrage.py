"""
Arbitrage diagnostics for option pricing validation.

This module implements no-arbitrage and cross-model consistency checks:
- Price bounds validation
- Put-call parity
- Early-exercise premium (American >= European)
- Monte Carlo agreement with a reference price

None of the pricers call these checks. They are validation helpers for
callers to run on their own prices and results.
"""

import math

from option_engine.utils.constants import ARBITRAGE_TOLERANCE, PARITY_TOLERANCE
from option_engine.utils.types import ArbitrageCheck, MonteCarloResult, OptionContract


def price_bounds(contract: OptionContract) -> tuple[float, float]:
    """
    Model-free bounds on a European option price.

    Call: max(S - K·e^(-rT), 0) <= C <= S
    Put:  max(K·e^(-rT) - S, 0) <= P <= K·e^(-rT)

    An expired contract is bounded by its intrinsic value on both sides.
    """
    S = contract.spot_price
    if contract.is_expired:
        intrinsic = contract.intrinsic_value
        return intrinsic, intrinsic

    discount_strike = contract.strike_price * math.exp(-contract.risk_free_rate * contract.time_to_expiry)
    if contract.is_call:
        return max(S - discount_strike, 0.0), S
    return max(discount_strike - S, 0.0), discount_strike


def check_price_bounds(
    price: float,
    contract: OptionContract,
    tolerance: float = ARBITRAGE_TOLERANCE,
) -> ArbitrageCheck:
    """
    Validate an option price against no-arbitrage bounds.

    Args:
        price: Observed option price
        contract: Contract the price refers to (volatility is ignored)
        tolerance: Tolerance for floating point comparisons

    Returns:
        ArbitrageCheck with validation results
    """
    violations = []
    lower, upper = price_bounds(contract)
    kind = contract.option_type.value.capitalize()

    if price < lower - tolerance:
        violations.append(f"{kind} price {price:.4f} below lower bound {lower:.4f}")
    if price > upper + tolerance:
        violations.append(f"{kind} price {price:.4f} above upper bound {upper:.4f}")

    details = {"price": price, "lower_bound": lower, "upper_bound": upper}
    return ArbitrageCheck(is_valid=not violations, violations=violations, details=details)


def check_put_call_parity(
    call_price: float,
    put_price: float,
    contract: OptionContract,
    tolerance: float = PARITY_TOLERANCE,
) -> ArbitrageCheck:
    """
    Validate put-call parity relationship.

    Put-call parity:
        C - P = S - K·e^(-rT)

    Args:
        call_price, put_price: Option prices
        contract: Supplies S, K, T and r (type and volatility are ignored)
        tolerance: Tolerance for parity check

    Returns:
        ArbitrageCheck with validation results
    """
    T = max(contract.time_to_expiry, 0.0)
    lhs = call_price - put_price
    rhs = contract.spot_price - contract.strike_price * math.exp(-contract.risk_free_rate * T)

    diff = abs(lhs - rhs)
    is_valid = diff < tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"Put-call parity violated: C - P = {lhs:.6f}, "
            f"S - K·e^(-rT) = {rhs:.6f}, diff = {diff:.6f}"
        )

    details = {"parity_lhs": lhs, "parity_rhs": rhs, "difference": diff}

    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)


def check_early_exercise_premium(
    american_price: float,
    european_price: float,
    tolerance: float = ARBITRAGE_TOLERANCE,
) -> ArbitrageCheck:
    """
    Check that the right to exercise early is never worth less than zero.

    Condition: V_american >= V_european for identical parameters.
    """
    premium = american_price - european_price
    is_valid = premium >= -tolerance

    violations = []
    if not is_valid:
        violations.append(
            f"American price {american_price:.4f} below European price {european_price:.4f}"
        )

    details = {"american": american_price, "european": european_price, "premium": premium}
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)


def check_monte_carlo_consistency(
    result: MonteCarloResult,
    reference_price: float,
    num_standard_errors: float = 2.0,
) -> ArbitrageCheck:
    """
    Check a simulated price against a reference (usually Black-Scholes).

    The reference should lie within num_standard_errors standard errors
    of the simulated value. With a zero standard error (deterministic
    payoff) the values must agree to ARBITRAGE_TOLERANCE.
    """
    diff = abs(result.theoretical_value - reference_price)
    allowed = max(num_standard_errors * result.standard_error, ARBITRAGE_TOLERANCE)
    is_valid = diff <= allowed

    violations = []
    if not is_valid:
        violations.append(
            f"Simulated value {result.theoretical_value:.4f} differs from reference "
            f"{reference_price:.4f} by {diff:.4f} (> {allowed:.4f})"
        )

    details = {
        "simulated": result.theoretical_value,
        "reference": reference_price,
        "difference": diff,
        "standard_error": result.standard_error,
    }
    return ArbitrageCheck(is_valid=is_valid, violations=violations, details=details)
