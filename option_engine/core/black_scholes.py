"""
Black-Scholes option pricing model and analytic Greeks.

This module implements the classical Black-Scholes formula for European
options on a non-dividend-paying underlying, together with the standard
first- and second-order sensitivities. Every function stays finite for
zero time, zero volatility and very large volatility.

Mathematical Background:
    The Black-Scholes formula prices European options under assumptions:
    - Log-normal asset price distribution
    - Constant volatility and interest rate
    - No transaction costs or taxes
    - Continuous trading possible

References:
    Black, F., & Scholes, M. (1973). The Pricing of Options and Corporate Liabilities.
    Journal of Political Economy, 81(3), 637-654.
"""

import math
from typing import Union

from option_engine.core.distributions import normal_cdf, normal_pdf
from option_engine.utils.constants import (
    EPSILON_DIFFUSION,
    EPSILON_SQRT_TIME,
    EPSILON_TIME,
    EPSILON_VOL,
    MAX_STANDARD_DEVIATIONS,
)
from option_engine.utils.exceptions import InvalidContractError
from option_engine.utils.types import (
    GreekSet,
    OptionContract,
    OptionType,
    Valuation,
    as_option_type,
    require_finite,
)


def _validate_inputs(S: float, K: float, T: float, r: float, sigma: float) -> None:
    """
    Validate option pricing inputs.

    Negative T is allowed and means the option has already expired.

    Raises:
        InvalidContractError: If any input is non-finite or out of range
    """
    for name, value in (("S", S), ("K", K), ("T", T), ("r", r), ("sigma", sigma)):
        require_finite(name, value)
    if S <= 0:
        raise InvalidContractError("S", S, "spot price must be positive")
    if K <= 0:
        raise InvalidContractError("K", K, "strike price must be positive")
    if sigma < 0:
        raise InvalidContractError("sigma", sigma, "volatility cannot be negative")


def _diffusion(T: float, sigma: float) -> float:
    """σ√T floored so it can be used as a divisor."""
    return max(sigma * math.sqrt(T), EPSILON_DIFFUSION)


def intrinsic_value(S: float, K: float, option_type: Union[OptionType, str] = OptionType.CALL) -> float:
    """Immediate exercise value: max(S - K, 0) for calls, max(K - S, 0) for puts."""
    if as_option_type(option_type) is OptionType.CALL:
        return max(S - K, 0.0)
    return max(K - S, 0.0)


def d1(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate d1 parameter in Black-Scholes formula.

    Args:
        S: Current spot price
        K: Strike price
        T: Time to expiration in years
        r: Risk-free interest rate (annualized, continuous)
        sigma: Volatility (annualized standard deviation)

    Returns:
        The d1 parameter; ±inf for an expired option

    Formula:
        d1 = [ln(S/K) + (r + σ²/2)T] / (σ√T)

    Notes:
        Uses log(S) - log(K) to prevent overflow for extreme S/K. The
        denominator is floored at EPSILON_DIFFUSION, so a zero volatility
        gives a large but finite d1 with the sign of forward moneyness.
    """
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        return math.inf if S > K else -math.inf

    log_moneyness = math.log(S) - math.log(K)
    drift = (r + 0.5 * sigma * sigma) * T

    return (log_moneyness + drift) / _diffusion(T, sigma)


def d2(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate d2 = d1 - σ√T.

    For a call, N(d2) is the risk-neutral probability of exercise.
    """
    d1_value = d1(S, K, T, r, sigma)

    if T <= 0:
        return d1_value

    return d1_value - sigma * math.sqrt(T)


def black_scholes_call(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate European call option price using Black-Scholes formula.

    Formula:
        C = S·N(d1) - K·e^(-rT)·N(d2)

    Examples:
        >>> # ATM call with 1 year to expiry, 20% vol, 5% rate
        >>> price = black_scholes_call(100, 100, 1.0, 0.05, 0.20)
        >>> abs(price - 10.4506) < 0.01  # Known solution
        True

    Edge Cases:
        - T <= 0: already expired, returns max(S - K, 0)
        - T → 0: returns max(S - K, 0) (intrinsic value)
        - σ → 0: returns max(S·e^(rT) - K, 0)·e^(-rT) (deterministic)
        - Deep ITM (d2 > 8): returns S - K·e^(-rT)
        - Deep OTM (d1 < -8): returns 0
    """
    _validate_inputs(S, K, T, r, sigma)

    if T < EPSILON_TIME:
        return max(S - K, 0.0)

    discount = math.exp(-r * T)

    # Deterministic asset: grows at r, so the payoff is known today
    if sigma < EPSILON_VOL:
        forward_price = S / discount
        return max(forward_price - K, 0.0) * discount

    d1_value = d1(S, K, T, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(T)

    if d2_value > MAX_STANDARD_DEVIATIONS:
        return max(S - K * discount, 0.0)

    if d1_value < -MAX_STANDARD_DEVIATIONS:
        return 0.0

    value = S * normal_cdf(d1_value) - K * discount * normal_cdf(d2_value)
    return max(value, 0.0)


def black_scholes_put(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate European put option price using Black-Scholes formula.

    Formula:
        P = K·e^(-rT)·N(-d2) - S·N(-d1)

    Alternatively (via put-call parity):
        P = C - S + K·e^(-rT)

    Examples:
        >>> price = black_scholes_put(100, 100, 1.0, 0.05, 0.20)
        >>> abs(price - 5.5735) < 0.01  # Known solution
        True
    """
    _validate_inputs(S, K, T, r, sigma)

    if T < EPSILON_TIME:
        return max(K - S, 0.0)

    discount = math.exp(-r * T)

    if sigma < EPSILON_VOL:
        forward_price = S / discount
        return max(K - forward_price, 0.0) * discount

    d1_value = d1(S, K, T, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(T)

    if d1_value < -MAX_STANDARD_DEVIATIONS:
        return max(K * discount - S, 0.0)

    if d2_value > MAX_STANDARD_DEVIATIONS:
        return 0.0

    value = K * discount * normal_cdf(-d2_value) - S * normal_cdf(-d1_value)
    return max(value, 0.0)


def black_scholes_price(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Union[OptionType, str] = OptionType.CALL,
) -> float:
    """
    Calculate European option price (call or put).

    Raises:
        InvalidContractError: If option_type is not a call or a put
    """
    if as_option_type(option_type) is OptionType.CALL:
        return black_scholes_call(S, K, T, r, sigma)
    return black_scholes_put(S, K, T, r, sigma)


# ===========================
# Greeks Calculations
# ===========================


def delta(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Union[OptionType, str] = OptionType.CALL,
) -> float:
    """
    Calculate option delta (∂V/∂S).

    Formulas:
        Call delta: Δ_c = N(d1)         ∈ [0, 1]
        Put delta:  Δ_p = N(d1) - 1     ∈ [-1, 0]

    At expiry delta is a step function of moneyness.
    """
    option_type = as_option_type(option_type)
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        if option_type is OptionType.CALL:
            return 1.0 if S > K else 0.0
        return -1.0 if S < K else 0.0

    cdf_d1 = normal_cdf(d1(S, K, T, r, sigma))

    if option_type is OptionType.CALL:
        return cdf_d1
    return cdf_d1 - 1.0


def gamma(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate option gamma (∂²V/∂S²), identical for calls and puts.

    Formula:
        Γ = φ(d1) / (S · σ · √T)

    The denominator is floored, so gamma stays finite (and collapses to
    zero away from the money) as T or σ approach zero.
    """
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        return 0.0

    pdf_d1 = normal_pdf(d1(S, K, T, r, sigma))
    return pdf_d1 / (S * _diffusion(T, sigma))


def vega(S: float, K: float, T: float, r: float, sigma: float) -> float:
    """
    Calculate option vega (∂V/∂σ), identical for calls and puts.

    Formula:
        ν = S · φ(d1) · √T

    Returned per unit of volatility; divide by 100 for a 1 vol-point move.
    """
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        return 0.0

    pdf_d1 = normal_pdf(d1(S, K, T, r, sigma))
    return S * pdf_d1 * math.sqrt(T)


def theta(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Union[OptionType, str] = OptionType.CALL,
) -> float:
    """
    Calculate option theta, the value change per year of calendar time.

    Formulas:
        Θ_c = -S·φ(d1)·σ/(2√T) - r·K·e^(-rT)·N(d2)
        Θ_p = -S·φ(d1)·σ/(2√T) + r·K·e^(-rT)·N(-d2)

    Notes:
        Annualized; divide by 365 for a per-day figure.
    """
    option_type = as_option_type(option_type)
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        return 0.0

    d1_value = d1(S, K, T, r, sigma)
    d2_value = d1_value - sigma * math.sqrt(T)
    sqrt_T = max(math.sqrt(T), EPSILON_SQRT_TIME)
    discount_strike = K * math.exp(-r * T)

    # Diffusion contribution, same for call and put
    term1 = -(S * normal_pdf(d1_value) * sigma) / (2.0 * sqrt_T)

    if option_type is OptionType.CALL:
        return term1 - r * discount_strike * normal_cdf(d2_value)
    return term1 + r * discount_strike * normal_cdf(-d2_value)


def rho(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Union[OptionType, str] = OptionType.CALL,
) -> float:
    """
    Calculate option rho (∂V/∂r) per unit of rate.

    Formulas:
        Call rho: ρ_c = K·T·e^(-rT)·N(d2)    >= 0
        Put rho:  ρ_p = -K·T·e^(-rT)·N(-d2)  <= 0
    """
    option_type = as_option_type(option_type)
    _validate_inputs(S, K, T, r, sigma)

    if T <= 0:
        return 0.0

    d2_value = d2(S, K, T, r, sigma)
    discount_strike = K * T * math.exp(-r * T)

    if option_type is OptionType.CALL:
        return discount_strike * normal_cdf(d2_value)
    return -discount_strike * normal_cdf(-d2_value)


def calculate_greeks(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Union[OptionType, str] = OptionType.CALL,
) -> GreekSet:
    """
    Calculate all Greeks for an option in one pass.

    Example:
        >>> greeks = calculate_greeks(100, 100, 1.0, 0.05, 0.20)
        >>> print(f"Delta: {greeks.delta:.4f}")
        Delta: 0.6368
    """
    return GreekSet(
        delta=delta(S, K, T, r, sigma, option_type),
        gamma=gamma(S, K, T, r, sigma),
        theta=theta(S, K, T, r, sigma, option_type),
        vega=vega(S, K, T, r, sigma),
        rho=rho(S, K, T, r, sigma, option_type),
    )


def contract_price(contract: OptionContract) -> float:
    return black_scholes_price(
        contract.spot_price,
        contract.strike_price,
        contract.time_to_expiry,
        contract.risk_free_rate,
        contract.volatility,
        contract.option_type,
    )


def contract_greeks(contract: OptionContract) -> GreekSet:
    return calculate_greeks(
        contract.spot_price,
        contract.strike_price,
        contract.time_to_expiry,
        contract.risk_free_rate,
        contract.volatility,
        contract.option_type,
    )


def black_scholes_valuation(contract: OptionContract) -> Valuation:
    """Price a contract in closed form and attach its analytic Greeks."""
    return Valuation.from_value(
        contract,
        contract_price(contract),
        method="black-scholes",
        greeks=contract_greeks(contract),
    )
