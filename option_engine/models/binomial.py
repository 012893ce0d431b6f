"""
Cox-Ross-Rubinstein binomial lattice for European and American options.

The tree discretizes [0, T] into n steps of Δt = T/n. Each step the asset
moves up by u = e^(σ√Δt) or down by d = 1/u, with risk-neutral
probability p = (e^(rΔt) - d) / (u - d) of an up move. Option values are
found by backward induction from the n+1 terminal payoffs; American
exercise compares continuation with immediate exercise at every node.

References:
    Cox, J. C., Ross, S. A., & Rubinstein, M. (1979). Option Pricing: A
    Simplified Approach. Journal of Financial Economics, 7(3), 229-263.
"""

import logging
import math
from dataclasses import replace
from typing import Optional

import numpy as np

from option_engine.core.black_scholes import contract_greeks
from option_engine.utils.constants import (
    DEFAULT_BINOMIAL_STEPS,
    EPSILON_VOL,
    MAX_LOG_NODE_PRICE,
    FD_STEP_RATE,
    FD_STEP_VOL,
)
from option_engine.utils.exceptions import InvalidContractError, LatticeError
from option_engine.utils.types import ExerciseStyle, GreekSet, OptionContract, Valuation

logger = logging.getLogger(__name__)


def _payoff(prices: np.ndarray, strike: float, is_call: bool) -> np.ndarray:
    if is_call:
        return np.maximum(prices - strike, 0.0)
    return np.maximum(strike - prices, 0.0)


def _node_prices(S: float, log_u: float, step: int) -> np.ndarray:
    """
    Asset prices at one level of the tree, highest first.

    Node j at step n sits at S·u^(n-2j). Log-prices are capped at
    MAX_LOG_NODE_PRICE so very tall trees stay finite; capping only lowers
    nodes that are far out of the money for a put and bounded by S in value
    for a call.
    """
    log_prices = math.log(S) + log_u * (step - 2.0 * np.arange(step + 1))
    return np.exp(np.minimum(log_prices, MAX_LOG_NODE_PRICE))


def _validate_steps(steps: int) -> None:
    if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)) or steps < 1:
        raise InvalidContractError("steps", steps, "must be an integer >= 1")


def _deterministic_value(contract: OptionContract) -> float:
    """
    Value when volatility is zero and the asset grows at the risk-free rate.

    European: the known terminal payoff, discounted. American: the better
    of that and exercising now (with a monotone forward the optimal
    exercise time is always an endpoint).
    """
    T = contract.time_to_expiry
    discount = math.exp(-contract.risk_free_rate * T)
    forward = contract.spot_price / discount
    if contract.is_call:
        european = max(forward - contract.strike_price, 0.0) * discount
    else:
        european = max(contract.strike_price - forward, 0.0) * discount

    if contract.exercise_style is ExerciseStyle.AMERICAN:
        return max(european, contract.intrinsic_value)
    return european


def _build_levels(contract: OptionContract, steps: int) -> dict[int, np.ndarray]:
    """
    Run backward induction and keep the option values of the first levels.

    Returns:
        Mapping of step index (0, 1, 2 where available) to node values,
        ordered from the highest asset price down.

    Raises:
        LatticeError: If p falls outside [0, 1] for this step count
    """
    S = contract.spot_price
    K = contract.strike_price
    T = contract.time_to_expiry
    r = contract.risk_free_rate
    sigma = contract.volatility
    is_call = contract.is_call
    american = contract.exercise_style is ExerciseStyle.AMERICAN

    dt = T / steps
    u = math.exp(sigma * math.sqrt(dt))
    d = 1.0 / u
    p = (math.exp(r * dt) - d) / (u - d)

    if not 0.0 <= p <= 1.0:
        # Need |r|Δt < σ√Δt, i.e. n > T·r²/σ²
        min_steps = int(math.floor(T * r * r / (sigma * sigma))) + 1
        raise LatticeError(steps, p, max(min_steps, steps + 1))

    discount = math.exp(-r * dt)
    logger.debug("CRR lattice: steps=%d dt=%.6g u=%.6f d=%.6f p=%.6f", steps, dt, u, d, p)

    log_u = sigma * math.sqrt(dt)
    values = _payoff(_node_prices(S, log_u, steps), K, is_call)

    levels = {}
    if steps <= 2:
        levels[steps] = values.copy()

    for step in range(steps - 1, -1, -1):
        values = discount * (p * values[:-1] + (1.0 - p) * values[1:])
        if american:
            values = np.maximum(values, _payoff(_node_prices(S, log_u, step), K, is_call))
        if step <= 2:
            levels[step] = values.copy()

    return levels


def binomial_price(contract: OptionContract, steps: int = DEFAULT_BINOMIAL_STEPS) -> float:
    """
    Price a contract on a CRR tree with the given number of steps.

    Args:
        contract: Contract to price; exercise_style selects European or American
        steps: Number of time steps (>= 1)

    Returns:
        Option value at the root of the tree

    Edge Cases:
        - T <= 0: returns intrinsic value
        - σ → 0: deterministic forward payoff (see _deterministic_value)

    Raises:
        InvalidContractError: If steps < 1
        LatticeError: If the tree is too coarse for the rate (p outside [0, 1])

    Example:
        >>> contract = OptionContract(100, 100, 1.0, 0.05, 0.20, "put", "american")
        >>> round(binomial_price(contract, steps=500), 2)
        6.09
    """
    _validate_steps(steps)

    if contract.is_expired:
        return contract.intrinsic_value

    if contract.volatility < EPSILON_VOL:
        return _deterministic_value(contract)

    return float(_build_levels(contract, steps)[0][0])


def _lattice_greeks(contract: OptionContract, steps: int) -> tuple[float, GreekSet]:
    """Root value plus delta, gamma and theta read off the tree, vega and rho by bumping."""
    levels = _build_levels(contract, steps)
    S = contract.spot_price
    sigma = contract.volatility
    dt = contract.time_to_expiry / steps
    u = math.exp(sigma * math.sqrt(dt))
    d = 1.0 / u

    value = float(levels[0][0])
    up, down = levels[1]
    delta = (up - down) / (S * u - S * d)

    upup, mid, downdown = levels[2]
    delta_up = (upup - mid) / (S * u * u - S)
    delta_down = (mid - downdown) / (S - S * d * d)
    gamma = (delta_up - delta_down) / (0.5 * (S * u * u - S * d * d))

    # Node (2, 1) has the same asset price as the root, two steps later
    theta = (mid - value) / (2.0 * dt)

    if sigma > FD_STEP_VOL:
        vol_up = binomial_price(replace(contract, volatility=sigma + FD_STEP_VOL), steps)
        vol_down = binomial_price(replace(contract, volatility=sigma - FD_STEP_VOL), steps)
        vega = (vol_up - vol_down) / (2.0 * FD_STEP_VOL)
    else:
        vol_up = binomial_price(replace(contract, volatility=sigma + FD_STEP_VOL), steps)
        vega = (vol_up - value) / FD_STEP_VOL

    r = contract.risk_free_rate
    rate_up = binomial_price(replace(contract, risk_free_rate=r + FD_STEP_RATE), steps)
    rate_down = binomial_price(replace(contract, risk_free_rate=r - FD_STEP_RATE), steps)
    rho = (rate_up - rate_down) / (2.0 * FD_STEP_RATE)

    greeks = GreekSet(
        delta=float(delta),
        gamma=float(gamma),
        theta=float(theta),
        vega=float(vega),
        rho=float(rho),
    )
    return value, greeks


def binomial_valuation(
    contract: OptionContract, steps: int = DEFAULT_BINOMIAL_STEPS
) -> Valuation:
    """
    Price a contract on a CRR tree and attach lattice Greeks.

    Delta, gamma and theta come from the first two levels of the tree;
    vega and rho from central finite differences of repriced trees.
    Greeks are omitted (None) when the tree is too short (steps < 2) or
    degenerate (σ → 0). An expired contract gets step-function Greeks.
    """
    _validate_steps(steps)
    method = f"binomial({steps})"

    if contract.is_expired:
        return Valuation.from_value(
            contract, contract.intrinsic_value, method, greeks=contract_greeks(contract)
        )

    greeks: Optional[GreekSet] = None
    if contract.volatility < EPSILON_VOL or steps < 2:
        value = binomial_price(contract, steps)
    else:
        value, greeks = _lattice_greeks(contract, steps)

    return Valuation.from_value(contract, value, method, greeks=greeks)
