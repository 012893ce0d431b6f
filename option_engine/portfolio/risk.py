"""
Portfolio risk aggregation across option positions.

Totals are signed sums of quantity × per-unit figures. Loss, gain and
breakeven analysis use the expiry P&L of the whole book,

    P&L(x) = Σ q_i·payoff_i(x) - Σ q_i·premium_i,

which is piecewise linear in the underlying price x with kinks only at
the strikes. Evaluating it at x = 0, at every strike, and reading the
slope beyond the largest strike therefore gives exact extrema and roots.
"""

import logging
import math
from typing import Sequence

from option_engine.utils.constants import BREAKEVEN_TOLERANCE
from option_engine.utils.exceptions import PortfolioError
from option_engine.utils.types import ZERO_GREEKS, PortfolioPosition, PortfolioRisk

logger = logging.getLogger(__name__)


def _validate_positions(positions: Sequence[PortfolioPosition]) -> None:
    for index, position in enumerate(positions):
        if not isinstance(position, PortfolioPosition):
            raise PortfolioError(index, f"expected PortfolioPosition, got {type(position).__name__}")
        if not math.isfinite(position.quantity):
            raise PortfolioError(index, f"quantity must be finite, got {position.quantity}")
        if not math.isfinite(position.premium_paid) or position.premium_paid < 0:
            raise PortfolioError(
                index, f"premium_paid must be finite and non-negative, got {position.premium_paid}"
            )
        if position.valuation.greeks is None:
            raise PortfolioError(
                index,
                f"valuation from '{position.valuation.method}' carries no Greeks; "
                "aggregate Greeks would be incomplete",
            )


def payoff_at_expiry(positions: Sequence[PortfolioPosition], spot: float) -> float:
    """
    Net profit or loss of the book if the underlying settles at spot.

    Args:
        positions: Positions to evaluate
        spot: Underlying price at expiry (>= 0)

    Returns:
        Σ quantity × (intrinsic payoff at spot - premium paid)
    """
    total = 0.0
    for position in positions:
        contract = position.contract
        if contract.is_call:
            payoff = max(spot - contract.strike_price, 0.0)
        else:
            payoff = max(contract.strike_price - spot, 0.0)
        total += position.quantity * (payoff - position.premium_paid)
    return total


def _breakevens(
    points: list[tuple[float, float]], terminal_slope: float
) -> list[float]:
    """Roots of the piecewise-linear P&L through points, extended by terminal_slope."""
    roots = []
    for (a, va), (b, vb) in zip(points, points[1:]):
        if abs(va) <= BREAKEVEN_TOLERANCE:
            roots.append(a)
        elif va * vb < 0:
            roots.append(a + (b - a) * va / (va - vb))

    last_x, last_v = points[-1]
    if abs(last_v) <= BREAKEVEN_TOLERANCE:
        roots.append(last_x)
    elif abs(terminal_slope) > BREAKEVEN_TOLERANCE and last_v * terminal_slope < 0:
        roots.append(last_x - last_v / terminal_slope)

    unique = []
    for root in sorted(roots):
        if not unique or abs(root - unique[-1]) > BREAKEVEN_TOLERANCE * max(1.0, abs(root)):
            unique.append(root)
    return unique


def analyze_portfolio(positions: Sequence[PortfolioPosition]) -> PortfolioRisk:
    """
    Aggregate value, Greeks and expiry risk across positions.

    Args:
        positions: Valued positions; each valuation must carry Greeks

    Returns:
        PortfolioRisk; an empty portfolio yields all-zero aggregates

    Raises:
        PortfolioError: If any position is invalid or lacks Greeks. The
            whole call fails so that partial Greek sums are never reported.

    Examples:
        A single long call bought for 10.45 at strike 100 has max_loss 10.45,
        unbounded max_gain, and breakeven [110.45].
    """
    positions = list(positions)
    if not positions:
        return PortfolioRisk()

    _validate_positions(positions)

    total_value = 0.0
    totals = ZERO_GREEKS
    net_premium = 0.0
    for position in positions:
        total_value += position.quantity * position.valuation.theoretical_value
        totals = totals + position.valuation.greeks.scaled(position.quantity)
        net_premium += position.quantity * position.premium_paid

    strikes = sorted({position.contract.strike_price for position in positions})
    candidates = [0.0] + strikes
    points = [(x, payoff_at_expiry(positions, x)) for x in candidates]

    # Beyond the highest strike only calls still move with the underlying
    terminal_slope = sum(p.quantity for p in positions if p.contract.is_call)

    pnl_values = [v for _, v in points]
    min_pnl = min(pnl_values)
    max_pnl = max(pnl_values)

    if terminal_slope < -BREAKEVEN_TOLERANCE:
        max_loss = math.inf
    else:
        max_loss = max(0.0, -min_pnl)

    if terminal_slope > BREAKEVEN_TOLERANCE:
        max_gain = math.inf
    else:
        max_gain = max_pnl

    breakeven = _breakevens(points, terminal_slope)

    logger.debug(
        "Analyzed %d positions: value=%.4f delta=%.4f breakeven=%s",
        len(positions),
        total_value,
        totals.delta,
        breakeven,
    )

    return PortfolioRisk(
        total_value=total_value,
        total_delta=totals.delta,
        total_gamma=totals.gamma,
        total_theta=totals.theta,
        total_vega=totals.vega,
        total_rho=totals.rho,
        net_premium=net_premium,
        max_loss=max_loss,
        max_gain=max_gain,
        breakeven=breakeven,
        position_count=len(positions),
    )
