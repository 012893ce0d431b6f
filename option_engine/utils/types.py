"""
Data types and structures for option valuation.

This module defines the immutable value types passed between the pricers:
contracts, Greeks, valuations, solver results, portfolio positions, and
the closed set of pricing methods.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from numbers import Integral, Real
from typing import Optional, Union

from option_engine.utils.constants import (
    DAYS_PER_YEAR,
    DEFAULT_BINOMIAL_STEPS,
    DEFAULT_MC_SIMULATIONS,
    PERCENT,
)
from option_engine.utils.exceptions import InvalidContractError


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"


class ExerciseStyle(str, Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class SolverMethod(str, Enum):
    AUTO = "auto"
    NEWTON = "newton"
    BRENT = "brent"


def _coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        value = value.lower()
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidContractError(field_name, value, f"expected one of {allowed}") from None


def as_option_type(value: Union["OptionType", str]) -> OptionType:
    """Coerce 'call'/'put' (any case) to OptionType, rejecting anything else."""
    return _coerce_enum(OptionType, value, "option_type")


def as_exercise_style(value: Union["ExerciseStyle", str]) -> ExerciseStyle:
    return _coerce_enum(ExerciseStyle, value, "exercise_style")


def as_solver_method(value: Union["SolverMethod", str]) -> SolverMethod:
    return _coerce_enum(SolverMethod, value, "method")


def require_finite(field_name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidContractError(field_name, value, "must be a real number")
    if not math.isfinite(value):
        raise InvalidContractError(field_name, value, "must be finite")


@dataclass(frozen=True)
class OptionContract:
    """
    Immutable container for the parameters of one pricing request.

    Attributes:
        spot_price: Current price of the underlying asset (> 0)
        strike_price: Strike price (> 0)
        time_to_expiry: Time to expiration in years; zero or negative means expired
        risk_free_rate: Risk-free rate (annualized, continuous compounding), may be <= 0
        volatility: Annualized volatility (>= 0)
        option_type: OptionType.CALL or OptionType.PUT
        exercise_style: ExerciseStyle.EUROPEAN or AMERICAN (binomial pricer only)
    """
    spot_price: float
    strike_price: float
    time_to_expiry: float
    risk_free_rate: float
    volatility: float
    option_type: OptionType = OptionType.CALL
    exercise_style: ExerciseStyle = ExerciseStyle.EUROPEAN

    def __post_init__(self) -> None:
        """Validate parameters and coerce enum fields given as strings."""
        for name in ("spot_price", "strike_price", "time_to_expiry", "risk_free_rate", "volatility"):
            require_finite(name, getattr(self, name))
        if self.spot_price <= 0:
            raise InvalidContractError("spot_price", self.spot_price, "must be positive")
        if self.strike_price <= 0:
            raise InvalidContractError("strike_price", self.strike_price, "must be positive")
        if self.volatility < 0:
            raise InvalidContractError("volatility", self.volatility, "cannot be negative")

        object.__setattr__(self, "option_type", as_option_type(self.option_type))
        object.__setattr__(self, "exercise_style", as_exercise_style(self.exercise_style))

    @classmethod
    def from_expiration(
        cls,
        spot_price: float,
        strike_price: float,
        expiration: datetime,
        risk_free_rate: float,
        volatility: float,
        option_type: Union[OptionType, str] = OptionType.CALL,
        exercise_style: Union[ExerciseStyle, str] = ExerciseStyle.EUROPEAN,
        as_of: Optional[datetime] = None,
    ) -> "OptionContract":
        """
        Build a contract from a calendar expiration date.

        Time to expiry is measured in 365-day years from ``as_of`` (default:
        now). An expiration in the past yields a negative time, which the
        pricers treat as an expired contract.
        """
        if as_of is None:
            as_of = datetime.now(tz=expiration.tzinfo)
        seconds = (expiration - as_of).total_seconds()
        return cls(
            spot_price=spot_price,
            strike_price=strike_price,
            time_to_expiry=seconds / (86400.0 * DAYS_PER_YEAR),
            risk_free_rate=risk_free_rate,
            volatility=volatility,
            option_type=option_type,
            exercise_style=exercise_style,
        )

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    @property
    def is_expired(self) -> bool:
        return self.time_to_expiry <= 0

    @property
    def intrinsic_value(self) -> float:
        """Immediate exercise value: max(S-K, 0) for calls, max(K-S, 0) for puts."""
        if self.is_call:
            return max(self.spot_price - self.strike_price, 0.0)
        return max(self.strike_price - self.spot_price, 0.0)

    def with_volatility(self, volatility: float) -> "OptionContract":
        return replace(self, volatility=volatility)

    def with_exercise_style(self, exercise_style: Union[ExerciseStyle, str]) -> "OptionContract":
        return replace(self, exercise_style=exercise_style)


@dataclass(frozen=True)
class GreekSet:
    """
    Container for option Greeks in raw analytic units.

    Attributes:
        delta: ∂V/∂S
        gamma: ∂²V/∂S²
        theta: ∂V/∂t per year (calendar time passing, so usually negative)
        vega: ∂V/∂σ per unit of volatility (1.00 = 100 vol points)
        rho: ∂V/∂r per unit of rate (1.00 = 100%)
    """
    delta: float
    gamma: float
    theta: float
    vega: float
    rho: float

    def to_market_units(self) -> "GreekSet":
        """Theta per calendar day, vega per vol point, rho per 1% rate move."""
        return GreekSet(
            delta=self.delta,
            gamma=self.gamma,
            theta=self.theta / DAYS_PER_YEAR,
            vega=self.vega / PERCENT,
            rho=self.rho / PERCENT,
        )

    def scaled(self, quantity: float) -> "GreekSet":
        return GreekSet(
            delta=self.delta * quantity,
            gamma=self.gamma * quantity,
            theta=self.theta * quantity,
            vega=self.vega * quantity,
            rho=self.rho * quantity,
        )

    def __add__(self, other: "GreekSet") -> "GreekSet":
        if not isinstance(other, GreekSet):
            return NotImplemented
        return GreekSet(
            delta=self.delta + other.delta,
            gamma=self.gamma + other.gamma,
            theta=self.theta + other.theta,
            vega=self.vega + other.vega,
            rho=self.rho + other.rho,
        )


ZERO_GREEKS = GreekSet(delta=0.0, gamma=0.0, theta=0.0, vega=0.0, rho=0.0)


@dataclass(frozen=True)
class Valuation:
    """
    Output of any pricer for one contract.

    Attributes:
        contract: The contract that was priced
        theoretical_value: Model value (>= 0)
        intrinsic_value: Immediate exercise value
        time_value: theoretical_value - intrinsic_value
        method: Label of the pricer that produced the value
        greeks: Sensitivities, or None when the method does not compute them
    """
    contract: OptionContract
    theoretical_value: float
    intrinsic_value: float
    time_value: float
    method: str
    greeks: Optional[GreekSet] = None

    @classmethod
    def from_value(
        cls,
        contract: OptionContract,
        value: float,
        method: str,
        greeks: Optional[GreekSet] = None,
    ) -> "Valuation":
        intrinsic = contract.intrinsic_value
        return cls(
            contract=contract,
            theoretical_value=value,
            intrinsic_value=intrinsic,
            time_value=value - intrinsic,
            method=method,
            greeks=greeks,
        )


@dataclass(frozen=True)
class MonteCarloResult(Valuation):
    """
    Monte Carlo valuation with its sampling error.

    Attributes:
        standard_error: Sample standard deviation of payoffs / √num_simulations
        confidence_interval: 95% interval (value - 1.96·SE, value + 1.96·SE)
        num_simulations: Number of simulated terminal prices
    """
    standard_error: float = 0.0
    confidence_interval: tuple[float, float] = (0.0, 0.0)
    num_simulations: int = 0


@dataclass(frozen=True)
class ImpliedVolResult:
    """
    Result from implied volatility solver.

    Attributes:
        volatility: Solved implied volatility (annualized)
        iterations: Number of iterations used
        method: 'newton-raphson', 'brent', or 'intrinsic'
        converged: False when the volatility is only a best estimate
        price_error: |BS(volatility) - market_price|
        message: Additional information about convergence
    """
    volatility: float
    iterations: int
    method: str
    converged: bool
    price_error: float = 0.0
    message: str = ""


@dataclass(frozen=True)
class ArbitrageCheck:
    """
    Result from a no-arbitrage validation.

    Attributes:
        is_valid: Whether the prices satisfy the condition
        violations: Human-readable description of each violation
        details: Numeric values used by the check
    """
    is_valid: bool
    violations: list[str]
    details: dict[str, float]


@dataclass(frozen=True)
class PortfolioPosition:
    """
    A valued contract held in a signed quantity.

    Attributes:
        valuation: Per-unit valuation of the contract
        quantity: Number of units; positive is long, negative is short
        premium_paid: Per-unit premium paid (received, for shorts);
            defaults to the valuation's theoretical value
    """
    valuation: Valuation
    quantity: float
    premium_paid: Optional[float] = None

    def __post_init__(self) -> None:
        if self.premium_paid is None:
            object.__setattr__(self, "premium_paid", self.valuation.theoretical_value)

    @property
    def contract(self) -> OptionContract:
        return self.valuation.contract


@dataclass(frozen=True)
class PortfolioRisk:
    """
    Aggregate risk across a collection of positions.

    Attributes:
        total_value, total_delta, total_gamma, total_theta, total_vega, total_rho:
            Signed sums of quantity × per-unit figure
        net_premium: Σ quantity × premium_paid (positive = net debit)
        max_loss: Worst-case loss at expiry (>= 0, may be math.inf)
        max_gain: Best-case profit at expiry (may be math.inf)
        breakeven: Underlying prices where expiry P&L is zero, ascending
        position_count: Number of positions aggregated
    """
    total_value: float = 0.0
    total_delta: float = 0.0
    total_gamma: float = 0.0
    total_theta: float = 0.0
    total_vega: float = 0.0
    total_rho: float = 0.0
    net_premium: float = 0.0
    max_loss: float = 0.0
    max_gain: float = 0.0
    breakeven: list[float] = field(default_factory=list)
    position_count: int = 0


# ===========================
# Pricing Methods
# ===========================


@dataclass(frozen=True)
class BlackScholes:
    """Closed-form European pricing with analytic Greeks."""

    label = "black-scholes"


@dataclass(frozen=True)
class Binomial:
    """Cox-Ross-Rubinstein lattice with the given number of steps."""

    steps: int = DEFAULT_BINOMIAL_STEPS
    label = "binomial"

    def __post_init__(self) -> None:
        if isinstance(self.steps, bool) or not isinstance(self.steps, Integral) or self.steps < 1:
            raise InvalidContractError("steps", self.steps, "must be an integer >= 1")


@dataclass(frozen=True)
class MonteCarlo:
    """Geometric Brownian motion simulation of terminal prices."""

    num_simulations: int = DEFAULT_MC_SIMULATIONS
    seed: Optional[int] = None
    workers: int = 1
    label = "monte-carlo"

    def __post_init__(self) -> None:
        if (
            isinstance(self.num_simulations, bool)
            or not isinstance(self.num_simulations, Integral)
            or self.num_simulations < 2
        ):
            raise InvalidContractError(
                "num_simulations", self.num_simulations, "must be an integer >= 2"
            )
        if isinstance(self.workers, bool) or not isinstance(self.workers, Integral) or self.workers < 1:
            raise InvalidContractError("workers", self.workers, "must be an integer >= 1")


PricingMethod = Union[BlackScholes, Binomial, MonteCarlo]
