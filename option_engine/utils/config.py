"""
Caller-tunable defaults for the valuation engine.
"""

from dataclasses import dataclass
from typing import Optional

from option_engine.utils.constants import (
    DEFAULT_BINOMIAL_STEPS,
    DEFAULT_MC_SIMULATIONS,
    IV_INITIAL_GUESS,
    IV_MAX_ITERATIONS,
    IV_PRICE_TOLERANCE,
)
from option_engine.utils.exceptions import InvalidContractError


@dataclass(frozen=True)
class EngineConfig:
    """
    Default parameters used when a pricing call does not override them.

    Attributes:
        binomial_steps: Tree depth for the binomial pricer (default: 200)
        mc_simulations: Number of Monte Carlo trials (default: 100,000)
        mc_workers: Worker threads for Monte Carlo (default: 1)
        seed: Seed for reproducible simulations (default: None, fresh entropy)
        iv_initial_guess: Newton-Raphson starting volatility (default: 0.3)
        iv_price_tolerance: Price error accepted as converged (default: 1e-4)
        iv_max_iterations: Newton-Raphson iteration cap (default: 100)
    """
    binomial_steps: int = DEFAULT_BINOMIAL_STEPS
    mc_simulations: int = DEFAULT_MC_SIMULATIONS
    mc_workers: int = 1
    seed: Optional[int] = None
    iv_initial_guess: float = IV_INITIAL_GUESS
    iv_price_tolerance: float = IV_PRICE_TOLERANCE
    iv_max_iterations: int = IV_MAX_ITERATIONS

    def __post_init__(self) -> None:
        if self.binomial_steps < 1:
            raise InvalidContractError("binomial_steps", self.binomial_steps, "must be >= 1")
        if self.mc_simulations < 2:
            raise InvalidContractError("mc_simulations", self.mc_simulations, "must be >= 2")
        if self.mc_workers < 1:
            raise InvalidContractError("mc_workers", self.mc_workers, "must be >= 1")
        if not self.iv_initial_guess > 0:
            raise InvalidContractError("iv_initial_guess", self.iv_initial_guess, "must be positive")
        if not self.iv_price_tolerance > 0:
            raise InvalidContractError(
                "iv_price_tolerance", self.iv_price_tolerance, "must be positive"
            )
        if self.iv_max_iterations < 1:
            raise InvalidContractError("iv_max_iterations", self.iv_max_iterations, "must be >= 1")


DEFAULT_CONFIG = EngineConfig()
