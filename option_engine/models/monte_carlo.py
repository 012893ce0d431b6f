"""
Monte Carlo pricing of European options under geometric Brownian motion.

Terminal prices are simulated in a single step,

    S_T = S·exp((r - σ²/2)T + σ√T·Z),   Z ~ N(0, 1),

and the option value is the mean of the discounted payoffs. Trials are
split across worker threads, each drawing from its own RandomGenerator;
the workers return partial sums (Σx, Σx², n) which are added together
before the mean and standard error are formed.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from option_engine.core.black_scholes import contract_price
from option_engine.core.rng import RandomGenerator
from option_engine.utils.constants import (
    CONFIDENCE_Z_SCORE,
    DEFAULT_MC_SIMULATIONS,
    EPSILON_VOL,
    MC_BATCH_SIZE,
)
from option_engine.utils.exceptions import InvalidContractError
from option_engine.utils.types import ExerciseStyle, MonteCarloResult, OptionContract

logger = logging.getLogger(__name__)

_METHOD = "monte-carlo"


def _simulate_chunk(
    generator: RandomGenerator,
    num_trials: int,
    contract: OptionContract,
) -> tuple[float, float, int]:
    """Simulate num_trials discounted payoffs and return (Σx, Σx², n)."""
    S = contract.spot_price
    K = contract.strike_price
    T = contract.time_to_expiry
    r = contract.risk_free_rate
    sigma = contract.volatility

    drift = (r - 0.5 * sigma * sigma) * T
    diffusion = sigma * math.sqrt(T)
    discount = math.exp(-r * T)

    total = 0.0
    total_sq = 0.0
    remaining = num_trials
    while remaining > 0:
        batch = min(remaining, MC_BATCH_SIZE)
        z = generator.normals(batch)
        terminal = S * np.exp(drift + diffusion * z)
        if contract.is_call:
            payoffs = discount * np.maximum(terminal - K, 0.0)
        else:
            payoffs = discount * np.maximum(K - terminal, 0.0)
        total += float(payoffs.sum())
        total_sq += float(np.dot(payoffs, payoffs))
        remaining -= batch

    return total, total_sq, num_trials


def _split(num_simulations: int, workers: int) -> list[int]:
    base, extra = divmod(num_simulations, workers)
    return [base + (1 if i < extra else 0) for i in range(workers)]


def monte_carlo_price(
    contract: OptionContract,
    num_simulations: int = DEFAULT_MC_SIMULATIONS,
    seed: Optional[int] = None,
    workers: int = 1,
    generator: Optional[RandomGenerator] = None,
) -> MonteCarloResult:
    """
    Estimate a European option value by simulating terminal prices.

    Args:
        contract: European contract to price
        num_simulations: Total number of simulated paths (>= 2)
        seed: Seed for a fresh RandomGenerator; ignored if generator is given
        workers: Number of threads; each gets an independent child generator
        generator: Caller-owned generator (its Box-Muller spare is honored
            when workers == 1)

    Returns:
        MonteCarloResult with value, standard error and 95% confidence interval

    Raises:
        InvalidContractError: For American contracts or invalid arguments

    Notes:
        - standard_error = sample stdev / √num_simulations, so the interval
          narrows as O(1/√num_simulations)
        - The same seed and worker count reproduce identical results
        - Expired or zero-volatility contracts have a deterministic payoff;
          the closed-form value is returned with a zero standard error
        - When every simulated payoff is zero, as for a deep out-of-the-money
          contract, the standard error is zero and the interval collapses to
          the point estimate
    """
    if isinstance(num_simulations, bool) or not isinstance(num_simulations, (int, np.integer)):
        raise InvalidContractError("num_simulations", num_simulations, "must be an integer")
    if num_simulations < 2:
        raise InvalidContractError("num_simulations", num_simulations, "must be >= 2")
    if isinstance(workers, bool) or not isinstance(workers, (int, np.integer)) or workers < 1:
        raise InvalidContractError("workers", workers, "must be an integer >= 1")
    if contract.exercise_style is ExerciseStyle.AMERICAN:
        raise InvalidContractError(
            "exercise_style",
            contract.exercise_style.value,
            "Monte Carlo simulation prices European exercise only",
        )

    intrinsic = contract.intrinsic_value

    if contract.is_expired or contract.volatility < EPSILON_VOL:
        value = contract_price(contract)
        return MonteCarloResult(
            contract=contract,
            theoretical_value=value,
            intrinsic_value=intrinsic,
            time_value=value - intrinsic,
            method=_METHOD,
            standard_error=0.0,
            confidence_interval=(value, value),
            num_simulations=num_simulations,
        )

    root = generator if generator is not None else RandomGenerator(seed)
    workers = min(workers, num_simulations)

    if workers == 1:
        partials = [_simulate_chunk(root, num_simulations, contract)]
    else:
        chunk_sizes = _split(num_simulations, workers)
        children = root.spawn(workers)
        logger.debug("Monte Carlo: %d trials across %d workers %s", num_simulations, workers, chunk_sizes)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_simulate_chunk, child, size, contract)
                for child, size in zip(children, chunk_sizes)
            ]
            partials = [future.result() for future in futures]

    total = sum(part[0] for part in partials)
    total_sq = sum(part[1] for part in partials)
    n = sum(part[2] for part in partials)

    mean = total / n
    variance = max((total_sq - n * mean * mean) / (n - 1), 0.0)
    standard_error = math.sqrt(variance / n)
    half_width = CONFIDENCE_Z_SCORE * standard_error

    logger.debug("Monte Carlo value %.6f ± %.6f (n=%d)", mean, standard_error, n)

    return MonteCarloResult(
        contract=contract,
        theoretical_value=mean,
        intrinsic_value=intrinsic,
        time_value=mean - intrinsic,
        method=_METHOD,
        standard_error=standard_error,
        confidence_interval=(mean - half_width, mean + half_width),
        num_simulations=n,
    )
