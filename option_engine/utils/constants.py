"""
Numerical constants and tolerances for the option valuation engine.

This module defines thresholds for edge case detection, epsilon floors
for guarded divisions, and default parameters for the solvers and
simulators. All values are calibrated for numerical stability while
keeping every pricer finite across the documented input range.
"""

# Edge case detection thresholds
EPSILON_TIME = 1e-6  # ~30 seconds; below this, use intrinsic value
EPSILON_VOL = 1e-6  # below this, deterministic pricing
EPSILON_DIFFUSION = 1e-10  # floor for σ√T in d1 and gamma denominators
EPSILON_SQRT_TIME = 1e-8  # floor for √T in the theta diffusion term

# Normal distribution bounds
MAX_STANDARD_DEVIATIONS = 8.0  # Beyond ±8σ, CDF is effectively 0 or 1
MAX_PDF_ARGUMENT = 10.0  # Beyond ±10, PDF is effectively 0
ERF_SERIES_LIMIT = 3.0  # Maclaurin series below, continued fraction above
ERF_SATURATION = 6.0  # erfc(6) ~ 2e-17
ERF_CONTINUED_FRACTION_TERMS = 60

# Implied volatility solver parameters
IV_PRICE_TOLERANCE = 1e-4  # $0.0001 price accuracy
IV_MAX_ITERATIONS = 100
IV_MIN_VEGA = 1e-8  # Below this, hand over to Brent
IV_INITIAL_GUESS = 0.3
IV_MIN_VOL = 1e-4  # 0.01% minimum volatility
IV_MAX_VOL = 10.0  # 1000% maximum volatility

# Arbitrage diagnostics tolerances
ARBITRAGE_TOLERANCE = 1e-4  # $0.0001 tolerance for bounds checks
PARITY_TOLERANCE = 1e-2  # Put-call parity tolerance in monetary units

# Greeks finite-difference step sizes
FD_STEP_VOL = 1e-4  # 1 basis point for vega
FD_STEP_RATE = 1e-4  # 1 basis point for rho

# Market display conventions
DAYS_PER_YEAR = 365.0
PERCENT = 100.0

# Binomial lattice
DEFAULT_BINOMIAL_STEPS = 200
MAX_LOG_NODE_PRICE = 700.0  # exp() of this stays below float max

# Monte Carlo
DEFAULT_MC_SIMULATIONS = 100_000
MC_BATCH_SIZE = 65_536  # Trials drawn per vectorized batch
CONFIDENCE_Z_SCORE = 1.96  # 95% two-sided

# Portfolio payoff analysis
BREAKEVEN_TOLERANCE = 1e-9
