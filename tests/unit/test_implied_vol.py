"""
Unit tests for implied volatility solver.

This module validates:
1. Round-trip accuracy (solve IV from synthetic prices)
2. Arbitrage bounds validation
3. Convergence behavior for various scenarios
4. Newton-Raphson vs Brent fallback logic
"""

import pytest
from option_engine.core.black_scholes import black_scholes_call, black_scholes_put
from option_engine.solvers.brent import brent_iv
from option_engine.solvers.implied_vol import implied_volatility, implied_volatility_smile
from option_engine.solvers.newton_raphson import newton_raphson_iv
from option_engine.utils.constants import IV_MIN_VOL
from option_engine.utils.exceptions import InvalidContractError
from option_engine.utils.types import OptionContract


def _contract(S=100.0, K=100.0, T=1.0, r=0.05, option_type="call"):
    return OptionContract(S, K, T, r, 0.0, option_type)


# ===========================
# Round-Trip Tests
# ===========================


def test_roundtrip_atm_call():
    """Solve for IV from synthetic ATM call price, should recover original volatility."""
    true_sigma = 0.25
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, true_sigma)

    result = implied_volatility(market_price, _contract())

    assert result.converged, f"Solver failed: {result.message}"
    assert abs(result.volatility - true_sigma) < 1e-3, f"Expected {true_sigma}, got {result.volatility}"
    assert result.price_error < 1e-4


def test_roundtrip_atm_put():
    """Solve for IV from synthetic ATM put price."""
    true_sigma = 0.30
    market_price = black_scholes_put(100.0, 100.0, 1.0, 0.05, true_sigma)

    result = implied_volatility(market_price, _contract(option_type="put"))

    assert result.converged
    assert abs(result.volatility - true_sigma) < 1e-3


@pytest.mark.parametrize(
    "true_sigma",
    [0.05, 0.10, 0.20, 0.30, 0.50, 0.75, 1.00],
)
def test_roundtrip_various_volatilities(true_sigma):
    """Test round-trip across wide range of volatilities."""
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, true_sigma)
    result = implied_volatility(market_price, _contract())

    assert result.converged, f"Failed for sigma={true_sigma}: {result.message}"
    assert abs(result.volatility - true_sigma) < 1e-3


@pytest.mark.parametrize(
    "moneyness",
    [0.8, 0.9, 1.0, 1.1, 1.2],  # OTM to ITM
)
def test_roundtrip_various_strikes(moneyness):
    """Test round-trip across different moneyness levels."""
    true_sigma = 0.25
    S = 100.0
    K = S / moneyness

    market_price = black_scholes_call(S, K, 1.0, 0.05, true_sigma)
    result = implied_volatility(market_price, _contract(S=S, K=K))

    assert result.converged
    assert abs(result.volatility - true_sigma) < 1e-3


def test_roundtrip_short_expiry():
    true_sigma = 0.35
    market_price = black_scholes_put(100.0, 95.0, 0.1, 0.03, true_sigma)

    result = implied_volatility(market_price, _contract(K=95.0, T=0.1, r=0.03, option_type="put"))

    assert result.converged
    assert abs(result.volatility - true_sigma) < 1e-3


def test_roundtrip_deep_itm_call():
    true_sigma = 0.25
    market_price = black_scholes_call(150.0, 100.0, 1.0, 0.05, true_sigma)

    result = implied_volatility(market_price, _contract(S=150.0))

    assert result.converged
    assert abs(result.volatility - true_sigma) < 1e-3


def test_known_price_recovers_twenty_percent():
    result = implied_volatility(10.45, _contract())
    assert result.volatility == pytest.approx(0.20, abs=1e-3)


# ===========================
# Arbitrage Bounds Tests
# ===========================


def test_call_price_below_intrinsic_raises():
    """Call price below S - K·e^(-rT) is an arbitrage and cannot be inverted."""
    with pytest.raises(InvalidContractError, match="arbitrage"):
        implied_volatility(2.0, _contract(S=110.0))


def test_call_price_above_spot_raises():
    with pytest.raises(InvalidContractError):
        implied_volatility(101.0, _contract())


def test_put_price_above_discounted_strike_raises():
    with pytest.raises(InvalidContractError):
        implied_volatility(99.0, _contract(option_type="put"))


def test_expired_contract_raises():
    with pytest.raises(InvalidContractError, match="expired"):
        implied_volatility(5.0, _contract(S=105.0, T=0.0))


@pytest.mark.parametrize("bad_price", [-1.0, float("nan")])
def test_invalid_market_price_raises(bad_price):
    with pytest.raises(InvalidContractError):
        implied_volatility(bad_price, _contract())


def test_price_at_lower_bound_has_no_time_value():
    """A price equal to S - K·e^(-rT) is matched by a vanishing volatility."""
    lower_bound = black_scholes_call(150.0, 100.0, 1.0, 0.05, 0.0)

    result = implied_volatility(lower_bound, _contract(S=150.0))

    assert result.method == "intrinsic"
    assert result.volatility == IV_MIN_VOL
    assert result.converged


# ===========================
# Solver Behavior Tests
# ===========================


def test_newton_raphson_convergence_fast():
    """Newton-Raphson converges in a handful of iterations near the money."""
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.25)
    result = newton_raphson_iv(market_price, _contract())

    assert result.converged
    assert result.method == "newton-raphson"
    assert result.iterations <= 10


def test_auto_method_tries_newton_first():
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.25)
    result = implied_volatility(market_price, _contract())
    assert result.method == "newton-raphson"


def test_brent_always_converges():
    market_price = black_scholes_call(100.0, 110.0, 0.5, 0.05, 0.40)
    result = brent_iv(market_price, _contract(K=110.0, T=0.5))

    assert result.converged
    assert result.method == "brent"
    assert abs(result.volatility - 0.40) < 1e-3


def test_falls_back_to_brent_when_vega_vanishes():
    """A tiny starting guess leaves Newton with no slope on a far OTM call."""
    contract = _contract(K=130.0, T=0.25)
    market_price = black_scholes_call(100.0, 130.0, 0.25, 0.05, 0.40)

    result = implied_volatility(market_price, contract, initial_guess=1e-4)

    assert result.converged
    assert result.method == "brent"
    assert abs(result.volatility - 0.40) < 1e-3


def test_method_brent_only():
    market_price = black_scholes_put(100.0, 100.0, 1.0, 0.05, 0.30)
    result = implied_volatility(market_price, _contract(option_type="put"), method="brent")

    assert result.method == "brent"
    assert result.converged


def test_non_convergence_returns_best_estimate():
    """Running out of iterations is reported, not raised."""
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.25)

    result = implied_volatility(market_price, _contract(), method="newton", max_iterations=1)

    assert not result.converged
    assert result.method == "newton-raphson"
    assert result.price_error > 1e-4
    assert result.message


def test_brent_without_bracket_does_not_raise():
    market_price = black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.20)

    result = brent_iv(market_price, _contract(), vol_lower=0.5, vol_upper=1.0)

    assert not result.converged
    assert result.volatility == 0.5
    assert "failed" in result.message


def test_unknown_solver_method_raises():
    with pytest.raises(InvalidContractError):
        implied_volatility(10.0, _contract(), method="bisection")


# ===========================
# Smile Tests
# ===========================


def test_implied_volatility_smile():
    strikes = [90.0, 100.0, 110.0]
    vols = [0.30, 0.25, 0.22]
    prices = [black_scholes_call(100.0, K, 1.0, 0.05, v) for K, v in zip(strikes, vols)]

    results = implied_volatility_smile(prices, strikes, _contract())

    assert len(results) == 3
    for result, expected in zip(results, vols):
        assert result.converged
        assert abs(result.volatility - expected) < 1e-3


def test_smile_mismatched_lengths():
    with pytest.raises(InvalidContractError):
        implied_volatility_smile([10.0, 5.0], [100.0], _contract())
