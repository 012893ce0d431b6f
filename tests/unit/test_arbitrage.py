"""Unit tests for arbitrage diagnostics."""

import math

import pytest
from option_engine.diagnostics.arbitrage import (
    check_early_exercise_premium,
    check_monte_carlo_consistency,
    check_price_bounds,
    check_put_call_parity,
    price_bounds,
)
from option_engine.utils.types import MonteCarloResult, OptionContract


def test_price_bounds_valid(atm_call, atm_put):
    """Valid prices should pass bounds check."""
    assert check_price_bounds(10.0, atm_call).is_valid
    assert check_price_bounds(5.0, atm_put).is_valid


def test_price_below_lower_bound(itm_call):
    result = check_price_bounds(5.0, itm_call)

    assert not result.is_valid
    assert "below lower bound" in result.violations[0]
    assert result.details["lower_bound"] == pytest.approx(110.0 - 100.0 * math.exp(-0.05))


def test_price_above_upper_bound(atm_call, atm_put):
    assert not check_price_bounds(100.5, atm_call).is_valid
    assert not check_price_bounds(96.0, atm_put).is_valid


def test_expired_contract_bounds_collapse_to_intrinsic():
    contract = OptionContract(105.0, 100.0, 0.0, 0.05, 0.20, "call")
    assert price_bounds(contract) == (5.0, 5.0)


def test_put_call_parity_valid(atm_call):
    """Valid prices should satisfy put-call parity."""
    call_price = 10.0
    put_price = call_price - (100.0 - 100.0 * math.exp(-0.05))

    result = check_put_call_parity(call_price, put_price, atm_call)
    assert result.is_valid


def test_put_call_parity_violation(atm_call):
    result = check_put_call_parity(10.0, 10.0, atm_call)

    assert not result.is_valid
    assert result.details["difference"] == pytest.approx(100.0 - 100.0 * math.exp(-0.05))


def test_early_exercise_premium():
    assert check_early_exercise_premium(6.09, 5.57).is_valid
    assert not check_early_exercise_premium(5.0, 5.57).is_valid


def test_monte_carlo_consistency(atm_call):
    result = MonteCarloResult(
        contract=atm_call,
        theoretical_value=10.50,
        intrinsic_value=0.0,
        time_value=10.50,
        method="monte-carlo",
        standard_error=0.05,
        confidence_interval=(10.402, 10.598),
        num_simulations=10_000,
    )

    assert check_monte_carlo_consistency(result, 10.4506).is_valid
    assert not check_monte_carlo_consistency(result, 10.30).is_valid
