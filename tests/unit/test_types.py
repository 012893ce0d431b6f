"""
Unit tests for contract construction and value types.
"""

from datetime import datetime, timedelta, timezone

import pytest

from option_engine.utils.exceptions import InvalidContractError, OptionEngineError
from option_engine.utils.types import (
    ExerciseStyle,
    GreekSet,
    OptionContract,
    OptionType,
    SolverMethod,
    Valuation,
    as_option_type,
    as_solver_method,
)


def test_enum_fields_accept_strings_in_any_case():
    contract = OptionContract(100.0, 100.0, 1.0, 0.05, 0.2, "PUT", "American")

    assert contract.option_type is OptionType.PUT
    assert contract.exercise_style is ExerciseStyle.AMERICAN
    assert not contract.is_call


def test_defaults_are_european_call():
    contract = OptionContract(100.0, 100.0, 1.0, 0.05, 0.2)
    assert contract.option_type is OptionType.CALL
    assert contract.exercise_style is ExerciseStyle.EUROPEAN


@pytest.mark.parametrize("bad", ["straddle", "", None, 1])
def test_unknown_option_type_rejected(bad):
    with pytest.raises(InvalidContractError) as excinfo:
        as_option_type(bad)
    assert excinfo.value.field == "option_type"


def test_unknown_exercise_style_rejected():
    with pytest.raises(InvalidContractError):
        OptionContract(100.0, 100.0, 1.0, 0.05, 0.2, "call", "bermudan")


def test_solver_method_coercion():
    assert as_solver_method("Brent") is SolverMethod.BRENT
    with pytest.raises(InvalidContractError):
        as_solver_method("secant")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"spot_price": 0.0},
        {"spot_price": -1.0},
        {"strike_price": 0.0},
        {"volatility": -0.1},
        {"risk_free_rate": float("nan")},
        {"time_to_expiry": float("inf")},
        {"spot_price": True},
        {"strike_price": "100"},
    ],
)
def test_invalid_contract_fields(kwargs):
    params = dict(spot_price=100.0, strike_price=100.0, time_to_expiry=1.0, risk_free_rate=0.05, volatility=0.2)
    params.update(kwargs)
    with pytest.raises(InvalidContractError):
        OptionContract(**params)


def test_errors_share_base_class():
    with pytest.raises(OptionEngineError):
        OptionContract(-1.0, 100.0, 1.0, 0.05, 0.2)


def test_negative_rate_and_time_allowed():
    contract = OptionContract(100.0, 100.0, -0.1, -0.01, 0.2)
    assert contract.is_expired


def test_intrinsic_value():
    assert OptionContract(110.0, 100.0, 1.0, 0.05, 0.2, "call").intrinsic_value == 10.0
    assert OptionContract(110.0, 100.0, 1.0, 0.05, 0.2, "put").intrinsic_value == 0.0


def test_contract_is_immutable():
    contract = OptionContract(100.0, 100.0, 1.0, 0.05, 0.2)
    with pytest.raises(AttributeError):
        contract.spot_price = 50.0


def test_with_volatility_returns_new_contract():
    contract = OptionContract(100.0, 100.0, 1.0, 0.05, 0.2)
    bumped = contract.with_volatility(0.3)

    assert bumped.volatility == 0.3
    assert contract.volatility == 0.2


def test_from_expiration_measures_years():
    as_of = datetime(2024, 1, 1, tzinfo=timezone.utc)
    expiration = as_of + timedelta(days=73)

    contract = OptionContract.from_expiration(100.0, 105.0, expiration, 0.05, 0.2, "put", as_of=as_of)

    assert contract.time_to_expiry == pytest.approx(0.2)
    assert contract.option_type is OptionType.PUT


def test_from_expiration_in_the_past_is_expired():
    as_of = datetime(2024, 6, 1)
    contract = OptionContract.from_expiration(100.0, 100.0, datetime(2024, 5, 1), 0.05, 0.2, as_of=as_of)
    assert contract.is_expired


def test_greek_set_arithmetic():
    a = GreekSet(delta=0.5, gamma=0.02, theta=-6.0, vega=40.0, rho=50.0)
    b = GreekSet(delta=-0.4, gamma=0.02, theta=-2.0, vega=40.0, rho=-30.0)

    total = a + b.scaled(2.0)

    assert total.delta == pytest.approx(-0.3)
    assert total.gamma == pytest.approx(0.06)
    assert total.theta == pytest.approx(-10.0)
    assert total.vega == pytest.approx(120.0)
    assert total.rho == pytest.approx(-10.0)


def test_valuation_from_value():
    contract = OptionContract(90.0, 100.0, 1.0, 0.05, 0.2, "put")
    valuation = Valuation.from_value(contract, 11.5, "test")

    assert valuation.intrinsic_value == 10.0
    assert valuation.time_value == pytest.approx(1.5)
    assert valuation.greeks is None
