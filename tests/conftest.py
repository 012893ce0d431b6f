"""
Pytest configuration and shared fixtures.
"""

import pytest

from option_engine.utils.types import OptionContract


@pytest.fixture
def standard_params():
    """Standard at-the-money option parameters."""
    return {
        "S": 100.0,
        "K": 100.0,
        "T": 1.0,
        "r": 0.05,
        "sigma": 0.20,
    }


@pytest.fixture
def atm_call():
    """At-the-money European call, S=K=100, T=1, r=5%, σ=20%."""
    return OptionContract(100.0, 100.0, 1.0, 0.05, 0.20, "call")


@pytest.fixture
def atm_put():
    """At-the-money European put with the same parameters as atm_call."""
    return OptionContract(100.0, 100.0, 1.0, 0.05, 0.20, "put")


@pytest.fixture
def itm_call():
    """In-the-money call parameters."""
    return OptionContract(110.0, 100.0, 1.0, 0.05, 0.20, "call")


@pytest.fixture
def otm_put():
    """Out-of-the-money put parameters."""
    return OptionContract(110.0, 100.0, 1.0, 0.05, 0.20, "put")


@pytest.fixture
def american_put():
    """At-the-money American put."""
    return OptionContract(100.0, 100.0, 1.0, 0.05, 0.20, "put", "american")
