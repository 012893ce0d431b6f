"""
Tests for the command-line interface.
"""

import pytest
from click.testing import CliRunner

from interfaces.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def test_price_black_scholes(runner):
    result = runner.invoke(cli, ["price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2"])

    assert result.exit_code == 0
    assert "Call Option Value (black-scholes): $10.4506" in result.output


def test_price_binomial_american_put(runner):
    result = runner.invoke(
        cli,
        [
            "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2",
            "--type", "put", "--american", "--method", "binomial", "--steps", "500",
        ],
    )

    assert result.exit_code == 0
    assert "binomial(500)" in result.output
    assert "$6.09" in result.output


def test_price_monte_carlo_reports_error(runner):
    result = runner.invoke(
        cli,
        [
            "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2",
            "--method", "mc", "--simulations", "20000", "--seed", "7",
        ],
    )

    assert result.exit_code == 0
    assert "monte-carlo" in result.output
    assert "Std error" in result.output
    assert "95% CI" in result.output


def test_price_rejects_american_monte_carlo(runner):
    result = runner.invoke(
        cli,
        [
            "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2",
            "--american", "--method", "mc", "--simulations", "100",
        ],
    )

    assert "Error:" in result.output
    assert "European exercise only" in result.output


def test_price_invalid_spot(runner):
    result = runner.invoke(cli, ["price", "-S", "-5", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2"])
    assert "Error:" in result.output


def test_greeks_market_units(runner):
    result = runner.invoke(cli, ["greeks", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2"])

    assert result.exit_code == 0
    assert "Delta:    0.636831" in result.output
    assert "(per day)" in result.output
    assert "Vega:     0.375240" in result.output


def test_implied_volatility(runner):
    result = runner.invoke(cli, ["iv", "-p", "10.45", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05"])

    assert result.exit_code == 0
    assert "Implied Volatility: 0.2000 (20.00%)" in result.output
    assert "Method: newton-raphson" in result.output


def test_implied_volatility_arbitrage_violation(runner):
    result = runner.invoke(cli, ["iv", "-p", "150", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05"])
    assert "arbitrage violation" in result.output


def test_debug_flag_configures_logging(runner):
    result = runner.invoke(
        cli, ["--debug", "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2"]
    )
    assert result.exit_code == 0


def test_price_rejects_zero_steps(runner):
    result = runner.invoke(
        cli,
        [
            "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2",
            "--method", "binomial", "--steps", "0",
        ],
    )

    assert "Error:" in result.output
    assert "binomial_steps" in result.output
    assert "Option Value" not in result.output


def test_price_rejects_zero_simulations(runner):
    result = runner.invoke(
        cli,
        [
            "price", "-S", "100", "-K", "100", "-T", "1", "-r", "0.05", "-v", "0.2",
            "--method", "mc", "--simulations", "0",
        ],
    )

    assert "Error:" in result.output
    assert "mc_simulations" in result.output
    assert "Option Value" not in result.output
