"""
Custom exceptions for the option valuation engine.

All engine errors derive from OptionEngineError. The input-validation
errors also derive from ValueError so that callers catching ValueError
around pricing calls keep working.
"""


class OptionEngineError(Exception):
    """Base exception for all option engine errors."""

    pass


class InvalidContractError(OptionEngineError, ValueError):
    """Raised when contract parameters or pricing arguments are invalid."""

    def __init__(self, field: str, value: object, reason: str = "") -> None:
        self.field = field
        self.value = value
        message = f"Invalid {field}={value!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class LatticeError(OptionEngineError, ValueError):
    """Raised when a binomial tree is too coarse to be arbitrage-free."""

    def __init__(self, steps: int, probability: float, min_steps: int) -> None:
        self.steps = steps
        self.probability = probability
        self.min_steps = min_steps
        super().__init__(
            f"Risk-neutral probability p={probability:.6f} outside [0, 1] with "
            f"{steps} steps; use at least {min_steps} steps"
        )


class PortfolioError(OptionEngineError, ValueError):
    """Raised when a portfolio cannot be aggregated consistently."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        super().__init__(f"Position {index}: {reason}")
