"""Exceptions raised by problem definitions and solver drivers"""

__all__ = ['MinNLPError',
           'ConfigurationError',
           'ContractError',
           'EvaluationError']


class MinNLPError(Exception):
    """Base class for the errors of this package."""


class ConfigurationError(MinNLPError):
    """Invalid solver options, unavailable backend or misuse of the driver.

    Always fatal: it is reported before any evaluation takes place.
    """


class ContractError(ConfigurationError):
    """Problem reports inconsistent dimensions, bounds or sparse structure."""


class EvaluationError(MinNLPError):
    """Callback cannot be evaluated at the given point.

    Raised from an evaluation callback (e.g. on a domain error). The solver
    treats it as a request to shorten the trial step, not as a failure.
    """
