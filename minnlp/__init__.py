"""Problem definitions for interior-point NLP solvers."""

from .problem import (C_STYLE,
                      FORTRAN_STYLE,
                      NLP_LOWER_BOUND_INF,
                      NLP_UPPER_BOUND_INF,
                      NLPInfo,
                      ApplicationReturnStatus,
                      Solution,
                      ProblemDefinition)
from .exceptions import (MinNLPError,
                         ConfigurationError,
                         ContractError,
                         EvaluationError)
from .contract import check_problem, check_derivatives
from .application import Application
from .opt_problems import ShiftedQuadratic, SimpleIneqConstr

__all__ = ["Application", "ProblemDefinition", "NLPInfo", "Solution",
           "ApplicationReturnStatus", "C_STYLE", "FORTRAN_STYLE",
           "NLP_LOWER_BOUND_INF", "NLP_UPPER_BOUND_INF", "MinNLPError",
           "ConfigurationError", "ContractError", "EvaluationError",
           "check_problem", "check_derivatives", "ShiftedQuadratic",
           "SimpleIneqConstr"]
