"""Callback interface between an optimization problem and a NLP solver"""

from collections import namedtuple
from enum import IntEnum
import numpy as np

__all__ = ['C_STYLE',
           'FORTRAN_STYLE',
           'NLP_LOWER_BOUND_INF',
           'NLP_UPPER_BOUND_INF',
           'NLPInfo',
           'ApplicationReturnStatus',
           'Solution',
           'ProblemDefinition']


# Index conventions for sparse structures.
C_STYLE = 0
FORTRAN_STYLE = 1

# Bounds at or beyond these values are not enforced.
NLP_LOWER_BOUND_INF = -1e19
NLP_UPPER_BOUND_INF = 1e19


NLPInfo = namedtuple('NLPInfo',
                     ['n', 'm', 'nnz_jac_g', 'nnz_h_lag', 'index_style'])


class ApplicationReturnStatus(IntEnum):
    """Terminal status of a solve (same codes as Ipopt)."""
    SOLVE_SUCCEEDED = 0
    SOLVED_TO_ACCEPTABLE_LEVEL = 1
    INFEASIBLE_PROBLEM_DETECTED = 2
    SEARCH_DIRECTION_BECOMES_TOO_SMALL = 3
    DIVERGING_ITERATES = 4
    USER_REQUESTED_STOP = 5
    FEASIBLE_POINT_FOUND = 6
    MAXIMUM_ITERATIONS_EXCEEDED = -1
    RESTORATION_FAILED = -2
    ERROR_IN_STEP_COMPUTATION = -3
    MAXIMUM_CPUTIME_EXCEEDED = -4
    MAXIMUM_WALLTIME_EXCEEDED = -5
    NOT_ENOUGH_DEGREES_OF_FREEDOM = -10
    INVALID_PROBLEM_DEFINITION = -11
    INVALID_OPTION = -12
    INVALID_NUMBER_DETECTED = -13
    UNRECOVERABLE_EXCEPTION = -100
    NONIPOPT_EXCEPTION_THROWN = -101
    INSUFFICIENT_MEMORY = -102
    INTERNAL_ERROR = -199

    @classmethod
    def from_code(cls, code):
        """Status for ``code``, ``INTERNAL_ERROR`` if the code is unknown."""
        try:
            return cls(int(code))
        except ValueError:
            return cls.INTERNAL_ERROR


class Solution(namedtuple('Solution',
                          ['status', 'x', 'z_l', 'z_u', 'g', 'lambda_',
                           'obj_value', 'iter_count', 'message'])):
    """Final point of a solve.

    Attributes
    ----------
    status : ApplicationReturnStatus
        Terminal status.
    x : ndarray, shape (n,)
        Final iterate.
    z_l, z_u : ndarray, shape (n,)
        Multipliers of the lower and upper variable bounds.
    g : ndarray, shape (m,)
        Constraints at ``x``.
    lambda_ : ndarray, shape (m,)
        Constraint multipliers.
    obj_value : float
        Objective at ``x``.
    iter_count : int
        Number of iterations performed by the solver.
    message : str
        Solver message describing ``status``.
    """
    __slots__ = ()

    @property
    def success(self):
        """True when the solver converged (``SOLVE_SUCCEEDED``)."""
        return self.status == ApplicationReturnStatus.SOLVE_SUCCEEDED


class ProblemDefinition(object):
    """Optimization problem queried by a NLP solver.

    Describes the problem:

        minimize f(x)
        subject to: g_l <= g(x) <= g_u
                    x_l <=  x   <= x_u

    The solver calls the methods below, sequentially and in an order it
    controls, until it reaches a terminal state, and then calls
    ``finalize_solution`` once. Arrays received as arguments belong to
    the solver and must not be kept after the call returns.

    Evaluation methods may raise ``EvaluationError`` when the
    problem cannot be evaluated at ``x``. The solver then shortens its
    step and tries again.

    Sparse outputs (constraint Jacobian and Lagrangian Hessian) are
    queried in two modes. With ``values=False`` the method returns the
    structure ``(irow, jcol)``; with ``values=True`` it returns the
    nonzero values at ``x``, in the order of the structure. The structure
    must not change during a solve.
    """
    solution = None

    def get_nlp_info(self):
        """Returns ``NLPInfo(n, m, nnz_jac_g, nnz_h_lag, index_style)``."""
        raise NotImplementedError

    def get_bounds_info(self):
        """Returns bounds ``(x_l, x_u, g_l, g_u)``.

        ``x_l, x_u`` have shape (n,) and ``g_l, g_u`` have shape (m,).
        """
        raise NotImplementedError

    def get_starting_point(self, init_x, init_z, init_lambda):
        """Returns initial estimates ``(x, z_l, z_u, lambda_)``.

        Only the estimates whose ``init_*`` flag is true are used,
        the others may be ``None``.
        """
        raise NotImplementedError

    def eval_f(self, x, new_x):
        """Returns objective function at ``x``.

        ``new_x`` is false when ``x`` is the point of the previous
        evaluation call, in which case cached quantities may be reused.
        """
        raise NotImplementedError

    def eval_grad_f(self, x, new_x):
        """Returns objective gradient at ``x``, shape (n,)."""
        raise NotImplementedError

    def eval_g(self, x, new_x):
        """Returns constraints at ``x``, shape (m,)."""
        raise NotImplementedError

    def eval_jac_g(self, x, new_x, values=False):
        """Returns constraint Jacobian structure or values.

        Structure is a pair of integer arrays ``(irow, jcol)``, both with
        shape (nnz_jac_g,). Values are an array with shape (nnz_jac_g,).
        """
        raise NotImplementedError

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        """Returns Lagrangian Hessian structure or values.

        Values are those of:

            obj_factor*hess f(x) + sum(lambda_[i]*hess g_i(x))

        Only the lower triangle is given.
        """
        raise NotImplementedError

    def finalize_solution(self, solution):
        """Receives the ``Solution`` once the solver stops."""
        self.solution = solution


def empty_structure():
    return np.empty(0, dtype=int), np.empty(0, dtype=int)
