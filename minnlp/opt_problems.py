"""Optimization problems written against the solver callback interface"""

import numpy as np
from .exceptions import EvaluationError
from .problem import (C_STYLE, NLP_LOWER_BOUND_INF, NLP_UPPER_BOUND_INF,
                      NLPInfo, ProblemDefinition, empty_structure)

__all__ = ['ShiftedQuadratic',
           'SimpleIneqConstr']


class ShiftedQuadratic(ProblemDefinition):
    """Scalar quadratic with a lower bound.

    The following optimization problem:
        minimize (x - center)**2
        subject to: lb <= x <= ub

    By default ``center=2``, ``lb=0`` and no upper bound,
    starting from ``x=5``.
    """

    def __init__(self, center=2.0, lb=0.0, ub=NLP_UPPER_BOUND_INF, x0=5.0):
        self.center = center
        self.lb = lb
        self.ub = ub
        self.x0 = x0
        self.x_opt = np.array([min(max(center, lb), ub)])
        self.f_opt = (self.x_opt[0] - center)**2

    def get_nlp_info(self):
        return NLPInfo(n=1, m=0, nnz_jac_g=0, nnz_h_lag=1,
                       index_style=C_STYLE)

    def get_bounds_info(self):
        return (np.array([self.lb]), np.array([self.ub]),
                np.empty(0), np.empty(0))

    def get_starting_point(self, init_x, init_z, init_lambda):
        x = np.array([self.x0]) if init_x else None
        return x, None, None, None

    def eval_f(self, x, new_x):
        return (x[0] - self.center)**2

    def eval_grad_f(self, x, new_x):
        return np.array([2*(x[0] - self.center)])

    def eval_g(self, x, new_x):
        return np.empty(0)

    def eval_jac_g(self, x, new_x, values=False):
        if not values:
            return empty_structure()
        return np.empty(0)

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        if not values:
            return np.array([0]), np.array([0])
        return np.array([2*obj_factor])


class SimpleIneqConstr(ProblemDefinition):
    """Problem 15.1 from Nocedal and Wright

    The following optimization problem:
        minimize 1/2*(x[0] - 2)**2 + 1/2*(x[1] - 1/2)**2
        Subject to: -1/(x[0] + 1) + x[1] + 1/4 <= 0
                                         x[0] >= 0
                                         x[1] >= 0
    """

    def __init__(self):
        self.x0 = [0.5, 0.5]
        self.x_opt = np.array([1.952823, 0.088659])
        self.f_opt = 0.08571

    def get_nlp_info(self):
        return NLPInfo(n=2, m=1, nnz_jac_g=2, nnz_h_lag=2,
                       index_style=C_STYLE)

    def get_bounds_info(self):
        return (np.zeros(2), np.full(2, NLP_UPPER_BOUND_INF),
                np.array([NLP_LOWER_BOUND_INF]), np.array([0.0]))

    def get_starting_point(self, init_x, init_z, init_lambda):
        x = np.array(self.x0, dtype=float) if init_x else None
        lambda_ = np.zeros(1) if init_lambda else None
        z = np.zeros(2) if init_z else None
        return x, z, z, lambda_

    def _shifted(self, x):
        if x[0] <= -1:
            raise EvaluationError("x[0] = %g outside domain x[0] > -1" % x[0])
        return x[0] + 1

    def eval_f(self, x, new_x):
        return 1/2*(x[0] - 2)**2 + 1/2*(x[1] - 1/2)**2

    def eval_grad_f(self, x, new_x):
        return np.array([x[0] - 2, x[1] - 1/2])

    def eval_g(self, x, new_x):
        return np.array([-1/self._shifted(x) + x[1] + 1/4])

    def eval_jac_g(self, x, new_x, values=False):
        if not values:
            return np.array([0, 0]), np.array([0, 1])
        return np.array([1/self._shifted(x)**2, 1.0])

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        # Diagonal Hessian: entries (0, 0) and (1, 1)
        if not values:
            return np.array([0, 1]), np.array([0, 1])
        return np.array([obj_factor - 2*lambda_[0]/self._shifted(x)**3,
                         obj_factor])
