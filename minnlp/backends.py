"""Adapters from the problem callback interface to NLP solvers"""

import importlib
import logging
import numpy as np
from scipy.optimize import Bounds, NonlinearConstraint, minimize
from .contract import assemble, check_values
from .exceptions import ConfigurationError, EvaluationError
from .problem import (NLP_LOWER_BOUND_INF, NLP_UPPER_BOUND_INF,
                      ApplicationReturnStatus, Solution)

__all__ = ['Backend',
           'IpoptBackend',
           'TrustConstrBackend',
           'BACKENDS',
           'get_backend']

logger = logging.getLogger(__name__)


class CallbackAdapter(object):
    """Forwards solver queries to a problem definition.

    Keeps track of the last point (and multipliers) received so the
    ``new_x`` and ``new_lambda`` flags can be given to the problem,
    checks the length of every values array and returns the
    structures that were validated before the solve.
    """

    def __init__(self, problem, layout):
        self.problem = problem
        self.layout = layout
        self.info = layout.info
        self.last_x = None
        self.last_lambda = None

    def new_x(self, x):
        # Scheme for letting the problem avoid evaluating
        # multiple times for the same value of x.
        if self.last_x is not None and np.array_equal(self.last_x, x):
            return False
        self.last_x = np.array(x, dtype=float)
        return True

    def new_lambda(self, lambda_):
        if (self.last_lambda is not None
                and np.array_equal(self.last_lambda, lambda_)):
            return False
        self.last_lambda = np.array(lambda_, dtype=float)
        return True

    def objective(self, x):
        return float(self.problem.eval_f(x, self.new_x(x)))

    def gradient(self, x):
        grad = self.problem.eval_grad_f(x, self.new_x(x))
        return check_values(grad, self.info.n, "Gradient")

    def constraints(self, x):
        g = self.problem.eval_g(x, self.new_x(x))
        return check_values(g, self.info.m, "Constraint")

    def jacobian(self, x):
        values = self.problem.eval_jac_g(x, self.new_x(x), values=True)
        return check_values(values, self.info.nnz_jac_g, "Jacobian")

    def hessian(self, x, lambda_, obj_factor):
        lambda_ = np.asarray(lambda_, dtype=float)
        values = self.problem.eval_h(x, self.new_x(x), obj_factor, lambda_,
                                     self.new_lambda(lambda_), values=True)
        return check_values(values, self.info.nnz_h_lag, "Hessian")


class Backend(object):
    """Solver used by ``Application`` to run one solve."""
    name = None
    module = None

    def is_available(self):
        if self.module is None:
            return True
        try:
            importlib.import_module(self.module)
        except ImportError:
            return False
        return True

    def solve(self, problem, layout, x0, z0=None, lambda0=None,
              options=None):
        """Solve ``problem`` starting from ``x0``.

        Parameters
        ----------
        problem : ProblemDefinition
            Problem to be solved.
        layout : ProblemLayout
            Validated dimensions, bounds and structures of ``problem``.
        x0 : ndarray, shape (n,)
            Starting point.
        z0 : tuple of ndarray, optional
            Initial bound multipliers ``(z_l, z_u)``.
        lambda0 : ndarray, shape (m,), optional
            Initial constraint multipliers.
        options : dict
            Solver options.

        Returns
        -------
        solution : Solution
        """
        raise NotImplementedError


class _IpoptCallbacks(object):
    """Problem object with the callback names expected by cyipopt."""

    def __init__(self, adapter, evaluation_error):
        self.adapter = adapter
        self.evaluation_error = evaluation_error
        self.iter_count = 0

    def _call(self, method, *args):
        try:
            return method(*args)
        except EvaluationError as e:
            raise self.evaluation_error(str(e))

    def objective(self, x):
        return self._call(self.adapter.objective, x)

    def gradient(self, x):
        return self._call(self.adapter.gradient, x)

    def constraints(self, x):
        return self._call(self.adapter.constraints, x)

    def jacobian(self, x):
        return self._call(self.adapter.jacobian, x)

    def jacobianstructure(self):
        return self.adapter.layout.jac_structure

    def hessian(self, x, lagrange, obj_factor):
        return self._call(self.adapter.hessian, x, lagrange, obj_factor)

    def hessianstructure(self):
        return self.adapter.layout.hess_structure

    def intermediate(self, alg_mod, iter_count, obj_value, inf_pr, inf_du,
                     mu, d_norm, regularization_size, alpha_du, alpha_pr,
                     ls_trials):
        self.iter_count = iter_count
        logger.debug("iter %d: f=%.8e inf_pr=%.2e inf_du=%.2e mu=%.2e",
                     iter_count, obj_value, inf_pr, inf_du, mu)
        return True


class IpoptBackend(Backend):
    """Ipopt through cyipopt.

    Every option is forwarded to Ipopt unchanged.
    """
    name = 'ipopt'
    module = 'cyipopt'

    def solve(self, problem, layout, x0, z0=None, lambda0=None,
              options=None):
        import cyipopt

        info = layout.info
        callbacks = _IpoptCallbacks(CallbackAdapter(problem, layout),
                                    cyipopt.CyIpoptEvaluationError)
        nlp = cyipopt.Problem(n=info.n, m=info.m, problem_obj=callbacks,
                              lb=layout.x_l, ub=layout.x_u,
                              cl=layout.g_l, cu=layout.g_u)
        for name, value in (options or {}).items():
            nlp.add_option(name, value)

        zl, zu = z0 if z0 is not None else ([], [])
        lagrange = lambda0 if lambda0 is not None else []
        x, result = nlp.solve(x0, lagrange=lagrange, zl=zl, zu=zu)

        message = result['status_msg']
        if isinstance(message, bytes):
            message = message.decode()
        return Solution(
            status=ApplicationReturnStatus.from_code(result['status']),
            x=np.asarray(x), z_l=np.asarray(result['mult_x_L']),
            z_u=np.asarray(result['mult_x_U']), g=np.asarray(result['g']),
            lambda_=np.asarray(result['mult_g']),
            obj_value=float(result['obj_val']),
            iter_count=callbacks.iter_count, message=message)


# Status of ``scipy.optimize.minimize(method='trust-constr')``.
TRUST_CONSTR_STATUS = {
    0: ApplicationReturnStatus.MAXIMUM_ITERATIONS_EXCEEDED,
    1: ApplicationReturnStatus.SOLVE_SUCCEEDED,
    2: ApplicationReturnStatus.SOLVE_SUCCEEDED,
    3: ApplicationReturnStatus.USER_REQUESTED_STOP,
}


def _infinite_bounds(bound, inf):
    bound = np.array(bound, dtype=float)
    if inf > 0:
        bound[bound >= inf] = np.inf
    else:
        bound[bound <= inf] = -np.inf
    return bound


class TrustConstrBackend(Backend):
    """Trust-region interior point method from ``scipy.optimize``.

    Understands the options ``max_iter``, ``tol``, ``mu_init`` and
    ``print_level``.
    Other options are ignored.
    """
    name = 'trust-constr'

    def _options(self, options):
        # Defaults follow Ipopt: the barrier parameter starts small and
        # must fall below the tolerance before the solve stops.
        scipy_options = {'verbose': 0,
                         'gtol': 1e-10,
                         'barrier_tol': 1e-10,
                         'initial_barrier_parameter': 1e-8}
        for name, value in (options or {}).items():
            if name == 'max_iter':
                scipy_options['maxiter'] = int(value)
            elif name == 'tol':
                scipy_options['gtol'] = float(value)
                scipy_options['barrier_tol'] = float(value)
            elif name == 'mu_init':
                scipy_options['initial_barrier_parameter'] = float(value)
            elif name == 'print_level':
                scipy_options['verbose'] = min(3, (int(value) + 1)//2)
            else:
                logger.debug("Option %r ignored by %s backend",
                             name, self.name)
        return scipy_options

    def solve(self, problem, layout, x0, z0=None, lambda0=None,
              options=None):
        info = layout.info
        n, m = info.n, info.m
        adapter = CallbackAdapter(problem, layout)

        def fun(x):
            try:
                return adapter.objective(x)
            except EvaluationError as e:
                # Rejected step: the trust region is shrunk.
                logger.debug("Objective not evaluated: %s", e)
                return np.inf

        def constr(x):
            try:
                return adapter.constraints(x)
            except EvaluationError as e:
                logger.debug("Constraints not evaluated: %s", e)
                return np.full(m, np.inf)

        def hess(x):
            values = adapter.hessian(x, np.zeros(m), 1.0)
            return assemble(layout.hess_structure, values, (n, n),
                            symmetric=True)

        def jac_g(x):
            return assemble(layout.jac_structure, adapter.jacobian(x), (m, n))

        def hess_g(x, v):
            values = adapter.hessian(x, v, 0.0)
            return assemble(layout.hess_structure, values, (n, n),
                            symmetric=True)

        constraints = []
        if m > 0:
            constraints.append(NonlinearConstraint(
                constr,
                _infinite_bounds(layout.g_l, NLP_LOWER_BOUND_INF),
                _infinite_bounds(layout.g_u, NLP_UPPER_BOUND_INF),
                jac=jac_g, hess=hess_g))
        bounds = Bounds(_infinite_bounds(layout.x_l, NLP_LOWER_BOUND_INF),
                        _infinite_bounds(layout.x_u, NLP_UPPER_BOUND_INF))

        try:
            result = minimize(fun, x0, method='trust-constr',
                              jac=adapter.gradient, hess=hess,
                              bounds=bounds, constraints=constraints,
                              options=self._options(options))
        except EvaluationError as e:
            logger.warning("Evaluation failed inside %s: %s", self.name, e)
            x = adapter.last_x if adapter.last_x is not None else x0
            return Solution(
                status=ApplicationReturnStatus.ERROR_IN_STEP_COMPUTATION,
                x=x, z_l=np.zeros(n), z_u=np.zeros(n), g=np.full(m, np.nan),
                lambda_=np.full(m, np.nan), obj_value=np.nan,
                iter_count=0, message=str(e))

        x = result.x
        lambda_ = np.asarray(result.v[0], dtype=float) if m > 0 \
            else np.empty(0)
        # Bound multipliers from the stationarity of the Lagrangian:
        #     grad f(x) + J(x).T lambda - z_l + z_u = 0
        residual = adapter.gradient(x)
        if m > 0:
            residual = residual + jac_g(x).T.dot(lambda_)
        z_l = np.where(np.isfinite(bounds.lb), np.maximum(residual, 0), 0)
        z_u = np.where(np.isfinite(bounds.ub), np.maximum(-residual, 0), 0)

        return Solution(
            status=TRUST_CONSTR_STATUS.get(
                result.status, ApplicationReturnStatus.INTERNAL_ERROR),
            x=x, z_l=z_l, z_u=z_u, g=adapter.constraints(x),
            lambda_=lambda_, obj_value=float(result.fun),
            iter_count=int(result.nit), message=result.message)


BACKENDS = {
    IpoptBackend.name: IpoptBackend,
    TrustConstrBackend.name: TrustConstrBackend,
}


def get_backend(name):
    """Returns backend called ``name``.

    Raises
    ------
    ConfigurationError
        If no such backend exists or its library is not installed.
    """
    try:
        backend = BACKENDS[name]()
    except KeyError:
        raise ConfigurationError("Unknown backend %r, expected one of %s"
                                 % (name, sorted(BACKENDS)))
    if not backend.is_available():
        raise ConfigurationError("Backend %r requires the %r package, "
                                 "which is not installed"
                                 % (name, backend.module))
    return backend
