"""Solver application: options, initialization and problem solving"""

import logging
from .backends import get_backend
from .contract import check_problem, check_starting_point
from .exceptions import ConfigurationError, ContractError
from .problem import ApplicationReturnStatus

__all__ = ['DEFAULT_OPTIONS',
           'Application']

logger = logging.getLogger(__name__)


DEFAULT_OPTIONS = {
    'backend': 'ipopt',
    'print_level': 5,
    'linear_solver': 'mumps',
    'mu_strategy': 'adaptive',
}


class Application(object):
    """Runs a NLP solver on problem definitions.

    Parameters
    ----------
    options : dict
        Solver options (name -> value). The option ``backend`` selects
        the solver (``'ipopt'`` or ``'trust-constr'``); every other option
        is handed to the backend as is. Options not given keep the values
        in ``DEFAULT_OPTIONS``.
    """

    def __init__(self, **options):
        self.options = dict(DEFAULT_OPTIONS)
        self.options.update(options)
        self.backend = None

    def set_option(self, name, value):
        self.options[name] = value
        # Options must be validated again
        self.backend = None

    def initialize(self):
        """Check the options and load the backend.

        Returns ``SOLVE_SUCCEEDED`` when the application is ready
        and ``INVALID_OPTION`` otherwise.
        """
        try:
            self.backend = get_backend(self.options['backend'])
        except ConfigurationError as e:
            logger.error("Initialization failed: %s", e)
            self.backend = None
            return ApplicationReturnStatus.INVALID_OPTION
        logger.info("Using %s backend", self.backend.name)
        return ApplicationReturnStatus.SOLVE_SUCCEEDED

    def _solver_options(self):
        return dict((name, value) for name, value in self.options.items()
                    if name != 'backend')

    def optimize(self, problem):
        """Solve ``problem``.

        The problem layout is checked before any evaluation. An
        inconsistent problem is rejected with
        ``INVALID_PROBLEM_DEFINITION`` and is never solved. Otherwise
        ``problem.finalize_solution`` is called once with the final point.

        Returns
        -------
        status : ApplicationReturnStatus
            Terminal status of the solve.

        Raises
        ------
        ConfigurationError
            If ``initialize`` did not succeed before this call.
        """
        if self.backend is None:
            raise ConfigurationError("Application must be initialized "
                                     "before optimizing")
        warm_start = self.options.get('warm_start_init_point') == 'yes'
        try:
            layout = check_problem(problem)
            try:
                x0, z_l, z_u, lambda0 = problem.get_starting_point(
                    True, warm_start, warm_start)
            except (TypeError, ValueError):
                raise ContractError("get_starting_point must return "
                                    "(x, z_l, z_u, lambda_)")
            x0 = check_starting_point(x0, layout.info.n)
            z0 = (z_l, z_u) if warm_start else None
            lambda0 = lambda0 if warm_start else None
            solution = self.backend.solve(problem, layout, x0, z0, lambda0,
                                          self._solver_options())
        except ContractError as e:
            logger.error("Invalid problem definition: %s", e)
            return ApplicationReturnStatus.INVALID_PROBLEM_DEFINITION

        logger.info("%s backend stopped: %s", self.backend.name,
                    solution.message)
        problem.finalize_solution(solution)
        return solution.status
