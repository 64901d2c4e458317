"""Minimize (x-2)**2 subject to x >= 0, starting from x = 5"""

import logging
import sys
from .application import Application
from .opt_problems import ShiftedQuadratic
from .problem import ApplicationReturnStatus


class ReportedShiftedQuadratic(ShiftedQuadratic):
    """Prints the solution once the solver stops."""

    def finalize_solution(self, solution):
        ShiftedQuadratic.finalize_solution(self, solution)
        print("\n=== Solution ===")
        print("x = %g" % solution.x[0])
        print("f(x) = %g" % solution.obj_value)
        print("Expected: x = %g, f(x) = %g" % (self.x_opt[0], self.f_opt))


def main(**options):
    """Solve the problem and return the process exit code."""
    logging.basicConfig(level=logging.WARNING)
    print("Minimal NLP example")
    print("Minimize: (x-2)^2")
    print("Subject to: x >= 0")
    print("Starting point: x = 5")

    app = Application(**options)
    status = app.initialize()
    if status != ApplicationReturnStatus.SOLVE_SUCCEEDED:
        print("Solver initialization failed!", file=sys.stderr)
        return 1

    status = app.optimize(ReportedShiftedQuadratic())
    if status == ApplicationReturnStatus.SOLVE_SUCCEEDED:
        print("\nOptimization succeeded!")
        return 0
    print("\nOptimization failed with status %d (%s)"
          % (status, status.name), file=sys.stderr)
    return 1


if __name__ == '__main__':
    sys.exit(main())
