"""Consistency checks on problem definitions"""

from collections import namedtuple
import logging
import numpy as np
import scipy.sparse as spc
from scipy.optimize import approx_fprime
from .exceptions import ContractError
from .problem import C_STYLE, FORTRAN_STYLE, NLPInfo

__all__ = ['ProblemLayout',
           'check_problem',
           'check_values',
           'check_starting_point',
           'check_derivatives',
           'assemble']

logger = logging.getLogger(__name__)


ProblemLayout = namedtuple('ProblemLayout',
                           ['info', 'x_l', 'x_u', 'g_l', 'g_u',
                            'jac_structure', 'hess_structure'])


def _check_info(info):
    try:
        info = NLPInfo(*info)
    except TypeError:
        raise ContractError("get_nlp_info must return "
                            "(n, m, nnz_jac_g, nnz_h_lag, index_style), "
                            "got %r" % (info,))
    for name, value in zip(info._fields[:4], info[:4]):
        if not isinstance(value, (int, np.integer)) or value < 0:
            raise ContractError("%s must be a non-negative integer, got %r"
                                % (name, value))
    if info.index_style not in (C_STYLE, FORTRAN_STYLE):
        raise ContractError("index_style must be C_STYLE or FORTRAN_STYLE, "
                            "got %r" % (info.index_style,))
    return NLPInfo(*(int(v) for v in info))


def _check_bounds(lower, upper, size, name):
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    if lower.shape != (size,) or upper.shape != (size,):
        raise ContractError("%s bounds must have shape (%d,), got %s and %s"
                            % (name, size, lower.shape, upper.shape))
    if np.any(np.isnan(lower)) or np.any(np.isnan(upper)):
        raise ContractError("%s bounds contain NaN" % name)
    invalid = np.flatnonzero(lower > upper)
    if invalid.size > 0:
        raise ContractError("%s lower bound exceeds upper bound at %s"
                            % (name, invalid.tolist()))
    return lower, upper


def _check_structure(structure, nnz, n_rows, n_cols, offset, name):
    try:
        irow, jcol = structure
    except (TypeError, ValueError):
        raise ContractError("%s structure must be a pair (irow, jcol)" % name)
    irow = np.asarray(irow)
    jcol = np.asarray(jcol)
    if irow.shape != (nnz,) or jcol.shape != (nnz,):
        raise ContractError("%s structure has %s row and %s column indices, "
                            "but %d nonzeros were declared"
                            % (name, irow.shape, jcol.shape, nnz))
    if nnz == 0:
        return np.empty(0, dtype=int), np.empty(0, dtype=int)
    if not (np.issubdtype(irow.dtype, np.integer)
            and np.issubdtype(jcol.dtype, np.integer)):
        raise ContractError("%s structure indices must be integers" % name)
    irow = irow.astype(int) - offset
    jcol = jcol.astype(int) - offset
    if irow.min() < 0 or irow.max() >= n_rows:
        raise ContractError("%s row index out of range" % name)
    if jcol.min() < 0 or jcol.max() >= n_cols:
        raise ContractError("%s column index out of range" % name)
    return irow, jcol


def check_problem(problem):
    """Query the problem layout and verify its consistency.

    Calls ``get_nlp_info``, ``get_bounds_info`` and the structure mode
    of ``eval_jac_g`` and ``eval_h``. No evaluation callback is called.

    Returns
    -------
    layout : ProblemLayout
        Problem dimensions, bounds and 0-based sparse structures.

    Raises
    ------
    ContractError
        If dimensions, bounds or structures are inconsistent.
    """
    info = _check_info(problem.get_nlp_info())
    offset = info.index_style

    try:
        x_l, x_u, g_l, g_u = problem.get_bounds_info()
    except (TypeError, ValueError):
        raise ContractError("get_bounds_info must return (x_l, x_u, g_l, g_u)")
    x_l, x_u = _check_bounds(x_l, x_u, info.n, "variable")
    g_l, g_u = _check_bounds(g_l, g_u, info.m, "constraint")

    jac_structure = _check_structure(
        problem.eval_jac_g(None, True, values=False),
        info.nnz_jac_g, info.m, info.n, offset, "Jacobian")
    hess_structure = _check_structure(
        problem.eval_h(None, True, 1.0, None, True, values=False),
        info.nnz_h_lag, info.n, info.n, offset, "Hessian")

    # Each off-diagonal Hessian entry may be given in only one triangle
    irow, jcol = hess_structure
    entries = set(zip(irow.tolist(), jcol.tolist()))
    if len(entries) != len(irow):
        raise ContractError("Hessian structure has repeated entries")
    mirrored = [(i, j) for i, j in entries if i != j and (j, i) in entries]
    if mirrored:
        raise ContractError("Hessian entries %s are given in both triangles"
                            % sorted(mirrored))

    logger.debug("Problem layout: %s", info)
    return ProblemLayout(info, x_l, x_u, g_l, g_u,
                         jac_structure, hess_structure)


def check_values(values, nnz, name):
    """Verify that a values call matches the declared number of nonzeros."""
    values = np.asarray(values, dtype=float)
    if values.shape != (nnz,):
        raise ContractError("%s values have shape %s, but %d nonzeros were "
                            "declared" % (name, values.shape, nnz))
    return values


def check_starting_point(x0, n):
    if x0 is None:
        raise ContractError("get_starting_point returned no initial point")
    x0 = np.asarray(x0, dtype=float)
    if x0.shape != (n,):
        raise ContractError("starting point must have shape (%d,), got %s"
                            % (n, x0.shape))
    return x0


def assemble(structure, values, shape, symmetric=False):
    """Build a sparse matrix from a 0-based structure and its values.

    When ``symmetric`` is true the structure holds one triangle and the
    full matrix is returned.
    """
    irow, jcol = structure
    A = spc.coo_matrix((values, (irow, jcol)), shape=shape).tocsr()
    if symmetric:
        A = A + A.T - spc.diags(A.diagonal())
    return A.tocsr()


def check_derivatives(problem, x, lambda_=None, obj_factor=1.0,
                      epsilon=1e-6):
    """Compare derivative callbacks with finite differences.

    Checks ``eval_grad_f`` against ``eval_f``, ``eval_jac_g`` against
    ``eval_g`` and ``eval_h`` against the Lagrangian gradient.

    Returns
    -------
    errors : dict
        Largest relative error of ``grad``, ``jac`` and ``hess``.
    """
    layout = check_problem(problem)
    n, m = layout.info.n, layout.info.m
    x = np.asarray(x, dtype=float)
    lambda_ = np.zeros(m) if lambda_ is None else np.asarray(lambda_, float)

    def relative_error(approx, exact):
        if np.size(exact) == 0:
            return 0.0
        return np.max(np.abs(approx - exact) / np.maximum(1, np.abs(exact)))

    def jacobian(y):
        values = check_values(problem.eval_jac_g(y, True, values=True),
                              layout.info.nnz_jac_g, "Jacobian")
        return assemble(layout.jac_structure, values, (m, n))

    def lagrangian_gradient(y):
        grad = obj_factor*np.asarray(problem.eval_grad_f(y, True), float)
        if m > 0:
            grad = grad + jacobian(y).T.dot(lambda_)
        return grad

    errors = {}
    grad = np.asarray(problem.eval_grad_f(x, True), dtype=float)
    errors['grad'] = relative_error(
        approx_fprime(x, lambda y: problem.eval_f(y, True), epsilon), grad)

    if m > 0:
        jac_approx = approx_fprime(
            x, lambda y: np.asarray(problem.eval_g(y, True), float), epsilon)
        errors['jac'] = relative_error(np.reshape(jac_approx, (m, n)),
                                       jacobian(x).toarray())
    else:
        errors['jac'] = 0.0

    hess_values = check_values(
        problem.eval_h(x, True, obj_factor, lambda_, True, values=True),
        layout.info.nnz_h_lag, "Hessian")
    H = assemble(layout.hess_structure, hess_values, (n, n), symmetric=True)
    hess_approx = np.reshape(approx_fprime(x, lagrangian_gradient, epsilon),
                             (n, n))
    errors['hess'] = relative_error(hess_approx, H.toarray())
    return errors
