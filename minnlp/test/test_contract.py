import numpy as np
from minnlp import (ShiftedQuadratic, SimpleIneqConstr, ContractError,
                    ConfigurationError, NLPInfo, FORTRAN_STYLE, C_STYLE)
from minnlp.contract import (check_problem, check_values,
                             check_starting_point, assemble)
from numpy.testing import assert_array_equal, assert_equal
from pytest import raises as assert_raises


class TooManyHessianEntries(ShiftedQuadratic):
    """Declares one Hessian nonzero but gives two."""

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        if not values:
            return np.array([0, 0]), np.array([0, 0])
        return np.array([obj_factor, obj_factor])


class FortranIneqConstr(SimpleIneqConstr):
    """Same problem as ``SimpleIneqConstr`` with 1-based indices."""

    def get_nlp_info(self):
        return SimpleIneqConstr.get_nlp_info(self)._replace(
            index_style=FORTRAN_STYLE)

    def eval_jac_g(self, x, new_x, values=False):
        if not values:
            return np.array([1, 1]), np.array([1, 2])
        return SimpleIneqConstr.eval_jac_g(self, x, new_x, values)

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        if not values:
            return np.array([1, 2]), np.array([1, 2])
        return SimpleIneqConstr.eval_h(self, x, new_x, obj_factor, lambda_,
                                       new_lambda, values)


class ModifiedQuadratic(ShiftedQuadratic):
    """``ShiftedQuadratic`` with some callbacks replaced."""

    def __init__(self, info=None, bounds=None, hess_structure=None):
        ShiftedQuadratic.__init__(self)
        self.info = info
        self.bounds = bounds
        self.hess_structure = hess_structure

    def get_nlp_info(self):
        if self.info is not None:
            return self.info
        return ShiftedQuadratic.get_nlp_info(self)

    def get_bounds_info(self):
        if self.bounds is not None:
            return self.bounds
        return ShiftedQuadratic.get_bounds_info(self)

    def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
               values=False):
        if not values and self.hess_structure is not None:
            return self.hess_structure
        return ShiftedQuadratic.eval_h(self, x, new_x, obj_factor, lambda_,
                                       new_lambda, values)


class TestCheckProblem(object):

    def test_valid_problems(self):
        layout = check_problem(ShiftedQuadratic())
        assert_equal(layout.info, NLPInfo(1, 0, 0, 1, C_STYLE))
        assert_array_equal(layout.x_l, [0.0])
        assert_array_equal(layout.hess_structure[0], [0])
        assert_array_equal(layout.hess_structure[1], [0])
        assert_equal(len(layout.jac_structure[0]), 0)

        layout = check_problem(SimpleIneqConstr())
        assert_equal(layout.info.m, 1)
        assert_array_equal(layout.jac_structure[0], [0, 0])
        assert_array_equal(layout.jac_structure[1], [0, 1])

    def test_structure_count_mismatch(self):
        with assert_raises(ContractError):
            check_problem(TooManyHessianEntries())

    def test_contract_error_is_configuration_error(self):
        assert_raises(ConfigurationError, check_problem,
                      TooManyHessianEntries())

    def test_fortran_style_indices(self):
        layout = check_problem(FortranIneqConstr())
        assert_array_equal(layout.jac_structure[0], [0, 0])
        assert_array_equal(layout.jac_structure[1], [0, 1])
        assert_array_equal(layout.hess_structure[0], [0, 1])
        assert_array_equal(layout.hess_structure[1], [0, 1])

    def test_index_out_of_range(self):
        p = ModifiedQuadratic(hess_structure=(np.array([1]), np.array([0])))
        assert_raises(ContractError, check_problem, p)
        p = ModifiedQuadratic(hess_structure=(np.array([0]), np.array([-1])))
        assert_raises(ContractError, check_problem, p)
        # 0 is not a valid 1-based index
        p = ModifiedQuadratic(info=NLPInfo(1, 0, 0, 1, FORTRAN_STYLE))
        assert_raises(ContractError, check_problem, p)

    def test_non_integer_indices(self):
        p = ModifiedQuadratic(hess_structure=(np.array([0.0]),
                                              np.array([0.0])))
        assert_raises(ContractError, check_problem, p)

    def test_invalid_dimensions(self):
        for info in [(1, 0, 0), (-1, 0, 0, 1, C_STYLE),
                     (1, 0, 0, 1.5, C_STYLE), (1, 0, 0, 1, 2), 5]:
            assert_raises(ContractError, check_problem,
                          ModifiedQuadratic(info=info))

    def test_invalid_bounds(self):
        empty = np.empty(0)
        for bounds in [(np.array([0.0, 0.0]), np.array([1.0, 1.0]),
                        empty, empty),
                       (np.array([2.0]), np.array([1.0]), empty, empty),
                       (np.array([np.nan]), np.array([1.0]), empty, empty),
                       (np.array([0.0]), np.array([1.0]),
                        np.array([0.0]), np.array([0.0])),
                       (np.array([0.0]), np.array([1.0]))]:
            assert_raises(ContractError, check_problem,
                          ModifiedQuadratic(bounds=bounds))

    def test_equal_bounds_fix_variable(self):
        empty = np.empty(0)
        p = ModifiedQuadratic(bounds=(np.array([1.0]), np.array([1.0]),
                                      empty, empty))
        layout = check_problem(p)
        assert_array_equal(layout.x_l, layout.x_u)

    def test_hessian_entries_in_both_triangles(self):
        class Coupled(SimpleIneqConstr):
            def get_nlp_info(self):
                return SimpleIneqConstr.get_nlp_info(self)._replace(
                    nnz_h_lag=3)

            def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
                       values=False):
                return np.array([0, 1, 0]), np.array([0, 0, 1])

        assert_raises(ContractError, check_problem, Coupled())

    def test_repeated_hessian_entries(self):
        class Repeated(ShiftedQuadratic):
            def get_nlp_info(self):
                return ShiftedQuadratic.get_nlp_info(self)._replace(
                    nnz_h_lag=2)

            def eval_h(self, x, new_x, obj_factor, lambda_, new_lambda,
                       values=False):
                return np.array([0, 0]), np.array([0, 0])

        assert_raises(ContractError, check_problem, Repeated())

    def test_no_evaluation_callback_called(self):
        class Guarded(TooManyHessianEntries):
            def eval_f(self, x, new_x):
                raise AssertionError("eval_f called")

        assert_raises(ContractError, check_problem, Guarded())


class TestValues(object):

    def test_check_values(self):
        assert_array_equal(check_values([1, 2], 2, "Hessian"), [1.0, 2.0])
        assert_raises(ContractError, check_values, [1, 2], 1, "Hessian")
        assert_raises(ContractError, check_values, [], 1, "Jacobian")

    def test_check_starting_point(self):
        assert_array_equal(check_starting_point([5], 1), [5.0])
        assert_raises(ContractError, check_starting_point, None, 1)
        assert_raises(ContractError, check_starting_point, [1, 2], 1)

    def test_assemble_symmetric(self):
        structure = (np.array([0, 1, 1]), np.array([0, 0, 1]))
        H = assemble(structure, np.array([1.0, 2.0, 3.0]), (2, 2),
                     symmetric=True)
        assert_array_equal(H.toarray(), [[1, 2],
                                         [2, 3]])

    def test_assemble_rectangular(self):
        structure = (np.array([0, 0]), np.array([0, 2]))
        A = assemble(structure, np.array([4.0, 5.0]), (1, 3))
        assert_array_equal(A.toarray(), [[4, 0, 5]])
