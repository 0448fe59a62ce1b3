"""
Tests for the operators consumed by the Arnoldi engine.
"""

import numpy as np
import pytest
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from geneigs.algebra.eigen.operators import (
    DenseGenMatProd, SparseGenMatProd, FunctionMatProd, DenseGenRealShiftSolve,
    SparseGenRealShiftSolve, DenseGenComplexShiftSolve, ShiftSolveOp, as_operator)
from geneigs.algebra.eigen.result import EigenSolverError, EigenSolverErrorMsg, EigenSolverStateError

# ----------------------------------

def create_general_matrix(n, seed=42):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((n, n))

# ----------------------------------

class TestProducts:

    def test_dense(self):
        A   = create_general_matrix(6)
        x   = np.ones(6)
        op  = DenseGenMatProd(A)
        assert op.rows == op.cols == 6
        assert op.shape == (6, 6)
        assert np.allclose(op.perform_op(x), A @ x)
        assert np.allclose(op(x), A @ x)

    def test_sparse(self):
        A   = sp.random(20, 20, density=0.2, random_state=1, format='coo')
        x   = np.arange(20.0)
        op  = SparseGenMatProd(A)
        assert np.allclose(op.perform_op(x), A.toarray() @ x)

    def test_function(self):
        A   = create_general_matrix(5)
        op  = FunctionMatProd(lambda v: A @ v, 5)
        assert np.allclose(op.perform_op(np.ones(5)), A.sum(axis=1))

    def test_function_wrong_output(self):
        op  = FunctionMatProd(lambda v: np.ones(3), 5)
        with pytest.raises(EigenSolverError) as exc:
            op.perform_op(np.ones(5))
        assert exc.value.code == EigenSolverErrorMsg.DIM_MISMATCH

    def test_not_square(self):
        with pytest.raises(EigenSolverError) as exc:
            DenseGenMatProd(np.zeros((3, 4)))
        assert exc.value.code == EigenSolverErrorMsg.MAT_NOT_SQUARE
        with pytest.raises(EigenSolverError):
            SparseGenMatProd(sp.eye(3, 4))

# ----------------------------------

class TestShiftSolve:

    @pytest.mark.parametrize("cls, to_input", [
        (DenseGenRealShiftSolve, lambda A: A),
        (SparseGenRealShiftSolve, lambda A: sp.csr_matrix(A)),
    ])
    def test_real_shift(self, cls, to_input):
        n       = 8
        A       = create_general_matrix(n)
        sigma   = 0.37
        op      = cls(to_input(A))
        op.set_shift(sigma)
        x       = np.linspace(-1.0, 1.0, n)
        y       = op.perform_op(x)
        assert op.sigma == sigma
        assert np.allclose((A - sigma * np.eye(n)) @ y, x)

    def test_complex_shift_returns_real_part(self):
        n       = 7
        A       = create_general_matrix(n)
        sigma   = 0.2 + 0.8j
        op      = DenseGenComplexShiftSolve(A)
        op.set_shift(sigma)
        x       = np.ones(n)
        y       = op.perform_op(x)
        exact   = np.linalg.solve(A - sigma * np.eye(n), x.astype(complex))
        assert y.dtype == np.float64
        assert np.allclose(y, exact.real)

    def test_shift_not_set(self):
        op = DenseGenRealShiftSolve(create_general_matrix(4))
        with pytest.raises(EigenSolverStateError) as exc:
            op.perform_op(np.ones(4))
        assert exc.value.code == EigenSolverErrorMsg.SHIFT_NOT_SET

    def test_singular_shift(self):
        A   = np.diag([1.0, 2.0, 3.0])
        op  = DenseGenRealShiftSolve(A)
        with pytest.raises(EigenSolverError) as exc:
            op.set_shift(2.0)
        assert exc.value.code == EigenSolverErrorMsg.SINGULAR_SHIFT

    def test_singular_sparse_shift(self):
        A   = sp.diags([1.0, 2.0, 3.0]).tocsc()
        op  = SparseGenRealShiftSolve(A)
        with pytest.raises(EigenSolverError) as exc:
            op.set_shift(3.0)
        assert exc.value.code == EigenSolverErrorMsg.SINGULAR_SHIFT

# ----------------------------------

class TestAsOperator:

    def test_dispatch(self):
        A = create_general_matrix(5)
        assert isinstance(as_operator(A), DenseGenMatProd)
        assert isinstance(as_operator(sp.csr_matrix(A)), SparseGenMatProd)
        assert isinstance(as_operator(lambda v: A @ v, n=5), FunctionMatProd)
        assert isinstance(as_operator(A.tolist()), DenseGenMatProd)

        lin = spla.aslinearoperator(A)
        op  = as_operator(lin)
        assert isinstance(op, FunctionMatProd)
        assert np.allclose(op.perform_op(np.ones(5)), A @ np.ones(5))

    def test_existing_operator_is_returned(self):
        op = DenseGenMatProd(create_general_matrix(3))
        assert as_operator(op) is op

    def test_shift_dispatch(self):
        A   = create_general_matrix(5)
        op  = as_operator(A, sigma=0.5)
        assert isinstance(op, DenseGenRealShiftSolve) and op.sigma == 0.5
        op  = as_operator(sp.csr_matrix(A), sigma=0.5)
        assert isinstance(op, SparseGenRealShiftSolve)
        op  = as_operator(A, sigma=0.5 + 1.0j)
        assert isinstance(op, DenseGenComplexShiftSolve)
        # a complex number with zero imaginary part is a real shift
        op  = as_operator(A, sigma=0.5 + 0.0j)
        assert isinstance(op, ShiftSolveOp) and not isinstance(op, DenseGenComplexShiftSolve)

    def test_invalid_inputs(self):
        A = create_general_matrix(4)
        with pytest.raises(EigenSolverError):
            as_operator(None)
        with pytest.raises(EigenSolverError):
            as_operator(lambda v: v, n=4, sigma=1.0)
        with pytest.raises(EigenSolverError):
            as_operator(sp.csr_matrix(A), sigma=1.0j)

# ----------------------------------
#! EOF
# ----------------------------------
