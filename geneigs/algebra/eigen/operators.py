"""
Matrix operators consumed by the Arnoldi engine.

The engine only needs the dimension of the problem and a way to apply the
operator to a dense vector. Shift-and-invert variants additionally accept a
shift before they are applied.

Operators:
    - DenseGenMatProd           : y = A x, dense ndarray
    - SparseGenMatProd          : y = A x, scipy.sparse matrix
    - FunctionMatProd           : y = matvec(x), user supplied callable
    - DenseGenRealShiftSolve    : y = (A - sigma I)^{-1} x, real sigma, dense LU
    - SparseGenRealShiftSolve   : y = (A - sigma I)^{-1} x, real sigma, sparse LU
    - DenseGenComplexShiftSolve : y = Re[(A - sigma I)^{-1} x], complex sigma

References:
    - R. B. Lehoucq, D. C. Sorensen, C. Yang, "ARPACK Users' Guide", SIAM 1998, Ch. 3
"""

from typing import Callable, Optional, Union

import numpy as np
import scipy.linalg as scipy_linalg
import scipy.sparse as sp
import scipy.sparse.linalg as scipy_sparse_linalg
from numpy.typing import NDArray

from .result import EigenSolverError, EigenSolverErrorMsg, EigenSolverStateError

# ----------------------------------------------------------------------------------------
#! Base
# ----------------------------------------------------------------------------------------

def _check_square(shape, name: str):
    if len(shape) != 2 or shape[0] != shape[1]:
        raise EigenSolverError(EigenSolverErrorMsg.MAT_NOT_SQUARE, f"{name}: matrix must be square, got shape {tuple(shape)}")

class MatOp:
    """
    Operator interface: ``rows``, ``cols`` and ``perform_op(x) -> y``.
    """

    def __init__(self, n: int):
        self._n = int(n)

    @property
    def rows(self) -> int:
        return self._n

    @property
    def cols(self) -> int:
        return self._n

    @property
    def shape(self):
        return (self._n, self._n)

    def perform_op(self, x: NDArray) -> NDArray:
        raise NotImplementedError("This method should be implemented by subclasses.")

    def __call__(self, x: NDArray) -> NDArray:
        return self.perform_op(x)

    def __repr__(self):
        return f"{self.__class__.__name__}(n={self._n})"

class ShiftSolveOp(MatOp):
    """
    Operator whose action depends on a shift, set through ``set_shift``.
    """

    def __init__(self, n: int):
        super().__init__(n)
        self._sigma = None

    @property
    def sigma(self):
        return self._sigma

    def set_shift(self, sigma) -> None:
        raise NotImplementedError("This method should be implemented by subclasses.")

    def _require_shift(self):
        if self._sigma is None:
            raise EigenSolverStateError(EigenSolverErrorMsg.SHIFT_NOT_SET,
                                        f"{self.__class__.__name__}: set_shift() must be called before perform_op()")

# ----------------------------------------------------------------------------------------
#! Products
# ----------------------------------------------------------------------------------------

class DenseGenMatProd(MatOp):
    """y = A x for a dense general real matrix."""

    def __init__(self, A: NDArray):
        A = np.asarray(A)
        _check_square(A.shape, "DenseGenMatProd")
        super().__init__(A.shape[0])
        self.mat = A

    def perform_op(self, x: NDArray) -> NDArray:
        return self.mat @ x

class SparseGenMatProd(MatOp):
    """y = A x for a scipy sparse matrix, stored as CSR."""

    def __init__(self, A):
        _check_square(A.shape, "SparseGenMatProd")
        super().__init__(A.shape[0])
        self.mat = sp.csr_matrix(A)

    def perform_op(self, x: NDArray) -> NDArray:
        return self.mat @ x

class FunctionMatProd(MatOp):
    """y = matvec(x) for a user supplied callable of dimension ``n``."""

    def __init__(self, matvec: Callable[[NDArray], NDArray], n: int):
        if not callable(matvec):
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "FunctionMatProd: matvec must be callable")
        if n is None or int(n) < 1:
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, f"FunctionMatProd: invalid dimension {n}")
        super().__init__(n)
        self.matvec = matvec

    def perform_op(self, x: NDArray) -> NDArray:
        y = np.asarray(self.matvec(x))
        if y.shape != (self._n,):
            raise EigenSolverError(EigenSolverErrorMsg.DIM_MISMATCH,
                                   f"FunctionMatProd: matvec returned shape {y.shape}, expected ({self._n},)")
        return y

# ----------------------------------------------------------------------------------------
#! Shift and solve
# ----------------------------------------------------------------------------------------

class DenseGenRealShiftSolve(ShiftSolveOp):
    """
    y = (A - sigma I)^{-1} x for a dense matrix and a real shift.
    The shifted matrix is LU factorized once per ``set_shift``.
    """

    def __init__(self, A: NDArray):
        A = np.asarray(A, dtype=np.float64)
        _check_square(A.shape, "DenseGenRealShiftSolve")
        super().__init__(A.shape[0])
        self.mat    = A
        self._lu    = None

    def set_shift(self, sigma: float) -> None:
        sigma   = float(np.real(sigma))
        shifted = self.mat - sigma * np.eye(self._n, dtype=self.mat.dtype)
        lu, piv = scipy_linalg.lu_factor(shifted, check_finite=False)
        if np.any(np.abs(np.diag(lu)) == 0.0):
            raise EigenSolverError(EigenSolverErrorMsg.SINGULAR_SHIFT,
                                   f"DenseGenRealShiftSolve: A - sigma * I is singular for sigma = {sigma}")
        self._lu    = (lu, piv)
        self._sigma = sigma

    def perform_op(self, x: NDArray) -> NDArray:
        self._require_shift()
        return scipy_linalg.lu_solve(self._lu, x, check_finite=False)

class SparseGenRealShiftSolve(ShiftSolveOp):
    """
    y = (A - sigma I)^{-1} x for a sparse matrix and a real shift (SuperLU).
    """

    def __init__(self, A):
        _check_square(A.shape, "SparseGenRealShiftSolve")
        super().__init__(A.shape[0])
        self.mat    = sp.csc_matrix(A, dtype=np.float64)
        self._lu    = None

    def set_shift(self, sigma: float) -> None:
        sigma   = float(np.real(sigma))
        shifted = (self.mat - sigma * sp.identity(self._n, dtype=self.mat.dtype, format='csc')).tocsc()
        try:
            self._lu = scipy_sparse_linalg.splu(shifted)
        except RuntimeError as e:
            raise EigenSolverError(EigenSolverErrorMsg.SINGULAR_SHIFT,
                                   f"SparseGenRealShiftSolve: A - sigma * I is singular for sigma = {sigma}") from e
        self._sigma = sigma

    def perform_op(self, x: NDArray) -> NDArray:
        self._require_shift()
        return self._lu.solve(np.asarray(x, dtype=self.mat.dtype))

class DenseGenComplexShiftSolve(ShiftSolveOp):
    """
    y = Re[(A - sigma I)^{-1} x] for a dense real matrix and a complex shift.

    An eigenvector of A for lambda is an eigenvector of this real operator with
    eigenvalue nu = (1 / (lambda - sigma) + 1 / (lambda - conj(sigma))) / 2, so the
    eigenvalues of A are recovered through Rayleigh quotients (see ``ShiftInvertComplex``).
    """

    def __init__(self, A: NDArray):
        A = np.asarray(A)
        _check_square(A.shape, "DenseGenComplexShiftSolve")
        super().__init__(A.shape[0])
        self.mat    = A
        self._lu    = None

    def set_shift(self, sigma: complex) -> None:
        sigma   = complex(sigma)
        shifted = self.mat.astype(np.complex128) - sigma * np.eye(self._n, dtype=np.complex128)
        lu, piv = scipy_linalg.lu_factor(shifted, check_finite=False)
        if np.any(np.abs(np.diag(lu)) == 0.0):
            raise EigenSolverError(EigenSolverErrorMsg.SINGULAR_SHIFT,
                                   f"DenseGenComplexShiftSolve: A - sigma * I is singular for sigma = {sigma}")
        self._lu    = (lu, piv)
        self._sigma = sigma

    def perform_op(self, x: NDArray) -> NDArray:
        self._require_shift()
        return np.real(scipy_linalg.lu_solve(self._lu, x.astype(np.complex128), check_finite=False))

# ----------------------------------------------------------------------------------------
#! Dispatch
# ----------------------------------------------------------------------------------------

def as_operator(A: Union[MatOp, NDArray, 'sp.spmatrix', Callable, None] = None,
                n: Optional[int] = None,
                sigma: Optional[complex] = None) -> MatOp:
    """
    Build the operator matching the input type.

    Args:
        A       : MatOp (returned unchanged), dense array, scipy sparse matrix or callable.
        n       : Dimension, required for callables.
        sigma   : When given, a shift-and-solve operator with this shift is returned.

    Returns:
        MatOp
    """
    if isinstance(A, MatOp):
        if sigma is not None and isinstance(A, ShiftSolveOp):
            A.set_shift(sigma)
        return A

    if sigma is not None:
        if callable(A) and not hasattr(A, 'shape'):
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "shift-and-solve needs an explicit matrix, not a matvec")
        if np.iscomplexobj(sigma) and np.imag(sigma) != 0.0:
            if sp.issparse(A):
                raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "complex shifts are supported for dense matrices only")
            op = DenseGenComplexShiftSolve(A)
        elif sp.issparse(A):
            op = SparseGenRealShiftSolve(A)
        else:
            op = DenseGenRealShiftSolve(A)
        op.set_shift(sigma)
        return op

    if sp.issparse(A):
        return SparseGenMatProd(A)
    if isinstance(A, np.ndarray):
        return DenseGenMatProd(A)
    if isinstance(A, scipy_sparse_linalg.LinearOperator):
        _check_square(A.shape, "LinearOperator")
        return FunctionMatProd(A.matvec, A.shape[0])
    if callable(A):
        return FunctionMatProd(A, n)
    if A is not None:
        return DenseGenMatProd(np.asarray(A))
    raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "Either a matrix, an operator or a matvec must be provided")

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
