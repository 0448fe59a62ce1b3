"""
QR decomposition of an upper Hessenberg matrix by Givens rotations.

Used by the implicit restart for real shifts: with H - mu I = Q R, the matrix
R Q + mu I = Q' H Q is again upper Hessenberg and the Krylov basis follows as V Q.

Q = G_0 G_1 ... G_{n-2}, where G_i rotates rows (or columns) i and i + 1 by

    G_i = [[c_i, -s_i],
           [s_i,  c_i]]

so that G_i' [x_i, x_{i+1}]' = [r, 0]'. Each rotation touches two rows or two
columns, hence every application below is O(n) per rotation.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ..utils import EPS, DEFAULT_NP_FLOAT_TYPE
from .result import EigenSolverError, EigenSolverErrorMsg, EigenSolverStateError

# ----------------------------------------------------------------------------------------

class UpperHessenbergQR:
    """
    Givens QR of an upper Hessenberg matrix.

    Example:
        >>> qr = UpperHessenbergQR(H - mu * np.eye(n))
        >>> H_new = qr.matrix_RQ() + mu * np.eye(n)
        >>> qr.apply_YQ(V)
    """

    def __init__(self, mat: Optional[NDArray] = None):
        self._n         = 0
        self._mat_T     = None
        self._rot_cos   = None
        self._rot_sin   = None
        self._computed  = False
        if mat is not None:
            self.compute(mat)

    # ------------------------------------------------------------------------------------

    def compute(self, mat: NDArray) -> 'UpperHessenbergQR':
        mat = np.asarray(mat, dtype=DEFAULT_NP_FLOAT_TYPE)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise EigenSolverError(EigenSolverErrorMsg.MAT_NOT_SQUARE,
                                   f"UpperHessenbergQR: matrix must be square, got shape {mat.shape}")

        n               = mat.shape[0]
        self._n         = n
        self._mat_T     = np.triu(mat, -1)
        self._rot_cos   = np.ones(max(n - 1, 0), dtype=DEFAULT_NP_FLOAT_TYPE)
        self._rot_sin   = np.zeros(max(n - 1, 0), dtype=DEFAULT_NP_FLOAT_TYPE)
        T               = self._mat_T

        for i in range(n - 1):
            xi, xj  = T[i, i], T[i + 1, i]
            r       = np.hypot(xi, xj)
            if r <= EPS:
                c, s = 1.0, 0.0
            else:
                c, s = xi / r, xj / r
            self._rot_cos[i] = c
            self._rot_sin[i] = s

            # rows i, i+1 <- G_i' [rows i, i+1]
            row_i           = T[i, i:].copy()
            row_j           = T[i + 1, i:]
            T[i, i:]        = c * row_i + s * row_j
            T[i + 1, i:]    = -s * row_i + c * row_j
            T[i + 1, i]     = 0.0

        self._computed = True
        return self

    def _check(self):
        if not self._computed:
            raise EigenSolverStateError(EigenSolverErrorMsg.NOT_COMPUTED, "UpperHessenbergQR: need to call compute() first")

    # ------------------------------------------------------------------------------------

    def matrix_R(self) -> NDArray:
        """Upper triangular factor."""
        self._check()
        return self._mat_T.copy()

    def matrix_RQ(self) -> NDArray:
        """R Q, upper Hessenberg."""
        self._check()
        RQ = self._mat_T.copy()
        for i in range(self._n - 1):
            c, s            = self._rot_cos[i], self._rot_sin[i]
            # rows 0..i+1 are the only nonzero ones of columns i, i+1
            col_i           = RQ[:i + 2, i].copy()
            col_j           = RQ[:i + 2, i + 1]
            RQ[:i + 2, i]       = c * col_i + s * col_j
            RQ[:i + 2, i + 1]   = -s * col_i + c * col_j
        return RQ

    def apply_QtY(self, y: NDArray) -> None:
        """In place y <- Q' y for a vector y."""
        self._check()
        for i in range(self._n - 1):
            c, s        = self._rot_cos[i], self._rot_sin[i]
            yi, yj      = y[i], y[i + 1]
            y[i]        = c * yi + s * yj
            y[i + 1]    = -s * yi + c * yj

    def apply_YQ(self, Y: NDArray) -> None:
        """In place Y <- Y Q for a matrix Y with n columns."""
        self._check()
        for i in range(self._n - 1):
            c, s            = self._rot_cos[i], self._rot_sin[i]
            col_i           = Y[:, i].copy()
            col_j           = Y[:, i + 1]
            Y[:, i]         = c * col_i + s * col_j
            Y[:, i + 1]     = -s * col_i + c * col_j

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
