"""
Double Shift Implicit QR Step

Performs one Francis double-shift QR step on an upper Hessenberg matrix H with
the complex conjugate pair of shifts (mu, conj(mu)), using real arithmetic only.

Mathematical Background:
    With s = mu + conj(mu) and t = mu * conj(mu), let

        M = (H - mu I)(H - conj(mu) I) = H^2 - s H + t I = Q R.

    The step returns Q' H Q. By the implicit Q theorem Q is determined by its
    first column, which is proportional to the first column of M; only three
    entries of that column are nonzero. A 3x1 Householder reflector introduces a
    "bulge" below the sub-diagonal, and further 3x1 reflectors chase it down the
    band until the matrix is upper Hessenberg again.

    Every reflector P_i = I - 2 u_i u_i' acts on three consecutive rows/columns,
    so applying Q = P_0 P_1 ... P_{n-2} to a vector or to the columns of a matrix
    costs O(n) per reflector and Q is never formed.

Deflation:
    Sub-diagonal entries with |h_{i,i-1}| <= prec (prec = eps^0.9) are set to zero
    and split H into independent diagonal blocks. Each block is reduced on its own;
    its reflectors are then applied to the rows right of the block and to the
    columns above it.

References:
    - G. H. Golub, C. F. Van Loan, "Matrix Computations" (4th ed.), Sec. 7.5
    - J. G. F. Francis, "The QR transformation, part 2", Comput. J. 4 (1962)
"""

import math
from typing import List, Optional

import numba
import numpy as np
from numpy.typing import NDArray

from ..utils import QR_PREC, DEFAULT_NP_FLOAT_TYPE
from .result import EigenSolverError, EigenSolverErrorMsg, EigenSolverStateError

# ----------------------------------------------------------------------------------------
#! Reflector kernels
# ----------------------------------------------------------------------------------------

@numba.njit(cache=True)
def _compute_reflector(ref_u: np.ndarray, ind: int, x1: float, x2: float, x3: float, prec: float):
    """
    Unit u with (I - 2 u u') [x1, x2, x3]' = [-sign(x1) ||x||, 0, 0]'.
    Stores the zero vector when the reflector would be numerically undefined.
    """
    tmp     = x2 * x2 + x3 * x3
    # x1' = x1 + sign(x1) * ||x||, sign(0) = +1
    x1_new  = x1 + math.copysign(math.sqrt(x1 * x1 + tmp), x1)
    x_norm  = math.sqrt(x1_new * x1_new + tmp)
    if x_norm <= prec:
        ref_u[0, ind] = 0.0
        ref_u[1, ind] = 0.0
        ref_u[2, ind] = 0.0
    else:
        ref_u[0, ind] = x1_new / x_norm
        ref_u[1, ind] = x2 / x_norm
        ref_u[2, ind] = x3 / x_norm

@numba.njit(cache=True)
def _apply_px(X: np.ndarray, ref_u: np.ndarray, u_ind: int, r0: int, nrow: int, c0: int, c1: int, prec: float):
    """
    X[r0:r0+nrow, c0:c1] <- P X[r0:r0+nrow, c0:c1], nrow in {2, 3}.
    """
    sqrt_2  = math.sqrt(2.0)
    u0      = sqrt_2 * ref_u[0, u_ind]
    u1      = sqrt_2 * ref_u[1, u_ind]
    u2      = sqrt_2 * ref_u[2, u_ind]
    if u0 * u0 + u1 * u1 + u2 * u2 <= prec:
        return

    if nrow == 2:
        for j in range(c0, c1):
            tmp             = u0 * X[r0, j] + u1 * X[r0 + 1, j]
            X[r0, j]        -= tmp * u0
            X[r0 + 1, j]    -= tmp * u1
    else:
        for j in range(c0, c1):
            tmp             = u0 * X[r0, j] + u1 * X[r0 + 1, j] + u2 * X[r0 + 2, j]
            X[r0, j]        -= tmp * u0
            X[r0 + 1, j]    -= tmp * u1
            X[r0 + 2, j]    -= tmp * u2

@numba.njit(cache=True)
def _apply_xp(X: np.ndarray, ref_u: np.ndarray, u_ind: int, r0: int, r1: int, c0: int, ncol: int, prec: float):
    """
    X[r0:r1, c0:c0+ncol] <- X[r0:r1, c0:c0+ncol] P, ncol in {2, 3}.
    """
    sqrt_2  = math.sqrt(2.0)
    u0      = sqrt_2 * ref_u[0, u_ind]
    u1      = sqrt_2 * ref_u[1, u_ind]
    u2      = sqrt_2 * ref_u[2, u_ind]
    if u0 * u0 + u1 * u1 + u2 * u2 <= prec:
        return

    if ncol == 2:
        for i in range(r0, r1):
            tmp             = u0 * X[i, c0] + u1 * X[i, c0 + 1]
            X[i, c0]        -= tmp * u0
            X[i, c0 + 1]    -= tmp * u1
    else:
        for i in range(r0, r1):
            tmp             = u0 * X[i, c0] + u1 * X[i, c0 + 1] + u2 * X[i, c0 + 2]
            X[i, c0]        -= tmp * u0
            X[i, c0 + 1]    -= tmp * u1
            X[i, c0 + 2]    -= tmp * u2

@numba.njit(cache=True)
def _apply_pv(y: np.ndarray, ref_u: np.ndarray, u_ind: int, r0: int, prec: float):
    """
    y[r0:r0+3] <- P y[r0:r0+3]; a reflector with u2 = 0 only touches two entries.
    """
    u0 = ref_u[0, u_ind]
    u1 = ref_u[1, u_ind]
    u2 = ref_u[2, u_ind]
    if u0 * u0 + u1 * u1 + u2 * u2 <= prec:
        return

    three   = abs(u2) > prec
    dot2    = y[r0] * u0 + y[r0 + 1] * u1
    if three:
        dot2 += y[r0 + 2] * u2
    dot2        *= 2.0
    y[r0]       -= dot2 * u0
    y[r0 + 1]   -= dot2 * u1
    if three:
        y[r0 + 2] -= dot2 * u2

@numba.njit(cache=True)
def _reduce_block(H: np.ndarray, ref_u: np.ndarray, start: int, end: int, s: float, t: float, prec: float):
    """
    Double shift step on the unreduced diagonal block H[start:end+1, start:end+1].
    Reflectors start .. end are written to ref_u; only the block itself is updated.
    """
    nrow = end - start + 1
    if nrow <= 2:
        for k in range(nrow):
            _compute_reflector(ref_u, start + k, 0.0, 0.0, 0.0, prec)
        return

    a = start
    # first column of (H - mu I)(H - conj(mu) I)
    x = H[a, a] * (H[a, a] - s) + H[a, a + 1] * H[a + 1, a] + t
    y = H[a + 1, a] * (H[a, a] + H[a + 1, a + 1] - s)
    z = H[a + 2, a + 1] * H[a + 1, a]
    _compute_reflector(ref_u, a, x, y, z, prec)
    # bulge introduction
    _apply_px(H, ref_u, a, a, 3, a, end + 1, prec)
    _apply_xp(H, ref_u, a, a, a + min(nrow, 4), a, 3, prec)

    # bulge chasing
    for i in range(1, nrow - 2):
        r = a + i
        _compute_reflector(ref_u, r, H[r, r - 1], H[r + 1, r - 1], H[r + 2, r - 1], prec)
        _apply_px(H, ref_u, r, r, 3, r - 1, end + 1, prec)
        H[r + 1, r - 1] = 0.0
        H[r + 2, r - 1] = 0.0
        _apply_xp(H, ref_u, r, a, a + min(nrow, i + 4), r, 3, prec)

    # last two rows
    r = a + nrow - 2
    _compute_reflector(ref_u, r, H[r, r - 1], H[r + 1, r - 1], 0.0, prec)
    _compute_reflector(ref_u, r + 1, 0.0, 0.0, 0.0, prec)
    _apply_px(H, ref_u, r, r, 2, r - 1, end + 1, prec)
    H[r + 1, r - 1] = 0.0
    _apply_xp(H, ref_u, r, a, end + 1, r, 2, prec)

@numba.njit(cache=True)
def _apply_flanks(H: np.ndarray, ref_u: np.ndarray, start: int, end: int, prec: float):
    """
    Apply the reflectors of block [start, end] to the rows on its right
    and to the columns above it.
    """
    n = H.shape[0]
    if end - start < 2:
        return
    if end < n - 1:
        for j in range(start, end):
            _apply_px(H, ref_u, j, j, min(3, end - j + 1), end + 1, n, prec)
    if start > 0:
        for j in range(start, end):
            _apply_xp(H, ref_u, j, 0, start, j, min(3, end - j + 1), prec)

# ----------------------------------------------------------------------------------------
#! Double shift QR
# ----------------------------------------------------------------------------------------

class DoubleShiftQR:
    """
    One double shift QR step on an upper Hessenberg matrix.

    Args:
        mat : square matrix; only its upper triangle and first sub-diagonal are read
        s   : mu + conj(mu) = 2 Re(mu)
        t   : mu * conj(mu) = |mu|^2

    Example:
        >>> dqr = DoubleShiftQR(H, 2 * mu.real, abs(mu) ** 2)
        >>> H_new = dqr.matrix_QtHQ()
        >>> dqr.apply_YQ(V)     # V <- V Q
        >>> dqr.apply_QtY(em)   # em <- Q' em
    """

    def __init__(self, mat: Optional[NDArray] = None, s: Optional[float] = None, t: Optional[float] = None):
        self.n          = 0
        self.prec       = QR_PREC
        self.shift_s    = None
        self.shift_t    = None
        self._mat_H     = None
        self._ref_u     = None
        self._blocks    = []
        self._computed  = False
        if mat is not None and s is not None and t is not None:
            self.compute(mat, s, t)

    # ------------------------------------------------------------------------------------

    def compute(self, mat: NDArray, s: float, t: float) -> 'DoubleShiftQR':
        mat = np.asarray(mat, dtype=DEFAULT_NP_FLOAT_TYPE)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise EigenSolverError(EigenSolverErrorMsg.MAT_NOT_SQUARE,
                                   f"DoubleShiftQR: matrix must be square, got shape {mat.shape}")

        n               = mat.shape[0]
        self.n          = n
        self.shift_s    = float(s)
        self.shift_t    = float(t)
        self._mat_H     = np.ascontiguousarray(np.triu(mat, -1))
        self._ref_u     = np.zeros((3, n), dtype=DEFAULT_NP_FLOAT_TYPE)
        self._blocks    = self._split_blocks()

        for start, end in self._blocks:
            _reduce_block(self._mat_H, self._ref_u, start, end, self.shift_s, self.shift_t, self.prec)
            _apply_flanks(self._mat_H, self._ref_u, start, end, self.prec)

        self._computed = True
        return self

    def _split_blocks(self) -> List[tuple]:
        """
        Zero negligible sub-diagonal entries and return the (start, end) ranges,
        both inclusive, of the resulting diagonal blocks.
        """
        H           = self._mat_H
        zero_ind    = [0]
        for i in range(1, self.n):
            if abs(H[i, i - 1]) <= self.prec:
                H[i, i - 1] = 0.0
                zero_ind.append(i)
        zero_ind.append(self.n)
        return [(zero_ind[i], zero_ind[i + 1] - 1) for i in range(len(zero_ind) - 1)]

    def _check(self):
        if not self._computed:
            raise EigenSolverStateError(EigenSolverErrorMsg.NOT_COMPUTED, "DoubleShiftQR: need to call compute() first")

    # ------------------------------------------------------------------------------------

    @property
    def blocks(self) -> List[tuple]:
        """Diagonal blocks found by the deflation test."""
        self._check()
        return list(self._blocks)

    @property
    def reflectors(self) -> NDArray:
        """3 x n matrix of reflector vectors (zero columns are identities)."""
        self._check()
        return self._ref_u.copy()

    def matrix_QtHQ(self) -> NDArray:
        self._check()
        return self._mat_H.copy()

    def apply_QtY(self, y: NDArray) -> None:
        """
        In place y <- Q' y = P_{n-2} ... P_1 P_0 y.
        """
        self._check()
        for i in range(self.n - 1):
            _apply_pv(y, self._ref_u, i, i, self.prec)

    def apply_QY(self, y: NDArray) -> None:
        """
        In place y <- Q y = P_0 P_1 ... P_{n-2} y.
        """
        self._check()
        for i in range(self.n - 2, -1, -1):
            _apply_pv(y, self._ref_u, i, i, self.prec)

    def apply_YQ(self, Y: NDArray) -> None:
        """
        In place Y <- Y Q = Y P_0 P_1 ... P_{n-2} for a matrix with n columns.
        """
        self._check()
        if Y.ndim != 2 or Y.shape[1] != self.n:
            raise EigenSolverError(EigenSolverErrorMsg.DIM_MISMATCH,
                                   f"DoubleShiftQR: expected a matrix with {self.n} columns, got shape {Y.shape}")
        if self.n < 2:
            return
        nrow = Y.shape[0]
        for i in range(self.n - 2):
            _apply_xp(Y, self._ref_u, i, 0, nrow, i, 3, self.prec)
        _apply_xp(Y, self._ref_u, self.n - 2, 0, nrow, self.n - 2, 2, self.prec)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
