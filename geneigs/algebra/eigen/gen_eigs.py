"""
Implicitly Restarted Arnoldi Eigenvalue Solver

Computes a few eigenvalues and eigenvectors of a general (non-symmetric) real
operator with the implicitly restarted Arnoldi method (IRAM), the algorithm of
ARPACK's dnaupd.

Mathematical Background:
    An m-step Arnoldi factorization of A is

        A V_m = V_m H_m + f_m e_m'

    with V_m' V_m = I, H_m upper Hessenberg and V_m' f_m = 0. Eigenpairs (theta, y)
    of H_m give Ritz pairs (theta, V_m y) of A, with residual

        ||A V_m y - theta V_m y|| = ||f_m|| |e_m' y|.

    A restart applies p = m - k shifted QR steps to H_m, using the unwanted Ritz
    values as shifts. The leading k columns of the transformed factorization are
    again an Arnoldi factorization, now with the unwanted directions filtered out,
    and are extended back to m steps. Complex conjugate shifts are applied in pairs
    by a real double shift step (DoubleShiftQR), real shifts by a single Givens QR
    step (UpperHessenbergQR).

Key Features:
    - Arbitrary operators (dense, sparse, matrix free, shift-and-invert)
    - Selection rules LM, LR, LI, SM, SR, SI
    - Conjugate pairs are never split between wanted and unwanted sets
    - Reorthogonalization when orthogonality of f against V degrades
    - Post-processing of converged values (shift-and-invert back transforms)

References:
    [1] D. C. Sorensen, "Implicit application of polynomial filters in a k-step
        Arnoldi method", SIAM J. Matrix Anal. Appl. 13 (1992)
    [2] R. B. Lehoucq, D. C. Sorensen, C. Yang, "ARPACK Users' Guide", SIAM 1998
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from ..utils import (ARNOLDI_PREC, DEFAULT_MAXIT, DEFAULT_TOL, DEFAULT_NP_FLOAT_TYPE,
                     DEFAULT_NP_CPX_TYPE, RngLike, get_rng, random_vector)
from ...common.flog import Logger, get_global_logger
from .result import EigenResult, EigenSolver, EigenSolverError, EigenSolverErrorMsg, EigenSolverStateError
from .selection import SelectionRule
from .operators import MatOp, ShiftSolveOp, as_operator
from .postprocess import RitzPostProcess, IdentityPostProcess, ShiftInvertReal, ShiftInvertComplex
from .hessenberg_qr import UpperHessenbergQR
from .double_shift_qr import DoubleShiftQR

# ----------------------------------------------------------------------------------------

def _is_complex(v: complex, eps: float) -> bool:
    return abs(v.imag) > eps

def _is_conj(v1: complex, v2: complex, eps: float) -> bool:
    return abs(v1 - np.conj(v2)) < eps

# ----------------------------------------------------------------------------------------
#! Solver
# ----------------------------------------------------------------------------------------

class GenEigsSolver(EigenSolver):
    """
    Implicitly restarted Arnoldi solver for general real operators.

    Args:
        op          : operator exposing ``rows`` and ``perform_op(x)``, or a matrix (see ``as_operator``)
        nev         : number of eigenvalues requested, 1 <= nev < n
        ncv         : dimension of the Krylov subspace, nev < ncv (clamped to n)
        rule        : selection rule ('LM', 'LR', 'LI', 'SM', 'SR', 'SI')
        postprocess : map applied to the wanted Ritz values before the final ordering
        rng         : seed or numpy Generator used for random starting vectors
        logger      : logger (the global one if None)
        verbose     : log a summary of every ``compute`` at info level

    Example:
        >>> op      = DenseGenMatProd(A)
        >>> solver  = GenEigsSolver(op, nev=3, ncv=8)
        >>> solver.init()
        >>> nconv   = solver.compute()
        >>> evals   = solver.eigenvalues()
    """

    def __init__(self,
                op          : MatOp,
                nev         : int,
                ncv         : int,
                rule        : Union[SelectionRule, str]         = SelectionRule.LARGEST_MAGN,
                postprocess : Optional[RitzPostProcess]         = None,
                rng         : RngLike                           = None,
                logger      : Optional[Logger]                  = None,
                verbose     : bool                              = False):
        self.op         = op if isinstance(op, MatOp) else as_operator(op)
        self.dim_n      = int(self.op.rows)

        if nev < 1 or nev >= self.dim_n:
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_NEV,
                                   f"nev must be greater than zero and less than the size of the matrix, got nev={nev}, n={self.dim_n}")
        if ncv <= nev:
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_NCV,
                                   f"ncv must be greater than nev, got ncv={ncv}, nev={nev}")

        self.nev            = int(nev)
        self.ncv            = int(min(ncv, self.dim_n))
        self.rule           = SelectionRule.parse(rule)
        self.postprocess    = postprocess if postprocess is not None else IdentityPostProcess()
        self.prec           = ARNOLDI_PREC
        self.verbose        = verbose
        self._rng           = get_rng(rng)
        self._log           = logger if logger is not None else get_global_logger()

        self.nmatop         = 0
        self.niter          = 0

        self.fac_V          = None
        self.fac_H          = None
        self.fac_f          = None
        self.ritz_val       = None
        self.ritz_vec       = None
        self.ritz_conv      = None

        self._initialized   = False
        self._computed      = False
        self._breaks        = []

    @staticmethod
    def is_iterative_solver() -> bool:
        return True

    @staticmethod
    def is_sparse_solver() -> bool:
        return True

    # ------------------------------------------------------------------------------------
    #! Operator
    # ------------------------------------------------------------------------------------

    def _op(self, v: NDArray) -> NDArray:
        w = np.asarray(self.op.perform_op(v), dtype=DEFAULT_NP_FLOAT_TYPE)
        self.nmatop += 1
        return w

    # ------------------------------------------------------------------------------------
    #! Initialization
    # ------------------------------------------------------------------------------------

    def init(self, resid: Optional[NDArray] = None, rng: RngLike = None) -> None:
        """
        Allocate the factorization and perform its first step from ``resid``.

        Args:
            resid   : starting vector; random in [-0.5, 0.5) when None
            rng     : random source for the starting vector (defaults to the solver's)
        """
        n, ncv, nev         = self.dim_n, self.ncv, self.nev
        if rng is not None:
            self._rng       = get_rng(rng)

        self.fac_V          = np.zeros((n, ncv), dtype=DEFAULT_NP_FLOAT_TYPE)
        self.fac_H          = np.zeros((ncv, ncv), dtype=DEFAULT_NP_FLOAT_TYPE)
        self.fac_f          = np.zeros(n, dtype=DEFAULT_NP_FLOAT_TYPE)
        self.ritz_val       = np.zeros(ncv, dtype=DEFAULT_NP_CPX_TYPE)
        self.ritz_vec       = np.zeros((ncv, nev), dtype=DEFAULT_NP_CPX_TYPE)
        self.ritz_conv      = np.zeros(nev, dtype=bool)
        self._initialized   = False
        self._computed      = False
        self._breaks        = []

        if resid is None:
            resid = random_vector(n, self._rng)

        v = np.array(resid, dtype=DEFAULT_NP_FLOAT_TYPE).reshape(-1)
        if v.shape != (n,):
            raise EigenSolverError(EigenSolverErrorMsg.DIM_MISMATCH,
                                   f"initial residual must have length {n}, got {v.shape}")
        vnorm = np.linalg.norm(v)
        if vnorm < self.prec:
            raise EigenSolverError(EigenSolverErrorMsg.ZERO_RESIDUAL, "initial residual vector cannot be zero")
        v /= vnorm

        w                   = self._op(v)
        self.fac_H[0, 0]    = v @ w
        self.fac_f          = w - v * self.fac_H[0, 0]
        self.fac_V[:, 0]    = v
        self._initialized   = True

    # ------------------------------------------------------------------------------------
    #! Arnoldi factorization
    # ------------------------------------------------------------------------------------

    def _random_direction(self, i: int) -> NDArray:
        """
        Unit vector orthogonal to the first ``i`` basis vectors.
        """
        V = self.fac_V[:, :i]
        for _ in range(3):
            r = random_vector(self.dim_n, self._rng)
            for _ in range(2):
                r -= V @ (V.T @ r)
            rnorm = np.linalg.norm(r)
            if rnorm > self.prec:
                return r / rnorm
        raise EigenSolverStateError(EigenSolverErrorMsg.INVALID_INPUT,
                                    "could not generate a new direction orthogonal to the Krylov basis")

    def factorize_from(self, from_k: int, to_m: int, fk: NDArray) -> None:
        """
        Extend the Arnoldi factorization of length ``from_k`` to length ``to_m``,
        ``fk`` being the residual of the current factorization.
        """
        if to_m <= from_k:
            return

        V, H        = self.fac_V, self.fac_H
        self.fac_f  = np.array(fk, dtype=DEFAULT_NP_FLOAT_TYPE)

        # keep the upper left from_k x from_k block of H
        H[:, from_k:]       = 0.0
        H[from_k:, :from_k] = 0.0
        # breakdown positions beyond from_k are rebuilt
        self._breaks        = [j for j in self._breaks if j < from_k]

        for i in range(from_k, to_m):
            beta = np.linalg.norm(self.fac_f)
            if beta < self.prec:
                # invariant subspace found, continue with a fresh direction
                self._log.debug(f"Arnoldi breakdown at step {i}, ||f|| = {beta:.3e}", lvl=2)
                v       = self._random_direction(i)
                beta    = 0.0
                self._breaks.append(i)
            else:
                v       = self.fac_f / beta

            V[:, i]     = v
            H[i, :i]    = 0.0
            H[i, i - 1] = beta

            w           = self._op(v)
            Vi          = V[:, :i + 1]
            h           = Vi.T @ w
            H[:i + 1, i] = h
            self.fac_f  = w - Vi @ h

            # the largest loss of orthogonality typically shows in <v1, f>
            v1f = self.fac_f @ V[:, 0]
            if abs(v1f) > self.prec:
                Vf              = Vi.T @ self.fac_f
                self.fac_f      -= Vi @ Vf
                H[:i + 1, i]    += Vf

    # ------------------------------------------------------------------------------------
    #! Ritz pairs
    # ------------------------------------------------------------------------------------

    def retrieve_ritzpair(self) -> None:
        """
        Eigen-decompose H, order all Ritz values by the rule and keep the
        first nev Ritz vectors.
        """
        evals, evecs    = np.linalg.eig(self.fac_H)
        evals           = evals.astype(DEFAULT_NP_CPX_TYPE)
        evecs           = evecs.astype(DEFAULT_NP_CPX_TYPE)
        order           = self.rule.argsort(evals)

        self.ritz_val   = evals[order]
        self.ritz_vec   = evecs[:, order[:self.nev]]

    def num_converged(self, tol: float) -> int:
        """
        Number of wanted Ritz pairs with |e_m' y| ||f|| < tol * max(prec, |theta|).
        """
        thresh          = tol * np.maximum(np.abs(self.ritz_val[:self.nev]), self.prec)
        resid           = np.abs(self.ritz_vec[-1, :]) * np.linalg.norm(self.fac_f)
        self.ritz_conv  = resid < thresh
        return int(np.count_nonzero(self.ritz_conv))

    def ritz_estimates(self) -> NDArray:
        """Residual estimates ||f|| |e_m' y| of the wanted Ritz pairs."""
        self._check_initialized()
        return np.abs(self.ritz_vec[-1, :]) * np.linalg.norm(self.fac_f)

    def nev_adjusted(self, nconv: int) -> int:
        """
        Number of Ritz values to keep at the next restart (ARPACK dnaup2).
        """
        nev, ncv, rv, prec = self.nev, self.ncv, self.ritz_val, self.prec

        nev_new = nev
        # do not split a conjugate pair at the boundary
        if _is_complex(rv[nev - 1], prec) and _is_conj(rv[nev - 1], rv[nev], prec):
            nev_new = nev + 1

        nev_new = nev_new + min(nconv, (ncv - nev_new) // 2)
        if nev_new == 1 and ncv >= 6:
            nev_new = ncv // 2
        elif nev_new == 1 and ncv > 3:
            nev_new = 2

        if nev_new > ncv - 2:
            nev_new = ncv - 2
        nev_new = max(nev_new, 1)

        # examine the conjugate pair at the new boundary again
        if _is_complex(rv[nev_new - 1], prec) and _is_conj(rv[nev_new - 1], rv[nev_new], prec):
            nev_new += 1

        return nev_new

    # ------------------------------------------------------------------------------------
    #! Restart
    # ------------------------------------------------------------------------------------

    def restart(self, k: int) -> None:
        """
        Implicit restart keeping ``k`` Ritz values: the unwanted ones
        ritz_val[k:] are applied as shifts.
        """
        ncv = self.ncv
        if k >= ncv:
            return

        decomp_ds   = DoubleShiftQR()
        decomp_hb   = UpperHessenbergQR()
        em          = np.zeros(ncv, dtype=DEFAULT_NP_FLOAT_TYPE)
        em[-1]      = 1.0
        eye         = np.eye(ncv, dtype=DEFAULT_NP_FLOAT_TYPE)
        # wanted Ritz directions, the new start if the kept block turns out locked
        x_wanted    = self.fac_V @ self.ritz_vec.real.sum(axis=1)

        i = k
        while i < ncv:
            mu = self.ritz_val[i]
            if i + 1 < ncv and _is_complex(mu, self.prec) and _is_conj(mu, self.ritz_val[i + 1], self.prec):
                # (H - mu I)(H - conj(mu) I) = QR, H <- Q'HQ
                decomp_ds.compute(self.fac_H, 2.0 * mu.real, abs(mu) ** 2)
                # V -> VQ
                decomp_ds.apply_YQ(self.fac_V)
                self.fac_H = decomp_ds.matrix_QtHQ()
                # em -> Q'em
                decomp_ds.apply_QtY(em)
                i += 2
            else:
                # H - mu I = QR, H <- RQ + mu I
                shift = mu.real
                decomp_hb.compute(self.fac_H - shift * eye)
                decomp_hb.apply_YQ(self.fac_V)
                self.fac_H = decomp_hb.matrix_RQ() + shift * eye
                decomp_hb.apply_QtY(em)
                i += 1

        if self._locked_block(k):
            self._log.debug("restart keeps an invariant block with unwanted Ritz values, restarting from the wanted Ritz vectors", lvl=2)
            self._reseed(x_wanted)
            return

        fk = self.fac_f * em[k - 1] + self.fac_V[:, k] * self.fac_H[k, k - 1]
        self.factorize_from(k, ncv, fk)
        self.retrieve_ritzpair()

    def _locked_block(self, k: int) -> bool:
        """
        Whether a leading invariant block of the factorization holds one of the
        shifts ritz_val[k:].

        A breakdown at step j leaves H[j, j-1] = 0. Shifted QR steps keep that
        zero, so the leading j x j block and its eigenvalues never mix with the
        rest of H and stay in front of every restart.
        """
        for j in self._breaks:
            block   = np.linalg.eigvals(self.fac_H[:j, :j])
            d_keep  = np.min(np.abs(block[:, None] - self.ritz_val[None, :k]), axis=1)
            d_shift = np.min(np.abs(block[:, None] - self.ritz_val[None, k:]), axis=1)
            if np.any(d_shift < d_keep):
                return True
        return False

    def _reseed(self, x: NDArray) -> None:
        """
        New factorization from x plus a random direction orthogonal to the
        current basis.
        """
        xnorm = np.linalg.norm(x)
        if xnorm > self.prec:
            x = x / xnorm
        if self.ncv < self.dim_n:
            r = self._random_direction(self.ncv)
        else:
            r = random_vector(self.dim_n, self._rng)

        self.init(x + r)
        self.factorize_from(1, self.ncv, self.fac_f)
        self.retrieve_ritzpair()

    # ------------------------------------------------------------------------------------
    #! Final ordering
    # ------------------------------------------------------------------------------------

    def sort_ritzpair(self) -> None:
        """
        Post-process the nev wanted Ritz values and order the wanted pairs.
        """
        nev     = self.nev
        values  = self.postprocess.transform(self.ritz_val[:nev], self.ritz_vec, self.fac_V)
        rule    = self.postprocess.final_rule if self.postprocess.final_rule is not None else self.rule
        order   = rule.argsort(values)

        self.ritz_val[:nev] = values[order]
        self.ritz_vec       = self.ritz_vec[:, order]
        self.ritz_conv      = self.ritz_conv[order]

    # ------------------------------------------------------------------------------------
    #! Main loop
    # ------------------------------------------------------------------------------------

    def compute(self, maxit: int = DEFAULT_MAXIT, tol: float = DEFAULT_TOL) -> int:
        """
        Run the restarted Arnoldi iteration.

        Args:
            maxit   : maximum number of restarting iterations
            tol     : relative tolerance of the Ritz residual test

        Returns:
            Number of converged eigenpairs, at most nev. Fewer than nev is not an
            error; the caller checks the count.
        """
        self._check_initialized()

        self.factorize_from(1, self.ncv, self.fac_f)
        self.retrieve_ritzpair()

        nconv   = 0
        it      = 0
        while it < maxit:
            it     += 1
            nconv   = self.num_converged(tol)
            if nconv >= self.nev:
                break
            nev_adj = self.nev_adjusted(nconv)
            self._log.debug(f"iteration {it}: nconv = {nconv}, keeping {nev_adj} Ritz values", lvl=2)
            self.restart(nev_adj)
        else:
            # the budget ran out after a restart, refresh the flags
            nconv   = self.num_converged(tol)

        self.sort_ritzpair()
        self.niter     += it
        self._computed  = True

        nconv = min(self.nev, nconv)
        self._log.info(f"{self.__class__.__name__}: {nconv}/{self.nev} converged after {it} iterations, "
                       f"{self.nmatop} operations", lvl=1, verbose=self.verbose, color='green')
        if nconv < self.nev:
            self._log.warning(f"{self.__class__.__name__}: only {nconv} of {self.nev} eigenpairs converged "
                              f"within maxit = {maxit}", lvl=1)
        return nconv

    # ------------------------------------------------------------------------------------
    #! Results
    # ------------------------------------------------------------------------------------

    def _check_initialized(self):
        if not self._initialized:
            raise EigenSolverStateError(EigenSolverErrorMsg.NOT_INITIALIZED, "need to call init() first")

    def _check_computed(self):
        if not self._computed:
            raise EigenSolverStateError(EigenSolverErrorMsg.NOT_COMPUTED, "need to call compute() first")

    def num_iterations(self) -> int:
        """Number of restarting iterations."""
        return self.niter

    def num_operations(self) -> int:
        """Number of operator applications."""
        return self.nmatop

    def eigenvalues(self) -> NDArray:
        """Converged eigenvalues, ordered."""
        self._check_computed()
        return self.ritz_val[:self.nev][self.ritz_conv].copy()

    def eigenvectors(self) -> NDArray:
        """Converged eigenvectors as columns, V y for every converged Ritz vector y."""
        self._check_computed()
        return self.fac_V @ self.ritz_vec[:, self.ritz_conv]

    # ------------------------------------------------------------------------------------

    def solve(self,
            v0      : Optional[NDArray] = None,
            maxit   : int               = DEFAULT_MAXIT,
            tol     : float             = DEFAULT_TOL,
            rng     : RngLike           = None) -> EigenResult:
        """
        ``init`` + ``compute``, packed into an ``EigenResult``.
        """
        self.init(v0, rng=rng)
        iter_before     = self.niter
        nconv           = self.compute(maxit=maxit, tol=tol)
        residuals       = self.ritz_estimates()[self.ritz_conv]
        return EigenResult(
            eigenvalues     = self.eigenvalues(),
            eigenvectors    = self.eigenvectors(),
            subspacevectors = self.fac_V.copy(),
            iterations      = self.niter - iter_before,
            converged       = nconv >= self.nev,
            residual_norms  = residuals,
            operations      = self.nmatop,
        )

# ----------------------------------------------------------------------------------------
#! Shift-and-invert configurations
# ----------------------------------------------------------------------------------------

def _shift_solve_operator(op, sigma) -> ShiftSolveOp:
    """
    Shift-and-solve operator for ``sigma``: a ShiftSolveOp gets the shift, a matrix
    is wrapped by ``as_operator``. An operator already factorized at ``sigma``
    is used as is.
    """
    if isinstance(op, ShiftSolveOp) and op.sigma is not None and op.sigma == sigma:
        return op
    op = as_operator(op, sigma=sigma)
    if not isinstance(op, ShiftSolveOp):
        raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT,
                               f"shift-and-invert mode needs a shift-and-solve operator, got {type(op).__name__}")
    return op

class GenEigsRealShiftSolver(GenEigsSolver):
    """
    Eigenvalues of A closest to a real shift sigma, with op = (A - sigma I)^{-1}.

    The selection rule applies to nu = 1 / (lambda - sigma); with the default
    'LM' the eigenvalues nearest to sigma are found. Returned values are
    lambda = sigma + 1 / nu.
    """

    def __init__(self, op: ShiftSolveOp, nev: int, ncv: int, sigma: float,
                rule        : Union[SelectionRule, str]         = SelectionRule.LARGEST_MAGN,
                final_rule  : Union[SelectionRule, str, None]   = SelectionRule.LARGEST_MAGN,
                **kwargs):
        op = _shift_solve_operator(op, sigma)
        super().__init__(op, nev, ncv, rule=rule, postprocess=ShiftInvertReal(sigma, final_rule), **kwargs)
        self.sigma = float(sigma)

class GenEigsComplexShiftSolver(GenEigsSolver):
    """
    Eigenvalues of a real A closest to a complex shift sigma, with
    op = Re[(A - sigma I)^{-1}]. Eigenvalues are recovered through Rayleigh
    quotients with ``product_op`` (y = A x).
    """

    def __init__(self, op: ShiftSolveOp, nev: int, ncv: int, sigma: complex, product_op,
                rule        : Union[SelectionRule, str]         = SelectionRule.LARGEST_MAGN,
                final_rule  : Union[SelectionRule, str, None]   = SelectionRule.LARGEST_MAGN,
                **kwargs):
        op = _shift_solve_operator(op, sigma)
        super().__init__(op, nev, ncv, rule=rule, postprocess=ShiftInvertComplex(sigma, product_op, final_rule), **kwargs)
        self.sigma = complex(sigma)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
