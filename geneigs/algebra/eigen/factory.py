"""
Unified Eigenvalue Solver Interface

Provides a factory function building the operator and the Arnoldi solver that
match the input (dense matrix, sparse matrix, matrix free product) and the
requested mode (plain or shift-and-invert).

Example:
    >>> res = eigs(A, k=4, which='LR')
    >>> res.eigenvalues, res.converged
    >>> res = eigs(A, k=2, sigma=0.5)          # eigenvalues closest to 0.5
    >>> res = eigs(A, k=2, sigma=0.5 + 1.0j)   # closest to a complex shift
"""

from typing import Callable, Literal, Optional, Union

import numpy as np
from numpy.typing import NDArray

from ..utils import DEFAULT_MAXIT, DEFAULT_TOL, PY_INFO_VERBOSE, RngLike, print_info
from ...common.flog import Logger, get_global_logger
from .result import EigenResult, EigenSolverError, EigenSolverErrorMsg
from .selection import SelectionRule
from .operators import MatOp, DenseGenComplexShiftSolve, ShiftSolveOp, as_operator
from .gen_eigs import GenEigsSolver, GenEigsRealShiftSolver, GenEigsComplexShiftSolver

# ----------------------------------------------------------------------------------------

def default_ncv(n: int, k: int) -> int:
    """Krylov dimension used when none is given, min(n, max(2k + 1, 20))."""
    return min(n, max(2 * k + 1, 20))

def _is_complex_shift(sigma) -> bool:
    return sigma is not None and np.iscomplexobj(sigma) and np.imag(sigma) != 0.0

# ----------------------------------------------------------------------------------------
#! Factory
# ----------------------------------------------------------------------------------------

def eigs(A           : Union[NDArray, MatOp, Callable, None]             = None,
        k           : int                                               = 6,
        ncv         : Optional[int]                                     = None,
        which       : Union[SelectionRule, Literal['LM', 'LR', 'LI', 'SM', 'SR', 'SI']] = 'LM',
        sigma       : Optional[Union[float, complex]]                   = None,
        matvec      : Optional[Callable[[NDArray], NDArray]]            = None,
        n           : Optional[int]                                     = None,
        v0          : Optional[NDArray]                                 = None,
        maxit       : Optional[int]                                     = None,
        tol         : Optional[float]                                   = None,
        rng         : RngLike                                           = None,
        logger      : Optional[Logger]                                  = None,
        verbose     : bool                                              = False) -> EigenResult:
    r"""
    Compute ``k`` eigenvalues of a general real matrix with the implicitly
    restarted Arnoldi method.

    Parameters:
    -----------
        A :
            Dense ndarray, scipy sparse matrix, LinearOperator, MatOp or callable
        k :
            Number of eigenvalues requested, 1 <= k < n
        ncv :
            Krylov subspace dimension, default min(n, max(2k + 1, 20))
        which :
            Selection rule. With ``sigma`` it applies to 1 / (lambda - sigma)
            ('LM' then selects the eigenvalues closest to sigma)
        sigma :
            Shift for the shift-and-invert mode. Real shifts work with dense and
            sparse matrices, complex shifts with dense matrices only
        matvec, n :
            Matrix free product and its dimension (when ``A`` is None)
        v0 :
            Starting vector (random when None)
        maxit, tol :
            Restart budget and relative tolerance (environment defaults when None)
        rng :
            Seed or numpy Generator for the random starting vector
        logger, verbose :
            Logger used by the solver and whether to log a summary

    Returns:
        EigenResult with the converged eigenpairs
    """
    if PY_INFO_VERBOSE:
        print_info(logger)

    if A is None and matvec is None:
        raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "Either A or matvec must be provided")
    if A is None:
        A = matvec

    maxit   = DEFAULT_MAXIT if maxit is None else int(maxit)
    tol     = DEFAULT_TOL if tol is None else float(tol)
    logger  = logger if logger is not None else get_global_logger()

    if sigma is None:
        op      = as_operator(A, n=n)
        ncv     = default_ncv(op.rows, k) if ncv is None else ncv
        solver  = GenEigsSolver(op, k, ncv, rule=which, rng=rng, logger=logger, verbose=verbose)
    elif _is_complex_shift(sigma):
        op      = as_operator(A, n=n, sigma=sigma)
        if not isinstance(op, DenseGenComplexShiftSolve):
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "complex shifts need a dense matrix")
        ncv     = default_ncv(op.rows, k) if ncv is None else ncv
        solver  = GenEigsComplexShiftSolver(op, k, ncv, complex(sigma), op.mat, rule=which,
                                            rng=rng, logger=logger, verbose=verbose)
    else:
        op      = as_operator(A, n=n, sigma=float(np.real(sigma)))
        if not isinstance(op, ShiftSolveOp):
            raise EigenSolverError(EigenSolverErrorMsg.INVALID_INPUT, "shift-and-invert needs a matrix or a shift-solve operator")
        ncv     = default_ncv(op.rows, k) if ncv is None else ncv
        solver  = GenEigsRealShiftSolver(op, k, ncv, float(np.real(sigma)), rule=which,
                                         rng=rng, logger=logger, verbose=verbose)

    logger.debug(f"eigs: n={op.rows}, k={k}, ncv={solver.ncv}, which={solver.rule}, sigma={sigma}", lvl=1)
    return solver.solve(v0=v0, maxit=maxit, tol=tol)

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
