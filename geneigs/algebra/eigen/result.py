"""
Eigenvalue Solver Result Types

Standardized result containers and error types for eigenvalue computations.
"""

import numpy as np
from enum import Enum, unique
from typing import Optional, NamedTuple
from numpy.typing import NDArray

# ---------------------------------------------------------------------------------
#! Errors
# ---------------------------------------------------------------------------------

@unique
class EigenSolverErrorMsg(Enum):
    '''
    Enumeration class for eigensolver error messages.
    '''
    MAT_NOT_SQUARE      = 201
    INVALID_NEV         = 202
    INVALID_NCV         = 203
    ZERO_RESIDUAL       = 204
    NOT_COMPUTED        = 205
    NOT_INITIALIZED     = 206
    SHIFT_NOT_SET       = 207
    SINGULAR_SHIFT      = 208
    INVALID_RULE        = 209
    INVALID_INPUT       = 210
    DIM_MISMATCH        = 211

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

class EigenSolverError(ValueError):
    '''
    Precondition violation: invalid shapes, ranks, seeds or shifts.
    '''
    def __init__(self, code: EigenSolverErrorMsg, message: Optional[str] = None):
        self.code       = code
        self.message    = message if message else str(code)
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.__class__.__name__} {self.code.name} ({self.code.value})]: {self.message}"

    def __repr__(self):
        return self.__str__()

class EigenSolverStateError(EigenSolverError, RuntimeError):
    '''
    Sequencing violation: results requested before they were computed.
    '''
    pass

# ---------------------------------------------------------------------------------

class EigenSolver:
    """
    Marker class for eigenvalue solver types.
    """

    @staticmethod
    def is_dense_solver() -> bool:
        """Indicate if the solver is for dense matrices."""
        return False

    @staticmethod
    def is_sparse_solver() -> bool:
        """Indicate if the solver works with matrix-free operators."""
        return False

    @staticmethod
    def is_iterative_solver() -> bool:
        """Indicate if the solver is iterative."""
        return False

    # ----------------------------------------------------------------------------

    def solve(self, *args, **kwargs) -> 'EigenResult':
        """
        Solve the eigenvalue problem.

        Returns:
            EigenResult: Standardized result container.
        """
        raise NotImplementedError("This method should be implemented by subclasses.")

# ---------------------------------------------------------------------------------

class EigenResult(NamedTuple):
    r"""
    Standardized result from eigenvalue solvers.

    Attributes:
        eigenvalues:
            Converged eigenvalues, ordered by the selection rule
        eigenvectors:
            Corresponding eigenvectors as columns
        subspacevectors:
            Basis vectors of the Krylov subspace
        iterations:
            Number of restarting iterations performed
        converged:
            Whether all requested eigenpairs converged
        residual_norms:
            Ritz estimates of ||A v - \lambda v|| for each returned eigenpair
        operations:
            Number of operator applications
    """
    eigenvalues     : NDArray
    eigenvectors    : NDArray
    subspacevectors : Optional[NDArray] = None
    iterations      : Optional[int]     = None
    converged       : bool              = True
    residual_norms  : Optional[NDArray] = None
    operations      : Optional[int]     = None

    @property
    def nconv(self) -> int:
        return 0 if self.eigenvalues is None else int(np.size(self.eigenvalues))

    def __repr__(self):
        iter_str    = f"{self.iterations}" if self.iterations is not None else "N/A"
        return (f"EigenResult(n_eigenvalues={self.nconv}, "
                f"converged={self.converged}, iterations={iter_str})")

    def __str__(self):
        return f'converged={self.converged}, iterations={self.iterations}'

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
