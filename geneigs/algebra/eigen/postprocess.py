"""
Post-processing of converged Ritz values.

The Arnoldi engine works with whatever operator it is given. When that operator
is a spectral transformation of A (shift-and-invert), its eigenvalues nu have to
be mapped back to eigenvalues lambda of A before the final ordering. The map is
selected by configuration:

    - IdentityPostProcess   : lambda = nu
    - ShiftInvertReal       : lambda = sigma + 1 / nu          (op = (A - sigma I)^{-1})
    - ShiftInvertComplex    : lambda = x^H A x / x^H x          (op = Re[(A - sigma I)^{-1}])

where x = V y is the Ritz vector in the original space.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from .selection import SelectionRule
from .operators import MatOp, as_operator

# ----------------------------------------------------------------------------------------

class RitzPostProcess:
    """
    Base class. ``final_rule = None`` keeps the solver's own selection rule
    for ordering the returned eigenpairs.
    """

    final_rule: Optional[SelectionRule] = None

    def transform(self, values: NDArray, ritz_vec: NDArray, basis: NDArray) -> NDArray:
        """
        Args:
            values      : the nev wanted Ritz values (complex)
            ritz_vec    : ncv x nev Ritz vectors in the Krylov coordinates
            basis       : n x ncv Krylov basis V

        Returns:
            Eigenvalue estimates of A, same shape as ``values``.
        """
        raise NotImplementedError("This method should be implemented by subclasses.")

    def __repr__(self):
        return f"{self.__class__.__name__}()"

class IdentityPostProcess(RitzPostProcess):

    def transform(self, values, ritz_vec, basis):
        return np.asarray(values, dtype=np.complex128).copy()

class ShiftInvertReal(RitzPostProcess):
    """
    Back transform of the real shift-and-invert mode. Results are returned by
    decreasing magnitude of lambda unless ``final_rule`` says otherwise.
    """

    def __init__(self, sigma: float, final_rule: Union[SelectionRule, str, None] = SelectionRule.LARGEST_MAGN):
        self.sigma      = float(sigma)
        self.final_rule = None if final_rule is None else SelectionRule.parse(final_rule)

    def transform(self, values, ritz_vec, basis):
        return 1.0 / np.asarray(values, dtype=np.complex128) + self.sigma

    def __repr__(self):
        return f"{self.__class__.__name__}(sigma={self.sigma})"

class ShiftInvertComplex(RitzPostProcess):
    """
    Back transform of the complex shift mode through Rayleigh quotients with A.

    Args:
        sigma       : the complex shift (kept for reference)
        op          : plain product operator of A (or anything ``as_operator`` accepts)
        final_rule  : ordering of the returned pairs
    """

    def __init__(self, sigma: complex, op, final_rule: Union[SelectionRule, str, None] = SelectionRule.LARGEST_MAGN):
        self.sigma      = complex(sigma)
        self.op         = op if isinstance(op, MatOp) else as_operator(op)
        self.final_rule = None if final_rule is None else SelectionRule.parse(final_rule)

    def transform(self, values, ritz_vec, basis):
        out = np.empty(len(values), dtype=np.complex128)
        for i in range(len(values)):
            x       = basis @ ritz_vec[:, i]
            # A is real: A x = A Re(x) + i A Im(x)
            ax      = self.op.perform_op(np.ascontiguousarray(x.real)) + 1j * self.op.perform_op(np.ascontiguousarray(x.imag))
            out[i]  = np.vdot(x, ax) / np.vdot(x, x)
        return out

    def __repr__(self):
        return f"{self.__class__.__name__}(sigma={self.sigma})"

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
