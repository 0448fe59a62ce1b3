"""
Tests for the back transforms applied to converged Ritz values.
"""

import numpy as np

from geneigs.algebra.eigen.postprocess import IdentityPostProcess, ShiftInvertReal, ShiftInvertComplex
from geneigs.algebra.eigen.operators import DenseGenMatProd
from geneigs.algebra.eigen.selection import SelectionRule

# ----------------------------------

class TestPostProcess:

    def test_identity(self):
        pp      = IdentityPostProcess()
        values  = np.array([1.0, 2.0 + 1.0j])
        out     = pp.transform(values, None, None)
        assert pp.final_rule is None
        assert np.allclose(out, values)
        assert out is not values

    def test_shift_invert_real(self):
        sigma   = 1.5
        lam     = np.array([2.0, 1.0 + 0.5j, -4.0])
        nu      = 1.0 / (lam - sigma)
        pp      = ShiftInvertReal(sigma)
        assert pp.final_rule is SelectionRule.LARGEST_MAGN
        assert np.allclose(pp.transform(nu, None, None), lam)

    def test_shift_invert_real_final_rule(self):
        assert ShiftInvertReal(0.0, final_rule='SR').final_rule is SelectionRule.SMALLEST_REAL
        assert ShiftInvertReal(0.0, final_rule=None).final_rule is None

    def test_shift_invert_complex_rayleigh_quotient(self):
        # block diagonal A with a known complex pair 1 +- 2i and a real eigenvalue 3
        A       = np.array([[1.0, -2.0, 0.0],
                            [2.0,  1.0, 0.0],
                            [0.0,  0.0, 3.0]])
        evals, evecs = np.linalg.eig(A)
        order   = np.argsort(-np.abs(evals), kind='stable')
        evals, evecs = evals[order], evecs[:, order]

        # express the eigenvectors in an orthonormal basis V
        V, _    = np.linalg.qr(np.random.default_rng(0).standard_normal((3, 3)))
        y       = V.T @ evecs

        pp      = ShiftInvertComplex(0.5 + 1.0j, DenseGenMatProd(A))
        out     = pp.transform(np.zeros(3, dtype=complex), y, V)
        assert np.allclose(out, evals)

    def test_shift_invert_complex_accepts_matrix(self):
        A   = np.diag([1.0, 2.0])
        pp  = ShiftInvertComplex(1.0j, A)
        out = pp.transform(np.zeros(1), np.array([[0.0], [1.0]], dtype=complex), np.eye(2))
        assert np.allclose(out, [2.0])

# ----------------------------------
#! EOF
# ----------------------------------
