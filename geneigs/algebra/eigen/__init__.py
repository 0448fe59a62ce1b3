"""
Eigenvalue Solvers Module

Implicitly restarted Arnoldi method for a few eigenpairs of large, general
(non-symmetric) real matrices.

Available Solvers:
    - GenEigsSolver             : IRAM on any operator (dense, sparse, matrix free)
    - GenEigsRealShiftSolver    : eigenvalues closest to a real shift
    - GenEigsComplexShiftSolver : eigenvalues closest to a complex shift

Kernels:
    - DoubleShiftQR             : Francis double shift QR step on a Hessenberg matrix
    - UpperHessenbergQR         : Givens QR of a Hessenberg matrix (single real shift)

Factory Function:
    - eigs: build operator and solver from the input and solve

Standard Result:
    - EigenResult: Standardized return type (eigenvalues, eigenvectors, iterations, converged)

This module uses lazy imports to minimize startup overhead.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

_LAZY_IMPORTS = {
    # Arnoldi engine
    'GenEigsSolver'                 : ('.gen_eigs', 'GenEigsSolver'),
    'GenEigsRealShiftSolver'        : ('.gen_eigs', 'GenEigsRealShiftSolver'),
    'GenEigsComplexShiftSolver'     : ('.gen_eigs', 'GenEigsComplexShiftSolver'),
    # QR kernels
    'DoubleShiftQR'                 : ('.double_shift_qr', 'DoubleShiftQR'),
    'UpperHessenbergQR'             : ('.hessenberg_qr', 'UpperHessenbergQR'),
    # Selection
    'SelectionRule'                 : ('.selection', 'SelectionRule'),
    'sort_eigenvalues'              : ('.selection', 'sort_eigenvalues'),
    # Operators
    'MatOp'                         : ('.operators', 'MatOp'),
    'ShiftSolveOp'                  : ('.operators', 'ShiftSolveOp'),
    'DenseGenMatProd'               : ('.operators', 'DenseGenMatProd'),
    'SparseGenMatProd'              : ('.operators', 'SparseGenMatProd'),
    'FunctionMatProd'               : ('.operators', 'FunctionMatProd'),
    'DenseGenRealShiftSolve'        : ('.operators', 'DenseGenRealShiftSolve'),
    'SparseGenRealShiftSolve'       : ('.operators', 'SparseGenRealShiftSolve'),
    'DenseGenComplexShiftSolve'     : ('.operators', 'DenseGenComplexShiftSolve'),
    'as_operator'                   : ('.operators', 'as_operator'),
    # Post-processing
    'RitzPostProcess'               : ('.postprocess', 'RitzPostProcess'),
    'IdentityPostProcess'           : ('.postprocess', 'IdentityPostProcess'),
    'ShiftInvertReal'               : ('.postprocess', 'ShiftInvertReal'),
    'ShiftInvertComplex'            : ('.postprocess', 'ShiftInvertComplex'),
    # Factory interface
    'eigs'                          : ('.factory', 'eigs'),
    'default_ncv'                   : ('.factory', 'default_ncv'),
    # Result type
    'EigenResult'                   : ('.result', 'EigenResult'),
    'EigenSolver'                   : ('.result', 'EigenSolver'),
    'EigenSolverError'              : ('.result', 'EigenSolverError'),
    'EigenSolverStateError'         : ('.result', 'EigenSolverStateError'),
    'EigenSolverErrorMsg'           : ('.result', 'EigenSolverErrorMsg'),
}

_LAZY_CACHE = {}

# For type checking only
if TYPE_CHECKING:
    from .gen_eigs          import GenEigsSolver, GenEigsRealShiftSolver, GenEigsComplexShiftSolver
    from .double_shift_qr   import DoubleShiftQR
    from .hessenberg_qr     import UpperHessenbergQR
    from .selection         import SelectionRule, sort_eigenvalues
    from .operators         import (MatOp, ShiftSolveOp, DenseGenMatProd, SparseGenMatProd, FunctionMatProd,
                                    DenseGenRealShiftSolve, SparseGenRealShiftSolve, DenseGenComplexShiftSolve,
                                    as_operator)
    from .postprocess       import RitzPostProcess, IdentityPostProcess, ShiftInvertReal, ShiftInvertComplex
    from .factory           import eigs, default_ncv
    from .result            import EigenResult, EigenSolver, EigenSolverError, EigenSolverStateError, EigenSolverErrorMsg

# -----------------------------------------------------------------------------------------------

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name = _LAZY_IMPORTS[name]
    module = importlib.import_module(module_path, package=__name__)

    result = getattr(module, attr_name)
    _LAZY_CACHE[name] = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
