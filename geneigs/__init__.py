# geneigs/__init__.py

"""
geneigs - implicitly restarted Arnoldi eigensolvers for general real matrices.

A few eigenvalues and eigenvectors of a large, possibly non-symmetric, real
matrix (dense, sparse or given as a matrix-vector product) are computed with
the implicitly restarted Arnoldi method.

Modules:
--------
- algebra   : Arnoldi engine, QR kernels, operators, configuration
- common    : Logging

Examples:
---------
>>> import numpy as np
>>> import geneigs
>>> A   = np.random.default_rng(0).standard_normal((100, 100))
>>> res = geneigs.eigs(A, k=4, which='LM')
>>> res.eigenvalues

Version : 0.1.0
License : MIT
"""

import importlib

# Package metadata
__version__         = "0.1.0"
__license__         = "MIT"

MODULE_DESCRIPTION  = "Implicitly restarted Arnoldi eigensolvers for general real matrices."

# Subpackages (not imported by default)
_SUBMODULES         = ["algebra", "common"]

# Shortcuts to the most used objects
_SHORTCUTS = {
    'eigs'              : ('.algebra.eigen.factory', 'eigs'),
    'GenEigsSolver'     : ('.algebra.eigen.gen_eigs', 'GenEigsSolver'),
    'EigenResult'       : ('.algebra.eigen.result', 'EigenResult'),
}

__all__             = _SUBMODULES + list(_SHORTCUTS.keys())

def get_module_description(module_name):
    """
    Get the description of a subpackage of geneigs.
    """
    descriptions = {
        "algebra"   : "Arnoldi engine, Hessenberg QR kernels, matrix operators and numerical configuration.",
        "common"    : "Console and file logging with indentation levels.",
    }
    return descriptions.get(module_name, "Module not found.")

# Lazy import subpackages on attribute access (PEP 562)
def __getattr__(name):  # pragma: no cover - simple indirection
    if name in _SHORTCUTS:
        module_path, attr_name = _SHORTCUTS[name]
        return getattr(importlib.import_module(module_path, __name__), attr_name)
    if name in _SUBMODULES:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

def __dir__():  # pragma: no cover
    return sorted(list(globals().keys()) + __all__)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
