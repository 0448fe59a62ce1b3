"""
Linear algebra routines of geneigs.

Key functionalities provided include:
    - Configuration: precision thresholds, iteration defaults and random sources (``utils``).
    - Eigenvalue solvers for general real matrices (``eigen``).

This module uses lazy imports; submodules are only loaded when accessed.
"""

from typing import TYPE_CHECKING
import importlib

# -----------------------------------------------------------------------------------------------
# Lazy Import Configuration
# -----------------------------------------------------------------------------------------------

# Mapping of attribute names to their module paths and actual attribute names
_LAZY_IMPORTS = {
    # Submodules
    'eigen'                 : ('.eigen', None),  # None means import the whole module
    'utils'                 : ('.utils', None),
    # Configuration
    'get_rng'               : ('.utils', 'get_rng'),
    'random_vector'         : ('.utils', 'random_vector'),
    'print_info'            : ('.utils', 'print_info'),
    'DEFAULT_MAXIT'         : ('.utils', 'DEFAULT_MAXIT'),
    'DEFAULT_TOL'           : ('.utils', 'DEFAULT_TOL'),
    # Logging
    'get_logger'            : ('..common.flog', 'get_global_logger'),
    # Solvers
    'eigs'                  : ('.eigen.factory', 'eigs'),
}

_LAZY_CACHE = {}

if TYPE_CHECKING:
    from .                  import eigen, utils
    from .utils             import get_rng, random_vector, print_info, DEFAULT_MAXIT, DEFAULT_TOL
    from ..common.flog      import get_global_logger as get_logger
    from .eigen.factory     import eigs

def __getattr__(name: str):
    """
    Module-level __getattr__ for lazy imports.
    """
    if name in _LAZY_CACHE:
        return _LAZY_CACHE[name]

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_path, attr_name  = _LAZY_IMPORTS[name]
    module                  = importlib.import_module(module_path, package=__name__)
    result                  = module if attr_name is None else getattr(module, attr_name)
    _LAZY_CACHE[name]       = result
    return result

def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))

__all__ = list(_LAZY_IMPORTS.keys())

# -----------------------------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------------------------
