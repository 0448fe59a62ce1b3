# file        :   geneigs/algebra/utils.py

'''
This module provides the configuration layer of the linear algebra routines:
environment-driven defaults, numerical precision constants and explicit
pseudo-random sources.

Provides:
- Default data types (``DEFAULT_NP_FLOAT_TYPE``, ``DEFAULT_NP_CPX_TYPE``).
- Precision thresholds used by the Arnoldi engine and the QR kernels
    (``EPS``, ``ARNOLDI_PREC``, ``QR_PREC``).
- Iteration defaults read from the environment (``DEFAULT_MAXIT``, ``DEFAULT_TOL``).
- Random sources (``get_rng``, ``random_vector``).

Environment variables:
- PY_GLOBAL_SEED    : seed of the default generator (default: 42)
- PY_EIGS_MAXIT     : default number of restarts (default: 1000)
- PY_EIGS_TOL       : default relative tolerance (default: 1e-10)
- PY_BACKEND_INFO   : print configuration on first use when non-zero
'''

import os
from typing import Type, Union

import numpy as np
import numpy.random as np_random

# ---------------------------------------------------------------------
#! Enviroment variable names
# ---------------------------------------------------------------------

PY_GLOBAL_SEED_STR      : str               = "PY_GLOBAL_SEED"
PY_EIGS_MAXIT_STR       : str               = "PY_EIGS_MAXIT"
PY_EIGS_TOL_STR         : str               = "PY_EIGS_TOL"
PY_INFO_VERBOSE_STR     : str               = "PY_BACKEND_INFO"

# ---------------------------------------------------------------------

DEFAULT_SEED            : int               = 42
DEFAULT_NP_INT_TYPE     : Type              = np.int64
DEFAULT_NP_FLOAT_TYPE   : Type              = np.float64
DEFAULT_NP_CPX_TYPE     : Type              = np.complex128

# ---------------------------------------------------------------------
#! SET VARIABLES
# ---------------------------------------------------------------------

PY_GLOBAL_SEED          : int               = int(os.environ.get(PY_GLOBAL_SEED_STR, DEFAULT_SEED))
PY_INFO_VERBOSE         : bool              = os.environ.get(PY_INFO_VERBOSE_STR, "0") != "0"

DEFAULT_MAXIT           : int               = int(os.environ.get(PY_EIGS_MAXIT_STR, 1000))
DEFAULT_TOL             : float             = float(os.environ.get(PY_EIGS_TOL_STR, 1e-10))

#! Precision
EPS                     : float             = float(np.finfo(DEFAULT_NP_FLOAT_TYPE).eps)
# approximately zero for the Arnoldi engine, eps^(2/3)
ARNOLDI_PREC            : float             = EPS ** (2.0 / 3.0)
# approximately zero for the double shift QR kernel, eps^0.9
QR_PREC                 : float             = EPS ** 0.9

RngLike                                     = Union[None, int, np.random.SeedSequence, np_random.Generator]

# ---------------------------------------------------------------------
#! Random sources
# ---------------------------------------------------------------------

def get_rng(seed: RngLike = None) -> np_random.Generator:
    """
    Returns a NumPy ``Generator``.

    Parameters:
        seed (None | int | SeedSequence | Generator):
            An existing generator is returned unchanged, so that one source can be
            threaded through several calls. ``None`` uses ``PY_GLOBAL_SEED``.

    Returns:
        np.random.Generator
    """
    if isinstance(seed, np_random.Generator):
        return seed
    if seed is None:
        seed = PY_GLOBAL_SEED
    return np_random.default_rng(seed)

def random_vector(n: int, rng: RngLike = None, low: float = -0.5, high: float = 0.5) -> np.ndarray:
    """
    Uniformly distributed real vector of length ``n`` in ``[low, high)``.

    Used as the default starting residual of the Arnoldi factorization.
    """
    return get_rng(rng).uniform(low, high, size=n).astype(DEFAULT_NP_FLOAT_TYPE)

# ---------------------------------------------------------------------

def print_info(logger=None):
    """
    Report the active configuration through the given (or global) logger.
    """
    if logger is None:
        from ..common.flog import get_global_logger
        logger = get_global_logger()
    logger.title("geneigs configuration", 50, '-')
    logger.info(f"float type      : {np.dtype(DEFAULT_NP_FLOAT_TYPE).name}", lvl=1)
    logger.info(f"global seed     : {PY_GLOBAL_SEED}", lvl=1)
    logger.info(f"default maxit   : {DEFAULT_MAXIT}", lvl=1)
    logger.info(f"default tol     : {DEFAULT_TOL:.1e}", lvl=1)
    logger.info(f"arnoldi prec    : {ARNOLDI_PREC:.3e}", lvl=1)
    logger.info(f"qr prec         : {QR_PREC:.3e}", lvl=1)

# ---------------------------------------------------------------------
#! EOF
# ---------------------------------------------------------------------
