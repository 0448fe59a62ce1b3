"""
Eigenvalue selection rules.

A selection rule is a total order over complex values. It decides which Ritz
values are "wanted" (kept through a restart) and in which order converged
eigenvalues are reported.

Rules:
    'LM' = largest magnitude
    'LR' = largest real part
    'LI' = largest imaginary part (in absolute value)
    'SM' = smallest magnitude
    'SR' = smallest real part
    'SI' = smallest imaginary part (in absolute value)

Sorting is stable. The two members of a complex conjugate pair produce equal
keys under every rule, so a pair that is adjacent on input stays adjacent.
"""

from enum import Enum, unique
from typing import Union

import numpy as np
from numpy.typing import NDArray

from .result import EigenSolverError, EigenSolverErrorMsg

# ----------------------------------------------------------------------------------------

@unique
class SelectionRule(Enum):
    LARGEST_MAGN    = 'LM'
    LARGEST_REAL    = 'LR'
    LARGEST_IMAG    = 'LI'
    SMALLEST_MAGN   = 'SM'
    SMALLEST_REAL   = 'SR'
    SMALLEST_IMAG   = 'SI'

    def __str__(self):
        return self.value

    # ------------------------------------------------------------------------------------

    @classmethod
    def parse(cls, rule: Union['SelectionRule', str]) -> 'SelectionRule':
        """
        Accepts a member, a two letter code ('LM') or a member name ('largest_magn').
        """
        if isinstance(rule, cls):
            return rule
        if isinstance(rule, str):
            key = rule.strip()
            for member in cls:
                if key.upper() == member.value or key.upper() == member.name:
                    return member
        raise EigenSolverError(EigenSolverErrorMsg.INVALID_RULE,
                               f"Invalid selection rule {rule!r}. Must be one of {[m.value for m in cls]}")

    # ------------------------------------------------------------------------------------

    def key(self, values: NDArray) -> NDArray:
        """
        Real sort key; ascending order of the key is the order of preference.
        """
        values = np.asarray(values)
        if self is SelectionRule.LARGEST_MAGN:
            return -np.abs(values)
        if self is SelectionRule.LARGEST_REAL:
            return -np.real(values)
        if self is SelectionRule.LARGEST_IMAG:
            return -np.abs(np.imag(values))
        if self is SelectionRule.SMALLEST_MAGN:
            return np.abs(values)
        if self is SelectionRule.SMALLEST_REAL:
            return np.real(values).astype(float)
        return np.abs(np.imag(values))

    def argsort(self, values: NDArray) -> NDArray:
        """Stable permutation ordering ``values`` from most to least wanted."""
        return np.argsort(self.key(values), kind='stable')

    def select(self, values: NDArray, k: int) -> NDArray:
        """Indices of the ``k`` most wanted values."""
        return self.argsort(values)[:k]

    def compare(self, v1: complex, v2: complex) -> bool:
        """True when ``v1`` is strictly preferred to ``v2``."""
        k = self.key(np.array([v1, v2]))
        return bool(k[0] < k[1])

# ----------------------------------------------------------------------------------------

def sort_eigenvalues(values: NDArray, rule: Union[SelectionRule, str] = SelectionRule.LARGEST_MAGN) -> NDArray:
    """
    Return ``values`` ordered by ``rule``.
    """
    values = np.asarray(values)
    return values[SelectionRule.parse(rule).argsort(values)]

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
