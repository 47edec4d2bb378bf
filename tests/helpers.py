"""Helpers for reading witness values back out of circuit handles."""

from typing import List

from babybear.chip import Chip, ExtensionVariable, Variable, new_e
from primitives.field import FF


def read_f(chip: Chip, a: Variable) -> int:
    """Canonical integer value of a base variable."""
    return int(chip.field.reduce(a.value).native)


def read_e(chip: Chip, a: ExtensionVariable) -> List[int]:
    """Canonical coefficients [c0, c1, c2, c3] of an extension variable."""
    return [read_f(chip, c) for c in a]


def random_e(seed: int, nonzero: bool = False) -> ExtensionVariable:
    """Seeded random extension constant built from FF.Random coefficients."""
    coeffs = FF.Random(4, seed=seed)
    while nonzero and all(int(c) == 0 for c in coeffs):
        seed += 1
        coeffs = FF.Random(4, seed=seed)
    return new_e([str(int(c)) for c in coeffs])
