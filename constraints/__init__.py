"""Native constraint system and non-native field emulation.

ConstraintSystem records constraints over the native (BN254 scalar) field and
checks them later; EmulatedField builds modular arithmetic for a smaller
modulus on top of it.
"""

from .api import (
    Constraint,
    ConstraintSystem,
    NativeVar,
    UnsatisfiedConstraintError,
)
from .emulated import (
    Element,
    EmulatedField,
    EmulationError,
    value_of,
)

__all__ = [
    "Constraint",
    "ConstraintSystem",
    "NativeVar",
    "UnsatisfiedConstraintError",
    "Element",
    "EmulatedField",
    "EmulationError",
    "value_of",
]
