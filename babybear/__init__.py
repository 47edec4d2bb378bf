"""BabyBear gadgets - base field and GF(p^4) arithmetic inside a native circuit."""

from babybear.chip import (
    Chip,
    ExtensionVariable,
    Variable,
    new_e,
    new_f,
)

__all__ = [
    "Chip",
    "ExtensionVariable",
    "Variable",
    "new_e",
    "new_f",
]
