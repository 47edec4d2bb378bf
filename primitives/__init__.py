"""Primitives - field parameters and out-of-circuit field arithmetic."""

from primitives.field import (
    BABYBEAR_PARAMS,
    BABYBEAR_PRIME,
    BN254_SCALAR_PRIME,
    EXT_MODULUS,
    EXTENSION_DEGREE,
    FF,
    NATIVE,
    NON_RESIDUE,
    FieldParams,
    ff4,
    ff4_add,
    ff4_coeffs,
    ff4_inv,
    ff4_mul,
    inv_mod,
    to_bits_le,
)

__all__ = [
    # Parameters
    "FieldParams",
    "BABYBEAR_PARAMS",
    "BABYBEAR_PRIME",
    "BN254_SCALAR_PRIME",
    "EXTENSION_DEGREE",
    "NON_RESIDUE",
    # Fields
    "FF",
    "NATIVE",
    "EXT_MODULUS",
    # GF(p^4)
    "ff4",
    "ff4_coeffs",
    "ff4_add",
    "ff4_mul",
    "ff4_inv",
    # Helpers
    "inv_mod",
    "to_bits_le",
]
