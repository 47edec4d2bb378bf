"""BabyBear field GF(p), its quartic extension GF(p^4), and the native field.

Uses galois library for all out-of-circuit field arithmetic. FF is the
BabyBear field type, NATIVE is the BN254 scalar field in which constraints
are expressed.

GF(p^4) is represented as the quotient ring GF(p)[x] / (x^4 - 11) using
galois polynomials over FF. The ff4 helpers below take and return
ascending-order coefficient lists [c0, c1, c2, c3]; they are used to compute
witness hints (inverse) and as reference arithmetic in tests.
"""

from dataclasses import dataclass
from typing import List, Sequence

import galois

# --- Field Parameters ---

BABYBEAR_PRIME = 2013265921
"""p = 2^31 - 2^27 + 1"""

BN254_SCALAR_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

EXTENSION_DEGREE = 4
NON_RESIDUE = 11


@dataclass(frozen=True)
class FieldParams:
    """Static descriptor of an emulated modulus and its limb layout.

    Attributes:
        modulus: The emulated prime
        nb_limbs: Number of native limbs per emulated element
        bits_per_limb: Width of each limb in bits
        is_prime: Whether the modulus is prime (enables inversion)
        num_elms_per_native_elm: How many emulated elements a single native
            element unpacks into (see Chip.split_to_limbs)
    """
    modulus: int
    nb_limbs: int
    bits_per_limb: int
    is_prime: bool = True
    num_elms_per_native_elm: int = 1

    @property
    def total_bits(self) -> int:
        return self.nb_limbs * self.bits_per_limb


BABYBEAR_PARAMS = FieldParams(
    modulus=BABYBEAR_PRIME,
    nb_limbs=1,
    bits_per_limb=32,
    is_prime=True,
    num_elms_per_native_elm=8,
)


# --- Field Construction ---

FF = galois.GF(BABYBEAR_PRIME)
"""Base field GF(p) - BabyBear prime field."""

# 5 generates the multiplicative group of the BN254 scalar field; passing it
# skips factoring r - 1 at import time.
NATIVE = galois.GF(BN254_SCALAR_PRIME, primitive_element=5, verify=False)
"""Native field of the constraint system - BN254 scalar field."""

# x^4 - 11, descending coefficients
EXT_MODULUS = galois.Poly([1, 0, 0, 0, BABYBEAR_PRIME - NON_RESIDUE], field=FF)


# --- Quartic Extension (ascending coefficient order) ---
# galois uses descending order [c3, c2, c1, c0], we use ascending [c0, c1, c2, c3].


def ff4(coeffs: Sequence[int]) -> galois.Poly:
    """Construct a GF(p^4) element from ascending-order coefficients."""
    if len(coeffs) != EXTENSION_DEGREE:
        raise ValueError(f"Expected {EXTENSION_DEGREE} coefficients, got {len(coeffs)}")
    return galois.Poly(FF([int(c) % BABYBEAR_PRIME for c in coeffs]), field=FF, order="asc")


def ff4_coeffs(elem: galois.Poly) -> List[int]:
    """Extract ascending-order coefficients [c0, c1, c2, c3] from a GF(p^4) element."""
    reduced = elem % EXT_MODULUS
    return [int(c) for c in reduced.coefficients(EXTENSION_DEGREE, order="asc")]


def ff4_add(a: Sequence[int], b: Sequence[int]) -> List[int]:
    return ff4_coeffs(ff4(a) + ff4(b))


def ff4_mul(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Multiply two GF(p^4) elements modulo x^4 - 11."""
    return ff4_coeffs(ff4(a) * ff4(b))


def ff4_inv(a: Sequence[int]) -> List[int]:
    """Multiplicative inverse in GF(p^4) via the extended Euclidean algorithm.

    Since x^4 - 11 is irreducible, gcd(a, x^4 - 11) = 1 for every nonzero a and
    the Bezout coefficient s satisfies s * a = 1 mod (x^4 - 11).

    Returns [0, 0, 0, 0] for a = 0. Callers that constrain the result (see
    Chip.inv_e) end up with an unsatisfiable circuit in that case.
    """
    if all(int(c) % BABYBEAR_PRIME == 0 for c in a):
        return [0] * EXTENSION_DEGREE
    # gcd is monic, so it is exactly 1 here
    _, s, _ = galois.egcd(ff4(a), EXT_MODULUS)
    return ff4_coeffs(s)


# --- Base Field Helpers ---


def inv_mod(x: int, mod: int = BABYBEAR_PRIME) -> int:
    """Modular inverse using Fermat's little theorem, 0 for x = 0 mod p."""
    x = x % mod
    if x == 0:
        return 0
    return pow(x, mod - 2, mod)


def to_bits_le(x: int, n_bits: int) -> List[int]:
    """Little-endian (least-significant first) bit decomposition of x."""
    return [(x >> i) & 1 for i in range(n_bits)]
