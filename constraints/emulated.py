"""Non-native field emulation over the constraint system's native field.

An emulated Element stores its integer value as a single native variable,
which is sound as long as products of two elements (plus overflow) stay below
the native modulus. EmulatedField enforces that bound at construction time and
tracks an overflow budget per element:

    value < 2^(n + overflow),   n = nb_limbs * bits_per_limb

add/sub/neg grow the overflow without reducing. mul, reduce, is_zero,
assert_is_equal and to_bits produce or consume *canonical* elements: value in
[0, modulus), overflow 0, with little-endian limbs each range-checked to
bits_per_limb.

Reduction of a value v with a known bound uses a quotient/remainder hint:

    v == q * modulus + r,   q range-checked,   r canonical

Canonicity of r is enforced by range-checking both r's limbs and
(modulus - 1 - r); the latter wraps to a huge native value if r >= modulus.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

import galois

from .api import ConstraintSystem, NativeVar, Operand
from primitives.field import NATIVE, FieldParams, inv_mod

logger = logging.getLogger(__name__)

# Bits of native headroom kept free above the largest product
_PRODUCT_MARGIN = 2


class EmulationError(ValueError):
    """The emulated field cannot be instantiated for the given parameters."""


@dataclass(frozen=True)
class Element:
    """Emulated field element.

    Attributes:
        native: Integer value of the element, possibly unreduced
        overflow: Extra bits above nb_limbs * bits_per_limb the value may occupy
        limbs: Little-endian limbs, only present when the element is canonical
    """
    native: NativeVar
    overflow: int = 0
    limbs: Tuple[NativeVar, ...] = ()

    @property
    def is_canonical(self) -> bool:
        return len(self.limbs) > 0


def _split_limbs(value: int, params: FieldParams) -> List[int]:
    mask = (1 << params.bits_per_limb) - 1
    return [(value >> (params.bits_per_limb * i)) & mask for i in range(params.nb_limbs)]


def value_of(params: FieldParams, value: Union[int, str], field: type = NATIVE) -> Element:
    """Load a constant (int or decimal string) as a canonical element.

    The constant is reduced modulo params.modulus at load time. Constants need
    no constraints.
    """
    reduced = int(value) % params.modulus
    limbs = tuple(field(limb) for limb in _split_limbs(reduced, params))
    return Element(field(reduced), 0, limbs)


def _validate(api: ConstraintSystem, params: FieldParams) -> int:
    """Check params against the native field and return the overflow budget."""
    if params.nb_limbs < 1 or params.bits_per_limb < 1:
        raise EmulationError(
            f"Invalid limb layout: {params.nb_limbs} limbs of {params.bits_per_limb} bits"
        )
    if params.modulus < 2:
        raise EmulationError(f"Modulus must be at least 2, got {params.modulus}")
    if params.modulus.bit_length() > params.total_bits:
        raise EmulationError(
            f"Modulus has {params.modulus.bit_length()} bits, "
            f"limb layout only holds {params.total_bits}"
        )
    if params.is_prime and not galois.is_prime(params.modulus):
        raise EmulationError(f"Modulus {params.modulus} is declared prime but is composite")
    max_overflow = (api.nb_bits - _PRODUCT_MARGIN - 2 * params.total_bits) // 2
    if max_overflow < 1:
        raise EmulationError(
            f"Native field ({api.nb_bits} bits) is too small to emulate "
            f"{params.total_bits}-bit elements"
        )
    return max_overflow


class EmulatedField:
    """Arithmetic modulo params.modulus expressed as native constraints.

    Args:
        api: Constraint system the constraints are recorded in
        params: Modulus and limb layout of the emulated field

    Raises:
        EmulationError: If params cannot be emulated in api's native field
    """

    def __init__(self, api: ConstraintSystem, params: FieldParams):
        self.max_overflow = _validate(api, params)
        self.api = api
        self.params = params
        self.modulus_bits = params.modulus.bit_length()
        logger.debug(
            "emulating %d-bit modulus as %d x %d-bit limbs (overflow budget %d)",
            self.modulus_bits, params.nb_limbs, params.bits_per_limb, self.max_overflow,
        )

    # --- Construction ---

    def constant(self, value: Union[int, str]) -> Element:
        return value_of(self.params, value, self.api.field)

    def zero(self) -> Element:
        return self.constant(0)

    def one(self) -> Element:
        return self.constant(1)

    def new_element(self, value: Operand) -> Element:
        """Wrap a native value below 2^(nb_limbs * bits_per_limb) as an unreduced element."""
        native = self.api.constant(value)
        self.api.range_check(native, self.params.total_bits, label="new_element")
        return Element(native, 0)

    def new_witness(self, value: int) -> Element:
        """Allocate a canonical element holding an out-of-circuit value (hint)."""
        native = self.api.hint(lambda: value % self.params.modulus)
        return self._canonical(native, "new_witness")

    # --- Reduction ---

    def _bound_bits(self, a: Element) -> int:
        return self.params.total_bits + a.overflow

    def _canonical(self, r: NativeVar, label: str) -> Element:
        api, params = self.api, self.params
        limbs = api.hint(lambda v: _split_limbs(v, params), r)
        for limb in limbs:
            api.range_check(limb, params.bits_per_limb, label=label)
        recomposed = api.constant(0)
        for i, limb in enumerate(limbs):
            recomposed = api.add(recomposed, api.mul(limb, 1 << (params.bits_per_limb * i)))
        api.assert_is_equal(recomposed, r, label=label)
        api.range_check(api.sub(params.modulus - 1, r), params.total_bits, label=label)
        return Element(r, 0, tuple(limbs))

    def _reduce_value(self, value: NativeVar, bound_bits: int, label: str) -> Element:
        api, p = self.api, self.params.modulus
        q, r = api.hint(lambda v: divmod(v, p), value)
        api.range_check(q, max(bound_bits - self.modulus_bits + 1, 1), label=label)
        rem = self._canonical(r, label)
        api.assert_is_equal(value, api.add(api.mul(q, p), r), label=label)
        return rem

    def reduce(self, a: Element) -> Element:
        """Return the canonical element congruent to a."""
        if a.is_canonical:
            return a
        return self._reduce_value(a.native, self._bound_bits(a), "reduce")

    def _headroom(self, a: Element) -> Element:
        if a.overflow + 2 > self.max_overflow:
            return self.reduce(a)
        return a

    def _padding(self, a: Element) -> int:
        """Smallest multiple of the modulus that is >= 2^(bound of a)."""
        p = self.params.modulus
        return -(-(1 << self._bound_bits(a)) // p) * p

    # --- Arithmetic ---

    def add(self, a: Element, b: Element) -> Element:
        a, b = self._headroom(a), self._headroom(b)
        return Element(self.api.add(a.native, b.native), max(a.overflow, b.overflow) + 1)

    def neg(self, a: Element) -> Element:
        a = self._headroom(a)
        return Element(self.api.sub(self._padding(a), a.native), a.overflow + 1)

    def sub(self, a: Element, b: Element) -> Element:
        a, b = self._headroom(a), self._headroom(b)
        negated = self.api.sub(self._padding(b), b.native)
        return Element(self.api.add(a.native, negated), max(a.overflow, b.overflow + 1) + 1)

    def mul(self, a: Element, b: Element) -> Element:
        product = self.api.mul(a.native, b.native)
        return self._reduce_value(product, self._bound_bits(a) + self._bound_bits(b), "mul")

    def inverse(self, a: Element) -> Element:
        """Multiplicative inverse.

        The inverse comes from a hint and is constrained by a * inv == 1. For
        a == 0 the hint yields 0 and that constraint cannot hold, so the circuit
        becomes unsatisfiable rather than failing here.
        """
        a = self.reduce(a)
        inv = self.new_witness(inv_mod(int(a.native), self.params.modulus))
        self.assert_is_equal(self.mul(a, inv), self.one(), label="inverse")
        return inv

    def select(self, cond: Operand, a: Element, b: Element) -> Element:
        """a if cond == 1 else b. cond must already be constrained boolean."""
        native = self.api.select(cond, a.native, b.native)
        limbs = ()
        if a.is_canonical and b.is_canonical:
            limbs = tuple(self.api.select(cond, la, lb) for la, lb in zip(a.limbs, b.limbs))
        return Element(native, max(a.overflow, b.overflow), limbs)

    # --- Predicates, assertions and bits ---

    def is_zero(self, a: Element) -> NativeVar:
        return self.api.is_zero(self.reduce(a).native)

    def assert_is_equal(self, a: Element, b: Element, label: str = "assert_is_equal") -> None:
        a, b = self.reduce(a), self.reduce(b)
        self.api.assert_is_equal(a.native, b.native, label=label)

    def to_bits(self, a: Element) -> List[NativeVar]:
        """Bits of the canonical value, least-significant first, modulus bit length long."""
        return self.api.to_binary(self.reduce(a).native, self.modulus_bits)
