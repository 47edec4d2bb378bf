"""BabyBear field and quartic extension gadgets.

Chip exposes arithmetic over BabyBear (p = 2^31 - 2^27 + 1) and over
GF(p^4) = GF(p)[x] / (x^4 - 11) as constraints in a native-field
ConstraintSystem. Values are immutable: every operation returns a new
Variable / ExtensionVariable and only appends constraints.

Assertions never raise. A violated assertion (or an inversion of zero) leaves
the constraint system unsatisfiable, which is reported by api.check().

Bit order: to_bits and split_to_limbs are least-significant bit first.

Usage:
    api = ConstraintSystem()
    chip = Chip(api)
    a = new_e(["1", "2", "3", "4"])
    b = new_e(["5", "6", "7", "8"])
    chip.assert_equal_e(chip.div_e(chip.mul_e(a, b), b), a)
    api.check()
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from constraints.api import ConstraintSystem, NativeVar, Operand
from constraints.emulated import Element, EmulatedField, value_of
from primitives.field import (
    BABYBEAR_PARAMS,
    EXTENSION_DEGREE,
    NON_RESIDUE,
    FieldParams,
    ff4_inv,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Variable:
    """Handle to one emulated BabyBear element."""
    value: Element


@dataclass(frozen=True)
class ExtensionVariable:
    """Element c0 + c1*x + c2*x^2 + c3*x^3 of GF(p^4), coefficients ascending."""
    value: Tuple[Variable, Variable, Variable, Variable]

    def __post_init__(self):
        if len(self.value) != EXTENSION_DEGREE:
            raise ValueError(
                f"Extension element needs {EXTENSION_DEGREE} coefficients, got {len(self.value)}"
            )

    def __getitem__(self, i: int) -> Variable:
        return self.value[i]

    def __iter__(self):
        return iter(self.value)


def new_f(value: str) -> Variable:
    """Load a decimal constant as a BabyBear value (reduced mod p)."""
    return Variable(value_of(BABYBEAR_PARAMS, value))


def new_e(values: Sequence[str]) -> ExtensionVariable:
    """Load four decimal constants [c0, c1, c2, c3] as an extension value."""
    if len(values) != EXTENSION_DEGREE:
        raise ValueError(f"Expected {EXTENSION_DEGREE} coefficients, got {len(values)}")
    return ExtensionVariable(tuple(new_f(v) for v in values))


class Chip:
    """BabyBear base and extension field operations.

    Args:
        api: Constraint system receiving the constraints

    Raises:
        EmulationError: If the emulated field cannot be set up for BabyBear in
            api's native field. Circuit construction cannot continue.
    """

    def __init__(self, api: ConstraintSystem):
        self.api = api
        self.field = EmulatedField(api, BABYBEAR_PARAMS)
        self._w = self.field.constant(NON_RESIDUE)
        logger.debug("BabyBear chip over %s", api.field.name)

    @property
    def params(self) -> FieldParams:
        return self.field.params

    # --- Base field ---

    def add(self, a: Variable, b: Variable) -> Variable:
        return Variable(self.field.add(a.value, b.value))

    def sub(self, a: Variable, b: Variable) -> Variable:
        return Variable(self.field.sub(a.value, b.value))

    def mul(self, a: Variable, b: Variable) -> Variable:
        return Variable(self.field.mul(a.value, b.value))

    def neg(self, a: Variable) -> Variable:
        return Variable(self.field.neg(a.value))

    def inverse(self, a: Variable) -> Variable:
        """Multiplicative inverse. inverse(0) makes the circuit unsatisfiable."""
        return Variable(self.field.inverse(a.value))

    def assert_equal(self, a: Variable, b: Variable) -> None:
        self.field.assert_is_equal(a.value, b.value, label="assert_equal")

    def assert_not_equal(self, a: Variable, b: Variable) -> None:
        """Constrain a != b via is_zero(a - b) == 0."""
        is_zero = self.field.is_zero(self.field.sub(a.value, b.value))
        self.api.assert_is_equal(is_zero, 0, label="assert_not_equal")

    def select(self, cond: Operand, a: Variable, b: Variable) -> Variable:
        """a if cond == 1 else b. The caller constrains cond to {0, 1}."""
        return Variable(self.field.select(cond, a.value, b.value))

    # --- Extension field ---

    def zero_e(self) -> ExtensionVariable:
        return new_e(["0", "0", "0", "0"])

    def one_e(self) -> ExtensionVariable:
        return new_e(["1", "0", "0", "0"])

    def from_f(self, a: Variable) -> ExtensionVariable:
        """Embed a base value as (a, 0, 0, 0)."""
        zero = Variable(self.field.zero())
        return ExtensionVariable((a, zero, zero, zero))

    def add_e(self, a: ExtensionVariable, b: ExtensionVariable) -> ExtensionVariable:
        return ExtensionVariable(tuple(self.add(x, y) for x, y in zip(a, b)))

    def sub_e(self, a: ExtensionVariable, b: ExtensionVariable) -> ExtensionVariable:
        return ExtensionVariable(tuple(self.sub(x, y) for x, y in zip(a, b)))

    def neg_e(self, a: ExtensionVariable) -> ExtensionVariable:
        return ExtensionVariable(tuple(self.neg(x) for x in a))

    def mul_e(self, a: ExtensionVariable, b: ExtensionVariable) -> ExtensionVariable:
        """Multiply modulo x^4 - 11.

        Schoolbook product into v[0..6], then fold v[4..6] back using
        x^4 = 11, x^5 = 11x, x^6 = 11x^2. This is the same as adding
        a[i]*b[j] into i+j when i+j < 4 and 11*a[i]*b[j] into i+j-4 otherwise.
        """
        f = self.field
        v: List[Element] = [f.zero() for _ in range(2 * EXTENSION_DEGREE - 1)]
        for i in range(EXTENSION_DEGREE):
            for j in range(EXTENSION_DEGREE):
                v[i + j] = f.add(v[i + j], f.mul(a[i].value, b[j].value))
        out = v[:EXTENSION_DEGREE]
        for k in range(EXTENSION_DEGREE, len(v)):
            out[k - EXTENSION_DEGREE] = f.add(out[k - EXTENSION_DEGREE], f.mul(v[k], self._w))
        return ExtensionVariable(tuple(Variable(c) for c in out))

    def inv_e(self, a: ExtensionVariable) -> ExtensionVariable:
        """Multiplicative inverse in GF(p^4).

        The inverse is computed out of circuit (extended Euclid against
        x^4 - 11) and constrained by a * inv == 1.

        Precondition: a != 0. For a == 0 there is no inverse; the hint yields
        zero, a warning is logged, and the circuit becomes unsatisfiable.
        """
        coeffs = [int(self.field.reduce(c.value).native) for c in a]
        if not any(coeffs):
            logger.warning("inv_e called on the zero extension element; circuit is unsatisfiable")
        inv = ExtensionVariable(tuple(Variable(self.field.new_witness(c)) for c in ff4_inv(coeffs)))
        self.assert_equal_e(self.mul_e(a, inv), self.one_e())
        return inv

    def div_e(self, a: ExtensionVariable, b: ExtensionVariable) -> ExtensionVariable:
        """a / b. Precondition: b != 0 (see inv_e)."""
        return self.mul_e(a, self.inv_e(b))

    def assert_equal_e(self, a: ExtensionVariable, b: ExtensionVariable) -> None:
        for x, y in zip(a, b):
            self.assert_equal(x, y)

    def assert_not_equal_e(self, a: ExtensionVariable, b: ExtensionVariable) -> None:
        """Constrain a != b: not every coordinate difference is zero."""
        flags = [self.field.is_zero(self.field.sub(x.value, y.value)) for x, y in zip(a, b)]
        all_zero = self.api.and_(self.api.and_(flags[0], flags[1]), self.api.and_(flags[2], flags[3]))
        self.api.assert_is_equal(all_zero, 0, label="assert_not_equal_e")

    def select_e(self, cond: Operand, a: ExtensionVariable, b: ExtensionVariable) -> ExtensionVariable:
        return ExtensionVariable(tuple(self.select(cond, x, y) for x, y in zip(a, b)))

    # --- Mixed extension / base ---

    def add_ef(self, a: ExtensionVariable, b: Variable) -> ExtensionVariable:
        return ExtensionVariable((self.add(a[0], b),) + a.value[1:])

    def sub_ef(self, a: ExtensionVariable, b: Variable) -> ExtensionVariable:
        return ExtensionVariable((self.sub(a[0], b),) + a.value[1:])

    def mul_ef(self, a: ExtensionVariable, b: Variable) -> ExtensionVariable:
        return ExtensionVariable(tuple(self.mul(x, b) for x in a))

    def div_ef(self, a: ExtensionVariable, b: Variable) -> ExtensionVariable:
        return self.mul_ef(a, self.inverse(b))

    # --- Decomposition ---

    def split_to_limbs(self, value: Operand) -> List[Variable]:
        """Unpack one native element into BabyBear values of bits_per_limb bits each.

        limb[i] = sum_j bit[i * 32 + j] * 2^j over the native bit width (254 for
        BN254); bit positions past the native width contribute 0. Limbs are not
        reduced here, so a 32-bit chunk >= p reads back mod p once observed.
        """
        width = self.params.bits_per_limb
        bits = self.api.to_binary(value)
        limbs = []
        for i in range(self.params.num_elms_per_native_elm):
            chunk = bits[i * width:(i + 1) * width]
            limbs.append(Variable(self.field.new_element(self.api.from_binary(chunk))))
        return limbs

    def to_bits(self, a: Variable) -> List[NativeVar]:
        """Canonical bits of a, least-significant first (31 bits for BabyBear)."""
        return self.field.to_bits(a.value)

    # --- Diagnostics ---

    def print_f(self, a: Variable) -> None:
        """Print the canonical witness of a. Records no constraints."""
        self.api.println(int(a.value.native) % self.params.modulus)

    def print_e(self, a: ExtensionVariable) -> None:
        for x in a:
            self.print_f(x)
