"""Witness-carrying constraint system over the native field.

ConstraintSystem plays the role of a circuit frontend API: every operation
computes its witness value immediately (galois scalars of the native field)
while assertions only *record* constraints. Nothing fails at the call site;
a violated assertion is reported later by check() / is_satisfied().

Example:
    api = ConstraintSystem()
    x = api.constant(6)
    y = api.mul(x, x)
    api.assert_is_equal(y, 36)
    api.assert_is_equal(y, 35)   # recorded, no exception here
    api.is_satisfied()           # False
"""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TextIO, Tuple, Union

import galois

from primitives.field import NATIVE, to_bits_le

logger = logging.getLogger(__name__)

NativeVar = galois.FieldArray
Operand = Union[NativeVar, int]


class UnsatisfiedConstraintError(ValueError):
    """Raised by ConstraintSystem.check() when recorded constraints do not hold."""

    def __init__(self, failed: List["Constraint"]):
        self.failed = failed
        shown = ", ".join(c.label for c in failed[:5])
        more = f" (+{len(failed) - 5} more)" if len(failed) > 5 else ""
        super().__init__(f"{len(failed)} unsatisfied constraint(s): {shown}{more}")


@dataclass(frozen=True)
class Constraint:
    """A recorded relation over native witness values.

    Attributes:
        kind: 'equal' (operands[0] == operands[1]), 'boolean' (operands[0] in {0, 1})
            or 'range' (operands[0] < 2^operands[1])
        operands: Witness values (and bit width for 'range')
        label: Name of the operation that emitted the constraint
    """
    kind: str
    operands: Tuple
    label: str

    def holds(self) -> bool:
        if self.kind == "equal":
            return int(self.operands[0]) == int(self.operands[1])
        if self.kind == "boolean":
            return int(self.operands[0]) in (0, 1)
        if self.kind == "range":
            return int(self.operands[0]) < (1 << self.operands[1])
        raise ValueError(f"Unknown constraint kind: {self.kind}")


class ConstraintSystem:
    """Native-field circuit API with deferred constraint checking.

    Args:
        field: galois prime field class used as the native field
        out: Stream for println output (defaults to sys.stdout at print time)
    """

    def __init__(self, field: type = NATIVE, out: Optional[TextIO] = None):
        self.field = field
        self.constraints: List[Constraint] = []
        self._out = out
        logger.debug("constraint system over %d-bit native field", self.nb_bits)

    @property
    def nb_bits(self) -> int:
        """Bit length of the native modulus."""
        return int(self.field.order).bit_length()

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    # --- Values ---

    def constant(self, x: Operand) -> NativeVar:
        """Lift an int (reduced mod the native order) or native value."""
        if isinstance(x, galois.FieldArray):
            if type(x) is not self.field:
                raise TypeError(f"Expected {self.field.name} element, got {type(x).name}")
            return x
        return self.field(int(x) % int(self.field.order))

    def hint(self, fn: Callable, *inputs: Operand) -> Union[NativeVar, List[NativeVar]]:
        """Compute unconstrained witness value(s) from integer views of the inputs.

        fn receives ints and returns an int or a sequence of ints. The result is
        not constrained in any way; callers must assert whatever relation the
        hint is supposed to satisfy.
        """
        result = fn(*[int(self.constant(x)) for x in inputs])
        if isinstance(result, (list, tuple)):
            return [self.constant(r) for r in result]
        return self.constant(result)

    # --- Arithmetic ---

    def add(self, a: Operand, b: Operand, *more: Operand) -> NativeVar:
        acc = self.constant(a) + self.constant(b)
        for x in more:
            acc = acc + self.constant(x)
        return acc

    def sub(self, a: Operand, b: Operand) -> NativeVar:
        return self.constant(a) - self.constant(b)

    def mul(self, a: Operand, b: Operand, *more: Operand) -> NativeVar:
        acc = self.constant(a) * self.constant(b)
        for x in more:
            acc = acc * self.constant(x)
        return acc

    def neg(self, a: Operand) -> NativeVar:
        return -self.constant(a)

    def and_(self, a: Operand, b: Operand) -> NativeVar:
        """Boolean AND; both inputs are constrained to {0, 1}."""
        self.assert_is_boolean(a, label="and")
        self.assert_is_boolean(b, label="and")
        return self.mul(a, b)

    def select(self, cond: Operand, a: Operand, b: Operand) -> NativeVar:
        """Return a if cond == 1 else b, computed as b + cond * (a - b).

        cond is not constrained to be boolean here.
        """
        return self.add(b, self.mul(cond, self.sub(a, b)))

    def is_zero(self, a: Operand) -> NativeVar:
        """Return 1 if a == 0 else 0.

        Uses the usual inverse hint: flag = 1 - a * inv(a), with a * flag == 0.
        """
        a = self.constant(a)
        order = int(self.field.order)
        inv = self.hint(lambda x: pow(x, order - 2, order) if x else 0, a)
        flag = self.sub(1, self.mul(a, inv))
        self.assert_is_equal(self.mul(a, flag), 0, label="is_zero")
        return flag

    # --- Bits ---

    def to_binary(self, x: Operand, n_bits: Optional[int] = None) -> List[NativeVar]:
        """Decompose x into n_bits bits, least-significant first.

        Defaults to the full native bit width. Each bit is constrained boolean
        and the recomposition is constrained equal to x, so a value that does
        not fit in n_bits leaves the circuit unsatisfiable.
        """
        n_bits = self.nb_bits if n_bits is None else n_bits
        x = self.constant(x)
        bits = self.hint(lambda v: to_bits_le(v, n_bits), x)
        for b in bits:
            self.assert_is_boolean(b, label="to_binary")
        self.assert_is_equal(self.from_binary(bits), x, label="to_binary")
        return bits

    def from_binary(self, bits: Sequence[Operand]) -> NativeVar:
        """Recompose little-endian bits into a native value."""
        return self.constant(sum(int(self.constant(b)) << i for i, b in enumerate(bits)))

    # --- Assertions (recorded, never raised) ---

    def assert_is_equal(self, a: Operand, b: Operand, label: str = "assert_is_equal") -> None:
        self.constraints.append(Constraint("equal", (self.constant(a), self.constant(b)), label))

    def assert_is_boolean(self, a: Operand, label: str = "assert_is_boolean") -> None:
        self.constraints.append(Constraint("boolean", (self.constant(a),), label))

    def range_check(self, a: Operand, n_bits: int, label: str = "range_check") -> None:
        self.constraints.append(Constraint("range", (self.constant(a), n_bits), label))

    # --- Diagnostics ---

    def println(self, *values) -> None:
        """Print witness values, one line per call. Emits no constraints."""
        out = self._out if self._out is not None else sys.stdout
        print(*[int(v) if isinstance(v, galois.FieldArray) else v for v in values], file=out)

    # --- Satisfiability ---

    def unsatisfied(self) -> List[Constraint]:
        return [c for c in self.constraints if not c.holds()]

    def is_satisfied(self) -> bool:
        return all(c.holds() for c in self.constraints)

    def check(self) -> None:
        """Raise UnsatisfiedConstraintError if any recorded constraint fails."""
        failed = self.unsatisfied()
        if failed:
            raise UnsatisfiedConstraintError(failed)
        logger.debug("%d constraints satisfied", len(self.constraints))
