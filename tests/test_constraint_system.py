"""Tests for the native-field constraint system."""

import io

import galois
import pytest

from constraints.api import Constraint, ConstraintSystem, UnsatisfiedConstraintError
from primitives.field import BN254_SCALAR_PRIME, NATIVE


class TestArithmetic:
    """Witness values follow native field arithmetic."""

    def test_constant_reduces(self, api: ConstraintSystem) -> None:
        """Constants are reduced mod r."""
        assert api.constant(BN254_SCALAR_PRIME + 3) == NATIVE(3)
        assert api.constant(-1) == NATIVE(BN254_SCALAR_PRIME - 1)

    def test_constant_rejects_foreign_field(self, api: ConstraintSystem) -> None:
        """Values from another galois field are not silently reinterpreted."""
        other = galois.GF(7)
        with pytest.raises(TypeError):
            api.constant(other(3))

    def test_add_sub_mul_neg(self, api: ConstraintSystem) -> None:
        """Native arithmetic wraps mod r."""
        assert api.add(2, 3, 4) == NATIVE(9)
        assert api.sub(2, 3) == NATIVE(BN254_SCALAR_PRIME - 1)
        assert api.mul(2, 3, 4) == NATIVE(24)
        assert api.neg(1) == NATIVE(BN254_SCALAR_PRIME - 1)

    def test_select(self, api: ConstraintSystem) -> None:
        """Branchless select on native values."""
        assert api.select(1, 10, 20) == NATIVE(10)
        assert api.select(0, 10, 20) == NATIVE(20)

    def test_arithmetic_records_no_constraints(self, api: ConstraintSystem) -> None:
        """Plain arithmetic is free."""
        api.mul(api.add(1, 2), 5)
        assert api.num_constraints == 0


class TestIsZeroAnd:
    """is_zero and boolean AND."""

    @pytest.mark.parametrize("value,expected", [(0, 1), (1, 0), (12345, 0), (-1, 0)])
    def test_is_zero(self, api: ConstraintSystem, value: int, expected: int) -> None:
        """is_zero flags zero and only zero."""
        assert api.is_zero(value) == NATIVE(expected)
        assert api.is_satisfied()

    @pytest.mark.parametrize("a,b", [(0, 0), (0, 1), (1, 0), (1, 1)])
    def test_and_truth_table(self, api: ConstraintSystem, a: int, b: int) -> None:
        """AND of booleans is their product."""
        assert api.and_(a, b) == NATIVE(a & b)
        assert api.is_satisfied()

    def test_and_non_boolean_input_unsatisfiable(self, api: ConstraintSystem) -> None:
        """Non-boolean AND inputs fail at check time."""
        api.and_(2, 1)
        assert not api.is_satisfied()


class TestBinary:
    """Bit decomposition and recomposition."""

    def test_to_binary_lsb_first(self, api: ConstraintSystem) -> None:
        """Bits come out least-significant first."""
        bits = api.to_binary(6, 4)
        assert [int(b) for b in bits] == [0, 1, 1, 0]
        assert api.is_satisfied()

    def test_to_binary_full_width(self, api: ConstraintSystem) -> None:
        """Default width is the native bit length."""
        x = BN254_SCALAR_PRIME - 1
        bits = api.to_binary(x)
        assert len(bits) == 254
        assert int(api.from_binary(bits)) == x
        assert api.is_satisfied()

    def test_to_binary_overflow_is_deferred(self, api: ConstraintSystem) -> None:
        """A value wider than n_bits does not raise, the circuit is unsatisfiable."""
        api.to_binary(16, 4)
        assert not api.is_satisfied()
        assert all(c.label == "to_binary" for c in api.unsatisfied())

    def test_from_binary(self, api: ConstraintSystem) -> None:
        """Recomposition weights bit i by 2^i."""
        assert api.from_binary([1, 0, 1]) == NATIVE(5)
        assert api.from_binary([]) == NATIVE(0)


class TestAssertions:
    """Assertions are recorded and only checked later."""

    def test_equal_satisfied(self, api: ConstraintSystem) -> None:
        """Equal values satisfy assert_is_equal."""
        api.assert_is_equal(api.mul(6, 6), 36)
        assert api.num_constraints == 1
        assert api.is_satisfied()
        api.check()

    def test_equal_violation_is_deferred(self, api: ConstraintSystem) -> None:
        """A false equality is recorded, not raised."""
        api.assert_is_equal(api.mul(6, 6), 35)
        assert not api.is_satisfied()
        with pytest.raises(UnsatisfiedConstraintError) as exc:
            api.check()
        assert len(exc.value.failed) == 1
        assert "assert_is_equal" in str(exc.value)

    def test_boolean(self, api: ConstraintSystem) -> None:
        """Only 0 and 1 pass assert_is_boolean."""
        api.assert_is_boolean(1)
        api.assert_is_boolean(0)
        assert api.is_satisfied()
        api.assert_is_boolean(2, label="flag")
        assert [c.label for c in api.unsatisfied()] == ["flag"]

    def test_range_check(self, api: ConstraintSystem) -> None:
        """Values must fit in n bits."""
        api.range_check(255, 8)
        assert api.is_satisfied()
        api.range_check(256, 8)
        assert not api.is_satisfied()

    def test_unknown_constraint_kind(self) -> None:
        """An unknown kind is rejected."""
        with pytest.raises(ValueError):
            Constraint("lookup", (NATIVE(1),), "x").holds()

    def test_error_message_truncates(self, api: ConstraintSystem) -> None:
        """Long failure lists are summarized."""
        for i in range(7):
            api.assert_is_equal(i, i + 1, label=f"c{i}")
        with pytest.raises(UnsatisfiedConstraintError, match=r"7 unsatisfied .*\+2 more"):
            api.check()


class TestHintAndPrint:
    """Hints and println."""

    def test_hint_single_and_multiple(self, api: ConstraintSystem) -> None:
        """Hints return one value or a tuple."""
        assert api.hint(lambda x: x * 2, 21) == NATIVE(42)
        q, r = api.hint(lambda v: divmod(v, 10), 47)
        assert (q, r) == (NATIVE(4), NATIVE(7))
        assert api.num_constraints == 0

    def test_println(self) -> None:
        """println writes to the configured stream."""
        out = io.StringIO()
        api = ConstraintSystem(out=out)
        api.println(api.constant(7), "tag")
        assert out.getvalue() == "7 tag\n"
        assert api.num_constraints == 0

    def test_println_defaults_to_stdout(self, api: ConstraintSystem, capsys) -> None:
        """Without a stream, println uses stdout."""
        api.println(api.constant(11))
        assert capsys.readouterr().out == "11\n"
