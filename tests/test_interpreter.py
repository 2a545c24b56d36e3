"""Tests for the transform interpreter (core/interpreter.py).

Every expected string below was derived by hand-simulating the
operations on the input.
"""

from __future__ import annotations

import pytest

from ytd_decipher.core.interpreter import apply_operation, run_program
from ytd_decipher.core.models import Program, Reverse, Slice, Splice, Swap, TransformKind
from ytd_decipher.exceptions import InterpretationError


def _cipher(*ops: object) -> Program:
    return Program(kind=TransformKind.SIGNATURE_CIPHER, operations=tuple(ops))  # type: ignore[arg-type]


def _nparam(*ops: object) -> Program:
    return Program(kind=TransformKind.N_PARAMETER, operations=tuple(ops))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Known fixtures
# ---------------------------------------------------------------------------

class TestKnownPrograms:
    def test_swap_splice_reverse(self) -> None:
        # abcdefgh -> swap(3) dbcaefgh -> drop first bcaefgh -> reverse
        program = _cipher(Swap(3), Splice(count=1, start=0), Reverse())
        assert run_program(program, "abcdefgh") == "hgfeacb"

    def test_swap_zero_count_splice_reverse(self) -> None:
        # Splice(count=0, start=1) leaves dbcaefgh untouched.
        program = _cipher(Swap(3), Splice(count=0, start=1), Reverse())
        assert run_program(program, "abcdefgh") == "hgfeacbd"

    def test_n_program_with_slice(self) -> None:
        # hgfedcba -> swap(2) fghedcba -> first six
        program = _nparam(Reverse(), Swap(2), Slice(6))
        assert run_program(program, "abcdefgh") == "fghedc"

    def test_empty_program_is_identity(self) -> None:
        assert run_program(_cipher(), "xyz") == "xyz"


# ---------------------------------------------------------------------------
# Individual operations
# ---------------------------------------------------------------------------

class TestReverse:
    def test_reverses(self) -> None:
        assert run_program(_cipher(Reverse()), "abc") == "cba"

    def test_empty(self) -> None:
        assert run_program(_cipher(Reverse()), "") == ""


class TestSplice:
    def test_zero_count_is_noop(self) -> None:
        assert run_program(_cipher(Splice(0, 0)), "abcdef") == "abcdef"
        assert run_program(_cipher(Splice(0, 4)), "abcdef") == "abcdef"

    def test_left_trim(self) -> None:
        assert run_program(_cipher(Splice(2)), "abcdef") == "cdef"

    def test_arbitrary_offset(self) -> None:
        assert run_program(_cipher(Splice(count=2, start=3)), "abcdef") == "abcf"

    def test_step_clamps_count_to_end(self) -> None:
        chars = list("abcdef")
        apply_operation(chars, Splice(count=10, start=4))
        assert chars == list("abcd")

    def test_step_with_start_past_end_is_noop(self) -> None:
        chars = list("abcdef")
        apply_operation(chars, Splice(count=3, start=20))
        assert chars == list("abcdef")

    def test_removes_up_to_the_last_character(self) -> None:
        assert run_program(_cipher(Splice(count=2, start=4)), "abcdef") == "abcd"


class TestSwap:
    def test_index_zero_is_noop(self) -> None:
        assert run_program(_cipher(Swap(0)), "abcdef") == "abcdef"

    def test_swaps_with_first(self) -> None:
        assert run_program(_cipher(Swap(2)), "abcdef") == "cbadef"

    def test_index_wraps_modulo_length(self) -> None:
        # 8 % 6 == 2
        assert run_program(_cipher(Swap(8)), "abcdef") == "cbadef"

    def test_multiple_of_length_is_noop(self) -> None:
        assert run_program(_cipher(Swap(12)), "abcdef") == "abcdef"

    def test_empty_input_is_noop(self) -> None:
        assert run_program(_cipher(Swap(5)), "") == ""


class TestSlice:
    def test_truncates(self) -> None:
        assert run_program(_nparam(Slice(3)), "abcdef") == "abc"

    def test_longer_than_input_is_noop(self) -> None:
        assert run_program(_nparam(Slice(30)), "abcdef") == "abcdef"

    def test_zero_empties(self) -> None:
        assert run_program(_nparam(Slice(0)), "abcdef") == ""


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestProperties:
    @pytest.mark.parametrize(
        "value",
        ["abc", "abcdefgh", "AOq0QJ8wRAIgXmPlOPSBkkUs1bYFYlJCfe29xx8j7v1pDL0Qwbd"],
    )
    def test_deterministic(self, value: str) -> None:
        program = _nparam(Swap(7), Reverse(), Splice(2, 1), Swap(31), Slice(40))
        first = run_program(program, value)
        assert all(run_program(program, value) == first for _ in range(5))

    def test_input_not_mutated(self) -> None:
        value = "abcdefgh"
        run_program(_cipher(Reverse(), Splice(3)), value)
        assert value == "abcdefgh"

    def test_program_reusable(self) -> None:
        program = _cipher(Swap(1), Reverse())
        assert run_program(program, "abc") == run_program(program, "abc") == "cab"


class TestOutputLength:
    def test_tracks_splice_and_slice(self) -> None:
        program = _nparam(Splice(2), Reverse(), Slice(4), Swap(1))
        assert program.output_length(10) == 4

    def test_splice_is_not_clamped(self) -> None:
        assert _cipher(Splice(count=5, start=8)).output_length(10) == 5

    def test_slice_longer_than_input_keeps_length(self) -> None:
        assert _nparam(Slice(30)).output_length(6) == 6

    def test_permutations_keep_length(self) -> None:
        assert _cipher(Reverse(), Swap(4)).output_length(7) == 7


class TestErrors:
    def test_unknown_operation_raises(self) -> None:
        with pytest.raises(InterpretationError, match="Unsupported operation"):
            apply_operation(list("abc"), object())  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("program", "value"),
        [
            (_cipher(Splice(count=10, start=4)), "abcdef"),
            (_cipher(Splice(count=3, start=20)), "abcdef"),
            (_cipher(Splice(1)), ""),
            (_nparam(Slice(4), Splice(count=2, start=3)), "abcdefgh"),
        ],
    )
    def test_splice_past_end_raises(self, program: Program, value: str) -> None:
        with pytest.raises(InterpretationError, match="expected"):
            run_program(program, value)

    def test_error_names_program_kind(self) -> None:
        with pytest.raises(InterpretationError, match="signature cipher program produced 4"):
            run_program(_cipher(Splice(count=10, start=4)), "abcdef")
