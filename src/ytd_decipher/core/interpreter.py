"""Transform interpreter — replays a :class:`Program` against a string.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic.

Single steps mirror the permissive host semantics: a swap index is
normalised modulo the current length and splice bounds are clamped.
A whole program run is stricter.  Its output must have the length the
program declares (:meth:`Program.output_length`); a splice that had to be
clamped shortens the output by less than it declares, and the run fails
instead of returning a partial result.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ytd_decipher.core.models import Operation, Program, Reverse, Slice, Splice, Swap
from ytd_decipher.exceptions import InterpretationError


# ---------------------------------------------------------------------------
# Per-operation steps (mutate the working list in place)
# ---------------------------------------------------------------------------

def _reverse(chars: list[str], op: Reverse) -> None:
    chars.reverse()


def _splice(chars: list[str], op: Splice) -> None:
    start = min(op.start, len(chars))
    del chars[start:start + op.count]


def _swap(chars: list[str], op: Swap) -> None:
    if not chars:
        return
    index = op.index % len(chars)
    chars[0], chars[index] = chars[index], chars[0]


def _slice(chars: list[str], op: Slice) -> None:
    del chars[op.count:]


_STEPS: dict[type, Callable[[list[str], Any], None]] = {
    Reverse: _reverse,
    Splice: _splice,
    Swap: _swap,
    Slice: _slice,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def apply_operation(chars: list[str], op: Operation) -> None:
    """Apply a single operation to *chars* in place."""
    try:
        step = _STEPS[type(op)]
    except KeyError:
        raise InterpretationError(f"Unsupported operation {op!r}") from None
    step(chars, op)


def run_program(program: Program, value: str) -> str:
    """Return *value* transformed by *program*.

    Raises
    ------
    InterpretationError
        When the output length differs from
        :meth:`Program.output_length`, which means a step ran past the
        end of *value* and the program does not fit this input.
    """
    chars = list(value)
    for op in program:
        apply_operation(chars, op)

    want = program.output_length(len(value))
    if len(chars) != want:
        raise InterpretationError(
            f"{program.kind.value} program produced {len(chars)} characters, "
            f"expected {want}",
        )
    return "".join(chars)
