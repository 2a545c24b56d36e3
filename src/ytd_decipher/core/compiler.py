"""Algorithm compiler — turns a located transform into a :class:`Program`.

A transform body has a fixed skeleton::

    a = a.split("");          // or: var b = a.split("")
    Obj.m1(a, 3);             // one helper call per statement
    Obj["m2"](a, 1);
    return a.join("")

Every helper call becomes exactly one operation, in source order, with
its arguments bound from the integer literals at the call site.  Replaying
the resulting program reproduces what the original function computes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone

from ytd_decipher.core.extractor import ExtractedFunction, extract_transforms
from ytd_decipher.core.helper_resolver import (
    HelperShape,
    LiteralArg,
    ParamRef,
    resolve_helpers,
)
from ytd_decipher.core.jstext import split_top_level
from ytd_decipher.core.models import (
    CompiledEntry,
    Operation,
    PlayerScript,
    Program,
    Slice,
    TransformKind,
)
from ytd_decipher.core.player import extract_signature_timestamp
from ytd_decipher.exceptions import CompileError

logger = logging.getLogger(__name__)

_ID = r"[A-Za-z_$][\w$]*"
_SPLIT_RE = re.compile(
    rf"""(?:var\s+)?(?P<array>{_ID})\s*=\s*(?P<source>{_ID})\.split\(\s*(?:""|'')\s*\)"""
)
_JOIN_RE = re.compile(rf"""return\s+(?P<array>{_ID})\.join\(\s*(?:""|'')\s*\)""")
_CALL_RE = re.compile(
    rf"""(?P<obj>{_ID})\s*(?:\.(?P<method>{_ID})|\[\s*["'](?P<quoted>[\w$]+)["']\s*\])"""
    r"""\s*\((?P<args>[^()]*)\)"""
)
_INT_LITERAL_RE = re.compile(r"\d+")

HelperTable = Mapping[str, Mapping[str, HelperShape]]
"""Helper object name → method name → shape."""


def _bind(shape: HelperShape, call_args: list[int], call_text: str) -> Operation:
    values: dict[str, int] = {}
    for field, source in shape.arguments:
        if isinstance(source, LiteralArg):
            values[field] = source.value
        elif isinstance(source, ParamRef):
            if source.position >= len(call_args):
                raise CompileError(f"missing argument for {field!r} in {call_text!r}")
            values[field] = call_args[source.position]
    return shape.operation(**values)


def _parse_call_args(raw_args: str, array: str, statement: str) -> list[int]:
    args = [arg.strip() for arg in raw_args.split(",")] if raw_args.strip() else []
    if not args or args[0] != array:
        raise CompileError(
            f"helper call does not operate on the working array {array!r}: {statement!r}"
        )
    literals: list[int] = []
    for arg in args[1:]:
        if not _INT_LITERAL_RE.fullmatch(arg):
            raise CompileError(f"non-literal argument {arg!r} in {statement!r}")
        literals.append(int(arg))
    return literals


def compile_program(
    function: ExtractedFunction,
    helpers: HelperTable,
    kind: TransformKind | None = None,
) -> Program:
    """Compile *function* into a program of *kind* (defaults to the function's).

    Raises
    ------
    CompileError
        On any statement that is not a split, a helper call or the final
        join; on calls to unmapped helpers; on non-literal arguments; and
        on a truncation inside the signature cipher.
    """
    kind = kind or function.kind
    statements = split_top_level(function.body, ";,")
    if len(statements) < 2:
        raise CompileError(f"{function.name!r} body is too short to be a transform")

    split = _SPLIT_RE.fullmatch(statements[0])
    if split is None or split.group("source") not in function.params:
        raise CompileError(
            f"{function.name!r} does not start by splitting its argument: "
            f"{statements[0]!r}"
        )
    array = split.group("array")

    join = _JOIN_RE.fullmatch(statements[-1])
    if join is None or join.group("array") != array:
        raise CompileError(
            f"{function.name!r} does not end by joining {array!r}: {statements[-1]!r}"
        )

    operations: list[Operation] = []
    for statement in statements[1:-1]:
        call = _CALL_RE.fullmatch(statement)
        if call is None:
            raise CompileError(f"unsupported statement {statement!r} in {function.name!r}")

        obj = call.group("obj")
        method = call.group("method") or call.group("quoted")
        shape = helpers.get(obj, {}).get(method)
        if shape is None:
            raise CompileError(f"call to unmapped helper {obj}.{method} in {function.name!r}")

        call_args = _parse_call_args(call.group("args"), array, statement)
        operation = _bind(shape, call_args, statement)
        if isinstance(operation, Slice) and kind is TransformKind.SIGNATURE_CIPHER:
            raise CompileError(
                f"truncating helper {obj}.{method} is not valid in the signature cipher"
            )
        operations.append(operation)

    return Program(kind=kind, operations=tuple(operations))


def compile_player_script(script: PlayerScript) -> CompiledEntry:
    """Run extraction, helper resolution and compilation for both transforms.

    Raises
    ------
    PatternNotFoundError
        When a transform or helper object cannot be located.
    UnknownOperationError
        When a helper method has an unrecognised shape.
    CompileError
        When a transform body has an unsupported call shape.
    """
    extraction = extract_transforms(script.text)
    helpers: dict[str, dict[str, HelperShape]] = {
        name: resolve_helpers(obj.body) for name, obj in extraction.helpers.items()
    }

    cipher_program = compile_program(extraction.cipher, helpers)
    n_program = compile_program(extraction.n_transform, helpers)
    logger.debug(
        "Compiled player %s: cipher=%d ops, n=%d ops",
        script.identity, len(cipher_program), len(n_program),
    )

    return CompiledEntry(
        script_identity=script.identity,
        cipher_program=cipher_program,
        n_program=n_program,
        compiled_at=datetime.now(timezone.utc),
        cipher_function=extraction.cipher.name,
        n_function=extraction.n_transform.name,
        signature_timestamp=extract_signature_timestamp(script.text),
    )
