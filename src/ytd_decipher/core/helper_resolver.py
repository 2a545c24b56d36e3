"""Helper resolver — classifies helper methods by the shape of their bodies.

The platform renames helper methods on every release, so classification
never consults names.  Each method body is normalised (see
:func:`~ytd_decipher.core.jstext.normalize_body`) and handed to a fixed
priority list of :class:`~ytd_decipher.core.protocols.ShapeMatcher`
objects.  In the normalised form the working array is always ``P0`` and
the call-site arguments that follow it are ``P1``, ``P2``, …
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from ytd_decipher.core.jstext import normalize_body, split_top_level
from ytd_decipher.core.models import Operation, Reverse, Slice, Splice, Swap
from ytd_decipher.core.protocols import ShapeMatcher
from ytd_decipher.exceptions import UnknownOperationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParamRef:
    """Operation argument taken from the call site.

    *position* counts the arguments after the working array, so ``P1``
    in a normalised body is position 0.
    """

    position: int


@dataclass(frozen=True, slots=True)
class LiteralArg:
    """Operation argument fixed inside the helper body itself."""

    value: int


ArgSource = Union[ParamRef, LiteralArg]


@dataclass(frozen=True, slots=True)
class HelperShape:
    """What a helper method does, independent of its name."""

    operation: type[Operation]
    arguments: tuple[tuple[str, ArgSource], ...] = ()
    """``(field name, source)`` pairs for the operation's constructor."""


@dataclass(frozen=True, slots=True)
class HelperMethod:
    """One ``name:function(params){body}`` entry of the helper object."""

    name: str
    params: tuple[str, ...]
    body: str


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

_ARG = r"P\d+|\d+"


def _arg_source(token: str) -> ArgSource | None:
    if token.isdigit():
        return LiteralArg(int(token))
    position = int(token[1:])
    if position == 0:
        # The working array itself is never a numeric argument.
        return None
    return ParamRef(position - 1)


@dataclass(frozen=True, slots=True)
class RegexShapeMatcher:
    """Matches a normalised body against a regular expression.

    Named groups listed in *fields* carry the operation's arguments.
    """

    operation: type[Operation]
    pattern: re.Pattern[str]
    fields: tuple[str, ...] = ()

    def match(self, normalized_body: str) -> HelperShape | None:
        found = self.pattern.fullmatch(normalized_body)
        if found is None:
            return None

        arguments: list[tuple[str, ArgSource]] = []
        for field in self.fields:
            source = _arg_source(found.group(field))
            if source is None:
                return None
            arguments.append((field, source))
        return HelperShape(operation=self.operation, arguments=tuple(arguments))


DEFAULT_MATCHERS: tuple[ShapeMatcher, ...] = (
    RegexShapeMatcher(Reverse, re.compile(r"(?:return )?P0\.reverse\(\)")),
    RegexShapeMatcher(
        Slice,
        re.compile(rf"P0\.length=(?P<count>{_ARG})"),
        ("count",),
    ),
    RegexShapeMatcher(
        Slice,
        re.compile(rf"(?:return )?P0\.splice\((?P<count>{_ARG})\)"),
        ("count",),
    ),
    RegexShapeMatcher(
        Splice,
        re.compile(rf"(?:return )?P0\.splice\((?P<start>{_ARG}),(?P<count>{_ARG})\)"),
        ("start", "count"),
    ),
    RegexShapeMatcher(
        Swap,
        re.compile(
            r"var L0=P0\[0\];P0\[0\]=P0\[(?P<index>P\d+)%P0\.length\];"
            r"P0\[(?P=index)%P0\.length\]=L0"
        ),
        ("index",),
    ),
    RegexShapeMatcher(
        Swap,
        re.compile(
            r"var L0=P0\[0\];P0\[0\]=P0\[(?P<index>P\d+)\];P0\[(?P=index)\]=L0"
        ),
        ("index",),
    ),
)
"""Fixed priority list: Reverse, Slice, Splice, Swap."""


# ---------------------------------------------------------------------------
# Helper object parsing
# ---------------------------------------------------------------------------

_PROPERTY_METHOD_RE = re.compile(
    r"""(?P<q>["']?)(?P<name>[\w$]+)(?P=q)\s*:\s*function\s*"""
    r"""\((?P<params>[^)]*)\)\s*\{(?P<body>.*)\}""",
    re.DOTALL,
)
_SHORTHAND_METHOD_RE = re.compile(
    r"(?P<name>[\w$]+)\s*\((?P<params>[^)]*)\)\s*\{(?P<body>.*)\}",
    re.DOTALL,
)
_KEY_RE = re.compile(r"""["']?(?P<name>[\w$]+)["']?\s*:""")


def parse_helper_object(body: str) -> list[HelperMethod]:
    """Split an object literal's body into its methods.

    Raises
    ------
    UnknownOperationError
        When an entry is not a function.
    """
    methods: list[HelperMethod] = []
    for entry in split_top_level(body, ","):
        found = (
            _PROPERTY_METHOD_RE.fullmatch(entry)
            or _SHORTHAND_METHOD_RE.fullmatch(entry)
        )
        if found is None:
            key = _KEY_RE.match(entry)
            raise UnknownOperationError(key.group("name") if key else entry[:32])

        params = tuple(
            p.strip() for p in found.group("params").split(",") if p.strip()
        )
        methods.append(
            HelperMethod(
                name=found.group("name"),
                params=params,
                body=found.group("body").strip(),
            )
        )
    return methods


def classify_method(
    method: HelperMethod,
    matchers: Sequence[ShapeMatcher] = DEFAULT_MATCHERS,
) -> HelperShape:
    """Return the shape of *method*.

    Raises
    ------
    UnknownOperationError
        When no matcher recognises the body.
    """
    normalized = normalize_body(method.body, method.params)
    for matcher in matchers:
        shape = matcher.match(normalized)
        if shape is not None:
            return shape
    logger.debug("No shape for helper %r: %s", method.name, normalized)
    raise UnknownOperationError(method.name)


def resolve_helpers(
    body: str,
    matchers: Sequence[ShapeMatcher] = DEFAULT_MATCHERS,
) -> dict[str, HelperShape]:
    """Map every method name of a helper object body to its shape.

    Raises
    ------
    UnknownOperationError
        When any method matches no known shape.
    """
    shapes: dict[str, HelperShape] = {}
    for method in parse_helper_object(body):
        shapes[method.name] = classify_method(method, matchers)
        logger.debug(
            "Helper %r classified as %s",
            method.name, shapes[method.name].operation.__name__,
        )
    return shapes
