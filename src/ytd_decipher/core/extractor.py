"""Pattern extractor — locates transform definitions in player-script text.

Anchors are tried in a fixed priority order per :class:`TransformKind`;
the first anchor whose function name resolves to a definition wins.
Extraction stops at structural recognition: once an anchor gives a name,
the definition is found by a second search and its body is carved out by
bracket-depth counting (see :mod:`ytd_decipher.core.jstext`).

Guarantees
----------
* Pure — operates on the script text only.
* Every failure surfaces as :class:`~ytd_decipher.exceptions.PatternNotFoundError`
  tagged with the transform kind that could not be located.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ytd_decipher.core.jstext import find_matching_bracket, tokenize
from ytd_decipher.core.models import SourceSpan, TransformKind
from ytd_decipher.exceptions import PatternNotFoundError

logger = logging.getLogger(__name__)

_NAME = r"[a-zA-Z0-9$_]+"
_EMPTY_STRING = r"""(?:""|'')"""


@dataclass(frozen=True, slots=True)
class _Anchor:
    """One textual signature that reveals a transform's function name."""

    description: str
    pattern: re.Pattern[str]


# ---------------------------------------------------------------------------
# Anchor tables (priority order)
# ---------------------------------------------------------------------------

_CIPHER_ANCHORS: tuple[_Anchor, ...] = (
    _Anchor(
        "set(...,encodeURIComponent(NAME( call site",
        re.compile(
            rf"\b[a-zA-Z0-9$]\s*&&\s*[a-zA-Z0-9$]\.set\([^,]+\s*,\s*"
            rf"encodeURIComponent\(\s*(?P<name>{_NAME})\("
        ),
    ),
    _Anchor(
        "m=NAME(decodeURIComponent(h.s)) call site",
        re.compile(rf"\bm=(?P<name>{_NAME})\(decodeURIComponent\(h\.s\)\)"),
    ),
    _Anchor(
        "NAME=function(a){a=a.split(\"\") definition",
        re.compile(
            rf"(?<![\w$.])(?P<name>{_NAME})\s*=\s*function\(\s*(?P<arg>{_NAME})\s*\)"
            rf"\s*\{{\s*(?P=arg)\s*=\s*(?P=arg)\.split\(\s*{_EMPTY_STRING}\s*\)"
        ),
    ),
    _Anchor(
        "function NAME(a){a=a.split(\"\") declaration",
        re.compile(
            rf"function\s+(?P<name>{_NAME})\(\s*(?P<arg>{_NAME})\s*\)"
            rf"\s*\{{\s*(?P=arg)\s*=\s*(?P=arg)\.split\(\s*{_EMPTY_STRING}\s*\)"
        ),
    ),
)

_N_ANCHORS: tuple[_Anchor, ...] = (
    _Anchor(
        '.get("n"))&&(b=NAME(b) call site',
        re.compile(
            rf'\.get\("n"\)\)\s*&&\s*\(\s*(?P<var>{_NAME})\s*=\s*'
            rf"(?P<name>{_NAME})(?:\[(?P<idx>\d+)\])?\(\s*(?P=var)\s*\)"
        ),
    ),
    _Anchor(
        "String.fromCharCode(110) call site",
        re.compile(
            rf"String\.fromCharCode\(110\)\s*,\s*(?P<var>{_NAME})\s*=\s*{_NAME}"
            rf"\.get\(\s*{_NAME}\s*\)\)\s*&&\s*\(\s*(?P=var)\s*=\s*"
            rf"(?P<name>{_NAME})(?:\[(?P<idx>\d+)\])?\(\s*(?P=var)\s*\)"
        ),
    ),
    _Anchor(
        "NAME=function(a){var b=a.split(\"\") definition",
        re.compile(
            rf"(?<![\w$.])(?P<name>{_NAME})\s*=\s*function\(\s*(?P<arg>{_NAME})\s*\)"
            rf"\s*\{{\s*var\s+{_NAME}\s*=\s*(?P=arg)\.split\(\s*{_EMPTY_STRING}\s*\)"
        ),
    ),
)

ANCHORS: dict[TransformKind, tuple[_Anchor, ...]] = {
    TransformKind.SIGNATURE_CIPHER: _CIPHER_ANCHORS,
    TransformKind.N_PARAMETER: _N_ANCHORS,
}


# ---------------------------------------------------------------------------
# Extraction results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExtractedFunction:
    """A transform function carved out of the player script."""

    kind: TransformKind
    name: str
    params: tuple[str, ...]
    span: SourceSpan
    body: str
    helper_objects: tuple[str, ...]
    """Names of objects whose methods the body calls, in first-use order."""


@dataclass(frozen=True, slots=True)
class ExtractedObject:
    """An object literal of helper methods carved out of the player script."""

    name: str
    span: SourceSpan
    body: str
    """Text between the object literal's braces."""


@dataclass(frozen=True, slots=True)
class ScriptExtraction:
    """Everything the compiler needs from one player script."""

    cipher: ExtractedFunction
    n_transform: ExtractedFunction
    helpers: dict[str, ExtractedObject]

    def function(self, kind: TransformKind) -> ExtractedFunction:
        if kind is TransformKind.SIGNATURE_CIPHER:
            return self.cipher
        return self.n_transform


# ---------------------------------------------------------------------------
# Definition lookup
# ---------------------------------------------------------------------------

def _function_definition_re(name: str) -> re.Pattern[str]:
    escaped = re.escape(name)
    return re.compile(
        rf"(?:function\s+{escaped}|(?<![\w$.]){escaped}\s*=\s*function)"
        rf"\s*\((?P<params>[^)]*)\)\s*\{{"
    )


def find_function(
    script_text: str,
    name: str,
    kind: TransformKind,
) -> ExtractedFunction | None:
    """Locate the definition of function *name*; ``None`` if absent or unbalanced."""
    match = _function_definition_re(name).search(script_text)
    if match is None:
        return None

    open_index = match.end() - 1
    close_index = find_matching_bracket(script_text, open_index)
    if close_index is None:
        return None

    params = tuple(
        p.strip() for p in match.group("params").split(",") if p.strip()
    )
    body = script_text[open_index + 1:close_index]
    return ExtractedFunction(
        kind=kind,
        name=name,
        params=params,
        span=SourceSpan(match.start(), close_index + 1),
        body=body,
        helper_objects=_referenced_objects(body, params),
    )


def find_object(script_text: str, name: str) -> ExtractedObject | None:
    """Locate the object literal assigned to *name*; ``None`` if absent."""
    escaped = re.escape(name)
    pattern = re.compile(
        rf"(?<![\w$.])(?:(?:var|let|const)\s+)?{escaped}\s*=\s*\{{"
    )
    match = pattern.search(script_text)
    if match is None:
        return None

    open_index = match.end() - 1
    close_index = find_matching_bracket(script_text, open_index)
    if close_index is None:
        return None

    return ExtractedObject(
        name=name,
        span=SourceSpan(match.start(), close_index + 1),
        body=script_text[open_index + 1:close_index],
    )


_GLOBAL_OBJECTS = frozenset({"Array", "JSON", "Math", "Number", "Object", "String"})

_MEMBER_CALL_RE = re.compile(
    r"(?<![\w$.])(?P<obj>[A-Za-z_$][\w$]*)\s*"
    r"(?:\.[A-Za-z_$][\w$]*|\[\s*[\"'][^\"']+[\"']\s*\])\s*\("
)


def _referenced_objects(body: str, params: tuple[str, ...]) -> tuple[str, ...]:
    """Names of non-local objects whose members *body* calls."""
    tokens = tokenize(body)
    local_names = set(params)
    local_names.update(
        token
        for previous, token in zip(tokens, tokens[1:])
        if previous in ("var", "let", "const")
    )

    names: list[str] = []
    for match in _MEMBER_CALL_RE.finditer(body):
        obj = match.group("obj")
        if obj in local_names or obj in _GLOBAL_OBJECTS:
            continue
        if obj not in names:
            names.append(obj)
    return tuple(names)


def _resolve_indexed_name(script_text: str, name: str, index: int) -> str | None:
    """Follow ``var NAME=[f0,f1,...]`` to the function at *index*."""
    escaped = re.escape(name)
    match = re.search(
        rf"(?<![\w$.])(?:var\s+)?{escaped}\s*=\s*\[(?P<items>[^\]]*)\]",
        script_text,
    )
    if match is None:
        return None
    items = [item.strip() for item in match.group("items").split(",")]
    if index >= len(items) or not items[index]:
        return None
    return items[index]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def locate_function(script_text: str, kind: TransformKind) -> ExtractedFunction:
    """Locate the transform of *kind*, trying anchors in priority order.

    Raises
    ------
    PatternNotFoundError
        When no anchor yields a function definition.
    """
    for anchor in ANCHORS[kind]:
        match = anchor.pattern.search(script_text)
        if match is None:
            continue

        name: str | None = match.group("name")
        index = match.groupdict().get("idx")
        if index is not None:
            name = _resolve_indexed_name(script_text, name, int(index))
            if name is None:
                logger.debug(
                    "%s anchor %r matched but its function array did not resolve",
                    kind.value, anchor.description,
                )
                continue

        function = find_function(script_text, name, kind)
        if function is None:
            logger.debug(
                "%s anchor %r named %r but no balanced definition was found",
                kind.value, anchor.description, name,
            )
            continue

        logger.debug(
            "Located %s function %r via %r at %d-%d",
            kind.value, name, anchor.description,
            function.span.start, function.span.end,
        )
        return function

    raise PatternNotFoundError(kind)


def extract_transforms(script_text: str) -> ScriptExtraction:
    """Locate both transforms and every helper object they call into.

    Raises
    ------
    PatternNotFoundError
        When either transform or one of its helper objects is missing.
    """
    cipher = locate_function(script_text, TransformKind.SIGNATURE_CIPHER)
    n_transform = locate_function(script_text, TransformKind.N_PARAMETER)

    helpers: dict[str, ExtractedObject] = {}
    for function in (cipher, n_transform):
        for object_name in function.helper_objects:
            if object_name in helpers:
                continue
            found = find_object(script_text, object_name)
            if found is None:
                raise PatternNotFoundError(
                    function.kind,
                    f"helper object {object_name!r} referenced by "
                    f"{function.name!r} is not defined",
                )
            helpers[object_name] = found

    return ScriptExtraction(
        cipher=cipher,
        n_transform=n_transform,
        helpers=helpers,
    )
