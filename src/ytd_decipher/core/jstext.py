"""Lexical helpers over minified player-script text.

This is not a parser.  It knows just enough about the script's lexical
structure (string literals and bracket nesting) to carve balanced bodies
out of the text once an anchor has been found, to split a body into its
top-level statements, and to normalise short function bodies into a
name-independent form for shape matching.
"""

from __future__ import annotations

import re

_QUOTES = frozenset("\"'`")
_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = frozenset(_OPENERS.values())

_TOKEN_RE = re.compile(
    r""""(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*'|[A-Za-z_$][\w$]*|\d+|\S"""
)
_WORD_RE = re.compile(r"[\w$]")
_DECLARATION_KEYWORDS = frozenset({"var", "let", "const"})


def _skip_string(text: str, index: int) -> int:
    """Return the index just past the string literal opening at *index*."""
    quote = text[index]
    i = index + 1
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == quote:
            return i + 1
        i += 1
    return len(text)


def find_matching_bracket(text: str, open_index: int) -> int | None:
    """Return the index of the bracket closing the one at *open_index*.

    Returns ``None`` when the text ends before the bracket is balanced.
    """
    opener = text[open_index]
    if opener not in _OPENERS:
        raise ValueError(f"No opening bracket at offset {open_index}: {opener!r}")

    depth = 0
    i = open_index
    while i < len(text):
        char = text[i]
        if char in _QUOTES:
            i = _skip_string(text, i)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def split_top_level(text: str, separators: str = ";") -> list[str]:
    """Split *text* on *separators* that sit outside strings and brackets.

    Empty fragments are dropped; surrounding whitespace is stripped.
    """
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if char in _QUOTES:
            i = _skip_string(text, i)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        elif depth == 0 and char in separators:
            parts.append(text[start:i])
            start = i + 1
        i += 1
    parts.append(text[start:])
    return [part.strip() for part in parts if part.strip()]


def tokenize(text: str) -> list[str]:
    """Split *text* into identifier, number, string and punctuation tokens."""
    return _TOKEN_RE.findall(text)


def normalize_body(body: str, params: list[str] | tuple[str, ...]) -> str:
    """Return a canonical, name-independent rendering of a function body.

    Parameters become ``P0``, ``P1``, … in declaration order and declared
    locals become ``L0``, ``L1``, … in order of appearance.  Member names
    (anything after a ``.``) keep their spelling.  Whitespace is dropped
    except where two word tokens would otherwise fuse, and a trailing
    ``;`` is removed.
    """
    tokens = tokenize(body)

    renames: dict[str, str] = {name: f"P{i}" for i, name in enumerate(params)}
    locals_seen = 0
    for previous, token in zip(tokens, tokens[1:]):
        if previous in _DECLARATION_KEYWORDS and token not in renames:
            renames[token] = f"L{locals_seen}"
            locals_seen += 1

    out: list[str] = []
    previous = ""
    for token in tokens:
        if previous != "." and token in renames:
            token = renames[token]
        if out and _WORD_RE.match(out[-1][-1]) and _WORD_RE.match(token[0]):
            out.append(" ")
        out.append(token)
        previous = token

    normalized = "".join(out)
    return normalized.rstrip(";")
