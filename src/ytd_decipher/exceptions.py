"""Custom exception hierarchy for ytd-decipher.

All exceptions that cross layer boundaries must inherit from
:class:`DecipherError`.  Raw third-party exceptions (e.g. from yt-dlp)
must NEVER propagate beyond the infrastructure layer — they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
DecipherError
├── PatternNotFoundError
├── UnknownOperationError
├── CompileError
│   └── ReferenceMismatchError
├── InterpretationError
├── PerStreamResolutionError
├── InvalidPlayerURLError
└── EnvironmentError

Compilation-stage errors (:class:`PatternNotFoundError`,
:class:`UnknownOperationError`, :class:`CompileError`) abort compilation
for a whole player script.  :class:`PerStreamResolutionError` is local to
one stream and is collected rather than raised by the manifest resolver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ytd_decipher.core.models import TransformKind


class DecipherError(Exception):
    """Base exception for all ytd-decipher errors.

    Every error condition surfaced to callers maps to a subclass of this
    exception so that callers can handle the whole family with a single
    ``except`` clause.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance for the caller."""


# --- Extraction / compilation ----------------------------------------------

class PatternNotFoundError(DecipherError):
    """Raised when no known anchor locates a transform in the player script.

    This usually means the platform changed its script layout; retrying
    with the same script will not help.
    """

    def __init__(
        self,
        kind: TransformKind,
        detail: str | None = None,
        *,
        hint: str | None = None,
    ) -> None:
        message = f"Could not locate the {kind.value} function in the player script"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(
            message,
            hint=hint or append_platform_change_hint("No known anchor matched."),
        )
        self.kind: TransformKind = kind


class UnknownOperationError(DecipherError):
    """Raised when a helper method matches none of the known operation shapes."""

    def __init__(self, method_name: str, *, hint: str | None = None) -> None:
        super().__init__(
            f"Helper method {method_name!r} matches no known operation shape",
            hint=hint or append_platform_change_hint(
                "The helper object contains an unsupported operation.",
            ),
        )
        self.method_name: str = method_name


class CompileError(DecipherError):
    """Raised when a located function has an unsupported call shape."""

    def __init__(self, reason: str, *, hint: str | None = None) -> None:
        super().__init__(f"Compilation failed: {reason}", hint=hint)
        self.reason: str = reason


class ReferenceMismatchError(CompileError):
    """Raised when a compiled program disagrees with the reference interpreter."""


# --- Execution ---------------------------------------------------------------

class InterpretationError(DecipherError):
    """Raised when a program produces output of an unexpected length."""


class PerStreamResolutionError(DecipherError):
    """Failure to decipher or rewrite the URL of one specific stream."""

    def __init__(self, itag: int, cause: Exception | str) -> None:
        super().__init__(f"Stream itag={itag} could not be resolved: {cause}")
        self.itag: int = itag
        self.cause: Exception | str = cause


# --- Player identity -----------------------------------------------------------

class InvalidPlayerURLError(DecipherError):
    """Raised when a player script URL does not carry a release id."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(DecipherError):
    """Raised when a required runtime dependency is not available."""


def append_platform_change_hint(hint: str) -> str:
    """Append player-layout-change guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "The player script layout has likely changed."
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    Fetch the current player release and compile it again.",
        )
    )
