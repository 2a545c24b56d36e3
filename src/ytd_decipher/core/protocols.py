"""Protocols (interfaces) consumed by the core layer.

These define the contracts that pluggable pieces and infrastructure
adapters must satisfy.  Core code depends ONLY on these protocols —
never on concrete infrastructure — preserving the dependency inversion
principle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ytd_decipher.core.helper_resolver import HelperShape
    from ytd_decipher.core.models import CompiledEntry, PlayerScript


class ShapeMatcher(Protocol):
    """Structural predicate classifying one normalised helper body.

    Matchers are tried in a fixed priority list; the first one returning
    a shape wins.  They never look at method names.
    """

    def match(self, normalized_body: str) -> HelperShape | None:
        """Return the operation shape of *normalized_body*, or ``None``."""
        ...  # pragma: no cover


class ProgramVerifier(Protocol):
    """Contract for cross-checking freshly compiled programs.

    Implementations run the original script functions through an
    independent interpreter and compare the outputs with the compiled
    programs.
    """

    def verify(self, script: PlayerScript, entry: CompiledEntry) -> None:
        """Return silently when *entry* agrees with *script*.

        Raises
        ------
        ReferenceMismatchError
            When the outputs disagree or the reference run fails.
        EnvironmentError
            When the reference backend is not installed.
        """
        ...  # pragma: no cover


class AlgorithmStore(Protocol):
    """Capability to obtain compiled programs for a player script identity."""

    def get_or_compile(self, script_identity: str, script_text: str) -> CompiledEntry:
        """Return the entry for *script_identity*, compiling it on first use.

        Raises
        ------
        PatternNotFoundError, UnknownOperationError, CompileError
            When the script cannot be compiled.  Nothing is stored.
        """
        ...  # pragma: no cover
