"""Core decipher service — orchestrates compilation, caching and resolution.

This is the central service class consumed by callers.  It owns an
:class:`~ytd_decipher.core.protocols.AlgorithmStore` and optionally a
:class:`~ytd_decipher.core.protocols.ProgramVerifier`, both injected at
construction time (dependency inversion), keeping the core free of any
external-system imports.

Guarantees
----------
* Pure orchestration — no I/O, no ``print()``, no filesystem access.
* Only :class:`~ytd_decipher.exceptions.DecipherError` subclasses escape.
* Compilation failures propagate; per-stream failures are reported.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ytd_decipher.config import ResolverSettings
from ytd_decipher.core.cache import AlgorithmCache
from ytd_decipher.core.compiler import compile_player_script
from ytd_decipher.core.interpreter import run_program
from ytd_decipher.core.manifest_resolver import (
    ManifestResolver,
    formats_from_player_response,
    parse_format_entries,
)
from ytd_decipher.core.models import CompiledEntry, PlayerScript, ResolutionReport
from ytd_decipher.core.protocols import AlgorithmStore, ProgramVerifier
from ytd_decipher.exceptions import CompileError, DecipherError


class DecipherService:
    """Service resolving signatures, n values and whole manifests.

    Parameters
    ----------
    cache:
        Any object satisfying :class:`AlgorithmStore`.  When omitted, a
        private :class:`AlgorithmCache` running this service's compile
        pipeline (including verification) is created.  A supplied cache
        uses its own compiler.
    settings:
        Parameter names and verification sample.
    verifier:
        Optional :class:`ProgramVerifier` applied to every new compilation
        before it is cached.
    """

    def __init__(
        self,
        cache: AlgorithmStore | None = None,
        *,
        settings: ResolverSettings | None = None,
        verifier: ProgramVerifier | None = None,
    ) -> None:
        self._settings: ResolverSettings = settings or ResolverSettings()
        self._verifier: ProgramVerifier | None = verifier
        self._cache: AlgorithmStore = (
            cache if cache is not None else AlgorithmCache(self._compile)
        )
        self._resolver = ManifestResolver(self._settings)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self, script: PlayerScript) -> CompiledEntry:
        """Return the compiled programs for *script*, compiling once per identity.

        Raises
        ------
        PatternNotFoundError
            If a transform cannot be located.
        UnknownOperationError
            If a helper method has an unknown shape.
        CompileError
            If a transform has an unsupported call shape, or verification
            fails.
        """
        return self._cache.get_or_compile(script.identity, script.text)

    def decipher_signature(self, signature: str, script: PlayerScript) -> str:
        """Run the signature cipher of *script* on *signature*."""
        return run_program(self.compile(script).cipher_program, signature)

    def transform_n(self, value: str, script: PlayerScript) -> str:
        """Run the n-parameter transform of *script* on *value*."""
        return run_program(self.compile(script).n_program, value)

    def resolve_streams(
        self,
        raw_formats: Iterable[Mapping[str, Any]],
        script: PlayerScript,
    ) -> ResolutionReport:
        """Resolve raw per-format entries against *script*.

        Raises
        ------
        PatternNotFoundError, UnknownOperationError, CompileError
            If *script* cannot be compiled.  Per-stream failures are part
            of the returned report instead.
        """
        entry = self.compile(script)
        descriptors = parse_format_entries(raw_formats, self._settings)
        return self._resolver.resolve(descriptors, entry)

    def resolve_player_response(
        self,
        document: Mapping[str, Any],
        script: PlayerScript,
    ) -> ResolutionReport:
        """Resolve every format listed in a player-response document."""
        return self.resolve_streams(formats_from_player_response(document), script)

    # ------------------------------------------------------------------
    # Compile pipeline (safe boundary)
    # ------------------------------------------------------------------

    def _compile(self, script: PlayerScript) -> CompiledEntry:
        """Compile and verify, ensuring only our exceptions escape."""
        try:
            entry = compile_player_script(script)
            if self._verifier is not None:
                self._verifier.verify(script, entry)
        except DecipherError:
            # Already one of ours; propagate unchanged.
            raise
        except Exception as exc:
            raise CompileError(f"unexpected compilation error: {exc}") from exc
        return entry
