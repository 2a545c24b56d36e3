"""yt-dlp backed implementation of :class:`~ytd_decipher.core.protocols.ProgramVerifier`.

This module is the **only** place in the codebase that imports ``yt_dlp``.
The located transform functions are executed by yt-dlp's JavaScript
interpreter and compared with the compiled programs on a sample input.
All yt-dlp exceptions are caught here and re-raised as
:class:`~ytd_decipher.exceptions.ReferenceMismatchError` — nothing raw
escapes the infrastructure boundary.
"""

from __future__ import annotations

import logging
from typing import Any

from ytd_decipher.config import ResolverSettings
from ytd_decipher.core.interpreter import run_program
from ytd_decipher.core.models import CompiledEntry, PlayerScript, Program
from ytd_decipher.exceptions import EnvironmentError, ReferenceMismatchError

logger = logging.getLogger(__name__)


class YtDlpReferenceVerifier:
    """Concrete :class:`ProgramVerifier` backed by ``yt_dlp.jsinterp``.

    Usage::

        verifier = YtDlpReferenceVerifier()
        verifier.verify(script, entry)

    Parameters
    ----------
    sample:
        Input fed to both sides.  Defaults to
        :attr:`ResolverSettings.reference_sample`.
    """

    def __init__(self, sample: str | None = None) -> None:
        self._sample: str = sample or ResolverSettings().reference_sample

    @staticmethod
    def _load_interpreter_class() -> type[Any]:
        """Return ``yt_dlp.jsinterp.JSInterpreter`` or raise ``EnvironmentError``."""
        try:
            from yt_dlp.jsinterp import JSInterpreter
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc
        return JSInterpreter

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def verify(self, script: PlayerScript, entry: CompiledEntry) -> None:
        """Compare both programs of *entry* with the functions in *script*.

        Raises
        ------
        ReferenceMismatchError
            When an output differs or the reference run fails.
        EnvironmentError
            When yt-dlp is not installed.
        """
        interpreter_class = self._load_interpreter_class()
        try:
            interpreter = interpreter_class(script.text)
        except Exception as exc:
            raise ReferenceMismatchError(
                f"yt-dlp could not load player {script.identity}: {exc}",
            ) from exc

        self._check(interpreter, entry.cipher_function, entry.cipher_program)
        self._check(interpreter, entry.n_function, entry.n_program)
        logger.debug("Player %s verified against yt-dlp", script.identity)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _check(self, interpreter: Any, function_name: str, program: Program) -> None:
        if not function_name:
            raise ReferenceMismatchError(
                f"{program.kind.value} entry does not record its function name",
            )

        try:
            expected = interpreter.call_function(function_name, self._sample)
        except Exception as exc:
            raise ReferenceMismatchError(
                f"yt-dlp failed to run {function_name!r}: {exc}",
            ) from exc

        actual = run_program(program, self._sample)
        if str(expected) != actual:
            raise ReferenceMismatchError(
                f"{program.kind.value} program disagrees with {function_name!r}: "
                f"expected {expected!r}, got {actual!r}",
            )
