"""Algorithm cache — compiled programs keyed by player script identity.

The cache is the only shared mutable state in the core.  One lock
guards the mapping; a second, per-identity lock serialises compilation
so every identity is compiled at most once even when many requests see
a new player release at the same time.  The first stored entry is the
one every later lookup returns.

Retention is the caller's concern: entries stay until :meth:`evict` or
:meth:`clear` is called.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ytd_decipher.core.compiler import compile_player_script
from ytd_decipher.core.models import CompiledEntry, PlayerScript

logger = logging.getLogger(__name__)

Compiler = Callable[[PlayerScript], CompiledEntry]


class AlgorithmCache:
    """Thread-safe ``get_or_compile`` store satisfying
    :class:`~ytd_decipher.core.protocols.AlgorithmStore`.

    Parameters
    ----------
    compiler:
        Callable turning a :class:`PlayerScript` into a
        :class:`CompiledEntry`.  Defaults to the full extraction and
        compilation pipeline.
    """

    def __init__(self, compiler: Compiler = compile_player_script) -> None:
        self._compiler: Compiler = compiler
        self._entries: dict[str, CompiledEntry] = {}
        self._lock = threading.Lock()
        self._compile_locks: dict[str, threading.Lock] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_or_compile(self, script_identity: str, script_text: str) -> CompiledEntry:
        """Return the entry for *script_identity*, compiling on first use.

        Compilation errors propagate unchanged and nothing is stored, so a
        later call retries.
        """
        with self._lock:
            entry = self._entries.get(script_identity)
            if entry is not None:
                logger.debug("Algorithm cache hit for %s", script_identity)
                return entry
            compile_lock = self._compile_locks.setdefault(
                script_identity, threading.Lock()
            )

        with compile_lock:
            # Another thread may have finished while we waited.
            with self._lock:
                entry = self._entries.get(script_identity)
            if entry is not None:
                return entry

            logger.debug("Algorithm cache miss for %s; compiling", script_identity)
            try:
                compiled = self._compiler(
                    PlayerScript(identity=script_identity, text=script_text)
                )
                with self._lock:
                    entry = self._entries.setdefault(script_identity, compiled)
            finally:
                with self._lock:
                    if self._compile_locks.get(script_identity) is compile_lock:
                        del self._compile_locks[script_identity]
            return entry

    def get(self, script_identity: str) -> CompiledEntry | None:
        """Return the stored entry without compiling."""
        with self._lock:
            return self._entries.get(script_identity)

    def evict(self, script_identity: str) -> bool:
        """Drop the entry for *script_identity*; return whether one existed."""
        with self._lock:
            return self._entries.pop(script_identity, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, script_identity: object) -> bool:
        with self._lock:
            return script_identity in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
