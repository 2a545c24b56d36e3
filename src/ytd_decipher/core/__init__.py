"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``infra``.
* All functions must be fully typed and deterministic.
"""

from ytd_decipher.core.cache import AlgorithmCache
from ytd_decipher.core.compiler import compile_player_script, compile_program
from ytd_decipher.core.decipher_service import DecipherService
from ytd_decipher.core.extractor import extract_transforms
from ytd_decipher.core.helper_resolver import resolve_helpers
from ytd_decipher.core.interpreter import run_program
from ytd_decipher.core.manifest_resolver import ManifestResolver
from ytd_decipher.core.models import (
    CipherPayload,
    CompiledEntry,
    PlayerScript,
    Program,
    ResolutionReport,
    ResolvedStream,
    Reverse,
    Slice,
    Splice,
    StreamDescriptor,
    StreamResolution,
    Swap,
    TransformKind,
)
from ytd_decipher.core.protocols import AlgorithmStore, ProgramVerifier, ShapeMatcher

__all__: list[str] = [
    "AlgorithmCache",
    "AlgorithmStore",
    "CipherPayload",
    "CompiledEntry",
    "DecipherService",
    "ManifestResolver",
    "PlayerScript",
    "Program",
    "ProgramVerifier",
    "ResolutionReport",
    "ResolvedStream",
    "Reverse",
    "ShapeMatcher",
    "Slice",
    "Splice",
    "StreamDescriptor",
    "StreamResolution",
    "Swap",
    "TransformKind",
    "compile_player_script",
    "compile_program",
    "extract_transforms",
    "resolve_helpers",
    "run_program",
]
