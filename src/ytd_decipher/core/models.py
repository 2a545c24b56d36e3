"""Domain models for ytd-decipher.

All models are **frozen** dataclasses — immutable value objects whose
only behaviour is derived data and alternate constructors.  They carry
zero I/O, zero dependencies on external packages, and must remain pure
across the entire lifecycle.
"""

from __future__ import annotations

import enum
import hashlib
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Union
from urllib.parse import parse_qs

if TYPE_CHECKING:
    from ytd_decipher.exceptions import PerStreamResolutionError


class TransformKind(enum.Enum):
    """The two obfuscated transforms shipped in every player release."""

    SIGNATURE_CIPHER = "signature cipher"
    N_PARAMETER = "n-parameter"


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def _require_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True, slots=True)
class Reverse:
    """Reverse the working sequence."""


@dataclass(frozen=True, slots=True)
class Splice:
    """Remove *count* characters starting at *start*."""

    count: int
    start: int = 0

    def __post_init__(self) -> None:
        _require_non_negative(count=self.count, start=self.start)


@dataclass(frozen=True, slots=True)
class Swap:
    """Exchange the element at ``index % len`` with the element at 0."""

    index: int

    def __post_init__(self) -> None:
        _require_non_negative(index=self.index)


@dataclass(frozen=True, slots=True)
class Slice:
    """Keep only the first *count* characters (n-parameter transform only)."""

    count: int

    def __post_init__(self) -> None:
        _require_non_negative(count=self.count)


Operation = Union[Reverse, Splice, Swap, Slice]


@dataclass(frozen=True, slots=True)
class Program:
    """Compiled, ordered operation sequence equivalent to one transform.

    The tuple guarantees immutability; a program is shared read-only by
    every caller once it leaves the compiler.
    """

    kind: TransformKind
    operations: tuple[Operation, ...]

    def __len__(self) -> int:
        return len(self.operations)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.operations)

    def output_length(self, input_length: int) -> int:
        """Length the program declares for an input of *input_length* characters.

        Every splice removes its full *count* and every slice caps the
        length; nothing is clamped.  A result that differs from the length
        actually produced means a step ran past the end of the input.
        """
        length = input_length
        for op in self.operations:
            if isinstance(op, Splice):
                length -= op.count
            elif isinstance(op, Slice):
                length = min(op.count, length)
        return length


# ---------------------------------------------------------------------------
# Player script and its extracted pieces
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlayerScript:
    """Raw player script text of one platform release."""

    identity: str
    """Opaque, comparable release identity (player id or content hash)."""

    text: str = ""
    """Full script source."""

    @classmethod
    def from_text(cls, text: str, identity: str | None = None) -> PlayerScript:
        """Build a script, using the SHA-256 of *text* when *identity* is omitted."""
        if identity is None:
            identity = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return cls(identity=identity, text=text)


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Half-open ``[start, end)`` offsets into the player script text."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class CompiledEntry:
    """Both compiled programs for one player script identity."""

    script_identity: str
    cipher_program: Program
    n_program: Program
    compiled_at: datetime

    cipher_function: str = ""
    """Name the signature cipher function carries in the script."""

    n_function: str = ""
    """Name the n-parameter function carries in the script."""

    signature_timestamp: int | None = None
    """``signatureTimestamp`` advertised by the release, when present."""


# ---------------------------------------------------------------------------
# Manifest side
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CipherPayload:
    """Decoded ``signatureCipher`` bundle of one format entry."""

    signature: str
    """Raw (still enciphered) signature, the ``s`` field."""

    signature_param: str
    """Query parameter the deciphered signature is written to (``sp``)."""

    base_url: str
    """Stream URL lacking its signature, the ``url`` field."""

    @classmethod
    def from_query(cls, raw: str, default_param: str = "signature") -> CipherPayload:
        """Decode a ``signatureCipher`` query-string bundle.

        Missing fields decode to empty strings; validation happens at
        resolution time so that the failure is attached to the stream.
        """
        fields = parse_qs(raw, keep_blank_values=True)

        def first(name: str) -> str:
            values = fields.get(name)
            return values[0] if values else ""

        return cls(
            signature=first("s"),
            signature_param=first("sp") or default_param,
            base_url=first("url"),
        )


@dataclass(frozen=True, slots=True)
class StreamDescriptor:
    """One per-format entry of a player-response manifest."""

    itag: int
    mime_type: str
    bitrate: int | None
    direct_url: str | None = None
    cipher_payload: CipherPayload | None = None
    n_parameter_value: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedStream:
    """A stream whose URL is ready to be fetched."""

    itag: int
    mime_type: str
    bitrate: int | None
    final_url: str


@dataclass(frozen=True, slots=True)
class StreamResolution:
    """Outcome for one descriptor: either a stream or the error that stopped it."""

    itag: int
    stream: ResolvedStream | None = None
    error: PerStreamResolutionError | None = None

    @property
    def ok(self) -> bool:
        return self.stream is not None


@dataclass(frozen=True, slots=True)
class ResolutionReport:
    """Immutable, ordered outcomes of resolving one manifest.

    Failed entries stay in place next to the successful ones; nothing is
    dropped or substituted.
    """

    results: tuple[StreamResolution, ...]

    @property
    def streams(self) -> tuple[ResolvedStream, ...]:
        return tuple(r.stream for r in self.results if r.stream is not None)

    @property
    def failures(self) -> tuple[PerStreamResolutionError, ...]:
        return tuple(r.error for r in self.results if r.error is not None)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[StreamResolution]:
        return iter(self.results)

    def __bool__(self) -> bool:
        return len(self.results) > 0
