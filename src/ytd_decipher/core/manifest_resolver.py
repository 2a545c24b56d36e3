"""Manifest resolver — turns per-format entries into fetchable stream URLs.

Pipeline per entry:

1. **Direct URL** — taken as is.
2. **Cipher payload** — the raw signature is run through the cipher
   program and written into the payload's signature parameter of the
   base URL.
3. **n parameter** — the descriptor's ``n_parameter_value`` (or, when that
   is unset, the value the URL carries) is run through the n-parameter
   program and written into the URL.

A failure in steps 2-3 is recorded against that entry's itag and the
remaining entries are still resolved.  An entry is never reported with a
half-rewritten URL.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ytd_decipher.config import ResolverSettings
from ytd_decipher.core.interpreter import run_program
from ytd_decipher.core.models import (
    CipherPayload,
    CompiledEntry,
    Program,
    ResolutionReport,
    ResolvedStream,
    StreamDescriptor,
    StreamResolution,
)
from ytd_decipher.exceptions import DecipherError, PerStreamResolutionError
from ytd_decipher.utils.urls import get_query_param, is_fetchable_url, set_query_param

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Raw-dict → domain-model parsers (pure)
# ---------------------------------------------------------------------------

def formats_from_player_response(document: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Collect muxed and adaptive format entries from a player response."""
    streaming_data = document.get("streamingData")
    if not isinstance(streaming_data, Mapping):
        return []

    entries: list[dict[str, Any]] = []
    for key in ("formats", "adaptiveFormats"):
        raw = streaming_data.get(key)
        if not isinstance(raw, list):
            continue
        # Skip malformed entries.
        entries.extend(entry for entry in raw if isinstance(entry, dict))
    return entries


def parse_cipher_payload(raw: str, default_param: str = "signature") -> CipherPayload:
    """Decode a ``signatureCipher`` query-string bundle (see :meth:`CipherPayload.from_query`)."""
    return CipherPayload.from_query(raw, default_param)


def _safe_int(value: object) -> int | None:
    """Convert *value* to ``int`` or return ``None``."""
    if value is None:
        return None
    try:
        if isinstance(value, (int, float, str, bytes, bytearray)):
            return int(value)
        return None
    except (TypeError, ValueError, OverflowError):
        return None


def _safe_query_param(url: str, name: str) -> str | None:
    try:
        return get_query_param(url, name)
    except ValueError:
        return None


def parse_format_entry(
    raw: Mapping[str, Any],
    settings: ResolverSettings | None = None,
) -> StreamDescriptor:
    """Convert one raw format dict to a :class:`StreamDescriptor`.

    Never raises on malformed fields: a non-numeric bitrate becomes
    ``None`` and a missing or non-numeric itag becomes ``0``, so one bad
    entry cannot stop the rest of the manifest from resolving.
    """
    settings = settings or ResolverSettings()

    itag = _safe_int(raw.get("itag"))
    if itag is None:
        logger.warning("Format entry without a usable itag: %r", raw.get("itag"))
        itag = 0

    direct_url = str(raw["url"]) if raw.get("url") else None
    cipher_raw = raw.get("signatureCipher") or raw.get("cipher")
    payload = (
        parse_cipher_payload(str(cipher_raw), settings.default_signature_param)
        if cipher_raw
        else None
    )

    source_url = direct_url or (payload.base_url if payload else "")
    n_value = _safe_query_param(source_url, settings.n_query_param) if source_url else None

    return StreamDescriptor(
        itag=itag,
        mime_type=str(raw.get("mimeType", "")),
        bitrate=_safe_int(raw.get("bitrate")),
        direct_url=direct_url,
        cipher_payload=payload,
        n_parameter_value=n_value,
    )


def parse_format_entries(
    raws: Iterable[Mapping[str, Any]],
    settings: ResolverSettings | None = None,
) -> list[StreamDescriptor]:
    """Convert a list of raw format dicts to descriptors."""
    return [parse_format_entry(raw, settings) for raw in raws]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

class ManifestResolver:
    """Stateless resolver applying a :class:`CompiledEntry` to descriptors.

    Parameters
    ----------
    settings:
        Parameter names; defaults to :class:`ResolverSettings` built from
        the environment.
    """

    def __init__(self, settings: ResolverSettings | None = None) -> None:
        self._settings: ResolverSettings = settings or ResolverSettings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        descriptors: Sequence[StreamDescriptor],
        entry: CompiledEntry,
    ) -> ResolutionReport:
        """Resolve every descriptor; failures are recorded, never raised."""
        results: list[StreamResolution] = []
        for descriptor in descriptors:
            try:
                stream = self.resolve_one(descriptor, entry)
            except PerStreamResolutionError as exc:
                logger.warning("%s", exc)
                results.append(StreamResolution(itag=descriptor.itag, error=exc))
                continue
            results.append(StreamResolution(itag=descriptor.itag, stream=stream))
        return ResolutionReport(results=tuple(results))

    def resolve_one(
        self,
        descriptor: StreamDescriptor,
        entry: CompiledEntry,
    ) -> ResolvedStream:
        """Resolve a single descriptor.

        Raises
        ------
        PerStreamResolutionError
            When the signature or n parameter cannot be rewritten.
        """
        try:
            url = self._base_url(descriptor, entry.cipher_program)
            url = self._rewrite_n(url, descriptor, entry.n_program)
        except PerStreamResolutionError:
            raise
        except (DecipherError, ValueError) as exc:
            raise PerStreamResolutionError(descriptor.itag, exc) from exc

        return ResolvedStream(
            itag=descriptor.itag,
            mime_type=descriptor.mime_type,
            bitrate=descriptor.bitrate,
            final_url=url,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _base_url(self, descriptor: StreamDescriptor, cipher_program: Program) -> str:
        if descriptor.direct_url:
            return descriptor.direct_url

        payload = descriptor.cipher_payload
        if payload is None:
            raise PerStreamResolutionError(
                descriptor.itag, "entry has neither a URL nor a cipher payload",
            )
        if not payload.signature:
            raise PerStreamResolutionError(
                descriptor.itag, "cipher payload carries no signature",
            )
        if not is_fetchable_url(payload.base_url):
            raise PerStreamResolutionError(
                descriptor.itag, f"malformed base URL {payload.base_url!r}",
            )

        signature = run_program(cipher_program, payload.signature)
        if not signature:
            raise PerStreamResolutionError(
                descriptor.itag, "deciphered signature is empty",
            )
        return set_query_param(payload.base_url, payload.signature_param, signature)

    def _rewrite_n(
        self, url: str, descriptor: StreamDescriptor, n_program: Program,
    ) -> str:
        name = self._settings.n_query_param
        value = descriptor.n_parameter_value
        if value is None:
            value = get_query_param(url, name)
        if value is None:
            return url
        return set_query_param(url, name, run_program(n_program, value))
