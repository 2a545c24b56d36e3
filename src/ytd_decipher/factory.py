"""Service construction from settings.

The core never imports infrastructure; this module is where the two are
wired together, importing the yt-dlp adapter only when verification is
requested.
"""

from __future__ import annotations

from ytd_decipher.config import ResolverSettings
from ytd_decipher.config import settings as default_settings
from ytd_decipher.core.decipher_service import DecipherService
from ytd_decipher.core.protocols import ProgramVerifier


def create_service(settings: ResolverSettings | None = None) -> DecipherService:
    """Build a :class:`DecipherService` configured by *settings*.

    Without *settings* the process-wide environment settings are used.

    With ``verify_with_reference`` enabled every new compilation is checked
    by :class:`~ytd_decipher.infra.ytdlp_verifier.YtDlpReferenceVerifier`;
    a missing yt-dlp then surfaces as
    :class:`~ytd_decipher.exceptions.EnvironmentError` on first compile.
    """
    settings = settings or default_settings

    verifier: ProgramVerifier | None = None
    if settings.verify_with_reference:
        from ytd_decipher.infra.ytdlp_verifier import YtDlpReferenceVerifier

        verifier = YtDlpReferenceVerifier(settings.reference_sample)

    return DecipherService(settings=settings, verifier=verifier)
