"""Infrastructure layer — external system integration.

This layer wraps all interaction with yt-dlp.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~ytd_decipher.exceptions.DecipherError` subclass.

Rules
-----
* No user-facing output.
* Must expose clean, typed interfaces consumed by the core layer.
"""

from ytd_decipher.infra.ytdlp_verifier import YtDlpReferenceVerifier

__all__: list[str] = [
    "YtDlpReferenceVerifier",
]
