"""Player-script identity helpers.

A player release is identified either by the id embedded in its URL
(``/s/player/<id>/…/base.js``) or, when only the text is at hand, by a
content hash.  Both are opaque, comparable strings suitable as cache keys.
"""

from __future__ import annotations

import re

from ytd_decipher.core.models import PlayerScript
from ytd_decipher.exceptions import InvalidPlayerURLError

_PLAYER_ID_RE = re.compile(r"/s/player/(?P<id>[a-zA-Z0-9_-]{8,})/")
_SIGNATURE_TIMESTAMP_RE = re.compile(
    r"(?<![\w$])(?:signatureTimestamp|sts)\s*:\s*(?P<sts>\d+)"
)


def player_id_from_url(player_url: str) -> str:
    """Return the release id carried by *player_url*.

    Raises
    ------
    InvalidPlayerURLError
        When the URL does not follow the ``/s/player/<id>/`` layout.
    """
    match = _PLAYER_ID_RE.search(player_url)
    if match is None:
        raise InvalidPlayerURLError(
            f"Cannot identify player release from {player_url!r}",
            hint="Expected a URL like https://www.youtube.com/s/player/<id>/.../base.js",
        )
    return match.group("id")


def script_fingerprint(script_text: str) -> str:
    """SHA-256 hex digest of *script_text*."""
    return PlayerScript.from_text(script_text).identity


def make_player_script(
    script_text: str,
    *,
    identity: str | None = None,
    player_url: str | None = None,
) -> PlayerScript:
    """Build a :class:`PlayerScript`, deriving an identity when none is given.

    Precedence: explicit *identity*, then the id in *player_url*, then the
    content fingerprint.
    """
    if identity is None and player_url is not None:
        identity = player_id_from_url(player_url)
    return PlayerScript.from_text(script_text, identity)


def extract_signature_timestamp(script_text: str) -> int | None:
    """Return the ``signatureTimestamp`` the release advertises, if any."""
    match = _SIGNATURE_TIMESTAMP_RE.search(script_text)
    if match is None:
        return None
    return int(match.group("sts"))
