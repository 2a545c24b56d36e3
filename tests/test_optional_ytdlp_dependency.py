"""Regression tests for the optional yt-dlp dependency boundary.

These tests ensure the compile and resolve paths work when yt-dlp is
absent, while reference verification fails cleanly with a typed
environment error.
"""

from __future__ import annotations

import sys

import pytest

from ytd_decipher.config import ResolverSettings
from ytd_decipher.core.decipher_service import DecipherService
from ytd_decipher.core.models import PlayerScript
from ytd_decipher.exceptions import EnvironmentError
from ytd_decipher.factory import create_service
from ytd_decipher.infra.ytdlp_verifier import YtDlpReferenceVerifier


def _remove_ytdlp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "yt_dlp", None)
    monkeypatch.setitem(sys.modules, "yt_dlp.jsinterp", None)


def test_service_works_without_ytdlp(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _remove_ytdlp(monkeypatch)
    assert DecipherService().decipher_signature("abcdefgh", player_script) == "hgfeacb"


def test_factory_without_verification_works_without_ytdlp(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _remove_ytdlp(monkeypatch)
    service = create_service(ResolverSettings(verify_with_reference=False))
    assert service.transform_n("abcdefgh", player_script) == "fghedc"


def test_verifier_construction_does_not_need_ytdlp(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _remove_ytdlp(monkeypatch)
    YtDlpReferenceVerifier()


def test_verification_raises_environment_error_without_ytdlp(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _remove_ytdlp(monkeypatch)
    service = create_service(ResolverSettings(verify_with_reference=True))

    with pytest.raises(EnvironmentError, match="yt-dlp is not installed"):
        service.compile(player_script)
