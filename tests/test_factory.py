"""Tests for service construction (factory.py)."""

from __future__ import annotations

import sys
import types

import pytest
from conftest import reference_cipher, reference_n

from ytd_decipher.config import ResolverSettings
from ytd_decipher.core.decipher_service import DecipherService
from ytd_decipher.core.models import PlayerScript
from ytd_decipher.exceptions import ReferenceMismatchError
from ytd_decipher.factory import create_service


def _install_interpreter(monkeypatch: pytest.MonkeyPatch, n_function: object) -> None:
    functions = {"Zz": reference_cipher, "Nq": n_function}

    class FakeJSInterpreter:
        def __init__(self, code: str) -> None:
            self.code = code

        def call_function(self, name: str, *args: str) -> str:
            return functions[name](*args)  # type: ignore[operator]

    package = types.ModuleType("yt_dlp")
    jsinterp = types.ModuleType("yt_dlp.jsinterp")
    jsinterp.JSInterpreter = FakeJSInterpreter  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "yt_dlp", package)
    monkeypatch.setitem(sys.modules, "yt_dlp.jsinterp", jsinterp)


def test_default_service() -> None:
    assert isinstance(create_service(ResolverSettings()), DecipherService)


def test_verification_enabled_passes(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _install_interpreter(monkeypatch, reference_n)
    service = create_service(ResolverSettings(verify_with_reference=True))
    assert service.decipher_signature("abcdefgh", player_script) == "hgfeacb"


def test_verification_enabled_rejects_mismatch(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _install_interpreter(monkeypatch, lambda value: value[::-1])
    service = create_service(ResolverSettings(verify_with_reference=True))

    with pytest.raises(ReferenceMismatchError):
        service.compile(player_script)


def test_verification_disabled_skips_reference(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    _install_interpreter(monkeypatch, lambda value: value[::-1])
    service = create_service(ResolverSettings(verify_with_reference=False))
    assert service.transform_n("abcdefgh", player_script) == "fghedc"


def test_environment_settings_by_default(
    monkeypatch: pytest.MonkeyPatch, player_script: PlayerScript,
) -> None:
    monkeypatch.setitem(sys.modules, "yt_dlp", None)
    monkeypatch.setitem(sys.modules, "yt_dlp.jsinterp", None)
    service = create_service()
    assert service.decipher_signature("abcdefgh", player_script) == "hgfeacb"
