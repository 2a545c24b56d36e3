"""Tests for runtime settings (config.py)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ytd_decipher.config import ResolverSettings


class TestResolverSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("DEFAULT_SIGNATURE_PARAM", "N_QUERY_PARAM", "VERIFY_WITH_REFERENCE"):
            monkeypatch.delenv(f"YTD_DECIPHER_{name}", raising=False)
        settings = ResolverSettings(_env_file=None)
        assert settings.default_signature_param == "signature"
        assert settings.n_query_param == "n"
        assert settings.verify_with_reference is False

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YTD_DECIPHER_N_QUERY_PARAM", "nn")
        monkeypatch.setenv("YTD_DECIPHER_VERIFY_WITH_REFERENCE", "1")
        settings = ResolverSettings(_env_file=None)
        assert settings.n_query_param == "nn"
        assert settings.verify_with_reference is True

    def test_keyword_override(self) -> None:
        assert ResolverSettings(default_signature_param="sig").default_signature_param == "sig"

    def test_frozen(self) -> None:
        settings = ResolverSettings()
        with pytest.raises(ValidationError):
            settings.n_query_param = "x"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [{"n_query_param": ""}, {"default_signature_param": ""}, {"reference_sample": "short"}],
    )
    def test_invalid_values_rejected(self, overrides: dict[str, str]) -> None:
        with pytest.raises(ValidationError):
            ResolverSettings(**overrides)
