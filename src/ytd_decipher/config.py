"""Runtime configuration for ytd-decipher.

Values come from keyword arguments or ``YTD_DECIPHER_*`` environment
variables, e.g. ``YTD_DECIPHER_VERIFY_WITH_REFERENCE=1``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResolverSettings(BaseSettings):
    """Settings consumed by the manifest resolver and the decipher service."""

    model_config = SettingsConfigDict(
        env_prefix="YTD_DECIPHER_", env_file=".env", extra="ignore", frozen=True,
    )

    default_signature_param: str = Field(
        "signature",
        min_length=1,
        description="Query parameter receiving the deciphered signature when the payload has no 'sp'.",
    )
    n_query_param: str = Field(
        "n",
        min_length=1,
        description="Name of the throttling query parameter rewritten by the n-parameter program.",
    )
    verify_with_reference: bool = Field(
        False,
        description="Cross-check every new compilation against yt-dlp's JavaScript interpreter.",
    )
    reference_sample: str = Field(
        "AOq0QJ8wRAIgXmPlOPSBkkUs1bYFYlJCfe29xx8j7v1pDL0QwbdV96sCIEzpWqMGkFR20CFOg51Tp-7vj_EMu-m37KtXJ2OySqa0q",
        min_length=8,
        description="Input run through both the compiled programs and the reference interpreter.",
    )


settings = ResolverSettings()
