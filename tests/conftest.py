"""Shared pytest fixtures and configuration for the ytd-decipher test suite.

Guidelines
----------
* No internet access in any test.
* yt-dlp must be mocked at the infra boundary.
* Core tests must be pure — no side effects.
* Player scripts are small synthetic releases shaped like the real ones.
"""

from __future__ import annotations

import pytest

from ytd_decipher.core.models import PlayerScript

HELPER_OBJECT = (
    "var Xy={Ab:function(a){a.reverse()},\n"
    "cd:function(a,b){a.splice(0,b)},\n"
    "ef:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c},\n"
    "tr:function(a,b){a.length=b}};"
)

CIPHER_FUNCTION = (
    'Zz=function(a){a=a.split("");Xy.ef(a,3);Xy.cd(a,1);Xy.Ab(a,42);'
    'return a.join("")};'
)

N_FUNCTION = (
    'Nq=function(a){var b=a.split("");Xy.Ab(b,0);Xy.ef(b,2);Xy.tr(b,6);'
    'return b.join("")};'
)

PLAYER_JS = (
    "var _yt_player={};(function(g){var window=this;"
    + HELPER_OBJECT
    + CIPHER_FUNCTION
    + N_FUNCTION
    + "var Yq=[Nq];"
    + "g.Rb=function(a,b,c,d){c&&d.set(b,encodeURIComponent(Zz(decodeURIComponent(c))))};"
    + 'g.Sb=function(a){var b;(b=a.get("n"))&&(b=Yq[0](b),a.set("n",b))};'
    + "var Vz={signatureTimestamp:19834};"
    + "})(_yt_player);"
)


def reference_cipher(value: str) -> str:
    """Hand-written equivalent of ``Zz`` in :data:`PLAYER_JS`."""
    chars = list(value)
    index = 3 % len(chars)
    chars[0], chars[index] = chars[index], chars[0]
    del chars[0:1]
    return "".join(reversed(chars))


def reference_n(value: str) -> str:
    """Hand-written equivalent of ``Nq`` in :data:`PLAYER_JS`."""
    chars = list(reversed(value))
    index = 2 % len(chars)
    chars[0], chars[index] = chars[index], chars[0]
    return "".join(chars[:6])


@pytest.fixture()
def player_js() -> str:
    return PLAYER_JS


@pytest.fixture()
def player_script() -> PlayerScript:
    return PlayerScript(identity="8f3c1a2b", text=PLAYER_JS)
