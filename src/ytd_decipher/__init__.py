"""ytd-decipher — signature cipher and n-parameter resolution for player scripts.

Compiles the obfuscated transforms of a player release into replayable
operation programs and rewrites stream descriptors into fetchable URLs.
"""

from ytd_decipher.version import __version__

__all__: list[str] = ["__version__"]
