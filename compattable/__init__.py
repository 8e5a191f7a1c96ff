"""Browser compatibility tables for caniuse.com features."""

from ._version import __version__

__all__ = ["__version__"]
