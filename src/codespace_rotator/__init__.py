"""Codespace Rotator - keep two codespaces alive across a pool of GitHub accounts."""

from ._version import __version__


__all__ = ["__version__"]
