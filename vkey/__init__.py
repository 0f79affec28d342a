"""VKey: Vietnamese keystroke composition engine and Linux input daemon."""

from vkey.__version__ import __version__

__all__ = ["__version__"]
