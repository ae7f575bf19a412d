"""Top-level package for the :mod:`flameup` backup utility.

The package exposes version metadata so the CLI and downstream tooling can
report the installed build.

Example:
    >>> from flameup import __version__
    >>> isinstance(__version__, str)
    True
"""

from importlib import metadata

try:
    __version__ = metadata.version("flameup")
except metadata.PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"

__all__ = ["__version__"]
