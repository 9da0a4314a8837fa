"""Snippet Runner - snippet script parser and dispatcher."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("snippet-runner")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
