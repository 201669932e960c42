"""Helpers for use inside pinefiles."""

from pinefile.plugins.shell import shell

__all__ = ["shell"]
