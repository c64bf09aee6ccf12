"""Textual application hosting the snippet commands."""

from .app import SnipflowApp

__all__ = ["SnipflowApp"]
