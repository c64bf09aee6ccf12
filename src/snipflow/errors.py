"""Exceptions raised by snipflow."""


class SnipflowError(Exception):
    """Base class for snipflow errors."""


class SnippetLoadError(SnipflowError):
    """A snippet definition file could not be read or validated."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedModeError(SnipflowError):
    """Selection capture was requested outside a visual mode."""

    def __init__(self, mode: str):
        super().__init__(f"selection mode not supported: {mode!r}")
        self.mode = mode
