"""
Common exceptions and error handling.

Provides standardized exception types for the funscript engine.
"""


class FunscriptError(Exception):
    """Base exception for all funscript engine errors."""
    pass


class ScriptLoadError(FunscriptError):
    """A funscript document could not be read or did not match the expected layout."""
    pass


class ScriptSaveError(FunscriptError):
    """Writing an encoded funscript document to disk failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to write '{path}': {reason}")
        self.path = path
        self.reason = reason
