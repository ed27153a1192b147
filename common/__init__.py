"""
Common utilities shared across the funscript engine modules.

Provides the result type and exception hierarchy used by the core.
"""

__version__ = "0.3.0"

__all__ = [
    'Result',
    'FunscriptError',
    'ScriptLoadError',
    'ScriptSaveError',
]

from .exceptions import FunscriptError, ScriptLoadError, ScriptSaveError
from .result import Result
