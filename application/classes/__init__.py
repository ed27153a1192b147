"""
Classes package initialization.
"""

from .undo_redo_manager import ScriptUndoManager
