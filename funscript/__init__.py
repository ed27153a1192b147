"""
Funscript package initialization.
"""

from .action import FunscriptAction
from .funscript import Funscript, ScriptSnapshot
from .notifier import ChangeNotifier, ScriptEvent
from .raw_recording import RawRecording, FunscriptRawData
from .metadata import FunscriptMetadata
from .settings import ScriptSettings
from .document import FunscriptDocument, ScriptWriter
from .plugins import SelectionTransformPlugin, PluginRegistry, create_default_registry

__all__ = [
    'FunscriptAction',
    'Funscript',
    'ScriptSnapshot',
    'ChangeNotifier',
    'ScriptEvent',
    'RawRecording',
    'FunscriptRawData',
    'FunscriptMetadata',
    'ScriptSettings',
    'FunscriptDocument',
    'ScriptWriter',
    'SelectionTransformPlugin',
    'PluginRegistry',
    'create_default_registry',
]
