"""
Selection transformation plugins.
"""

from .base_plugin import SelectionTransformPlugin, PluginRegistry
from .equalize_plugin import EqualizePlugin
from .frame_align_plugin import FrameAlignPlugin
from .invert_plugin import InvertPlugin
from .range_extend_plugin import RangeExtendPlugin

BUILTIN_PLUGINS = (RangeExtendPlugin, EqualizePlugin, InvertPlugin, FrameAlignPlugin)


def create_default_registry(logger=None) -> PluginRegistry:
    """A registry holding one instance of every built-in selection transform."""
    registry = PluginRegistry(logger=logger)
    for plugin_cls in BUILTIN_PLUGINS:
        registry.register(plugin_cls(logger=logger))
    return registry


__all__ = [
    'SelectionTransformPlugin',
    'PluginRegistry',
    'RangeExtendPlugin',
    'EqualizePlugin',
    'InvertPlugin',
    'FrameAlignPlugin',
    'BUILTIN_PLUGINS',
    'create_default_registry',
]
