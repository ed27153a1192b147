"""
Base plugin interface for selection transformations.

A selection transform rewrites the actions currently selected in a script
(stretching, equalizing, inverting, snapping to a frame grid, ...). Each one
is a plugin registered by name so the host can list and apply them uniformly.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
import logging


class SelectionTransformPlugin(ABC):
    """
    Abstract base class for all selection transformation plugins.

    Plugins receive the script, read its selection, and edit the script in place
    through its public mutation methods.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of this plugin."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a human-readable description of what this plugin does."""
        pass

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def min_selection(self) -> int:
        """Fewest selected actions the transform needs; below that it does nothing."""
        return 1

    @property
    @abstractmethod
    def parameters_schema(self) -> Dict[str, Any]:
        """
        Return the schema for parameters this plugin accepts.

        Schema format:
        {
            'parameter_name': {
                'type': int|float|...,
                'required': bool,
                'default': Any,
                'description': str,
                'constraints': Dict (optional - min/max values, choices, etc.)
            }
        }
        """
        pass

    def validate_parameters(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and normalize the provided parameters against the schema.

        Raises:
            ValueError: If parameters don't match the schema
        """
        schema = self.parameters_schema
        validated = {}

        unknown = set(parameters) - set(schema)
        if unknown:
            raise ValueError(f"Unknown parameter(s) for '{self.name}': {', '.join(sorted(unknown))}")

        for param_name, param_info in schema.items():
            if param_name not in parameters:
                if param_info.get('required', False):
                    raise ValueError(f"Required parameter '{param_name}' is missing")
                validated[param_name] = param_info.get('default')
                continue

            value = parameters[param_name]
            expected_type = param_info['type']
            if value is not None and not isinstance(value, expected_type):
                try:
                    value = expected_type(value)
                except (ValueError, TypeError):
                    raise ValueError(f"Parameter '{param_name}' must be of type {expected_type.__name__}")

            if value is not None and 'constraints' in param_info:
                constraints = param_info['constraints']
                if 'min' in constraints and value < constraints['min']:
                    raise ValueError(f"Parameter '{param_name}' must be >= {constraints['min']}")
                if 'max' in constraints and value > constraints['max']:
                    raise ValueError(f"Parameter '{param_name}' must be <= {constraints['max']}")
                if 'exclusive_min' in constraints and value <= constraints['exclusive_min']:
                    raise ValueError(f"Parameter '{param_name}' must be > {constraints['exclusive_min']}")

            validated[param_name] = value

        return validated

    @abstractmethod
    def transform(self, funscript, **parameters) -> None:
        """
        Apply the transformation to the script's selection, in place.

        Raises:
            ValueError: If parameters are invalid
        """
        pass


class PluginRegistry:
    """Registry for managing selection transformation plugins."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('PluginRegistry')
        self._plugins: Dict[str, SelectionTransformPlugin] = {}

    def register(self, plugin: SelectionTransformPlugin) -> bool:
        if plugin.name in self._plugins:
            self.logger.warning(f"Plugin '{plugin.name}' is already registered, replacing")
        self._plugins[plugin.name] = plugin
        self.logger.debug(f"Registered plugin '{plugin.name}' v{plugin.version}")
        return True

    def unregister(self, plugin_name: str) -> bool:
        if plugin_name in self._plugins:
            del self._plugins[plugin_name]
            self.logger.info(f"Unregistered plugin '{plugin_name}'")
            return True
        return False

    def get_plugin(self, plugin_name: str) -> Optional[SelectionTransformPlugin]:
        return self._plugins.get(plugin_name)

    def list_plugins(self) -> List[Dict[str, Any]]:
        return [
            {
                'name': plugin.name,
                'description': plugin.description,
                'version': plugin.version,
                'min_selection': plugin.min_selection,
                'parameters_schema': plugin.parameters_schema,
            }
            for plugin in self._plugins.values()
        ]

    def __contains__(self, plugin_name: str) -> bool:
        return plugin_name in self._plugins
