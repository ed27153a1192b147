"""
Selection inversion plugin.

Mirrors the position of every selected action around the midline
(0 becomes 100, 30 becomes 70) while keeping its time.
"""

from typing import Dict, Any

import numpy as np

from funscript.action import FunscriptAction
from funscript.plugins.base_plugin import SelectionTransformPlugin


class InvertPlugin(SelectionTransformPlugin):

    @property
    def name(self) -> str:
        return "Invert"

    @property
    def description(self) -> str:
        return "Inverts selected positions (0↔100, preserving timing)"

    @property
    def parameters_schema(self) -> Dict[str, Any]:
        return {}

    def transform(self, funscript, **parameters) -> None:
        self.validate_parameters(parameters)
        selected = funscript.selection
        if not selected:
            self.logger.debug("Nothing selected, no inversion applied")
            return

        positions = np.array([action.pos for action in selected], dtype=np.int32)
        inverted_positions = np.abs(positions - 100)
        inverted = [FunscriptAction(action.at, int(pos)) for action, pos in zip(selected, inverted_positions)]

        # Remove and re-add so the edit goes through the regular insertion path
        funscript.remove_selected_actions()
        for action in inverted:
            funscript.add_action(action)
        funscript.replace_selection(inverted)

        self.logger.info(f"Inverted {len(inverted)} selected points")
