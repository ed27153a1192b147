"""
Equalize plugin.

Spreads the selected actions evenly in time between the first and the last
selected action. Positions and both endpoints stay where they are.
"""

import math
from typing import Dict, Any

from funscript.action import FunscriptAction
from funscript.plugins.base_plugin import SelectionTransformPlugin


class EqualizePlugin(SelectionTransformPlugin):

    @property
    def name(self) -> str:
        return "Equalize"

    @property
    def description(self) -> str:
        return "Distributes selected actions at equal time intervals"

    @property
    def min_selection(self) -> int:
        return 3

    @property
    def parameters_schema(self) -> Dict[str, Any]:
        return {}

    def transform(self, funscript, **parameters) -> None:
        self.validate_parameters(parameters)
        selected = sorted(funscript.selection)
        if len(selected) < self.min_selection:
            self.logger.debug(f"Equalize needs at least {self.min_selection} selected points, got {len(selected)}")
            return

        first, last = selected[0], selected[-1]
        duration = last.at - first.at
        # Round half away from zero; duration is never negative here
        step_ms = int(math.floor(duration / (len(selected) - 1) + 0.5))

        equalized = [first]
        for i, action in enumerate(selected[1:-1], start=1):
            equalized.append(FunscriptAction(first.at + i * step_ms, action.pos))
        equalized.append(last)

        funscript.remove_selected_actions()
        for action in equalized:
            funscript.add_action(action)
        funscript.replace_selection(equalized)

        self.logger.info(f"Equalized {len(equalized)} points with a {step_ms}ms step")
