"""
Frame grid alignment plugin.

Snaps every selected action down onto the video frame grid so that each
action lands exactly on a frame boundary.
"""

import math
from typing import Dict, Any

from funscript.action import FunscriptAction
from funscript.plugins.base_plugin import SelectionTransformPlugin


class FrameAlignPlugin(SelectionTransformPlugin):

    @property
    def name(self) -> str:
        return "Align To Frame Grid"

    @property
    def description(self) -> str:
        return "Moves selected actions back to the nearest earlier frame boundary"

    @property
    def parameters_schema(self) -> Dict[str, Any]:
        return {
            'frame_time_ms': {
                'type': float,
                'required': True,
                'description': 'Duration of one video frame in milliseconds',
                'constraints': {'exclusive_min': 0.0}
            }
        }

    def transform(self, funscript, **parameters) -> None:
        params = self.validate_parameters(parameters)
        frame_time_ms = params['frame_time_ms']

        selected = funscript.selection
        if not selected:
            return

        aligned = [
            FunscriptAction(action.at - int(math.fmod(action.at, frame_time_ms)), action.pos)
            for action in selected
        ]

        funscript.remove_selected_actions()
        for action in aligned:
            funscript.add_action(action)
        funscript.replace_selection(aligned)

        moved = sum(1 for before, after in zip(selected, aligned) if before.at != after.at)
        self.logger.info(f"Aligned {len(aligned)} points to a {frame_time_ms:.3f}ms frame grid ({moved} moved)")
