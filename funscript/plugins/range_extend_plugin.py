"""
Range extend plugin.

Treats the selection as a zig-zag of strokes and widens every stroke's
position range by a fixed amount, so peaks move up and valleys move down
while the points in between keep their relative place.
"""

from enum import Enum
from typing import Dict, Any, List

import numpy as np

from funscript.plugins.base_plugin import SelectionTransformPlugin


class StrokeDirection(Enum):
    NONE = 0
    UP = 1
    DOWN = 2


def find_stroke_bounds(positions: List[int]) -> List[int]:
    """
    Returns the indices of the stroke turning points, first and last index included.

    A turning point is the last action before the direction reverses. Runs of
    equal positions do not count as a reversal.
    """
    count = len(positions)
    if count == 0:
        return []
    bounds = [0]
    direction = StrokeDirection.NONE
    for index in range(1, count):
        previous, current = positions[index - 1], positions[index]
        if current == previous:
            continue
        step = StrokeDirection.UP if current > previous else StrokeDirection.DOWN
        if direction is not StrokeDirection.NONE and step is not direction:
            bounds.append(index - 1)
        direction = step
    if bounds[-1] != count - 1:
        bounds.append(count - 1)
    return bounds


def stretch_positions(positions: np.ndarray, lowest: int, highest: int, extension: int) -> np.ndarray:
    new_high = int(np.clip(highest + extension, 0, 100))
    new_low = int(np.clip(lowest - extension, 0, 100))
    relative = (positions - lowest) / float(highest - lowest)
    stretched = relative * (new_high - new_low) + new_low
    # Truncate toward zero, then clamp
    return np.clip(stretched.astype(np.int64), 0, 100)


def extend_range(positions: List[int], extension: int) -> List[int]:
    """
    Widens every stroke of ``positions`` by ``extension``.

    A stroke runs from one turning point to the next. Its points after the
    opening turning point, up to and including the closing one, are remapped
    from the stroke's original [lowest, highest] to
    [lowest - extension, highest + extension] clamped to [0, 100]. The first
    and the last point never move; the last point also does not count towards
    the bounds of the final stroke. Flat strokes are left alone.
    """
    original = np.asarray(positions, dtype=np.int64)
    result = original.copy()
    last = len(positions) - 1
    bounds = find_stroke_bounds(positions)
    for start, end in zip(bounds, bounds[1:]):
        stop = end if end == last else end + 1
        window = original[start:stop]
        lowest, highest = int(window.min()), int(window.max())
        if lowest == highest:
            continue
        result[start + 1:stop] = stretch_positions(original[start + 1:stop], lowest, highest, extension)
    return [int(p) for p in result]


class RangeExtendPlugin(SelectionTransformPlugin):

    @property
    def name(self) -> str:
        return "Range Extend"

    @property
    def description(self) -> str:
        return "Widens (or narrows, if negative) the position range of every selected stroke"

    @property
    def parameters_schema(self) -> Dict[str, Any]:
        return {
            'amount': {
                'type': int,
                'required': True,
                'description': 'Position units added above each peak and below each valley',
                'constraints': {'min': -100, 'max': 100}
            }
        }

    def transform(self, funscript, **parameters) -> None:
        params = self.validate_parameters(parameters)
        amount = params['amount']
        if amount == 0 or not funscript.has_selection():
            return

        # Indices are resolved right before the edit and not kept afterwards
        indices = funscript.resolve_selection_indices()
        funscript.clear_selection()
        if not indices:
            return

        positions = [funscript.actions[i].pos for i in indices]
        funscript.set_positions(indices, extend_range(positions, amount))

        self.logger.info(f"Extended range of {len(indices)} points by {amount}")
