from typing import Iterable, Iterator, List, Set

from .action import FunscriptAction


class ActionSelection:
    """
    The actions currently selected for bulk editing.

    Holds copies of actions, compared by exact ``(at, pos)``. Order is only
    guaranteed after ``sort()``.
    """

    def __init__(self, actions: Iterable[FunscriptAction] = ()):
        self._actions: List[FunscriptAction] = list(actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[FunscriptAction]:
        return iter(self._actions)

    def __contains__(self, action: FunscriptAction) -> bool:
        return action in self._actions

    def __getitem__(self, index: int) -> FunscriptAction:
        return self._actions[index]

    def to_list(self) -> List[FunscriptAction]:
        return list(self._actions)

    def assign(self, actions: Iterable[FunscriptAction]):
        self._actions = list(actions)

    def add(self, action: FunscriptAction):
        self._actions.append(action)

    def discard(self, action: FunscriptAction) -> bool:
        try:
            self._actions.remove(action)
        except ValueError:
            return False
        return True

    def toggle(self, action: FunscriptAction) -> bool:
        """Adds ``action`` if absent, removes it if present. Returns the new membership."""
        if self.discard(action):
            return False
        self._actions.append(action)
        return True

    def set_selected(self, action: FunscriptAction, selected: bool):
        is_selected = action in self._actions
        if is_selected and not selected:
            self._actions.remove(action)
        elif not is_selected and selected:
            self._actions.append(action)

    def clear(self):
        self._actions.clear()

    def sort(self):
        self._actions.sort()

    def retain(self, keep: Set[FunscriptAction]) -> int:
        """Drops every entry not in ``keep``. Returns how many were dropped."""
        before = len(self._actions)
        self._actions = [action for action in self._actions if action in keep]
        return before - len(self._actions)


def _triplet_windows(actions: List[FunscriptAction]):
    for i in range(1, len(actions) - 1):
        yield actions[i - 1], actions[i], actions[i + 1]


def top_points(actions: List[FunscriptAction]) -> List[FunscriptAction]:
    """
    Keeps the local maxima of a time-ordered run of at least three actions.

    Every window of three neighbours drops its two lower points, so only
    points that win each window they take part in survive.
    """
    if len(actions) < 3:
        return list(actions)
    deselect = []
    for prev, current, nxt in _triplet_windows(actions):
        min1 = prev if prev.pos < current.pos else current
        min2 = min1 if min1.pos < nxt.pos else nxt
        deselect.append(min1)
        if min1.at != min2.at:
            deselect.append(min2)
    dropped = set(deselect)
    return [action for action in actions if action not in dropped]


def bottom_points(actions: List[FunscriptAction]) -> List[FunscriptAction]:
    """Mirror of ``top_points``: keeps the local minima."""
    if len(actions) < 3:
        return list(actions)
    deselect = []
    for prev, current, nxt in _triplet_windows(actions):
        max1 = prev if prev.pos > current.pos else current
        max2 = max1 if max1.pos > nxt.pos else nxt
        deselect.append(max1)
        if max1.at != max2.at:
            deselect.append(max2)
    dropped = set(deselect)
    return [action for action in actions if action not in dropped]


def mid_points(actions: List[FunscriptAction]) -> List[FunscriptAction]:
    """Points that are neither kept by ``top_points`` nor by ``bottom_points``, time ordered."""
    if len(actions) < 3:
        return list(actions)
    extremes = set(top_points(actions)) | set(bottom_points(actions))
    return sorted(action for action in actions if action not in extremes)
