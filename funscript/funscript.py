import bisect
import logging
import os
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional, Callable, List, Tuple, Dict, Any, Iterable

from common.exceptions import ScriptLoadError
from common.result import Result
from config import constants
from .action import FunscriptAction, clamp_position
from .document import (ScriptWriter, build_document, decode_document, encode_document,
                       parse_document, read_file_bytes)
from .metadata import FunscriptMetadata
from .notifier import ChangeNotifier, ScriptEvent
from .plugins import PluginRegistry, create_default_registry
from .raw_recording import FunscriptRawData
from .selection import ActionSelection, top_points, bottom_points, mid_points
from .settings import ScriptSettings


@dataclass(frozen=True)
class ScriptSnapshot:
    actions: Tuple[FunscriptAction, ...]
    selection: Tuple[FunscriptAction, ...]


class Funscript:
    """
    An editable funscript: a time-ordered list of actions plus a selection.

    All edits happen on the caller's thread. Edits only set dirty flags; the
    host calls ``update()`` periodically to re-sort the actions and deliver the
    resulting change events. Saving encodes a snapshot on the caller's thread
    and writes it in the background.
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 frame_time_provider: Optional[Callable[[], float]] = None,
                 writer: Optional[ScriptWriter] = None,
                 plugin_registry: Optional[PluginRegistry] = None):
        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger('Funscript_fallback')
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())

        self._actions: List[FunscriptAction] = []
        self._unsorted: bool = False
        self._selection = ActionSelection()

        self.notifier = ChangeNotifier(logger=self.logger)
        self.raw_data = FunscriptRawData(logger=self.logger)
        self.metadata = FunscriptMetadata()
        self.settings = ScriptSettings(logger=self.logger)
        self.extra_fields: Dict[str, Any] = {}

        self.current_path: Optional[str] = None
        self.script_opened: bool = False

        self.frame_time_provider = frame_time_provider or (lambda: constants.DEFAULT_FRAME_TIME_MS)
        self.writer = writer or ScriptWriter(logger=self.logger)
        self.plugins = plugin_registry or create_default_registry(logger=self.logger)

        self.notifier.notify_actions_changed()

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[ScriptEvent], None]) -> Callable[[], None]:
        return self.notifier.subscribe(callback)

    def update(self) -> List[ScriptEvent]:
        """
        Pumps pending change flags.

        Sorts the actions if they changed, then delivers at most one event of
        each kind to subscribers. Returns the delivered events.
        """
        if self.notifier.actions_changed:
            self._sort_actions()
        return self.notifier.pump()

    def _sort_actions(self):
        if self._unsorted:
            self._actions.sort()
            self._unsorted = False

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def actions(self) -> List[FunscriptAction]:
        return self._actions

    def __len__(self) -> int:
        return len(self._actions)

    def _find_index_by_time(self, at: int) -> Optional[int]:
        if self._unsorted:
            for i, action in enumerate(self._actions):
                if action.at == at:
                    return i
            return None
        idx = bisect.bisect_left(self._actions, FunscriptAction(at, 0))
        if idx < len(self._actions) and self._actions[idx].at == at:
            return idx
        return None

    def _index_of(self, action: FunscriptAction) -> Optional[int]:
        idx = self._find_index_by_time(action.at)
        if idx is not None and self._actions[idx] == action:
            return idx
        return None

    def get_action(self, action: FunscriptAction) -> Optional[FunscriptAction]:
        idx = self._index_of(action)
        return self._actions[idx] if idx is not None else None

    def _get_action_index_at_time(self, time_ms: int, max_error_ms: float) -> Optional[int]:
        # Relies on ascending order to stop early.
        self._sort_actions()
        smallest_error = None
        smallest_error_idx = None
        for i, action in enumerate(self._actions):
            if action.at > time_ms + max_error_ms / 2:
                break
            error = abs(time_ms - action.at)
            if error <= max_error_ms:
                if smallest_error is None or error < smallest_error:
                    smallest_error = error
                    smallest_error_idx = i
                elif error > smallest_error:
                    break
        return smallest_error_idx

    def get_action_at_time(self, time_ms: int, max_error_ms: float) -> Optional[FunscriptAction]:
        """
        Returns the action closest to ``time_ms`` within ``max_error_ms``.

        On a tie the earlier action wins.
        """
        idx = self._get_action_index_at_time(time_ms, max_error_ms)
        return self._actions[idx] if idx is not None else None

    def get_next_action_ahead(self, time_ms: int) -> Optional[FunscriptAction]:
        self._sort_actions()
        return next((action for action in self._actions if action.at > time_ms), None)

    def get_previous_action_behind(self, time_ms: int) -> Optional[FunscriptAction]:
        self._sort_actions()
        return next((action for action in reversed(self._actions) if action.at < time_ms), None)

    def get_actions_in_range(self, start_time_ms: int, end_time_ms: int) -> List[FunscriptAction]:
        """All actions with ``start_time_ms <= at <= end_time_ms``."""
        self._sort_actions()
        s_idx = bisect.bisect_left(self._actions, FunscriptAction(start_time_ms, 0))
        e_idx = bisect.bisect_right(self._actions, FunscriptAction(end_time_ms, 0))
        return self._actions[s_idx:e_idx]

    def get_position_at_time(self, time_ms: int) -> float:
        """
        Linearly interpolated position at ``time_ms``.

        An exact hit returns the stored position. Past the last action, and
        before the first one, the last action's position is returned.
        """
        self._sort_actions()
        if not self._actions:
            return 0.0
        if len(self._actions) == 1:
            return float(self._actions[0].pos)

        for action, nxt in zip(self._actions, self._actions[1:]):
            if action.at < time_ms < nxt.at:
                progress = (time_ms - action.at) / float(nxt.at - action.at)
                return action.pos + progress * (nxt.pos - action.pos)
            elif action.at == time_ms:
                return float(action.pos)

        return float(self._actions[-1].pos)

    def get_raw_position_at_frame(self, frame_no: int) -> int:
        return self.raw_data.get_raw_position_at_frame(frame_no)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _place_at(self, idx: int, action: FunscriptAction):
        """Overwrites slot ``idx`` and flags the list for sorting if the order broke."""
        self._actions[idx] = action
        if idx > 0 and self._actions[idx - 1].at >= action.at:
            self._unsorted = True
        if idx < len(self._actions) - 1 and self._actions[idx + 1].at <= action.at:
            self._unsorted = True

    def add_action(self, action: FunscriptAction):
        """Inserts ``action``; an action already stored at the same time is overwritten."""
        idx = self._find_index_by_time(action.at)
        if idx is not None:
            self._actions[idx] = action
        elif self._unsorted:
            self._actions.append(action)
        else:
            bisect.insort(self._actions, action)
        self.notifier.notify_actions_changed()

    def edit_action(self, old_action: FunscriptAction, new_action: FunscriptAction) -> bool:
        idx = self._index_of(old_action)
        if idx is None:
            return False

        if new_action.at != old_action.at:
            occupant = self._find_index_by_time(new_action.at)
            if occupant is not None:
                del self._actions[occupant]
                if occupant < idx:
                    idx -= 1
        self._place_at(idx, new_action)

        self._check_for_invalidated_selection()
        self.notifier.notify_actions_changed()
        return True

    def add_edit_action(self, action: FunscriptAction, tolerance_ms: float):
        """
        Overwrites the action closest to ``action.at`` within ``tolerance_ms``,
        or inserts ``action`` when there is none.
        """
        idx = self._get_action_index_at_time(action.at, tolerance_ms)
        if idx is None:
            self.add_action(action)
            return
        self._place_at(idx, action)
        self._check_for_invalidated_selection()
        self.notifier.notify_actions_changed()

    def paste_action(self, action: FunscriptAction, tolerance_ms: float):
        """Inserts ``action``, first removing any action within ``tolerance_ms`` of it."""
        close = self.get_action_at_time(action.at, tolerance_ms)
        if close is not None:
            self.remove_action(close)
        self.add_action(action)

    def remove_action(self, action: FunscriptAction, check_invalid_selection: bool = True) -> bool:
        """Removes the action matching both ``at`` and ``pos``."""
        idx = self._index_of(action)
        if idx is None:
            return False
        del self._actions[idx]
        self.notifier.notify_actions_changed()
        if check_invalid_selection:
            self._check_for_invalidated_selection()
        return True

    def remove_actions(self, actions: Iterable[FunscriptAction]) -> int:
        removed = 0
        for action in list(actions):
            if self.remove_action(action, check_invalid_selection=False):
                removed += 1
        self._check_for_invalidated_selection()
        self.notifier.notify_actions_changed()
        return removed

    def set_positions(self, indices: List[int], positions: List[int]):
        """Replaces the positions at store ``indices``. Indices must be freshly resolved."""
        for idx, pos in zip(indices, positions):
            current = self._actions[idx]
            self._actions[idx] = FunscriptAction(current.at, clamp_position(pos))
        self._check_for_invalidated_selection()
        self.notifier.notify_actions_changed()

    def clear(self):
        self._actions = []
        self._unsorted = False
        if self._selection:
            self._selection.clear()
            self.notifier.notify_selection_changed()
        self.notifier.notify_actions_changed()
        self.logger.info("Cleared all actions.")

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selection(self) -> List[FunscriptAction]:
        return self._selection.to_list()

    def has_selection(self) -> bool:
        return len(self._selection) > 0

    def selection_size(self) -> int:
        return len(self._selection)

    def is_selected(self, action: FunscriptAction) -> bool:
        return action in self._selection

    def _check_for_invalidated_selection(self):
        if not self._selection:
            return
        dropped = self._selection.retain(set(self._actions))
        if dropped:
            self.logger.debug(f"Dropped {dropped} stale entries from the selection.")
            self.notifier.notify_selection_changed()

    def resolve_selection_indices(self) -> List[int]:
        """Store indices of the selected actions, in store order."""
        selected = set(self._selection)
        return [i for i, action in enumerate(self._actions) if action in selected]

    def toggle_selection(self, action: FunscriptAction) -> bool:
        is_selected = self._selection.toggle(action)
        self.notifier.notify_selection_changed()
        return is_selected

    def set_selection(self, action: FunscriptAction, selected: bool):
        self._selection.set_selected(action, selected)
        self.notifier.notify_selection_changed()

    def replace_selection(self, actions: Iterable[FunscriptAction]):
        """Selects exactly ``actions``; entries not present in the store are dropped."""
        self._selection.assign(dict.fromkeys(actions))
        self._check_for_invalidated_selection()
        self.notifier.notify_selection_changed()

    def select_action(self, action: FunscriptAction):
        if self.get_action(action) is None:
            return
        if self._selection.toggle(action):
            # keep selection ordered for rendering purposes
            self._selection.sort()
        self.notifier.notify_selection_changed()

    def deselect_action(self, action: FunscriptAction):
        if self.get_action(action) is not None:
            self._selection.set_selected(action, False)
        self.notifier.notify_selection_changed()

    def select_time(self, from_ms: int, to_ms: int, clear: bool = True):
        """Toggles every action inside ``[from_ms, to_ms]``, optionally clearing the selection first."""
        if clear:
            self._selection.clear()

        for action in self._actions:
            if from_ms <= action.at <= to_ms:
                self._selection.toggle(action)
            elif action.at > to_ms:
                break

        if not clear:
            self._selection.sort()
        self.notifier.notify_selection_changed()

    def select_all(self):
        self._selection.assign(self._actions)
        self.notifier.notify_selection_changed()

    def clear_selection(self):
        self._selection.clear()
        self.notifier.notify_selection_changed()

    def remove_selected_actions(self):
        self.remove_actions(self._selection.to_list())
        self._selection.clear()
        self.notifier.notify_selection_changed()

    def _filter_selection(self, keep: Callable[[List[FunscriptAction]], List[FunscriptAction]]):
        if len(self._selection) < 3:
            return
        self._selection.sort()
        self._selection.assign(keep(self._selection.to_list()))
        self.notifier.notify_selection_changed()

    def select_top_actions(self):
        """Keeps only the local maxima of the selection."""
        self._filter_selection(top_points)

    def select_bottom_actions(self):
        """Keeps only the local minima of the selection."""
        self._filter_selection(bottom_points)

    def select_mid_actions(self):
        """Keeps only the points that are neither a local maximum nor a local minimum."""
        self._filter_selection(mid_points)

    # ------------------------------------------------------------------
    # Moving the selection
    # ------------------------------------------------------------------

    def _all_selected(self) -> bool:
        return len(self._selection) == len(self._actions)

    def move_selection_time(self, time_offset: int, frame_time_ms: Optional[float] = None):
        """
        Shifts the selected actions by ``time_offset`` milliseconds.

        The block stops one frame short of the nearest unselected neighbour in
        the direction of travel. Unselected actions inside the block's range
        that end up sharing a time with a moved action are replaced by it.
        """
        if not self.has_selection():
            return

        # faster path when everything is selected
        if self._all_selected():
            self._actions = [FunscriptAction(a.at + time_offset, a.pos) for a in self._actions]
            self.select_all()
            self.notifier.notify_actions_changed()
            return

        frame_time = frame_time_ms if frame_time_ms is not None else self.frame_time_provider()
        self._selection.sort()
        first, last = self._selection[0], self._selection[-1]

        if time_offset > 0:
            nxt = self.get_next_action_ahead(last.at)
            if nxt is not None:
                max_bound = int(nxt.at - frame_time)
                time_offset = max(0, min(time_offset, max_bound - last.at))
        elif time_offset < 0:
            prev = self.get_previous_action_behind(first.at)
            if prev is not None:
                min_bound = int(prev.at + frame_time)
                time_offset = min(0, max(time_offset, min_bound - first.at))

        if time_offset == 0:
            return

        indices = self.resolve_selection_indices()
        moved = [FunscriptAction(self._actions[i].at + time_offset, self._actions[i].pos) for i in indices]
        for idx, action in zip(indices, moved):
            self._actions[idx] = action

        moved_indices = set(indices)
        moved_times = {action.at for action in moved}
        self._actions = [a for i, a in enumerate(self._actions) if i in moved_indices or a.at not in moved_times]
        self._unsorted = True

        self._selection.assign(moved)
        self.notifier.notify_selection_changed()
        self.notifier.notify_actions_changed()

    def move_selection_position(self, pos_offset: int):
        """Shifts the selected actions' positions by ``pos_offset``, clamped to [0, 100]."""
        if not self.has_selection():
            return

        if self._all_selected():
            self._actions = [FunscriptAction(a.at, clamp_position(a.pos + pos_offset)) for a in self._actions]
            self.select_all()
            self.notifier.notify_actions_changed()
            return

        indices = self.resolve_selection_indices()
        moved = []
        for idx in indices:
            action = self._actions[idx]
            self._actions[idx] = FunscriptAction(action.at, clamp_position(action.pos + pos_offset))
            moved.append(self._actions[idx])

        self._selection.assign(moved)
        self.notifier.notify_selection_changed()
        self.notifier.notify_actions_changed()

    # ------------------------------------------------------------------
    # Selection transforms
    # ------------------------------------------------------------------

    def list_available_plugins(self) -> List[Dict[str, Any]]:
        return self.plugins.list_plugins()

    def apply_plugin(self, plugin_name: str, **parameters) -> bool:
        """
        Apply a selection transform plugin.

        Returns:
            True if the plugin ran, False if it is unknown or rejected the parameters
        """
        plugin = self.plugins.get_plugin(plugin_name)
        if not plugin:
            self.logger.error(f"Plugin '{plugin_name}' not found")
            return False

        self._sort_actions()
        try:
            plugin.transform(self, **parameters)
        except ValueError as e:
            self.logger.error(f"Error applying plugin '{plugin_name}': {e}")
            return False
        return True

    def range_extend_selection(self, amount: int) -> bool:
        return self.apply_plugin("Range Extend", amount=amount)

    def equalize_selection(self) -> bool:
        return self.apply_plugin("Equalize")

    def invert_selection(self) -> bool:
        return self.apply_plugin("Invert")

    def align_selection_to_frame_grid(self, frame_time_ms: Optional[float] = None) -> bool:
        if frame_time_ms is None:
            frame_time_ms = self.frame_time_provider()
        return self.apply_plugin("Align To Frame Grid", frame_time_ms=frame_time_ms)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> ScriptSnapshot:
        self._sort_actions()
        return ScriptSnapshot(actions=tuple(self._actions), selection=tuple(self._selection))

    def restore(self, snapshot: ScriptSnapshot):
        self._actions = list(snapshot.actions)
        self._unsorted = False
        self._selection.assign(snapshot.selection)
        self.notifier.notify_actions_changed()
        self.notifier.notify_selection_changed()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def open(self, path: str) -> Result[int]:
        """
        Loads a funscript document from ``path``.

        On failure nothing is changed and the error is logged and returned.
        On success the result carries the number of loaded actions.
        """
        name = os.path.basename(path)
        try:
            data = decode_document(read_file_bytes(path))
        except FileNotFoundError:
            self.logger.error(f"File not found: {name}")
            return Result.err(f"File not found: {name}")
        except OSError as e:
            self.logger.error(f"Could not read funscript '{path}': {e}")
            return Result.err(f"Could not read {name}: {e}")
        except ScriptLoadError as e:
            self.logger.error(f"Failed to parse funscript '{path}': {e}")
            return Result.err(f"Failed to parse {name}: {e}")

        parsed = parse_document(data, self.logger)
        if not parsed.success:
            self.logger.error(f"Failed to parse funscript '{path}': {parsed.error}")
            return Result.err(parsed.error)
        document = parsed.data

        self._actions = document.actions
        self._unsorted = False
        self._selection.clear()
        self.extra_fields = document.extra_fields
        self.metadata = FunscriptMetadata.from_dict(document.metadata)
        self.settings.load(document.settings)
        self.raw_data.load(document.recordings)

        if not self.metadata.title:
            self.metadata.title = os.path.splitext(name)[0]

        self.current_path = path
        self.script_opened = True
        self.notifier.notify_actions_changed()
        self.notifier.notify_selection_changed()

        self.logger.info(f"Loaded {len(self._actions)} actions from {name}")
        return Result.ok(len(self._actions))

    def build_document(self) -> Dict[str, Any]:
        """A fresh document reflecting the current state, foreign fields included."""
        self._sort_actions()
        return build_document(
            extra_fields=self.extra_fields,
            actions=self._actions,
            metadata=self.metadata.to_dict(),
            settings=self.settings.dump(),
            recordings=self.raw_data.dump(),
        )

    def save(self, path: Optional[str] = None, set_as_current: bool = True) -> Future:
        """
        Saves the script to ``path`` (default: the current path).

        The document is built and encoded right away; only the file write runs
        in the background. The returned future resolves to the written path.
        """
        path = path or self.current_path
        if not path:
            raise ValueError("No path given and the script has no current path")
        if set_as_current:
            self.current_path = path

        payload = encode_document(self.build_document())
        self.logger.debug(f"Queued save of {len(self._actions)} actions to {os.path.basename(path)}")
        return self.writer.submit(path, payload)
