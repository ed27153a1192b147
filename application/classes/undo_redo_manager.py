import collections
from typing import Optional, List, Tuple

from config.constants import DEFAULT_UNDO_HISTORY
from funscript.funscript import Funscript, ScriptSnapshot


class ScriptUndoManager:
    def __init__(self, funscript: Funscript, max_history: int = DEFAULT_UNDO_HISTORY):
        self.max_history: int = max_history
        self.funscript = funscript
        # undo_stack: (description_of_action_that_led_AWAY_from_this_state, state_snapshot)
        # So, if state S0 was changed by "Add Point" to S1, undo_stack gets ("Add Point", S0)
        self.undo_stack: collections.deque[Tuple[str, ScriptSnapshot]] = collections.deque(maxlen=max_history)
        # redo_stack: (description_of_action_to_REAPPLY, state_snapshot_that_results_from_reapply)
        self.redo_stack: collections.deque[Tuple[str, ScriptSnapshot]] = collections.deque(maxlen=max_history)

    def record_state_before_action(self, action_description: str):
        """
        Call this *BEFORE* the script is modified.
        'action_description' describes the action that is *about to happen*.
        """
        state_before_action = self.funscript.snapshot()

        if self.undo_stack and self.undo_stack[-1] == (action_description, state_before_action):
            return

        self.undo_stack.append((action_description, state_before_action))
        self.redo_stack.clear()  # A new action clears the redo stack

    def undo(self) -> Optional[str]:
        """
        Restores the state from the top of the undo stack; the current state goes to redo.
        Returns the description of the action that was undone.
        """
        if not self.undo_stack:
            return None

        action_description_that_was_done, previous_state_to_restore = self.undo_stack.pop()
        self.redo_stack.append((action_description_that_was_done, self.funscript.snapshot()))
        self.funscript.restore(previous_state_to_restore)
        return action_description_that_was_done

    def redo(self) -> Optional[str]:
        """
        Re-applies the most recently undone action; the current state goes back to undo.
        Returns the description of the action that was redone.
        """
        if not self.redo_stack:
            return None

        action_to_reapply_desc, state_to_restore_via_redo = self.redo_stack.pop()
        self.undo_stack.append((action_to_reapply_desc, self.funscript.snapshot()))
        self.funscript.restore(state_to_restore_via_redo)
        return action_to_reapply_desc

    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def clear_history(self):
        self.undo_stack.clear()
        self.redo_stack.clear()

    def get_undo_history_for_display(self) -> List[str]:
        """Most recent first."""
        return [item[0] for item in reversed(self.undo_stack)]

    def get_redo_history_for_display(self) -> List[str]:
        return [item[0] for item in reversed(self.redo_stack)]
