import logging
from enum import Enum
from typing import Callable, List, Optional


class ScriptEvent(Enum):
    ACTIONS_CHANGED = "actions_changed"
    SELECTION_CHANGED = "selection_changed"


EventCallback = Callable[[ScriptEvent], None]


class ChangeNotifier:
    """
    Coalesces change notifications into dirty flags.

    Mutations only flip a flag. ``pump()`` turns the pending flags into
    ``ScriptEvent`` values, delivers them to every subscriber and returns them,
    so a burst of edits produces at most one event of each kind per pump.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.actions_changed: bool = False
        self.selection_changed: bool = False
        self._subscribers: List[EventCallback] = []

        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger('ChangeNotifier_fallback')
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Registers ``callback`` and returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify_actions_changed(self):
        self.actions_changed = True

    def notify_selection_changed(self):
        self.selection_changed = True

    @property
    def has_pending(self) -> bool:
        return self.actions_changed or self.selection_changed

    def pump(self) -> List[ScriptEvent]:
        events: List[ScriptEvent] = []
        if self.actions_changed:
            self.actions_changed = False
            events.append(ScriptEvent.ACTIONS_CHANGED)
        if self.selection_changed:
            self.selection_changed = False
            events.append(ScriptEvent.SELECTION_CHANGED)

        for event in events:
            self._publish(event)
        return events

    def _publish(self, event: ScriptEvent):
        # Delivery is fire-and-forget: one failing subscriber must not starve the others.
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"Subscriber {callback!r} failed handling {event.value}: {e}", exc_info=True)
