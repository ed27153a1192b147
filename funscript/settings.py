import copy
import logging
from typing import Optional, Dict, Any

from config import constants


class ScriptSettings:
    """
    Editor settings stored with a script under the host settings key.

    Loaded values are merged over the defaults so a block written by an older
    version still yields every key. Keys this class does not know are kept and
    written back unchanged.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger(__name__ + '_ScriptSettings_fallback')
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())
        self.data: Dict[str, Any] = self.get_default_settings()

    def get_default_settings(self) -> Dict[str, Any]:
        defaults = {
            "version": constants.SCRIPT_SETTINGS_VERSION,
            "bookmarks": [],
            "last_position_ms": 0,

            # Player
            "player": {
                "volume": 0.5,
                "playback_speed": 1.0,
                "waveform_visible": False,
            },
        }
        return defaults

    def load(self, block: Any):
        """Replaces the current settings with ``block`` merged over the defaults."""
        defaults = self.get_default_settings()
        if not isinstance(block, dict):
            if block is not None:
                self.logger.warning(f"Script settings block is a {type(block).__name__}, using defaults.")
            self.data = defaults
            return

        loaded = {k: v for k, v in block.items() if k != constants.RECORDINGS_KEY}
        self.data = defaults.copy()
        self.data.update(loaded)

        # Nested player settings are merged key by key
        if isinstance(loaded.get("player"), dict):
            merged_player = defaults["player"].copy()
            merged_player.update(loaded["player"])
            self.data["player"] = merged_player
        else:
            self.data["player"] = defaults["player"]

    def dump(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def get(self, key, default=None):
        if key not in self.data:
            defaults = self.get_default_settings()
            if key in defaults:
                self.data[key] = defaults[key]
                return defaults[key]
            return default
        return self.data.get(key, default)

    def set(self, key, value):
        if key == constants.RECORDINGS_KEY:
            raise KeyError(f"'{key}' is managed by the raw recordings and cannot be set directly")
        self.data[key] = value

    def reset_to_defaults(self):
        self.data = self.get_default_settings()
        self.logger.info("Script settings have been reset to their default values.")
