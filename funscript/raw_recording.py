"""
Per-frame raw position recordings.

A raw recording is an auxiliary track captured frame by frame (for example
while the user scrubs a position slider during playback). It is kept apart
from the primary action list and persisted inside the host settings block.
"""

import logging
from typing import List, Dict, Any, Optional

import numpy as np

from config.constants import MAX_RAW_FRAMES, POSITION_MAX, POSITION_MIN, UNSET_RAW_POSITION


class RawRecording:
    """A frame-indexed position track; slots that were never recorded hold ``UNSET_RAW_POSITION``."""

    def __init__(self, size: int = 0):
        self.positions: np.ndarray = np.full(size, UNSET_RAW_POSITION, dtype=np.int32)

    def __len__(self) -> int:
        return len(self.positions)

    def _grow(self, size: int):
        if size <= len(self.positions):
            return
        grown = np.full(size, UNSET_RAW_POSITION, dtype=np.int32)
        grown[:len(self.positions)] = self.positions
        self.positions = grown

    def record(self, frame_no: int, pos: int):
        if not 0 <= frame_no <= MAX_RAW_FRAMES:
            raise ValueError(f"Frame number must be in [0, {MAX_RAW_FRAMES}], got {frame_no}")
        if not POSITION_MIN <= pos <= POSITION_MAX:
            raise ValueError(f"Position must be in [{POSITION_MIN}, {POSITION_MAX}], got {pos}")
        self._grow(frame_no + 1)
        self.positions[frame_no] = pos

    def is_set(self, frame_no: int) -> bool:
        return 0 <= frame_no < len(self.positions) and self.positions[frame_no] >= 0

    def get_position_at_frame(self, frame_no: int) -> int:
        """
        Returns the recorded position for ``frame_no``.

        Falls back to the next frame, then the previous frame, then 0. Only
        direct neighbours are consulted, so a gap wider than one frame reads as 0.
        """
        if frame_no < 0 or frame_no >= len(self.positions):
            return 0
        if self.is_set(frame_no):
            return int(self.positions[frame_no])
        if self.is_set(frame_no + 1):
            return int(self.positions[frame_no + 1])
        if self.is_set(frame_no - 1):
            return int(self.positions[frame_no - 1])
        return 0

    @classmethod
    def from_entries(cls, entries: List[Dict[str, Any]], logger: Optional[logging.Logger] = None) -> 'RawRecording':
        """
        Rebuilds a recording from ``{"frame_no", "pos"}`` entries.

        Entries may be sparse or out of order. Each one is placed at its frame
        index; frame numbers <= 0 are dropped. Malformed entries, positions
        outside [0, 100] and frame numbers above ``MAX_RAW_FRAMES`` are skipped
        with a warning.
        """
        frames: List[int] = []
        values: List[int] = []
        for entry in entries:
            try:
                frame_no = int(entry["frame_no"])
                pos = int(entry["pos"])
            except (KeyError, TypeError, ValueError, OverflowError):
                if logger:
                    logger.warning(f"Skipping malformed raw action: {entry!r}")
                continue
            if frame_no > MAX_RAW_FRAMES or not POSITION_MIN <= pos <= POSITION_MAX:
                if logger:
                    logger.warning(f"Skipping out of range raw action: frame {frame_no}, pos {pos}")
                continue
            if frame_no > 0:
                frames.append(frame_no)
                values.append(pos)

        recording = cls(max(frames) + 1 if frames else 0)
        if frames:
            recording.positions[np.array(frames)] = np.array(values, dtype=np.int32)
        return recording

    def to_entries(self) -> List[Dict[str, int]]:
        """Only explicitly recorded slots with frame number > 0 are emitted."""
        frames = np.nonzero(self.positions >= 0)[0]
        return [{"frame_no": int(f), "pos": int(self.positions[f])} for f in frames if f > 0]


class FunscriptRawData:
    """The set of raw recordings attached to a script, one of which is active."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.recordings: List[RawRecording] = []
        self.active_index: int = 0

        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger('FunscriptRawData_fallback')
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())

    def has_recordings(self) -> bool:
        return bool(self.recordings)

    def new_recording(self, size: int = 0) -> RawRecording:
        self.recordings.append(RawRecording(size))
        self.active_index = len(self.recordings) - 1
        return self.recordings[-1]

    def set_active(self, index: int):
        if not 0 <= index < len(self.recordings):
            raise IndexError(f"No raw recording at index {index} ({len(self.recordings)} available)")
        self.active_index = index

    def active(self) -> RawRecording:
        # An empty set reads like a single empty recording without gaining one.
        if not self.recordings:
            return RawRecording()
        return self.recordings[self.active_index]

    def get_raw_position_at_frame(self, frame_no: int) -> int:
        if not self.recordings:
            return 0
        return self.active().get_position_at_frame(frame_no)

    def load(self, recordings_data: Any):
        """Replaces all recordings from the serialized ``Recordings`` array."""
        self.recordings = []
        self.active_index = 0
        if not isinstance(recordings_data, list):
            if recordings_data is not None:
                self.logger.warning("Raw recordings block is not a list, ignoring it.")
            return
        for recording_entries in recordings_data:
            if not isinstance(recording_entries, list):
                self.logger.warning("Skipping raw recording that is not a list of frames.")
                continue
            self.recordings.append(RawRecording.from_entries(recording_entries, self.logger))
        self.logger.debug(f"Loaded {len(self.recordings)} raw recordings.")

    def dump(self) -> List[List[Dict[str, int]]]:
        return [recording.to_entries() for recording in self.recordings]
