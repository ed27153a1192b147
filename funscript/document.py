"""
Document model for .funscript files.

Bridges the in-memory script to the encoded JSON document: splits a decoded
document into the fields the engine owns and a bag of foreign fields that are
carried through untouched, rebuilds a fresh document for saving, and writes
encoded documents on background threads.
"""

import logging
import os
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import orjson

from common.exceptions import ScriptLoadError, ScriptSaveError
from common.result import Result
from config import constants
from .action import FunscriptAction, clamp_position


@dataclass
class FunscriptDocument:
    """The decoded pieces of a funscript document the engine cares about."""
    actions: List[FunscriptAction] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    settings: Optional[Dict[str, Any]] = None
    recordings: Optional[List[Any]] = None
    extra_fields: Dict[str, Any] = field(default_factory=dict)


def decode_document(payload: bytes) -> Dict[str, Any]:
    """
    Decodes raw file content.

    Raises:
        ScriptLoadError: If the content is not JSON or not a JSON object
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise ScriptLoadError(f"Error decoding JSON: {e}") from e
    if not isinstance(data, dict):
        raise ScriptLoadError(f"Top-level value is a {type(data).__name__}, expected an object")
    return data


def encode_document(document: Dict[str, Any]) -> bytes:
    return orjson.dumps(document)


def extract_extra_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in constants.OWNED_DOCUMENT_KEYS}


def parse_document(data: Dict[str, Any], logger: Optional[logging.Logger] = None) -> Result[FunscriptDocument]:
    """
    Splits a decoded document into owned and foreign fields.

    Actions with a negative time or a malformed entry are dropped. When two
    actions share a time the later one in the array wins. The returned actions
    are sorted by time.
    """
    logger = logger or logging.getLogger(__name__)

    actions_data = data.get("actions")
    if not isinstance(actions_data, list):
        return Result.err("Invalid format: 'actions' is not a list.")

    by_time: Dict[int, FunscriptAction] = {}
    skipped = 0
    for entry in actions_data:
        try:
            action = FunscriptAction.from_dict(entry)
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping invalid action entry: {entry!r}")
            continue
        if action.at < 0:
            skipped += 1
            continue
        by_time[action.at] = action
    if skipped:
        logger.debug(f"Dropped {skipped} actions with a negative time.")

    host_block = data.get(constants.HOST_SETTINGS_KEY)
    recordings = None
    if isinstance(host_block, dict):
        recordings = host_block.get(constants.RECORDINGS_KEY)

    metadata = data.get("metadata")
    document = FunscriptDocument(
        actions=sorted(by_time.values()),
        metadata=metadata if isinstance(metadata, dict) else {},
        settings=host_block if isinstance(host_block, dict) else None,
        recordings=recordings,
        extra_fields=extract_extra_fields(data),
    )
    return Result.ok(document)


def build_document(extra_fields: Dict[str, Any],
                   actions: List[FunscriptAction],
                   metadata: Dict[str, Any],
                   settings: Dict[str, Any],
                   recordings: List[Any]) -> Dict[str, Any]:
    """
    Builds a fresh document for saving.

    Foreign fields come first, followed by the owned fields. Actions are sorted,
    negative times are skipped and positions are clamped to [0, 100].
    """
    document: Dict[str, Any] = dict(extra_fields)
    document["actions"] = [
        {"at": int(action.at), "pos": clamp_position(action.pos)}
        for action in sorted(actions)
        if action.at >= 0
    ]
    document["rawActions"] = []
    document["version"] = constants.FUNSCRIPT_FORMAT_VERSION
    document["inverted"] = False
    document["range"] = constants.DEFAULT_SCRIPT_RANGE

    host_block = dict(settings)
    host_block[constants.RECORDINGS_KEY] = recordings
    document[constants.HOST_SETTINGS_KEY] = host_block
    document["metadata"] = metadata
    return document


def read_file_bytes(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def write_bytes_to_file(path: str, payload: bytes):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'wb') as f:
        f.write(payload)


class ScriptWriter:
    """
    Writes encoded documents on background threads.

    Every ``submit`` starts its own thread. A single lock owned by the writer
    makes sure only one of those threads touches the disk at a time, so
    overlapping saves queue up instead of interleaving their bytes.
    """

    def __init__(self, write_func: Optional[Callable[[str, bytes], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self._write_func = write_func or write_bytes_to_file
        self._lock = threading.Lock()

        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger('ScriptWriter_fallback')
            if not self.logger.handlers:
                self.logger.addHandler(logging.NullHandler())

    def submit(self, path: str, payload: bytes) -> Future:
        """
        Hands ``payload`` to a new writer thread.

        The returned future resolves to ``path`` once the file is written, or
        holds a ``ScriptSaveError`` if writing failed. Callers are free to
        ignore it.
        """
        future: Future = Future()
        thread = threading.Thread(target=self._write, args=(path, payload, future),
                                  name="SaveScriptThread")
        thread.start()
        return future

    def _write(self, path: str, payload: bytes, future: Future):
        future.set_running_or_notify_cancel()
        with self._lock:
            try:
                self._write_func(path, payload)
            except Exception as e:
                self.logger.error(f"Error saving funscript to '{path}': {e}")
                future.set_exception(ScriptSaveError(path, str(e)))
                return
        self.logger.info(f"Funscript saved to {os.path.basename(path)} ({len(payload)} bytes)")
        future.set_result(path)
