####################################################################################################
# META & VERSIONING
####################################################################################################
APP_NAME = "FunscriptTimeline"
APP_VERSION = "0.3.0"

FUNSCRIPT_FORMAT_VERSION = "1.0"
DEFAULT_SCRIPT_RANGE = 90  # Legacy field, most players ignore it
DEFAULT_METADATA_TYPE = "basic"
SCRIPT_SETTINGS_VERSION = 1


####################################################################################################
# DOCUMENT LAYOUT
####################################################################################################
# Block holding editor specific settings inside a .funscript document.
# The key name is shared with other editors so their documents round-trip.
HOST_SETTINGS_KEY = "OpenFunscripter"
RECORDINGS_KEY = "Recordings"

# Top-level keys written by the engine. Anything else is carried through untouched.
OWNED_DOCUMENT_KEYS = (
    "actions",
    "rawActions",
    "version",
    "inverted",
    "range",
    HOST_SETTINGS_KEY,
    "metadata",
)


####################################################################################################
# EDITING
####################################################################################################
POSITION_MIN = 0
POSITION_MAX = 100
UNSET_RAW_POSITION = -1
MAX_RAW_FRAMES = 10 * 60 * 60 * 240  # 10 hours at 240 fps
DEFAULT_FRAME_TIME_MS = 1000.0 / 30.0  # Used when the host does not provide a frame time
DEFAULT_UNDO_HISTORY = 50


####################################################################################################
# LOGGING
####################################################################################################
# Maximum size per log file before rotation (bytes) and number of backups to keep
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
LOG_BACKUP_COUNT = 3
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
