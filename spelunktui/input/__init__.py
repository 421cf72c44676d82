"""Input-layer public API for key decoding and interaction handlers.

Exports are split between low-level terminal decoding (`read_key`) and the
higher-level mode handlers used by the runtime loop.
"""

from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key
from .key_common import normalize_enter, parse_mouse_col_row
from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import SessionKeyHandler
from .key_editing import EditingKeyHandler
from .key_normal import NormalKeyContext, NormalKeyHandler
from .mouse import MouseHandler

__all__ = [
    "read_key",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "EditingKeyHandler",
    "MouseHandler",
    "NormalKeyContext",
    "NormalKeyHandler",
    "SessionKeyHandler",
    "normalize_enter",
    "parse_mouse_col_row",
]
