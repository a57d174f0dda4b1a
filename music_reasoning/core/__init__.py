"""Core types and constants for Music Reasoning."""

from .note import Note, parse_notes, pitch_class, pitch_name
from .key import Key, Mode, all_keys
from .errors import ErrorCode, MusicTheoryError
from .constants import (
    PITCH_NAMES,
    FLAT_PITCH_NAMES,
    ROMAN_NUMERALS,
)

__all__ = [
    "Note",
    "parse_notes",
    "pitch_class",
    "pitch_name",
    "Key",
    "Mode",
    "all_keys",
    "ErrorCode",
    "MusicTheoryError",
    "PITCH_NAMES",
    "FLAT_PITCH_NAMES",
    "ROMAN_NUMERALS",
]
