"""Note data class - a spelled pitch parsed from a note token."""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .constants import FLAT_PITCH_NAMES, LETTER_SEMITONES, LETTERS, PITCH_NAMES
from .errors import ErrorCode, MusicTheoryError

NOTE_PATTERN = re.compile(r"^([A-G])(#+|b+)?(\d*)$")


@dataclass(frozen=True)
class Note:
    """Represents a spelled note such as 'C', 'Eb' or 'F#4'."""

    letter: str  # Natural letter A-G
    accidentals: str = ""  # Run of '#' or 'b'
    octave: Optional[int] = None  # Ignored for pitch-class arithmetic

    @property
    def name(self) -> str:
        """Spelling without octave (e.g., 'C#')."""
        return f"{self.letter}{self.accidentals}"

    @property
    def spelling(self) -> str:
        """Original spelling including octave (e.g., 'C#4')."""
        if self.octave is None:
            return self.name
        return f"{self.name}{self.octave}"

    @property
    def alteration(self) -> int:
        """Semitone alteration from the natural letter."""
        if self.accidentals.startswith("#"):
            return len(self.accidentals)
        return -len(self.accidentals)

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return (LETTER_SEMITONES[self.letter] + self.alteration) % 12

    @property
    def midi(self) -> Optional[int]:
        """MIDI pitch when an octave was given."""
        if self.octave is None:
            return None
        return (self.octave + 1) * 12 + LETTER_SEMITONES[self.letter] + self.alteration

    @property
    def uses_flats(self) -> bool:
        return self.accidentals.startswith("b")

    @classmethod
    def parse(cls, token: str) -> "Note":
        """Parse a note token, raising INVALID_NOTES when malformed."""
        match = NOTE_PATTERN.match(token.strip()) if isinstance(token, str) else None
        if match is None:
            raise MusicTheoryError(
                ErrorCode.INVALID_NOTES,
                f"Invalid note: {token!r}",
                details={"invalid": [token]},
                suggestion="Use a letter A-G, optional '#' or 'b' accidentals, optional octave",
            )
        letter, accidentals, octave = match.groups()
        return cls(
            letter=letter,
            accidentals=accidentals or "",
            octave=int(octave) if octave else None,
        )


def parse_notes(tokens: Iterable[str]) -> List[Note]:
    """Parse every token, reporting all malformed tokens together."""
    notes = []
    invalid = []
    for token in tokens:
        try:
            notes.append(Note.parse(token))
        except MusicTheoryError:
            invalid.append(token)
    if invalid:
        raise MusicTheoryError(
            ErrorCode.INVALID_NOTES,
            f"Invalid note(s): {', '.join(str(t) for t in invalid)}",
            details={"invalid": invalid},
            suggestion="Use a letter A-G, optional '#' or 'b' accidentals, optional octave",
        )
    return notes


def pitch_class(token: str) -> int:
    """Pitch class of a note token."""
    return Note.parse(token).pitch_class


def pitch_name(pc: int, prefer_flats: bool = False) -> str:
    """Chromatic name of a pitch class."""
    names = FLAT_PITCH_NAMES if prefer_flats else PITCH_NAMES
    return names[pc % 12]


def spell_on_letter(pc: int, letter: str) -> str:
    """Spell a pitch class on a given natural letter (e.g., 6 on 'G' -> 'Gb')."""
    diff = (pc - LETTER_SEMITONES[letter] + 6) % 12 - 6
    if diff > 0:
        return letter + "#" * diff
    return letter + "b" * -diff


def letter_after(letter: str, steps: int) -> str:
    """Natural letter a number of scale steps above another."""
    return LETTERS[(LETTERS.index(letter) + steps) % 7]
