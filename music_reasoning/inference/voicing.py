"""Chord building - Notes, voicings and substitutions from chord symbols.

The reverse direction of chord identification:
- Letter-aware spelling of every chord tone in stacked-third order
- Close, open, drop-2 and drop-3 voicings with octave numbers and inversions
- Enharmonic preference for the spelled notes
- Common substitutions (tritone, relative, color tones) with reasons
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional, Tuple

from ..core import ErrorCode, MusicTheoryError, Note, pitch_name
from ..core.constants import LABEL_SEMITONES
from ..core.note import letter_after, spell_on_letter
from .chords import ChordSymbol, parse_chord_symbol

logger = logging.getLogger(__name__)

VOICING_TYPES = ("close", "open", "drop2", "drop3")
ENHARMONIC_PREFERENCES = ("preserve", "sharps", "flats")

MAX_COMMON_SUBSTITUTIONS = 3


@dataclass(frozen=True)
class ChordVoicing:
    """Chord tones placed in specific octaves, starting from the bass chord tone."""
    type: str
    notes: List[str] = field(default_factory=list)  # e.g., ["C4", "G3", "E4", "B4"]


@dataclass(frozen=True)
class ChordSubstitution:
    """A chord that can stand in for another, with the reason."""
    chord: str
    reason: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ChordBuild:
    """Result of building a chord from its symbol."""

    chord: str  # Symbol as given
    root: str
    quality: str
    notes: List[str] = field(default_factory=list)  # Stacked-third order from the root
    intervals: List[str] = field(default_factory=list)  # Aligned with notes
    degrees: List[int] = field(default_factory=list)  # Aligned with notes
    bass: Optional[str] = None  # Slash bass, if any
    voicing: Optional[ChordVoicing] = None
    enharmonics: List[str] = field(default_factory=list)  # Root spelling and its equivalent
    common_substitutions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def transpose(note: Note, semitones: int, letter_steps: int) -> str:
    """Spell the note a given interval away (e.g., G by a diminished fifth -> Db)."""
    return spell_on_letter(
        (note.pitch_class + semitones) % 12,
        letter_after(note.letter, letter_steps),
    )


def _root(chord: ChordSymbol) -> Note:
    return Note.parse(chord.root)


class ChordBuilder:
    """Build chords, voicings and substitutions from chord symbols."""

    def build(
        self,
        symbol: str,
        voicing: str = "close",
        octave: int = 4,
        enharmonic: str = "preserve",
    ) -> ChordBuild:
        """
        Build a chord from its symbol.

        Args:
            symbol: Chord symbol (e.g., "Cmaj7", "F#m7b5", "C/E")
            voicing: Voicing type for the attached voicing
            octave: Starting octave of the bass chord tone
            enharmonic: "preserve", "sharps" or "flats"

        Returns:
            ChordBuild with notes, intervals, degrees, voicing and substitutions
        """
        self._check_voicing(voicing)
        if enharmonic not in ENHARMONIC_PREFERENCES:
            raise MusicTheoryError(
                ErrorCode.INVALID_CHORD,
                f"Invalid enharmonic preference: {enharmonic!r}",
                details={"enharmonic": enharmonic, "accepted": list(ENHARMONIC_PREFERENCES)},
            )

        chord = parse_chord_symbol(symbol)
        notes, labels = self._spell(chord)
        notes = [self._prefer(n, enharmonic) for n in notes]
        logger.debug("build %s -> %s", chord.symbol, notes)

        substitutions = [s.chord for s in self.get_substitutions(symbol)]
        return ChordBuild(
            chord=chord.symbol,
            root=chord.root,
            quality=chord.quality,
            notes=notes,
            intervals=labels,
            degrees=[int(label[1:]) for label in labels],
            bass=chord.bass,
            voicing=ChordVoicing(type=voicing, notes=self._voice(notes, voicing, octave)),
            enharmonics=self._enharmonics(_root(chord)),
            common_substitutions=substitutions[:MAX_COMMON_SUBSTITUTIONS],
        )

    def generate_voicing(
        self,
        symbol: str,
        voicing: str = "close",
        octave: int = 4,
        inversion: int = 0,
    ) -> List[str]:
        """
        Voice a chord with octave numbers.

        Args:
            symbol: Chord symbol
            voicing: "close", "open", "drop2" or "drop3"
            octave: Starting octave of the bass chord tone
            inversion: Number of chord tones rotated from the bottom to the top

        Returns:
            Notes with octaves, bass chord tone first (e.g., ["C4", "E4", "G4"])
        """
        self._check_voicing(voicing)
        if inversion < 0:
            raise MusicTheoryError(
                ErrorCode.INVALID_CHORD,
                f"Inversion must not be negative: {inversion}",
                details={"inversion": inversion},
            )
        notes, _ = self._spell(parse_chord_symbol(symbol))
        shift = inversion % len(notes)
        return self._voice(notes[shift:] + notes[:shift], voicing, octave)

    def get_substitutions(self, symbol: str) -> List[ChordSubstitution]:
        """Suggest substitute chords for a symbol (empty when none apply)."""
        chord = parse_chord_symbol(symbol)
        root = _root(chord)
        name = chord.quality

        if name in ("major7", "major9", "major11", "major13"):
            subs = [
                ChordSubstitution(
                    f"{root.name}6",
                    "Major 7th and major 6th chords share a similar harmonic color "
                    "and are often interchangeable in jazz and pop.",
                ),
                ChordSubstitution(
                    f"{transpose(root, -3, -2)}m7",
                    "The relative minor provides a similar tonal center and is a common "
                    "modal substitute.",
                ),
                ChordSubstitution(
                    f"{root.name}add9",
                    "Add9 keeps the color without the 7th for a more open sound.",
                ),
            ]
        elif chord.family == "dominant":
            subs = [
                ChordSubstitution(
                    f"{transpose(root, 6, 4)}7",
                    "Tritone substitution shares the 3rd and 7th of the original chord "
                    "and gives chromatic voice leading.",
                ),
                ChordSubstitution(
                    f"{transpose(root, 1, 1)}dim7",
                    "The diminished 7th a half step above the root holds the dominant's "
                    "3rd, 5th and 7th and keeps its pull to the tonic.",
                ),
                ChordSubstitution(
                    f"{root.name}7#5",
                    "A raised 5th turns the dominant into an altered dominant with "
                    "more tension.",
                ),
            ]
        elif name in ("minor7", "minor9", "minor11", "minor13"):
            subs = [
                ChordSubstitution(
                    f"{root.name}m6",
                    "Minor 6th keeps the minor color with a brighter top note.",
                ),
                ChordSubstitution(
                    f"{transpose(root, 3, 2)}maj7",
                    "The relative major shares the key signature and keeps the tonal center.",
                ),
                ChordSubstitution(
                    f"{root.name}m9",
                    "Minor 9th adds warmth on top of the minor 7th sound.",
                ),
            ]
        elif name == "major":
            subs = [
                ChordSubstitution(
                    f"{root.name}maj7",
                    "Major 7th adds a jazz color to the plain triad.",
                ),
                ChordSubstitution(
                    f"{root.name}6",
                    "Major 6th is a stable, consonant alternative.",
                ),
                ChordSubstitution(
                    f"{transpose(root, -3, -2)}m",
                    "The relative minor shares two notes and keeps the tonal center.",
                ),
            ]
        elif name in ("diminished", "diminished7"):
            subs = [
                ChordSubstitution(
                    f"{transpose(root, 3, 2)}dim7",
                    "Diminished 7th chords are symmetrical and can be respelled from any chord tone.",
                ),
            ]
        else:
            subs = []

        own = f"{root.name}{chord.template.suffix}"
        return [s for s in subs if s.chord != own]

    def _check_voicing(self, voicing: str) -> None:
        if voicing not in VOICING_TYPES:
            raise MusicTheoryError(
                ErrorCode.INVALID_CHORD,
                f"Invalid voicing type: {voicing!r}",
                details={"voicing": voicing, "accepted": list(VOICING_TYPES)},
                suggestion=f"Use one of: {', '.join(VOICING_TYPES)}",
            )

    def _spell(self, chord: ChordSymbol) -> Tuple[List[str], List[str]]:
        """Chord tones and their labels in stacked-third order (1, 3, 5, 7, 9, ...)."""
        root = _root(chord)
        labels = sorted(chord.template.labels, key=lambda label: int(label[1:]))
        notes = [
            transpose(root, LABEL_SEMITONES[label], int(label[1:]) - 1)
            for label in labels
        ]
        return notes, labels

    def _prefer(self, name: str, enharmonic: str) -> str:
        note = Note.parse(name)
        if enharmonic == "sharps" and "b" in note.accidentals:
            return pitch_name(note.pitch_class)
        if enharmonic == "flats" and "#" in note.accidentals:
            return pitch_name(note.pitch_class, prefer_flats=True)
        return name

    def _enharmonics(self, root: Note) -> List[str]:
        alternatives = [root.name]
        other = pitch_name(root.pitch_class, prefer_flats=not root.uses_flats)
        if other != root.name:
            alternatives.append(other)
        return alternatives

    def _voice(self, notes: List[str], voicing: str, octave: int) -> List[str]:
        if voicing == "open":
            placed = self._open(notes, octave)
        elif voicing == "drop2":
            placed = self._drop(notes, octave, 2)
        elif voicing == "drop3":
            placed = self._drop(notes, octave, 3)
        else:
            placed = self._close(notes, octave)
        return [f"{name}{oct_}" for name, oct_ in placed]

    def _close(self, notes: List[str], octave: int) -> List[Tuple[str, int]]:
        """Stack upward, moving to the next octave whenever a tone would descend."""
        placed = []
        previous = None
        for name in notes:
            if previous is not None and _midi(name, octave) < previous:
                octave += 1
            placed.append((name, octave))
            previous = _midi(name, octave)
        return placed

    def _open(self, notes: List[str], octave: int) -> List[Tuple[str, int]]:
        """Root and fifth at the bottom, the third moved above the fifth."""
        if len(notes) < 3:
            return self._close(notes, octave)
        return self._close([notes[0], notes[2], notes[1]] + notes[3:], octave)

    def _drop(self, notes: List[str], octave: int, from_top: int) -> List[Tuple[str, int]]:
        """Drop the n-th voice from the top an octave, listing it after the bass."""
        close = self._close(notes, octave)
        if len(close) < from_top + 1:
            return close
        index = len(close) - from_top
        name, note_octave = close[index]
        return [close[0], (name, note_octave - 1)] + close[1:index] + close[index + 1:]


def _midi(name: str, octave: int) -> int:
    note = Note.parse(name)
    return Note(note.letter, note.accidentals, octave).midi
