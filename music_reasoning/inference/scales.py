"""Scale generation - Notes, intervals and degrees of named scales.

Implements table-driven scale construction with:
- Whole/half step formulas for diatonic, modal, pentatonic, blues and symmetric scales
- Letter-aware note spelling driven by interval labels
- Degree naming (tonic ... leading tone / subtonic)
- Relative and parallel keys for major and minor scales
- Modal rotations of the diatonic scales
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core import ErrorCode, MusicTheoryError, Note
from ..core.constants import SEMITONE_LABELS
from ..core.note import letter_after, spell_on_letter

logger = logging.getLogger(__name__)

STEP_SIZES = {"H": 1, "W": 2, "W+H": 3}

# Semitones of each degree of the major scale, reference for heptatonic labels
MAJOR_REFERENCE = (0, 2, 4, 5, 7, 9, 11)
PERFECT_DEGREES = (1, 4, 5)

DEGREE_NAMES = ("tonic", "supertonic", "mediant", "subdominant", "dominant", "submediant")
ORDINAL_NAMES = (
    "first", "second", "third", "fourth", "fifth", "sixth",
    "seventh", "eighth", "ninth", "tenth", "eleventh", "twelfth",
)

MODAL_ORDER = ("ionian", "dorian", "phrygian", "lydian", "mixolydian", "aeolian", "locrian")


@dataclass(frozen=True)
class ScaleDefinition:
    """A scale type and its step formula."""
    type: str
    formula: str  # e.g., "W-W-H-W-W-W-H"
    aliases: Tuple[str, ...] = ()
    mode: Optional[str] = None  # Position in the diatonic modal cycle

    @property
    def steps(self) -> Tuple[int, ...]:
        return tuple(STEP_SIZES[step] for step in self.formula.split("-"))

    @property
    def offsets(self) -> Tuple[int, ...]:
        """Semitones above the root of each scale note."""
        offsets = [0]
        for step in self.steps[:-1]:
            offsets.append(offsets[-1] + step)
        return tuple(offsets)


SCALE_DEFINITIONS: Tuple[ScaleDefinition, ...] = (
    ScaleDefinition("major", "W-W-H-W-W-W-H", ("maj", "ionian"), mode="ionian"),
    ScaleDefinition("minor", "W-H-W-W-H-W-W", ("min", "natural minor", "aeolian"), mode="aeolian"),
    ScaleDefinition("harmonic minor", "W-H-W-W-H-W+H-H", ("harmonic",)),
    ScaleDefinition("melodic minor", "W-H-W-W-W-W-H", ("jazz minor", "melodic")),
    ScaleDefinition("dorian", "W-H-W-W-W-H-W", mode="dorian"),
    ScaleDefinition("phrygian", "H-W-W-W-H-W-W", mode="phrygian"),
    ScaleDefinition("lydian", "W-W-W-H-W-W-H", mode="lydian"),
    ScaleDefinition("mixolydian", "W-W-H-W-W-H-W", mode="mixolydian"),
    ScaleDefinition("locrian", "H-W-W-H-W-W-W", mode="locrian"),
    ScaleDefinition("major pentatonic", "W-W-W+H-W-W+H", ("pentatonic",)),
    ScaleDefinition("minor pentatonic", "W+H-W-W-W+H-W"),
    ScaleDefinition("blues", "W+H-W-H-H-W+H-W", ("minor blues",)),
    ScaleDefinition("major blues", "W-H-H-W+H-W-W+H"),
    ScaleDefinition("whole tone", "W-W-W-W-W-W", ("whole",)),
    ScaleDefinition(
        "diminished", "W-H-W-H-W-H-W-H",
        ("octatonic", "whole half diminished"),
    ),
    ScaleDefinition(
        "half whole diminished", "H-W-H-W-H-W-H-W",
        ("dominant diminished",),
    ),
    ScaleDefinition("chromatic", "H-H-H-H-H-H-H-H-H-H-H-H"),
)

SCALE_TYPES: Dict[str, ScaleDefinition] = {}
for _definition in SCALE_DEFINITIONS:
    SCALE_TYPES[_definition.type] = _definition
    for _alias in _definition.aliases:
        SCALE_TYPES[_alias] = _definition

MINOR_FAMILY = ("minor", "harmonic minor", "melodic minor")


def normalize_scale_type(scale_type: str) -> str:
    """Lowercase and unify separators ('Harmonic_Minor' -> 'harmonic minor')."""
    cleaned = scale_type.lower().replace("_", " ").replace("-", " ")
    return " ".join(cleaned.split())


@dataclass(frozen=True)
class ScaleDegree:
    """One note of a scale with its degree number and name."""
    note: str
    degree: int
    name: str


@dataclass(frozen=True)
class ScaleInfo:
    """Container for scale generation results."""

    scale: str  # e.g., "C major"
    root: str
    type: str
    notes: List[str] = field(default_factory=list)
    intervals: List[str] = field(default_factory=list)
    degrees: List[ScaleDegree] = field(default_factory=list)
    formula: str = ""
    relative_minor: Optional[str] = None
    relative_major: Optional[str] = None
    parallel_minor: Optional[str] = None
    parallel_major: Optional[str] = None
    modes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class ScaleGenerator:
    """Build scales from a root and a scale type name."""

    def get_scale(self, root: str, scale_type: str) -> ScaleInfo:
        """
        Generate a scale.

        Args:
            root: Root note (e.g., "C", "F#", "Bb")
            scale_type: Scale type or alias (e.g., "major", "harmonic minor", "aeolian")

        Returns:
            ScaleInfo with notes, intervals, degrees and relationships
        """
        tonic = self._parse_root(root)
        definition = self._lookup(scale_type)

        intervals = self._interval_labels(definition)
        notes = [
            spell_on_letter(
                (tonic.pitch_class + offset) % 12,
                letter_after(tonic.letter, int(label[1:]) - 1),
            )
            for offset, label in zip(definition.offsets, intervals)
        ]
        logger.debug("%s %s -> %s", tonic.name, definition.type, notes)

        relationships = self._relationships(definition, notes)
        return ScaleInfo(
            scale=f"{tonic.name} {definition.type}",
            root=tonic.name,
            type=definition.type,
            notes=notes,
            intervals=intervals,
            degrees=self._degrees(definition, notes),
            formula=definition.formula,
            modes=self._modes(definition, notes),
            **relationships,
        )

    def _parse_root(self, root: str) -> Note:
        try:
            return Note.parse(root)
        except MusicTheoryError as e:
            raise MusicTheoryError(
                ErrorCode.INVALID_ROOT,
                f"Invalid root note: {root!r}",
                details={"root": root},
                suggestion="Use a letter A-G with optional '#' or 'b' accidentals",
            ) from e

    def _lookup(self, scale_type: str) -> ScaleDefinition:
        name = normalize_scale_type(scale_type) if isinstance(scale_type, str) else ""
        definition = SCALE_TYPES.get(name)
        if definition is None:
            raise MusicTheoryError(
                ErrorCode.INVALID_SCALE_TYPE,
                f"Unknown scale type: {scale_type!r}",
                details={"scale_type": scale_type, "accepted": [d.type for d in SCALE_DEFINITIONS]},
            )
        if sum(definition.steps) != 12:
            raise MusicTheoryError(
                ErrorCode.INTERNAL_ERROR,
                f"Scale formula for {definition.type!r} does not span an octave",
                details={"formula": definition.formula},
            )
        return definition

    def _interval_labels(self, definition: ScaleDefinition) -> List[str]:
        """Interval label of each scale note above the root."""
        offsets = definition.offsets
        if len(offsets) == 7:
            labels = [self._heptatonic_label(d + 1, o) for d, o in enumerate(offsets)]
        else:
            labels = [SEMITONE_LABELS[o] for o in offsets]

        if len(labels) != len(offsets) or None in labels:
            raise MusicTheoryError(
                ErrorCode.INTERNAL_ERROR,
                f"Interval labels for {definition.type!r} do not fit its formula",
                details={"formula": definition.formula, "labels": labels},
            )
        return labels

    def _heptatonic_label(self, degree: int, semitones: int) -> Optional[str]:
        diff = semitones - MAJOR_REFERENCE[degree - 1]
        if degree in PERFECT_DEGREES:
            quality = {-1: "d", 0: "P", 1: "A"}.get(diff)
        else:
            quality = {-2: "d", -1: "m", 0: "M", 1: "A"}.get(diff)
        return f"{quality}{degree}" if quality else None

    def _degrees(self, definition: ScaleDefinition, notes: List[str]) -> List[ScaleDegree]:
        if len(notes) != 7:
            return [
                ScaleDegree(note=n, degree=i + 1, name=ORDINAL_NAMES[i])
                for i, n in enumerate(notes)
            ]
        seventh = "leading tone" if definition.offsets[6] == 11 else "subtonic"
        names = DEGREE_NAMES + (seventh,)
        return [ScaleDegree(note=n, degree=i + 1, name=names[i]) for i, n in enumerate(notes)]

    def _relationships(self, definition: ScaleDefinition, notes: List[str]) -> Dict[str, str]:
        if definition.type == "major":
            return {
                "relative_minor": f"{notes[5]} minor",
                "parallel_minor": f"{notes[0]} minor",
            }
        # Only the natural minor shares its key signature with a major scale
        if definition.type == "minor":
            return {
                "relative_major": f"{notes[2]} major",
                "parallel_major": f"{notes[0]} major",
            }
        if definition.type in MINOR_FAMILY:
            return {"parallel_major": f"{notes[0]} major"}
        return {}

    def _modes(self, definition: ScaleDefinition, notes: List[str]) -> List[str]:
        """Names of the seven modal rotations, starting on the root."""
        if definition.mode is None:
            return []
        start = MODAL_ORDER.index(definition.mode)
        return [f"{note} {MODAL_ORDER[(start + i) % 7]}" for i, note in enumerate(notes)]
