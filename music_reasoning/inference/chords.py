"""Chord analysis - Identify chords from note sets and parse chord symbols.

Implements deterministic chord identification with:
- Template matching over every distinct pitch class as candidate root
- Graded scoring for exact, incomplete (subset) and extended (superset) matches
- Stable ranking so inversions and enharmonic spellings agree
- Chord symbol parsing with quality aliases and slash basses
- Roman numeral spelling of a chord in key context
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core import ErrorCode, Key, MusicTheoryError, Note, ROMAN_NUMERALS, parse_notes
from ..core.constants import CHROMATIC_DEGREES, LABEL_SEMITONES, SEMITONE_LABELS

logger = logging.getLogger(__name__)

# Tones that make an incomplete voicing recognisable (thirds and sevenths)
ANCHOR_TONES = frozenset({3, 4, 10, 11})

# Compound labels for tones added above a seventh or extended chord
EXTENSION_LABELS = {1: "m9", 2: "M9", 3: "A9", 5: "P11", 6: "A11", 8: "m13", 9: "M13"}


@dataclass(frozen=True)
class ChordTemplate:
    """A chord quality defined by its interval labels above the root."""

    name: str  # Quality name (e.g., "major", "dominant7")
    suffix: str  # Symbol suffix (e.g., "", "m", "7")
    labels: Tuple[str, ...]  # Interval labels in ascending semitone order
    family: str  # major, minor, dominant, diminished, augmented, suspended, power
    roman_suffix: str = ""  # Appended to the Roman numeral (e.g., "7", "maj7", "°")
    base_confidence: float = 1.0

    @property
    def intervals(self) -> Tuple[int, ...]:
        return tuple(LABEL_SEMITONES[label] for label in self.labels)

    @property
    def interval_set(self) -> FrozenSet[int]:
        return frozenset(self.intervals)

    @property
    def labels_by_semitone(self) -> Dict[int, str]:
        return dict(zip(self.intervals, self.labels))

    @property
    def size(self) -> int:
        return len(self.labels)

    @property
    def triad(self) -> Optional[str]:
        """Basic triad quality used for diatonic comparisons."""
        if self.family == "dominant":
            return "major"
        if self.family in ("suspended", "power"):
            return None
        return self.family

    @property
    def anchor_tones(self) -> FrozenSet[int]:
        """Tones an incomplete voicing must keep to still imply this chord."""
        if self.family == "suspended":
            return self.interval_set & {2, 5}
        if self.name == "diminished7":
            return frozenset({3, 9})
        return self.interval_set & ANCHOR_TONES

    @property
    def is_named_triad(self) -> bool:
        return self.name in ("major", "minor", "diminished", "augmented")

    @property
    def is_extended(self) -> bool:
        """True for sevenths and anything stacked above them."""
        return any(int(label[1:]) >= 7 for label in self.labels)

    def label_for(self, semitones: int) -> str:
        """Interval label of a tone, whether or not it belongs to the template."""
        label = self.labels_by_semitone.get(semitones)
        if label is not None:
            return label
        if self.is_extended and semitones in EXTENSION_LABELS:
            return EXTENSION_LABELS[semitones]
        return SEMITONE_LABELS[semitones]


# Ordered by specificity (more tones first), then by how common the quality is
CHORD_TEMPLATES: Tuple[ChordTemplate, ...] = (
    # Thirteenths
    ChordTemplate("major13", "maj13", ("P1", "M9", "M3", "P11", "P5", "M13", "M7"), "major", "maj13"),
    ChordTemplate("dominant13", "13", ("P1", "M9", "M3", "P11", "P5", "M13", "m7"), "dominant", "13"),
    ChordTemplate("minor13", "m13", ("P1", "M9", "m3", "P11", "P5", "M13", "m7"), "minor", "13"),
    # Elevenths
    ChordTemplate("major11", "maj11", ("P1", "M9", "M3", "P11", "P5", "M7"), "major", "maj11"),
    ChordTemplate("dominant11", "11", ("P1", "M9", "M3", "P11", "P5", "m7"), "dominant", "11"),
    ChordTemplate("minor11", "m11", ("P1", "M9", "m3", "P11", "P5", "m7"), "minor", "11"),
    # Ninths
    ChordTemplate("major9", "maj9", ("P1", "M9", "M3", "P5", "M7"), "major", "maj9"),
    ChordTemplate("dominant9", "9", ("P1", "M9", "M3", "P5", "m7"), "dominant", "9"),
    ChordTemplate("minor9", "m9", ("P1", "M9", "m3", "P5", "m7"), "minor", "9"),
    # Sevenths, sixths and added tones
    ChordTemplate("dominant7", "7", ("P1", "M3", "P5", "m7"), "dominant", "7"),
    ChordTemplate("major7", "maj7", ("P1", "M3", "P5", "M7"), "major", "maj7"),
    ChordTemplate("minor7", "m7", ("P1", "m3", "P5", "m7"), "minor", "7"),
    ChordTemplate("half_diminished7", "m7b5", ("P1", "m3", "d5", "m7"), "diminished", "ø7"),
    ChordTemplate("diminished7", "dim7", ("P1", "m3", "d5", "d7"), "diminished", "°7"),
    ChordTemplate("minor_major7", "mmaj7", ("P1", "m3", "P5", "M7"), "minor", "maj7"),
    ChordTemplate("augmented7", "7#5", ("P1", "M3", "A5", "m7"), "augmented", "+7"),
    ChordTemplate("major6", "6", ("P1", "M3", "P5", "M6"), "major", "6"),
    ChordTemplate("minor6", "m6", ("P1", "m3", "P5", "M6"), "minor", "6"),
    ChordTemplate("add9", "add9", ("P1", "M9", "M3", "P5"), "major", "add9"),
    ChordTemplate("minor_add9", "madd9", ("P1", "M9", "m3", "P5"), "minor", "add9"),
    # Triads
    ChordTemplate("major", "", ("P1", "M3", "P5"), "major"),
    ChordTemplate("minor", "m", ("P1", "m3", "P5"), "minor"),
    ChordTemplate("diminished", "dim", ("P1", "m3", "d5"), "diminished", "°"),
    ChordTemplate("augmented", "aug", ("P1", "M3", "A5"), "augmented", "+"),
    ChordTemplate("sus4", "sus4", ("P1", "P4", "P5"), "suspended", "sus4"),
    ChordTemplate("sus2", "sus2", ("P1", "M2", "P5"), "suspended", "sus2"),
    # Dyads
    ChordTemplate("power", "5", ("P1", "P5"), "power", "5", base_confidence=0.65),
)

TEMPLATES_BY_NAME: Dict[str, ChordTemplate] = {t.name: t for t in CHORD_TEMPLATES}

# Accepted spellings of each quality suffix in chord symbols
SUFFIX_ALIASES: Dict[str, str] = {
    "": "major", "M": "major", "maj": "major", "major": "major",
    "m": "minor", "min": "minor", "-": "minor", "minor": "minor",
    "dim": "diminished", "°": "diminished", "o": "diminished",
    "aug": "augmented", "+": "augmented", "#5": "augmented",
    "7": "dominant7", "dom7": "dominant7",
    "maj7": "major7", "M7": "major7", "Δ7": "major7", "Δ": "major7", "^7": "major7", "ma7": "major7",
    "m7": "minor7", "min7": "minor7", "-7": "minor7",
    "m7b5": "half_diminished7", "ø": "half_diminished7", "ø7": "half_diminished7",
    "min7b5": "half_diminished7", "-7b5": "half_diminished7",
    "dim7": "diminished7", "°7": "diminished7", "o7": "diminished7",
    "mmaj7": "minor_major7", "mMaj7": "minor_major7", "mM7": "minor_major7",
    "m(maj7)": "minor_major7", "minmaj7": "minor_major7",
    "7#5": "augmented7", "aug7": "augmented7", "+7": "augmented7",
    "6": "major6", "maj6": "major6", "M6": "major6",
    "m6": "minor6", "min6": "minor6",
    "add9": "add9", "add2": "add9", "(add9)": "add9",
    "madd9": "minor_add9", "m(add9)": "minor_add9",
    "9": "dominant9", "dom9": "dominant9",
    "maj9": "major9", "M9": "major9",
    "m9": "minor9", "min9": "minor9",
    "11": "dominant11", "maj11": "major11", "m11": "minor11", "min11": "minor11",
    "13": "dominant13", "maj13": "major13", "m13": "minor13", "min13": "minor13",
    "sus4": "sus4", "sus": "sus4", "sus2": "sus2",
    "5": "power",
}

CHORD_SYMBOL_PATTERN = re.compile(r"^([A-G](?:#+|b+)?)([^/]*)(?:/([A-G](?:#+|b+)?))?$")


@dataclass(frozen=True)
class ChordSymbol:
    """A parsed chord symbol (e.g., 'Dm7', 'G7', 'C/E')."""

    symbol: str
    root: str  # Root spelling (e.g., "Bb")
    root_pc: int
    template: ChordTemplate
    bass: Optional[str] = None

    @property
    def quality(self) -> str:
        return self.template.name

    @property
    def family(self) -> str:
        return self.template.family

    @property
    def triad(self) -> Optional[str]:
        return self.template.triad

    @property
    def pitch_classes(self) -> FrozenSet[int]:
        return frozenset((self.root_pc + i) % 12 for i in self.template.intervals)

    def degree_in(self, key: Key) -> Tuple[int, str]:
        """Scale degree of the root in a key and its accidental prefix."""
        degree = key.degree_of(self.root_pc)
        if degree is not None:
            return degree, ""
        return CHROMATIC_DEGREES[(self.root_pc - key.tonic) % 12]

    def get_roman_numeral(self, key: Key) -> str:
        """
        Get roman numeral representation in given key.

        Args:
            key: Key context

        Returns:
            Roman numeral (e.g., "IV", "ii7", "bVII", "vii°")
        """
        degree, accidental = self.degree_in(key)
        numeral = ROMAN_NUMERALS[degree - 1]

        # Lowercase for minor and diminished chords
        if self.family in ("minor", "diminished"):
            numeral = numeral.lower()

        return f"{accidental}{numeral}{self.template.roman_suffix}"


@lru_cache(maxsize=512)
def parse_chord_symbol(symbol: str) -> ChordSymbol:
    """Parse a chord symbol, raising INVALID_CHORD when it is not understood."""
    match = CHORD_SYMBOL_PATTERN.match(symbol.strip()) if isinstance(symbol, str) else None
    quality = SUFFIX_ALIASES.get(match.group(2)) if match else None
    if quality is None:
        raise MusicTheoryError(
            ErrorCode.INVALID_CHORD,
            f"Invalid chord symbol: {symbol!r}",
            details={"chord": symbol},
            suggestion="Use a root A-G with optional accidentals and a known quality, e.g. 'Dm7'",
        )
    root, _, bass = match.groups()
    return ChordSymbol(
        symbol=symbol.strip(),
        root=root,
        root_pc=Note.parse(root).pitch_class,
        template=TEMPLATES_BY_NAME[quality],
        bass=bass,
    )


def parse_progression(symbols: Sequence[str]) -> List[ChordSymbol]:
    """Parse a chord sequence, reporting every invalid symbol together."""
    parsed = []
    invalid = []
    for symbol in symbols:
        try:
            parsed.append(parse_chord_symbol(symbol))
        except MusicTheoryError:
            invalid.append(symbol)
    if invalid:
        raise MusicTheoryError(
            ErrorCode.INVALID_CHORD,
            f"Invalid chord symbol(s): {', '.join(str(s) for s in invalid)}",
            details={"invalid": invalid},
            suggestion="Use a root A-G with optional accidentals and a known quality, e.g. 'Dm7'",
        )
    return parsed


@dataclass(frozen=True)
class ChordIdentification:
    """Result of identifying a chord from a set of notes."""

    chord: str  # Display name (e.g., "C major", "G7")
    symbol: str  # Chord symbol (e.g., "C", "G7")
    root: str
    quality: str
    notes: List[str] = field(default_factory=list)  # Distinct input spellings, in input order
    intervals: List[str] = field(default_factory=list)  # Aligned with notes
    degrees: List[int] = field(default_factory=list)  # Aligned with notes
    alternatives: List[str] = field(default_factory=list)  # Primary symbol first
    confidence: float = 1.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ChordMatchConfig:
    """Configuration for chord template matching.

    Attributes:
        subset_base: Starting confidence for an incomplete voicing
        missing_tone_penalty: Confidence lost per template tone absent from the input
        dyad_penalty: Extra confidence lost when only two tones are present
        superset_base: Starting confidence when the input adds tones to a template
        extra_tone_penalty: Confidence lost per added tone
        max_missing_tones: Most template tones an incomplete voicing may omit
        max_extra_tones: Most added tones a superset match may carry
        max_subset_size: Largest input treated as a possibly incomplete voicing
        min_confidence: Matches below this are discarded
        max_alternatives: Length cap of the alternatives list (primary included)
    """
    subset_base: float = 0.9
    missing_tone_penalty: float = 0.12
    dyad_penalty: float = 0.15
    superset_base: float = 0.9
    extra_tone_penalty: float = 0.15
    max_missing_tones: int = 2
    max_extra_tones: int = 2
    max_subset_size: int = 3
    min_confidence: float = 0.3
    max_alternatives: int = 5


@dataclass(frozen=True)
class ChordCandidate:
    """A candidate chord with its confidence score."""
    root: Note
    root_index: int  # Position of the root among the distinct input notes
    template: ChordTemplate
    template_index: int
    match: str  # "exact", "subset" or "superset"
    confidence: float

    @property
    def symbol(self) -> str:
        return f"{self.root.name}{self.template.suffix}"

    @property
    def rank_key(self) -> Tuple[float, int, int, int]:
        return (-self.confidence, -self.template.size, self.root_index, self.template_index)


class ChordAnalyzer:
    """Identify chords from unordered note sets.

    Every distinct pitch class is tried as a root against every template;
    exact matches win over incomplete or extended readings, and ties go to
    the more specific template, then the root heard first.
    """

    def __init__(self, config: Optional[ChordMatchConfig] = None):
        """
        Initialize ChordAnalyzer.

        Args:
            config: Matching thresholds and penalties (defaults if None)
        """
        self.config = config or ChordMatchConfig()

    def identify(self, notes: Sequence[str]) -> ChordIdentification:
        """
        Identify the chord formed by a set of notes.

        Args:
            notes: Note tokens (e.g., ["C", "E", "G"]); order and octave are ignored

        Returns:
            ChordIdentification for the best-ranked reading
        """
        notes = list(notes or [])
        if len(notes) < 2:
            raise MusicTheoryError(
                ErrorCode.INSUFFICIENT_NOTES,
                "At least 2 notes are required to identify a chord",
                details={"received": len(notes)},
            )

        distinct = self._distinct_notes(parse_notes(notes))
        if len(distinct) < 2:
            raise MusicTheoryError(
                ErrorCode.INSUFFICIENT_NOTES,
                "At least 2 distinct pitch classes are required to identify a chord",
                details={"received": len(distinct)},
            )

        candidates = sorted(self._get_chord_candidates(distinct), key=lambda c: c.rank_key)
        logger.debug("identify %s: %d candidate readings", notes, len(candidates))

        if not candidates:
            raise MusicTheoryError(
                ErrorCode.CHORD_NOT_FOUND,
                f"No chord matches the notes {', '.join(n.spelling for n in distinct)}",
                details={"notes": [n.spelling for n in distinct]},
            )

        return self._build_identification(candidates[0], candidates, distinct)

    def _distinct_notes(self, notes: List[Note]) -> List[Note]:
        """Drop repeated pitch classes, keeping the first spelling."""
        seen = set()
        distinct = []
        for note in notes:
            if note.pitch_class not in seen:
                seen.add(note.pitch_class)
                distinct.append(note)
        return distinct

    def _get_chord_candidates(self, distinct: List[Note]) -> List[ChordCandidate]:
        candidates = []
        for root_index, root in enumerate(distinct):
            intervals = frozenset((n.pitch_class - root.pitch_class) % 12 for n in distinct)
            for template_index, template in enumerate(CHORD_TEMPLATES):
                scored = self._score_chord_match(intervals, template)
                if scored is None:
                    continue
                match, confidence = scored
                if confidence < self.config.min_confidence:
                    continue
                candidates.append(ChordCandidate(
                    root=root,
                    root_index=root_index,
                    template=template,
                    template_index=template_index,
                    match=match,
                    confidence=round(confidence, 3),
                ))
        return candidates

    def _score_chord_match(
        self,
        intervals: FrozenSet[int],
        template: ChordTemplate,
    ) -> Optional[Tuple[str, float]]:
        """
        Score how well an interval set matches a chord template.

        Returns:
            (match kind, confidence) or None if the template does not apply
        """
        cfg = self.config
        template_set = template.interval_set

        if intervals == template_set:
            return "exact", template.base_confidence

        if intervals < template_set:
            missing = len(template_set - intervals)
            if len(intervals) > cfg.max_subset_size or missing > cfg.max_missing_tones:
                return None
            if not intervals & template.anchor_tones:
                return None
            confidence = cfg.subset_base - cfg.missing_tone_penalty * missing
            if len(intervals) == 2:
                confidence -= cfg.dyad_penalty
            return "subset", confidence

        if intervals > template_set:
            extra = len(intervals - template_set)
            if template.size < 3 or extra > cfg.max_extra_tones:
                return None
            return "superset", cfg.superset_base - cfg.extra_tone_penalty * extra

        return None

    def _build_identification(
        self,
        best: ChordCandidate,
        ranked: List[ChordCandidate],
        distinct: List[Note],
    ) -> ChordIdentification:
        root_pc = best.root.pitch_class
        intervals = [
            best.template.label_for((note.pitch_class - root_pc) % 12)
            for note in distinct
        ]
        logger.debug("identify -> %s (%s match, %.3f)", best.symbol, best.match, best.confidence)

        alternatives = []
        for candidate in ranked:
            if candidate.symbol not in alternatives:
                alternatives.append(candidate.symbol)
            if len(alternatives) >= self.config.max_alternatives:
                break

        if best.template.is_named_triad:
            name = f"{best.root.name} {best.template.name}"
        else:
            name = best.symbol

        return ChordIdentification(
            chord=name,
            symbol=best.symbol,
            root=best.root.name,
            quality=best.template.name,
            notes=[n.spelling for n in distinct],
            intervals=intervals,
            degrees=[int(label[1:]) for label in intervals],
            alternatives=alternatives,
            confidence=best.confidence,
        )
