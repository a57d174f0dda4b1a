"""Harmony analysis - Integrated progression analysis system.

Implements functional harmony analysis with:
- Integration of key detection and chord symbol parsing
- Roman numeral and harmonic function labelling
- Modal mixture (borrowed chord) detection
- Secondary dominant detection
- Cadence and common progression pattern detection
- Genre suggestions from characteristic patterns
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..core import ErrorCode, Key, MusicTheoryError, ROMAN_NUMERALS
from .chords import ChordSymbol, parse_progression
from .genre import GenreDetectionResult, GenreDetector, GenrePattern
from .key import KeyDetector, KeyInfo, is_harmonic_minor_chord

logger = logging.getLogger(__name__)


class HarmonicFunction(str, Enum):
    """Role of a chord relative to the tonic."""
    TONIC = "tonic"
    SUBDOMINANT = "subdominant"
    DOMINANT = "dominant"
    DECEPTIVE = "deceptive"
    PASSING = "passing"


class CadenceType(str, Enum):
    """Cadence types, in detection priority order."""
    AUTHENTIC = "authentic"
    PLAGAL = "plagal"
    DECEPTIVE = "deceptive"
    HALF = "half"


DEGREE_FUNCTIONS = {
    1: HarmonicFunction.TONIC,
    2: HarmonicFunction.PASSING,
    3: HarmonicFunction.PASSING,
    4: HarmonicFunction.SUBDOMINANT,
    5: HarmonicFunction.DOMINANT,
    6: HarmonicFunction.DECEPTIVE,
    7: HarmonicFunction.PASSING,
}

# (name, Roman numeral sequence, type, popularity)
COMMON_PATTERNS: Tuple[Tuple[str, Tuple[str, ...], str, str], ...] = (
    # Authentic cadence progressions
    ("I-IV-V-I", ("I", "IV", "V", "I"), "authentic cadence progression", "very common"),
    ("I-V-I", ("I", "V", "I"), "authentic cadence progression", "very common"),
    ("I-IV-I-V-I", ("I", "IV", "I", "V", "I"), "authentic cadence progression", "common"),
    # Jazz turnarounds
    ("ii-V-I", ("ii", "V", "I"), "jazz turnaround", "very common"),
    ("ii7-V7-I", ("ii7", "V7", "I"), "jazz turnaround", "very common"),
    ("ii7-V7-Imaj7", ("ii7", "V7", "Imaj7"), "jazz turnaround", "very common"),
    ("I-vi-ii-V", ("I", "vi", "ii", "V"), "jazz turnaround", "very common"),
    ("iii-VI-ii-V", ("iii", "VI", "ii", "V"), "jazz turnaround", "common"),
    # Popular progressions
    ("I-V-vi-IV", ("I", "V", "vi", "IV"), "popular progression", "very common"),
    ("vi-IV-I-V", ("vi", "IV", "I", "V"), "popular progression", "very common"),
    ("I-vi-IV-V", ("I", "vi", "IV", "V"), "popular progression", "very common"),
    ("I-IV-vi-V", ("I", "IV", "vi", "V"), "popular progression", "common"),
    # Minor key progressions
    ("i-iv-V", ("i", "iv", "V"), "minor key progression", "very common"),
    ("i-VI-III-VII", ("i", "VI", "III", "VII"), "minor key progression", "very common"),
    ("i-VII-VI-V", ("i", "VII", "VI", "V"), "minor key progression", "common"),
    # Classical and deceptive
    ("I-ii-V-I", ("I", "ii", "V", "I"), "classical progression", "common"),
    ("I-IV-V-vi", ("I", "IV", "V", "vi"), "deceptive cadence progression", "common"),
)

EXTENSION_PATTERN = re.compile(r"maj13|maj11|maj9|maj7|add9|sus[24]|13|11|9|7|6|5")


def strip_extensions(roman: str) -> str:
    """Drop numeric extensions but keep case, accidentals and quality marks."""
    return EXTENSION_PATTERN.sub("", roman)


@dataclass(frozen=True)
class ChordAnalysis:
    """Functional analysis of one chord in its key."""
    chord: str  # Chord symbol as given
    roman: str  # e.g., "ii7", "bVII", "vii°"
    quality: str  # Chord family: major, minor, dominant, diminished, ...
    degree: int  # 1-7
    function: HarmonicFunction
    borrowed: bool = False
    borrowed_from: Optional[str] = None
    secondary_dominant: Optional[str] = None  # e.g., "V7/vi"


@dataclass(frozen=True)
class Cadence:
    """A cadential motion between two adjacent chords."""
    type: CadenceType
    chords: List[str]  # [from, to]
    strength: str  # "strong" or "weak"
    position: int  # Index of the first chord


@dataclass(frozen=True)
class Pattern:
    """A named progression found in the sequence."""
    name: str
    type: str
    popularity: str


@dataclass(frozen=True)
class BorrowedChord:
    """A chord taken from the parallel mode."""
    chord: str
    borrowed_from: str  # e.g., "C minor"
    function: HarmonicFunction


@dataclass(frozen=True)
class SecondaryDominant:
    """A dominant seventh tonicizing a non-tonic degree."""
    chord: str
    roman_notation: str  # e.g., "V7/V"
    target_degree: int
    target_chord: Optional[str] = None  # Next chord when it resolves to the target


@dataclass(frozen=True)
class ProgressionAnalysis:
    """Container for progression analysis results."""

    key: str  # e.g., "C major"
    confidence: float
    analysis: List[ChordAnalysis] = field(default_factory=list)
    patterns: List[Pattern] = field(default_factory=list)
    genre_patterns: List[GenrePattern] = field(default_factory=list)
    suggested_genres: List[GenreDetectionResult] = field(default_factory=list)
    borrowed_chords: List[BorrowedChord] = field(default_factory=list)
    secondary_dominants: List[SecondaryDominant] = field(default_factory=list)
    cadences: List[Cadence] = field(default_factory=list)
    loopable: bool = False
    key_info: Optional[KeyInfo] = None

    @property
    def roman_numerals(self) -> List[str]:
        """Get roman numeral analysis."""
        return [a.roman for a in self.analysis]

    @property
    def chord_symbols(self) -> List[str]:
        return [a.chord for a in self.analysis]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["key_info"] = self.key_info.to_dict() if self.key_info else None
        return data


class HarmonyAnalyzer:
    """Integrated harmony analysis system.

    Combines key detection, Roman numeral labelling and pattern matching
    into a single ProgressionAnalysis. All stages are deterministic.
    """

    def __init__(
        self,
        key_detector: Optional[KeyDetector] = None,
        genre_detector: Optional[GenreDetector] = None,
    ):
        """
        Initialize HarmonyAnalyzer.

        Args:
            key_detector: Key detector (defaults if None)
            genre_detector: Genre detector (defaults if None, sharing the key detector)
        """
        self.key_detector = key_detector or KeyDetector()
        self.genre_detector = genre_detector or GenreDetector(key_detector=self.key_detector)

    def analyze(
        self,
        chord_symbols: Sequence[str],
        genre: Optional[str] = None,
    ) -> ProgressionAnalysis:
        """
        Perform full progression analysis.

        Args:
            chord_symbols: Chord symbols (at least 2)
            genre: Optional genre hint for genre suggestions

        Returns:
            ProgressionAnalysis for the detected key
        """
        chord_symbols = list(chord_symbols or [])
        if len(chord_symbols) < 2:
            raise MusicTheoryError(
                ErrorCode.INSUFFICIENT_NOTES,
                "At least 2 chords are required to analyze a progression",
                details={"received": len(chord_symbols)},
            )

        chords = parse_progression(chord_symbols)
        key_info = self.key_detector.detect_from_chords(chords)
        key = key_info.key

        analysis = [self.analyze_chord(chord, key) for chord in chords]
        suggested = self.genre_detector.detect_from_chords(chords, key, genre)
        genre_patterns = [p for result in suggested for p in result.matched_patterns]

        logger.debug(
            "%s in %s: %s",
            "-".join(chord_symbols), key.name, "-".join(a.roman for a in analysis),
        )

        return ProgressionAnalysis(
            key=key.name,
            confidence=key_info.confidence,
            analysis=analysis,
            patterns=self.find_patterns([a.roman for a in analysis]),
            genre_patterns=genre_patterns,
            suggested_genres=suggested,
            borrowed_chords=[
                BorrowedChord(a.chord, a.borrowed_from, a.function)
                for a in analysis if a.borrowed
            ],
            secondary_dominants=self._secondary_dominants(chords, analysis, key),
            cadences=self.identify_cadences(chords, key),
            loopable=self._is_loopable(chords, key),
            key_info=key_info,
        )

    def analyze_chord(self, chord: ChordSymbol, key: Key) -> ChordAnalysis:
        """Label one chord with its Roman numeral, function and color."""
        degree, _ = chord.degree_in(key)
        parallel = self._borrowed_from(chord, key)
        secondary = self._secondary_target(chord, key)
        return ChordAnalysis(
            chord=chord.symbol,
            roman=chord.get_roman_numeral(key),
            quality=chord.family,
            degree=degree,
            function=DEGREE_FUNCTIONS[degree],
            borrowed=parallel is not None,
            borrowed_from=parallel.name if parallel else None,
            secondary_dominant=f"V7/{secondary[1]}" if secondary else None,
        )

    def _borrowed_from(self, chord: ChordSymbol, key: Key) -> Optional[Key]:
        """Parallel key that explains a chord the home key does not."""
        if chord.triad is None or is_harmonic_minor_chord(chord, key):
            return None

        degree = key.degree_of(chord.root_pc)
        if degree is not None and key.expected_quality(degree) == chord.triad:
            return None

        parallel = key.parallel
        parallel_degree = parallel.degree_of(chord.root_pc)
        if parallel_degree is None:
            return None
        if parallel.expected_quality(parallel_degree) == chord.triad:
            return parallel
        return None

    def _secondary_target(self, chord: ChordSymbol, key: Key) -> Optional[Tuple[int, str]]:
        """Degree and numeral a dominant seventh points to, unless it is the tonic."""
        if chord.family != "dominant":
            return None
        target_pc = (chord.root_pc - 7) % 12
        degree = key.degree_of(target_pc)
        if degree is None or degree == 1:
            return None

        numeral = ROMAN_NUMERALS[degree - 1]
        quality = key.expected_quality(degree)
        if quality in ("minor", "diminished"):
            numeral = numeral.lower()
        if quality == "diminished":
            numeral += "°"
        return degree, numeral

    def _secondary_dominants(
        self,
        chords: Sequence[ChordSymbol],
        analysis: Sequence[ChordAnalysis],
        key: Key,
    ) -> List[SecondaryDominant]:
        secondaries = []
        for i, (chord, item) in enumerate(zip(chords, analysis)):
            if item.secondary_dominant is None:
                continue
            target_degree, _ = self._secondary_target(chord, key)
            target_chord = None
            if i + 1 < len(chords):
                following = chords[i + 1]
                if following.root_pc == (chord.root_pc - 7) % 12:
                    target_chord = following.symbol
            secondaries.append(SecondaryDominant(
                chord=chord.symbol,
                roman_notation=item.secondary_dominant,
                target_degree=target_degree,
                target_chord=target_chord,
            ))
        return secondaries

    def identify_cadences(
        self,
        chords: Sequence[ChordSymbol],
        key: Key,
    ) -> List[Cadence]:
        """
        Identify cadences between adjacent chords with diatonic roots.

        Returns:
            Cadences in order of appearance, at most one per chord pair
        """
        degrees = []
        for chord in chords:
            degree, accidental = chord.degree_in(key)
            degrees.append(None if accidental else degree)

        cadences = []
        for i in range(len(chords) - 1):
            current, following = degrees[i], degrees[i + 1]
            if current is None or following is None:
                continue

            if current == 5 and following == 1:
                cadence_type, strength = CadenceType.AUTHENTIC, "strong"
            elif current == 4 and following == 1:
                cadence_type, strength = CadenceType.PLAGAL, "weak"
            elif current == 5 and following == 6:
                cadence_type, strength = CadenceType.DECEPTIVE, "weak"
            elif following == 5 and current != 5:
                cadence_type, strength = CadenceType.HALF, "weak"
            else:
                continue

            cadences.append(Cadence(
                type=cadence_type,
                chords=[chords[i].symbol, chords[i + 1].symbol],
                strength=strength,
                position=i,
            ))
        return cadences

    def find_patterns(self, romans: Sequence[str]) -> List[Pattern]:
        """Find common named progressions as contiguous runs, each reported once."""
        normalized = [strip_extensions(r) for r in romans]
        found = []
        for name, sequence, kind, popularity in COMMON_PATTERNS:
            target = [strip_extensions(r) for r in sequence]
            span = len(target)
            for start in range(len(normalized) - span + 1):
                if normalized[start:start + span] == target:
                    found.append(Pattern(name=name, type=kind, popularity=popularity))
                    break
        return found

    def _is_loopable(self, chords: Sequence[ChordSymbol], key: Key) -> bool:
        """A progression loops when it starts on the tonic and ends on tonic or dominant."""
        first = chords[0].degree_in(key)
        last = chords[-1].degree_in(key)
        return first == (1, "") and last in ((1, ""), (5, ""))
