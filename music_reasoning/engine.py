"""Module-level entry points backed by default analyzers."""

from typing import List, Optional, Sequence

from .inference.chords import ChordAnalyzer, ChordIdentification, parse_chord_symbol
from .inference.genre import GenreDetectionResult, GenreDetector
from .inference.harmony import HarmonyAnalyzer, ProgressionAnalysis
from .inference.key import KeyDetector, KeyInfo
from .inference.scales import ScaleGenerator, ScaleInfo
from .inference.voicing import ChordBuild, ChordBuilder, ChordSubstitution

_chord_analyzer = ChordAnalyzer()
_key_detector = KeyDetector()
_genre_detector = GenreDetector(key_detector=_key_detector)
_harmony_analyzer = HarmonyAnalyzer(_key_detector, _genre_detector)
_scale_generator = ScaleGenerator()
_chord_builder = ChordBuilder()


def identify(notes: Sequence[str]) -> ChordIdentification:
    """Identify the chord formed by a set of note names."""
    return _chord_analyzer.identify(notes)


def analyze_progression(
    chords: Sequence[str],
    genre: Optional[str] = None,
) -> ProgressionAnalysis:
    """Analyze key, functions, cadences, patterns and genres of a progression."""
    return _harmony_analyzer.analyze(chords, genre=genre)


def detect_key(chords: Sequence[str]) -> KeyInfo:
    """Detect the key of a chord progression."""
    return _key_detector.detect(chords)


def detect_genre(
    chords: Sequence[str],
    genre: Optional[str] = None,
) -> List[GenreDetectionResult]:
    """Rank the genres whose characteristic patterns occur in a progression."""
    return _genre_detector.detect(chords, genre=genre)


def get_scale(root: str, scale_type: str) -> ScaleInfo:
    """Generate the notes, intervals and degrees of a scale."""
    return _scale_generator.get_scale(root, scale_type)


def build_chord(
    symbol: str,
    voicing: str = "close",
    octave: int = 4,
    enharmonic: str = "preserve",
) -> ChordBuild:
    """Spell a chord symbol with a voicing and common substitutions."""
    return _chord_builder.build(symbol, voicing=voicing, octave=octave, enharmonic=enharmonic)


def generate_voicing(
    symbol: str,
    voicing: str = "close",
    octave: int = 4,
    inversion: int = 0,
) -> List[str]:
    """Voice a chord symbol as notes with octave numbers."""
    return _chord_builder.generate_voicing(
        symbol, voicing=voicing, octave=octave, inversion=inversion
    )


def get_substitutions(symbol: str) -> List[ChordSubstitution]:
    """Suggest chords that can stand in for a chord symbol."""
    return _chord_builder.get_substitutions(symbol)


def clear_caches() -> None:
    """Drop memoised chord symbol parses."""
    parse_chord_symbol.cache_clear()
