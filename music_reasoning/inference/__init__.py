"""Inference layer - Musical understanding from symbols.

This layer builds higher-level musical understanding from note names and
chord symbols:
- Chord identification from note sets and chord symbol parsing
- Key detection (tonal center of a progression)
- Harmony analysis (Roman numerals, functions, cadences, mixture)
- Genre detection from characteristic progressions
- Scale generation
- Chord building (spelling, voicings, substitutions)

Pipeline: Chord symbols → [Key, Roman numerals] → [Harmony, Genre] → ProgressionAnalysis
"""

from .chords import (
    ChordAnalyzer,
    ChordIdentification,
    ChordMatchConfig,
    ChordSymbol,
    ChordTemplate,
    CHORD_TEMPLATES,
    parse_chord_symbol,
    parse_progression,
)
from .key import KeyDetector, KeyDetectionConfig, KeyInfo, KeyCandidate
from .genre import (
    GenreDetector,
    GenreDetectionResult,
    GenreMatchConfig,
    GenrePattern,
    GENRE_PATTERNS,
    GENRES,
)
from .harmony import (
    HarmonyAnalyzer,
    ProgressionAnalysis,
    ChordAnalysis,
    Cadence,
    CadenceType,
    Pattern,
    BorrowedChord,
    SecondaryDominant,
    HarmonicFunction,
)
from .scales import ScaleGenerator, ScaleInfo, ScaleDegree, SCALE_DEFINITIONS
from .voicing import (
    ChordBuilder,
    ChordBuild,
    ChordVoicing,
    ChordSubstitution,
    VOICING_TYPES,
)

__all__ = [
    # Chord analysis
    "ChordAnalyzer",
    "ChordIdentification",
    "ChordMatchConfig",
    "ChordSymbol",
    "ChordTemplate",
    "CHORD_TEMPLATES",
    "parse_chord_symbol",
    "parse_progression",
    # Key detection
    "KeyDetector",
    "KeyDetectionConfig",
    "KeyInfo",
    "KeyCandidate",
    # Genre detection
    "GenreDetector",
    "GenreDetectionResult",
    "GenreMatchConfig",
    "GenrePattern",
    "GENRE_PATTERNS",
    "GENRES",
    # Harmony analysis
    "HarmonyAnalyzer",
    "ProgressionAnalysis",
    "ChordAnalysis",
    "Cadence",
    "CadenceType",
    "Pattern",
    "BorrowedChord",
    "SecondaryDominant",
    "HarmonicFunction",
    # Scales
    "ScaleGenerator",
    "ScaleInfo",
    "ScaleDegree",
    "SCALE_DEFINITIONS",
    # Chord building
    "ChordBuilder",
    "ChordBuild",
    "ChordVoicing",
    "ChordSubstitution",
    "VOICING_TYPES",
]
