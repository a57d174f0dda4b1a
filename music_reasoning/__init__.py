"""Music Reasoning - Deterministic music theory analysis engine.

Architecture Layers:
    1. core/      - Note and key types, constants, error taxonomy
    2. inference/ - Musical understanding (chords, voicings, key, harmony, genre, scales)
    3. engine     - Module-level entry points
    4. cli        - Command line front end
"""

__version__ = "0.1.0"

# Core types
from .core import ErrorCode, Key, Mode, MusicTheoryError, Note

# Inference layer
from .inference import (
    ChordAnalyzer,
    ChordBuild,
    ChordBuilder,
    ChordIdentification,
    ChordSubstitution,
    GenreDetectionResult,
    GenreDetector,
    HarmonyAnalyzer,
    KeyDetector,
    KeyInfo,
    ProgressionAnalysis,
    ScaleGenerator,
    ScaleInfo,
)

# Entry points
from .engine import (
    analyze_progression,
    build_chord,
    clear_caches,
    detect_genre,
    detect_key,
    generate_voicing,
    get_scale,
    get_substitutions,
    identify,
)

__all__ = [
    # Core
    "ErrorCode",
    "Key",
    "Mode",
    "MusicTheoryError",
    "Note",
    # Inference
    "ChordAnalyzer",
    "ChordBuild",
    "ChordBuilder",
    "ChordIdentification",
    "ChordSubstitution",
    "GenreDetectionResult",
    "GenreDetector",
    "HarmonyAnalyzer",
    "KeyDetector",
    "KeyInfo",
    "ProgressionAnalysis",
    "ScaleGenerator",
    "ScaleInfo",
    # Entry points
    "identify",
    "analyze_progression",
    "detect_key",
    "detect_genre",
    "get_scale",
    "build_chord",
    "generate_voicing",
    "get_substitutions",
    "clear_caches",
]
