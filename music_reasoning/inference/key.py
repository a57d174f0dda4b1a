"""Key detection - Identify the tonal center of a chord progression.

Implements diatonic-fit key detection with:
- Expected triad qualities derived from the major/natural minor step patterns
- Degree weighting (tonic and dominant count more than passing chords)
- Harmonic-minor tolerance for the raised dominant and leading-tone chords
- Deterministic tie-breaking and ambiguity scoring
- Relative and parallel key reporting
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core import ErrorCode, Key, Mode, MusicTheoryError, all_keys
from .chords import ChordSymbol, parse_progression

logger = logging.getLogger(__name__)


def is_harmonic_minor_chord(chord: ChordSymbol, key: Key) -> bool:
    """True for the major V and leading-tone vii° that harmonic minor supplies."""
    if key.mode is not Mode.MINOR:
        return False
    interval = (chord.root_pc - key.tonic) % 12
    if interval == 7:
        return chord.triad == "major"
    if interval == 11:
        return chord.triad == "diminished"
    return False


def fits_key(chord: ChordSymbol, key: Key, harmonic_minor: bool = True) -> bool:
    """Check whether a chord's root and basic quality belong to a key."""
    degree = key.degree_of(chord.root_pc)
    if degree is not None:
        expected = key.expected_quality(degree)
        if chord.triad is None:
            # Suspended and power chords fit any degree with a perfect fifth
            if expected in ("major", "minor"):
                return True
        elif chord.triad == expected:
            return True
    return harmonic_minor and is_harmonic_minor_chord(chord, key)


@dataclass
class KeyDetectionConfig:
    """Configuration for key detection.

    Attributes:
        degree_weights: Score contributed by a fitting chord on each degree
        default_weight: Score for fitting chords on degrees not listed above
        harmonic_minor: Accept V and vii° from harmonic minor in minor keys
        min_confidence: Below this the result is reported as low confidence
        strict: Raise KEY_NOT_DETECTED instead of returning a low-confidence key
        ambiguity_threshold: Score gap under which runner-up keys count as close
        max_alternatives: Number of runner-up keys reported
    """
    degree_weights: Dict[int, float] = field(
        default_factory=lambda: {1: 2.0, 5: 1.5, 4: 1.25}
    )
    default_weight: float = 1.0
    harmonic_minor: bool = True
    min_confidence: float = 0.5
    strict: bool = False
    ambiguity_threshold: float = 0.5
    max_alternatives: int = 3


@dataclass(frozen=True)
class KeyCandidate:
    """A candidate key with its score."""
    root: str
    mode: str
    score: float
    diatonic_count: int

    @property
    def name(self) -> str:
        return f"{self.root} {self.mode}"


@dataclass(frozen=True)
class KeyInfo:
    """Container for key detection results."""

    root: str  # Key root spelling (e.g., "C", "F#")
    mode: str  # "major" or "minor"
    tonic: int  # Pitch class of the root
    confidence: float  # Fraction of chords diatonic to the key (0.0 - 1.0)
    alternatives: List[KeyCandidate] = field(default_factory=list)  # Runner-up keys
    ambiguity_score: float = 0.0  # How ambiguous the detection is (0=clear, 1=very ambiguous)
    relative_key: Optional[str] = None  # Relative major/minor
    parallel_key: Optional[str] = None  # Parallel major/minor

    @property
    def name(self) -> str:
        return f"{self.root} {self.mode}"

    @property
    def key(self) -> Key:
        return Key(self.tonic, Mode(self.mode))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["name"] = self.name
        return data


class KeyDetector:
    """Detect the key of a chord progression.

    Each of the 24 major/minor keys is scored by the weighted number of
    chords whose root and basic quality it explains. Confidence is the
    plain fraction of explained chords.
    """

    def __init__(self, config: Optional[KeyDetectionConfig] = None):
        """
        Initialize KeyDetector.

        Args:
            config: Weights and thresholds (defaults if None)
        """
        self.config = config or KeyDetectionConfig()
        self.keys = all_keys()

    def detect(self, chord_symbols: Sequence[str]) -> KeyInfo:
        """
        Detect the key of a chord progression given as symbols.

        Args:
            chord_symbols: Chord symbols (at least 2)

        Returns:
            KeyInfo for the best-scoring key
        """
        chord_symbols = list(chord_symbols or [])
        if len(chord_symbols) < 2:
            raise MusicTheoryError(
                ErrorCode.INSUFFICIENT_NOTES,
                "At least 2 chords are required to detect a key",
                details={"received": len(chord_symbols)},
            )
        return self.detect_from_chords(parse_progression(chord_symbols))

    def detect_from_chords(self, chords: Sequence[ChordSymbol]) -> KeyInfo:
        """Detect the key of already parsed chords."""
        weights = self._score_matrix(chords)
        scores = weights.sum(axis=1)
        diatonic = (weights > 0).sum(axis=1)

        order = sorted(
            range(len(self.keys)),
            key=lambda k: (
                -scores[k],
                not self._opens_on_tonic(chords[0], self.keys[k]),
                self.keys[k].mode is not Mode.MAJOR,
                k,
            ),
        )
        candidates = [
            KeyCandidate(
                root=self.keys[k].root,
                mode=self.keys[k].mode.value,
                score=float(scores[k]),
                diatonic_count=int(diatonic[k]),
            )
            for k in order
        ]

        best = self.keys[order[0]]
        confidence = float(np.clip(diatonic[order[0]] / len(chords), 0.0, 1.0))
        logger.debug(
            "key scores: %s",
            ", ".join(f"{c.name}={c.score:.2f}" for c in candidates[:4]),
        )

        if confidence < self.config.min_confidence:
            if self.config.strict:
                raise MusicTheoryError(
                    ErrorCode.KEY_NOT_DETECTED,
                    "No key explains enough of the progression",
                    details={"best": best.name, "confidence": confidence},
                )
            logger.debug("low-confidence key %s (%.2f)", best.name, confidence)

        return KeyInfo(
            root=best.root,
            mode=best.mode.value,
            tonic=best.tonic,
            confidence=round(confidence, 3),
            alternatives=candidates[1:1 + self.config.max_alternatives],
            ambiguity_score=self._calculate_ambiguity(candidates),
            relative_key=best.relative.name,
            parallel_key=best.parallel.name,
        )

    def _score_matrix(self, chords: Sequence[ChordSymbol]) -> np.ndarray:
        """Weight of each chord (columns) under each candidate key (rows)."""
        cfg = self.config
        weights = np.zeros((len(self.keys), len(chords)))
        for k, key in enumerate(self.keys):
            for j, chord in enumerate(chords):
                if fits_key(chord, key, cfg.harmonic_minor):
                    degree, _ = chord.degree_in(key)
                    weights[k, j] = cfg.degree_weights.get(degree, cfg.default_weight)
        return weights

    def _opens_on_tonic(self, chord: ChordSymbol, key: Key) -> bool:
        return chord.root_pc == key.tonic and chord.triad == key.expected_quality(1)

    def _calculate_ambiguity(self, candidates: List[KeyCandidate]) -> float:
        """
        Calculate how ambiguous the key detection is.

        High ambiguity when several keys score close to the best one.

        Returns:
            Ambiguity score 0.0 (clear) to 1.0 (very ambiguous)
        """
        if len(candidates) < 2:
            return 0.0
        best_score = candidates[0].score
        close = [
            c for c in candidates[1:]
            if best_score - c.score < self.config.ambiguity_threshold
        ]
        return round(min(1.0, len(close) / 3.0), 3)
