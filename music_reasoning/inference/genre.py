"""Genre detection - Classify progressions by weighted Roman numeral patterns.

Implements pattern-based genre detection with:
- A fixed table of characteristic progressions per genre
- Contiguous Roman numeral matching that ignores unrequested extensions
- Readings in related keys (relatives, parallels, first/last chord as tonic)
- Confidence relative to the strongest genre
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..core import ErrorCode, Key, Mode, MusicTheoryError
from .chords import ChordSymbol, parse_progression
from .key import KeyDetector

logger = logging.getLogger(__name__)

GENRES = ("jazz", "pop", "classical", "rock", "edm", "blues")

# Stripped from a progression token unless the pattern token names them
EXTENSIONS = ("maj13", "maj11", "maj9", "maj7", "add9", "sus4", "sus2", "13", "11", "9", "7", "6", "5")

# "im7" and "i7" both mean a minor seventh chord on the tonic
REDUNDANT_MINOR = re.compile(r"^([b#]?[iv]+)m(?=\d)")


@dataclass(frozen=True)
class GenrePattern:
    """A characteristic progression of a genre."""

    pattern: str  # Roman numerals joined by '-' (e.g., "ii-V-I")
    genre: str
    weight: int  # Characteristic strength, 1-10
    description: str
    examples: Tuple[str, ...] = ()
    era: Optional[str] = None

    @property
    def tokens(self) -> List[str]:
        return self.pattern.split("-")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["examples"] = list(self.examples)
        return data


GENRE_PATTERNS: Tuple[GenrePattern, ...] = (
    # Jazz
    GenrePattern(
        "ii-V-I", "jazz", 10,
        "Jazz turnaround - the most fundamental progression in jazz",
        ("Autumn Leaves - Cannonball Adderley", "All The Things You Are - Ella Fitzgerald",
         "Blue Bossa - Joe Henderson"),
        "bebop",
    ),
    GenrePattern(
        "iii-VI-ii-V", "jazz", 9,
        "Extended jazz turnaround with chromatic approach",
        ("Fly Me to the Moon - Frank Sinatra", "Satin Doll - Duke Ellington"),
        "swing",
    ),
    GenrePattern(
        "I-vi-ii-V", "jazz", 9,
        "Rhythm changes A-section progression",
        ("I Got Rhythm - George Gershwin", "Anthropology - Charlie Parker"),
        "bebop",
    ),
    GenrePattern(
        "bII7-I", "jazz", 8,
        "Tritone substitution - dominant replacement a tritone away",
        ("Satin Doll - Duke Ellington", "Have You Met Miss Jones - Chet Baker"),
        "bebop",
    ),
    GenrePattern(
        "im7-IV7-bVIImaj7", "jazz", 7,
        "Minor jazz progression with backdoor resolution",
        ("Softly As In A Morning Sunrise", "Beautiful Love"),
        "cool-jazz",
    ),
    GenrePattern(
        "Imaj7-bIIImaj7-bVImaj7-bIImaj7", "jazz", 8,
        "Coltrane changes - major thirds cycle modulation",
        ("Giant Steps - John Coltrane", "Countdown - John Coltrane"),
        "modal-jazz",
    ),
    GenrePattern(
        "IVmaj7-bVII7-Imaj7", "jazz", 7,
        "Backdoor progression - plagal resolution with bVII7",
        ("Ladybird - Tadd Dameron", "Body and Soul - Coleman Hawkins"),
        "bebop",
    ),
    GenrePattern(
        "i-IV7-i7-bVII7", "jazz", 6,
        "Jazz minor progression with mixolydian IV",
        ("Footprints - Wayne Shorter", "So What - Miles Davis"),
        "modal-jazz",
    ),
    # Pop
    GenrePattern(
        "I-V-vi-IV", "pop", 10,
        "Axis progression - the most popular progression in modern pop",
        ("Let It Be - Beatles", "No Woman No Cry - Bob Marley", "Someone Like You - Adele"),
        "modern",
    ),
    GenrePattern(
        "I-IV-V", "pop", 9,
        "Classic three-chord pop progression",
        ("Twist and Shout - Beatles", "La Bamba - Ritchie Valens", "Wild Thing - The Troggs"),
        "1960s",
    ),
    GenrePattern(
        "vi-IV-I-V", "pop", 9,
        "Sensitive female chord progression - emotional descent",
        ("Basket Case - Green Day", "Poker Face - Lady Gaga", "Grenade - Bruno Mars"),
        "2000s",
    ),
    GenrePattern(
        "I-vi-IV-V", "pop", 8,
        "Doo-wop progression - classic 1950s sound",
        ("Stand By Me - Ben E. King", "Every Breath You Take - The Police",
         "Earth Angel - The Penguins"),
        "1950s",
    ),
    GenrePattern(
        "IV-V-iii-vi", "pop", 7,
        "Royal road progression - popular in J-pop and K-pop",
        ("Kanashimi wo Yasashisa ni - Little by Little", "First Love - Utada Hikaru"),
        "2000s-jpop",
    ),
    GenrePattern(
        "I-IV-vi-V", "pop", 8,
        "Emotional arc progression - builds tension to resolution",
        ("Apologize - OneRepublic", "Viva La Vida - Coldplay"),
        "2000s",
    ),
    GenrePattern(
        "vi-V-IV-V", "pop", 6,
        "Emotional descent with emphasis on subdominant",
        ("Umbrella - Rihanna", "Party Rock Anthem - LMFAO"),
        "2010s",
    ),
    GenrePattern(
        "I-V-IV", "pop", 8,
        "Simplified axis - three-chord variation",
        ("All The Small Things - Blink-182", "She Will Be Loved - Maroon 5"),
        "2000s",
    ),
    # Classical
    GenrePattern(
        "I-IV-V-I", "classical", 9,
        "Perfect authentic cadence with subdominant preparation",
        ("Symphony conclusions", "Hymn endings", "Classical period works"),
        "classical-period",
    ),
    GenrePattern(
        "ii-V-I", "classical", 8,
        "Common practice cadence with supertonic preparation",
        ("Bach chorales", "Mozart sonata endings", "Haydn symphonies"),
        "baroque-classical",
    ),
    GenrePattern(
        "IV-I", "classical", 7,
        "Plagal cadence - \"Amen\" resolution",
        ("Hymn endings", "Sacred music", "Handel's Messiah"),
        "baroque",
    ),
    GenrePattern(
        "I-V", "classical", 6,
        "Half cadence - creates expectation and pause",
        ("Phrase endings", "Section transitions", "Question-answer phrases"),
        "common-practice",
    ),
    GenrePattern(
        "V-vi", "classical", 7,
        "Deceptive cadence - surprising resolution",
        ("Beethoven symphonies", "Mozart operas", "Romantic period works"),
        "classical-romantic",
    ),
    GenrePattern(
        "I-IV-I-V-I", "classical", 6,
        "Baroque sequence with tonic-dominant structure",
        ("Bach preludes", "Vivaldi concertos", "Handel suites"),
        "baroque",
    ),
    GenrePattern(
        "vi-ii-V-I", "classical", 7,
        "Circle of fifths progression - descending fifths",
        ("Canon in D - Pachelbel", "Classical period transitions"),
        "baroque-classical",
    ),
    GenrePattern(
        "I-vi-ii-V-I", "classical", 6,
        "Extended classical progression with deceptive movement",
        ("Romantic period works", "Extended cadential phrases"),
        "romantic",
    ),
    # Rock
    GenrePattern(
        "I-bVII-IV", "rock", 9,
        "Rock power progression with modal mixture from aeolian",
        ("Sweet Child O' Mine - Guns N' Roses", "Stairway to Heaven - Led Zeppelin"),
        "1970s-rock",
    ),
    GenrePattern(
        "I-IV-V", "rock", 9,
        "12-bar blues foundation adapted for rock",
        ("Johnny B. Goode - Chuck Berry", "Rock and Roll - Led Zeppelin"),
        "classic-rock",
    ),
    GenrePattern(
        "i-bVII-bVI-bVII", "rock", 8,
        "Minor rock progression with aeolian flavor",
        ("Stairway to Heaven intro - Led Zeppelin", "All Along The Watchtower - Jimi Hendrix"),
        "1960s-70s",
    ),
    GenrePattern(
        "I-bVII-bVI-IV", "rock", 7,
        "Descending rock progression with chromatic bass",
        ("Dream On - Aerosmith", "Hey Joe - Jimi Hendrix"),
        "1970s-rock",
    ),
    GenrePattern(
        "i-bVI-bVII", "rock", 8,
        "Grunge progression - minor with flat submediant",
        ("Smells Like Teen Spirit - Nirvana", "Come As You Are - Nirvana"),
        "grunge",
    ),
    GenrePattern(
        "I-V-bVII-IV", "rock", 7,
        "Punk rock progression with modal bVII",
        ("Should I Stay or Should I Go - The Clash", "Teenage Kicks - The Undertones"),
        "punk",
    ),
    GenrePattern(
        "i-iv-v", "rock", 6,
        "Power chord progression - all minor/suspended",
        ("Paranoid - Black Sabbath", "Iron Man - Black Sabbath"),
        "heavy-metal",
    ),
    GenrePattern(
        "I-III-IV", "rock", 6,
        "Alternative rock progression with major III",
        ("Creep - Radiohead", "Wonderwall - Oasis"),
        "alternative-rock",
    ),
    # EDM
    GenrePattern(
        "i-VII-VI-V", "edm", 8,
        "EDM build tension - minor key descending progression",
        ("Levels - Avicii", "Titanium - David Guetta"),
        "2010s-edm",
    ),
    GenrePattern(
        "vi-IV-I-V", "edm", 8,
        "Progressive house variation of axis progression",
        ("Wake Me Up - Avicii", "Don't You Worry Child - Swedish House Mafia"),
        "progressive-house",
    ),
    GenrePattern(
        "i-bVII-bVI-bVII", "edm", 7,
        "Dubstep progression with aeolian modal interchange",
        ("Scary Monsters and Nice Sprites - Skrillex", "Bangarang - Skrillex"),
        "dubstep",
    ),
    GenrePattern(
        "I-V-vi-iii", "edm", 7,
        "Trance progression - uplifting major key sequence",
        ("Adagio for Strings - Tiësto", "Silence - Delerium (Tiësto Remix)"),
        "trance",
    ),
    GenrePattern(
        "vi-I-V-IV", "edm", 6,
        "House drop progression - relative minor start",
        ("Animals - Martin Garrix", "Tremor - Dimitri Vegas & Like Mike"),
        "big-room",
    ),
    GenrePattern(
        "I-bVII-IV", "edm", 7,
        "EDM anthem progression with modal bVII",
        ("Clarity - Zedd", "Spectrum - Zedd"),
        "2010s-edm",
    ),
    GenrePattern(
        "i-v-bVII-bVI", "edm", 6,
        "Future bass progression - minor with chromatic bVI",
        ("Say My Name - ODESZA", "Latch - Disclosure"),
        "future-bass",
    ),
    GenrePattern(
        "I-IV-bVII-IV", "edm", 6,
        "Big room progression with oscillating IV-bVII",
        ("Epic - Sandro Silva & Quintino", "LRAD - Knife Party"),
        "big-room",
    ),
    # Blues
    GenrePattern(
        "I-IV-I-V", "blues", 10,
        "12-bar blues fundamental structure - simplified",
        ("Sweet Home Chicago - Robert Johnson", "The Thrill Is Gone - B.B. King"),
        "traditional-blues",
    ),
    GenrePattern(
        "I-IV-I-V-IV-I", "blues", 9,
        "Quick-change blues - IV chord in bar 2",
        ("Stormy Monday - T-Bone Walker", "Key to the Highway - Big Bill Broonzy"),
        "chicago-blues",
    ),
    GenrePattern(
        "I7-IV7-I7-V7", "blues", 9,
        "12-bar blues with dominant 7th voicings",
        ("Crossroads - Robert Johnson", "Pride and Joy - Stevie Ray Vaughan"),
        "electric-blues",
    ),
    GenrePattern(
        "I-I-I-I-IV-IV-I-I-V-IV-I-V", "blues", 8,
        "Full 12-bar blues progression with turnaround",
        ("Blues standard form", "Kansas City - Big Joe Turner"),
        "traditional-blues",
    ),
    GenrePattern(
        "i7-iv7-i7-V7", "blues", 7,
        "Minor blues with minor IV and dominant V",
        ("The Thrill Is Gone - B.B. King", "Red House - Jimi Hendrix"),
        "modern-blues",
    ),
    GenrePattern(
        "I-bVII-IV", "blues", 7,
        "Blues-rock hybrid with modal bVII",
        ("Born Under a Bad Sign - Albert King", "Sunshine of Your Love - Cream"),
        "blues-rock",
    ),
    GenrePattern(
        "I-IV-V-IV", "blues", 6,
        "Shuffle blues progression with emphasis on IV",
        ("Mustang Sally - Wilson Pickett", "Hard to Handle - Otis Redding"),
        "soul-blues",
    ),
    GenrePattern(
        "i7-IV7-bVIImaj7-i7", "blues", 6,
        "Jazz blues with sophisticated harmony",
        ("Bag's Groove - Milt Jackson", "Tenor Madness - Sonny Rollins"),
        "jazz-blues",
    ),
    # Cross-genre
    GenrePattern(
        "bVI-bVII-I", "rock", 7,
        "Mario cadence - chromatic approach to tonic",
        ("Clocks - Coldplay", "Don't Stop Believin' - Journey"),
        "classic-rock",
    ),
    GenrePattern(
        "i-bIII-bVII-iv", "edm", 5,
        "Dark progressive house - minor with chromatic mediant",
        ("Strobe - Deadmau5", "Language - Porter Robinson"),
        "progressive-house",
    ),
)


@dataclass(frozen=True)
class GenreDetectionResult:
    """A genre with its confidence and the patterns that support it."""

    genre: str
    confidence: float  # Weight sum relative to the strongest genre (0.0 - 1.0)
    matched_patterns: List[GenrePattern] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "genre": self.genre,
            "confidence": self.confidence,
            "matched_patterns": [p.to_dict() for p in self.matched_patterns],
        }


@dataclass
class GenreMatchConfig:
    """Configuration for genre detection.

    Attributes:
        alternate_keys: Also read the progression in related keys
        max_results: Number of genres returned
        strict: Raise PATTERN_NOT_MATCHED instead of returning "unknown"
    """
    alternate_keys: bool = True
    max_results: int = 3
    strict: bool = False


def _canonical(token: str) -> str:
    return REDUNDANT_MINOR.sub(r"\1", token)


def token_matches(progression_token: str, pattern_token: str) -> bool:
    """Compare one Roman numeral with a pattern token, ignoring extensions it does not ask for."""
    pattern_token = _canonical(pattern_token)
    token = _canonical(progression_token)
    for ext in EXTENSIONS:
        if ext not in pattern_token and token.endswith(ext):
            token = token[: -len(ext)]
    return token == pattern_token


def sequence_contains(tokens: Sequence[str], pattern_tokens: Sequence[str]) -> bool:
    """Check for a contiguous run of tokens matching the pattern."""
    span = len(pattern_tokens)
    for offset in range(len(tokens) - span + 1):
        if all(
            token_matches(tokens[offset + i], pattern_tokens[i])
            for i in range(span)
        ):
            return True
    return False


class GenreDetector:
    """Detect the likely genres of a chord progression."""

    def __init__(
        self,
        config: Optional[GenreMatchConfig] = None,
        key_detector: Optional[KeyDetector] = None,
    ):
        self.config = config or GenreMatchConfig()
        self.key_detector = key_detector or KeyDetector()

    def detect(
        self,
        chord_symbols: Sequence[str],
        genre: Optional[str] = None,
    ) -> List[GenreDetectionResult]:
        """
        Detect genres from chord symbols.

        Args:
            chord_symbols: Chord symbols (at least 2)
            genre: Optional genre hint restricting the pattern table

        Returns:
            Up to max_results genres sorted by confidence, or a single "unknown"
        """
        chord_symbols = list(chord_symbols or [])
        if len(chord_symbols) < 2:
            raise MusicTheoryError(
                ErrorCode.INSUFFICIENT_NOTES,
                "At least 2 chords are required to detect a genre",
                details={"received": len(chord_symbols)},
            )
        chords = parse_progression(chord_symbols)
        key = self.key_detector.detect_from_chords(chords).key
        return self.detect_from_chords(chords, key, genre)

    def detect_from_chords(
        self,
        chords: Sequence[ChordSymbol],
        key: Key,
        genre: Optional[str] = None,
    ) -> List[GenreDetectionResult]:
        """Detect genres of parsed chords whose key is already known."""
        if genre is not None and genre not in GENRES:
            raise MusicTheoryError(
                ErrorCode.PATTERN_NOT_MATCHED,
                f"Unknown genre: {genre!r}",
                details={"genre": genre, "accepted": list(GENRES)},
            )

        readings = [
            [chord.get_roman_numeral(k) for chord in chords]
            for k in self._key_readings(chords, key)
        ]
        logger.debug("genre readings: %s", ["-".join(r) for r in readings])

        matches: Dict[str, List[GenrePattern]] = {}
        for pattern in GENRE_PATTERNS:
            if genre is not None and pattern.genre != genre:
                continue
            tokens = pattern.tokens
            if any(sequence_contains(reading, tokens) for reading in readings):
                matches.setdefault(pattern.genre, []).append(pattern)

        if not matches:
            if self.config.strict:
                raise MusicTheoryError(
                    ErrorCode.PATTERN_NOT_MATCHED,
                    "No genre pattern matches the progression",
                    details={"chords": [c.symbol for c in chords]},
                )
            return [GenreDetectionResult(genre="unknown", confidence=0.0)]

        return self._rank(matches)[: self.config.max_results]

    def _key_readings(self, chords: Sequence[ChordSymbol], key: Key) -> List[Key]:
        """Keys in which to read the progression, detected key first."""
        readings = [key]
        if not self.config.alternate_keys:
            return readings

        tonics = [key.tonic, chords[0].root_pc, chords[-1].root_pc]
        if chords[-1].quality == "dominant7":
            # V7 at the end implies its resolution a fourth up
            tonics.append((chords[-1].root_pc + 5) % 12)

        for tonic in tonics:
            major = Key(tonic, Mode.MAJOR)
            minor = Key(tonic, Mode.MINOR)
            for candidate in (major, major.relative, minor, minor.relative):
                if candidate not in readings:
                    readings.append(candidate)
        return readings

    def _rank(self, matches: Dict[str, List[GenrePattern]]) -> List[GenreDetectionResult]:
        totals = {g: sum(p.weight for p in patterns) for g, patterns in matches.items()}
        best_total = max(totals.values())

        ordered = sorted(
            matches,
            key=lambda g: (
                -totals[g],
                -max(p.weight for p in matches[g]),
                GENRES.index(g),
            ),
        )
        return [
            GenreDetectionResult(
                genre=g,
                confidence=round(totals[g] / best_total, 3),
                matched_patterns=list(matches[g]),
            )
            for g in ordered
        ]
