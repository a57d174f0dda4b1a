"""
Tests for genre detection.

Covers:
- Token matching rules for extensions
- Ranking and confidence normalization
- Readings in related keys (modal rock progressions)
- Genre hints, unknown results and strict mode
- Sanity of the pattern table
"""

import pytest

from music_reasoning import ErrorCode, MusicTheoryError, detect_genre
from music_reasoning.inference.genre import (
    GENRE_PATTERNS,
    GENRES,
    GenreDetector,
    GenreMatchConfig,
    sequence_contains,
    token_matches,
)


class TestTokenMatching:
    """Test Roman numeral token comparison."""

    def test_unrequested_extensions_are_ignored(self):
        assert token_matches("ii7", "ii")
        assert token_matches("Imaj7", "I")
        assert token_matches("V7", "V7")

    def test_requested_extensions_must_match(self):
        assert not token_matches("I", "I7")
        assert not token_matches("Imaj7", "I7")

    def test_case_and_accidentals_matter(self):
        assert not token_matches("VI", "vi")
        assert not token_matches("VII", "bVII")

    def test_minor_seventh_spellings(self):
        assert token_matches("i7", "im7")

    def test_sequence_contains(self):
        assert sequence_contains(["I", "V", "vi", "IV"], ["V", "vi"])
        assert not sequence_contains(["I", "V"], ["I", "V", "vi"])
        assert not sequence_contains(["I", "IV", "V"], ["I", "V"])


class TestGenreDetection:
    """Test genre ranking on characteristic progressions."""

    def test_jazz_turnaround(self):
        results = detect_genre(["Dm7", "G7", "Cmaj7"])
        assert results[0].genre == "jazz"
        assert results[0].confidence == 1.0
        assert "ii-V-I" in [p.pattern for p in results[0].matched_patterns]
        assert len(results) <= 3

    def test_twelve_bar_fragment(self):
        results = detect_genre(["C7", "F7", "C7", "G7"])
        assert results[0].genre == "blues"
        patterns = [p.pattern for p in results[0].matched_patterns]
        assert "I-IV-I-V" in patterns
        assert "I7-IV7-I7-V7" in patterns

    def test_pop_progression_is_suggested(self):
        results = detect_genre(["C", "G", "Am", "F"])
        genres = [r.genre for r in results]
        assert "pop" in genres
        pop = results[genres.index("pop")]
        assert pop.confidence == pytest.approx(10 / 13, abs=0.001)

    def test_modal_rock_read_from_first_chord(self):
        results = detect_genre(["Am", "G", "F", "G"])
        assert [r.genre for r in results] == ["rock", "edm", "pop"]
        assert [r.confidence for r in results] == [1.0, 0.875, 0.75]

    def test_confidences_sorted(self):
        results = detect_genre(["C", "G", "Am", "F"])
        confidences = [r.confidence for r in results]
        assert confidences == sorted(confidences, reverse=True)

    def test_detected_key_only(self):
        detector = GenreDetector(GenreMatchConfig(alternate_keys=False))
        results = detector.detect(["Dm7", "G7", "Cmaj7"])
        assert [(r.genre, r.confidence) for r in results] == [("jazz", 1.0), ("classical", 0.8)]


class TestGenreHints:
    """Test hints, unknown results and errors."""

    def test_hint_restricts_table(self):
        results = detect_genre(["Dm7", "G7", "Cmaj7"], genre="classical")
        assert [r.genre for r in results] == ["classical"]
        assert results[0].confidence == 1.0

    def test_unknown_hint(self):
        with pytest.raises(MusicTheoryError) as exc:
            detect_genre(["C", "G"], genre="polka")
        assert exc.value.code == ErrorCode.PATTERN_NOT_MATCHED

    def test_no_match_returns_unknown(self):
        results = detect_genre(["Caug", "Daug"])
        assert len(results) == 1
        assert results[0].genre == "unknown"
        assert results[0].confidence == 0.0
        assert results[0].matched_patterns == []

    def test_unknown_results_are_independent(self):
        first = detect_genre(["Caug", "Daug"])[0]
        first.matched_patterns.append(GENRE_PATTERNS[0])
        second = detect_genre(["D", "G#"])[0]
        assert second is not first
        assert second.genre == "unknown"
        assert second.matched_patterns == []

    def test_strict_mode_raises(self):
        detector = GenreDetector(GenreMatchConfig(strict=True))
        with pytest.raises(MusicTheoryError) as exc:
            detector.detect(["Caug", "Daug"])
        assert exc.value.code == ErrorCode.PATTERN_NOT_MATCHED

    def test_too_few_chords(self):
        with pytest.raises(MusicTheoryError) as exc:
            detect_genre(["C"])
        assert exc.value.code == ErrorCode.INSUFFICIENT_NOTES

    def test_to_dict(self):
        data = detect_genre(["Dm7", "G7", "Cmaj7"])[0].to_dict()
        assert data["genre"] == "jazz"
        assert isinstance(data["matched_patterns"][0]["examples"], list)


class TestPatternTable:
    """Test the characteristic pattern table."""

    def test_table_size(self):
        assert len(GENRE_PATTERNS) == 50

    def test_weights_in_range(self):
        for pattern in GENRE_PATTERNS:
            assert 1 <= pattern.weight <= 10, f"{pattern.pattern} has weight {pattern.weight}"

    def test_every_genre_has_patterns(self):
        for genre in GENRES:
            count = sum(1 for p in GENRE_PATTERNS if p.genre == genre)
            assert count >= 8, f"{genre} only has {count} patterns"
