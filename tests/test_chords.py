"""
Tests for chord identification and chord symbol parsing.

Covers:
- Exact template matches for triads, sevenths and extended chords
- Order, octave and enharmonic invariance
- Note order and interval labels of the reported tones
- Incomplete voicings (dyads, shell voicings) and their confidence
- Ranking of alternatives
- Error reporting for invalid and insufficient input
- Chord symbol parsing and Roman numerals in key context
"""

import pytest

from music_reasoning import ErrorCode, Key, Mode, MusicTheoryError, identify
from music_reasoning.inference.chords import (
    ChordAnalyzer,
    ChordMatchConfig,
    parse_chord_symbol,
    parse_progression,
)


class TestExactMatches:
    """Test complete chord voicings."""

    def test_c_major_triad(self):
        result = identify(["C", "E", "G"])
        assert result.chord == "C major"
        assert result.symbol == "C"
        assert result.root == "C"
        assert result.quality == "major"
        assert result.notes == ["C", "E", "G"]
        assert result.intervals == ["P1", "M3", "P5"]
        assert result.degrees == [1, 3, 5]
        assert result.confidence == 1.0

    def test_dominant_seventh(self):
        result = identify(["G", "B", "D", "F"])
        assert result.chord == "G7"
        assert result.root == "G"
        assert result.quality == "dominant7"
        assert result.intervals == ["P1", "M3", "P5", "m7"]
        assert result.confidence == 1.0

    def test_major_seventh(self):
        result = identify(["C", "E", "G", "B"])
        assert result.symbol == "Cmaj7"
        assert result.quality == "major7"

    def test_half_diminished(self):
        result = identify(["B", "D", "F", "A"])
        assert result.symbol == "Bm7b5"
        assert result.quality == "half_diminished7"
        assert result.intervals == ["P1", "m3", "d5", "m7"]

    def test_dominant_ninth(self):
        result = identify(["C", "E", "G", "Bb", "D"])
        assert result.symbol == "C9"
        assert result.quality == "dominant9"
        assert result.notes == ["C", "E", "G", "Bb", "D"]
        assert result.intervals == ["P1", "M3", "P5", "m7", "M9"]
        assert result.degrees == [1, 3, 5, 7, 9]

    def test_added_tone_uses_compound_label(self):
        result = identify(["C", "E", "G", "Bb", "D", "F#"])
        assert result.symbol == "C9"
        assert result.intervals == ["P1", "M3", "P5", "m7", "M9", "A11"]
        assert result.degrees == [1, 3, 5, 7, 9, 11]

    def test_add9(self):
        result = identify(["C", "D", "E", "G"])
        assert result.symbol == "Cadd9"

    def test_minor_seventh_versus_sixth(self):
        """Same pitch classes, the root heard first decides."""
        assert identify(["A", "C", "E", "G"]).symbol == "Am7"
        assert identify(["C", "E", "G", "A"]).symbol == "C6"

    def test_diminished_seventh_is_deterministic(self):
        result = identify(["B", "D", "F", "Ab"])
        assert result.root == "B"
        assert result.quality == "diminished7"


class TestInvariance:
    """Test that spelling details do not change the answer."""

    @pytest.mark.parametrize("notes", [
        ["C", "E", "G"], ["E", "G", "C"], ["G", "C", "E"], ["G", "E", "C"],
    ])
    def test_inversions(self, notes):
        result = identify(notes)
        assert result.root == "C", f"{notes} should be rooted on C"
        assert result.quality == "major"

    def test_notes_keep_input_order(self):
        result = identify(["E", "G", "C"])
        assert result.root == "C"
        assert result.notes == ["E", "G", "C"]
        assert result.intervals == ["M3", "P5", "P1"]
        assert result.degrees == [3, 5, 1]

    def test_seventh_inversion(self):
        result = identify(["F", "B", "D", "G"])
        assert result.symbol == "G7"

    def test_octaves_and_doublings(self):
        result = identify(["C4", "E4", "G4", "C5"])
        assert result.chord == "C major"
        assert result.notes == ["C4", "E4", "G4"]
        assert result.confidence == 1.0

    def test_doubled_tone(self):
        doubled = identify(["C", "E", "G", "C"])
        assert doubled.confidence == 1.0
        assert doubled.to_dict() == identify(["C", "E", "G"]).to_dict()

    @pytest.mark.parametrize("notes", [
        ["C", "E", "G"], ["A", "C", "E"], ["B", "D", "F"], ["G", "B", "D", "F"],
        ["C", "E", "G", "B"], ["D", "F", "A", "C"],
    ])
    def test_complete_chords_are_confident(self, notes):
        assert identify(notes).confidence >= 0.95

    def test_enharmonic_spellings(self):
        sharp = identify(["C#", "E#", "G#"])
        flat = identify(["Db", "F", "Ab"])
        assert sharp.root == "C#"
        assert flat.root == "Db"
        assert sharp.quality == flat.quality == "major"
        assert sharp.intervals == flat.intervals


class TestIncompleteVoicings:
    """Test dyads and shell voicings."""

    def test_major_third_dyad(self):
        result = identify(["C", "E"])
        assert result.chord == "C major"
        assert result.intervals == ["P1", "M3"]
        assert result.confidence < 0.8

    def test_power_chord(self):
        result = identify(["C", "G"])
        assert result.quality == "power"
        assert result.chord == "C5"
        assert result.confidence < 0.8
        assert "Gsus4" in result.alternatives

    def test_shell_voicing(self):
        result = identify(["G", "B", "F"])
        assert result.symbol == "G7"
        assert result.intervals == ["P1", "M3", "m7"]
        assert 0.7 < result.confidence < 0.95


class TestAlternatives:
    """Test ranking of alternative readings."""

    def test_primary_listed_first(self):
        result = identify(["C", "E", "G"])
        assert result.alternatives == ["C", "C7", "Cmaj7", "C6", "Cadd9"]

    def test_superset_readings(self):
        result = identify(["C", "E", "G", "B"])
        assert result.alternatives == ["Cmaj7", "C", "Em"]

    def test_alternatives_cap(self):
        analyzer = ChordAnalyzer(ChordMatchConfig(max_alternatives=2))
        result = analyzer.identify(["C", "E", "G"])
        assert result.alternatives == ["C", "C7"]


class TestErrors:
    """Test error codes for bad input."""

    @pytest.mark.parametrize("notes", [[], ["C"], ["C", "C"], ["C4", "C5"]])
    def test_insufficient_notes(self, notes):
        with pytest.raises(MusicTheoryError) as exc:
            identify(notes)
        assert exc.value.code == ErrorCode.INSUFFICIENT_NOTES

    def test_invalid_notes(self):
        with pytest.raises(MusicTheoryError) as exc:
            identify(["H", "J", "K"])
        assert exc.value.code == ErrorCode.INVALID_NOTES
        assert exc.value.details["invalid"] == ["H", "J", "K"]

    def test_chord_not_found(self):
        with pytest.raises(MusicTheoryError) as exc:
            identify(["C", "D", "E", "F"])
        assert exc.value.code == ErrorCode.CHORD_NOT_FOUND

    def test_to_dict(self):
        data = identify(["C", "E", "G"]).to_dict()
        assert data["chord"] == "C major"
        assert data["alternatives"][0] == "C"


class TestChordSymbols:
    """Test chord symbol parsing."""

    def test_basic_symbols(self):
        chord = parse_chord_symbol("Dm7")
        assert chord.root == "D"
        assert chord.root_pc == 2
        assert chord.quality == "minor7"

    def test_accidental_root(self):
        chord = parse_chord_symbol("Bbmaj7")
        assert chord.root == "Bb"
        assert chord.root_pc == 10
        assert chord.quality == "major7"

    def test_aliases(self):
        assert parse_chord_symbol("F#m7b5").quality == "half_diminished7"
        assert parse_chord_symbol("C-7").quality == "minor7"
        assert parse_chord_symbol("Csus").quality == "sus4"
        assert parse_chord_symbol("C5").quality == "power"

    def test_slash_chord(self):
        chord = parse_chord_symbol("C/E")
        assert chord.quality == "major"
        assert chord.bass == "E"
        assert chord.root_pc == 0

    @pytest.mark.parametrize("symbol", ["Cxyz", "H7", "", "m7"])
    def test_invalid_symbols(self, symbol):
        with pytest.raises(MusicTheoryError) as exc:
            parse_chord_symbol(symbol)
        assert exc.value.code == ErrorCode.INVALID_CHORD

    def test_progression_reports_all_invalid(self):
        with pytest.raises(MusicTheoryError) as exc:
            parse_progression(["C", "Q", "G", "Zz"])
        assert exc.value.details["invalid"] == ["Q", "Zz"]


class TestRomanNumerals:
    """Test Roman numerals in C major."""

    @pytest.mark.parametrize("symbol,expected", [
        ("C", "I"),
        ("Dm7", "ii7"),
        ("G7", "V7"),
        ("Cmaj7", "Imaj7"),
        ("Fm", "iv"),
        ("Bdim", "vii°"),
        ("Bm7b5", "viiø7"),
        ("Eaug", "III+"),
        ("Bb", "bVII"),
        ("Ab", "bVI"),
    ])
    def test_numeral(self, symbol, expected):
        assert parse_chord_symbol(symbol).get_roman_numeral(Key(0, Mode.MAJOR)) == expected
