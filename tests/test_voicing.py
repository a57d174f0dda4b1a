"""
Tests for chord building from symbols.

Covers:
- Letter-aware spelling of triads, sevenths and extended chords
- Intervals, degrees, slash basses and root enharmonics
- Enharmonic preference for the spelled notes
- Close, open, drop-2 and drop-3 voicings and inversions
- Substitution suggestions
- Error codes for bad symbols and voicing types
"""

import pytest

from music_reasoning import (
    ErrorCode,
    MusicTheoryError,
    build_chord,
    generate_voicing,
    get_substitutions,
    identify,
)
from music_reasoning.inference.voicing import VOICING_TYPES, transpose
from music_reasoning.core import Note


class TestChordSpelling:
    """Test the notes, intervals and degrees of built chords."""

    def test_c_major(self):
        result = build_chord("C")
        assert result.chord == "C"
        assert result.root == "C"
        assert result.quality == "major"
        assert result.notes == ["C", "E", "G"]
        assert result.intervals == ["P1", "M3", "P5"]
        assert result.degrees == [1, 3, 5]

    def test_major_seventh(self):
        result = build_chord("Cmaj7")
        assert result.notes == ["C", "E", "G", "B"]
        assert result.intervals == ["P1", "M3", "P5", "M7"]
        assert result.degrees == [1, 3, 5, 7]

    @pytest.mark.parametrize("symbol,expected", [
        ("Am", ["A", "C", "E"]),
        ("Bdim", ["B", "D", "F"]),
        ("Gaug", ["G", "B", "D#"]),
        ("Adim7", ["A", "C", "Eb", "Gb"]),
        ("Em7b5", ["E", "G", "Bb", "D"]),
        ("F#m7b5", ["F#", "A", "C", "E"]),
        ("Gb", ["Gb", "Bb", "Db"]),
        ("G7#5", ["G", "B", "D#", "F"]),
        ("Bbmaj7", ["Bb", "D", "F", "A"]),
        ("Csus4", ["C", "F", "G"]),
        ("Dsus2", ["D", "E", "A"]),
        ("C6", ["C", "E", "G", "A"]),
        ("C5", ["C", "G"]),
    ])
    def test_spelling(self, symbol, expected):
        assert build_chord(symbol).notes == expected

    def test_extensions_follow_the_seventh(self):
        assert build_chord("G9").notes == ["G", "B", "D", "F", "A"]
        assert build_chord("Cadd9").notes == ["C", "E", "G", "D"]
        assert build_chord("Cadd9").degrees == [1, 3, 5, 9]

    def test_thirteenth(self):
        result = build_chord("C13")
        assert result.notes == ["C", "E", "G", "Bb", "D", "F", "A"]
        assert result.degrees == [1, 3, 5, 7, 9, 11, 13]

    def test_slash_chord(self):
        result = build_chord("C/E")
        assert result.notes == ["C", "E", "G"]
        assert result.bass == "E"

    def test_built_notes_identify_as_the_same_chord(self):
        for symbol in ("Cmaj7", "Dm7", "G7", "Bm7b5", "F#m"):
            assert identify(build_chord(symbol).notes).symbol == symbol

    def test_to_dict(self):
        data = build_chord("Dm7").to_dict()
        assert data["notes"] == ["D", "F", "A", "C"]
        assert data["voicing"]["type"] == "close"


class TestEnharmonics:
    """Test root alternatives and spelling preferences."""

    @pytest.mark.parametrize("symbol,expected", [
        ("C", ["C"]),
        ("F#", ["F#", "Gb"]),
        ("Bbm7", ["Bb", "A#"]),
        ("E#", ["E#", "F"]),
    ])
    def test_root_enharmonics(self, symbol, expected):
        assert build_chord(symbol).enharmonics == expected

    def test_prefer_flats(self):
        assert build_chord("F#m7b5", enharmonic="flats").notes == ["Gb", "A", "C", "E"]

    def test_prefer_sharps(self):
        assert build_chord("Bb7", enharmonic="sharps").notes == ["A#", "D", "F", "G#"]

    def test_invalid_preference(self):
        with pytest.raises(MusicTheoryError) as exc:
            build_chord("C", enharmonic="naturals")
        assert exc.value.code == ErrorCode.INVALID_CHORD


class TestVoicings:
    """Test voicing types, octaves and inversions."""

    def test_close_triad(self):
        assert generate_voicing("C") == ["C4", "E4", "G4"]

    def test_close_wraps_octave(self):
        assert generate_voicing("Dm7", octave=3) == ["D3", "F3", "A3", "C4"]

    def test_close_seventh(self):
        assert generate_voicing("Cmaj7", "close", octave=4) == ["C4", "E4", "G4", "B4"]

    def test_open_triad(self):
        assert generate_voicing("C", "open") == ["C4", "G4", "E5"]

    def test_open_seventh(self):
        notes = generate_voicing("Gmaj7", "open", octave=3)
        assert notes == ["G3", "D4", "B4", "F#5"]

    def test_drop2(self):
        assert generate_voicing("Cmaj7", "drop2") == ["C4", "G3", "E4", "B4"]
        assert generate_voicing("Dm7", "drop2") == ["D4", "A3", "F4", "C5"]

    def test_drop3(self):
        assert generate_voicing("Cmaj7", "drop3") == ["C4", "E3", "G4", "B4"]
        assert generate_voicing("Am7", "drop3")[0] == "A4"

    def test_drop3_needs_four_voices(self):
        assert generate_voicing("C", "drop3") == generate_voicing("C", "close")

    def test_inversions(self):
        assert generate_voicing("C", inversion=1) == ["E4", "G4", "C5"]
        assert generate_voicing("C", inversion=2) == ["G4", "C5", "E5"]
        assert generate_voicing("C", inversion=3) == generate_voicing("C")

    @pytest.mark.parametrize("voicing", VOICING_TYPES)
    def test_voicings_keep_the_chord(self, voicing):
        notes = generate_voicing("Cmaj7", voicing)
        assert len(notes) == 4
        stripped = [n.rstrip("0123456789") for n in notes]
        assert identify(stripped).symbol == "Cmaj7"

    def test_build_attaches_voicing(self):
        result = build_chord("Dm7", voicing="drop2", octave=4)
        assert result.voicing.type == "drop2"
        assert result.voicing.notes == ["D4", "A3", "F4", "C5"]

    def test_invalid_voicing(self):
        with pytest.raises(MusicTheoryError) as exc:
            generate_voicing("C", "spread")
        assert exc.value.code == ErrorCode.INVALID_CHORD
        assert exc.value.details["accepted"] == list(VOICING_TYPES)

    def test_negative_inversion(self):
        with pytest.raises(MusicTheoryError) as exc:
            generate_voicing("C", inversion=-1)
        assert exc.value.code == ErrorCode.INVALID_CHORD


class TestSubstitutions:
    """Test substitution suggestions."""

    def test_tritone_substitution(self):
        subs = get_substitutions("G7")
        assert subs[0].chord == "Db7"
        assert "Tritone substitution" in subs[0].reason
        assert [s.chord for s in get_substitutions("C7")][0] == "Gb7"

    def test_dominant_alternatives(self):
        assert [s.chord for s in get_substitutions("G7")] == ["Db7", "Abdim7", "G7#5"]

    def test_major_seventh(self):
        assert [s.chord for s in get_substitutions("Cmaj7")] == ["C6", "Am7", "Cadd9"]

    def test_minor_seventh(self):
        assert [s.chord for s in get_substitutions("Dm7")][0] == "Dm6"
        assert "Cmaj7" in [s.chord for s in get_substitutions("Am7")]

    def test_minor_ninth_skips_itself(self):
        assert "Dm9" not in [s.chord for s in get_substitutions("Dm9")]

    def test_major_triad(self):
        assert [s.chord for s in get_substitutions("C")] == ["Cmaj7", "C6", "Am"]

    def test_diminished(self):
        assert [s.chord for s in get_substitutions("Bdim")] == ["Ddim7"]

    def test_no_substitutions(self):
        assert get_substitutions("Csus4") == []

    def test_every_suggestion_has_a_reason(self):
        for symbol in ("C", "Cmaj7", "G7", "Dm7", "Bdim7"):
            for sub in get_substitutions(symbol):
                assert sub.reason

    def test_build_lists_common_substitutions(self):
        assert build_chord("Cmaj7").common_substitutions == ["C6", "Am7", "Cadd9"]
        assert build_chord("Csus2").common_substitutions == []

    def test_transpose_spells_by_letter(self):
        assert transpose(Note.parse("G"), 6, 4) == "Db"
        assert transpose(Note.parse("C"), -3, -2) == "A"


class TestErrors:
    """Test error codes for bad symbols."""

    @pytest.mark.parametrize("symbol", ["Cxyz", "H7", "", "m7"])
    def test_invalid_symbol(self, symbol):
        with pytest.raises(MusicTheoryError) as exc:
            build_chord(symbol)
        assert exc.value.code == ErrorCode.INVALID_CHORD

    def test_invalid_symbol_for_voicing_and_substitutions(self):
        with pytest.raises(MusicTheoryError) as exc:
            generate_voicing("Qmaj7")
        assert exc.value.code == ErrorCode.INVALID_CHORD
        with pytest.raises(MusicTheoryError) as exc:
            get_substitutions("Qmaj7")
        assert exc.value.code == ErrorCode.INVALID_CHORD
