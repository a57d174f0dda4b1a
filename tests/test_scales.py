"""
Tests for scale generation.

Covers:
- Diatonic, modal, harmonic minor and symmetric scales
- Letter-aware spelling in sharp and flat keys
- Degree names, relative/parallel keys and modes
- Scale type aliases and error codes
"""

import pytest

from music_reasoning import ErrorCode, MusicTheoryError, get_scale
from music_reasoning.inference.scales import SCALE_DEFINITIONS


class TestDiatonicScales:
    """Test major, minor and modal scales."""

    def test_c_major(self):
        info = get_scale("C", "major")
        assert info.scale == "C major"
        assert info.notes == ["C", "D", "E", "F", "G", "A", "B"]
        assert info.intervals == ["P1", "M2", "M3", "P4", "P5", "M6", "M7"]
        assert info.formula == "W-W-H-W-W-W-H"
        assert info.degrees[0].name == "tonic"
        assert info.degrees[4].name == "dominant"
        assert info.degrees[6].name == "leading tone"

    def test_major_relationships(self):
        info = get_scale("C", "major")
        assert info.relative_minor == "A minor"
        assert info.parallel_minor == "C minor"
        assert info.relative_major is None
        assert info.modes == [
            "C ionian", "D dorian", "E phrygian", "F lydian",
            "G mixolydian", "A aeolian", "B locrian",
        ]

    def test_natural_minor(self):
        info = get_scale("A", "minor")
        assert info.notes == ["A", "B", "C", "D", "E", "F", "G"]
        assert info.intervals == ["P1", "M2", "m3", "P4", "P5", "m6", "m7"]
        assert info.degrees[6].name == "subtonic"
        assert info.relative_major == "C major"
        assert info.parallel_major == "A major"
        assert info.modes[:3] == ["A aeolian", "B locrian", "C ionian"]

    def test_harmonic_minor(self):
        info = get_scale("A", "harmonic minor")
        assert info.notes == ["A", "B", "C", "D", "E", "F", "G#"]
        assert info.formula == "W-H-W-W-H-W+H-H"
        assert info.intervals[-1] == "M7"
        assert info.degrees[6].name == "leading tone"
        assert info.modes == []

    @pytest.mark.parametrize("scale_type", ["harmonic minor", "melodic minor"])
    def test_minor_variants_have_only_parallel_major(self, scale_type):
        info = get_scale("A", scale_type)
        assert info.relative_major is None
        assert info.relative_minor is None
        assert info.parallel_major == "A major"

    def test_lydian(self):
        info = get_scale("F", "lydian")
        assert info.notes == ["F", "G", "A", "B", "C", "D", "E"]
        assert info.intervals[3] == "A4"

    def test_locrian(self):
        info = get_scale("B", "locrian")
        assert info.notes == ["B", "C", "D", "E", "F", "G", "A"]
        assert info.intervals[4] == "d5"

    @pytest.mark.parametrize("root,expected", [
        ("Bb", ["Bb", "C", "D", "Eb", "F", "G", "A"]),
        ("F#", ["F#", "G#", "A#", "B", "C#", "D#", "E#"]),
        ("Db", ["Db", "Eb", "F", "Gb", "Ab", "Bb", "C"]),
    ])
    def test_spelling_uses_each_letter_once(self, root, expected):
        assert get_scale(root, "major").notes == expected


class TestOtherScales:
    """Test pentatonic, blues and symmetric scales."""

    def test_blues(self):
        info = get_scale("C", "blues")
        assert info.notes == ["C", "Eb", "F", "Gb", "G", "Bb"]
        assert info.intervals == ["P1", "m3", "P4", "d5", "P5", "m7"]
        assert [d.name for d in info.degrees][:2] == ["first", "second"]
        assert info.modes == []

    def test_major_pentatonic(self):
        assert get_scale("C", "major pentatonic").notes == ["C", "D", "E", "G", "A"]

    def test_whole_tone(self):
        info = get_scale("C", "whole tone")
        assert info.notes == ["C", "D", "E", "Gb", "Ab", "Bb"]
        assert info.intervals == ["P1", "M2", "M3", "d5", "m6", "m7"]

    def test_whole_tone_avoids_double_sharps(self):
        assert get_scale("E", "whole tone").notes == ["E", "F#", "G#", "Bb", "C", "D"]

    def test_chromatic(self):
        info = get_scale("C", "chromatic")
        assert info.notes == [
            "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
        ]

    @pytest.mark.parametrize("definition", SCALE_DEFINITIONS, ids=lambda d: d.type)
    def test_aligned_lengths(self, definition):
        info = get_scale("D", definition.type)
        assert len(info.notes) == len(info.intervals) == len(info.degrees)
        assert len(info.notes) == len(definition.formula.split("-"))


class TestScaleLookup:
    """Test aliases and errors."""

    @pytest.mark.parametrize("name,expected", [
        ("ionian", "major"),
        ("Natural_Minor", "minor"),
        ("Harmonic-Minor", "harmonic minor"),
        ("  Whole   Tone ", "whole tone"),
    ])
    def test_aliases(self, name, expected):
        assert get_scale("C", name).type == expected

    def test_invalid_root(self):
        with pytest.raises(MusicTheoryError) as exc:
            get_scale("H", "major")
        assert exc.value.code == ErrorCode.INVALID_ROOT

    def test_invalid_scale_type(self):
        with pytest.raises(MusicTheoryError) as exc:
            get_scale("C", "bebop")
        assert exc.value.code == ErrorCode.INVALID_SCALE_TYPE
        assert "major" in exc.value.details["accepted"]

    def test_to_dict(self):
        data = get_scale("C", "major").to_dict()
        assert data["degrees"][0] == {"note": "C", "degree": 1, "name": "tonic"}
