"""Global constants for Music Reasoning."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_PITCH_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Semitone offset of each natural letter above C
LETTER_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
LETTERS = "CDEFGAB"

# Conventional tonic spelling per pitch class
MAJOR_KEY_NAMES = ["C", "Db", "D", "Eb", "E", "F", "F#", "G", "Ab", "A", "Bb", "B"]
MINOR_KEY_NAMES = ["C", "C#", "D", "Eb", "E", "F", "F#", "G", "G#", "A", "Bb", "B"]

# Diatonic step patterns in semitones
MAJOR_STEPS = (2, 2, 1, 2, 2, 2, 1)
NATURAL_MINOR_STEPS = (2, 1, 2, 2, 1, 2, 2)

# Generic interval label for each semitone distance above a root
SEMITONE_LABELS = ("P1", "m2", "M2", "m3", "M3", "P4", "d5", "P5", "m6", "M6", "m7", "M7")

# Semitone size of every interval label the engine emits
LABEL_SEMITONES = {
    "P1": 0, "m2": 1, "M2": 2, "A2": 3, "m3": 3, "M3": 4, "P4": 5,
    "A4": 6, "d5": 6, "P5": 7, "A5": 8, "m6": 8, "M6": 9, "A6": 10,
    "d7": 9, "m7": 10, "M7": 11, "m9": 1, "M9": 2, "A9": 3, "P11": 5,
    "A11": 6, "m13": 8, "M13": 9,
}

ROMAN_NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII")

# Nearest major-scale degree and accidental for every semitone above a tonic
CHROMATIC_DEGREES = {
    0: (1, ""), 1: (2, "b"), 2: (2, ""), 3: (3, "b"), 4: (3, ""), 5: (4, ""),
    6: (5, "b"), 7: (5, ""), 8: (6, "b"), 9: (6, ""), 10: (7, "b"), 11: (7, ""),
}

# Triad quality from (third, fifth) semitone sizes
TRIAD_QUALITIES = {
    (4, 7): "major",
    (3, 7): "minor",
    (3, 6): "diminished",
    (4, 8): "augmented",
}
