"""Key data class - a tonic plus a major or minor mode."""

from dataclasses import dataclass
from enum import Enum
from itertools import accumulate
from typing import List, Optional, Tuple

from .constants import (
    MAJOR_KEY_NAMES,
    MAJOR_STEPS,
    MINOR_KEY_NAMES,
    NATURAL_MINOR_STEPS,
    TRIAD_QUALITIES,
)


class Mode(str, Enum):
    """Key modes."""
    MAJOR = "major"
    MINOR = "minor"

    @property
    def steps(self) -> Tuple[int, ...]:
        return MAJOR_STEPS if self is Mode.MAJOR else NATURAL_MINOR_STEPS

    @property
    def other(self) -> "Mode":
        return Mode.MINOR if self is Mode.MAJOR else Mode.MAJOR


@dataclass(frozen=True)
class Key:
    """A tonal center: tonic pitch class and mode."""

    tonic: int
    mode: Mode

    @property
    def root(self) -> str:
        names = MAJOR_KEY_NAMES if self.mode is Mode.MAJOR else MINOR_KEY_NAMES
        return names[self.tonic % 12]

    @property
    def name(self) -> str:
        return f"{self.root} {self.mode.value}"

    @property
    def offsets(self) -> Tuple[int, ...]:
        """Semitones above the tonic of each scale degree."""
        return (0,) + tuple(accumulate(self.mode.steps[:-1]))

    @property
    def pitch_classes(self) -> Tuple[int, ...]:
        return tuple((self.tonic + o) % 12 for o in self.offsets)

    @property
    def triad_qualities(self) -> Tuple[Optional[str], ...]:
        """Triad quality built on each degree by stacking scale thirds."""
        offsets = self.offsets
        qualities = []
        for i in range(7):
            third = (offsets[(i + 2) % 7] - offsets[i]) % 12
            fifth = (offsets[(i + 4) % 7] - offsets[i]) % 12
            qualities.append(TRIAD_QUALITIES.get((third, fifth)))
        return tuple(qualities)

    def degree_of(self, pc: int) -> Optional[int]:
        """Scale degree (1-7) of a pitch class, or None if chromatic."""
        interval = (pc - self.tonic) % 12
        if interval in self.offsets:
            return self.offsets.index(interval) + 1
        return None

    def expected_quality(self, degree: int) -> Optional[str]:
        return self.triad_qualities[degree - 1]

    @property
    def relative(self) -> "Key":
        if self.mode is Mode.MAJOR:
            return Key((self.tonic + 9) % 12, Mode.MINOR)
        return Key((self.tonic + 3) % 12, Mode.MAJOR)

    @property
    def parallel(self) -> "Key":
        return Key(self.tonic, self.mode.other)


def all_keys() -> List[Key]:
    """The 24 major and minor keys, majors first."""
    return [Key(pc, mode) for mode in (Mode.MAJOR, Mode.MINOR) for pc in range(12)]
