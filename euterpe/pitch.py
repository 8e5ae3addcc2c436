"""Pitch classes and absolute pitches.

This module provides the spelling table for pitch classes and the ``Pitch`` value
type (pitch class + octave).

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps pitch class spellings (e.g. ``"C"``, ``"F#"``, ``"Bb"``,
  ``"E##"``, ``"Cb"``) to semitone offsets from C of the same octave.  Spellings
  that cross the octave boundary keep their octave number, so ``"B#"`` is 12 and
  ``"Cb"`` is -1 - matching the way the notes are written on a stave.
- `PC_TO_NOTE_NAME`: Canonical (sharp) spelling for each of the 12 classes.

Convention: **C4 = 60** (Middle C), i.e. ``absolute = offset + 12 * (octave + 1)``.
"""

import dataclasses
import math
import re
import typing

import euterpe.exceptions


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"Cbb": -2, "Cb": -1, "C": 0, "C#": 1, "C##": 2,
	"Dbb": 0, "Db": 1, "D": 2, "D#": 3, "D##": 4,
	"Ebb": 2, "Eb": 3, "E": 4, "E#": 5, "E##": 6,
	"Fbb": 3, "Fb": 4, "F": 5, "F#": 6, "F##": 7,
	"Gbb": 5, "Gb": 6, "G": 7, "G#": 8, "G##": 9,
	"Abb": 7, "Ab": 8, "A": 9, "A#": 10, "A##": 11,
	"Bbb": 9, "Bb": 10, "B": 11, "B#": 12, "B##": 13,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
]

MIN_PITCH = 0
MAX_PITCH = 127

CONCERT_A = 440.0
CONCERT_A_PITCH = 69

_PITCH_PATTERN = re.compile(r"^([A-Ga-g])(#{0,2}|b{0,2})(-?\d+)$")


def pitch_class_offset (name: str) -> int:

	"""Validate a pitch class spelling and return its semitone offset from C.

	Raises:
		ValidationError: If the spelling is not recognised.
	"""

	if name not in NOTE_NAME_TO_PC:
		raise euterpe.exceptions.ValidationError(
			f"Unknown pitch class {name!r}. Expected a letter A-G with up to two '#' or 'b'."
		)

	return NOTE_NAME_TO_PC[name]


@dataclasses.dataclass(frozen=True)
class Pitch:

	"""A pitch class spelling in a given octave.

	The absolute (MIDI) pitch must lie within 0-127; anything else raises
	``ValidationError`` at construction.

	Example:
		```python
		Pitch("C", 4).absolute          # → 60
		Pitch.parse("Bb3").absolute     # → 58
		Pitch.from_absolute(61)         # → Pitch("C#", 4)
		```
	"""

	pitch_class: str
	octave: int


	def __post_init__ (self) -> None:

		offset = pitch_class_offset(self.pitch_class)

		if isinstance(self.octave, bool) or not isinstance(self.octave, int):
			raise euterpe.exceptions.ValidationError(f"Octave must be an integer, got {self.octave!r}")

		absolute = offset + 12 * (self.octave + 1)

		if not MIN_PITCH <= absolute <= MAX_PITCH:
			raise euterpe.exceptions.ValidationError(
				f"Pitch {self.pitch_class}{self.octave} ({absolute}) is outside the MIDI range {MIN_PITCH}-{MAX_PITCH}"
			)


	@classmethod
	def parse (cls, text: str) -> "Pitch":

		"""
		Parse scientific pitch notation such as ``"C4"``, ``"F#3"`` or ``"Ebb-1"``.
		"""

		match = _PITCH_PATTERN.match(text.strip())

		if match is None:
			raise euterpe.exceptions.ValidationError(f"Cannot parse pitch {text!r}")

		letter, accidental, octave = match.groups()

		return cls(letter.upper() + accidental, int(octave))


	@classmethod
	def from_absolute (cls, absolute: int) -> "Pitch":

		"""
		Build the sharp-spelled pitch for an absolute MIDI pitch number.
		"""

		if not MIN_PITCH <= absolute <= MAX_PITCH:
			raise euterpe.exceptions.ValidationError(
				f"Absolute pitch {absolute} is outside the MIDI range {MIN_PITCH}-{MAX_PITCH}"
			)

		octave, pc = divmod(absolute, 12)

		return cls(PC_TO_NOTE_NAME[pc], octave - 1)


	@property
	def absolute (self) -> int:

		"""
		The MIDI pitch number.
		"""

		return NOTE_NAME_TO_PC[self.pitch_class] + 12 * (self.octave + 1)


	def transpose (self, semitones: int) -> "Pitch":

		"""
		Return the pitch shifted by a number of semitones (spelled with sharps).
		"""

		return Pitch.from_absolute(self.absolute + semitones)


	def frequency (self) -> float:

		"""
		Frequency in Hz using equal temperament with A4 = 440 Hz.
		"""

		return CONCERT_A * math.pow(2.0, (self.absolute - CONCERT_A_PITCH) / 12.0)


	def __str__ (self) -> str:

		return f"{self.pitch_class}{self.octave}"
