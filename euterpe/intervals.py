"""Scale definitions and key signatures.

A ``KeySignature`` is a tonic plus a seven-note mode.  It is carried in the
performance context so that phrase ornaments (trills, mordents, diatonic
transposition) can move by scale degree rather than by semitone.
"""

import dataclasses
import typing

import euterpe.exceptions
import euterpe.pitch


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
}

MODE_ALIASES: typing.Dict[str, str] = {
	"ionian": "major",
	"aeolian": "minor",
}

DIATONIC_SIZE = 7


def get_scale_intervals (mode: str) -> typing.List[int]:

	"""
	Return the semitone offsets from the tonic for a mode name.
	"""

	mode = MODE_ALIASES.get(mode, mode)

	if mode not in SCALE_INTERVALS:
		raise euterpe.exceptions.ValidationError(f"Unknown mode '{mode}'. Available: {sorted(SCALE_INTERVALS)}")

	return list(SCALE_INTERVALS[mode])


@dataclasses.dataclass(frozen=True)
class KeySignature:

	"""A tonic pitch class and a seven-note mode.

	Example:
		```python
		KeySignature("G").pitch_classes()          # → [7, 9, 11, 0, 2, 4, 6]
		KeySignature("A", "minor").diatonic_transpose(60, 1)   # → 62
		```
	"""

	tonic: str = "C"
	mode: str = "major"


	def __post_init__ (self) -> None:

		euterpe.pitch.pitch_class_offset(self.tonic)
		object.__setattr__(self, "mode", MODE_ALIASES.get(self.mode, self.mode))
		get_scale_intervals(self.mode)


	def pitch_classes (self) -> typing.List[int]:

		"""
		Return the pitch classes (0-11) of the scale, starting from the tonic.
		"""

		tonic_pc = euterpe.pitch.NOTE_NAME_TO_PC[self.tonic] % 12

		return [(tonic_pc + interval) % 12 for interval in get_scale_intervals(self.mode)]


	def contains (self, pitch: int) -> bool:

		"""
		True when the absolute pitch belongs to the scale.
		"""

		return pitch % 12 in self.pitch_classes()


	def diatonic_transpose (self, pitch: int, degrees: int) -> int:

		"""Move an absolute pitch by a number of scale degrees.

		The pitch is first located on the scale degree at or just below it, so
		chromatic pitches move to a scale tone.  Whole multiples of seven degrees
		are plain octave shifts.

		Parameters:
			pitch: Absolute (MIDI) pitch number.
			degrees: Positive to move up, negative to move down.
		"""

		if degrees == 0:
			return pitch

		shift = degrees % DIATONIC_SIZE
		octaves = (degrees - shift) // DIATONIC_SIZE

		if shift == 0:
			return pitch + 12 * octaves

		scale = self.pitch_classes()
		closest = min(range(DIATONIC_SIZE), key=lambda i: (pitch - scale[i]) % 12)
		target = scale[(closest + shift) % DIATONIC_SIZE]

		return pitch + (target - pitch) % 12 + 12 * octaves


	def __str__ (self) -> str:

		return f"{self.tonic} {self.mode}"
