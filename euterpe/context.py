import dataclasses
import fractions

import euterpe.constants.instruments
import euterpe.constants.velocity
import euterpe.intervals


@dataclasses.dataclass(frozen=True)
class Context:

	"""
	The interpretation state at one point of a music tree.

	Attributes:
		start_time: Absolute onset of the current node, in whole notes
		tempo: Accumulated tempo multiplier (> 0)
		transposition: Accumulated semitone offset
		volume: Context volume (0-127) that note volumes are scaled by
		instrument: Normalized General MIDI instrument name or ``"percussion"``
		player: Name of the active player strategy
		key: Key signature used by diatonic ornaments
	"""

	start_time: fractions.Fraction = fractions.Fraction(0)
	tempo: fractions.Fraction = fractions.Fraction(1)
	transposition: int = 0
	volume: int = euterpe.constants.velocity.DEFAULT_CONTEXT_VOLUME
	instrument: str = euterpe.constants.instruments.DEFAULT_INSTRUMENT
	player: str = "default"
	key: euterpe.intervals.KeySignature = dataclasses.field(default_factory=euterpe.intervals.KeySignature)

	@classmethod
	def default (cls) -> "Context":
		return cls()


	def scale (self, duration: fractions.Fraction) -> fractions.Fraction:

		"""
		Convert a written duration to performance time under the current tempo.
		"""

		return duration / self.tempo


	def derive (self, **changes) -> "Context":

		"""
		Return a child context with some fields replaced; this context is unchanged.
		"""

		return dataclasses.replace(self, **changes)


	def scale_volume (self, volume: int) -> int:

		"""
		Scale a note volume by the context volume, rounding to the nearest integer.
		"""

		scaled = round(volume * self.volume / euterpe.constants.velocity.MAX_VOLUME)

		return max(euterpe.constants.velocity.MIN_VOLUME, min(euterpe.constants.velocity.MAX_VOLUME, scaled))
