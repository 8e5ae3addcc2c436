"""Modifiers that change how a passage is performed.

A modifier wraps a passage (``Modify(control, music)``) and changes the
interpretation context for everything inside it.  Nested modifiers accumulate:
two ``Transpose(2)`` wrappers transpose by a whole tone twice.

Instrument ids and player names are checked while performing, not here, so a
tree can be built before its players are registered.
"""

import dataclasses
import fractions
import typing

import euterpe.exceptions
import euterpe.intervals
import euterpe.phrase


@dataclasses.dataclass(frozen=True)
class Tempo:

	"""Scale the tempo: ``2`` plays twice as fast, ``1/2`` half as fast."""

	scale: fractions.Fraction

	def __post_init__ (self) -> None:

		scale = euterpe.phrase.to_fraction(self.scale, "Tempo scale")

		if scale <= 0:
			raise euterpe.exceptions.ValidationError("Tempo scale must be positive")

		object.__setattr__(self, "scale", scale)


@dataclasses.dataclass(frozen=True)
class Transpose:

	"""Shift every pitch by a number of semitones."""

	semitones: int

	def __post_init__ (self) -> None:

		if isinstance(self.semitones, bool) or not isinstance(self.semitones, int):
			raise euterpe.exceptions.ValidationError(f"Transposition must be an integer, got {self.semitones!r}")


@dataclasses.dataclass(frozen=True)
class Instrument:

	"""Play with a General MIDI instrument (name or program number) or ``"percussion"``."""

	instrument: typing.Union[str, int]


@dataclasses.dataclass(frozen=True)
class KeySig:

	"""Set the key used by diatonic ornaments."""

	key: euterpe.intervals.KeySignature

	def __post_init__ (self) -> None:

		if not isinstance(self.key, euterpe.intervals.KeySignature):
			raise euterpe.exceptions.ValidationError(f"KeySig expects a KeySignature, got {self.key!r}")


@dataclasses.dataclass(frozen=True)
class Player:

	"""Select a registered player strategy by name."""

	name: str


@dataclasses.dataclass(frozen=True)
class Dynamics:

	"""Raise or lower the context volume by ``delta`` (clamped to 0-127)."""

	delta: int

	def __post_init__ (self) -> None:

		if isinstance(self.delta, bool) or not isinstance(self.delta, int):
			raise euterpe.exceptions.ValidationError(f"Dynamics delta must be an integer, got {self.delta!r}")


@dataclasses.dataclass(frozen=True)
class Phrase:

	"""Apply phrase attributes (see ``euterpe.phrase``) in order."""

	attributes: typing.Tuple[euterpe.phrase.PhraseAttribute, ...]

	def __post_init__ (self) -> None:

		attributes = tuple(self.attributes)

		for attribute in attributes:
			if not isinstance(attribute, euterpe.phrase.PHRASE_ATTRIBUTE_TYPES):
				raise euterpe.exceptions.ValidationError(f"Not a phrase attribute: {attribute!r}")

		object.__setattr__(self, "attributes", attributes)


Control = typing.Union[Tempo, Transpose, Instrument, KeySig, Player, Dynamics, Phrase]

CONTROL_TYPES: typing.Tuple[type, ...] = typing.get_args(Control)
