"""Phrase attributes.

Attributes are attached to a passage with the ``Phrase`` modifier
(``music.with_phrase(Crescendo(1), Staccato("1/2"))``) and shape how it is
performed.  Dynamics, articulations and ornaments are interpreted by the active
player, so different players may honour different subsets.  The tempo
attributes (``Ritardando``, ``Accelerando``) and the absolute loudness
attributes are applied by the performer for every player, because they affect
timing that sibling passages depend on, or the base volume of the whole phrase.

Amounts are rationals (anything ``fractions.Fraction`` accepts).
"""

import dataclasses
import enum
import fractions
import typing

import euterpe.exceptions


def to_fraction (value: typing.Any, what: str) -> fractions.Fraction:

	"""
	Coerce an int, str, float or Fraction to an exact Fraction.
	"""

	if isinstance(value, bool):
		raise euterpe.exceptions.ValidationError(f"{what} must be a number, got {value!r}")

	try:
		return fractions.Fraction(value)
	except (TypeError, ValueError, ZeroDivisionError) as exc:
		raise euterpe.exceptions.ValidationError(f"{what} must be a rational number, got {value!r}") from exc


def _non_negative (value: typing.Any, what: str) -> fractions.Fraction:

	result = to_fraction(value, what)

	if result < 0:
		raise euterpe.exceptions.ValidationError(f"{what} cannot be negative")

	return result


class StdLoudness (enum.Enum):

	"""Standard dynamic markings and their MIDI volumes."""

	PIANO_PIANISSIMO = 40
	PIANISSIMO = 50
	PIANO = 60
	MEZZO_PIANO = 70
	SFORZATO = 80
	MEZZO_FORTE = 90
	FORTE = 100
	FORTISSIMO = 110
	FORTE_FORTISSIMO = 120


# ---------------------------------------------------------------------------
# Dynamics
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Accent:

	"""Scale the volume of every note by ``factor``."""

	factor: fractions.Fraction

	def __post_init__ (self) -> None:
		object.__setattr__(self, "factor", _non_negative(self.factor, "Accent factor"))


@dataclasses.dataclass(frozen=True)
class Crescendo:

	"""Grow the volume linearly, reaching ``1 + amount`` times the start at the phrase end."""

	amount: fractions.Fraction

	def __post_init__ (self) -> None:
		object.__setattr__(self, "amount", _non_negative(self.amount, "Crescendo amount"))


@dataclasses.dataclass(frozen=True)
class Diminuendo:

	"""Fade the volume linearly; ``amount`` 1 fades to silence at the phrase end."""

	amount: fractions.Fraction

	def __post_init__ (self) -> None:

		amount = _non_negative(self.amount, "Diminuendo amount")

		if amount > 1:
			raise euterpe.exceptions.ValidationError("Diminuendo amount cannot exceed 1")

		object.__setattr__(self, "amount", amount)


@dataclasses.dataclass(frozen=True)
class Loudness:

	"""Set the base volume of the phrase explicitly (0-127)."""

	volume: int

	def __post_init__ (self) -> None:

		if isinstance(self.volume, bool) or not isinstance(self.volume, int) or not 0 <= self.volume <= 127:
			raise euterpe.exceptions.ValidationError(f"Loudness must be an integer 0-127, got {self.volume!r}")


@dataclasses.dataclass(frozen=True)
class Dynamic:

	"""Set the base volume of the phrase from a standard marking."""

	marking: StdLoudness

	def __post_init__ (self) -> None:

		if not isinstance(self.marking, StdLoudness):
			raise euterpe.exceptions.ValidationError(f"Dynamic needs a StdLoudness marking, got {self.marking!r}")


	@property
	def volume (self) -> int:
		return self.marking.value


# ---------------------------------------------------------------------------
# Tempo
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Ritardando:

	"""Slow down gradually; the phrase lasts ``1 + amount`` times longer."""

	amount: fractions.Fraction

	def __post_init__ (self) -> None:
		object.__setattr__(self, "amount", _non_negative(self.amount, "Ritardando amount"))


@dataclasses.dataclass(frozen=True)
class Accelerando:

	"""Speed up gradually; the phrase lasts ``1 - amount`` times as long (amount <= 1/2)."""

	amount: fractions.Fraction

	def __post_init__ (self) -> None:

		amount = _non_negative(self.amount, "Accelerando amount")

		# Beyond one half the last notes would get a negative duration.
		if amount > fractions.Fraction(1, 2):
			raise euterpe.exceptions.ValidationError("Accelerando amount cannot exceed 1/2")

		object.__setattr__(self, "amount", amount)


# ---------------------------------------------------------------------------
# Articulation
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Staccato:

	"""Shorten each sounding duration to ``fraction`` of the written value."""

	fraction: fractions.Fraction = fractions.Fraction(1, 2)

	def __post_init__ (self) -> None:
		object.__setattr__(self, "fraction", _non_negative(self.fraction, "Staccato fraction"))


@dataclasses.dataclass(frozen=True)
class Legato:

	"""Stretch each sounding duration by ``fraction`` (usually a little above 1)."""

	fraction: fractions.Fraction = fractions.Fraction(5, 4)

	def __post_init__ (self) -> None:
		object.__setattr__(self, "fraction", _non_negative(self.fraction, "Legato fraction"))


@dataclasses.dataclass(frozen=True)
class Slurred:

	"""Like ``Legato``, but the last note(s) of the phrase keep their duration."""

	fraction: fractions.Fraction = fractions.Fraction(5, 4)

	def __post_init__ (self) -> None:
		object.__setattr__(self, "fraction", _non_negative(self.fraction, "Slurred fraction"))


@dataclasses.dataclass(frozen=True)
class Pedal:

	"""Sustain every note until the end of the phrase."""


@dataclasses.dataclass(frozen=True)
class Marking:

	"""An articulation with no effect on performance (tenuto, fermata, pizzicato...)."""

	name: str

	def __post_init__ (self) -> None:

		if not isinstance(self.name, str) or not self.name:
			raise euterpe.exceptions.ValidationError(f"Marking name must be a non-empty string, got {self.name!r}")


# ---------------------------------------------------------------------------
# Ornaments
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Trill:

	"""Alternate each note with the next scale degree.

	Give either the length of each trilled note (``note_duration``, in the same
	time units as the performance) or the number of notes (``count``).
	"""

	note_duration: typing.Optional[fractions.Fraction] = None
	count: typing.Optional[int] = None

	def __post_init__ (self) -> None:

		if (self.note_duration is None) == (self.count is None):
			raise euterpe.exceptions.ValidationError("Trill needs exactly one of note_duration or count")

		if self.note_duration is not None:
			note_duration = to_fraction(self.note_duration, "Trill note duration")
			if note_duration <= 0:
				raise euterpe.exceptions.ValidationError("Trill note duration must be positive")
			object.__setattr__(self, "note_duration", note_duration)

		if self.count is not None and (isinstance(self.count, bool) or not isinstance(self.count, int) or self.count <= 0):
			raise euterpe.exceptions.ValidationError("Trill count must be a positive integer")


@dataclasses.dataclass(frozen=True)
class Mordent:

	"""Principal, upper neighbour, principal."""


@dataclasses.dataclass(frozen=True)
class InvertedMordent:

	"""Principal, lower neighbour, principal."""


@dataclasses.dataclass(frozen=True)
class DoubleMordent:

	"""Principal and upper neighbour twice, then the principal."""


@dataclasses.dataclass(frozen=True)
class ArpeggioUp:

	"""Roll every chord upwards, splitting its duration evenly."""


@dataclasses.dataclass(frozen=True)
class ArpeggioDown:

	"""Roll every chord downwards, splitting its duration evenly."""


@dataclasses.dataclass(frozen=True)
class DiatonicTranspose:

	"""Move every note by a number of degrees of the current key."""

	degrees: int

	def __post_init__ (self) -> None:

		if isinstance(self.degrees, bool) or not isinstance(self.degrees, int):
			raise euterpe.exceptions.ValidationError(f"DiatonicTranspose degrees must be an integer, got {self.degrees!r}")


PhraseAttribute = typing.Union[
	Accent, Crescendo, Diminuendo, Loudness, Dynamic,
	Ritardando, Accelerando,
	Staccato, Legato, Slurred, Pedal, Marking,
	Trill, Mordent, InvertedMordent, DoubleMordent, ArpeggioUp, ArpeggioDown, DiatonicTranspose,
]

PHRASE_ATTRIBUTE_TYPES: typing.Tuple[type, ...] = typing.get_args(PhraseAttribute)


def tempo_factor (attributes: typing.Iterable[PhraseAttribute]) -> fractions.Fraction:

	"""
	Return the factor by which tempo attributes stretch a phrase's duration.
	"""

	factor = fractions.Fraction(1)

	for attribute in attributes:

		if isinstance(attribute, Ritardando):
			factor *= 1 + attribute.amount

		elif isinstance(attribute, Accelerando):
			factor *= 1 - attribute.amount

	return factor
