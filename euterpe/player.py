"""Player strategies.

A player decides how a written note becomes sounding events, and how phrase
attributes reshape the events of a passage.  Players are looked up by name
(the ``Player`` modifier) in a ``PlayerRegistry``::

    registry = euterpe.player.default_registry()
    registry.register(MyPlayer(), name="mine")
    euterpe.performer.perform(music.with_player("mine"), players=registry)

Whatever a player does to sounding durations, pitches or volumes, it never
changes the notional duration of a passage, so sequencing is the same under
every player.
"""

import abc
import collections
import dataclasses
import fractions
import logging
import typing

import euterpe.config
import euterpe.constants.velocity
import euterpe.context
import euterpe.exceptions
import euterpe.intervals
import euterpe.music
import euterpe.performance
import euterpe.phrase


logger = logging.getLogger(__name__)

EventList = typing.List[euterpe.performance.Event]


@dataclasses.dataclass(frozen=True)
class PhraseSpan:

	"""
	Where a phrase starts and how long it notionally lasts, in performance time.
	"""

	start: fractions.Fraction
	duration: fractions.Fraction

	def progress (self, onset: fractions.Fraction) -> fractions.Fraction:

		"""
		Position of an onset through the phrase (0 at the start, 1 at the end).
		"""

		if self.duration == 0:
			return fractions.Fraction(0)

		return (onset - self.start) / self.duration


def _clamp_volume (volume: typing.Union[int, fractions.Fraction]) -> int:

	return max(euterpe.constants.velocity.MIN_VOLUME, min(euterpe.constants.velocity.MAX_VOLUME, int(volume)))


def literal_event (note: euterpe.music.Note, context: euterpe.context.Context) -> euterpe.performance.Event:

	"""
	The event a note denotes with no interpretation: written length, transposed pitch, scaled volume.
	"""

	return euterpe.performance.Event(
		onset = context.start_time,
		duration = context.scale(note.dur),
		pitch = note.pitch.absolute + context.transposition,
		volume = context.scale_volume(note.volume),
		instrument = context.instrument,
	)


class Player (abc.ABC):

	"""Abstract base for player strategies."""

	name: str = "player"

	@abc.abstractmethod
	def play_note (self, note: euterpe.music.Note, context: euterpe.context.Context) -> EventList:

		"""Return the events that a note produces under the context."""

		...

	@abc.abstractmethod
	def interpret_phrase (self, events: EventList, attribute: euterpe.phrase.PhraseAttribute, context: euterpe.context.Context, span: PhraseSpan) -> EventList:

		"""Return the phrase's events reshaped by one attribute."""

		...


class DefaultPlayer (Player):

	"""
	Plays notes literally and understands accents, staccato and legato phrases.
	"""

	name = "default"

	def play_note (self, note: euterpe.music.Note, context: euterpe.context.Context) -> EventList:

		return [literal_event(note, context)]


	def interpret_phrase (self, events: EventList, attribute: euterpe.phrase.PhraseAttribute, context: euterpe.context.Context, span: PhraseSpan) -> EventList:

		if isinstance(attribute, euterpe.phrase.Accent):
			return [dataclasses.replace(e, volume=_clamp_volume(e.volume * attribute.factor)) for e in events]

		if isinstance(attribute, (euterpe.phrase.Staccato, euterpe.phrase.Legato)):
			return [dataclasses.replace(e, duration=e.duration * attribute.fraction) for e in events]

		logger.debug(f"{self.name} player ignores {type(attribute).__name__}")

		return events


class StaccatoPlayer (DefaultPlayer):

	"""
	Sounds every note for a fraction of its written length.
	"""

	name = "staccato"

	def __init__ (self, fraction: typing.Union[fractions.Fraction, int, str] = fractions.Fraction(1, 2)) -> None:

		fraction = euterpe.phrase.to_fraction(fraction, "Staccato fraction")

		if not 0 < fraction <= 1:
			raise euterpe.exceptions.ValidationError("Staccato fraction must lie in (0, 1]")

		self.fraction = fraction


	def play_note (self, note: euterpe.music.Note, context: euterpe.context.Context) -> EventList:

		event = literal_event(note, context)

		return [dataclasses.replace(event, duration=event.duration * self.fraction)]


class LegatoPlayer (DefaultPlayer):

	"""
	Lets every note ring into the next by stretching its sounding length.
	"""

	name = "legato"

	def __init__ (self, overlap: typing.Union[fractions.Fraction, int, str] = fractions.Fraction(5, 4)) -> None:

		overlap = euterpe.phrase.to_fraction(overlap, "Legato overlap")

		if overlap < 1:
			raise euterpe.exceptions.ValidationError("Legato overlap must be at least 1")

		self.overlap = overlap


	def play_note (self, note: euterpe.music.Note, context: euterpe.context.Context) -> EventList:

		event = literal_event(note, context)

		return [dataclasses.replace(event, duration=event.duration * self.overlap)]


class FancyPlayer (DefaultPlayer):

	"""
	Plays notes literally and interprets every dynamic, articulation and ornament.

	Crescendo and diminuendo scale each volume linearly with the note's position in
	the phrase.  Ornaments use the context key: a trill or upper mordent alternates
	with the next scale degree, an inverted mordent with the previous one.
	"""

	name = "fancy"

	def interpret_phrase (self, events: EventList, attribute: euterpe.phrase.PhraseAttribute, context: euterpe.context.Context, span: PhraseSpan) -> EventList:

		key = context.key

		if isinstance(attribute, euterpe.phrase.Crescendo):
			return [
				dataclasses.replace(e, volume=_clamp_volume(e.volume * (1 + attribute.amount * span.progress(e.onset))))
				for e in events
			]

		if isinstance(attribute, euterpe.phrase.Diminuendo):
			return [
				dataclasses.replace(e, volume=_clamp_volume(e.volume * max(0, 1 - attribute.amount * span.progress(e.onset))))
				for e in events
			]

		if isinstance(attribute, euterpe.phrase.Slurred):
			return slur(events, attribute.fraction)

		if isinstance(attribute, euterpe.phrase.Pedal):
			return pedal(events)

		if isinstance(attribute, euterpe.phrase.Trill):
			return [t for e in events for t in trill(e, key, attribute.note_duration, attribute.count)]

		if isinstance(attribute, euterpe.phrase.Mordent):
			return [m for e in events for m in mordent(e, key, upper=True)]

		if isinstance(attribute, euterpe.phrase.InvertedMordent):
			return [m for e in events for m in mordent(e, key, upper=False)]

		if isinstance(attribute, euterpe.phrase.DoubleMordent):
			return [m for e in events for m in mordent(e, key, upper=True, double=True)]

		if isinstance(attribute, euterpe.phrase.ArpeggioUp):
			return arpeggio(events, up=True)

		if isinstance(attribute, euterpe.phrase.ArpeggioDown):
			return arpeggio(events, up=False)

		if isinstance(attribute, euterpe.phrase.DiatonicTranspose):
			return [dataclasses.replace(e, pitch=key.diatonic_transpose(e.pitch, attribute.degrees)) for e in events]

		return super().interpret_phrase(events, attribute, context, span)


# ---------------------------------------------------------------------------
# Phrase helpers
# ---------------------------------------------------------------------------

def slur (events: EventList, fraction: fractions.Fraction) -> EventList:

	"""
	Stretch every event except those starting last in the phrase.
	"""

	if not events:
		return events

	last_onset = max(e.onset for e in events)

	return [
		dataclasses.replace(e, duration=e.duration * fraction) if e.onset < last_onset else e
		for e in events
	]


def pedal (events: EventList) -> EventList:

	"""
	Sustain every event until the last one in the phrase stops.
	"""

	if not events:
		return events

	phrase_end = max(e.end for e in events)

	return [dataclasses.replace(e, duration=phrase_end - e.onset) for e in events]


def alternate (event: euterpe.performance.Event, auxiliary: int, durations: typing.Iterable[fractions.Fraction]) -> EventList:

	"""Split an event into consecutive events alternating principal and auxiliary pitches.

	The first event keeps the principal pitch.
	"""

	result: EventList = []
	onset = event.onset

	for i, duration in enumerate(durations):
		pitch = auxiliary if i % 2 else event.pitch
		result.append(dataclasses.replace(event, onset=onset, duration=duration, pitch=pitch))
		onset += duration

	return result


def upper_neighbour (pitch: int, key: euterpe.intervals.KeySignature) -> int:

	return key.diatonic_transpose(pitch, 1)


def lower_neighbour (pitch: int, key: euterpe.intervals.KeySignature) -> int:

	return key.diatonic_transpose(pitch, -1)


def trill (event: euterpe.performance.Event, key: euterpe.intervals.KeySignature, note_duration: typing.Optional[fractions.Fraction] = None, count: typing.Optional[int] = None) -> EventList:

	"""Trill an event with its upper neighbour in the key.

	With ``note_duration`` the event is filled with notes of that length and any
	remainder becomes a final shorter note; with ``count`` it is split evenly.
	"""

	if count is not None:
		durations = [event.duration / count] * count

	elif note_duration is not None:
		whole, remainder = divmod(event.duration, note_duration)
		durations = [note_duration] * int(whole)
		if remainder:
			durations.append(remainder)

	else:
		raise euterpe.exceptions.ValidationError("Trill needs either note_duration or count")

	return alternate(event, upper_neighbour(event.pitch, key), durations)


def mordent (event: euterpe.performance.Event, key: euterpe.intervals.KeySignature, upper: bool = True, double: bool = False) -> EventList:

	"""A quick alternation at the start of an event.

	A mordent plays two eighths of the event and holds the principal for the
	remaining three quarters; a double mordent plays four eighths and holds the
	remaining half.
	"""

	auxiliary = upper_neighbour(event.pitch, key) if upper else lower_neighbour(event.pitch, key)
	short = event.duration / 8

	if double:
		durations = [short] * 4 + [event.duration / 2]
	else:
		durations = [short] * 2 + [event.duration * fractions.Fraction(3, 4)]

	return alternate(event, auxiliary, durations)


MAX_ARPEGGIO_SIZE = 8


def arpeggio (events: EventList, up: bool = True) -> EventList:

	"""Roll every chord of the phrase.

	Events sharing onset and duration form a chord.  Chords of two to eight notes
	are split into equal consecutive slices ordered by pitch (ascending or
	descending); single notes and larger clusters are left as they are.
	"""

	chords: typing.Dict[typing.Tuple[fractions.Fraction, fractions.Fraction], EventList] = collections.defaultdict(list)

	for event in events:
		chords[(event.onset, event.duration)].append(event)

	result: EventList = []

	for (onset, duration), chord in chords.items():

		if not 2 <= len(chord) <= MAX_ARPEGGIO_SIZE:
			result.extend(chord)
			continue

		ordered = sorted(chord, key=lambda e: e.pitch, reverse=not up)
		step = duration / len(ordered)

		result.extend(
			dataclasses.replace(e, onset=onset + step * i, duration=step)
			for i, e in enumerate(ordered)
		)

	return euterpe.performance.sort_events(result)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class PlayerRegistry:

	"""
	Player strategies by name.
	"""

	def __init__ (self) -> None:
		self._players: typing.Dict[str, Player] = {}

	def register (self, player: Player, name: typing.Optional[str] = None) -> None:

		"""
		Register a player under ``name`` (defaults to the player's own name), replacing any previous one.
		"""

		if not isinstance(player, Player):
			raise TypeError(f"Expected a Player, got {player!r}")

		name = name if name is not None else player.name

		if name in self._players:
			logger.info(f"Replacing player {name!r}")

		self._players[name] = player

	def resolve (self, name: str) -> Player:

		"""
		Return the player registered under ``name``.

		Raises:
			PlayerNotFoundError: If no player has that name.
		"""

		if name not in self._players:
			raise euterpe.exceptions.PlayerNotFoundError(name)

		return self._players[name]

	def names (self) -> typing.List[str]:
		return sorted(self._players)

	def __contains__ (self, name: object) -> bool:
		return name in self._players


def default_registry (config: typing.Optional[euterpe.config.Config] = None) -> PlayerRegistry:

	"""
	A registry holding the built-in players, configured from ``config`` when given.
	"""

	if config is None:
		config = euterpe.config.Config()

	registry = PlayerRegistry()
	registry.register(DefaultPlayer())
	registry.register(StaccatoPlayer(config.staccato_fraction))
	registry.register(LegatoPlayer(config.legato_overlap))
	registry.register(FancyPlayer())

	return registry
