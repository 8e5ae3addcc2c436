"""Timed events and performances.

A ``Performance`` is the flat result of interpreting a music tree: events with
absolute onsets, sorted by onset.  Events with equal onsets keep the order in
which the tree produced them (left before right), so sorting is always stable.
"""

import dataclasses
import fractions
import heapq
import operator
import typing


@dataclasses.dataclass(frozen=True)
class Event:

	"""
	One sounding note: absolute onset and duration in whole notes, MIDI pitch, volume and instrument.
	"""

	onset: fractions.Fraction
	duration: fractions.Fraction
	pitch: int
	volume: int
	instrument: str

	@property
	def end (self) -> fractions.Fraction:
		return self.onset + self.duration


_onset = operator.attrgetter("onset")


def merge (*sequences: typing.Iterable[Event]) -> typing.List[Event]:

	"""Merge onset-sorted event sequences into one sorted list.

	``heapq.merge`` is stable: on equal onsets, events from earlier arguments come
	first.
	"""

	return list(heapq.merge(*sequences, key=_onset))


def sort_events (events: typing.Iterable[Event]) -> typing.List[Event]:

	"""
	Stably sort events by onset.
	"""

	return sorted(events, key=_onset)


@dataclasses.dataclass(frozen=True)
class Performance:

	"""
	Events sorted by onset, plus the notional duration of the music that produced them.

	``duration`` is the time a following passage would start at, which may differ
	from ``end_time`` when the last notes ring on (legato) or are cut short (staccato).
	"""

	events: typing.Tuple[Event, ...] = ()
	duration: fractions.Fraction = fractions.Fraction(0)

	def __post_init__ (self) -> None:
		object.__setattr__(self, "events", tuple(self.events))


	@property
	def end_time (self) -> fractions.Fraction:

		"""
		The moment the last event stops sounding (0 for an empty performance).
		"""

		return max((event.end for event in self.events), default=fractions.Fraction(0))


	def instruments (self) -> typing.List[str]:

		"""
		Instruments used, in order of first appearance.
		"""

		return list(dict.fromkeys(event.instrument for event in self.events))


	def __iter__ (self) -> typing.Iterator[Event]:
		return iter(self.events)


	def __len__ (self) -> int:
		return len(self.events)


	def __bool__ (self) -> bool:
		return bool(self.events)
