"""Interpret a music tree into a Performance.

``perform`` walks the tree with an immutable ``Context``.  Each node derives
the context of its children; nothing is shared or mutated, so the result depends
only on the tree, the starting context and the player registry::

    performance = euterpe.performer.perform(melody.with_tempo(2))

    for event in performance:
        print(event.onset, event.pitch)

Events come back sorted by onset.  When onsets are equal, events keep the order
of the tree, left before right.  Interpretation is all-or-nothing: any error
propagates and no partial performance is returned.
"""

import dataclasses
import fractions
import logging
import typing

import euterpe.constants.instruments
import euterpe.constants.velocity
import euterpe.context
import euterpe.control
import euterpe.exceptions
import euterpe.music
import euterpe.performance
import euterpe.phrase
import euterpe.player


logger = logging.getLogger(__name__)

EventList = typing.List[euterpe.performance.Event]


def perform (
	music: euterpe.music.Music,
	context: typing.Optional[euterpe.context.Context] = None,
	players: typing.Optional[euterpe.player.PlayerRegistry] = None
) -> euterpe.performance.Performance:

	"""Interpret ``music`` starting from ``context``.

	Parameters:
		music: The tree to perform.
		context: Starting context (defaults to ``Context.default()``).
		players: Registry the ``Player`` modifier and the context's player are
			resolved in (defaults to ``euterpe.player.default_registry()``).

	Returns:
		A Performance whose ``duration`` equals ``music.duration() / context.tempo``.

	Raises:
		InterpretationError: An instrument cannot be resolved.
		PlayerNotFoundError: A player name is not in the registry.
	"""

	if not isinstance(music, euterpe.music.Music):
		raise euterpe.exceptions.InterpretationError(f"Cannot perform {music!r}")

	if context is None:
		context = euterpe.context.Context.default()

	if players is None:
		players = euterpe.player.default_registry()

	events, duration = _perform(music, context, players)

	logger.debug(f"Performed {len(events)} events over {duration} whole notes")

	return euterpe.performance.Performance(events=tuple(events), duration=duration)


def _perform (music: euterpe.music.Music, context: euterpe.context.Context, players: euterpe.player.PlayerRegistry) -> typing.Tuple[EventList, fractions.Fraction]:

	"""
	Return the events of a node and its notional duration in performance time.
	"""

	if isinstance(music, euterpe.music.Note):
		player = players.resolve(context.player)
		return player.play_note(music, context), context.scale(music.dur)

	if isinstance(music, euterpe.music.Rest):
		return [], context.scale(music.dur)

	if isinstance(music, euterpe.music.Sequential):

		streams: typing.List[EventList] = []
		start = context.start_time

		for part in euterpe.music.flatten(music, euterpe.music.Sequential):
			events, duration = _perform(part, context.derive(start_time=start), players)
			streams.append(events)
			start += duration

		return euterpe.performance.merge(*streams), start - context.start_time

	if isinstance(music, euterpe.music.Parallel):

		streams = []
		longest = fractions.Fraction(0)

		for part in euterpe.music.flatten(music, euterpe.music.Parallel):
			events, duration = _perform(part, context, players)
			streams.append(events)
			longest = max(longest, duration)

		return euterpe.performance.merge(*streams), longest

	if isinstance(music, euterpe.music.Modify):

		if isinstance(music.control, euterpe.control.Phrase):
			return _perform_phrase(music.control.attributes, music.music, context, players)

		return _perform(music.music, apply_control(music.control, context, players), players)

	raise euterpe.exceptions.InterpretationError(f"Unknown music node: {music!r}")


def apply_control (control: euterpe.control.Control, context: euterpe.context.Context, players: euterpe.player.PlayerRegistry) -> euterpe.context.Context:

	"""
	Return the child context that a (non-phrase) modifier produces.
	"""

	if isinstance(control, euterpe.control.Tempo):
		return context.derive(tempo=context.tempo * control.scale)

	if isinstance(control, euterpe.control.Transpose):
		return context.derive(transposition=context.transposition + control.semitones)

	if isinstance(control, euterpe.control.Instrument):

		instrument = euterpe.constants.instruments.normalize_instrument(control.instrument)

		if instrument is None:
			raise euterpe.exceptions.InterpretationError(f"Unknown instrument: {control.instrument!r}")

		return context.derive(instrument=instrument)

	if isinstance(control, euterpe.control.KeySig):
		return context.derive(key=control.key)

	if isinstance(control, euterpe.control.Player):
		players.resolve(control.name)
		return context.derive(player=control.name)

	if isinstance(control, euterpe.control.Dynamics):
		volume = context.volume + control.delta
		volume = max(euterpe.constants.velocity.MIN_VOLUME, min(euterpe.constants.velocity.MAX_VOLUME, volume))
		return context.derive(volume=volume)

	raise euterpe.exceptions.InterpretationError(f"Unsupported modifier: {control!r}")


def _perform_phrase (
	attributes: typing.Sequence[euterpe.phrase.PhraseAttribute],
	music: euterpe.music.Music,
	context: euterpe.context.Context,
	players: euterpe.player.PlayerRegistry
) -> typing.Tuple[EventList, fractions.Fraction]:

	"""Perform a passage under phrase attributes.

	Absolute loudness sets the context volume before the passage is performed (the
	last one wins).  The remaining attributes are then applied in order: tempo
	changes here, everything else by the active player.
	"""

	for attribute in attributes:
		if isinstance(attribute, (euterpe.phrase.Loudness, euterpe.phrase.Dynamic)):
			context = context.derive(volume=attribute.volume)

	events, duration = _perform(music, context, players)
	player = players.resolve(context.player)

	for attribute in attributes:

		if isinstance(attribute, (euterpe.phrase.Loudness, euterpe.phrase.Dynamic)):
			continue

		span = euterpe.player.PhraseSpan(start=context.start_time, duration=duration)

		if isinstance(attribute, euterpe.phrase.Ritardando):
			events = [stretch(e, span, attribute.amount) for e in events]
			duration = duration * (1 + attribute.amount)

		elif isinstance(attribute, euterpe.phrase.Accelerando):
			events = [stretch(e, span, -attribute.amount) for e in events]
			duration = duration * (1 - attribute.amount)

		else:
			events = player.interpret_phrase(events, attribute, context, span)

	return euterpe.performance.sort_events(events), duration


def stretch (event: euterpe.performance.Event, span: euterpe.player.PhraseSpan, amount: fractions.Fraction) -> euterpe.performance.Event:

	"""Move an event under a gradual tempo change.

	The local tempo changes linearly through the phrase, so an event at offset
	``dt`` moves to ``dt * (1 + amount * dt / D)`` and its duration ``d`` becomes
	``d * (1 + amount * (2 * dt + d) / D)``, where ``D`` is the phrase duration.  A
	positive amount slows down, a negative one speeds up; a phrase ending at ``D``
	then ends at ``D * (1 + amount)``.
	"""

	if span.duration == 0:
		return event

	rate = amount / span.duration
	dt = event.onset - span.start

	onset = span.start + dt * max(fractions.Fraction(0), 1 + dt * rate)
	duration = event.duration * max(fractions.Fraction(0), 1 + (2 * dt + event.duration) * rate)

	return dataclasses.replace(event, onset=onset, duration=duration)
