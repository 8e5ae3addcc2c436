import fractions

import pytest

import euterpe.constants.durations as dur
import euterpe.context
import euterpe.exceptions
import euterpe.intervals
import euterpe.music
import euterpe.performance
import euterpe.performer
import euterpe.phrase
import euterpe.player

from euterpe.music import note, rest


F = fractions.Fraction


def _summary (performance: euterpe.performance.Performance) -> list[tuple]:

	"""Reduce events to (onset, duration, pitch) for compact assertions."""

	return [(e.onset, e.duration, e.pitch) for e in performance]


def test_single_note () -> None:

	"""A note becomes one event under the default context."""

	performance = euterpe.performer.perform(note("C4", dur.QUARTER))

	assert len(performance) == 1

	event = performance.events[0]

	assert event == euterpe.performance.Event(F(0), F(1, 4), 60, 100, "acoustic_grand_piano")
	assert performance.duration == F(1, 4)
	assert performance.end_time == F(1, 4)


def test_sequential_advances_onsets () -> None:

	"""Each part of a line starts when the previous one ends, rests included."""

	m = note("C4", dur.QUARTER) + rest(dur.QUARTER) + note("E4", dur.HALF)

	performance = euterpe.performer.perform(m)

	assert _summary(performance) == [(F(0), F(1, 4), 60), (F(1, 2), F(1, 2), 64)]
	assert performance.duration == 1


def test_parallel_keeps_left_first_on_ties () -> None:

	"""Simultaneous events keep left-to-right order."""

	m = note("G4", dur.HALF) | note("C4", dur.QUARTER) | note("E4", dur.WHOLE)

	performance = euterpe.performer.perform(m)

	assert [e.pitch for e in performance] == [67, 60, 64]
	assert performance.duration == 1


def test_parallel_merges_by_onset () -> None:

	"""Events from both voices are interleaved by onset."""

	upper = note("C5", dur.QUARTER) + note("D5", dur.QUARTER)
	lower = rest(dur.EIGHTH) + note("C3", dur.QUARTER)

	performance = euterpe.performer.perform(upper | lower)

	assert [(e.onset, e.pitch) for e in performance] == [(F(0), 72), (F(1, 8), 48), (F(1, 4), 74)]


def test_empty_performance () -> None:

	"""Silence performs to no events and end time zero."""

	performance = euterpe.performer.perform(rest(dur.HALF))

	assert not performance
	assert performance.end_time == 0
	assert performance.duration == dur.HALF


def test_tempo_scales_time () -> None:

	"""Doubling the tempo halves onsets and durations."""

	m = (note("C4", dur.QUARTER) + note("D4", dur.QUARTER)).with_tempo(2)

	performance = euterpe.performer.perform(m)

	assert _summary(performance) == [(F(0), F(1, 8), 60), (F(1, 8), F(1, 8), 62)]
	assert performance.duration == F(1, 4)


def test_nested_modifiers_accumulate () -> None:

	"""Transpositions add up and tempos multiply."""

	m = note("C4", dur.WHOLE).with_transpose(2).with_transpose(3).with_tempo(2).with_tempo(2)

	performance = euterpe.performer.perform(m)

	assert _summary(performance) == [(F(0), F(1, 4), 65)]


def test_transposition_range_checked_at_render_time () -> None:

	"""The performer does not reject pitches that leave the MIDI range."""

	performance = euterpe.performer.perform(note("G9", dur.QUARTER).with_transpose(5))

	assert performance.events[0].pitch == 132


def test_instrument_modifier () -> None:

	"""Instruments are normalized; unknown ones fail during performance."""

	m = note("C4", dur.QUARTER).with_instrument("Acoustic Bass") + note("D4", dur.QUARTER).with_instrument(40)

	performance = euterpe.performer.perform(m)

	assert performance.instruments() == ["acoustic_bass", "violin"]

	with pytest.raises(euterpe.exceptions.InterpretationError):
		euterpe.performer.perform(note("C4", dur.QUARTER).with_instrument("kazoo"))


def test_volume_scaling () -> None:

	"""Event volume is the note volume scaled by the context volume."""

	m = note("C4", dur.QUARTER, volume=100).with_dynamics(-27)

	assert euterpe.performer.perform(m).events[0].volume == round(100 * 100 / 127)

	loud = note("C4", dur.QUARTER, volume=100).with_dynamics(50)

	assert euterpe.performer.perform(loud).events[0].volume == 100


def test_unknown_player_fails () -> None:

	"""An unregistered player name raises PlayerNotFoundError, an InterpretationError."""

	m = note("C4", dur.QUARTER).with_player("nobody")

	with pytest.raises(euterpe.exceptions.PlayerNotFoundError) as info:
		euterpe.performer.perform(m)

	assert info.value.name == "nobody"
	assert isinstance(info.value, euterpe.exceptions.InterpretationError)


def test_players_do_not_change_sequencing () -> None:

	"""Staccato and legato change sounding lengths but not onsets or the duration."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4"], dur.QUARTER)

	literal = euterpe.performer.perform(m)
	short = euterpe.performer.perform(m.with_player("staccato"))
	long = euterpe.performer.perform(m.with_player("legato"))

	assert [e.onset for e in short] == [e.onset for e in literal] == [e.onset for e in long]
	assert short.duration == literal.duration == long.duration == F(3, 4)
	assert [e.duration for e in short] == [F(1, 8)] * 3
	assert [e.duration for e in long] == [F(5, 16)] * 3
	assert long.end_time == F(3, 4) + F(1, 16)


def test_custom_registry () -> None:

	"""A caller-supplied registry is used for lookups."""

	registry = euterpe.player.PlayerRegistry()
	registry.register(euterpe.player.StaccatoPlayer(F(1, 4)), name="default")

	performance = euterpe.performer.perform(note("C4", 1), players=registry)

	assert performance.events[0].duration == F(1, 4)

	with pytest.raises(euterpe.exceptions.PlayerNotFoundError):
		euterpe.performer.perform(note("C4", 1).with_player("fancy"), players=registry)


def test_starting_context () -> None:

	"""Performance can start from any context."""

	context = euterpe.context.Context(start_time=F(2), tempo=F(1, 2), transposition=12)

	performance = euterpe.performer.perform(note("C4", dur.QUARTER), context=context)

	assert _summary(performance) == [(F(2), F(1, 2), 72)]
	assert performance.duration == F(1, 2)


@pytest.mark.parametrize("music", [
	note("C4", dur.QUARTER) + (note("E4", dur.HALF) | rest(dur.WHOLE)).with_tempo(3),
	(note("C4", dur.EIGHTH).times(3) | note("G3", dur.HALF)).with_phrase(euterpe.phrase.Ritardando("1/3")),
	euterpe.music.line_with_duration([60, 62, 64, 65], dur.EIGHTH).with_phrase(euterpe.phrase.Accelerando("1/2"), euterpe.phrase.Staccato()),
	(note("C4", dur.QUARTER) + note("D4", dur.QUARTER)).with_player("legato").with_tempo("2/3"),
	note("D4", dur.HALF).with_phrase(euterpe.phrase.Trill(count=4)).with_player("fancy") + rest(dur.EIGHTH),
])
def test_duration_matches_structure (music: euterpe.music.Music) -> None:

	"""The performed duration always equals the structural one scaled by the tempo."""

	context = euterpe.context.Context(tempo=F(3, 2))

	assert euterpe.performer.perform(music, context=context).duration == music.duration() / context.tempo


def test_events_sorted_by_onset () -> None:

	"""Performances are always sorted, even after ornaments reorder events."""

	m = (note("C4", dur.HALF) | note("E4", dur.HALF) | note("G4", dur.HALF)).with_phrase(euterpe.phrase.ArpeggioDown())
	m = (m | note("C3", dur.QUARTER) + note("G3", dur.QUARTER)).with_player("fancy")

	onsets = [e.onset for e in euterpe.performer.perform(m)]

	assert onsets == sorted(onsets)


def test_loudness_sets_phrase_volume () -> None:

	"""Absolute loudness replaces the context volume for the phrase; the last one wins."""

	m = note("C4", dur.QUARTER, volume=127).with_phrase(
		euterpe.phrase.Loudness(20),
		euterpe.phrase.Dynamic(euterpe.phrase.StdLoudness.FORTE),
	)

	assert euterpe.performer.perform(m).events[0].volume == 100


def test_ritardando_stretches_phrase () -> None:

	"""Later notes move further and get longer; the phrase ends at D * (1 + x)."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4", "F4"], dur.QUARTER).with_phrase(euterpe.phrase.Ritardando(1))

	performance = euterpe.performer.perform(m)

	assert [e.onset for e in performance] == [F(0), F(5, 16), F(3, 4), F(21, 16)]
	assert [e.duration for e in performance] == [F(5, 16), F(7, 16), F(9, 16), F(11, 16)]
	assert performance.duration == 2
	assert performance.end_time == 2


def test_accelerando_compresses_phrase () -> None:

	"""Accelerando compresses the phrase to D * (1 - x)."""

	m = euterpe.music.line_with_duration(["C4", "D4"], dur.HALF).with_phrase(euterpe.phrase.Accelerando("1/2"))

	performance = euterpe.performer.perform(m)

	assert [e.onset for e in performance] == [F(0), F(3, 8)]
	assert performance.end_time == F(1, 2)
	assert performance.duration == F(1, 2)


def test_phrase_is_positioned_by_context () -> None:

	"""A ritardando later in a piece stretches from its own start."""

	phrase = (note("C4", dur.HALF) + note("D4", dur.HALF)).with_phrase(euterpe.phrase.Ritardando(1))
	m = note("B3", 1) + phrase + note("E4", dur.QUARTER)

	performance = euterpe.performer.perform(m)

	assert [e.onset for e in performance] == [F(0), F(1), F(7, 4), F(3)]


def test_default_player_ignores_fancy_attributes () -> None:

	"""The default player leaves ornaments and crescendos alone."""

	m = (note("C4", dur.QUARTER) + note("D4", dur.QUARTER)).with_phrase(euterpe.phrase.Crescendo(1), euterpe.phrase.Mordent())

	performance = euterpe.performer.perform(m)

	assert [(e.pitch, e.volume) for e in performance] == [(60, 100), (62, 100)]


def test_key_signature_reaches_players () -> None:

	"""Diatonic ornaments use the key from KeySig."""

	m = note("E4", dur.QUARTER).with_phrase(euterpe.phrase.DiatonicTranspose(1)).with_player("fancy")

	assert euterpe.performer.perform(m).events[0].pitch == 65
	assert euterpe.performer.perform(m.with_key("E", "major")).events[0].pitch == 66


def test_performance_is_deterministic () -> None:

	"""The same tree and context always give the same performance."""

	m = euterpe.music.line_with_duration(["C4", "E4", "G4"], dur.EIGHTH).with_phrase(euterpe.phrase.Trill(note_duration=F(1, 32))).with_player("fancy")

	assert euterpe.performer.perform(m) == euterpe.performer.perform(m)


SAMPLE_TREES = [
	note("C4", dur.QUARTER) + note("E4", dur.QUARTER),
	(note("C4", dur.HALF) | note("E4", dur.QUARTER)).with_tempo(2) + rest(dur.EIGHTH),
	euterpe.music.line_with_duration(["C4", "D4", "E4"], dur.QUARTER).with_phrase(euterpe.phrase.Crescendo("1/2")).with_player("fancy"),
	note("D4", dur.HALF).with_phrase(euterpe.phrase.Ritardando("1/2")) + note("G4", dur.QUARTER).with_phrase(euterpe.phrase.Mordent()).with_key("G").with_player("fancy"),
	(note("C4", dur.HALF) | note("E4", dur.HALF) | note("G4", dur.HALF)).with_phrase(euterpe.phrase.ArpeggioUp(), euterpe.phrase.Trill(count=2)).with_player("fancy").with_tempo("3/2"),
]


@pytest.mark.parametrize("music", SAMPLE_TREES)
@pytest.mark.parametrize("semitones", [1, 7, -12])
def test_transposition_round_trip (music: euterpe.music.Music, semitones: int) -> None:

	"""Transposing up and back down again performs exactly like the original."""

	there_and_back = music.with_transpose(semitones).with_transpose(-semitones)

	assert euterpe.performer.perform(there_and_back) == euterpe.performer.perform(music)


@pytest.mark.parametrize("a, b, c", [
	tuple(SAMPLE_TREES[0:3]),
	tuple(SAMPLE_TREES[1:4]),
	tuple(SAMPLE_TREES[2:5]),
	(SAMPLE_TREES[4], SAMPLE_TREES[0], SAMPLE_TREES[3]),
	(note("C4", dur.QUARTER), note("E4", dur.QUARTER), note("G4", dur.QUARTER).with_tempo(2)),
])
def test_parallel_associativity (a: euterpe.music.Music, b: euterpe.music.Music, c: euterpe.music.Music) -> None:

	"""Grouping of parallel voices never changes the performance, tie order included."""

	left_grouped = euterpe.performer.perform((a | b) | c)
	right_grouped = euterpe.performer.perform(a | (b | c))

	assert left_grouped == right_grouped
	assert left_grouped.events == tuple(sorted(left_grouped.events, key=lambda e: e.onset))
