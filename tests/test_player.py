import fractions

import pytest

import euterpe.config
import euterpe.constants.durations as dur
import euterpe.context
import euterpe.exceptions
import euterpe.intervals
import euterpe.music
import euterpe.performance
import euterpe.performer
import euterpe.phrase
import euterpe.player

from euterpe.music import note


F = fractions.Fraction

C_MAJOR = euterpe.intervals.KeySignature("C")


def _event (onset: F, duration: F, pitch: int, volume: int = 100) -> euterpe.performance.Event:

	return euterpe.performance.Event(onset, duration, pitch, volume, "acoustic_grand_piano")


def _fancy (music: euterpe.music.Music) -> list[euterpe.performance.Event]:

	return list(euterpe.performer.perform(music.with_player("fancy")))


def test_default_player_is_literal () -> None:

	"""The default player emits exactly the written note."""

	context = euterpe.context.Context(start_time=F(1, 2), transposition=-2, volume=64)
	events = euterpe.player.DefaultPlayer().play_note(note("D4", dur.HALF, volume=127), context)

	assert events == [_event(F(1, 2), F(1, 2), 60, 64)]


def test_staccato_and_legato_players_validate () -> None:

	"""Player parameters are checked when the player is built."""

	with pytest.raises(euterpe.exceptions.ValidationError):
		euterpe.player.StaccatoPlayer(0)

	with pytest.raises(euterpe.exceptions.ValidationError):
		euterpe.player.StaccatoPlayer("3/2")

	with pytest.raises(euterpe.exceptions.ValidationError):
		euterpe.player.LegatoPlayer("1/2")


def test_accent_scales_and_clamps_volume () -> None:

	"""Accent multiplies volumes without leaving 0-127."""

	events = [_event(F(0), F(1, 4), 60, 80), _event(F(1, 4), F(1, 4), 62, 100)]
	span = euterpe.player.PhraseSpan(F(0), F(1, 2))
	context = euterpe.context.Context()

	accented = euterpe.player.DefaultPlayer().interpret_phrase(events, euterpe.phrase.Accent("3/2"), context, span)

	assert [e.volume for e in accented] == [120, 127]


def test_crescendo_grows_through_phrase () -> None:

	"""Crescendo raises each note in proportion to its position."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4", "F4"], dur.QUARTER, volume=80)
	events = _fancy(m.with_phrase(euterpe.phrase.Crescendo(1)))

	assert [e.volume for e in events] == [80, 100, 120, 127]


def test_diminuendo_fades_through_phrase () -> None:

	"""Diminuendo by 1 fades towards silence."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4", "F4"], dur.QUARTER, volume=127)
	events = _fancy(m.with_phrase(euterpe.phrase.Diminuendo(1)))

	assert [e.volume for e in events] == [127, 95, 63, 31]


def test_slurred_keeps_last_note () -> None:

	"""Slurred stretches every note except the last."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4"], dur.QUARTER)
	events = _fancy(m.with_phrase(euterpe.phrase.Slurred()))

	assert [e.duration for e in events] == [F(5, 16), F(5, 16), F(1, 4)]


def test_pedal_sustains_to_phrase_end () -> None:

	"""Pedal holds every note until the phrase stops sounding."""

	m = euterpe.music.line_with_duration(["C4", "D4", "E4"], dur.QUARTER)
	events = _fancy(m.with_phrase(euterpe.phrase.Pedal()))

	assert [e.end for e in events] == [F(3, 4)] * 3


def test_trill_uses_key () -> None:

	"""A trill alternates with the next degree of the key."""

	events = _fancy(note("E4", dur.QUARTER).with_phrase(euterpe.phrase.Trill(count=4)))

	assert [(e.onset, e.pitch) for e in events] == [(F(0), 64), (F(1, 16), 65), (F(1, 8), 64), (F(3, 16), 65)]


def test_trill_by_note_duration_keeps_remainder () -> None:

	"""A trill by length ends with the leftover time."""

	events = euterpe.player.trill(_event(F(1), F(5, 16), 60), C_MAJOR, note_duration=F(1, 8))

	assert [(e.onset, e.duration, e.pitch) for e in events] == [
		(F(1), F(1, 8), 60),
		(F(9, 8), F(1, 8), 62),
		(F(5, 4), F(1, 16), 60),
	]


def test_mordents () -> None:

	"""Mordents split the note into eighths and hold the principal."""

	event = _event(F(0), F(1), 60)

	upper = euterpe.player.mordent(event, C_MAJOR, upper=True)
	lower = euterpe.player.mordent(event, C_MAJOR, upper=False)
	double = euterpe.player.mordent(event, C_MAJOR, upper=True, double=True)

	assert [(e.pitch, e.duration) for e in upper] == [(60, F(1, 8)), (62, F(1, 8)), (60, F(3, 4))]
	assert [e.pitch for e in lower] == [60, 59, 60]
	assert [(e.pitch, e.duration) for e in double] == [(60, F(1, 8)), (62, F(1, 8)), (60, F(1, 8)), (62, F(1, 8)), (60, F(1, 2))]
	assert sum(e.duration for e in double) == 1
	assert [e.onset for e in upper] == [F(0), F(1, 8), F(1, 4)]


def test_mordent_phrase () -> None:

	"""The fancy player applies mordents from phrase attributes."""

	events = _fancy(note("A4", dur.HALF).with_phrase(euterpe.phrase.InvertedMordent()))

	assert [e.pitch for e in events] == [69, 67, 69]


def test_arpeggio_up_and_down () -> None:

	"""Chords roll in pitch order, single notes stay put."""

	chord = euterpe.music.chord([note("G4", dur.HALF), note("C4", dur.HALF), note("E4", dur.HALF)])
	melody = note("C5", dur.QUARTER)

	up = _fancy((chord + melody).with_phrase(euterpe.phrase.ArpeggioUp()))
	down = _fancy(chord.with_phrase(euterpe.phrase.ArpeggioDown()))

	assert [(e.onset, e.duration, e.pitch) for e in up] == [
		(F(0), F(1, 6), 60),
		(F(1, 6), F(1, 6), 64),
		(F(1, 3), F(1, 6), 67),
		(F(1, 2), F(1, 4), 72),
	]
	assert [e.pitch for e in down] == [67, 64, 60]


def test_diatonic_transpose_phrase () -> None:

	"""Diatonic transposition follows the key, not semitones."""

	m = euterpe.music.line_with_duration(["C4", "E4", "B4"], dur.QUARTER).with_phrase(euterpe.phrase.DiatonicTranspose(2))

	assert [e.pitch for e in _fancy(m)] == [64, 67, 74]


def test_staccato_phrase_on_default_player () -> None:

	"""The default player honours staccato and legato phrases."""

	m = note("C4", dur.HALF).with_phrase(euterpe.phrase.Staccato("1/4"))

	assert euterpe.performer.perform(m).events[0].duration == F(1, 8)

	m = note("C4", dur.HALF).with_phrase(euterpe.phrase.Legato("3/2"))

	assert euterpe.performer.perform(m).events[0].duration == F(3, 4)


def test_registry () -> None:

	"""The registry resolves registered names and reports missing ones."""

	registry = euterpe.player.default_registry()

	assert registry.names() == ["default", "fancy", "legato", "staccato"]
	assert "fancy" in registry
	assert "nobody" not in registry
	assert isinstance(registry.resolve("legato"), euterpe.player.LegatoPlayer)

	with pytest.raises(euterpe.exceptions.PlayerNotFoundError):
		registry.resolve("nobody")

	with pytest.raises(LookupError):
		registry.resolve("nobody")

	with pytest.raises(TypeError):
		registry.register("fancy")  # type: ignore[arg-type]


def test_registry_from_config () -> None:

	"""Configured fractions reach the built-in players."""

	config = euterpe.config.Config(staccato_fraction="1/3", legato_overlap="3/2")
	registry = euterpe.player.default_registry(config)

	assert registry.resolve("staccato").fraction == F(1, 3)  # type: ignore[attr-defined]
	assert registry.resolve("legato").overlap == F(3, 2)  # type: ignore[attr-defined]


def test_custom_player () -> None:

	"""Any Player subclass can be registered and selected by name."""

	class OctavePlayer (euterpe.player.DefaultPlayer):

		"""Doubles every note an octave up."""

		name = "octaves"

		def play_note (self, note: euterpe.music.Note, context: euterpe.context.Context) -> list[euterpe.performance.Event]:

			events = super().play_note(note, context)

			return events + [euterpe.performance.Event(e.onset, e.duration, e.pitch + 12, e.volume, e.instrument) for e in events]

	registry = euterpe.player.default_registry()
	registry.register(OctavePlayer())

	performance = euterpe.performer.perform(note("C4", dur.QUARTER).with_player("octaves"), players=registry)

	assert [e.pitch for e in performance] == [60, 72]
	assert performance.duration == dur.QUARTER


@pytest.mark.parametrize("build", [
	lambda: euterpe.phrase.Dynamic("forte"),
	lambda: euterpe.phrase.Dynamic(100),
	lambda: euterpe.phrase.DiatonicTranspose("2"),
	lambda: euterpe.phrase.DiatonicTranspose(1.5),
	lambda: euterpe.phrase.DiatonicTranspose(True),
	lambda: euterpe.phrase.Trill(count=True),
	lambda: euterpe.phrase.Trill(count=2.0),
	lambda: euterpe.phrase.Marking(3),
	lambda: euterpe.phrase.Marking(""),
])
def test_malformed_attributes_fail_when_built (build: object) -> None:

	"""Attribute values are checked at construction, before anything is performed."""

	with pytest.raises(euterpe.exceptions.ValidationError):
		build()  # type: ignore[operator]


def test_well_formed_attributes_are_kept () -> None:

	"""Valid attribute values pass through unchanged."""

	assert euterpe.phrase.Dynamic(euterpe.phrase.StdLoudness.FORTE).volume == 100
	assert euterpe.phrase.DiatonicTranspose(-2).degrees == -2
	assert euterpe.phrase.Trill(count=4).count == 4
	assert euterpe.phrase.Marking("fermata").name == "fermata"

	events = _fancy(note("C4", dur.QUARTER, volume=127).with_phrase(euterpe.phrase.Dynamic(euterpe.phrase.StdLoudness.PIANO)))

	assert [e.volume for e in events] == [60]
