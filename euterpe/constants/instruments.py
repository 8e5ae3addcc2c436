"""General MIDI instrument names.

``GM_INSTRUMENTS`` lists the 128 melodic programs in program-number order, so
``GM_INSTRUMENTS.index("violin") == 40``.  ``PERCUSSION`` names the General MIDI
drum kit, which lives on channel 10 (index 9) rather than on a program number.

Instruments are referred to by these snake_case names throughout; an integer
program number is accepted wherever an instrument is expected and normalised
to its name by ``normalize_instrument()``.
"""

import typing


PERCUSSION = "percussion"

PERCUSSION_CHANNEL = 9

GM_INSTRUMENTS: typing.List[str] = [
	# Piano
	"acoustic_grand_piano", "bright_acoustic_piano", "electric_grand_piano", "honky_tonk_piano",
	"rhodes_piano", "chorused_piano", "harpsichord", "clavinet",
	# Chromatic percussion
	"celesta", "glockenspiel", "music_box", "vibraphone",
	"marimba", "xylophone", "tubular_bells", "dulcimer",
	# Organ
	"hammond_organ", "percussive_organ", "rock_organ", "church_organ",
	"reed_organ", "accordion", "harmonica", "tango_accordion",
	# Guitar
	"acoustic_guitar_nylon", "acoustic_guitar_steel", "electric_guitar_jazz", "electric_guitar_clean",
	"electric_guitar_muted", "overdriven_guitar", "distortion_guitar", "guitar_harmonics",
	# Bass
	"acoustic_bass", "electric_bass_fingered", "electric_bass_picked", "fretless_bass",
	"slap_bass_1", "slap_bass_2", "synth_bass_1", "synth_bass_2",
	# Strings
	"violin", "viola", "cello", "contrabass",
	"tremolo_strings", "pizzicato_strings", "orchestral_harp", "timpani",
	# Ensemble
	"string_ensemble_1", "string_ensemble_2", "synth_strings_1", "synth_strings_2",
	"choir_aahs", "voice_oohs", "synth_voice", "orchestra_hit",
	# Brass
	"trumpet", "trombone", "tuba", "muted_trumpet",
	"french_horn", "brass_section", "synth_brass_1", "synth_brass_2",
	# Reed
	"soprano_sax", "alto_sax", "tenor_sax", "baritone_sax",
	"oboe", "english_horn", "bassoon", "clarinet",
	# Pipe
	"piccolo", "flute", "recorder", "pan_flute",
	"blown_bottle", "shakuhachi", "whistle", "ocarina",
	# Synth lead
	"lead_1_square", "lead_2_sawtooth", "lead_3_calliope", "lead_4_chiff",
	"lead_5_charang", "lead_6_voice", "lead_7_fifths", "lead_8_bass_lead",
	# Synth pad
	"pad_1_new_age", "pad_2_warm", "pad_3_polysynth", "pad_4_choir",
	"pad_5_bowed", "pad_6_metallic", "pad_7_halo", "pad_8_sweep",
	# Synth effects
	"fx_1_rain", "fx_2_soundtrack", "fx_3_crystal", "fx_4_atmosphere",
	"fx_5_brightness", "fx_6_goblins", "fx_7_echoes", "fx_8_sci_fi",
	# Ethnic
	"sitar", "banjo", "shamisen", "koto",
	"kalimba", "bagpipe", "fiddle", "shanai",
	# Percussive
	"tinkle_bell", "agogo", "steel_drums", "woodblock",
	"taiko_drum", "melodic_drum", "synth_drum", "reverse_cymbal",
	# Sound effects
	"guitar_fret_noise", "breath_noise", "seashore", "bird_tweet",
	"telephone_ring", "helicopter", "applause", "gunshot",
]

DEFAULT_INSTRUMENT = GM_INSTRUMENTS[0]

_PROGRAM_BY_NAME: typing.Dict[str, int] = {name: program for program, name in enumerate(GM_INSTRUMENTS)}


def normalize_instrument (instrument: typing.Union[str, int]) -> typing.Optional[str]:

	"""Return the canonical name of an instrument, or ``None`` when unknown.

	Accepts a General MIDI name (case-insensitive, spaces or hyphens allowed in
	place of underscores), a program number 0-127, or ``"percussion"``.

	Example:
		```python
		normalize_instrument(40)                 # → "violin"
		normalize_instrument("Acoustic Bass")    # → "acoustic_bass"
		normalize_instrument("kazoo")            # → None
		```
	"""

	if isinstance(instrument, bool):
		return None

	if isinstance(instrument, int):
		if 0 <= instrument < len(GM_INSTRUMENTS):
			return GM_INSTRUMENTS[instrument]
		return None

	if not isinstance(instrument, str):
		return None

	name = instrument.strip().lower().replace(" ", "_").replace("-", "_")

	if name == PERCUSSION or name in _PROGRAM_BY_NAME:
		return name

	return None


def program_number (instrument: str) -> int:

	"""
	Return the General MIDI program number for a canonical instrument name (0 for percussion).
	"""

	if instrument == PERCUSSION:
		return 0

	if instrument not in _PROGRAM_BY_NAME:
		raise ValueError(f"Unknown instrument: {instrument!r}")

	return _PROGRAM_BY_NAME[instrument]
