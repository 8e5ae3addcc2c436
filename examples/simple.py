"""
Euterpe - Frère Jacques in canon

The tune is written once as a line of notes and then played as a round:
four voices enter two bars apart, each on its own instrument.  The whole
piece is a single expression built with ``+`` (one after another) and ``|``
(at the same time).

How to run
──────────
1. Set MIDI_DEVICE below to your MIDI output (or leave it as None to pick one).
2. Run: python examples/simple.py
3. Press Ctrl+C to stop early.
"""

import logging

import euterpe
import euterpe.constants.durations as dur

logging.basicConfig(level=logging.INFO)

MIDI_DEVICE = None
BPM = 112


def bar (pitches, durations):

	return euterpe.line(euterpe.note(p, d) for p, d in zip(pitches, durations))


q, e, h = dur.QUARTER, dur.EIGHTH, dur.HALF

tune = euterpe.line([
	bar(["F4", "G4", "A4", "F4"], [q, q, q, q]).times(2),
	bar(["A4", "Bb4", "C5"], [q, q, h]).times(2),
	bar(["C5", "D5", "C5", "Bb4", "A4", "F4"], [e, e, e, e, q, q]).times(2),
	bar(["F4", "C4", "F4"], [q, q, h]).times(2),
])

voices = ["acoustic_grand_piano", "flute", "clarinet", "cello"]

canon = euterpe.chord(
	(euterpe.rest(2 * i) + tune.with_transpose(-12 if instrument == "cello" else 0)).with_instrument(instrument)
	for i, instrument in enumerate(voices)
)

performance = euterpe.perform(canon)

logging.info(f"{len(performance)} notes, {performance.duration} whole notes")

euterpe.play(performance, device_name=MIDI_DEVICE, bpm=BPM)
