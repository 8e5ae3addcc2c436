"""
Euterpe - Phrasing and players

The same four-bar melody is played four times, each time with a different
player or phrase attributes, so you can hear how interpretation changes a
passage without changing the notes:

  1. The default player: every note exactly as written.
  2. Staccato: short, detached notes.
  3. The fancy player with a crescendo, a mordent and a final ritardando.
  4. The fancy player in G major, diatonically transposed a third up and
     rolled as arpeggios.

Between the passages the structural duration never changes - except for the
ritardando, which is a tempo change and lengthens its phrase on purpose.

How to run
──────────
1. Set MIDI_DEVICE below to your MIDI output (or leave it as None to pick one).
2. Run: python examples/phrasing.py
3. Press Ctrl+C to stop early.
"""

import logging

import euterpe
import euterpe.constants.durations as dur
import euterpe.phrase

logging.basicConfig(level=logging.INFO)

MIDI_DEVICE = None
BPM = 90


melody = euterpe.line_with_duration(["G4", "A4", "B4", "D5", "C5", "B4", "A4", "G4"], dur.QUARTER)

harmony = euterpe.line([
	euterpe.chord(euterpe.note(p, dur.WHOLE, volume=70) for p in ("G3", "B3", "D4")),
	euterpe.chord(euterpe.note(p, dur.WHOLE, volume=70) for p in ("D3", "F#3", "A3")),
])

passage = melody | harmony

literal = passage
detached = passage.with_player("staccato")

expressive = (
	passage.with_phrase(euterpe.phrase.Crescendo("1/2"))
	+ euterpe.note("G4", dur.WHOLE).with_phrase(euterpe.phrase.Mordent(), euterpe.phrase.Ritardando("1/2"))
).with_player("fancy")

rolled = passage.with_phrase(
	euterpe.phrase.DiatonicTranspose(2),
	euterpe.phrase.ArpeggioUp(),
).with_key("G").with_player("fancy")

piece = euterpe.line([literal, detached, expressive, rolled]).with_instrument("rhodes_piano")

performance = euterpe.perform(piece)

logging.info(f"{len(performance)} events over {performance.duration} whole notes")

euterpe.play(performance, device_name=MIDI_DEVICE, bpm=BPM)
