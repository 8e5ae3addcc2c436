"""
Euterpe - an algebra of music, performed and played over MIDI.

Music is written as an immutable expression tree: notes and rests, composed
in sequence (``a + b``) or in parallel (``a | b``), and wrapped in modifiers
that change tempo, transposition, instrument, key, volume, player style or
phrasing.  A performer interprets the tree into a Performance, a flat list of
events with exact onsets, and a renderer streams it to a MIDI port in real time.

What it offers:

- **Exact time.** Durations are ``fractions.Fraction`` values of a whole note,
  so triplets, tempo changes and ritardandos never accumulate rounding error.
- **Algebraic laws.** Sequential and parallel composition are associative and
  ``rest(0)`` is the identity, so melodies can be built and refactored freely.
  Structural operations (``take``, ``drop``, ``times``, ``retrograde``,
  ``transpose_pitches``, grace notes, trills) return new trees.
- **Pluggable players.** How a note sounds is decided by a named player
  strategy: literal, staccato, legato, or the fancy player that interprets
  crescendos, mordents, trills, arpeggios and pedalling.  Register your own.
- **Clean real-time output.** Drift-free scheduling against an absolute clock,
  and cancellation from any thread or Ctrl+C that always releases sounding
  notes before returning.

Minimal example:

    ```python
    import euterpe
    import euterpe.constants.durations as dur

    melody = euterpe.line_with_duration(["C4", "E4", "G4", "C5"], dur.QUARTER)
    music = (melody | euterpe.note("C3", dur.WHOLE)).with_player("legato")

    performance = euterpe.perform(music)
    euterpe.play(performance, bpm=100)
    ```

Package-level exports: ``note``, ``rest``, ``line``, ``chord``,
``line_with_duration``, ``perform``, ``play``, ``Context``, ``KeySignature``,
``Pitch``, ``CancellationToken``, ``Renderer``, ``RenderState``.
"""

import euterpe.cancellation
import euterpe.context
import euterpe.intervals
import euterpe.music
import euterpe.performer
import euterpe.pitch
import euterpe.renderer


note = euterpe.music.note
rest = euterpe.music.rest
line = euterpe.music.line
chord = euterpe.music.chord
line_with_duration = euterpe.music.line_with_duration
perform = euterpe.performer.perform
play = euterpe.renderer.play

CancellationToken = euterpe.cancellation.CancellationToken
Context = euterpe.context.Context
KeySignature = euterpe.intervals.KeySignature
Pitch = euterpe.pitch.Pitch
Renderer = euterpe.renderer.Renderer
RenderState = euterpe.renderer.RenderState
