"""Constants for euterpe.

- ``euterpe.constants.durations`` - exact note values as fractions of a whole note
- ``euterpe.constants.velocity`` - MIDI volume bounds and defaults
- ``euterpe.constants.instruments`` - General MIDI program names
"""
