"""MIDI volume constants.

Volume is the MIDI attack strength (0-127).
"""

# Note default
DEFAULT_VOLUME = 100

# Context default: notes sound at their own volume
DEFAULT_CONTEXT_VOLUME = 127

# MIDI standard range
MIN_VOLUME = 0
MAX_VOLUME = 127
