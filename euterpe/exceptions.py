"""Error taxonomy.

- ``ValidationError`` - a malformed value, raised when it is constructed.
- ``InterpretationError`` - a modifier that cannot be resolved while performing.
- ``PlayerNotFoundError`` - an unknown player name (an ``InterpretationError``).
- ``RenderError`` - the MIDI output could not be opened or written.

Interruption during rendering is not an error; see ``euterpe.renderer.RenderState``.
"""


class ValidationError (ValueError):

	"""
	Raised when a primitive value is malformed at construction time.
	"""


class InterpretationError (Exception):

	"""
	Raised when a music tree cannot be performed.
	"""


class PlayerNotFoundError (InterpretationError, LookupError):

	"""
	Raised when a player name is not present in the registry.
	"""

	def __init__ (self, name: str) -> None:

		super().__init__(f"Player not found: {name!r}")
		self.name = name


class RenderError (Exception):

	"""
	Raised when the MIDI output is unavailable or a write fails.
	"""
