"""The music algebra.

A piece of music is an immutable tree built from five kinds of node:

- ``Note(pitch, duration, volume)`` and ``Rest(duration)`` - the primitives.
- ``Sequential(left, right)`` - play ``left``, then ``right`` once it has ended.
- ``Parallel(left, right)`` - play both from the same moment.
- ``Modify(control, music)`` - play ``music`` under a modifier from ``euterpe.control``.

Durations are exact fractions of a whole note.  Trees compose with operators::

    import euterpe.constants.durations as dur
    from euterpe.music import note, rest

    melody = note("C4", dur.QUARTER) + note("E4", dur.QUARTER) + rest(dur.HALF)
    harmony = melody | note("G3", dur.WHOLE)
    faster = harmony.with_tempo(2)

The algebra obeys a handful of laws: sequential and parallel composition are
associative, ``rest(0)`` is the identity of sequential composition, and the
duration of ``a + b`` is the sum of the parts while that of ``a | b`` is the
maximum.  Constructors validate their inputs immediately; nothing is deferred
to performance time.
"""

import dataclasses
import fractions
import typing

import euterpe.constants.durations
import euterpe.constants.velocity
import euterpe.control
import euterpe.exceptions
import euterpe.intervals
import euterpe.phrase
import euterpe.pitch


PitchLike = typing.Union[euterpe.pitch.Pitch, str, int]
DurationLike = typing.Union[fractions.Fraction, int, str, float]
T = typing.TypeVar("T")


def to_duration (value: DurationLike) -> fractions.Fraction:

	"""
	Coerce a value to a non-negative exact duration in whole notes.
	"""

	duration = euterpe.phrase.to_fraction(value, "Duration")

	if duration < 0:
		raise euterpe.exceptions.ValidationError(f"Duration cannot be negative, got {duration}")

	return duration


def to_pitch (value: PitchLike) -> euterpe.pitch.Pitch:

	"""
	Accept a Pitch, scientific notation (``"C#4"``) or an absolute pitch number.
	"""

	if isinstance(value, euterpe.pitch.Pitch):
		return value

	if isinstance(value, str):
		return euterpe.pitch.Pitch.parse(value)

	if isinstance(value, int) and not isinstance(value, bool):
		return euterpe.pitch.Pitch.from_absolute(value)

	raise euterpe.exceptions.ValidationError(f"Cannot interpret {value!r} as a pitch")


class Music:

	"""
	Base class of every node of the algebra.
	"""

	def __add__ (self, other: "Music") -> "Music":

		return sequential(self, other)


	def __or__ (self, other: "Music") -> "Music":

		return parallel(self, other)


	def __and__ (self, control: euterpe.control.Control) -> "Music":

		return modify(control, self)


	def __truediv__ (self, other: "Music") -> "Music":

		return truncating_parallel(self, other)


	def duration (self) -> fractions.Fraction:

		"""Structural duration in whole notes, relative to the ambient tempo.

		Tempo modifiers divide the inner duration by their scale, and phrase tempo
		attributes stretch it (see ``euterpe.phrase.tempo_factor``).  Players never
		change it.
		"""

		raise NotImplementedError


	# -- Modifier shortcuts -------------------------------------------------

	def with_tempo (self, scale: DurationLike) -> "Music":

		"""
		Play faster (``scale`` > 1) or slower (``scale`` < 1).
		"""

		return modify(euterpe.control.Tempo(scale), self)


	def with_transpose (self, semitones: int) -> "Music":

		return modify(euterpe.control.Transpose(semitones), self)


	def with_instrument (self, instrument: typing.Union[str, int]) -> "Music":

		return modify(euterpe.control.Instrument(instrument), self)


	def with_key (self, tonic: str, mode: str = "major") -> "Music":

		return modify(euterpe.control.KeySig(euterpe.intervals.KeySignature(tonic, mode)), self)


	def with_player (self, name: str) -> "Music":

		return modify(euterpe.control.Player(name), self)


	def with_dynamics (self, delta: int) -> "Music":

		return modify(euterpe.control.Dynamics(delta), self)


	def with_phrase (self, *attributes: euterpe.phrase.PhraseAttribute) -> "Music":

		return modify(euterpe.control.Phrase(attributes), self)


	# -- Structural transformations ----------------------------------------

	def take (self, amount: DurationLike) -> "Music":

		"""Keep only the first ``amount`` whole notes.

		Notes crossing the boundary are shortened.  Tempo modifiers are taken into
		account, so ``m.with_tempo(2).take(1)`` keeps two whole notes of ``m``.
		"""

		amount = to_duration(amount)

		if amount == 0:
			return rest(0)

		return self._take(amount)


	def _take (self, amount: fractions.Fraction) -> "Music":

		raise NotImplementedError


	def drop (self, amount: DurationLike) -> "Music":

		"""
		Remove the first ``amount`` whole notes, shortening notes that cross the boundary.
		"""

		amount = to_duration(amount)

		if amount == 0:
			return self

		return self._drop(amount)


	def _drop (self, amount: fractions.Fraction) -> "Music":

		raise NotImplementedError


	def remove_zeros (self) -> "Music":

		"""
		Remove zero-duration notes and rests from inside composite nodes.
		"""

		return self


	def transpose_pitches (self, semitones: int) -> "Music":

		"""Rewrite every note's pitch by ``semitones``.

		Unlike ``with_transpose()``, which is interpreted at performance time, this
		changes the tree itself and raises ``ValidationError`` if a pitch leaves the
		MIDI range.
		"""

		return self


	def retrograde (self) -> "Music":

		"""
		Reverse the music in time.
		"""

		return self


	def times (self, count: int) -> "Music":

		"""
		Repeat the music sequentially ``count`` times (``0`` gives silence).
		"""

		if isinstance(count, bool) or not isinstance(count, int) or count < 0:
			raise euterpe.exceptions.ValidationError(f"Repeat count must be a non-negative integer, got {count!r}")

		return line([self] * count)


	def with_delay (self, delay: DurationLike) -> "Music":

		"""
		Start the music after ``delay`` whole notes of silence.
		"""

		return rest(delay) + self


	def invert (self) -> "Music":

		"""Melodic inversion: mirror every note of the line around its first pitch.

		The music is flattened with ``to_line()`` first; parts of the line that are
		not plain notes (chords, modified passages) are kept as they are.  Music
		whose line does not begin with a note is returned unchanged.  Raises
		``ValidationError`` if a mirrored pitch leaves the MIDI range.

		Example:
			```python
			line_with_duration(["C4", "E4", "G4"], dur.QUARTER).invert()
			# C4, G#3, F3
			```
		"""

		parts = self.to_line()

		if not parts or not isinstance(parts[0], Note):
			return self

		axis = 2 * parts[0].pitch.absolute

		return line(
			dataclasses.replace(part, pitch=euterpe.pitch.Pitch.from_absolute(axis - part.pitch.absolute))
			if isinstance(part, Note) else part
			for part in parts
		)


	def retro_invert (self) -> "Music":

		return self.invert().retrograde()


	def invert_retro (self) -> "Music":

		return self.retrograde().invert()


	def to_line (self) -> typing.List["Music"]:

		"""
		Flatten nested sequential composition into a list, dropping ``rest(0)`` identities.
		"""

		return [self]


	# -- Generic traversal ---------------------------------------------------

	def fold (
		self,
		on_note: typing.Callable[["Note"], T],
		on_rest: typing.Callable[["Rest"], T],
		on_sequential: typing.Callable[[T, T], T],
		on_parallel: typing.Callable[[T, T], T],
		on_modify: typing.Callable[[euterpe.control.Control, T], T],
	) -> T:

		"""Reduce the tree bottom-up with one function per kind of node.

		Example:
			```python
			note_count = music.fold(lambda n: 1, lambda r: 0, operator.add, operator.add, lambda c, inner: inner)
			```
		"""

		raise NotImplementedError


	def map (self, function: typing.Callable[["Note"], "Music"]) -> "Music":

		"""
		Replace every note with ``function(note)``, keeping rests, controls and the tree's shape.
		"""

		return self.fold(function, lambda r: r, sequential, parallel, modify)


	# -- Ornaments built from a single note --------------------------------

	def grace_note (self, offset: int, fraction: DurationLike) -> "Music":

		"""Precede a note with a short note ``offset`` semitones away.

		The grace note takes ``fraction`` of the principal note's duration.
		"""

		raise euterpe.exceptions.ValidationError("A grace note can only be added to a note")


	def trill (self, interval: int, note_duration: typing.Optional[DurationLike] = None, count: typing.Optional[int] = None) -> "Music":

		"""Alternate a note with the pitch ``interval`` semitones away.

		Give either the duration of each trilled note (any remainder becomes a final
		shorter note) or the number of notes.
		"""

		raise euterpe.exceptions.ValidationError("A trill can only be built from a note")


	def roll (self, note_duration: typing.Optional[DurationLike] = None, count: typing.Optional[int] = None) -> "Music":

		"""
		Repeat a note rapidly (a trill on the same pitch).
		"""

		return self.trill(0, note_duration=note_duration, count=count)


@dataclasses.dataclass(frozen=True)
class Note (Music):

	"""A sounding note."""

	pitch: euterpe.pitch.Pitch
	dur: fractions.Fraction
	volume: int = euterpe.constants.velocity.DEFAULT_VOLUME

	def __post_init__ (self) -> None:

		object.__setattr__(self, "pitch", to_pitch(self.pitch))
		object.__setattr__(self, "dur", to_duration(self.dur))

		if isinstance(self.volume, bool) or not isinstance(self.volume, int):
			raise euterpe.exceptions.ValidationError(f"Volume must be an integer, got {self.volume!r}")

		if not euterpe.constants.velocity.MIN_VOLUME <= self.volume <= euterpe.constants.velocity.MAX_VOLUME:
			raise euterpe.exceptions.ValidationError(f"Volume must be 0-127, got {self.volume}")


	def duration (self) -> fractions.Fraction:
		return self.dur


	def _take (self, amount: fractions.Fraction) -> Music:
		return dataclasses.replace(self, dur=min(self.dur, amount))


	def _drop (self, amount: fractions.Fraction) -> Music:
		return dataclasses.replace(self, dur=max(self.dur - amount, 0))


	def fold (self, on_note, on_rest, on_sequential, on_parallel, on_modify):
		return on_note(self)


	def transpose_pitches (self, semitones: int) -> Music:
		return dataclasses.replace(self, pitch=self.pitch.transpose(semitones))


	def grace_note (self, offset: int, fraction: DurationLike) -> Music:

		fraction = euterpe.phrase.to_fraction(fraction, "Grace note fraction")

		if not 0 < fraction < 1:
			raise euterpe.exceptions.ValidationError("Grace note fraction must lie strictly between 0 and 1")

		grace = Note(self.pitch.transpose(offset), self.dur * fraction, self.volume)
		principal = dataclasses.replace(self, dur=self.dur * (1 - fraction))

		return grace + principal


	def trill (self, interval: int, note_duration: typing.Optional[DurationLike] = None, count: typing.Optional[int] = None) -> Music:

		if (note_duration is None) == (count is None):
			raise euterpe.exceptions.ValidationError("Trill needs exactly one of note_duration or count")

		durations: typing.List[fractions.Fraction]

		if count is not None:
			if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
				raise euterpe.exceptions.ValidationError("Trill count must be a positive integer")
			durations = [self.dur / count] * count

		else:
			single = to_duration(note_duration)  # type: ignore[arg-type]
			if single == 0:
				raise euterpe.exceptions.ValidationError("Trill note duration must be positive")
			whole, remainder = divmod(self.dur, single)
			durations = [single] * int(whole)
			if remainder:
				durations.append(remainder)

		auxiliary = self.pitch.transpose(interval)

		# Even positions play the principal, odd positions the auxiliary pitch.
		return line([
			Note(auxiliary if i % 2 else self.pitch, d, self.volume)
			for i, d in enumerate(durations)
		])


@dataclasses.dataclass(frozen=True)
class Rest (Music):

	"""Silence."""

	dur: fractions.Fraction

	def __post_init__ (self) -> None:
		object.__setattr__(self, "dur", to_duration(self.dur))


	def duration (self) -> fractions.Fraction:
		return self.dur


	def _take (self, amount: fractions.Fraction) -> Music:
		return Rest(min(self.dur, amount))


	def _drop (self, amount: fractions.Fraction) -> Music:
		return Rest(max(self.dur - amount, 0))


	def fold (self, on_note, on_rest, on_sequential, on_parallel, on_modify):
		return on_rest(self)


	def to_line (self) -> typing.List[Music]:
		return [] if self.dur == 0 else [self]


def _is_zero (music: Music) -> bool:

	return isinstance(music, (Note, Rest)) and music.dur == 0


@dataclasses.dataclass(frozen=True)
class Sequential (Music):

	"""``left`` followed by ``right``."""

	left: Music
	right: Music

	def __post_init__ (self) -> None:
		_check_children(self.left, self.right)


	def duration (self) -> fractions.Fraction:
		return sum((part.duration() for part in flatten(self, Sequential)), fractions.Fraction(0))


	def _take (self, amount: fractions.Fraction) -> Music:

		left = self.left.take(amount)
		right = self.right.take(max(amount - left.duration(), 0))

		return left + right


	def _drop (self, amount: fractions.Fraction) -> Music:

		right = self.right.drop(max(amount - self.left.duration(), 0))

		return self.left.drop(amount) + right


	def remove_zeros (self) -> Music:

		left = self.left.remove_zeros()
		right = self.right.remove_zeros()

		if _is_zero(left):
			return right

		if _is_zero(right):
			return left

		return left + right


	def transpose_pitches (self, semitones: int) -> Music:
		return self.left.transpose_pitches(semitones) + self.right.transpose_pitches(semitones)


	def retrograde (self) -> Music:
		return self.right.retrograde() + self.left.retrograde()


	def fold (self, on_note, on_rest, on_sequential, on_parallel, on_modify):

		handlers = (on_note, on_rest, on_sequential, on_parallel, on_modify)

		return on_sequential(self.left.fold(*handlers), self.right.fold(*handlers))


	def to_line (self) -> typing.List[Music]:
		return [line_part for part in flatten(self, Sequential) for line_part in part.to_line()]


@dataclasses.dataclass(frozen=True)
class Parallel (Music):

	"""``left`` and ``right`` starting together."""

	left: Music
	right: Music

	def __post_init__ (self) -> None:
		_check_children(self.left, self.right)


	def duration (self) -> fractions.Fraction:
		return max(part.duration() for part in flatten(self, Parallel))


	def _take (self, amount: fractions.Fraction) -> Music:
		return self.left.take(amount) | self.right.take(amount)


	def _drop (self, amount: fractions.Fraction) -> Music:
		return self.left.drop(amount) | self.right.drop(amount)


	def remove_zeros (self) -> Music:

		left = self.left.remove_zeros()
		right = self.right.remove_zeros()

		if _is_zero(left):
			return right

		if _is_zero(right):
			return left

		return left | right


	def transpose_pitches (self, semitones: int) -> Music:
		return self.left.transpose_pitches(semitones) | self.right.transpose_pitches(semitones)


	def retrograde (self) -> Music:

		left_duration = self.left.duration()
		right_duration = self.right.duration()
		left = self.left.retrograde()
		right = self.right.retrograde()

		# The shorter side must still end together with the longer one.
		if left_duration > right_duration:
			return left | (rest(left_duration - right_duration) + right)

		if right_duration > left_duration:
			return (rest(right_duration - left_duration) + left) | right

		return left | right


	def fold (self, on_note, on_rest, on_sequential, on_parallel, on_modify):

		handlers = (on_note, on_rest, on_sequential, on_parallel, on_modify)

		return on_parallel(self.left.fold(*handlers), self.right.fold(*handlers))


@dataclasses.dataclass(frozen=True)
class Modify (Music):

	"""``music`` performed under ``control``."""

	control: euterpe.control.Control
	music: Music

	def __post_init__ (self) -> None:

		if not isinstance(self.control, euterpe.control.CONTROL_TYPES):
			raise euterpe.exceptions.ValidationError(f"Not a modifier: {self.control!r}")

		_check_children(self.music)


	def duration (self) -> fractions.Fraction:

		inner = self.music.duration()

		if isinstance(self.control, euterpe.control.Tempo):
			return inner / self.control.scale

		if isinstance(self.control, euterpe.control.Phrase):
			return inner * euterpe.phrase.tempo_factor(self.control.attributes)

		return inner


	def _inner_amount (self, amount: fractions.Fraction) -> fractions.Fraction:

		"""Convert a length in outer time to the time of the wrapped music.

		A ritardando or accelerando is mapped linearly over the whole phrase, so the
		result has exactly the requested duration even though the stretch inside the
		phrase is gradual.
		"""

		if isinstance(self.control, euterpe.control.Tempo):
			return amount * self.control.scale

		if isinstance(self.control, euterpe.control.Phrase):
			return amount / euterpe.phrase.tempo_factor(self.control.attributes)

		return amount


	def _take (self, amount: fractions.Fraction) -> Music:
		return modify(self.control, self.music.take(self._inner_amount(amount)))


	def _drop (self, amount: fractions.Fraction) -> Music:
		return modify(self.control, self.music.drop(self._inner_amount(amount)))


	def remove_zeros (self) -> Music:
		return modify(self.control, self.music.remove_zeros())


	def transpose_pitches (self, semitones: int) -> Music:
		return modify(self.control, self.music.transpose_pitches(semitones))


	def retrograde (self) -> Music:
		return modify(self.control, self.music.retrograde())


	def fold (self, on_note, on_rest, on_sequential, on_parallel, on_modify):
		return on_modify(self.control, self.music.fold(on_note, on_rest, on_sequential, on_parallel, on_modify))


	def grace_note (self, offset: int, fraction: DurationLike) -> Music:
		return modify(self.control, self.music.grace_note(offset, fraction))


	def trill (self, interval: int, note_duration: typing.Optional[DurationLike] = None, count: typing.Optional[int] = None) -> Music:

		# Trilled note lengths are given in outer time; convert them to inner time.
		if note_duration is not None and isinstance(self.control, euterpe.control.Tempo):
			note_duration = to_duration(note_duration) * self.control.scale

		return modify(self.control, self.music.trill(interval, note_duration=note_duration, count=count))


def _check_children (*children: typing.Any) -> None:

	for child in children:
		if not isinstance(child, Music):
			raise euterpe.exceptions.ValidationError(f"Expected a Music value, got {child!r}")


def flatten (music: Music, kind: typing.Type[Music]) -> typing.List[Music]:

	"""Return the operands of a chain of ``kind`` nodes, left to right.

	``flatten(a + b + c, Sequential)`` gives ``[a, b, c]`` whatever the nesting.
	The walk is iterative, so long melodies built with ``+`` do not exhaust the
	recursion limit.
	"""

	parts: typing.List[Music] = []
	stack = [music]

	while stack:
		node = stack.pop()
		if type(node) is kind:
			stack.append(node.right)  # type: ignore[attr-defined]
			stack.append(node.left)  # type: ignore[attr-defined]
		else:
			parts.append(node)

	return parts


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def note (pitch: PitchLike, duration: DurationLike, volume: int = euterpe.constants.velocity.DEFAULT_VOLUME) -> Note:

	"""Build a note from a pitch (``Pitch``, ``"C4"`` or ``60``), a duration and a volume.

	Example:
		```python
		note("C4", dur.QUARTER)            # Note(C4, 1/4, 100)
		note(64, "1/8", volume=80)
		```
	"""

	return Note(to_pitch(pitch), duration, volume)


def rest (duration: DurationLike) -> Rest:

	return Rest(duration)


def sequential (left: Music, right: Music) -> Sequential:

	return Sequential(left, right)


def parallel (left: Music, right: Music) -> Parallel:

	return Parallel(left, right)


def modify (control: euterpe.control.Control, music: Music) -> Modify:

	return Modify(control, music)


def _balanced (parts: typing.Sequence[Music], combine: typing.Callable[[Music, Music], Music]) -> Music:

	if not parts:
		return rest(0)

	if len(parts) == 1:
		return parts[0]

	middle = len(parts) // 2

	return combine(_balanced(parts[:middle], combine), _balanced(parts[middle:], combine))


def line (parts: typing.Iterable[Music]) -> Music:

	"""Play the parts one after another (``rest(0)`` when empty).

	The tree is built balanced rather than as a left fold; associativity makes the
	two equivalent, and a balanced tree stays shallow for long melodies.
	"""

	return _balanced(list(parts), sequential)


def chord (parts: typing.Iterable[Music]) -> Music:

	"""
	Play the parts together (``rest(0)`` when empty).
	"""

	return _balanced(list(parts), parallel)


def line_with_duration (pitches: typing.Iterable[PitchLike], duration: DurationLike, volume: int = euterpe.constants.velocity.DEFAULT_VOLUME) -> Music:

	"""
	Play a sequence of pitches, all with the same duration.
	"""

	return line(note(pitch, duration, volume) for pitch in pitches)


def truncating_parallel (left: Music, right: Music) -> Music:

	"""
	Play both parts together, cutting each to the duration of the shorter one.
	"""

	left_duration = left.duration()
	right_duration = right.duration()

	return left.take(right_duration) | right.take(left_duration)
