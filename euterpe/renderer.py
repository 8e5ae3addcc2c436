"""Real-time MIDI rendering.

The ``Renderer`` streams a Performance to a MIDI sink (any object with
``send(message)``, which every ``mido`` output port has) in wall-clock time.
It moves through a small state machine::

    IDLE -> STREAMING -> STOPPED       (every event played)
                      -> INTERRUPTED   (cancellation token set)
                      -> FAILED        (the sink raised)

However streaming ends, every note that is still sounding receives its
note_off before ``render`` returns, so nothing is left hanging on the synth.

Most programs only need ``play``::

    performance = euterpe.performer.perform(melody)
    euterpe.renderer.play(performance, device_name="FluidSynth virtual port")

which opens the output, stops cleanly on Ctrl+C and closes the port again.
"""

import asyncio
import collections
import contextlib
import dataclasses
import enum
import fractions
import heapq
import itertools
import logging
import signal
import time
import typing

import mido

import euterpe.cancellation
import euterpe.config
import euterpe.constants.instruments
import euterpe.exceptions
import euterpe.midi_utils
import euterpe.performance
import euterpe.pitch


logger = logging.getLogger(__name__)

MIDI_CHANNELS = 16
MELODIC_CHANNELS = [channel for channel in range(MIDI_CHANNELS) if channel != euterpe.constants.instruments.PERCUSSION_CHANNEL]

# At equal times, note_offs go out before note_ons so a repeated pitch re-sounds.
NOTE_OFF_PRIORITY = 0
NOTE_ON_PRIORITY = 1


@typing.runtime_checkable
class MidiSink (typing.Protocol):

	"""
	Protocol for MIDI outputs the renderer can write to.
	"""

	def send (self, message: mido.Message) -> None:

		"""
		Deliver one MIDI message.
		"""

		...


	def close (self) -> None:

		"""
		Release the output.
		"""

		...


class RenderState (enum.Enum):

	"""Lifecycle of a render."""

	IDLE = "idle"
	STREAMING = "streaming"
	STOPPED = "stopped"
	INTERRUPTED = "interrupted"
	FAILED = "failed"


@dataclasses.dataclass (order=True)
class MidiEvent:

	"""
	A note message scheduled at an absolute time in whole notes.
	"""

	time: fractions.Fraction
	priority: int
	sequence: int
	message_type: str = dataclasses.field(compare=False)
	channel: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False)
	velocity: int = dataclasses.field(compare=False, default=0)

	def to_message (self) -> mido.Message:

		return mido.Message(
			self.message_type,
			channel = self.channel,
			note = self.note,
			velocity = self.velocity
		)


class PatchMap:

	"""
	Assigns each instrument a MIDI channel.

	Percussion always plays on channel 9 (10 in one-based numbering).  Other
	instruments take the remaining fifteen channels in order of first use.
	"""

	def __init__ (self, assignments: typing.Optional[typing.Dict[str, int]] = None) -> None:

		self._channels: typing.Dict[str, int] = {}

		for instrument, channel in (assignments or {}).items():
			self.assign(instrument, channel)


	@classmethod
	def for_instruments (cls, instruments: typing.Iterable[str]) -> "PatchMap":

		"""
		Build a map for the given instruments.

		Raises:
			RenderError: If there are more than fifteen melodic instruments.
		"""

		patch_map = cls()
		free = iter(MELODIC_CHANNELS)

		for instrument in instruments:

			if instrument in patch_map:
				continue

			if instrument == euterpe.constants.instruments.PERCUSSION:
				patch_map.assign(instrument, euterpe.constants.instruments.PERCUSSION_CHANNEL)
				continue

			channel = next(free, None)

			if channel is None:
				raise euterpe.exceptions.RenderError(
					f"Too many instruments: at most {len(MELODIC_CHANNELS)} melodic instruments fit on one MIDI port"
				)

			patch_map.assign(instrument, channel)

		return patch_map


	def assign (self, instrument: str, channel: int) -> None:

		"""
		Put an instrument on a channel.
		"""

		canonical = euterpe.constants.instruments.normalize_instrument(instrument)

		if canonical is None:
			raise euterpe.exceptions.RenderError(f"Unknown instrument: {instrument!r}")

		if not 0 <= channel < MIDI_CHANNELS:
			raise euterpe.exceptions.RenderError(f"MIDI channel must be 0-15, got {channel}")

		percussion = canonical == euterpe.constants.instruments.PERCUSSION

		if percussion != (channel == euterpe.constants.instruments.PERCUSSION_CHANNEL):
			raise euterpe.exceptions.RenderError(f"Only percussion may use channel {euterpe.constants.instruments.PERCUSSION_CHANNEL}, and it must")

		for other, used in self._channels.items():
			if used == channel and other != canonical:
				raise euterpe.exceptions.RenderError(f"Channel {channel} is already assigned to {other}")

		self._channels[canonical] = channel


	def channel (self, instrument: str) -> int:

		if instrument not in self._channels:
			raise euterpe.exceptions.RenderError(f"No channel assigned to {instrument!r}")

		return self._channels[instrument]


	def program_changes (self) -> typing.List[mido.Message]:

		"""
		Program change messages selecting each melodic instrument on its channel.
		"""

		return [
			mido.Message('program_change', channel=channel, program=euterpe.constants.instruments.program_number(instrument))
			for instrument, channel in self._channels.items()
			if instrument != euterpe.constants.instruments.PERCUSSION
		]


	def __contains__ (self, instrument: object) -> bool:
		return instrument in self._channels


	def __len__ (self) -> int:
		return len(self._channels)


class Renderer:

	"""
	Streams a Performance to a MIDI sink in real time.
	"""

	def __init__ (self, bpm: float = euterpe.config.DEFAULT_BPM, patch_map: typing.Optional[PatchMap] = None) -> None:

		"""Create a renderer.

		Parameters:
			bpm: Quarter notes per minute; a whole note lasts ``4 * 60 / bpm`` seconds.
			patch_map: Channel assignments; built from the performance when omitted.
		"""

		if isinstance(bpm, bool) or not isinstance(bpm, (int, float)) or bpm <= 0:
			raise euterpe.exceptions.ValidationError(f"bpm must be a positive number, got {bpm!r}")

		self.bpm = bpm
		self.patch_map = patch_map
		self.state = RenderState.IDLE
		self.sounding: typing.Counter[typing.Tuple[int, int]] = collections.Counter()


	@property
	def seconds_per_whole_note (self) -> float:
		return 4 * 60.0 / self.bpm


	def seconds (self, time_point: fractions.Fraction) -> float:

		"""
		Convert a time in whole notes to seconds.
		"""

		return float(time_point) * self.seconds_per_whole_note


	def prepare (self, performance: euterpe.performance.Performance) -> typing.Tuple[PatchMap, typing.List[MidiEvent]]:

		"""Check a performance and turn it into a heap of note messages.

		Raises:
			RenderError: A pitch is outside 0-127, or the instruments do not fit the patch map.
		"""

		for event in performance:
			if not euterpe.pitch.MIN_PITCH <= event.pitch <= euterpe.pitch.MAX_PITCH:
				raise euterpe.exceptions.RenderError(f"Pitch {event.pitch} at {event.onset} is outside the MIDI range 0-127")

		patch_map = self.patch_map if self.patch_map is not None else PatchMap.for_instruments(performance.instruments())

		queue: typing.List[MidiEvent] = []
		sequence = itertools.count()

		for event in performance:

			if event.duration <= 0 or event.volume <= 0:
				logger.debug(f"Skipping silent event {event}")
				continue

			channel = patch_map.channel(event.instrument)
			n = next(sequence)

			queue.append(MidiEvent(event.onset, NOTE_ON_PRIORITY, n, 'note_on', channel, event.pitch, event.volume))
			queue.append(MidiEvent(event.end, NOTE_OFF_PRIORITY, n, 'note_off', channel, event.pitch, 0))

		heapq.heapify(queue)

		return patch_map, queue


	async def render (
		self,
		performance: euterpe.performance.Performance,
		sink: MidiSink,
		token: typing.Optional[euterpe.cancellation.CancellationToken] = None
	) -> RenderState:

		"""Play a performance on a sink, returning the terminal state.

		Sleeps are measured against absolute targets from a ``time.perf_counter()``
		start, so timing does not drift over long performances.  Each sleep is a wait
		on the cancellation token, so a cancel wakes the renderer at once.  The sink
		is not closed here; whoever opened it closes it.

		Raises:
			RenderError: The performance cannot be played on MIDI, or the sink failed.
		"""

		if self.state == RenderState.STREAMING:
			raise euterpe.exceptions.RenderError("Renderer is already streaming")

		if token is None:
			token = euterpe.cancellation.CancellationToken()

		try:
			patch_map, queue = self.prepare(performance)
		except euterpe.exceptions.RenderError:
			self.state = RenderState.FAILED
			raise

		self.state = RenderState.STREAMING
		self.sounding = collections.Counter()

		logger.info(f"Rendering {len(queue) // 2} notes on {len(patch_map)} channels at {self.bpm} BPM")

		try:
			for message in patch_map.program_changes():
				sink.send(message)

			start_time = time.perf_counter()

			while queue and not token.cancelled:

				target = start_time + self.seconds(queue[0].time)
				delay = target - time.perf_counter()

				if delay > 0 and await token.wait(delay):
					break

				# No new note may start once a stop has been requested.
				if token.cancelled:
					break

				event = heapq.heappop(queue)
				sink.send(event.to_message())
				self._track(event)

		except asyncio.CancelledError:
			logger.info("Render task cancelled")
			self._flush_quietly(sink)
			self.state = RenderState.INTERRUPTED
			raise

		except Exception as exc:
			self._flush_quietly(sink)
			self.state = RenderState.FAILED
			raise euterpe.exceptions.RenderError(f"MIDI send failed (device may be disconnected): {exc}") from exc

		if queue:
			flushed = sum(self.sounding.values())

			try:
				self._flush(sink)
			except Exception as exc:
				self.state = RenderState.FAILED
				raise euterpe.exceptions.RenderError(f"Failed to release sounding notes: {exc}") from exc

			logger.info(f"Render interrupted: released {flushed} sounding notes")
			self.state = RenderState.INTERRUPTED

		else:
			logger.info("Render complete")
			self.state = RenderState.STOPPED

		return self.state


	def _track (self, event: MidiEvent) -> None:

		key = (event.channel, event.note)

		if event.message_type == 'note_on':
			self.sounding[key] += 1

		elif self.sounding[key] > 1:
			self.sounding[key] -= 1

		else:
			del self.sounding[key]


	def _flush (self, sink: MidiSink) -> None:

		"""
		Send one note_off for every note that is still sounding.
		"""

		for (channel, note), count in list(self.sounding.items()):
			for _ in range(count):
				sink.send(mido.Message('note_off', channel=channel, note=note, velocity=0))
			del self.sounding[(channel, note)]


	def _flush_quietly (self, sink: MidiSink) -> None:

		try:
			self._flush(sink)
		except Exception:
			logger.exception("Failed to release sounding notes")


@contextlib.contextmanager
def midi_output (device_name: typing.Optional[str] = None) -> typing.Iterator[typing.Any]:

	"""Open a MIDI output port for the duration of a ``with`` block.

	The port is closed on every exit path.

	Raises:
		RenderError: If no suitable port exists or it cannot be opened.
	"""

	selected_name, port = euterpe.midi_utils.select_output_device(device_name)

	try:
		yield port

	finally:
		try:
			port.close()
			logger.info(f"Closed MIDI output: {selected_name}")
		except Exception:
			logger.exception(f"Failed to close MIDI output: {selected_name}")


async def play_async (
	performance: euterpe.performance.Performance,
	device_name: typing.Optional[str] = None,
	bpm: float = euterpe.config.DEFAULT_BPM,
	token: typing.Optional[euterpe.cancellation.CancellationToken] = None,
	handle_signals: bool = True,
	patch_map: typing.Optional[PatchMap] = None
) -> RenderState:

	"""Play a performance on a MIDI output until it ends or is stopped.

	When ``handle_signals`` is true, SIGINT and SIGTERM cancel the token so Ctrl+C
	stops playback cleanly.
	"""

	if token is None:
		token = euterpe.cancellation.CancellationToken()

	loop = asyncio.get_running_loop()
	installed: typing.List[signal.Signals] = []

	if handle_signals:
		for sig in (signal.SIGINT, signal.SIGTERM):
			try:
				loop.add_signal_handler(sig, token.cancel)
				installed.append(sig)
			except (NotImplementedError, RuntimeError):
				logger.debug(f"Cannot install a handler for {sig.name} here")

	logger.info("Playing performance. Press Ctrl+C to stop.")

	try:
		with midi_output(device_name) as port:
			return await Renderer(bpm=bpm, patch_map=patch_map).render(performance, port, token)

	finally:
		for sig in installed:
			loop.remove_signal_handler(sig)


def play (
	performance: euterpe.performance.Performance,
	device_name: typing.Optional[str] = None,
	bpm: float = euterpe.config.DEFAULT_BPM,
	token: typing.Optional[euterpe.cancellation.CancellationToken] = None,
	patch_map: typing.Optional[PatchMap] = None
) -> RenderState:

	"""
	Play a performance, blocking until it ends or Ctrl+C is pressed.
	"""

	try:
		return asyncio.run(play_async(performance, device_name=device_name, bpm=bpm, token=token, patch_map=patch_map))

	except KeyboardInterrupt:
		return RenderState.INTERRUPTED
