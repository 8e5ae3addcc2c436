import typing

import mido
import pytest

import euterpe.cancellation


class FakeMidiOut:

	"""MIDI output stub that records what it is sent."""

	def __init__ (self, name: str = "Dummy MIDI") -> None:

		"""Start with an empty message log."""

		self.name = name
		self.messages: typing.List[mido.Message] = []
		self.closed = False


	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.messages.append(message)


	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


	def of_type (self, message_type: str) -> typing.List[mido.Message]:

		"""Return the recorded messages of one type."""

		return [m for m in self.messages if m.type == message_type]


class CancellingMidiOut (FakeMidiOut):

	"""Records messages and cancels a token once a number of note_ons have been sent."""

	def __init__ (self, token: euterpe.cancellation.CancellationToken, after_note_ons: int) -> None:

		super().__init__()
		self.token = token
		self.after_note_ons = after_note_ons


	def send (self, message: mido.Message) -> None:

		super().send(message)

		if message.type == 'note_on' and len(self.of_type('note_on')) == self.after_note_ons:
			self.token.cancel()


class FailingMidiOut (FakeMidiOut):

	"""Raises on the n-th note_on, as an unplugged device would."""

	def __init__ (self, fail_on_note_on: int) -> None:

		super().__init__()
		self.fail_on_note_on = fail_on_note_on
		self.note_ons = 0


	def send (self, message: mido.Message) -> None:

		if message.type == 'note_on':
			self.note_ons += 1
			if self.note_ons == self.fail_on_note_on:
				raise OSError("device disconnected")

		super().send(message)


# Module-level reference so tests can inspect the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Midi Through Port-0", "Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	fake = FakeMidiOut(name)
	_current_fake_output = fake
	return fake


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use a fake MIDI output for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def fake_output () -> typing.Callable[[], typing.Optional[FakeMidiOut]]:

	"""Return a getter for the most recently opened fake output."""

	return lambda: _current_fake_output
