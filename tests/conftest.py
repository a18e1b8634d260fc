import typing

import mido
import pytest

import pinboard.grid


class FakeMidiOut:

	"""MIDI output stub that keeps every message it is sent."""

	def __init__ (self) -> None:

		self.messages: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		"""Record an outgoing MIDI message."""

		self.messages.append(message)

	def close (self) -> None:

		self.closed = True

	def of_type (self, message_type: str) -> typing.List[mido.Message]:

		"""Return the recorded messages of one type, in send order."""

		return [message for message in self.messages if message.type == message_type]


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido so opening an output port never touches real hardware."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def midi_out () -> FakeMidiOut:

	"""A fresh recording MIDI output."""

	return FakeMidiOut()


@pytest.fixture
def grid () -> pinboard.grid.Grid:

	"""The shared board grid."""

	return pinboard.grid.get_grid()
