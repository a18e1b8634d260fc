import pathlib

import mido
import pytest

import pinboard.generators
import pinboard.grid
import pinboard.pattern
import pinboard.render
import pinboard.track


def _absolute_times (track: mido.MidiTrack, message_type: str) -> list[int]:

	"""Absolute tick times of one message type in a MIDI track."""

	now = 0
	times = []

	for message in track:
		now += message.time
		if message.type == message_type:
			times.append(now)

	return times


def test_render_rhythm_bar (grid: pinboard.grid.Grid) -> None:

	"""The T shape's kicks land on sixteenths 3, 9 and 15 of the bar."""

	generated = pinboard.generators.generate_rhythm_sequence(pinboard.track.edges_from_gestures(["r3c0-r3c6", "r3c3-r2c3"], grid))
	pattern = pinboard.pattern.build_pattern(generated, "Rhythm")

	mid = pinboard.render.render_patterns([("Rhythm", pattern)], bars=1, bpm=100)

	assert mid.ticks_per_beat == 480
	assert len(mid.tracks) == 1

	track = mid.tracks[0]

	assert _absolute_times(track, "note_on") == [360, 1080, 1800]
	assert _absolute_times(track, "note_off") == [480, 1200, 1920]
	assert _absolute_times(track, "end_of_track") == [1920]

	tempo = [message for message in track if message.type == "set_tempo"]

	assert tempo[0].tempo == mido.bpm2tempo(100)


def test_pattern_messages_loop_and_cut_off () -> None:

	"""Patterns repeat to fill the render and hanging notes end with it.

	A note longer than its loop is ended by its own repeat; the stale
	note-off of the first instance is dropped.
	"""

	pattern = pinboard.pattern.Pattern(channel=1, step_pulses=24, step_count=1)
	pattern.add_note(position=0, pitch=60, velocity=90, duration=36)

	messages = pinboard.render.pattern_messages(pattern, total_pulses=48)

	assert [(pulse, message.type) for pulse, message in messages] == [
		(0, "note_on"),
		(24, "note_off"),
		(24, "note_on"),
		(48, "note_off"),
	]


def test_render_messages_shared_channel () -> None:

	"""A track's note-off does not end the same pitch restarted by another track."""

	first = pinboard.pattern.Pattern(channel=0, step_pulses=6, step_count=4)
	first.add_note(position=0, pitch=60, velocity=100, duration=12)

	second = pinboard.pattern.Pattern(channel=0, step_pulses=6, step_count=4)
	second.add_note(position=6, pitch=60, velocity=100, duration=12)

	first_messages, second_messages = pinboard.render.render_messages([first, second], total_pulses=24)

	assert [(pulse, message.type) for pulse, message in first_messages] == [
		(0, "note_on"),
		(6, "note_off"),
	]
	assert [(pulse, message.type) for pulse, message in second_messages] == [
		(6, "note_on"),
		(18, "note_off"),
	]


def test_pattern_messages_note_off_before_note_on () -> None:

	"""Back-to-back notes release before they restart."""

	pattern = pinboard.pattern.Pattern(channel=0, step_pulses=12, step_count=1)
	pattern.add_note(position=0, pitch=60, velocity=100, duration=12)

	messages = pinboard.render.pattern_messages(pattern, total_pulses=24)

	assert [message.type for pulse, message in messages if pulse == 12] == ["note_off", "note_on"]


def test_render_keeps_silent_tracks () -> None:

	"""Every pattern gets a MIDI track, even an empty one."""

	empty = pinboard.pattern.Pattern(channel=0, step_pulses=6, step_count=0)
	chord = pinboard.pattern.Pattern(channel=1, step_pulses=96, step_count=1)
	chord.add_note(position=0, pitch=60, velocity=90, duration=96)

	mid = pinboard.render.render_patterns([("Empty", empty), ("Chord", chord)], bars=2)

	assert len(mid.tracks) == 2
	assert mid.tracks[0].name == "Empty"
	assert _absolute_times(mid.tracks[1], "note_on") == [0, 1920]


def test_render_rejects_bad_arguments () -> None:

	"""Bars and tempo must be positive."""

	with pytest.raises(ValueError):
		pinboard.render.render_patterns([], bars=0)

	with pytest.raises(ValueError):
		pinboard.render.render_patterns([], bars=1, bpm=0)


def test_render_to_file (tmp_path: pathlib.Path) -> None:

	"""Rendered files can be read back."""

	pattern = pinboard.pattern.Pattern(channel=0, step_pulses=24, step_count=4)
	pattern.add_note(position=24, pitch=64, velocity=100, duration=12)

	path = tmp_path / "out.mid"

	pinboard.render.render_to_file([("Phrase", pattern)], path, bars=1)

	loaded = mido.MidiFile(path)

	assert len(loaded.tracks) == 1
	assert _absolute_times(loaded.tracks[0], "note_on") == [480]
