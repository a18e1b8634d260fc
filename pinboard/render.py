"""Offline rendering of tracks to a Standard MIDI File."""

import heapq
import logging
import os
import typing

import mido

import pinboard.constants.pulses
import pinboard.pattern


logger = logging.getLogger(__name__)


# The player's 24 PPQN scaled up to the file's 480 ticks per beat.
TICKS_PER_PULSE = pinboard.constants.pulses.MIDI_FILE_TICKS_PER_BEAT // pinboard.constants.pulses.MIDI_QUARTER_NOTE


def render_messages (
	patterns: typing.Sequence[pinboard.pattern.Pattern],
	total_pulses: int
) -> typing.List[typing.List[typing.Tuple[int, mido.Message]]]:

	"""Loop patterns for ``total_pulses`` and list each one's messages by pulse.

	Overlaps are resolved as the live player resolves them: a pitch started
	while the same channel is still sounding it, from any pattern, first
	ends the older note, whose own note-off is then dropped. At the same
	pulse, note-offs come before note-ons. Notes still sounding at the end
	are cut off at ``total_pulses``.
	"""

	tracks: typing.List[typing.List[typing.Tuple[int, mido.Message]]] = [[] for _ in patterns]

	if total_pulses <= 0:
		return tracks

	note_ons: typing.List[typing.Tuple[int, int, int, pinboard.pattern.Note]] = []

	for track_index, pattern in enumerate(patterns):

		if pattern.length_pulses <= 0:
			continue

		for cycle_start in range(0, total_pulses, pattern.length_pulses):
			for position, step in sorted(pattern.steps.items()):

				on_pulse = cycle_start + position

				if on_pulse >= total_pulses:
					continue

				for note in step.notes:
					note_ons.append((on_pulse, track_index, len(note_ons), note))

	note_ons.sort(key=lambda item: item[:3])

	sounding = pinboard.pattern.SoundingNotes()
	# (off pulse, order, track index, channel, pitch, on pulse)
	note_offs: typing.List[typing.Tuple[int, int, int, int, int, int]] = []

	def release (until: typing.Optional[int]) -> None:

		while note_offs and (until is None or note_offs[0][0] <= until):

			off_pulse, _, track_index, channel, pitch, on_pulse = heapq.heappop(note_offs)

			if sounding.release(track_index, channel, pitch, on_pulse):
				tracks[track_index].append((min(off_pulse, total_pulses), mido.Message("note_off", channel=channel, note=pitch, velocity=0)))

	for on_pulse, track_index, order, note in note_ons:

		release(on_pulse)

		previous = sounding.start(track_index, note.channel, note.pitch, on_pulse)

		if previous is not None:
			tracks[previous[0]].append((on_pulse, mido.Message("note_off", channel=note.channel, note=note.pitch, velocity=0)))

		tracks[track_index].append((on_pulse, mido.Message("note_on", channel=note.channel, note=note.pitch, velocity=note.velocity)))

		heapq.heappush(note_offs, (on_pulse + note.duration, order, track_index, note.channel, note.pitch, on_pulse))

	release(None)

	return tracks


def pattern_messages (pattern: pinboard.pattern.Pattern, total_pulses: int) -> typing.List[typing.Tuple[int, mido.Message]]:

	"""Messages of a single pattern rendered on its own."""

	return render_messages([pattern], total_pulses)[0]


def render_patterns (
	patterns: typing.Sequence[typing.Tuple[str, pinboard.pattern.Pattern]],
	bars: int,
	bpm: float = 120
) -> mido.MidiFile:

	"""Build a type 1 MIDI file with one MIDI track per named pattern.

	Parameters:
		patterns: ``(track name, pattern)`` pairs. Empty patterns still get a
			(silent) MIDI track so track numbering is stable.
		bars: Length of the render in 4/4 bars.
		bpm: Tempo written into the first track.
	"""

	if bars <= 0:
		raise ValueError("Bars must be positive")

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	total_pulses = bars * pinboard.constants.pulses.MIDI_WHOLE_NOTE
	messages = render_messages([pattern for _, pattern in patterns], total_pulses)

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = pinboard.constants.pulses.MIDI_FILE_TICKS_PER_BEAT

	for i, (name, _) in enumerate(patterns):

		track = mido.MidiTrack()
		mid.tracks.append(track)

		track.append(mido.MetaMessage("track_name", name=name, time=0))

		if i == 0:
			track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))

		last_pulse = 0

		for pulse, message in messages[i]:
			message.time = (pulse - last_pulse) * TICKS_PER_PULSE
			track.append(message)
			last_pulse = pulse

		track.append(mido.MetaMessage("end_of_track", time=(total_pulses - last_pulse) * TICKS_PER_PULSE))

	return mid


def render_to_file (
	patterns: typing.Sequence[typing.Tuple[str, pinboard.pattern.Pattern]],
	filename: typing.Union[str, os.PathLike],
	bars: int,
	bpm: float = 120
) -> mido.MidiFile:

	"""Render patterns and save them as a MIDI file."""

	mid = render_patterns(patterns, bars=bars, bpm=bpm)

	logger.info(f"Saving {len(mid.tracks)} tracks ({bars} bars at {bpm:.2f} BPM) to {os.fspath(filename)}...")

	mid.save(filename)

	logger.info(f"Saved {os.fspath(filename)}")

	return mid
