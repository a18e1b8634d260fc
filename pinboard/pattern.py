"""MIDI patterns built from generated sequences.

A :class:`Pattern` holds notes keyed by pulse position within one loop of a
track (24 pulses per beat). :func:`build_pattern` lays a generated sequence
out on that grid, one sequence step every ``step_beats`` beats:

- Rhythm hits become General MIDI drum notes on the drum channel.
- Phrase notes keep their pitch; velocity 0-1 is scaled to MIDI 1-127.
- Chords sound all their pitches together for the whole step.
"""

import dataclasses
import typing

import pinboard.constants.drums
import pinboard.constants.pulses
import pinboard.constants.velocity
import pinboard.generators


# Step length in beats for each track type.
DEFAULT_STEP_BEATS: typing.Dict[pinboard.generators.TrackType, float] = {
	pinboard.generators.TrackType.RHYTHM: 0.25,
	pinboard.generators.TrackType.PHRASE: 0.25,
	pinboard.generators.TrackType.CHORD: 4.0,
}

DEFAULT_CHANNELS: typing.Dict[pinboard.generators.TrackType, int] = {
	pinboard.generators.TrackType.RHYTHM: pinboard.constants.drums.DRUM_CHANNEL,
	pinboard.generators.TrackType.PHRASE: 0,
	pinboard.generators.TrackType.CHORD: 1,
}


@dataclasses.dataclass
class Note:

	"""
	A MIDI note with its length in pulses.
	"""

	pitch: int
	velocity: int
	duration: int
	channel: int


@dataclasses.dataclass
class Step:

	"""
	The notes starting at one pulse position.
	"""

	notes: typing.List[Note] = dataclasses.field(default_factory=list)


class Pattern:

	"""
	One loop of a track as MIDI notes.
	"""

	def __init__ (self, channel: int, step_pulses: int, step_count: int, node_order: typing.Optional[typing.List[str]] = None) -> None:

		"""
		Initialize an empty pattern of ``step_count`` steps, each ``step_pulses`` long.
		"""

		if step_pulses <= 0:
			raise ValueError("Step length must be at least one pulse")

		if step_count < 0:
			raise ValueError("Step count cannot be negative")

		self.channel = channel
		self.step_pulses = step_pulses
		self.step_count = step_count
		self.node_order: typing.List[str] = list(node_order or [])

		self.steps: typing.Dict[int, Step] = {}


	@property
	def length_pulses (self) -> int:

		return self.step_pulses * self.step_count


	@property
	def length (self) -> float:

		"""Loop length in beats."""

		return self.length_pulses / pinboard.constants.pulses.MIDI_QUARTER_NOTE


	def is_empty (self) -> bool:

		return not any(step.notes for step in self.steps.values())


	def add_note (self, position: int, pitch: int, velocity: int, duration: int) -> None:

		"""
		Add a note starting at a pulse position within the loop.
		"""

		if position not in self.steps:
			self.steps[position] = Step()

		note = Note(
			pitch = pitch,
			velocity = velocity,
			duration = duration,
			channel = self.channel
		)

		self.steps[position].notes.append(note)


	def node_at_step (self, step_index: int) -> typing.Optional[str]:

		"""The board position behind a step, if there is one."""

		if 0 <= step_index < len(self.node_order):
			return self.node_order[step_index]

		return None


class SoundingNotes:

	"""
	Which note currently owns each ``(channel, pitch)``.

	A MIDI channel can only sound one instance of a pitch, whichever track
	played it. Starting a pitch that is already sounding takes it over: the
	caller ends the previous note first, and that note's own note-off is
	then stale and must not be sent.
	"""

	def __init__ (self) -> None:

		# (channel, pitch) -> (track index, pulse of the note-on).
		self.owners: typing.Dict[typing.Tuple[int, int], typing.Tuple[int, int]] = {}


	def start (self, track_index: int, channel: int, pitch: int, pulse: int) -> typing.Optional[typing.Tuple[int, int]]:

		"""Record a note-on and return the ``(track, pulse)`` it cuts off, if any."""

		key = (channel, pitch)
		previous = self.owners.get(key)

		self.owners[key] = (track_index, pulse)

		return previous


	def release (self, track_index: int, channel: int, pitch: int, on_pulse: int) -> bool:

		"""Return True if this note-off ends a sounding note and should be sent."""

		key = (channel, pitch)

		if self.owners.get(key) != (track_index, on_pulse):
			return False

		del self.owners[key]

		return True


	def clear (self) -> None:

		self.owners = {}


def scale_velocity (velocity: float) -> int:

	"""Convert a 0-1 velocity to a MIDI velocity that still sounds."""

	midi_velocity = int(round(velocity * pinboard.constants.velocity.MAX_VELOCITY))

	return max(pinboard.constants.velocity.MIN_VELOCITY, min(pinboard.constants.velocity.MAX_VELOCITY, midi_velocity))


def build_pattern (
	generated: pinboard.generators.GeneratedSequence,
	track_type: typing.Union[pinboard.generators.TrackType, str],
	channel: typing.Optional[int] = None,
	step_beats: typing.Optional[float] = None,
	muted: bool = False
) -> Pattern:

	"""Lay a generated sequence out as a MIDI pattern.

	Parameters:
		generated: Output of one of the sequence generators.
		track_type: Decides how events become notes.
		channel: MIDI channel (0-15). Defaults per track type.
		step_beats: Length of one step in beats. Defaults per track type.
		muted: When True the pattern keeps its steps but holds no notes.
	"""

	track_type = pinboard.generators.TrackType(track_type)

	if channel is None:
		channel = DEFAULT_CHANNELS[track_type]

	if step_beats is None:
		step_beats = DEFAULT_STEP_BEATS[track_type]

	if step_beats <= 0:
		raise ValueError("Step duration must be positive")

	if not 0 <= channel <= 15:
		raise ValueError(f"MIDI channel must be 0-15, got {channel}")

	step_pulses = int(step_beats * pinboard.constants.pulses.MIDI_QUARTER_NOTE)

	pattern = Pattern(
		channel = channel,
		step_pulses = step_pulses,
		step_count = len(generated.sequence),
		node_order = generated.node_order if track_type is not pinboard.generators.TrackType.CHORD else None
	)

	if muted:
		return pattern

	short_duration = min(pinboard.constants.pulses.MIDI_EIGHTH_NOTE, step_pulses)

	for i, event in enumerate(generated.sequence):

		position = i * step_pulses

		if isinstance(event, pinboard.generators.RhythmHit):
			pattern.add_note(
				position = position,
				pitch = pinboard.constants.drums.DRUM_NOTE_MAP[event.kind],
				velocity = pinboard.constants.velocity.DEFAULT_VELOCITY,
				duration = short_duration
			)

		elif isinstance(event, pinboard.generators.PhraseNote):
			pattern.add_note(
				position = position,
				pitch = event.pitch,
				velocity = scale_velocity(event.velocity),
				duration = short_duration
			)

		elif isinstance(event, pinboard.generators.ChordEvent):
			for pitch in event.pitches:
				pattern.add_note(
					position = position,
					pitch = pitch,
					velocity = pinboard.constants.velocity.DEFAULT_CHORD_VELOCITY,
					duration = step_pulses
				)

	return pattern
