"""Shape-to-sequence generators.

Each generator takes a track's edges and returns a :class:`GeneratedSequence`:
the list of events to play (``None`` is a rest) and, alongside it, what each
position corresponds to on the board so a UI can highlight it.

- **Rhythm** walks the longest trail through the shape and turns busy pins
  into drum hits - the more lines meet at a pin, the brighter the hit.
- **Phrase** walks the same trail and plays the pitch of every pin where
  three or more lines meet, louder as more lines meet.
- **Chord** ignores the trail. It groups edges by direction, takes the
  four longest groups and plays the pitches of each group's pins together.

All three are pure: the same edges always give the same output.
"""

import dataclasses
import enum
import logging
import typing

import pinboard.constants
import pinboard.graph
import pinboard.grid
import pinboard.note_map


logger = logging.getLogger(__name__)


RHYTHM_KINDS: typing.Tuple[str, ...] = ("kick", "snare", "clap", "hihat")

# Degree at which phrase velocity reaches full scale.
FULL_VELOCITY_DEGREE = 6

# Two edges count as parallel when the angle between them is under ~2.56 degrees.
COLLINEAR_DOT_THRESHOLD = 0.999


class TrackType (str, enum.Enum):

	"""The kind of sequence a track produces."""

	RHYTHM = "Rhythm"
	PHRASE = "Phrase"
	CHORD = "Chord"


@dataclasses.dataclass (frozen=True)
class RhythmHit:

	"""
	A drum hit: one of ``RHYTHM_KINDS``.
	"""

	kind: str

	def __post_init__ (self) -> None:

		if self.kind not in RHYTHM_KINDS:
			raise ValueError(f"Unknown rhythm hit {self.kind!r}")


@dataclasses.dataclass (frozen=True)
class PhraseNote:

	"""
	A single melodic note. ``velocity`` is in the range (0, 1].
	"""

	pitch: int
	velocity: float


@dataclasses.dataclass (frozen=True)
class ChordEvent:

	"""
	Pitches sounded together, in the order they were collected.
	"""

	pitches: typing.Tuple[int, ...]


Event = typing.Union[RhythmHit, PhraseNote, ChordEvent]


@dataclasses.dataclass
class GeneratedSequence:

	"""
	A generated sequence and the board position behind each step.

	For Rhythm and Phrase, ``node_order`` holds the node id of every step.
	For Chord it holds the pitches of all chords, flattened and as text.
	"""

	sequence: typing.List[typing.Optional[Event]]
	node_order: typing.List[str]

	def is_silent (self) -> bool:

		"""True when there is nothing to play."""

		return all(event is None for event in self.sequence)


def _traverse (edges: typing.Sequence[pinboard.grid.GridEdge], length: int) -> typing.Tuple[typing.List[str], typing.Dict[str, int]]:

	"""Resample the longest trail to ``length`` steps and count degrees."""

	adjacency = pinboard.graph.build_adjacency(edges)
	path = pinboard.graph.longest_trail(adjacency)
	node_order = pinboard.graph.ping_pong_to_length(path, length)
	degree_map = pinboard.graph.compute_degree_map(edges)

	logger.debug(f"Trail of {len(path)} nodes over {len(edges)} edges")

	return node_order, degree_map


def degree_to_hit (degree: int) -> typing.Optional[RhythmHit]:

	"""Map the number of lines meeting at a pin to a drum hit.

	Pins on a plain line (degree two or less) are rests.
	"""

	if degree <= 2:
		return None

	if degree == 3:
		return RhythmHit("kick")

	if degree == 4:
		return RhythmHit("snare")

	if degree == 5:
		return RhythmHit("clap")

	return RhythmHit("hihat")


def generate_rhythm_sequence (edges: typing.Sequence[pinboard.grid.GridEdge], length: int = pinboard.constants.SEQUENCE_STEPS) -> GeneratedSequence:

	"""Turn a shape into a drum pattern of ``length`` steps."""

	node_order, degree_map = _traverse(edges, length)

	sequence: typing.List[typing.Optional[Event]] = [
		degree_to_hit(degree_map.get(node_id, 0)) for node_id in node_order
	]

	return GeneratedSequence(sequence=sequence, node_order=node_order)


def generate_phrase_sequence (
	edges: typing.Sequence[pinboard.grid.GridEdge],
	length: int = pinboard.constants.SEQUENCE_STEPS,
	layout: typing.Optional[pinboard.note_map.NoteLayout] = None
) -> GeneratedSequence:

	"""Turn a shape into a melodic line of ``length`` steps.

	Pins where at least three lines meet play their mapped pitch, with
	velocity ``degree / 6`` capped at 1. Other pins, and silent pins, rest.
	"""

	node_order, degree_map = _traverse(edges, length)

	sequence: typing.List[typing.Optional[Event]] = []

	for node_id in node_order:

		degree = degree_map.get(node_id, 0)

		if degree <= 2:
			sequence.append(None)
			continue

		row, col = pinboard.note_map.parse_node_id(node_id)
		pitch = pinboard.note_map.get_note_from_node(row, col, layout)

		if pitch is None:
			sequence.append(None)
			continue

		sequence.append(PhraseNote(pitch=pitch, velocity=min(1.0, degree / FULL_VELOCITY_DEGREE)))

	return GeneratedSequence(sequence=sequence, node_order=node_order)


def _unit_vector (edge: pinboard.grid.GridEdge) -> typing.Tuple[float, float]:

	length = edge.length

	if length == 0:
		return 0.0, 0.0

	return edge.dx / length, edge.dy / length


def group_collinear_edges (edges: typing.Sequence[pinboard.grid.GridEdge]) -> typing.List[typing.List[pinboard.grid.GridEdge]]:

	"""Group edges that point the same way (either direction).

	Each edge is compared against the first edge of every existing group and
	joins the first group it is parallel to; otherwise it starts a new group.
	"""

	groups: typing.List[typing.List[pinboard.grid.GridEdge]] = []
	references: typing.List[typing.Tuple[float, float]] = []

	for edge in edges:

		nx, ny = _unit_vector(edge)

		for group, (rx, ry) in zip(groups, references):
			if abs(nx * rx + ny * ry) > COLLINEAR_DOT_THRESHOLD:
				group.append(edge)
				break

		else:
			groups.append([edge])
			references.append((nx, ny))

	return groups


def _group_pitches (group: typing.Sequence[pinboard.grid.GridEdge], layout: typing.Optional[pinboard.note_map.NoteLayout]) -> typing.Tuple[int, ...]:

	"""Distinct pitches of every pin touched by a group, in first-seen order."""

	pitches: typing.List[int] = []

	for edge in group:
		for node in (edge.from_node, edge.to_node):
			pitch = pinboard.note_map.get_note_from_node(node.row, node.col, layout)
			if pitch is not None and pitch not in pitches:
				pitches.append(pitch)

	return tuple(pitches)


def generate_chord_sequence (
	edges: typing.Sequence[pinboard.grid.GridEdge],
	slots: int = pinboard.constants.CHORD_SLOTS,
	layout: typing.Optional[pinboard.note_map.NoteLayout] = None
) -> GeneratedSequence:

	"""Turn a shape into a progression of ``slots`` chords.

	Groups are ranked by total edge length, longest first, and the top
	``slots`` become chords. With fewer groups than slots the progression
	cycles through them, so two groups A and B give ``A B A B``.
	"""

	if not edges:
		return GeneratedSequence(sequence=[], node_order=[])

	groups = group_collinear_edges(edges)

	ranked = sorted(groups, key=lambda group: sum(edge.length for edge in group), reverse=True)[:slots]
	chords = [_group_pitches(group, layout) for group in ranked]

	progression = [chords[i % len(chords)] for i in range(slots)]

	sequence: typing.List[typing.Optional[Event]] = [ChordEvent(pitches=pitches) for pitches in progression]
	node_order = [str(pitch) for pitches in progression for pitch in pitches]

	logger.debug(f"Chord progression from {len(groups)} line groups: {progression}")

	return GeneratedSequence(sequence=sequence, node_order=node_order)


def generate_sequence (
	track_type: typing.Union[TrackType, str],
	edges: typing.Sequence[pinboard.grid.GridEdge],
	steps: int = pinboard.constants.SEQUENCE_STEPS,
	chord_slots: int = pinboard.constants.CHORD_SLOTS,
	layout: typing.Optional[pinboard.note_map.NoteLayout] = None
) -> GeneratedSequence:

	"""Run the generator for a track type.

	Raises:
		ValueError: If ``track_type`` is not a known track type.
	"""

	track_type = TrackType(track_type)

	if track_type is TrackType.PHRASE:
		return generate_phrase_sequence(edges, length=steps, layout=layout)

	if track_type is TrackType.CHORD:
		return generate_chord_sequence(edges, slots=chord_slots, layout=layout)

	return generate_rhythm_sequence(edges, length=steps)
