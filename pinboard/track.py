"""Tracks and editing of their edge sets.

A track's edges are only ever replaced, never mutated: each editing helper
returns a new list. A gesture that cannot be drawn leaves the edges exactly
as they were.
"""

import dataclasses
import logging
import typing

import pinboard.constants
import pinboard.exceptions
import pinboard.generators
import pinboard.grid
import pinboard.note_map


logger = logging.getLogger(__name__)


TrackType = pinboard.generators.TrackType

EdgeList = typing.List[pinboard.grid.GridEdge]


def add_gesture (
	edges: typing.Sequence[pinboard.grid.GridEdge],
	from_node: pinboard.grid.GridNode,
	to_node: pinboard.grid.GridNode,
	grid: typing.Optional[pinboard.grid.Grid] = None
) -> EdgeList:

	"""Draw a line between two pins and return the new edge list.

	The line is split into unit edges; any not already present are appended
	in drawing order.

	Raises:
		InvalidGestureError: If the line does not follow the grid. The input
			edges are not touched.
	"""

	if grid is None:
		grid = pinboard.grid.get_grid()

	segments = grid.get_edge_segments(from_node, to_node)

	if segments is None:
		logger.warning(f"Rejected gesture {from_node.id} -> {to_node.id}")
		raise pinboard.exceptions.InvalidGestureError(from_node.id, to_node.id)

	existing = {edge.key for edge in edges}
	result = list(edges)

	for segment in segments:
		if segment.key not in existing:
			existing.add(segment.key)
			result.append(segment)

	return result


def remove_edge (edges: typing.Sequence[pinboard.grid.GridEdge], key: str) -> EdgeList:

	"""Return the edges without the one whose key is ``key``."""

	return [edge for edge in edges if edge.key != key]


def clear_edges () -> EdgeList:

	return []


def parse_gesture (text: str, grid: typing.Optional[pinboard.grid.Grid] = None) -> typing.Tuple[pinboard.grid.GridNode, pinboard.grid.GridNode]:

	"""Parse a gesture written as ``"r0c0-r0c3"``.

	Raises:
		InvalidGestureError: If the text is not two node ids joined by ``-``.
		UnknownNodeError: If either pin is not on the grid.
	"""

	if grid is None:
		grid = pinboard.grid.get_grid()

	parts = [part.strip() for part in text.split("-")]

	if len(parts) != 2 or not all(parts):
		raise pinboard.exceptions.InvalidGestureError(text, text)

	return grid.node(parts[0]), grid.node(parts[1])


def edges_from_gestures (gestures: typing.Iterable[str], grid: typing.Optional[pinboard.grid.Grid] = None) -> EdgeList:

	"""Build an edge list by drawing each gesture in turn."""

	if grid is None:
		grid = pinboard.grid.get_grid()

	edges: EdgeList = []

	for gesture in gestures:
		from_node, to_node = parse_gesture(gesture, grid)
		edges = add_gesture(edges, from_node, to_node, grid)

	return edges


@dataclasses.dataclass
class Track:

	"""
	One voice on the board: its type, drawn edges and mute state.
	"""

	index: int
	track_type: TrackType = TrackType.RHYTHM
	edges: EdgeList = dataclasses.field(default_factory=list)
	muted: bool = False

	def draw (self, from_node: pinboard.grid.GridNode, to_node: pinboard.grid.GridNode) -> None:

		"""Add a gesture to this track, replacing its edge list."""

		self.edges = add_gesture(self.edges, from_node, to_node)

	def erase (self, key: str) -> None:

		self.edges = remove_edge(self.edges, key)

	def clear (self) -> None:

		self.edges = clear_edges()

	def generate (
		self,
		steps: int = pinboard.constants.SEQUENCE_STEPS,
		chord_slots: int = pinboard.constants.CHORD_SLOTS,
		layout: typing.Optional[pinboard.note_map.NoteLayout] = None
	) -> pinboard.generators.GeneratedSequence:

		"""Generate this track's sequence from its current edges."""

		return pinboard.generators.generate_sequence(
			self.track_type,
			list(self.edges),
			steps = steps,
			chord_slots = chord_slots,
			layout = layout
		)
