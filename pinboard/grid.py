"""Pin grid geometry.

The pinboard is a fixed triangular lattice laid out row by row from
``ROW_COUNTS``. Every pair of neighbouring pins is joined by a *unit edge*;
user drawing is only ever stored as unit edges. A longer drag between two
pins is accepted when it runs along one of the lattice directions and can be
split into a chain of unit edges - see :meth:`Grid.get_edge_segments`.

The grid is immutable and shared::

    grid = pinboard.grid.get_grid()
    segments = grid.get_edge_segments(grid.node("r0c0"), grid.node("r0c3"))
    # three unit edges: r0c0-r0c1, r0c1-r0c2, r0c2-r0c3
"""

import dataclasses
import logging
import math
import threading
import typing

import pinboard.exceptions


logger = logging.getLogger(__name__)


ROW_COUNTS: typing.Tuple[int, ...] = (4, 5, 6, 7, 6, 5, 4)
SIDE_LENGTH = 48.0

# Tolerance when checking that a drag is a whole number of lattice steps.
STEP_TOLERANCE = 1e-6
COORDINATE_DIGITS = 6


def make_node_id (row: int, col: int) -> str:

	"""Return the canonical id of the pin at ``(row, col)``."""

	return f"r{row}c{col}"


@dataclasses.dataclass (frozen=True)
class GridNode:

	"""
	A single pin on the board.
	"""

	id: str
	x: float
	y: float
	row: int
	col: int


def make_edge_key (a: GridNode, b: GridNode) -> str:

	"""Return the order-independent key for the edge between two nodes."""

	if a.id < b.id:
		return f"{a.id}-{b.id}"

	return f"{b.id}-{a.id}"


class GridEdge:

	"""An undirected edge between two pins, identified by its canonical key.

	``from_node`` and ``to_node`` keep the direction in which the edge was
	drawn, but two edges with the same endpoints compare equal regardless of
	direction.
	"""

	__slots__ = ("from_node", "to_node", "key")

	def __init__ (self, from_node: GridNode, to_node: GridNode) -> None:

		object.__setattr__(self, "from_node", from_node)
		object.__setattr__(self, "to_node", to_node)
		object.__setattr__(self, "key", make_edge_key(from_node, to_node))

	def __setattr__ (self, name: str, value: typing.Any) -> None:

		raise AttributeError("GridEdge is immutable")

	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, GridEdge):
			return NotImplemented

		return self.key == other.key

	def __hash__ (self) -> int:

		return hash(self.key)

	def __repr__ (self) -> str:

		return f"GridEdge({self.key!r})"

	@property
	def dx (self) -> float:

		return self.to_node.x - self.from_node.x

	@property
	def dy (self) -> float:

		return self.to_node.y - self.from_node.y

	@property
	def length (self) -> float:

		"""Euclidean length in board coordinates."""

		return math.hypot(self.dx, self.dy)


@dataclasses.dataclass (frozen=True)
class Direction:

	"""
	One lattice direction: the unit-edge step vector and its length.
	"""

	dx: float
	dy: float
	length: float


def direction_key (dx: float, dy: float) -> typing.Optional[typing.Tuple[float, float]]:

	"""Normalise a vector and round it so equal directions share a key.

	Returns ``None`` for a zero-length vector.
	"""

	length = math.hypot(dx, dy)

	if length == 0:
		return None

	return (round(dx / length, COORDINATE_DIGITS) + 0.0, round(dy / length, COORDINATE_DIGITS) + 0.0)


def coordinate_key (x: float, y: float) -> typing.Tuple[float, float]:

	"""Rounded coordinates used to find a pin from a computed point."""

	return (round(x, COORDINATE_DIGITS) + 0.0, round(y, COORDINATE_DIGITS) + 0.0)


class Grid:

	"""
	The full set of pins and unit edges for a row layout.
	"""

	def __init__ (self, row_counts: typing.Sequence[int] = ROW_COUNTS, side_length: float = SIDE_LENGTH) -> None:

		"""Lay out the pins and connect neighbours.

		Parameters:
			row_counts: Number of pins in each row, top to bottom.
			side_length: Distance between neighbouring pins.
		"""

		if not row_counts or any(count <= 0 for count in row_counts):
			raise ValueError("Row counts must be positive")

		if side_length <= 0:
			raise ValueError("Side length must be positive")

		self.row_counts: typing.Tuple[int, ...] = tuple(row_counts)
		self.side_length = side_length

		horizontal = side_length
		vertical = side_length * math.sqrt(3) * 0.5
		margin = side_length
		max_count = max(self.row_counts)

		self.width = margin * 2 + (max_count - 1) * horizontal
		self.height = margin * 2 + (len(self.row_counts) - 1) * vertical

		self.nodes_by_row: typing.List[typing.List[GridNode]] = []
		self.edges: typing.List[GridEdge] = []
		self.edge_keys: typing.Set[str] = set()

		for row, count in enumerate(self.row_counts):

			# Shorter rows are centred under the widest one.
			offset = ((max_count - count) * horizontal) / 2

			row_nodes = [
				GridNode(
					id = make_node_id(row, col),
					x = margin + offset + col * horizontal,
					y = margin + row * vertical,
					row = row,
					col = col
				)
				for col in range(count)
			]

			for left, right in zip(row_nodes, row_nodes[1:]):
				self._add_edge(left, right)

			self.nodes_by_row.append(row_nodes)

		for upper, lower in zip(self.nodes_by_row, self.nodes_by_row[1:]):
			self._connect_rows(upper, lower)

		self.nodes: typing.List[GridNode] = [node for row_nodes in self.nodes_by_row for node in row_nodes]
		self._nodes_by_id: typing.Dict[str, GridNode] = {node.id: node for node in self.nodes}
		self._nodes_by_point: typing.Dict[typing.Tuple[float, float], GridNode] = {
			coordinate_key(node.x, node.y): node for node in self.nodes
		}
		self.directions: typing.Dict[typing.Tuple[float, float], Direction] = self._build_directions()

		logger.debug(f"Built grid: {len(self.nodes)} nodes, {len(self.edges)} edges, {len(self.directions)} directions")


	def _add_edge (self, a: GridNode, b: GridNode) -> None:

		edge = GridEdge(a, b)

		if edge.key in self.edge_keys:
			return

		self.edge_keys.add(edge.key)
		self.edges.append(edge)


	def _connect_rows (self, upper: typing.List[GridNode], lower: typing.List[GridNode]) -> None:

		"""Join two consecutive rows so that they tile into triangles."""

		if len(lower) == len(upper) + 1:
			# Widening: each upper pin sits between two lower pins.
			for col, node in enumerate(upper):
				self._add_edge(node, lower[col])
				self._add_edge(node, lower[col + 1])

		elif len(lower) + 1 == len(upper):
			# Narrowing: each lower pin sits between two upper pins.
			for col, node in enumerate(lower):
				self._add_edge(upper[col], node)
				self._add_edge(upper[col + 1], node)

		else:
			for col, node in enumerate(upper):
				self._add_edge(node, lower[col])
				if col < len(upper) - 1:
					self._add_edge(upper[col + 1], lower[col])


	def _build_directions (self) -> typing.Dict[typing.Tuple[float, float], Direction]:

		"""Collect every direction a unit edge runs in, both ways round."""

		directions: typing.Dict[typing.Tuple[float, float], Direction] = {}

		for edge in self.edges:

			dx, dy, length = edge.dx, edge.dy, edge.length

			forward = direction_key(dx, dy)
			backward = direction_key(-dx, -dy)

			if forward is not None and forward not in directions:
				directions[forward] = Direction(dx=dx, dy=dy, length=length)

			if backward is not None and backward not in directions:
				directions[backward] = Direction(dx=-dx, dy=-dy, length=length)

		return directions


	def node (self, node_id: str) -> GridNode:

		"""Return the pin with the given id.

		Raises:
			UnknownNodeError: If no such pin exists.
		"""

		try:
			return self._nodes_by_id[node_id]
		except KeyError:
			raise pinboard.exceptions.UnknownNodeError(node_id) from None


	def node_at (self, row: int, col: int) -> GridNode:

		"""Return the pin at a row/column position."""

		return self.node(make_node_id(row, col))


	def node_at_point (self, x: float, y: float) -> typing.Optional[GridNode]:

		"""Return the pin at exactly ``(x, y)``, or ``None`` if there is none."""

		return self._nodes_by_point.get(coordinate_key(x, y))


	def get_edge_segments (self, from_node: GridNode, to_node: GridNode) -> typing.Optional[typing.List[GridEdge]]:

		"""Split a drag between two pins into consecutive unit edges.

		The drag must follow a lattice direction and cover a whole number of
		steps, and every pin it passes through must exist. The segments are
		returned in drawing order, starting at ``from_node``.

		Returns:
			The unit edges, or ``None`` when the drag cannot be drawn.
		"""

		key = direction_key(to_node.x - from_node.x, to_node.y - from_node.y)

		if key is None:
			return None

		direction = self.directions.get(key)

		if direction is None:
			return None

		total_length = math.hypot(to_node.x - from_node.x, to_node.y - from_node.y)
		steps_float = total_length / direction.length
		steps = round(steps_float)

		if steps <= 0 or abs(steps - steps_float) > STEP_TOLERANCE:
			return None

		segments: typing.List[GridEdge] = []
		current = from_node

		for _ in range(steps):

			next_node = self.node_at_point(current.x + direction.dx, current.y + direction.dy)

			if next_node is None:
				return None

			segment = GridEdge(current, next_node)

			if segment.key not in self.edge_keys:
				return None

			segments.append(segment)
			current = next_node

		if current.id != to_node.id:
			return None

		return segments


	def can_create_edge (self, from_node: GridNode, to_node: GridNode) -> bool:

		return self.get_edge_segments(from_node, to_node) is not None


_grid: typing.Optional[Grid] = None
_grid_lock = threading.Lock()


def get_grid () -> Grid:

	"""Return the shared board grid, building it on first use."""

	global _grid

	if _grid is None:
		with _grid_lock:
			if _grid is None:
				_grid = Grid()

	return _grid
