import time
import typing

import pinboard.graph
import pinboard.grid
import pinboard.track


def _chain (*names: str) -> typing.List[pinboard.grid.GridEdge]:

	"""Edges joining consecutive pairs of names (a, b), (c, d), ..."""

	nodes = {name: pinboard.grid.GridNode(id=name, x=float(i), y=0.0, row=0, col=0) for i, name in enumerate(sorted(set(names)))}

	return [pinboard.grid.GridEdge(nodes[a], nodes[b]) for a, b in zip(names[::2], names[1::2])]


def test_build_adjacency_is_undirected () -> None:

	"""Each edge appears in both endpoints' neighbour lists."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "c"))

	assert adjacency == {"a": ["b"], "b": ["a", "c"], "c": ["b"]}


def test_build_adjacency_keeps_first_seen_order () -> None:

	"""Nodes are keyed in the order edges first touch them."""

	adjacency = pinboard.graph.build_adjacency(_chain("c", "a", "b", "a"))

	assert list(adjacency) == ["c", "a", "b"]
	assert adjacency["a"] == ["c", "b"]


def test_build_adjacency_ignores_repeated_edges () -> None:

	"""Drawing the same edge twice does not duplicate neighbours."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "a"))

	assert adjacency == {"a": ["b"], "b": ["a"]}


def test_degree_map_counts_incident_edges () -> None:

	"""A path A-B-C gives degrees 1, 2, 1."""

	degree = pinboard.graph.compute_degree_map(_chain("a", "b", "b", "c"))

	assert degree == {"a": 1, "b": 2, "c": 1}


def test_degree_map_counts_each_key_once () -> None:

	"""The same edge in both directions counts once."""

	degree = pinboard.graph.compute_degree_map(_chain("a", "b", "b", "a"))

	assert degree == {"a": 1, "b": 1}


def test_degree_map_empty () -> None:

	"""No edges, no degrees."""

	assert pinboard.graph.compute_degree_map([]) == {}


def test_longest_trail_empty () -> None:

	"""An empty graph has an empty trail."""

	assert pinboard.graph.longest_trail({}) == []


def test_longest_trail_four_cycle_is_simple () -> None:

	"""A 4-cycle gives a path through all four nodes without returning to the start."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "c", "c", "d", "d", "a"))

	trail = pinboard.graph.longest_trail(adjacency)

	assert trail == ["a", "b", "c", "d"]
	assert len(set(trail)) == len(trail)


def test_longest_trail_first_found_wins_ties () -> None:

	"""Among equally long paths the first one explored is kept."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "c", "b", "d"))

	assert pinboard.graph.longest_trail(adjacency) == ["a", "b", "c"]


def test_longest_trail_is_exhaustive () -> None:

	"""The global longest path is found even when it does not start at the first node."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "c", "a", "d", "d", "e", "e", "f"))

	assert pinboard.graph.longest_trail(adjacency) == ["c", "b", "a", "d", "e", "f"]


def test_longest_trail_picks_larger_component () -> None:

	"""A later, larger component beats an earlier small one."""

	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "c", "d", "d", "e"))

	assert pinboard.graph.longest_trail(adjacency) == ["c", "d", "e"]


def test_longest_trail_on_board_triangle (grid: pinboard.grid.Grid) -> None:

	"""A single triangle on the board visits its three pins once."""

	a, b, c = grid.node("r0c0"), grid.node("r0c1"), grid.node("r1c1")
	edges = [pinboard.grid.GridEdge(a, b), pinboard.grid.GridEdge(b, c), pinboard.grid.GridEdge(c, a)]

	trail = pinboard.graph.longest_trail(pinboard.graph.build_adjacency(edges))

	assert trail == ["r0c0", "r0c1", "r1c1"]


HEXAGON = (
	"r3c3-r2c2", "r3c3-r2c3", "r3c3-r3c4", "r3c3-r4c3", "r3c3-r4c2", "r3c3-r3c2",
	"r2c2-r2c3", "r2c3-r3c4", "r3c4-r4c3", "r4c3-r4c2", "r4c2-r3c2", "r3c2-r2c2",
)


def _exhaustive_longest_trail (adjacency: pinboard.graph.Adjacency) -> typing.List[str]:

	"""Every simple path in search order, keeping the first strictly longer one."""

	longest: typing.List[str] = []

	def dfs (node: str, visited: typing.Set[str], path: typing.List[str]) -> None:

		nonlocal longest

		visited.add(node)
		path.append(node)

		if len(path) > len(longest):
			longest = list(path)

		for neighbour in adjacency[node]:
			if neighbour not in visited:
				dfs(neighbour, visited, path)

		path.pop()
		visited.discard(node)

	for start in adjacency:
		dfs(start, set(), [])

	return longest


def test_longest_trail_matches_exhaustive_search (grid: pinboard.grid.Grid) -> None:

	"""Skipping hopeless branches never changes which path is returned."""

	shapes = [
		pinboard.track.edges_from_gestures(HEXAGON, grid),
		pinboard.track.edges_from_gestures([*HEXAGON, "r4c3-r6c3", "r2c2-r1c1"], grid),
		[edge for edge in grid.edges if edge.from_node.row <= 1 and edge.to_node.row <= 1],
		_chain("a", "b", "b", "c", "b", "d", "d", "e", "c", "f"),
	]

	for edges in shapes:
		adjacency = pinboard.graph.build_adjacency(edges)
		assert pinboard.graph.longest_trail(adjacency) == _exhaustive_longest_trail(adjacency)


def test_longest_trail_full_board (grid: pinboard.grid.Grid) -> None:

	"""With every edge of the board drawn the trail visits all 37 pins, quickly."""

	adjacency = pinboard.graph.build_adjacency(grid.edges)

	started = time.perf_counter()
	trail = pinboard.graph.longest_trail(adjacency)
	elapsed = time.perf_counter() - started

	assert len(trail) == 37
	assert len(set(trail)) == 37
	assert all(b in adjacency[a] for a, b in zip(trail, trail[1:]))
	assert elapsed < 5.0


def test_path_length_bound_counts_reachable_pins () -> None:

	"""Visited nodes cut the graph, and only one dead end can be reached last."""

	# A star: b in the middle with leaves a, c, d.
	adjacency = pinboard.graph.build_adjacency(_chain("a", "b", "b", "c", "b", "d"))

	assert pinboard.graph.path_length_bound(adjacency, "b", frozenset()) == 2
	assert pinboard.graph.path_length_bound(adjacency, "a", frozenset()) == 3
	assert pinboard.graph.path_length_bound(adjacency, "a", {"b"}) == 1


def test_ping_pong_reflects_at_both_ends () -> None:

	"""The walk turns round at the last and first nodes."""

	result = pinboard.graph.ping_pong_to_length(["a", "b", "c"], 9)

	assert result == ["a", "b", "c", "b", "a", "b", "c", "b", "a"]


def test_ping_pong_two_nodes () -> None:

	"""A two-node path alternates."""

	assert pinboard.graph.ping_pong_to_length(["a", "b"], 5) == ["a", "b", "a", "b", "a"]


def test_ping_pong_exact_length () -> None:

	"""The result always has the requested length."""

	for length in (1, 7, 64, 65):
		assert len(pinboard.graph.ping_pong_to_length(["a", "b", "c", "d"], length)) == length


def test_ping_pong_single_node_repeats () -> None:

	"""A single node fills every step."""

	assert pinboard.graph.ping_pong_to_length(["a"], 64) == ["a"] * 64


def test_ping_pong_zero_length () -> None:

	"""A target of zero gives an empty list."""

	assert pinboard.graph.ping_pong_to_length(["a", "b"], 0) == []


def test_ping_pong_empty_path () -> None:

	"""An empty path stays empty whatever the target."""

	assert pinboard.graph.ping_pong_to_length([], 64) == []


def test_ping_pong_shorter_than_path () -> None:

	"""A target shorter than the path takes its start."""

	assert pinboard.graph.ping_pong_to_length(["a", "b", "c", "d"], 2) == ["a", "b"]
