"""Graph utilities over a user's edge set.

Everything here is rebuilt from scratch on each call - there are no caches -
so the generators stay pure functions of the edges they are given.
"""

import typing

import pinboard.grid


Adjacency = typing.Dict[str, typing.List[str]]


def build_adjacency (edges: typing.Iterable[pinboard.grid.GridEdge]) -> Adjacency:

	"""Fold edges into an undirected adjacency map.

	Nodes appear in the order they are first touched, and each neighbour list
	keeps the order in which its edges were drawn. That ordering decides which
	path :func:`longest_trail` returns when several are equally long.
	"""

	adjacency: Adjacency = {}

	for edge in edges:

		a = edge.from_node.id
		b = edge.to_node.id

		if a not in adjacency:
			adjacency[a] = []

		if b not in adjacency:
			adjacency[b] = []

		if b not in adjacency[a]:
			adjacency[a].append(b)

		if a not in adjacency[b]:
			adjacency[b].append(a)

	return adjacency


def compute_degree_map (edges: typing.Iterable[pinboard.grid.GridEdge]) -> typing.Dict[str, int]:

	"""Count the edges touching each node.

	Edges are counted once per key, so drawing the same segment twice does
	not raise a node's degree.
	"""

	degree: typing.Dict[str, int] = {}
	seen: typing.Set[str] = set()

	for edge in edges:

		if edge.key in seen:
			continue

		seen.add(edge.key)

		for node_id in (edge.from_node.id, edge.to_node.id):
			degree[node_id] = degree.get(node_id, 0) + 1

	return degree


def path_length_bound (adjacency: Adjacency, start: str, visited: typing.AbstractSet[str]) -> int:

	"""Upper bound on the length of a simple path that begins at ``start``.

	The path may only use nodes outside ``visited`` that can be reached from
	``start`` without passing through ``visited``. Of those, a node with at
	most one such neighbour can only be the final node of the path, so all
	but one of them are left out of the count.
	"""

	reached = {start}
	stack = [start]

	while stack:
		node = stack.pop()
		for neighbour in adjacency.get(node, []):
			if neighbour not in visited and neighbour not in reached:
				reached.add(neighbour)
				stack.append(neighbour)

	dead_ends = 0

	for node in reached:
		if node != start and sum(1 for neighbour in adjacency.get(node, []) if neighbour in reached) <= 1:
			dead_ends += 1

	return len(reached) - max(0, dead_ends - 1)


def longest_trail (adjacency: Adjacency) -> typing.List[str]:

	"""Find the longest simple path in the graph.

	Every simple path (no node visited twice) is explored depth-first,
	starting from each node in adjacency order and following neighbours in
	list order. Only a strictly longer path replaces the current best, so
	the first path found wins a tie.

	A branch is skipped when :func:`path_length_bound` shows it cannot give
	a path longer than the best so far. Skipped branches could at most tie,
	and a tie never replaces the best path, so the result is the same as an
	unpruned search.
	"""

	longest: typing.List[str] = []

	def dfs (node: str, visited: typing.Set[str], path: typing.List[str]) -> None:

		nonlocal longest

		visited.add(node)
		path.append(node)

		if len(path) > len(longest):
			longest = list(path)

		for neighbour in adjacency.get(node, []):

			if neighbour in visited:
				continue

			if len(path) + path_length_bound(adjacency, neighbour, visited) <= len(longest):
				continue

			dfs(neighbour, visited, path)

		path.pop()
		visited.discard(node)

	for start in adjacency:

		if path_length_bound(adjacency, start, frozenset()) <= len(longest):
			continue

		dfs(start, set(), [])

	return longest


def ping_pong_to_length (path: typing.Sequence[str], target_length: int) -> typing.List[str]:

	"""Stretch a path to ``target_length`` ids by bouncing between its ends.

	A path ``[a, b, c]`` becomes ``a b c b a b c b ...``. A single-node path
	repeats that node; an empty path gives an empty result.
	"""

	if not path or target_length <= 0:
		return []

	last = len(path) - 1
	result: typing.List[str] = []
	forward = True
	i = 0

	while len(result) < target_length:

		result.append(path[i])

		if last == 0:
			continue

		if forward:
			i += 1
			if i == last:
				forward = False

		else:
			i -= 1
			if i == 0:
				forward = True

	return result
