"""Pin-to-pitch lookup.

The pitch of each pin comes from a static table, by default the
``pin_note_map.yaml`` file shipped inside the package. The table is read
once and never modified.
"""

import functools
import importlib.resources
import logging
import os
import re
import typing

import yaml

import pinboard.exceptions


logger = logging.getLogger(__name__)


NoteLayout = typing.Tuple[typing.Tuple[typing.Optional[int], ...], ...]

NODE_ID_PATTERN = re.compile(r"r(\d+)c(\d+)")


def _parse_layout (data: typing.Any, source: str) -> NoteLayout:

	"""Validate the ``layout`` table of a loaded note map."""

	if not isinstance(data, dict) or not isinstance(data.get("layout"), list):
		raise pinboard.exceptions.ConfigError(f"{source}: expected a 'layout' list of rows")

	rows: typing.List[typing.Tuple[typing.Optional[int], ...]] = []

	for row_index, row in enumerate(data["layout"]):

		if not isinstance(row, list):
			raise pinboard.exceptions.ConfigError(f"{source}: row {row_index} is not a list")

		for value in row:
			if value is not None and (not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 127):
				raise pinboard.exceptions.ConfigError(f"{source}: row {row_index} has invalid pitch {value!r}")

		rows.append(tuple(row))

	return tuple(rows)


def load_note_map (path: typing.Optional[typing.Union[str, os.PathLike]] = None) -> NoteLayout:

	"""Read a note map from a YAML file.

	Parameters:
		path: File to read. When omitted the built-in table is used.

	Raises:
		ConfigError: If the file cannot be read or is not a valid table.
	"""

	try:
		if path is None:
			source = "pin_note_map.yaml"
			text = importlib.resources.files("pinboard").joinpath("data").joinpath("pin_note_map.yaml").read_text(encoding="utf-8")
		else:
			source = os.fspath(path)
			with open(path, "r", encoding="utf-8") as f:
				text = f.read()

		data = yaml.safe_load(text)

	except (OSError, yaml.YAMLError) as e:
		raise pinboard.exceptions.ConfigError(f"Failed to load note map: {e}") from e

	layout = _parse_layout(data, source)

	logger.debug(f"Loaded note map from {source}: {len(layout)} rows")

	return layout


@functools.lru_cache(maxsize=None)
def default_layout () -> NoteLayout:

	"""The built-in note table, loaded on first use."""

	return load_note_map()


def get_note_from_node (row: int, col: int, layout: typing.Optional[NoteLayout] = None) -> typing.Optional[int]:

	"""Return the MIDI pitch of the pin at ``(row, col)``.

	Returns ``None`` when the position is outside the table or the pin is
	silent.
	"""

	if layout is None:
		layout = default_layout()

	if row < 0 or row >= len(layout):
		return None

	row_data = layout[row]

	if col < 0 or col >= len(row_data):
		return None

	return row_data[col]


def parse_node_id (node_id: str) -> typing.Tuple[int, int]:

	"""Extract ``(row, col)`` from an id such as ``"r3c2"``.

	An id that does not match falls back to ``(0, 0)`` instead of raising.
	"""

	match = NODE_ID_PATTERN.search(node_id)

	if match is None:
		logger.debug(f"Unparseable node id {node_id!r}, using (0, 0)")
		return 0, 0

	return int(match.group(1)), int(match.group(2))
