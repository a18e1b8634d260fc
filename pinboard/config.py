"""YAML configuration and board files.

A config file sets playback options::

    bpm: 110
    output_device: "IAC Driver Bus 1"
    steps: 64
    chord_slots: 4
    note_map: my_notes.yaml
    step_beats:
      Rhythm: 0.25
      Chord: 2
    channels:
      Phrase: 3

A board file lists the tracks and the lines drawn on each, one gesture per
line written as two pin ids::

    tracks:
      - type: Rhythm
        edges: ["r3c0-r3c6", "r0c0-r6c3"]
      - type: Chord
        muted: true
        edges: ["r1c0-r1c4"]
"""

import dataclasses
import logging
import os
import typing

import yaml

import pinboard.constants
import pinboard.exceptions
import pinboard.generators
import pinboard.grid
import pinboard.pattern
import pinboard.track


logger = logging.getLogger(__name__)


TrackType = pinboard.generators.TrackType


@dataclasses.dataclass
class PinboardConfig:

	"""
	Playback options, with defaults for anything a config file leaves out.
	"""

	bpm: float = 120
	output_device: typing.Optional[str] = None
	steps: int = pinboard.constants.SEQUENCE_STEPS
	chord_slots: int = pinboard.constants.CHORD_SLOTS
	note_map: typing.Optional[str] = None
	step_beats: typing.Dict[TrackType, float] = dataclasses.field(default_factory=lambda: dict(pinboard.pattern.DEFAULT_STEP_BEATS))
	channels: typing.Dict[TrackType, int] = dataclasses.field(default_factory=lambda: dict(pinboard.pattern.DEFAULT_CHANNELS))


def _read_yaml (path: typing.Union[str, os.PathLike]) -> typing.Any:

	try:
		with open(path, "r", encoding="utf-8") as f:
			return yaml.safe_load(f)
	except (OSError, yaml.YAMLError) as e:
		raise pinboard.exceptions.ConfigError(f"Failed to read {os.fspath(path)}: {e}") from e


def _track_type_map (data: typing.Any, name: str, cast: typing.Callable[[typing.Any], typing.Any]) -> typing.Dict[TrackType, typing.Any]:

	if not isinstance(data, dict):
		raise pinboard.exceptions.ConfigError(f"'{name}' must be a mapping of track type to value")

	result: typing.Dict[TrackType, typing.Any] = {}

	for key, value in data.items():
		try:
			result[TrackType(key)] = cast(value)
		except (TypeError, ValueError) as e:
			raise pinboard.exceptions.ConfigError(f"'{name}': invalid entry {key!r}: {value!r}") from e

	return result


def load_config (config_path: typing.Union[str, os.PathLike] = "pinboard.yaml") -> PinboardConfig:

	"""Load configuration from a YAML file.

	A missing file is not an error: defaults are used and a warning logged.

	Raises:
		ConfigError: If the file exists but is not a valid config.
	"""

	config = PinboardConfig()

	if not os.path.exists(config_path):
		logger.warning(f"Config file {os.fspath(config_path)} not found. Using defaults.")
		return config

	data = _read_yaml(config_path) or {}

	if not isinstance(data, dict):
		raise pinboard.exceptions.ConfigError(f"{os.fspath(config_path)}: expected a mapping at the top level")

	try:
		if "bpm" in data:
			config.bpm = float(data["bpm"])
		if "output_device" in data:
			config.output_device = data["output_device"]
		if "steps" in data:
			config.steps = int(data["steps"])
		if "chord_slots" in data:
			config.chord_slots = int(data["chord_slots"])
	except (TypeError, ValueError) as e:
		raise pinboard.exceptions.ConfigError(f"{os.fspath(config_path)}: {e}") from e

	if config.bpm <= 0:
		raise pinboard.exceptions.ConfigError("bpm must be positive")

	if config.steps <= 0 or config.chord_slots <= 0:
		raise pinboard.exceptions.ConfigError("steps and chord_slots must be positive")

	if data.get("note_map") is not None:
		# Relative note map paths are resolved against the config file.
		note_map = os.fspath(data["note_map"])
		if not os.path.isabs(note_map):
			note_map = os.path.join(os.path.dirname(os.fspath(config_path)), note_map)
		config.note_map = note_map

	if "step_beats" in data:
		config.step_beats.update(_track_type_map(data["step_beats"], "step_beats", float))

	if "channels" in data:
		config.channels.update(_track_type_map(data["channels"], "channels", int))

	if any(value <= 0 for value in config.step_beats.values()):
		raise pinboard.exceptions.ConfigError("step_beats must be positive")

	if any(not 0 <= value <= 15 for value in config.channels.values()):
		raise pinboard.exceptions.ConfigError("channels must be 0-15")

	logger.debug(f"Loaded config from {os.fspath(config_path)}: {config}")

	return config


def load_board (board_path: typing.Union[str, os.PathLike], grid: typing.Optional[pinboard.grid.Grid] = None) -> typing.List[pinboard.track.Track]:

	"""Load the tracks of a board file.

	Raises:
		ConfigError: If the file is malformed, or a gesture is not a valid
			line on the grid.
	"""

	data = _read_yaml(board_path)

	if not isinstance(data, dict) or not isinstance(data.get("tracks"), list):
		raise pinboard.exceptions.ConfigError(f"{os.fspath(board_path)}: expected a 'tracks' list")

	tracks: typing.List[pinboard.track.Track] = []

	for index, entry in enumerate(data["tracks"]):

		if not isinstance(entry, dict):
			raise pinboard.exceptions.ConfigError(f"Track {index}: expected a mapping")

		try:
			track_type = TrackType(entry.get("type", TrackType.RHYTHM.value))
		except ValueError as e:
			raise pinboard.exceptions.ConfigError(f"Track {index}: unknown type {entry.get('type')!r}") from e

		gestures = entry.get("edges") or []

		if not isinstance(gestures, list):
			raise pinboard.exceptions.ConfigError(f"Track {index}: 'edges' must be a list")

		try:
			edges = pinboard.track.edges_from_gestures([str(gesture) for gesture in gestures], grid)
		except (pinboard.exceptions.InvalidGestureError, pinboard.exceptions.UnknownNodeError) as e:
			raise pinboard.exceptions.ConfigError(f"Track {index}: {e}") from e

		tracks.append(pinboard.track.Track(
			index = index,
			track_type = track_type,
			edges = edges,
			muted = bool(entry.get("muted", False))
		))

	logger.info(f"Loaded {len(tracks)} tracks from {os.fspath(board_path)}")

	return tracks
