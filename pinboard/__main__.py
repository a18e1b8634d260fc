"""Command line interface.

Usage::

    python -m pinboard show board.yaml
    python -m pinboard render board.yaml -o board.mid --bars 16
    python -m pinboard play board.yaml --device "IAC Driver Bus 1"
"""

import argparse
import asyncio
import logging
import sys
import typing

import pinboard.config
import pinboard.exceptions
import pinboard.generators
import pinboard.note_map
import pinboard.pattern
import pinboard.render
import pinboard.scheduler
import pinboard.track


logger = logging.getLogger(__name__)


def format_event (event: typing.Optional[pinboard.generators.Event]) -> str:

	"""Short text for one step of a sequence."""

	if event is None:
		return "."

	if isinstance(event, pinboard.generators.RhythmHit):
		return event.kind

	if isinstance(event, pinboard.generators.PhraseNote):
		return f"{event.pitch}@{event.velocity:.2f}"

	return "[" + " ".join(str(pitch) for pitch in event.pitches) + "]"


def _layout (config: pinboard.config.PinboardConfig) -> typing.Optional[pinboard.note_map.NoteLayout]:

	if config.note_map is None:
		return None

	return pinboard.note_map.load_note_map(config.note_map)


def _patterns (
	tracks: typing.Sequence[pinboard.track.Track],
	config: pinboard.config.PinboardConfig
) -> typing.List[typing.Tuple[str, pinboard.pattern.Pattern]]:

	layout = _layout(config)
	patterns: typing.List[typing.Tuple[str, pinboard.pattern.Pattern]] = []

	for track in tracks:
		generated = track.generate(steps=config.steps, chord_slots=config.chord_slots, layout=layout)
		pattern = pinboard.pattern.build_pattern(
			generated,
			track.track_type,
			channel = config.channels[track.track_type],
			step_beats = config.step_beats[track.track_type],
			muted = track.muted
		)
		patterns.append((f"Track {track.index + 1} ({track.track_type.value})", pattern))

	return patterns


def cmd_show (tracks: typing.Sequence[pinboard.track.Track], config: pinboard.config.PinboardConfig, args: argparse.Namespace) -> None:

	layout = _layout(config)

	for track in tracks:
		generated = track.generate(steps=config.steps, chord_slots=config.chord_slots, layout=layout)
		muted = " (muted)" if track.muted else ""
		print(f"Track {track.index + 1} - {track.track_type.value}{muted}, {len(track.edges)} edges")
		print("  " + " ".join(format_event(event) for event in generated.sequence))
		print("  nodes: " + " ".join(generated.node_order))


def cmd_render (tracks: typing.Sequence[pinboard.track.Track], config: pinboard.config.PinboardConfig, args: argparse.Namespace) -> None:

	pinboard.render.render_to_file(_patterns(tracks, config), args.output, bars=args.bars, bpm=config.bpm)


async def _play (tracks: typing.Sequence[pinboard.track.Track], config: pinboard.config.PinboardConfig, args: argparse.Namespace) -> None:

	player = pinboard.scheduler.Player(output_device_name=args.device or config.output_device, initial_bpm=config.bpm)

	if player.midi_out is None:
		raise pinboard.exceptions.PinboardError("No MIDI output available")

	layout = _layout(config)

	try:
		for track in tracks:
			await player.load_track(
				track,
				channel = config.channels[track.track_type],
				step_beats = config.step_beats[track.track_type],
				steps = config.steps,
				chord_slots = config.chord_slots,
				layout = layout
			)

		logger.info("Playing. Press Ctrl+C to stop.")
		await player.play(bars=args.bars)

	finally:
		player.close()


def cmd_play (tracks: typing.Sequence[pinboard.track.Track], config: pinboard.config.PinboardConfig, args: argparse.Namespace) -> None:

	try:
		asyncio.run(_play(tracks, config, args))
	except KeyboardInterrupt:
		logger.info("Stopping...")


def build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="pinboard", description="Turn shapes drawn on a pin grid into MIDI sequences.")
	parser.add_argument("--config", default="pinboard.yaml", help="YAML config file (default: pinboard.yaml)")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

	commands = parser.add_subparsers(dest="command", required=True)

	show = commands.add_parser("show", help="Print the generated sequences")
	show.add_argument("board", help="YAML board file")
	show.set_defaults(handler=cmd_show)

	render = commands.add_parser("render", help="Render the board to a MIDI file")
	render.add_argument("board", help="YAML board file")
	render.add_argument("-o", "--output", default="pinboard.mid", help="Output .mid file")
	render.add_argument("--bars", type=int, default=16, help="Length in bars (default: 16)")
	render.set_defaults(handler=cmd_render)

	play = commands.add_parser("play", help="Play the board on a MIDI output")
	play.add_argument("board", help="YAML board file")
	play.add_argument("--device", default=None, help="MIDI output device name")
	play.add_argument("--bars", type=int, default=None, help="Stop after this many bars")
	play.set_defaults(handler=cmd_play)

	return parser


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the pinboard command.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		config = pinboard.config.load_config(args.config)
		tracks = pinboard.config.load_board(args.board)
		args.handler(tracks, config, args)

	except pinboard.exceptions.PinboardError as e:
		logger.error(str(e))
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
