import asyncio
import logging
import typing

import pinboard
import pinboard.scheduler

logging.basicConfig(level=logging.INFO)

grid = pinboard.get_grid()

drums = pinboard.Track(index=0, track_type=pinboard.TrackType.RHYTHM)
bass = pinboard.Track(index=1, track_type=pinboard.TrackType.PHRASE)

# A T shape: the junction at r3c3 plays a kick.
drums.draw(grid.node("r3c0"), grid.node("r3c6"))
drums.draw(grid.node("r3c3"), grid.node("r2c3"))

bass.draw(grid.node("r4c0"), grid.node("r4c5"))
bass.draw(grid.node("r4c2"), grid.node("r6c2"))


def show_step (track_index: int, step_index: int, node_id: typing.Optional[str]) -> None:

	# Only print the first track's position on each beat.
	if track_index == 0 and step_index % 4 == 0:
		logging.info(f"step {step_index:2d} -> {node_id}")


async def main () -> None:

	player = pinboard.scheduler.Player(initial_bpm=110)

	if player.midi_out is None:
		logging.error("No MIDI output available")
		return

	player.on_step(show_step)

	await player.load_track(drums)
	await player.load_track(bass)

	await player.start()

	try:
		await asyncio.sleep(8)

		# Cross the T with a second diagonal. The new pattern replaces the
		# old one without a gap or overlap.
		drums.draw(grid.node("r0c3"), grid.node("r6c0"))
		await player.load_track(drums)

		await asyncio.sleep(8)

		player.set_muted(1, True)
		await asyncio.sleep(4)

	finally:
		await player.stop()
		player.close()


if __name__ == "__main__":
	asyncio.run(main())
