"""Playback of pinboard tracks as live MIDI.

The :class:`Player` runs a 24 PPQN clock on the asyncio event loop. Each
track is attached as a looping :class:`~pinboard.pattern.Pattern`; every time
one of its steps begins, registered step callbacks are told which track,
which step and which pin - enough for a UI to highlight the pin being
played.

Replacing a track's pattern while playing is atomic: the previous pattern is
detached, and its sounding notes released, before the new one is attached,
all without a clock pulse in between. Two patterns for the same track never
play at once.
"""

import asyncio
import dataclasses
import functools
import heapq
import logging
import time
import typing

import mido

import pinboard.constants
import pinboard.constants.pulses
import pinboard.midi_utils
import pinboard.note_map
import pinboard.pattern
import pinboard.track


logger = logging.getLogger(__name__)


StepCallback = typing.Callable[[int, int, typing.Optional[str]], typing.Any]


@dataclasses.dataclass (order=True)
class NoteOff:

	"""
	A pending note-off at an absolute pulse.
	"""

	pulse: int
	track_index: int = dataclasses.field(compare=False)
	channel: int = dataclasses.field(compare=False)
	note: int = dataclasses.field(compare=False)
	on_pulse: int = dataclasses.field(compare=False, default=0)


@dataclasses.dataclass
class TrackSlot:

	"""
	A pattern attached to the player and where its loop began.
	"""

	index: int
	pattern: pinboard.pattern.Pattern
	start_pulse: int
	muted: bool = False


class Player:

	"""
	Plays any number of tracks in sync over one MIDI output.
	"""

	def __init__ (
		self,
		output_device_name: typing.Optional[str] = None,
		initial_bpm: float = 120,
		midi_out: typing.Optional[typing.Any] = None,
		realtime: bool = True
	) -> None:

		"""Initialize the player.

		Parameters:
			output_device_name: MIDI output to open when ``midi_out`` is not
				given. When both are omitted the first available output is used.
			initial_bpm: Tempo in BPM.
			midi_out: An already-open port (anything with ``send()``).
			realtime: When False the clock runs as fast as possible instead of
				following the wall clock.
		"""

		self.pulses_per_beat = pinboard.constants.pulses.MIDI_QUARTER_NOTE
		self.realtime = realtime

		self.slots: typing.Dict[int, TrackSlot] = {}
		self.note_offs: typing.List[NoteOff] = []
		self.sounding = pinboard.pattern.SoundingNotes()
		self.step_callbacks: typing.List[StepCallback] = []

		self.lock = asyncio.Lock()
		self.task: typing.Optional[asyncio.Task] = None
		self.running = False
		self.pulse_count = 0
		self.pulse_limit: typing.Optional[int] = None

		self.current_bpm: float = 0
		self.seconds_per_pulse = 0.0
		self.set_bpm(initial_bpm)

		if midi_out is None:
			output_device_name, midi_out = pinboard.midi_utils.select_output_device(output_device_name)

		self.output_device_name = output_device_name
		self.midi_out = midi_out


	def set_bpm (self, bpm: float) -> None:

		"""
		Change the tempo. Takes effect from the next pulse.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.current_bpm = bpm
		self.seconds_per_pulse = 60.0 / bpm / self.pulses_per_beat

		logger.info(f"BPM set to {self.current_bpm:.2f}")


	def on_step (self, callback: StepCallback) -> None:

		"""Register ``callback(track_index, step_index, node_id)``.

		Called whenever a track's step begins, including rests and muted
		tracks. Coroutine functions are awaited.
		"""

		self.step_callbacks.append(callback)


	def set_muted (self, index: int, muted: bool) -> None:

		"""Mute or unmute an attached track. Sounding notes finish naturally."""

		slot = self.slots.get(index)

		if slot is None:
			return

		slot.muted = muted

		logger.info(f"{'Muted' if muted else 'Unmuted'} track {index}")


	def _send (self, message: mido.Message) -> None:

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception(f"Failed to send MIDI {message.type} message")


	def _release (self, note_off: NoteOff) -> None:

		# A retriggered pitch belongs to the newer note now; its own note-off will end it.
		if not self.sounding.release(note_off.track_index, note_off.channel, note_off.note, note_off.on_pulse):
			return

		self._send(mido.Message("note_off", channel=note_off.channel, note=note_off.note, velocity=0))


	def _detach (self, index: int) -> typing.Optional[TrackSlot]:

		"""Remove a track's pattern and release its sounding notes."""

		slot = self.slots.pop(index, None)

		remaining: typing.List[NoteOff] = []

		for note_off in self.note_offs:
			if note_off.track_index == index:
				self._release(note_off)
			else:
				remaining.append(note_off)

		heapq.heapify(remaining)
		self.note_offs = remaining

		return slot


	async def load (self, index: int, pattern: pinboard.pattern.Pattern, muted: bool = False) -> bool:

		"""Attach a pattern to a track, replacing whatever it played before.

		Empty patterns are not attached; the track falls silent instead.

		Returns:
			True if the pattern was attached.
		"""

		async with self.lock:

			self._detach(index)

			if pattern.step_count == 0 or pattern.is_empty():
				logger.warning(f"Track {index}: sequence is empty - skipping")
				return False

			self.slots[index] = TrackSlot(
				index = index,
				pattern = pattern,
				start_pulse = self.pulse_count,
				muted = muted
			)

		logger.debug(f"Track {index}: attached {pattern.step_count} steps at pulse {self.pulse_count}")

		return True


	async def load_track (
		self,
		track: pinboard.track.Track,
		channel: typing.Optional[int] = None,
		step_beats: typing.Optional[float] = None,
		steps: int = pinboard.constants.SEQUENCE_STEPS,
		chord_slots: int = pinboard.constants.CHORD_SLOTS,
		layout: typing.Optional[pinboard.note_map.NoteLayout] = None
	) -> bool:

		"""Regenerate a track from its edges and attach the result.

		Generation runs in the default executor so the clock keeps running
		while a large drawing is analysed.
		"""

		loop = asyncio.get_running_loop()
		generate = functools.partial(track.generate, steps=steps, chord_slots=chord_slots, layout=layout)
		generated = await loop.run_in_executor(None, generate)
		pattern = pinboard.pattern.build_pattern(generated, track.track_type, channel=channel, step_beats=step_beats)

		logger.info(f"Track {track.index} ({track.track_type.value}): {len(generated.sequence)} steps from {len(track.edges)} edges")

		return await self.load(track.index, pattern, muted=track.muted)


	async def unload (self, index: int) -> None:

		async with self.lock:
			self._detach(index)


	async def _process_pulse (self, pulse: int) -> typing.List[typing.Tuple[int, int, typing.Optional[str]]]:

		"""Send the MIDI for one pulse and return the steps that began on it."""

		started: typing.List[typing.Tuple[int, int, typing.Optional[str]]] = []

		async with self.lock:

			while self.note_offs and self.note_offs[0].pulse <= pulse:
				self._release(heapq.heappop(self.note_offs))

			for index in sorted(self.slots):

				slot = self.slots[index]
				pattern = slot.pattern
				position = (pulse - slot.start_pulse) % pattern.length_pulses

				if position % pattern.step_pulses == 0:
					step_index = position // pattern.step_pulses
					started.append((index, step_index, pattern.node_at_step(step_index)))

				if slot.muted or position not in pattern.steps:
					continue

				for note in pattern.steps[position].notes:

					# Retrigger: end the previous instance of this pitch on the
					# channel first, whichever track played it.
					if self.sounding.start(index, note.channel, note.pitch, pulse) is not None:
						self._send(mido.Message("note_off", channel=note.channel, note=note.pitch, velocity=0))

					self._send(mido.Message("note_on", channel=note.channel, note=note.pitch, velocity=note.velocity))

					heapq.heappush(self.note_offs, NoteOff(
						pulse = pulse + note.duration,
						track_index = index,
						channel = note.channel,
						note = note.pitch,
						on_pulse = pulse
					))

		return started


	async def _advance_pulse (self) -> None:

		started = await self._process_pulse(self.pulse_count)
		self.pulse_count += 1

		# Callbacks run outside the lock so they may load new patterns.
		for track_index, step_index, node_id in started:
			for callback in self.step_callbacks:
				result = callback(track_index, step_index, node_id)
				if asyncio.iscoroutine(result):
					await result


	async def _run_loop (self) -> None:

		"""Advance the clock until stopped or the pulse limit is reached."""

		next_pulse_time = time.perf_counter()

		while self.running:

			if self.pulse_limit is not None and self.pulse_count >= self.pulse_limit:
				self.running = False
				break

			await self._advance_pulse()

			if not self.realtime:
				await asyncio.sleep(0)
				continue

			next_pulse_time += self.seconds_per_pulse
			sleep_time = next_pulse_time - time.perf_counter()

			if sleep_time > 0:
				await asyncio.sleep(sleep_time)


	async def start (self, bars: typing.Optional[int] = None) -> None:

		"""Start playback from the top of every attached pattern.

		Parameters:
			bars: Stop by itself after this many 4/4 bars. Runs until
				:meth:`stop` when omitted.
		"""

		if self.running:
			return

		if bars is not None and bars <= 0:
			raise ValueError("Bars must be positive")

		async with self.lock:
			self.pulse_count = 0
			for slot in self.slots.values():
				slot.start_pulse = 0

		self.pulse_limit = bars * pinboard.constants.pulses.MIDI_WHOLE_NOTE if bars is not None else None
		self.running = True
		self.task = asyncio.create_task(self._run_loop())

		logger.info(f"Player started ({len(self.slots)} tracks)")


	async def stop (self) -> None:

		"""
		Stop playback and release every sounding note.
		"""

		self.running = False

		if self.task is not None and self.task is not asyncio.current_task():
			await self.task

		self.task = None

		async with self.lock:
			while self.note_offs:
				self._release(heapq.heappop(self.note_offs))
			self.sounding.clear()

		logger.info("Player stopped")


	async def play (self, bars: typing.Optional[int] = None) -> None:

		"""
		Start playback and wait until it finishes.
		"""

		await self.start(bars=bars)

		try:
			if self.task:
				await self.task
		except asyncio.CancelledError:
			pass
		finally:
			await self.stop()


	def close (self) -> None:

		"""Close the MIDI output port."""

		if self.midi_out is not None:
			self.midi_out.close()
			self.midi_out = None
