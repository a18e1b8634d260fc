import logging
import typing

import mido


logger = logging.getLogger(__name__)


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""Open a MIDI output port for the player.

	If ``device_name`` is given, that device is opened. Otherwise the first
	available output is used. Failures are logged rather than raised, so
	the caller can decide whether to carry on without sound.

	Returns:
		``(device_name, port)``, or ``(None, None)`` when nothing could be opened.
	"""

	try:
		names = mido.get_output_names()
		logger.debug(f"MIDI outputs: {names}")

		if not names:
			logger.error("No MIDI outputs to play the board on")
			return None, None

		if device_name is None:
			chosen = names[0]
			if len(names) > 1:
				logger.info(f"{len(names)} MIDI outputs available - using '{chosen}'")

		elif device_name in names:
			chosen = device_name

		else:
			logger.error(f"MIDI output '{device_name}' not found (have: {', '.join(names)})")
			return None, None

		port = mido.open_output(chosen)
		logger.info(f"Playing on MIDI output '{chosen}'")

		return chosen, port

	except Exception as e:
		logger.error(f"Could not open a MIDI output: {e}")
		return None, None
