"""Exception types raised by Pinboard.

Gesture decomposition and pitch lookups degrade to ``None`` rather than
raising; these exceptions are used at the editing and configuration seams.
"""


class PinboardError (Exception):

	"""Base class for all Pinboard errors."""


class InvalidGestureError (PinboardError, ValueError):

	"""A drawn gesture does not decompose into unit edges of the grid."""

	def __init__ (self, from_id: str, to_id: str) -> None:

		super().__init__(f"No valid edge between {from_id!r} and {to_id!r}")

		self.from_id = from_id
		self.to_id = to_id


class UnknownNodeError (PinboardError, KeyError):

	"""A node id or position does not exist on the grid."""

	def __str__ (self) -> str:

		return f"Unknown pin {self.args[0]!r}" if self.args else "Unknown pin"


class ConfigError (PinboardError):

	"""A configuration or board file could not be read."""
