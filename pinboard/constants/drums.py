"""General MIDI drum notes for the rhythm hit kinds.

Rhythm tracks only ever emit four kinds of hit. ``DRUM_NOTE_MAP`` turns each
kind into the GM Level 1 percussion note on channel 10 (0-indexed 9).
"""

import typing


KICK = 36
SNARE = 38
CLAP = 39
HIHAT = 42

DRUM_CHANNEL = 9

DRUM_NOTE_MAP: typing.Dict[str, int] = {
	"kick": KICK,
	"snare": SNARE,
	"clap": CLAP,
	"hihat": HIHAT,
}
