"""Pulse-based MIDI timing constants.

The player runs at **24 pulses per quarter note** (PPQN = 24), the same
resolution as MIDI clock. A pinboard step length in beats is converted to
pulses with ``MIDI_QUARTER_NOTE``.
"""

MIDI_EIGHTH_NOTE = 12
MIDI_QUARTER_NOTE = 24
MIDI_WHOLE_NOTE = 96

# Standard MIDI files are written at 480 ticks per beat, 20 ticks per pulse.
MIDI_FILE_TICKS_PER_BEAT = 480
