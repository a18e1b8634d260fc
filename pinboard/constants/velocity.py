"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127).
"""

DEFAULT_VELOCITY = 100          # Drum hits
DEFAULT_CHORD_VELOCITY = 90     # Chords (softer)

MIN_VELOCITY = 1                # Lowest velocity that still sounds a note
MAX_VELOCITY = 127
