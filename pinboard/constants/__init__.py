"""Constants for Pinboard.

- ``pinboard.constants.pulses`` - Pulse-based MIDI timing used by the player
- ``pinboard.constants.velocity`` - MIDI velocity defaults
- ``pinboard.constants.drums`` - General MIDI notes for the four rhythm hits

Sequence sizes are defined here because every generator shares them.
"""

# Rhythm and Phrase tracks always loop over this many steps.
SEQUENCE_STEPS = 64

# Chord tracks cycle through this many chords.
CHORD_SLOTS = 4
