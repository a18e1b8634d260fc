"""
Pinboard - draw shapes on a pin grid, hear them as music.

The board is a small triangular lattice of 37 pins. Each track holds the
lines a user has drawn between pins, and each time those lines change the
track is regenerated into a looping sequence:

- **Rhythm.** The longest path through the shape is stretched to 64 steps
  by bouncing back and forth along it. Pins where three or more lines meet
  become drum hits - kick, snare, clap, hi-hat as more lines meet.
- **Phrase.** The same walk, but busy pins play their own pitch, louder the
  more lines meet there.
- **Chord.** Lines are grouped by direction; the four longest groups each
  become a chord made of the pitches of their pins.

Generation is pure: the same drawing always gives the same sequence, so
a shape can be edited while it plays and the loop stays recognisable.

Sequences play as MIDI - live through ``pinboard.scheduler.Player`` or
offline into a ``.mid`` file with ``pinboard.render``.

Minimal example:

    ```python
    import pinboard

    grid = pinboard.get_grid()
    track = pinboard.Track(index=0, track_type=pinboard.TrackType.RHYTHM)

    track.draw(grid.node("r3c0"), grid.node("r3c6"))
    track.draw(grid.node("r0c0"), grid.node("r6c3"))

    result = track.generate()
    print(result.sequence[:8], result.node_order[:8])
    ```

Package-level exports: ``Track``, ``TrackType``, ``get_grid``,
``generate_sequence``.
"""

import pinboard.generators
import pinboard.grid
import pinboard.track


Track = pinboard.track.Track
TrackType = pinboard.generators.TrackType
get_grid = pinboard.grid.get_grid
generate_sequence = pinboard.generators.generate_sequence
