"""Runtime services shared across chordmap."""
