"""UI adapters hosting a ChordSession."""
