"""Exception hierarchy shared by the tree, registry, codec and session."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import KeyChord


class ChordmapError(Exception):
    """Base class for every error raised by chordmap."""


class InputCancelled(ChordmapError):
    """Raised when the cancel unit is typed while reading a chord."""

    def __init__(self, typed: tuple[str, ...] = ()) -> None:
        super().__init__("Chord input cancelled")
        self.typed = typed


class ConflictError(ChordmapError):
    """Raised when an insert would destroy an existing sub-tree."""

    def __init__(self, chord: "KeyChord", reason: str) -> None:
        super().__init__(f"Cannot bind '{chord.render()}': {reason}")
        self.chord = chord
        self.reason = reason


class TreeBusyError(ChordmapError):
    """Raised when the tree is mutated while a reader walks it."""


class UnknownKindError(ChordmapError):
    def __init__(self, kind: str, chord: Optional["KeyChord"] = None) -> None:
        where = f" (at '{chord.render()}')" if chord is not None else ""
        super().__init__(f"Action kind '{kind}' is not registered{where}")
        self.kind = kind
        self.chord = chord


class MalformedRecordError(ChordmapError):
    """Raised when a persisted binding record has the wrong shape."""


class LocationNotFoundError(ChordmapError):
    def __init__(self, location_id: str) -> None:
        super().__init__(f"Saved location '{location_id}' no longer exists")
        self.location_id = location_id


class ContextNotFoundError(ChordmapError):
    def __init__(self, context_name: str) -> None:
        super().__init__(f"Workspace tab '{context_name}' no longer exists")
        self.context_name = context_name


class ProfileNotFoundError(ChordmapError):
    def __init__(self, profile: str) -> None:
        super().__init__(f"Profile '{profile}' not found")
        self.profile = profile


class ProfileStoreError(ChordmapError):
    """Raised when the profile file exists but cannot be read or written."""


__all__ = [
    "ChordmapError",
    "InputCancelled",
    "ConflictError",
    "TreeBusyError",
    "UnknownKindError",
    "MalformedRecordError",
    "LocationNotFoundError",
    "ContextNotFoundError",
    "ProfileNotFoundError",
    "ProfileStoreError",
]
