"""Structural interfaces for the host services chordmap drives."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from chordmap.keymaps.models import Candidate


class LocationStore(Protocol):
    """Opaque bookmark storage addressed by name."""

    def set(self, name: str) -> str:
        """Save the current location under ``name`` and return its id."""

    def jump(self, location_id: str) -> None: ...

    def delete(self, location_id: str) -> None: ...

    def exists(self, location_id: str) -> bool: ...


class ContextStore(Protocol):
    """Named workspace contexts (tabs)."""

    def rename(self, new_name: str) -> None:
        """Rename the current context."""

    def switch_to(self, name: str) -> None: ...

    def exists(self, name: str) -> bool: ...


class CandidateDisplay(Protocol):
    """Completion popup shown while a chord is typed."""

    def show(self, path: tuple[str, ...], candidates: Sequence["Candidate"]) -> None: ...

    def hide(self) -> None: ...


class InputSource(Protocol):
    def read_one(self, prompt: str) -> str:
        """Block until one input unit is available and return its token."""


class Prompter(Protocol):
    """Minibuffer-style questions and notices."""

    def ask(self, prompt: str, default: str = "") -> str: ...

    def choose(self, prompt: str, options: Sequence[str]) -> Optional[str]:
        """Return one of ``options`` or ``None`` when the user backs out."""

    def notify(self, message: str) -> None: ...


__all__ = [
    "LocationStore",
    "ContextStore",
    "CandidateDisplay",
    "InputSource",
    "Prompter",
]
