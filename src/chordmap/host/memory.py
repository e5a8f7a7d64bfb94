"""In-memory host services used by tests, the CLI and the Textual demo."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Sequence


@dataclass(slots=True)
class SavedLocation:
    name: str
    position: str


class MemoryLocationStore:
    """Bookmarks kept in a dict; ids are the bookmark names."""

    def __init__(self, position: str = "start") -> None:
        self.position = position
        self._saved: Dict[str, SavedLocation] = {}

    def move_to(self, position: str) -> None:
        self.position = position

    def set(self, name: str) -> str:
        self._saved[name] = SavedLocation(name=name, position=self.position)
        return name

    def jump(self, location_id: str) -> None:
        self.position = self._saved[location_id].position

    def delete(self, location_id: str) -> None:
        self._saved.pop(location_id, None)

    def exists(self, location_id: str) -> bool:
        return location_id in self._saved

    def get(self, location_id: str) -> Optional[SavedLocation]:
        return self._saved.get(location_id)

    def names(self) -> tuple[str, ...]:
        return tuple(self._saved)


class MemoryContextStore:
    """Ordered set of named workspace tabs with one current tab."""

    def __init__(self, names: Iterable[str] = ("main",)) -> None:
        self._names: List[str] = list(dict.fromkeys(names)) or ["main"]
        self.current = self._names[0]

    def open(self, name: str) -> None:
        if name not in self._names:
            self._names.append(name)
        self.current = name

    def close(self, name: str) -> None:
        if name in self._names:
            self._names.remove(name)
        if self.current == name:
            self.current = self._names[0] if self._names else ""

    def rename(self, new_name: str) -> None:
        if new_name == self.current:
            return
        if new_name in self._names:
            raise ValueError(f"Tab '{new_name}' already exists")
        index = self._names.index(self.current)
        self._names[index] = new_name
        self.current = new_name

    def switch_to(self, name: str) -> None:
        if name not in self._names:
            raise KeyError(f"Unknown tab '{name}'")
        self.current = name

    def exists(self, name: str) -> bool:
        return name in self._names

    def names(self) -> tuple[str, ...]:
        return tuple(self._names)


class ScriptedInput:
    """Replays a fixed list of input units and records the prompts shown."""

    def __init__(self, units: Iterable[str] = ()) -> None:
        self._units: Deque[str] = deque(units)
        self.prompts: List[str] = []

    def feed(self, *units: str) -> None:
        self._units.extend(units)

    @property
    def remaining(self) -> int:
        return len(self._units)

    def read_one(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._units:
            raise EOFError("scripted input exhausted")
        return self._units.popleft()


@dataclass(slots=True)
class RecordingDisplay:
    """Candidate display that keeps a log of what it was asked to show."""

    events: List[tuple[Any, ...]] = field(default_factory=list)
    visible: bool = False

    def show(self, path: tuple[str, ...], candidates: Sequence[Any]) -> None:
        self.visible = True
        self.events.append(("show", tuple(path), tuple(candidates)))

    def hide(self) -> None:
        self.visible = False
        self.events.append(("hide",))

    def shown_paths(self) -> list[tuple[str, ...]]:
        return [event[1] for event in self.events if event[0] == "show"]


class ScriptedPrompter:
    """Answers questions from queues; ``None`` in ``choices`` means back out."""

    def __init__(
        self,
        answers: Iterable[str] = (),
        choices: Iterable[Optional[str]] = (),
    ) -> None:
        self._answers: Deque[str] = deque(answers)
        self._choices: Deque[Optional[str]] = deque(choices)
        self.notices: List[str] = []
        self.offered: List[tuple[str, ...]] = []

    def ask(self, prompt: str, default: str = "") -> str:
        del prompt
        if not self._answers:
            return default
        return self._answers.popleft() or default

    def choose(self, prompt: str, options: Sequence[str]) -> Optional[str]:
        del prompt
        self.offered.append(tuple(options))
        if not self._choices:
            return None
        choice = self._choices.popleft()
        if choice is not None and choice not in options:
            raise ValueError(f"Scripted choice {choice!r} not in {list(options)}")
        return choice

    def notify(self, message: str) -> None:
        self.notices.append(message)


__all__ = [
    "SavedLocation",
    "MemoryLocationStore",
    "MemoryContextStore",
    "ScriptedInput",
    "RecordingDisplay",
    "ScriptedPrompter",
]
