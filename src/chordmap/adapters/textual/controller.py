"""Glue between a blocking ChordSession and a Textual event loop.

The session runs on a worker thread. Key events from the UI are pushed into
``QueuedInput``; popup, prompt and status updates flow back through
``TextualPopupHooks`` callbacks, which the app marshals onto the UI thread.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from chordmap.keymaps import Candidate


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualPopupHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    show_popup: Callable[[str], None]
    hide_popup: Callable[[], None] = _noop
    show_prompt: Callable[[str], None] = _noop
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


def format_candidates(path: Sequence[str], candidates: Sequence[Candidate]) -> str:
    header = " ".join(path) + " -" if path else "(root)"
    if not candidates:
        return f"{header}\n  no bindings"
    width = max(len(candidate.token) for candidate in candidates)
    lines = [header]
    for candidate in candidates:
        marker = "+" if candidate.is_prefix else " "
        lines.append(
            f" {marker}{candidate.token.ljust(width)}  {candidate.name} [{candidate.kind}]"
        )
    return "\n".join(lines)


class TextualCandidateDisplay:
    """CandidateDisplay that renders completion rows through the hooks."""

    def __init__(self, hooks: TextualPopupHooks) -> None:
        self.hooks = hooks
        self.visible = False

    def show(self, path: tuple[str, ...], candidates: Sequence[Candidate]) -> None:
        self.visible = True
        self.hooks.show_popup(format_candidates(path, candidates))

    def hide(self) -> None:
        self.visible = False
        self.hooks.hide_popup()


class QueuedInput:
    """InputSource fed by the UI thread and drained by the session thread."""

    _CLOSED = object()

    def __init__(self, hooks: TextualPopupHooks) -> None:
        self.hooks = hooks
        self._queue: "queue.Queue[object]" = queue.Queue()

    def push(self, token: str) -> None:
        self._queue.put(token)

    def close(self) -> None:
        self._queue.put(self._CLOSED)

    def read_one(self, prompt: str) -> str:
        self.hooks.show_prompt(prompt)
        item = self._queue.get()
        if item is self._CLOSED:
            raise EOFError("input closed")
        self.hooks.log(f"key -> {item}")
        return str(item)


class QueuedPrompter:
    """Line-editing prompts built on top of ``QueuedInput`` key tokens."""

    def __init__(
        self,
        input_source: QueuedInput,
        hooks: TextualPopupHooks,
        *,
        cancel_key: str = "C-g",
    ) -> None:
        self.input_source = input_source
        self.hooks = hooks
        self.cancel_key = cancel_key

    def _read_line(self, prompt: str) -> Optional[str]:
        typed: list[str] = []
        while True:
            token = self.input_source.read_one(f"{prompt}{''.join(typed)}")
            if token in {self.cancel_key, "ESC"}:
                return None
            if token == "ENTER":
                return "".join(typed)
            if token == "BACKSPACE":
                if typed:
                    typed.pop()
                continue
            if token == "SPC":
                typed.append(" ")
            elif len(token) == 1:
                typed.append(token)

    def ask(self, prompt: str, default: str = "") -> str:
        hint = f"{prompt}[{default}] " if default else prompt
        line = self._read_line(hint)
        self.hooks.show_prompt("")
        return line or default

    def choose(self, prompt: str, options: Sequence[str]) -> Optional[str]:
        if not options:
            return None
        menu = "\n".join(f" {index}. {option}" for index, option in enumerate(options, 1))
        self.hooks.show_popup(menu)
        try:
            while True:
                line = self._read_line(prompt)
                if line is None:
                    return None
                if line.isdigit() and 1 <= int(line) <= len(options):
                    return options[int(line) - 1]
                matches = [option for option in options if option.startswith(line)]
                if len(matches) == 1:
                    return matches[0]
                self.hooks.update_status(f"No single match for '{line}'")
        finally:
            self.hooks.hide_popup()
            self.hooks.show_prompt("")

    def notify(self, message: str) -> None:
        self.hooks.update_status(message)
        self.hooks.log(f"notice -> {message}")


_NAMED_KEYS = {
    "escape": "ESC",
    "enter": "ENTER",
    "return": "ENTER",
    "backspace": "BACKSPACE",
    "tab": "TAB",
    "space": "SPC",
}


def normalize_key(key: str, character: Optional[str] = None) -> str:
    """Turn a Textual key name into a chord token (``ctrl+g`` -> ``C-g``)."""

    if key in _NAMED_KEYS:
        return _NAMED_KEYS[key]
    parts = key.split("+")
    if len(parts) > 1:
        prefixes = {"ctrl": "C-", "alt": "M-", "meta": "M-", "shift": "S-"}
        head = "".join(prefixes.get(part, f"{part}-") for part in parts[:-1])
        return f"{head}{parts[-1]}"
    if character and character.isprintable() and len(character) == 1:
        return character
    return key.upper()


__all__ = [
    "TextualPopupHooks",
    "TextualCandidateDisplay",
    "QueuedInput",
    "QueuedPrompter",
    "format_candidates",
    "normalize_key",
]
