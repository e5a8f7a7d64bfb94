"""Executable Textual app demonstrating chordmap with in-memory host stores."""

from __future__ import annotations

import argparse
import os
from typing import Callable, Dict, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use chordmap.adapters.textual.app"
    ) from exc

from chordmap.host import MemoryContextStore, MemoryLocationStore
from chordmap.keymaps import DEFAULT_CANCEL_KEY
from chordmap.runtime import telemetry
from chordmap.session import ChordSession

from .controller import (
    QueuedInput,
    QueuedPrompter,
    TextualCandidateDisplay,
    TextualPopupHooks,
    normalize_key,
)

HELP = (
    "C-b bind  C-k bind (pick kind)  C-u unbind  C-o visit  C-r run chord  "
    "C-n move  C-t new tab  C-s save  C-l load"
)


class ChordmapApp(App[None]):  # pragma: no cover - manual demo
    """Minimal Textual UI driving a ChordSession on a worker thread."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#workspace {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
	}

	#popup {
		height: auto;
		max-height: 12;
		border: round $secondary;
		padding: 0 1;
	}

	#prompt-line {
		height: 1;
		background: $surface-darken-2;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    def __init__(
        self,
        *,
        store_path: Optional[str] = None,
        profile: Optional[str] = None,
        cancel_key: str = DEFAULT_CANCEL_KEY,
    ) -> None:
        super().__init__()
        self._store_path = store_path
        self._profile = profile
        self._cancel_key = cancel_key
        self.locations = MemoryLocationStore()
        self.contexts = MemoryContextStore()
        self.session: ChordSession | None = None
        self.input_source: QueuedInput | None = None
        self._busy = False
        self._workspace_widget: Static | None = None
        self._popup_widget: Static | None = None
        self._prompt_widget: Static | None = None
        self._status_widget: Static | None = None
        self._commands: Dict[str, Callable[[ChordSession], object]] = {
            "C-b": lambda s: s.bind_new_chord(),
            "C-k": lambda s: s.bind_new_chord(choose_kind=True),
            "C-u": lambda s: s.unbind_chord(),
            "C-o": lambda s: s.visit_bound_location(),
            "C-r": lambda s: s.activate_chord(),
            "C-n": self._move,
            "C-t": self._new_tab,
            "C-s": lambda s: s.save_profile(),
            "C-l": self._load,
        }

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="body"):
            self._workspace_widget = Static("", id="workspace")
            yield self._workspace_widget
            self._popup_widget = Static("", id="popup")
            self._popup_widget.display = False
            yield self._popup_widget
        self._prompt_widget = Static("", id="prompt-line")
        self._status_widget = Static(HELP, id="status-line")
        yield self._prompt_widget
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualPopupHooks(
            show_popup=lambda text: self._from_worker(self._show_popup, text),
            hide_popup=lambda: self._from_worker(self._hide_popup),
            show_prompt=lambda text: self._from_worker(self._set_prompt, text),
            update_status=lambda text: self._from_worker(self._set_status, text),
        )
        self.input_source = QueuedInput(hooks)
        self.session = ChordSession(
            locations=self.locations,
            contexts=self.contexts,
            input_source=self.input_source,
            display=TextualCandidateDisplay(hooks),
            prompter=QueuedPrompter(self.input_source, hooks, cancel_key=self._cancel_key),
            store_path=self._store_path,
            default_profile=self._profile or "default",
            cancel_key=self._cancel_key,
        )
        self.session.start()
        self._refresh_workspace()

    def on_unmount(self) -> None:
        if self.input_source is not None:
            self.input_source.close()
        if self.session is not None:
            self.session.shutdown()

    def on_key(self, event: events.Key) -> None:
        if self.session is None or self.input_source is None:
            return
        if event.key in {"ctrl+c", "ctrl+q"}:
            return
        token = normalize_key(event.key, event.character)
        event.stop()
        if self._busy:
            self.input_source.push(token)
            return
        command = self._commands.get(token)
        if command is None:
            self._set_status(f"{token} is not a command. {HELP}")
            return
        self._busy = True
        session = self.session
        self.run_worker(lambda: self._run(command, session), thread=True, exclusive=True)

    def _run(self, command: Callable[[ChordSession], object], session: ChordSession) -> None:
        try:
            command(session)
        finally:
            self.call_from_thread(self._finish)

    def _finish(self) -> None:
        self._busy = False
        self._hide_popup()
        self._set_prompt("")
        self._refresh_workspace()

    def _move(self, session: ChordSession) -> None:
        position = session.prompter.ask("Move to: ")
        if position:
            self.locations.move_to(position)

    def _new_tab(self, session: ChordSession) -> None:
        name = session.prompter.ask("New tab: ")
        if name:
            self.contexts.open(name)

    def _load(self, session: ChordSession) -> None:
        profiles = session.list_profiles()
        choice = session.prompter.choose("Load profile: ", profiles)
        if choice:
            session.load_profile(choice)

    def _from_worker(self, callback: Callable[..., None], *args: object) -> None:
        if self._busy:
            self.call_from_thread(callback, *args)
        else:
            callback(*args)

    def _show_popup(self, text: str) -> None:
        if self._popup_widget:
            self._popup_widget.update(text)
            self._popup_widget.display = True

    def _hide_popup(self) -> None:
        if self._popup_widget:
            self._popup_widget.display = False

    def _set_prompt(self, text: str) -> None:
        if self._prompt_widget:
            self._prompt_widget.update(text)

    def _set_status(self, text: str) -> None:
        if self._status_widget:
            self._status_widget.update(text)

    def _refresh_workspace(self) -> None:
        if not self._workspace_widget or self.session is None:
            return
        lines = [
            f"position: {self.locations.position}",
            f"tab: {self.contexts.current}  (tabs: {', '.join(self.contexts.names())})",
            "",
            "bindings:",
        ]
        lines.extend(f"  {entry}" for entry in self.session.list_bindings() or ["(none)"])
        self._workspace_widget.update("\n".join(lines))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the chordmap Textual demo.")
    parser.add_argument(
        "--store",
        default=os.environ.get("CHORDMAP_PROFILE_STORE"),
        help="Profile store file (default: platform config dir)",
    )
    parser.add_argument("--profile", default=None, help="Profile to auto-load/save")
    parser.add_argument(
        "--cancel-key",
        default=DEFAULT_CANCEL_KEY,
        help=f"Token that aborts chord input (default: {DEFAULT_CANCEL_KEY})",
    )
    return parser.parse_args(argv)


def run(
    *,
    store_path: Optional[str] = None,
    profile: Optional[str] = None,
    cancel_key: str = DEFAULT_CANCEL_KEY,
) -> None:  # pragma: no cover - manual demo
    telemetry.configure(preset="quiet")
    ChordmapApp(store_path=store_path, profile=profile, cancel_key=cancel_key).run()


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - manual demo
    args = _parse_args(argv)
    run(store_path=args.store, profile=args.profile, cancel_key=args.cancel_key)


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
