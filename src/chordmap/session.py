"""Application context owning the live tree and the user-facing operations."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Sequence, TypeVar

from chordmap.host import (
    CandidateDisplay,
    ContextStore,
    InputSource,
    LocationStore,
    Prompter,
)
from chordmap.keymaps import (
    BOOKMARK_KIND,
    DEFAULT_CANCEL_KEY,
    PREFIX_KIND,
    ActionContext,
    ActionRegistry,
    BindingNode,
    BindingTree,
    ChordmapError,
    IncrementalKeyReader,
    InputCancelled,
    KeyChord,
    LeafNode,
    PrefixNode,
    ProfileNotFoundError,
    TreeBusyError,
    load_builtin_kinds,
)
from chordmap.persistence import DEFAULT_PROFILE, PersistenceCodec, ProfileStore
from chordmap.runtime import telemetry

T = TypeVar("T")
N = TypeVar("N", bound=BindingNode)


def describe(chord: KeyChord, node: BindingNode) -> str:
    return f"{chord.render()}  [{node.kind}] {node.name}"


def _choices(entries: Sequence[tuple[KeyChord, N]]) -> Dict[str, tuple[KeyChord, N]]:
    """Label each entry for a chooser; repeated labels get a ` (n)` suffix."""

    options: Dict[str, tuple[KeyChord, N]] = {}
    for chord, node in entries:
        label = base = describe(chord, node)
        count = 1
        while label in options:
            count += 1
            label = f"{base} ({count})"
        options[label] = (chord, node)
    return options


class ChordSession:
    """Owns the binding tree, registry, reader and profile store."""

    def __init__(
        self,
        *,
        locations: LocationStore,
        contexts: ContextStore,
        input_source: InputSource,
        display: CandidateDisplay,
        prompter: Prompter,
        store_path: Path | str | None = None,
        default_profile: str = DEFAULT_PROFILE,
        default_kind: str = BOOKMARK_KIND,
        cancel_key: str = DEFAULT_CANCEL_KEY,
        registry: ActionRegistry | None = None,
        load_builtins: bool = True,
    ) -> None:
        self.prompter = prompter
        self.default_profile = default_profile
        self.default_kind = default_kind
        self.logger = telemetry.get_logger("chordmap.session")
        self.registry = registry or ActionRegistry(
            ActionContext(locations=locations, contexts=contexts, prompter=prompter),
            logger_name="chordmap.registry",
        )
        if load_builtins and registry is None:
            load_builtin_kinds(self.registry)
        self.codec = PersistenceCodec(self.registry, logger_name="chordmap.codec")
        self.store = ProfileStore(self.codec, store_path, logger_name="chordmap.profiles")
        self.tree = BindingTree(logger_name="chordmap.tree")
        self.reader = IncrementalKeyReader(
            self.tree,
            input_source,
            display,
            cancel_key=cancel_key,
            logger_name="chordmap.reader",
        )

    # lifecycle

    def start(self) -> bool:
        """Load the default profile; failures become notices, never errors."""

        try:
            self.load_profile(self.default_profile, report=False)
        except ProfileNotFoundError:
            self.prompter.notify(
                f"No saved profile '{self.default_profile}'; starting with no bindings"
            )
            return False
        except ChordmapError as exc:
            telemetry.record_event(
                "session.startup_load_failed",
                level="warning",
                data={"profile": self.default_profile, "error": str(exc)},
            )
            self.prompter.notify(f"Could not load bindings: {exc}")
            return False
        return True

    def shutdown(self) -> int:
        """Save the live tree as the default profile before the process exits."""

        try:
            return self.store.save(self.default_profile, self.tree)
        except ChordmapError as exc:
            self.prompter.notify(f"Could not save bindings: {exc}")
            raise

    @contextmanager
    def running(self) -> Iterator["ChordSession"]:
        self.start()
        try:
            yield self
        finally:
            self.shutdown()

    # user-facing operations

    def bind_new_chord(
        self, kind: str | None = None, *, choose_kind: bool = False
    ) -> Optional[KeyChord]:
        """Read a chord and bind it to a new action of ``kind``."""

        if choose_kind:
            kind = self.prompter.choose("Action kind: ", self.registry.kinds())
            if kind is None:
                return None
        return self._guarded("bind", lambda: self._bind(kind or self.default_kind))

    def unbind_chord(self) -> Optional[KeyChord]:
        entries = self.tree.enumerate()
        if not entries:
            self.prompter.notify("No bindings to remove")
            return None
        return self._guarded("unbind", lambda: self._unbind(entries))

    def visit_bound_location(self, kind: str = BOOKMARK_KIND) -> Optional[KeyChord]:
        leaves = self.tree.leaves(kind)
        if not leaves:
            self.prompter.notify(f"No {kind} bindings")
            return None
        return self._guarded("visit", lambda: self._visit(leaves))

    def activate_chord(self) -> Optional[KeyChord]:
        """Read a chord on the live tree and run the leaf it reaches."""

        return self._guarded("activate", self._activate)

    def save_profile(self, name: str | None = None) -> Optional[int]:
        profile = name or self.default_profile
        return self._guarded("save", lambda: self._save(profile))

    def load_profile(
        self, name: str | None = None, *, report: bool = True
    ) -> Optional[BindingTree]:
        profile = name or self.default_profile
        if not report:
            return self._load(profile)
        return self._guarded("load", lambda: self._load(profile))

    def delete_profile(self, name: str) -> bool:
        def _delete() -> bool:
            self.store.delete(name)
            self.prompter.notify(f"Deleted profile '{name}'")
            return True

        return bool(self._guarded("delete_profile", _delete))

    def list_profiles(self) -> tuple[str, ...]:
        return self.store.names()

    def list_bindings(self) -> list[str]:
        return [describe(chord, node) for chord, node in self.tree.enumerate()]

    def reset(self) -> None:
        self._replace_tree(BindingTree(logger_name="chordmap.tree"))

    # internals

    def _bind(self, kind: str) -> KeyChord:
        self.registry.get(kind)
        chord = self.reader.read(prompt=f"Bind {kind}: ")
        probe: BindingNode = (
            PrefixNode(label="") if kind == PREFIX_KIND else LeafNode(kind=kind, name="")
        )
        self.tree.check_insert(chord, probe)
        previous = self.tree.lookup(chord.tokens).node

        node = self.registry.create(kind, chord)
        self.tree.insert(chord, node)
        if isinstance(previous, LeafNode) and previous != node:
            self.registry.discard(previous)

        self.prompter.notify(f"Bound {describe(chord, node)}")
        return chord

    def _unbind(self, entries: list[tuple[KeyChord, BindingNode]]) -> Optional[KeyChord]:
        options = _choices(entries)
        choice = self.prompter.choose("Unbind: ", tuple(options))
        if choice is None:
            return None
        chord, _ = options[choice]
        removed = self.tree.remove(chord)
        if removed is not None:
            self.registry.discard(removed)
        self.prompter.notify(f"Removed {chord.render()}")
        return chord

    def _visit(self, leaves: list[tuple[KeyChord, LeafNode]]) -> Optional[KeyChord]:
        options = _choices(leaves)
        choice = self.prompter.choose("Visit: ", tuple(options))
        if choice is None:
            return None
        chord, leaf = options[choice]
        self.registry.execute(leaf)
        return chord

    def _activate(self) -> KeyChord:
        chord = self.reader.read(prompt="Run: ")
        result = self.tree.lookup(chord.tokens)
        if isinstance(result.node, LeafNode):
            self.registry.execute(result.node)
        else:
            self.prompter.notify(f"{chord.render()} is not bound")
        return chord

    def _save(self, profile: str) -> int:
        count = self.store.save(profile, self.tree)
        self.prompter.notify(f"Saved {count} binding(s) to profile '{profile}'")
        return count

    def _load(self, profile: str) -> BindingTree:
        tree = self.store.load(profile)
        self._replace_tree(tree)
        telemetry.record_event(
            "session.profile_loaded",
            data={"profile": profile, "bindings": len(tree)},
        )
        return tree

    def _replace_tree(self, tree: BindingTree) -> None:
        if self.tree.busy:
            raise TreeBusyError("Cannot switch profiles while a chord is being read")
        self.tree = tree
        self.reader.tree = tree

    def _guarded(self, operation: str, action: Callable[[], T]) -> Optional[T]:
        with telemetry.span(
            f"session::{operation}",
            component=True,
            metadata={"operation": operation},
            expected=(ChordmapError,),
        ):
            try:
                return action()
            except InputCancelled:
                self.prompter.notify("Cancelled")
                return None
            except ChordmapError as exc:
                telemetry.record_event(
                    f"session.{operation}_failed",
                    level="warning",
                    data={"error": type(exc).__name__, "message": str(exc)},
                )
                self.prompter.notify(str(exc))
                return None


__all__ = ["ChordSession", "describe"]
