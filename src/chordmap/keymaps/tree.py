"""Binding tree: the live mapping from chords to prefixes and leaves."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Literal, Optional, Sequence

from chordmap.runtime.telemetry import span

from .errors import ConflictError, TreeBusyError
from .models import BindingNode, Candidate, KeyChord, LeafNode, PrefixNode


@dataclass(frozen=True, slots=True)
class LookupResult:
    """Outcome of walking a path through a lookup source."""

    status: Literal["prefix", "leaf", "missing"]
    node: Optional[BindingNode] = None
    consumed: int = 0

    @property
    def is_prefix(self) -> bool:
        return self.status == "prefix"


def candidates_of(children: Dict[str, BindingNode]) -> tuple[Candidate, ...]:
    return tuple(
        Candidate(token=token, name=node.name, kind=node.kind)
        for token, node in children.items()
    )


class BindingTree:
    """Owns every binding node; each node is reachable by exactly one path."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._root = PrefixNode(label="")
        self._logger_name = logger_name
        self._revision = 0
        self._readers = 0

    @property
    def root(self) -> PrefixNode:
        return self._root

    def revision(self) -> int:
        return self._revision

    @property
    def busy(self) -> bool:
        return self._readers > 0

    def __len__(self) -> int:
        return len(self.enumerate())

    def __iter__(self) -> Iterator[tuple[KeyChord, BindingNode]]:
        return iter(self.enumerate())

    @contextmanager
    def reading(self) -> Iterator["BindingTree"]:
        """Mark the tree as being walked by a reader; mutations are refused."""

        self._readers += 1
        try:
            yield self
        finally:
            self._readers -= 1

    def lookup(self, path: Sequence[str]) -> LookupResult:
        node: BindingNode = self._root
        consumed = 0
        for token in path:
            if not isinstance(node, PrefixNode):
                return LookupResult(status="missing", consumed=consumed)
            child = node.children.get(token)
            if child is None:
                return LookupResult(status="missing", consumed=consumed)
            node = child
            consumed += 1
        if isinstance(node, PrefixNode):
            return LookupResult(status="prefix", node=node, consumed=consumed)
        return LookupResult(status="leaf", node=node, consumed=consumed)

    def candidates(self, path: Sequence[str] = ()) -> tuple[Candidate, ...]:
        result = self.lookup(path)
        if not isinstance(result.node, PrefixNode):
            return ()
        return candidates_of(result.node.children)

    def insert(self, chord: KeyChord, node: BindingNode) -> None:
        """Bind ``node`` at ``chord``, creating intermediate prefixes.

        The final binding is overwritten (last write wins) unless it is a
        non-empty prefix. The whole path is validated before anything changes.
        """

        with span(
            "tree::insert",
            logger_name=self._logger_name,
            component="tree",
            metadata={"chord": chord.tokens, "kind": node.kind},
            expected=(ConflictError, TreeBusyError),
        ):
            self._ensure_idle(chord)
            self.check_insert(chord, node)

            parent = self._root
            for token in chord.tokens[:-1]:
                child = parent.children.get(token)
                if child is None:
                    child = PrefixNode(label=token)
                    parent.children[token] = child
                assert isinstance(child, PrefixNode)
                parent = child

            last = chord.tokens[-1]
            existing = parent.children.get(last)
            if (
                isinstance(node, PrefixNode)
                and not node.children
                and isinstance(existing, PrefixNode)
            ):
                existing.label = node.label
            else:
                parent.children[last] = node
            self._touch()

    def remove(self, chord: KeyChord) -> Optional[BindingNode]:
        """Delete the node at exactly ``chord``; empty ancestors are kept."""

        with span(
            "tree::remove",
            logger_name=self._logger_name,
            component="tree",
            metadata={"chord": chord.tokens},
            expected=(TreeBusyError,),
        ) as handle:
            self._ensure_idle(chord)
            parent = self.lookup(chord.tokens[:-1]).node
            if not isinstance(parent, PrefixNode):
                handle.add_metadata("status", "missing")
                return None
            removed = parent.children.pop(chord.tokens[-1], None)
            if removed is None:
                handle.add_metadata("status", "missing")
                return None
            self._touch()
            return removed

    def clear(self) -> None:
        if self.busy:
            raise TreeBusyError("Cannot clear the binding tree while reading")
        self._root.children.clear()
        self._touch()

    def enumerate(self) -> list[tuple[KeyChord, BindingNode]]:
        """Pre-order walk: parents before children, children in declared order."""

        entries: list[tuple[KeyChord, BindingNode]] = []
        stack: list[tuple[tuple[str, ...], BindingNode]] = [
            ((token,), child)
            for token, child in reversed(self._root.children.items())
        ]
        while stack:
            path, node = stack.pop()
            entries.append((KeyChord(path), node))
            if isinstance(node, PrefixNode):
                stack.extend(
                    (path + (token,), child)
                    for token, child in reversed(node.children.items())
                )
        return entries

    def leaves(self, kind: str | None = None) -> list[tuple[KeyChord, LeafNode]]:
        return [
            (chord, node)
            for chord, node in self.enumerate()
            if isinstance(node, LeafNode) and (kind is None or node.kind == kind)
        ]

    def _ensure_idle(self, chord: KeyChord) -> None:
        if self.busy:
            raise TreeBusyError(
                f"Cannot change '{chord.render()}' while a chord is being read"
            )

    def check_insert(self, chord: KeyChord, node: BindingNode) -> None:
        """Raise ``ConflictError`` if ``insert(chord, node)`` would lose bindings."""

        current: BindingNode = self._root
        for depth, token in enumerate(chord.tokens[:-1], start=1):
            assert isinstance(current, PrefixNode)
            child = current.children.get(token)
            if child is None:
                return
            if isinstance(child, LeafNode):
                blocked = KeyChord(chord.tokens[:depth])
                raise ConflictError(
                    chord, f"'{blocked.render()}' is already bound to '{child.name}'"
                )
            current = child

        assert isinstance(current, PrefixNode)
        existing = current.children.get(chord.tokens[-1])
        if not isinstance(existing, PrefixNode) or not existing.children:
            return
        if isinstance(node, PrefixNode) and not node.children:
            return
        raise ConflictError(
            chord,
            f"prefix '{existing.label}' still holds {len(existing.children)} binding(s)",
        )

    def _touch(self) -> None:
        self._revision += 1


__all__ = ["BindingTree", "LookupResult", "candidates_of"]
