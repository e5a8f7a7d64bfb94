"""Action registry mapping kind tags to behaviour and (de)serialization."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional

from chordmap.host import ContextStore, LocationStore, Prompter
from chordmap.runtime.telemetry import record_event, span

from .errors import UnknownKindError
from .models import BindingNode, BindingRecord, KeyChord, LeafNode, PrefixNode


@dataclass(slots=True)
class ActionContext:
    """Host services every action kind can reach."""

    locations: LocationStore
    contexts: ContextStore
    prompter: Prompter


def _no_discard(context: ActionContext, leaf: LeafNode) -> None:
    del context, leaf


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    """Everything the core needs to know about one action kind."""

    kind: str
    create: Callable[[ActionContext, KeyChord], BindingNode]
    execute: Callable[[ActionContext, LeafNode], object]
    serialize: Callable[[BindingNode], Mapping[str, Any]]
    deserialize: Callable[[ActionContext, BindingRecord], BindingNode]
    discard: Callable[[ActionContext, LeafNode], None] = _no_discard
    description: str = ""

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("ActionDescriptor kind cannot be empty")
        for attr in ("create", "execute", "serialize", "deserialize", "discard"):
            if not callable(getattr(self, attr)):
                raise TypeError(f"{attr} must be callable")


class ActionRegistry:
    """Owns action descriptors and binds leaves to their live behaviour."""

    def __init__(
        self, context: ActionContext, *, logger_name: str | None = None
    ) -> None:
        self.context = context
        self._descriptors: Dict[str, ActionDescriptor] = {}
        self._logger_name = logger_name

    def register(
        self, descriptor: ActionDescriptor, *, replace: bool = False
    ) -> ActionDescriptor:
        with span(
            "registry::register",
            logger_name=self._logger_name,
            component="registry",
            metadata={"kind": descriptor.kind},
        ):
            if not replace and descriptor.kind in self._descriptors:
                raise ValueError(f"Action kind '{descriptor.kind}' already registered")
            self._descriptors[descriptor.kind] = descriptor
            return descriptor

    def unregister(self, kind: str) -> Optional[ActionDescriptor]:
        return self._descriptors.pop(kind, None)

    def get(self, kind: str) -> ActionDescriptor:
        try:
            return self._descriptors[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def __contains__(self, kind: object) -> bool:
        return kind in self._descriptors

    def kinds(self) -> tuple[str, ...]:
        return tuple(self._descriptors)

    def create(self, kind: str, chord: KeyChord) -> BindingNode:
        descriptor = self.get(kind)
        with span(
            "registry::create",
            logger_name=self._logger_name,
            component="registry",
            metadata={"kind": kind, "chord": chord.tokens},
        ):
            return self.bind(descriptor.create(self.context, chord))

    def bind(self, node: BindingNode) -> BindingNode:
        """Attach live ``invoke`` behaviour to a leaf; prefixes pass through."""

        if isinstance(node, LeafNode):
            node.invoke = partial(self.execute, node)
        return node

    def execute(self, leaf: LeafNode, kind: str | None = None) -> object:
        """Run ``leaf`` through its own kind, or through ``kind`` when given."""

        kind = kind or leaf.kind
        descriptor = self.get(kind)
        with span(
            "registry::execute",
            logger_name=self._logger_name,
            component="registry",
            metadata={"kind": kind, "name": leaf.name},
        ):
            return descriptor.execute(self.context, leaf)

    def serialize(self, chord: KeyChord, node: BindingNode) -> BindingRecord:
        descriptor = self.get(node.kind)
        fields = descriptor.serialize(node)
        return BindingRecord(
            keys=chord.tokens, kind=node.kind, name=node.name, fields=fields
        )

    def deserialize(self, record: BindingRecord) -> BindingNode:
        try:
            descriptor = self.get(record.kind)
        except UnknownKindError:
            raise UnknownKindError(record.kind, record.chord) from None
        return self.bind(descriptor.deserialize(self.context, record))

    def discard(self, node: BindingNode) -> None:
        """Run cascade hooks for ``node`` and, for prefixes, every descendant."""

        pending: list[BindingNode] = [node]
        while pending:
            current = pending.pop()
            if isinstance(current, PrefixNode):
                pending.extend(current.children.values())
                continue
            descriptor = self._descriptors.get(current.kind)
            if descriptor is None:
                record_event(
                    "registry.discard_unknown",
                    level="warning",
                    data={"kind": current.kind, "name": current.name},
                    logger_name=self._logger_name,
                )
                continue
            descriptor.discard(self.context, current)


__all__ = ["ActionContext", "ActionDescriptor", "ActionRegistry"]
