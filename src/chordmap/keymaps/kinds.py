"""Built-in action kinds: prefix sub-menus, bookmarks and workspace tabs."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .errors import ContextNotFoundError, LocationNotFoundError, MalformedRecordError
from .models import (
    PREFIX_KIND,
    BindingNode,
    BindingRecord,
    KeyChord,
    LeafNode,
    PrefixNode,
)
from .registry import ActionContext, ActionDescriptor, ActionRegistry

BOOKMARK_KIND = "bookmark"
TAB_KIND = "tab"
BOOKMARK_PREFIX = "chordmap:"


def bookmark_name(chord: KeyChord) -> str:
    return f"{BOOKMARK_PREFIX}{chord.slug()}"


def _required_field(record: BindingRecord, key: str) -> str:
    value = record.fields.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedRecordError(
            f"{record.kind} record at '{record.chord.render()}' needs a '{key}' string"
        )
    return value


# prefix


def _create_prefix(context: ActionContext, chord: KeyChord) -> BindingNode:
    label = context.prompter.ask("Prefix name: ", default=chord.render())
    return PrefixNode(label=label)


def _execute_prefix(context: ActionContext, leaf: LeafNode) -> None:
    del context, leaf


def _serialize_prefix(node: BindingNode) -> Mapping[str, Any]:
    del node
    return {}


def _deserialize_prefix(context: ActionContext, record: BindingRecord) -> BindingNode:
    del context
    return PrefixNode(label=record.name)


# bookmark


def _create_bookmark(context: ActionContext, chord: KeyChord) -> BindingNode:
    location_id = context.locations.set(bookmark_name(chord))
    return LeafNode(
        kind=BOOKMARK_KIND,
        name=chord.render(),
        metadata={"bookmark": location_id},
    )


def _execute_bookmark(context: ActionContext, leaf: LeafNode) -> None:
    location_id = str(leaf.metadata.get("bookmark", ""))
    if not location_id or not context.locations.exists(location_id):
        raise LocationNotFoundError(location_id)
    context.locations.jump(location_id)


def _serialize_bookmark(node: BindingNode) -> Mapping[str, Any]:
    assert isinstance(node, LeafNode)
    return {"bookmark": node.metadata["bookmark"]}


def _deserialize_bookmark(context: ActionContext, record: BindingRecord) -> BindingNode:
    del context
    return LeafNode(
        kind=BOOKMARK_KIND,
        name=record.name,
        metadata={"bookmark": _required_field(record, "bookmark")},
    )


def _discard_bookmark(context: ActionContext, leaf: LeafNode) -> None:
    location_id = str(leaf.metadata.get("bookmark", ""))
    if location_id and context.locations.exists(location_id):
        context.locations.delete(location_id)


# tab


def _create_tab(context: ActionContext, chord: KeyChord) -> BindingNode:
    name = context.prompter.ask("Tab name: ", default=chord.render()).strip()
    if not name:
        name = chord.render()
    if not context.contexts.exists(name):
        context.contexts.rename(name)
    return LeafNode(kind=TAB_KIND, name=name, metadata={"tab": name})


def _execute_tab(context: ActionContext, leaf: LeafNode) -> None:
    name = str(leaf.metadata.get("tab", ""))
    if not name or not context.contexts.exists(name):
        raise ContextNotFoundError(name)
    context.contexts.switch_to(name)


def _serialize_tab(node: BindingNode) -> Mapping[str, Any]:
    assert isinstance(node, LeafNode)
    return {"tab": node.metadata["tab"]}


def _deserialize_tab(context: ActionContext, record: BindingRecord) -> BindingNode:
    del context
    tab = _required_field(record, "tab")
    return LeafNode(kind=TAB_KIND, name=record.name, metadata={"tab": tab})


BUILTIN_KINDS: tuple[ActionDescriptor, ...] = (
    ActionDescriptor(
        kind=PREFIX_KIND,
        create=_create_prefix,
        execute=_execute_prefix,
        serialize=_serialize_prefix,
        deserialize=_deserialize_prefix,
        description="Named sub-menu of further bindings",
    ),
    ActionDescriptor(
        kind=BOOKMARK_KIND,
        create=_create_bookmark,
        execute=_execute_bookmark,
        serialize=_serialize_bookmark,
        deserialize=_deserialize_bookmark,
        discard=_discard_bookmark,
        description="Jump to a saved location",
    ),
    ActionDescriptor(
        kind=TAB_KIND,
        create=_create_tab,
        execute=_execute_tab,
        serialize=_serialize_tab,
        deserialize=_deserialize_tab,
        description="Switch to a named workspace tab",
    ),
)


def load_builtin_kinds(
    registry: ActionRegistry,
    *,
    include: Iterable[str] | None = None,
    replace: bool = False,
) -> ActionRegistry:
    """Register the built-in kinds, optionally limited to ``include``."""

    wanted = set(include) if include is not None else None
    for descriptor in BUILTIN_KINDS:
        if wanted is not None and descriptor.kind not in wanted:
            continue
        registry.register(descriptor, replace=replace)
    return registry


__all__ = [
    "BOOKMARK_KIND",
    "TAB_KIND",
    "BUILTIN_KINDS",
    "bookmark_name",
    "load_builtin_kinds",
]
