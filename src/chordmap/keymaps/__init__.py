"""Binding tree, chord reader and action registry."""

from .errors import (
    ChordmapError,
    ConflictError,
    ContextNotFoundError,
    InputCancelled,
    LocationNotFoundError,
    MalformedRecordError,
    ProfileNotFoundError,
    ProfileStoreError,
    TreeBusyError,
    UnknownKindError,
)
from .models import (
    PREFIX_KIND,
    BindingNode,
    BindingRecord,
    Candidate,
    KeyChord,
    LeafNode,
    PrefixNode,
)
from .tree import BindingTree, LookupResult
from .registry import ActionContext, ActionDescriptor, ActionRegistry
from .reader import DEFAULT_CANCEL_KEY, IncrementalKeyReader, MappingSource
from .kinds import BOOKMARK_KIND, TAB_KIND, bookmark_name, load_builtin_kinds

__all__ = [
    "ChordmapError",
    "ConflictError",
    "ContextNotFoundError",
    "InputCancelled",
    "LocationNotFoundError",
    "MalformedRecordError",
    "ProfileNotFoundError",
    "ProfileStoreError",
    "TreeBusyError",
    "UnknownKindError",
    "PREFIX_KIND",
    "BOOKMARK_KIND",
    "TAB_KIND",
    "BindingNode",
    "BindingRecord",
    "Candidate",
    "KeyChord",
    "LeafNode",
    "PrefixNode",
    "BindingTree",
    "LookupResult",
    "ActionContext",
    "ActionDescriptor",
    "ActionRegistry",
    "DEFAULT_CANCEL_KEY",
    "IncrementalKeyReader",
    "MappingSource",
    "bookmark_name",
    "load_builtin_kinds",
]
