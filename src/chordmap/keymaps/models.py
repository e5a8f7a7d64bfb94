"""Dataclasses describing chords, binding nodes and persisted records."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Union

from .errors import MalformedRecordError

PREFIX_KIND = "prefix"

_RESERVED_RECORD_KEYS = frozenset({"type", "keys", "name"})


def _escape_token(token: str) -> str:
    parts: list[str] = []
    for char in token:
        if char in "%-" or char.isspace():
            parts.append(f"%{ord(char):02X}")
        else:
            parts.append(char)
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class KeyChord:
    """Immutable, non-empty sequence of input-unit tokens."""

    tokens: tuple[str, ...]

    def __post_init__(self) -> None:
        tokens = tuple(self.tokens)
        if not tokens:
            raise ValueError("KeyChord requires at least one token")
        for token in tokens:
            if not isinstance(token, str) or not token:
                raise ValueError(f"Invalid chord token {token!r}")
        object.__setattr__(self, "tokens", tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def append(self, *tokens: str) -> "KeyChord":
        return KeyChord(self.tokens + tuple(tokens))

    def render(self) -> str:
        return " ".join(self.tokens)

    def slug(self) -> str:
        """Identifier-safe rendering; distinct chords never share a slug.

        ``%``, ``-`` and whitespace inside a token are percent-escaped, so the
        ``-`` separator is unambiguous.
        """

        return "-".join(_escape_token(token) for token in self.tokens)

    @classmethod
    def of(cls, *tokens: str) -> "KeyChord":
        return cls(tuple(tokens))

    @classmethod
    def parse(cls, text: str) -> "KeyChord":
        return cls(tuple(text.split()))


@dataclass(slots=True)
class PrefixNode:
    """Named sub-menu owning its child nodes."""

    label: str
    children: Dict[str, "BindingNode"] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return PREFIX_KIND

    @property
    def name(self) -> str:
        return self.label


@dataclass(slots=True)
class LeafNode:
    """Executable binding; ``metadata`` is interpreted only by its kind."""

    kind: str
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    invoke: Callable[[], object] | None = field(
        default=None, compare=False, repr=False
    )

    def __call__(self) -> object:
        if self.invoke is None:
            raise RuntimeError(f"Leaf '{self.name}' has no bound behaviour")
        return self.invoke()


BindingNode = Union[PrefixNode, LeafNode]


@dataclass(frozen=True, slots=True)
class Candidate:
    """One completion row: the next token and what it leads to."""

    token: str
    name: str
    kind: str

    @property
    def is_prefix(self) -> bool:
        return self.kind == PREFIX_KIND


@dataclass(frozen=True, slots=True)
class BindingRecord:
    """Flat persisted form of one tree node."""

    keys: tuple[str, ...]
    kind: str
    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.kind:
            raise MalformedRecordError("record type cannot be empty")
        try:
            chord = KeyChord(tuple(self.keys))
        except ValueError as exc:
            raise MalformedRecordError(str(exc)) from exc
        clashing = _RESERVED_RECORD_KEYS.intersection(self.fields)
        if clashing:
            raise MalformedRecordError(
                f"record fields shadow reserved keys {sorted(clashing)}"
            )
        object.__setattr__(self, "keys", chord.tokens)
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def chord(self) -> KeyChord:
        return KeyChord(self.keys)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.kind,
            "keys": list(self.keys),
            "name": self.name,
        }
        data.update(self.fields)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BindingRecord":
        if not isinstance(data, Mapping):
            raise MalformedRecordError(f"record must be an object, got {data!r}")
        kind = data.get("type")
        keys = data.get("keys")
        if not isinstance(kind, str):
            raise MalformedRecordError(f"record type must be a string: {data!r}")
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise MalformedRecordError(f"record keys must be a list of strings: {data!r}")
        name = data.get("name", " ".join(keys))
        if not isinstance(name, str):
            raise MalformedRecordError(f"record name must be a string: {data!r}")
        extra = {k: v for k, v in data.items() if k not in _RESERVED_RECORD_KEYS}
        return cls(keys=tuple(keys), kind=kind, name=name, fields=extra)


__all__ = [
    "PREFIX_KIND",
    "KeyChord",
    "PrefixNode",
    "LeafNode",
    "BindingNode",
    "Candidate",
    "BindingRecord",
]
