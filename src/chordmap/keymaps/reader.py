"""Incremental chord reader with live completion candidates."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Any, Iterator, Mapping, Optional, Protocol, Sequence, Union

from chordmap.host import CandidateDisplay, InputSource
from chordmap.runtime.telemetry import span

from .errors import InputCancelled
from .models import Candidate, KeyChord, PREFIX_KIND
from .tree import BindingTree, LookupResult

DEFAULT_CANCEL_KEY = "C-g"


class LookupSource(Protocol):
    def lookup(self, path: Sequence[str]) -> LookupResult: ...

    def candidates(self, path: Sequence[str] = ()) -> tuple[Candidate, ...]: ...


class MappingSource:
    """Lookup over plain nested mappings: mappings are prefixes, the rest leaves."""

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self._mapping = mapping

    def _walk(self, path: Sequence[str]) -> tuple[Any, int]:
        node: Any = self._mapping
        consumed = 0
        for token in path:
            if not isinstance(node, Mapping) or token not in node:
                return None, consumed
            node = node[token]
            consumed += 1
        return node, consumed

    def lookup(self, path: Sequence[str]) -> LookupResult:
        node, consumed = self._walk(path)
        if consumed < len(path) or node is None:
            return LookupResult(status="missing", consumed=consumed)
        status = "prefix" if isinstance(node, Mapping) else "leaf"
        return LookupResult(status=status, consumed=consumed)

    def candidates(self, path: Sequence[str] = ()) -> tuple[Candidate, ...]:
        node, consumed = self._walk(path)
        if consumed < len(path) or not isinstance(node, Mapping):
            return ()
        rows: list[Candidate] = []
        for token, value in node.items():
            if isinstance(value, Mapping):
                rows.append(Candidate(token=token, name=token, kind=PREFIX_KIND))
            else:
                name = getattr(value, "name", None) or str(value)
                rows.append(
                    Candidate(token=token, name=name, kind=getattr(value, "kind", "leaf"))
                )
        return tuple(rows)


Source = Union[BindingTree, LookupSource, Mapping[str, Any]]


class IncrementalKeyReader:
    """Reads one unit at a time until the typed path stops being a prefix."""

    def __init__(
        self,
        tree: BindingTree,
        input_source: InputSource,
        display: CandidateDisplay,
        *,
        cancel_key: str = DEFAULT_CANCEL_KEY,
        logger_name: str | None = None,
    ) -> None:
        if not cancel_key:
            raise ValueError("cancel_key cannot be empty")
        self.tree = tree
        self.input_source = input_source
        self.display = display
        self.cancel_key = cancel_key
        self._logger_name = logger_name

    def read(self, source: Optional[Source] = None, *, prompt: str = "Chord: ") -> KeyChord:
        """Return the typed chord; raise ``InputCancelled`` on the cancel unit."""

        target = self.tree if source is None else source
        lookup = _as_lookup(target)
        typed: list[str] = []
        with span(
            "reader::read",
            logger_name=self._logger_name,
            component="reader",
            expected=(InputCancelled,),
        ) as handle, ExitStack() as stack:
            if isinstance(target, BindingTree):
                stack.enter_context(target.reading())
            stack.enter_context(self._popup())

            self.display.show((), lookup.candidates(()))
            while True:
                unit = self.input_source.read_one(_render_prompt(prompt, typed))
                if unit == self.cancel_key:
                    handle.add_metadata("typed", tuple(typed))
                    raise InputCancelled(tuple(typed))
                typed.append(unit)
                result = lookup.lookup(typed)
                if result.is_prefix:
                    self.display.show(tuple(typed), lookup.candidates(typed))
                    continue
                handle.add_metadata("status", result.status)
                handle.add_metadata("chord", tuple(typed))
                return KeyChord(tuple(typed))

    @contextmanager
    def _popup(self) -> Iterator[CandidateDisplay]:
        try:
            yield self.display
        finally:
            self.display.hide()


def _as_lookup(source: Source) -> LookupSource:
    if isinstance(source, BindingTree):
        return source
    if isinstance(source, Mapping):
        return MappingSource(source)
    return source


def _render_prompt(prompt: str, typed: Sequence[str]) -> str:
    if not typed:
        return prompt
    return f"{prompt}{' '.join(typed)} "


__all__ = [
    "DEFAULT_CANCEL_KEY",
    "IncrementalKeyReader",
    "LookupSource",
    "MappingSource",
]
