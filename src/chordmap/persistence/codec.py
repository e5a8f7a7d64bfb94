"""Flattening binding trees into ordered records and rebuilding them."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from chordmap.keymaps import (
    ActionRegistry,
    BindingRecord,
    BindingTree,
    ConflictError,
    MalformedRecordError,
    UnknownKindError,
)
from chordmap.runtime.telemetry import record_event, span


class PersistenceCodec:
    """Converts trees to records via the registry's per-kind serializers."""

    def __init__(
        self, registry: ActionRegistry, *, logger_name: str | None = None
    ) -> None:
        self.registry = registry
        self._logger_name = logger_name

    def serialize(self, tree: BindingTree) -> list[BindingRecord]:
        records: list[BindingRecord] = []
        skipped = 0
        with span(
            "codec::serialize",
            logger_name=self._logger_name,
            component="codec",
        ) as handle:
            for chord, node in tree.enumerate():
                if node.kind not in self.registry:
                    skipped += 1
                    record_event(
                        "codec.skip_unregistered",
                        level="debug",
                        data={"kind": node.kind, "chord": chord.tokens},
                        logger_name=self._logger_name,
                    )
                    continue
                try:
                    records.append(self.registry.serialize(chord, node))
                except (KeyError, MalformedRecordError) as exc:
                    skipped += 1
                    record_event(
                        "codec.skip_unserializable",
                        level="warning",
                        data={"kind": node.kind, "chord": chord.tokens, "error": str(exc)},
                        logger_name=self._logger_name,
                    )
            handle.add_metadata("records", len(records))
            handle.add_metadata("skipped", skipped)
        return records

    def deserialize(self, records: Iterable[BindingRecord]) -> BindingTree:
        """Rebuild a tree; bad records are logged and skipped, never fatal."""

        tree = BindingTree(logger_name=self._logger_name)
        with span(
            "codec::deserialize",
            logger_name=self._logger_name,
            component="codec",
        ) as handle:
            loaded = 0
            for record in records:
                try:
                    node = self.registry.deserialize(record)
                    tree.insert(record.chord, node)
                except (UnknownKindError, MalformedRecordError, ConflictError) as exc:
                    record_event(
                        "codec.skip_record",
                        level="warning",
                        data={"chord": record.keys, "kind": record.kind, "error": str(exc)},
                        logger_name=self._logger_name,
                    )
                    continue
                loaded += 1
            handle.add_metadata("loaded", loaded)
        return tree

    def to_document(self, tree: BindingTree) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self.serialize(tree)]

    def from_document(self, document: Sequence[Mapping[str, Any]]) -> BindingTree:
        return self.deserialize(parse_records(document, logger_name=self._logger_name))


def parse_records(
    document: Sequence[Mapping[str, Any]], *, logger_name: str | None = None
) -> list[BindingRecord]:
    """Decode raw JSON records, dropping (and logging) malformed entries."""

    records: list[BindingRecord] = []
    for index, raw in enumerate(document):
        try:
            records.append(BindingRecord.from_dict(raw))
        except MalformedRecordError as exc:
            record_event(
                "codec.malformed_record",
                level="warning",
                data={"index": index, "error": str(exc)},
                logger_name=logger_name,
            )
    return records


__all__ = ["PersistenceCodec", "parse_records"]
