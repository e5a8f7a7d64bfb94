"""Named binding profiles stored together in one JSON document."""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any, Dict, List

from platformdirs import user_config_dir

from chordmap.keymaps import BindingTree, ProfileNotFoundError, ProfileStoreError
from chordmap.runtime.telemetry import span

from .codec import PersistenceCodec

APP_NAME = "chordmap"
STORE_FILENAME = "profiles.json"
DEFAULT_PROFILE = "default"
STORE_ENV = "CHORDMAP_PROFILE_STORE"


def default_store_path() -> Path:
    override = os.getenv(STORE_ENV)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, appauthor=False)) / STORE_FILENAME


Document = Dict[str, List[Dict[str, Any]]]


class ProfileStore:
    """Reads and writes ``{profile name: [record, ...]}`` at ``path``."""

    def __init__(
        self,
        codec: PersistenceCodec,
        path: Path | str | None = None,
        *,
        logger_name: str | None = None,
    ) -> None:
        self.codec = codec
        self.path = Path(path) if path is not None else default_store_path()
        self._logger_name = logger_name

    def read(self) -> Document:
        """Return the whole document; a missing file is an empty store."""

        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise ProfileStoreError(f"Cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise ProfileStoreError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ProfileStoreError(f"{self.path} must contain a JSON object")
        for name, records in data.items():
            if not isinstance(records, list):
                raise ProfileStoreError(
                    f"Profile '{name}' in {self.path} must be a list of records"
                )
        return data

    def write(self, document: Document) -> None:
        """Replace the file atomically with ``document``."""

        text = json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
        temp_path: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = handle.name
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
        except OSError as exc:
            if temp_path is not None:
                with suppress(OSError):
                    os.unlink(temp_path)
            raise ProfileStoreError(f"Cannot write {self.path}: {exc}") from exc

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self.read()))

    def records(self, name: str) -> List[Dict[str, Any]]:
        document = self.read()
        if name not in document:
            raise ProfileNotFoundError(name)
        return document[name]

    def save(self, name: str, tree: BindingTree) -> int:
        """Store ``tree`` under ``name`` and return the number of records."""

        with span(
            "profiles::save",
            logger_name=self._logger_name,
            component="profiles",
            metadata={"profile": name, "path": str(self.path)},
        ):
            document = self.read()
            document[name] = self.codec.to_document(tree)
            self.write(document)
            return len(document[name])

    def load(self, name: str) -> BindingTree:
        with span(
            "profiles::load",
            logger_name=self._logger_name,
            component="profiles",
            metadata={"profile": name, "path": str(self.path)},
            expected=(ProfileNotFoundError,),
        ):
            return self.codec.from_document(self.records(name))

    def delete(self, name: str) -> None:
        document = self.read()
        if name not in document:
            raise ProfileNotFoundError(name)
        del document[name]
        self.write(document)

    def rename(self, old: str, new: str) -> None:
        document = self.read()
        if old not in document:
            raise ProfileNotFoundError(old)
        if new in document and new != old:
            raise ProfileStoreError(f"Profile '{new}' already exists")
        document[new] = document.pop(old)
        self.write(document)


__all__ = [
    "APP_NAME",
    "DEFAULT_PROFILE",
    "STORE_ENV",
    "ProfileStore",
    "default_store_path",
]
