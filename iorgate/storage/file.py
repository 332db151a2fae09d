"""
File-backed component store.

Layout:

    <base_dir>/
    ├── records/
    │   └── {quoted id}.json    # one ComponentRecord per file
    └── aliases.json            # {"alias": "id", ...}

Ids are percent-quoted for filenames, so ids containing '/' are safe.
Every write goes to a temporary file first and is moved into place,
so a crash never leaves a half-written record.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

from iorgate.components.base import ComponentRecord
from iorgate.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


class FileComponentStore:
    """
    Stores records as JSON files under a base directory.

    Usage:
        store = FileComponentStore("data/ude")
        await store.connect()
        await store.insert(record)
    """

    name = "file"

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._records_dir = self._base_dir / "records"
        self._aliases_file = self._base_dir / "aliases.json"
        self._aliases: dict[str, str] | None = None

    async def connect(self) -> None:
        self._records_dir.mkdir(parents=True, exist_ok=True)
        self._aliases = self._load_aliases()
        logger.info(f"[store] File store at {self._base_dir} | aliases={len(self._aliases)}")

    async def close(self) -> None:
        self._aliases = None

    async def read(self, component_id: str) -> ComponentRecord | None:
        path = self._record_path(component_id)
        if not path.exists():
            return None
        with path.open() as f:
            return ComponentRecord.model_validate(json.load(f))

    async def insert(self, record: ComponentRecord) -> None:
        aliases = self._alias_index()
        path = self._record_path(record.id)
        if path.exists():
            raise Conflict(f"Component '{record.id}' already exists")
        for alias in record.aliases:
            if alias in aliases:
                raise Conflict(f"Alias '{alias}' already belongs to '{aliases[alias]}'")

        self._write_json(path, record.to_document())
        if record.aliases:
            aliases.update({alias: record.id for alias in record.aliases})
            self._write_json(self._aliases_file, aliases)

    async def replace(self, record: ComponentRecord) -> None:
        path = self._record_path(record.id)
        if not path.exists():
            raise NotFound(f"Component '{record.id}' does not exist")
        self._write_json(path, record.to_document())

    async def delete(self, component_id: str) -> bool:
        path = self._record_path(component_id)
        if not path.exists():
            return False

        aliases = self._alias_index()
        remaining = {a: i for a, i in aliases.items() if i != component_id}
        if len(remaining) != len(aliases):
            self._write_json(self._aliases_file, remaining)
            self._aliases = remaining
        path.unlink()
        return True

    async def lookup_alias(self, name: str) -> str | None:
        return self._alias_index().get(name)

    async def add_alias(self, component_id: str, name: str) -> None:
        record = await self.read(component_id)
        if record is None:
            raise NotFound(f"Component '{component_id}' does not exist")
        aliases = self._alias_index()
        owner = aliases.get(name)
        if owner is not None and owner != component_id:
            raise Conflict(f"Alias '{name}' already belongs to '{owner}'")

        aliases[name] = component_id
        self._write_json(self._aliases_file, aliases)
        if name not in record.aliases:
            record.aliases.append(name)
            self._write_json(self._record_path(component_id), record.to_document())

    async def count(self) -> int:
        if not self._records_dir.exists():
            return 0
        return sum(1 for _ in self._records_dir.glob("*.json"))

    def _record_path(self, component_id: str) -> Path:
        return self._records_dir / f"{quote(component_id, safe='')}.json"

    def _alias_index(self) -> dict[str, str]:
        if self._aliases is None:
            self._records_dir.mkdir(parents=True, exist_ok=True)
            self._aliases = self._load_aliases()
        return self._aliases

    def _load_aliases(self) -> dict[str, str]:
        if not self._aliases_file.exists():
            return {}
        with self._aliases_file.open() as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        tmp = path.with_name(f".{path.name}.tmp")
        with tmp.open("w") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
