"""
JSON-array persistence shared by the user and inventory stores.

Each DocumentStore owns one file holding a pretty-printed JSON array. Writes
go to a sibling temporary file that is renamed over the original, so readers
always see either the old or the new document. Mutations are serialized
through a per-store lock.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator
import json
import logging
import os
import threading

from boxoffice.domain.errors import CorruptDocumentError

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore:
    """Load/mutate/save cycle over a single JSON-array file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> list[Document]:
        """Return the stored collection, or [] when the file does not exist."""
        if not self.path.exists():
            return []
        raw = self.path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt document %s: %s", self.path, exc)
            raise CorruptDocumentError(f"{self.path.name} is not valid JSON") from exc
        if not isinstance(data, list):
            logger.error("Corrupt document %s: top-level value is %s", self.path, type(data).__name__)
            raise CorruptDocumentError(f"{self.path.name} does not hold a JSON array")
        return data

    def save(self, documents: list[Document]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        temp_path.write_text(json.dumps(documents, indent=2, ensure_ascii=False), encoding="utf-8")
        temp_path.replace(self.path)

    @contextmanager
    def transaction(self) -> Iterator[list[Document]]:
        """
        Hold the write lane across a read-modify-write cycle.

        Usage:
            with store.transaction() as docs:
                docs.append({...})
            # saved on exit; nothing is written if the block raises
        """
        with self._lock:
            documents = self.load()
            yield documents
            self.save(documents)

    def mutate(self, fn: Callable[[list[Document]], list[Document]]) -> list[Document]:
        """Apply fn to the current collection and persist its result."""
        with self._lock:
            documents = fn(self.load())
            self.save(documents)
            return documents
