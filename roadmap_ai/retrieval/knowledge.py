"""The knowledge corpus used to ground generation.

The corpus is curated elsewhere; the pipeline only reads it. Loading from
a JSON file accepts either a bare list of records or ``{"documents": [...]}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from roadmap_ai.core.document import KnowledgeDocument
from roadmap_ai.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """An ordered, id-keyed collection of knowledge documents."""

    def __init__(self, documents: Iterable[KnowledgeDocument] = ()) -> None:
        self._documents: dict[str, KnowledgeDocument] = {}
        for doc in documents:
            self.add(doc)

    @classmethod
    def from_json_file(cls, path: str | Path) -> Result[KnowledgeBase, str]:
        """Load a corpus from disk."""
        file_path = Path(path)
        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(f"Knowledge base file not found: {file_path}")
        except (OSError, json.JSONDecodeError) as e:
            return Err(f"Could not read knowledge base {file_path}: {e}")

        records = raw.get("documents", []) if isinstance(raw, dict) else raw
        if not isinstance(records, list):
            return Err(f"Knowledge base {file_path} must hold a list of documents")

        documents: list[KnowledgeDocument] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Skipping knowledge record %d: not an object", index)
                continue
            try:
                documents.append(KnowledgeDocument.from_dict(record))
            except ValueError as e:
                logger.warning("Skipping knowledge record %d: %s", index, e)

        logger.info("Loaded %d knowledge documents from %s", len(documents), file_path)
        return Ok(cls(documents))

    @property
    def documents(self) -> list[KnowledgeDocument]:
        """Snapshot of the corpus in insertion order."""
        return list(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, doc_id: str) -> Optional[KnowledgeDocument]:
        return self._documents.get(doc_id)

    def add(self, document: KnowledgeDocument) -> None:
        """Insert or replace a document by id."""
        self._documents[document.doc_id] = document

    def remove(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None

    def filter_by_topic(self, topic: str) -> list[KnowledgeDocument]:
        """Documents whose title, category or tags contain ``topic`` (case-insensitive)."""
        needle = topic.lower().strip()
        if not needle:
            return []
        return [
            doc
            for doc in self._documents.values()
            if needle in f"{doc.title} {doc.category} {' '.join(doc.tags)}".lower()
        ]
