"""File-backed store for processed documents.

One JSON file per document, named after its id and written with the
camelCase aliases. Writes go through a temporary file so a reader never
sees a partial record.

Usage:
    store = ResultStore()
    store.write(document)
    cached = store.read(document.id)
"""

import hashlib
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from core.documents import ProcessedDocument

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = Path(os.getenv("PDF_STORE_DIR", "data/processed"))


def _record_name(document_id: str) -> str:
    """File name for an id; ids that need escaping get a hash suffix so they stay distinct."""
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in document_id)
    if safe != document_id or not safe:
        digest = hashlib.sha1(document_id.encode("utf-8")).hexdigest()[:12]
        safe = f"{safe}-{digest}" if safe else digest
    return f"{safe}.json"


class ResultStore:
    def __init__(self, store_dir: str | Path | None = None):
        self.store_dir = Path(store_dir) if store_dir else DEFAULT_STORE_DIR

    def path_for(self, document_id: str) -> Path:
        return self.store_dir / _record_name(document_id)

    def write(self, document: ProcessedDocument) -> Path:
        """Persist a document, replacing any earlier record with the same id."""
        self.store_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(document.id)
        tmp_path = path.with_suffix(".json.tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document.to_record(), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

        logger.debug(f"Stored processed document: {path}")
        return path

    def read(self, document_id: str) -> ProcessedDocument | None:
        """Load a stored document; None when missing or unreadable."""
        path = self.path_for(document_id)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = ProcessedDocument.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to read stored document {document_id}: {e}")
            return None

        if document.id != document_id:
            logger.warning(
                f"Stored record {path.name} belongs to {document.id}, not {document_id}"
            )
            return None

        logger.debug(f"Loaded stored document: {document_id}")
        return document

    def exists(self, document_id: str) -> bool:
        return self.path_for(document_id).exists()

    def delete(self, document_id: str) -> bool:
        """Remove a stored record. Returns False when there was none."""
        path = self.path_for(document_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Deleted stored document: {document_id}")
        return True

    def list_ids(self) -> list[str]:
        """Ids of stored documents, newest first."""
        if not self.store_dir.exists():
            return []

        ids = []
        paths = sorted(
            self.store_dir.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True
        )
        for path in paths:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    ids.append(json.load(f)["id"])
            except (OSError, json.JSONDecodeError, KeyError) as e:
                logger.debug(f"Skipping unreadable record {path.name}: {e}")
        return ids
