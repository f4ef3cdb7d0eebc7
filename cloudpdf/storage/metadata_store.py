"""Per-user file records for uploaded PDFs."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import RecordNotFound


def new_doc_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class FileRecord:
    doc_id: str
    file_name: str
    locator: str
    storage_key: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.doc_id,
            "file_name": self.file_name,
            "download_url": self.locator,
            "storage_key": self.storage_key,
            "uploaded_at": self.uploaded_at.isoformat(),
        }


class MetadataStore:
    """In-memory record list keyed by user id, then document id."""

    def __init__(self):
        self._records: Dict[str, Dict[str, FileRecord]] = {}
        self._lock = threading.Lock()

    def add(
        self,
        user_id: str,
        file_name: str,
        locator: str,
        storage_key: str,
        doc_id: Optional[str] = None,
    ) -> FileRecord:
        record = FileRecord(
            doc_id=doc_id or new_doc_id(),
            file_name=file_name,
            locator=locator,
            storage_key=storage_key,
        )
        with self._lock:
            self._records.setdefault(user_id, {})[record.doc_id] = record
        return record

    def list_files(self, user_id: str) -> List[FileRecord]:
        """Records for a user, newest first."""
        with self._lock:
            records = list(self._records.get(user_id, {}).values())
        # Insertion order breaks timestamp ties so later uploads still come first
        indexed = list(enumerate(records))
        indexed.sort(key=lambda item: (item[1].uploaded_at, item[0]), reverse=True)
        return [record for _, record in indexed]

    def get(self, user_id: str, doc_id: str) -> FileRecord:
        with self._lock:
            record = self._records.get(user_id, {}).get(doc_id)
        if record is None:
            raise RecordNotFound(f"File '{doc_id}' not found")
        return record

    def delete(self, user_id: str, doc_id: str) -> FileRecord:
        with self._lock:
            record = self._records.get(user_id, {}).pop(doc_id, None)
        if record is None:
            raise RecordNotFound(f"File '{doc_id}' not found")
        return record
