"""A user's uploaded PDFs: blobs plus their file records."""

import logging
from typing import List

from .blob_store import LocalBlobStore, UploadState, user_pdf_key
from .metadata_store import FileRecord, MetadataStore, new_doc_id
from ..auth import Session

logger = logging.getLogger(__name__)


class FileLibrary:
    """Combines blob storage and metadata for session-scoped file operations."""

    def __init__(self, blobs: LocalBlobStore, records: MetadataStore):
        self.blobs = blobs
        self.records = records

    def upload(self, session: Session, file_name: str, data: bytes) -> FileRecord:
        """Store the PDF, then append its record. Raises StorageError on failure."""
        doc_id = new_doc_id()
        key = user_pdf_key(session.user_id, doc_id, file_name)
        task = self.blobs.upload(data, key)

        final = None
        for event in task:
            if event.state is UploadState.PROGRESSING:
                logger.debug(f"Upload {key}: {event.progress:.0%}")
            final = event

        if final.state is UploadState.FAILED:
            raise final.error

        record = self.records.add(
            session.user_id,
            file_name=key.rsplit("/", 1)[-1],
            locator=final.locator,
            storage_key=key,
            doc_id=doc_id,
        )
        logger.info(f"Saved file record {record.doc_id} for user {session.user_id}")
        return record

    def list_files(self, session: Session) -> List[FileRecord]:
        return self.records.list_files(session.user_id)

    def get(self, session: Session, doc_id: str) -> FileRecord:
        return self.records.get(session.user_id, doc_id)

    def download(self, session: Session, doc_id: str) -> bytes:
        record = self.get(session, doc_id)
        return self.blobs.download(record.storage_key)

    def delete(self, session: Session, doc_id: str) -> None:
        record = self.records.delete(session.user_id, doc_id)
        self.blobs.delete(record.storage_key)
        logger.info(f"Deleted {record.file_name} for user {session.user_id}")
