"""Local filesystem blob storage with observable upload progress."""

import enum
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterator, Optional

from ..errors import StorageError

logger = logging.getLogger(__name__)


class UploadState(enum.Enum):
    PROGRESSING = "progressing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadEvent:
    """One observation of an upload: progress, final locator or failure."""
    state: UploadState
    progress: float = 0.0
    locator: Optional[str] = None
    error: Optional[Exception] = None


class UploadCancelled(StorageError):
    """Raised when an upload is cancelled before completion."""


def user_pdf_key(user_id: str, doc_id: str, file_name: str) -> str:
    """Storage key for one uploaded PDF, e.g. "users/<uid>/pdfs/<doc_id>/report.pdf"."""
    name = PurePosixPath(file_name.replace("\\", "/")).name
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid file name: {file_name!r}")
    return f"users/{user_id}/pdfs/{doc_id}/{name}"


class UploadTask:
    """
    A pending upload.

    Iterating the task performs the write and yields PROGRESSING events
    followed by exactly one COMPLETED or FAILED event. ``cancel()`` may be
    called from another thread; the upload then fails with UploadCancelled
    and no blob is left behind.
    """

    def __init__(self, store: "LocalBlobStore", key: str, data: bytes, chunk_size: int):
        self.key = key
        self._store = store
        self._data = data
        self._chunk_size = max(1, chunk_size)
        self._cancelled = threading.Event()
        self._final: Optional[UploadEvent] = None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def done(self) -> bool:
        return self._final is not None

    def __iter__(self) -> Iterator[UploadEvent]:
        if self._final is not None:
            yield self._final
            return

        target = self._store.path_for(self.key)
        partial = target.with_name(target.name + ".part")
        total = len(self._data)
        written = 0

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(partial, "wb") as fh:
                yield UploadEvent(UploadState.PROGRESSING, progress=0.0)
                while written < total:
                    if self._cancelled.is_set():
                        raise UploadCancelled(f"Upload of '{self.key}' was cancelled")
                    chunk = self._data[written:written + self._chunk_size]
                    fh.write(chunk)
                    written += len(chunk)
                    yield UploadEvent(UploadState.PROGRESSING, progress=written / total)
            if self._cancelled.is_set():
                raise UploadCancelled(f"Upload of '{self.key}' was cancelled")
            os.replace(partial, target)
        except GeneratorExit:
            partial.unlink(missing_ok=True)
            raise
        except (OSError, StorageError) as e:
            partial.unlink(missing_ok=True)
            logger.warning(f"Upload failed for key={self.key}: {e}")
            error = e if isinstance(e, StorageError) else StorageError(f"Upload failed: {e}")
            progress = written / total if total else 0.0
            self._final = UploadEvent(UploadState.FAILED, progress=progress, error=error)
            yield self._final
            return

        logger.info(f"Stored {total} bytes at key={self.key}")
        self._final = UploadEvent(
            UploadState.COMPLETED, progress=1.0, locator=self._store.locator_for(self.key)
        )
        yield self._final

    def result(self) -> str:
        """Run the upload to completion and return the download locator."""
        final = None
        for event in self:
            final = event
        if final.state is UploadState.FAILED:
            raise final.error
        return final.locator


class LocalBlobStore:
    """Stores blobs as files under a root directory, addressed by path keys."""

    def __init__(self, root: str, chunk_size: int = 65536):
        self.root = Path(root).resolve()
        self.chunk_size = chunk_size

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path

    def locator_for(self, key: str) -> str:
        return self.path_for(key).as_uri()

    def upload(self, data: bytes, key: str) -> UploadTask:
        # Validate eagerly so a bad key fails before any progress is reported
        self.path_for(key)
        return UploadTask(self, key, data, self.chunk_size)

    def download(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise StorageError(f"No blob stored at key {key!r}")

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Blob already missing for key={key}")
