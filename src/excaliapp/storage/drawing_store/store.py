"""Local drawing storage: one metadata file and one content file per drawing."""

import datetime
import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from ..base import DrawingBackend
from .errors import (
    DrawingDecodeError,
    DrawingEncodeError,
    DrawingIOError,
    DrawingNotFoundError,
    StorageUnavailableError,
)
from .models import Drawing, StorageLocation, validate_drawing_id

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".i.json"
CONTENT_SUFFIX = ".excalidraw"


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class DrawingStore(DrawingBackend):
    """Manages drawings stored as file pairs in a single flat directory."""

    def __init__(self, root: Union[str, Path], skip_invalid: bool = False):
        """Initialize the store, creating the storage directory if needed.

        Args:
            root: Storage directory
            skip_invalid: Skip (and log) malformed metadata files when listing
                instead of failing the whole listing
        """
        self.root = Path(root)
        self.skip_invalid = skip_invalid

        try:
            self.root.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to create storage directory {self.root}: {e}", path=self.root
            ) from e

        if not self.root.is_dir():
            raise StorageUnavailableError(
                f"Storage path is not a directory: {self.root}", path=self.root
            )

        logger.debug(f"Initialized drawing store in {self.root}")

    def metadata_path(self, drawing_id: str) -> Path:
        return self.root / f"{validate_drawing_id(drawing_id)}{METADATA_SUFFIX}"

    def content_path(self, drawing_id: str) -> Path:
        return self.root / f"{validate_drawing_id(drawing_id)}{CONTENT_SUFFIX}"

    def _read_metadata(self, path: Path, drawing_id: Optional[str] = None) -> Drawing:
        """Read and decode one metadata file."""
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise DrawingNotFoundError(
                f"Drawing not found: {drawing_id or path.name}", drawing_id=drawing_id, path=path
            ) from e
        except OSError as e:
            raise DrawingIOError(
                f"Failed to read file {path.name}: {e}", drawing_id=drawing_id, path=path
            ) from e

        try:
            drawing = Drawing.model_validate_json(raw)
        except ValidationError as e:
            raise DrawingDecodeError(
                f"Failed to decode file {path.name}: {e}", drawing_id=drawing_id, path=path
            ) from e

        # Metadata never carries content, whatever an older writer put there
        drawing.content = ""
        drawing.location = StorageLocation.LOCAL
        return drawing

    def _write_atomic(self, path: Path, payload: bytes, drawing_id: str) -> None:
        """Replace ``path`` with ``payload`` via a temporary file and rename."""
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise DrawingIOError(
                f"Failed to write file {path.name}: {e}", drawing_id=drawing_id, path=path
            ) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise DrawingIOError(
                f"Failed to write file {path.name}: {e}", drawing_id=drawing_id, path=path
            ) from e

    def list_files(self, skip_invalid: Optional[bool] = None) -> List[Drawing]:
        """List all drawings, metadata only. Content files are never read."""
        if skip_invalid is None:
            skip_invalid = self.skip_invalid

        try:
            entries = sorted(
                entry for entry in self.root.iterdir()
                if entry.name.endswith(METADATA_SUFFIX) and entry.is_file()
            )
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to read storage directory {self.root}: {e}", path=self.root
            ) from e

        drawings = []
        for entry in entries:
            try:
                drawings.append(self._read_metadata(entry))
            except (DrawingDecodeError, DrawingNotFoundError) as e:
                if not skip_invalid:
                    raise
                logger.warning(f"Skipping unreadable metadata file {entry.name}: {e}")

        logger.debug(f"Listed {len(drawings)} drawings from {self.root}")
        return drawings

    def get_file(self, drawing_id: str) -> Drawing:
        """Get a drawing by id, including its content."""
        drawing = self._read_metadata(self.metadata_path(drawing_id), drawing_id)

        content_path = self.content_path(drawing_id)
        try:
            raw = content_path.read_bytes()
        except FileNotFoundError as e:
            raise DrawingNotFoundError(
                f"Content file missing for drawing {drawing_id}",
                drawing_id=drawing_id, path=content_path
            ) from e
        except OSError as e:
            raise DrawingIOError(
                f"Failed to read data file {content_path.name}: {e}",
                drawing_id=drawing_id, path=content_path
            ) from e

        # Bytes that are not UTF-8 survive as lone surrogates
        drawing.content = raw.decode("utf-8", errors="surrogateescape")
        return drawing

    def _existing_metadata(self, drawing_id: str) -> Optional[Drawing]:
        """Previous metadata for an id, or None when absent or unreadable."""
        path = self.metadata_path(drawing_id)
        if not path.exists():
            return None
        try:
            return self._read_metadata(path, drawing_id)
        except DrawingNotFoundError:
            return None
        except DrawingDecodeError as e:
            logger.warning(
                f"Existing metadata for drawing {drawing_id} is unreadable, "
                f"creation time will be reset: {e}"
            )
            return None

    def save_file(self, drawing: Drawing) -> Drawing:
        """Create or update a drawing and return the stored record.

        Content is written before metadata. The stored creation time of an
        existing drawing always wins over the one passed in.
        """
        record = drawing.model_copy()
        if not record.id:
            record.id = uuid.uuid4().hex
            logger.debug(f"Assigned new drawing id {record.id}")

        metadata_path = self.metadata_path(record.id)
        content_path = self.content_path(record.id)

        try:
            content = record.content.encode("utf-8", errors="surrogateescape")
        except UnicodeEncodeError as e:
            raise DrawingEncodeError(
                f"Content of drawing {record.id} cannot be encoded: {e}",
                drawing_id=record.id, path=content_path
            ) from e

        existing = self._existing_metadata(record.id)
        if existing is not None:
            record.created_at = existing.created_at  # Preserve created date

        self._write_atomic(content_path, content, record.id)

        now = _now()
        if existing is not None and existing.updated_at and now <= existing.updated_at:
            now = existing.updated_at + datetime.timedelta(microseconds=1)
        if record.created_at is None:
            record.created_at = now
        record.updated_at = now

        payload = json.dumps(record.to_metadata(), indent=2)
        self._write_atomic(metadata_path, payload.encode("utf-8"), record.id)

        logger.info(f"Saved drawing {record.id} ({len(record.content)} chars)")
        record.location = StorageLocation.LOCAL
        return record

    def delete_file(self, drawing_id: str) -> None:
        """Delete both files of a drawing, metadata first."""
        metadata_path = self.metadata_path(drawing_id)
        content_path = self.content_path(drawing_id)

        try:
            backup = metadata_path.read_bytes()
            metadata_path.unlink()
        except FileNotFoundError as e:
            raise DrawingNotFoundError(
                f"Failed to delete file {metadata_path.name}: not found",
                drawing_id=drawing_id, path=metadata_path
            ) from e
        except OSError as e:
            raise DrawingIOError(
                f"Failed to delete file {metadata_path.name}: {e}",
                drawing_id=drawing_id, path=metadata_path
            ) from e

        try:
            content_path.unlink()
        except FileNotFoundError as e:
            logger.warning(f"Drawing {drawing_id} had no content file; metadata removed")
            raise DrawingNotFoundError(
                f"Failed to delete data file {content_path.name}: not found",
                drawing_id=drawing_id, path=content_path
            ) from e
        except OSError as e:
            logger.error(f"Failed to delete data file for {drawing_id}, restoring metadata: {e}")
            self._write_atomic(metadata_path, backup, drawing_id)
            raise DrawingIOError(
                f"Failed to delete data file {content_path.name}: {e}",
                drawing_id=drawing_id, path=content_path
            ) from e

        logger.info(f"Deleted drawing {drawing_id}")

    def duplicate_file(self, drawing_id: str, new_name: Optional[str] = None) -> Drawing:
        """Copy a drawing under a new id."""
        original = self.get_file(drawing_id)
        copy = original.model_copy(update={
            "id": "",
            "name": new_name or f"{original.name} (Copy)",
            "created_at": None,
            "updated_at": None,
        })
        return self.save_file(copy)
