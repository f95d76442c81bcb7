"""Base class for stores persisted as full binary snapshots."""

import contextlib
import os
from pathlib import Path
from typing import BinaryIO, Dict, Generic, List, Optional, TypeVar, Union

from .codec import BinaryRecordCodec
from ..utils.exceptions import StorageError
from ..utils.logger import get_storage_logger


T = TypeVar("T")


class SnapshotStore(Generic[T]):
    """
    Keyed in-memory collection persisted as one snapshot file.

    Subclasses provide the record codec hooks and the key of a record.
    Mutations go through ``_commit``: the new mapping is written to disk
    first and only then replaces the in-memory mapping, so a failed write
    leaves both untouched.
    """

    record_label = "record"

    def __init__(self, path: Union[str, Path], codec: Optional[BinaryRecordCodec] = None):
        """
        Initialize the store without loading it.

        Args:
            path: Snapshot file path
            codec: Optional codec instance
        """
        self.path = Path(path)
        self.codec = codec or BinaryRecordCodec()
        self.storage_logger = get_storage_logger()
        self._records: Dict[str, T] = {}

    def _encode_record(self, stream: BinaryIO, record: T):
        raise NotImplementedError

    def _decode_record(self, stream: BinaryIO) -> T:
        raise NotImplementedError

    def _key(self, record: T) -> str:
        raise NotImplementedError

    def load(self) -> int:
        """
        Replace in-memory state with the snapshot on disk.

        A missing file is an empty store. The in-memory state is only
        replaced once the whole file has been decoded.

        Returns:
            Number of records loaded

        Raises:
            StorageError: If the file cannot be read or does not decode
        """
        if not self.path.exists():
            self.storage_logger.info(f"No {self.record_label} file at {self.path}, starting empty")
            self._records = {}
            return 0

        try:
            with open(self.path, "rb") as f:
                records = self.codec.read_snapshot(f, self._decode_record)
                trailing = f.read(1)
        except StorageError as e:
            self.storage_logger.error(f"Failed to load {self.path}: {e.message}")
            raise
        except OSError as e:
            self.storage_logger.error(f"Unable to read {self.path}: {e}")
            raise StorageError(
                f"Unable to open {self.path} for reading",
                details={"path": str(self.path), "error": str(e)}
            )

        if trailing:
            self.storage_logger.warning(f"Ignoring trailing data after last record in {self.path}")

        loaded: Dict[str, T] = {}
        for record in records:
            key = self._key(record)
            if key in loaded:
                self.storage_logger.warning(f"Duplicate {self.record_label} key {key!r} in {self.path}, keeping last")
            loaded[key] = record

        self._records = loaded
        self.storage_logger.info(f"Loaded {len(loaded)} {self.record_label}(s) from {self.path}")
        return len(loaded)

    def save(self):
        """
        Rewrite the snapshot from the current in-memory state.

        Raises:
            StorageError: If the file cannot be written
        """
        self._write_snapshot(self._records)

    def _write_snapshot(self, records: Dict[str, T]):
        data = self.codec.encode_snapshot(
            [records[key] for key in sorted(records)],
            self._encode_record
        )
        tmp_path = self.path.with_name(self.path.name + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            self.storage_logger.error(f"Unable to write {self.path}: {e}")
            raise StorageError(
                f"Unable to open {self.path} for writing",
                details={"path": str(self.path), "error": str(e)}
            )

        self.storage_logger.debug(f"Saved {len(records)} {self.record_label}(s) to {self.path}")

    def _commit(self, records: Dict[str, T]):
        """Persist a new mapping, then make it the in-memory state."""
        self._write_snapshot(records)
        self._records = records

    def _sorted_records(self) -> List[T]:
        return [self._records[key] for key in sorted(self._records)]

    def count(self) -> int:
        """Number of records in the store."""
        return len(self._records)

    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records
