"""
LevelDB storage wrapper for burn/boost records.
"""
import plyvel
import logging
from typing import Optional
from contextlib import contextmanager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class DB:
    def __init__(self, db_path: str, create_if_missing: bool = True,
                 write_buffer_size: int = 4 * 1024 * 1024,  # 4MB
                 max_open_files: int = 1000,
                 compression: Optional[str] = 'snappy'):
        """
        Open (or create) the record database.

        Args:
            db_path: Path to database directory
            create_if_missing: Create database if it doesn't exist
            write_buffer_size: Size of write buffer
            max_open_files: Maximum number of open files
            compression: LevelDB block compression ('snappy' or None)
        """
        self.path = db_path
        try:
            self._db = plyvel.DB(
                db_path,
                create_if_missing=create_if_missing,
                write_buffer_size=write_buffer_size,
                max_open_files=max_open_files,
                compression=compression,
            )
            self._closed = False
            logger.info(f"Database opened at {db_path}")
        except Exception as e:
            logger.error(f"Failed to open database at {db_path}: {e}")
            raise

    def _ensure_open(self):
        if self._closed:
            raise RuntimeError("Database is closed")

    def get(self, key: bytes) -> Optional[bytes]:
        """
        Get value by key.

        Returns None if key doesn't exist.
        """
        self._ensure_open()
        try:
            return self._db.get(key)
        except Exception as e:
            logger.error(f"Error reading {key!r}: {e}")
            raise

    def put(self, key: bytes, value: bytes):
        self._ensure_open()
        try:
            self._db.put(key, value)
        except Exception as e:
            logger.error(f"Error writing {key!r}: {e}")
            raise

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    @contextmanager
    def write_batch(self):
        """
        Context manager for an all-or-nothing group of writes.

        The batch is only written if the block exits cleanly.

        Example:
            with db.write_batch() as batch:
                batch.put(b'TOKEN_DATA:..', record)
                batch.put(b'USER_DATA:..', ledger)
        """
        self._ensure_open()

        batch = self._db.write_batch(transaction=True)
        try:
            yield batch
            batch.write()
        except Exception as e:
            logger.error(f"Batch write aborted: {e}")
            raise
        finally:
            batch.clear()

    def get_prefix(self, prefix: bytes) -> list[tuple[bytes, bytes]]:
        """
        Get all key-value pairs with a given prefix.

        Args:
            prefix: Key prefix to search for

        Returns:
            List of (key, value) tuples in key order
        """
        self._ensure_open()

        try:
            return list(self._db.iterator(prefix=prefix))
        except Exception as e:
            logger.error(f"Error scanning prefix {prefix!r}: {e}")
            raise

    def close(self):
        if not self._closed:
            try:
                self._db.close()
                self._closed = True
                logger.info("Database closed")
            except Exception as e:
                logger.error(f"Error closing database: {e}")
                raise

    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
