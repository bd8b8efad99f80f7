"""
Keyed record store with all-or-nothing transactions.

Records live under deterministic keys built from (record type, token id
[, holder id]). A transaction stages its writes in an overlay and applies
them with a single LevelDB write batch on commit, so other readers only
ever observe committed states.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Optional

import msgpack

from burn_boost.db import DB

logger = logging.getLogger(__name__)

TOKEN_DATA_PREFIX = b'TOKEN_DATA:'
USER_DATA_PREFIX = b'USER_DATA:'
MINT_PREFIX = b'MINT:'
ACCOUNT_PREFIX = b'ACCOUNT:'
NONCE_PREFIX = b'NONCE:'


def token_data_key(token_id: bytes) -> bytes:
    return TOKEN_DATA_PREFIX + token_id.hex().encode()


def user_data_prefix(token_id: bytes) -> bytes:
    return USER_DATA_PREFIX + token_id.hex().encode() + b':'


def user_data_key(token_id: bytes, holder: bytes) -> bytes:
    return user_data_prefix(token_id) + holder.hex().encode()


def mint_key(token_id: bytes) -> bytes:
    return MINT_PREFIX + token_id.hex().encode()


def account_key(token_id: bytes, owner: bytes) -> bytes:
    return ACCOUNT_PREFIX + token_id.hex().encode() + b':' + owner.hex().encode()


def nonce_key(address: bytes) -> bytes:
    return NONCE_PREFIX + address.hex().encode()


def encode(record: dict) -> bytes:
    return msgpack.packb(record, use_bin_type=True)


def decode(raw: bytes) -> dict:
    return msgpack.unpackb(raw, raw=False)


class AlreadyExists(Exception):
    """A record was created under a key that is already taken."""

    def __init__(self, key: bytes):
        self.key = key
        super().__init__(f"Record already exists at {key!r}")


class StateTransaction:
    """
    Read-your-writes view over the store for one atomic unit.

    Nothing touches the database until the owning StateStore commits.
    """

    def __init__(self, db: DB):
        self._db = db
        self._writes: dict[bytes, bytes] = {}
        self._commit_callbacks = []

    def get(self, key: bytes) -> Optional[dict]:
        if key in self._writes:
            return decode(self._writes[key])
        raw = self._db.get(key)
        if raw is None:
            return None
        return decode(raw)

    def exists(self, key: bytes) -> bool:
        return key in self._writes or self._db.exists(key)

    def set(self, key: bytes, record: dict):
        self._writes[key] = encode(record)

    def create(self, key: bytes, record: dict):
        if self.exists(key):
            raise AlreadyExists(key)
        self.set(key, record)

    def on_commit(self, callback):
        """Run `callback()` after a successful commit, before the lock is released."""
        self._commit_callbacks.append(callback)

    @property
    def pending(self) -> int:
        return len(self._writes)

    def _flush(self):
        if not self._writes:
            return
        with self._db.write_batch() as batch:
            for key, value in self._writes.items():
                batch.put(key, value)


class StateStore:
    """
    Persistence substrate: create / read / atomic update.

    Transactions sharing a lock key are serialized; different lock keys
    proceed independently.
    """

    def __init__(self, db: DB):
        self.db = db
        # lock_key -> [lock, number of transactions using it]
        self._locks: dict[bytes, list] = {}
        self._locks_guard = threading.Lock()

    def _acquire_lock_entry(self, lock_key: bytes) -> threading.Lock:
        with self._locks_guard:
            entry = self._locks.get(lock_key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[lock_key] = entry
            entry[1] += 1
            return entry[0]

    def _release_lock_entry(self, lock_key: bytes):
        with self._locks_guard:
            entry = self._locks[lock_key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[lock_key]

    def read(self, key: bytes) -> Optional[dict]:
        raw = self.db.get(key)
        if raw is None:
            return None
        return decode(raw)

    def read_prefix(self, prefix: bytes) -> list[tuple[bytes, dict]]:
        return [(key, decode(value)) for key, value in self.db.get_prefix(prefix)]

    def create(self, key: bytes, record: dict):
        with self.transaction(key) as txn:
            txn.create(key, record)

    @contextmanager
    def transaction(self, lock_key: bytes):
        """
        Run a block as one all-or-nothing unit.

        Example:
            with store.transaction(token_data_key(token_id)) as txn:
                state = txn.get(token_data_key(token_id))
                ...
                txn.set(token_data_key(token_id), state)

        Any exception raised inside the block discards every staged write.
        """
        lock = self._acquire_lock_entry(lock_key)
        try:
            with lock:
                txn = StateTransaction(self.db)
                try:
                    yield txn
                except Exception as e:
                    logger.debug(f"Transaction on {lock_key!r} aborted, {txn.pending} writes discarded: {e}")
                    raise
                txn._flush()
                logger.debug(f"Transaction on {lock_key!r} committed {txn.pending} writes")
                for callback in txn._commit_callbacks:
                    callback()
        finally:
            self._release_lock_entry(lock_key)
