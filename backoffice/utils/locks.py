import threading
from typing import Dict
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)

class TableLockManager:
    """
    Serialises imports that target the same table.

    Two concurrent imports into one catalog would otherwise interleave their
    replace-mode deletes and batched upserts. Imports into different tables
    never wait on each other.
    """
    _locks: Dict[str, threading.Lock] = {}
    _global_lock = threading.Lock()

    @classmethod
    def get_lock(cls, table_name: str) -> threading.Lock:
        """Get or create the lock for a table."""
        with cls._global_lock:
            if table_name not in cls._locks:
                cls._locks[table_name] = threading.Lock()
            return cls._locks[table_name]

    @classmethod
    def is_locked(cls, table_name: str) -> bool:
        with cls._global_lock:
            lock = cls._locks.get(table_name)
        return bool(lock and lock.locked())

    @classmethod
    @contextmanager
    def acquire(cls, table_name: str):
        """Hold the table lock for the duration of the block."""
        lock = cls.get_lock(table_name)
        if lock.locked():
            logger.info("Import into '%s' is waiting for a running import to finish", table_name)
        lock.acquire()
        logger.debug("Acquired import lock for table '%s'", table_name)
        try:
            yield
        finally:
            lock.release()
            logger.debug("Released import lock for table '%s'", table_name)
