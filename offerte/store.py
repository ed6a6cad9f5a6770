# offerte/store.py
# In-memory record store. Stands in for the persistence layer: tables of
# dict records with unique ids, match queries, single-field patches and
# per-key locks for read-modify-write sequences.

from __future__ import annotations

import copy
import threading
import uuid
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Iterator

from .errors import StoreError


class RecordStore:
    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.RLock()
        # key -> [lock, holders + waiters]; an entry lives only while in use
        self._key_locks: dict[tuple, list] = {}

    # ---------- WRITES ----------

    def insert(self, table: str, record: dict[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        with self._lock:
            self._tables[table][record_id] = {**copy.deepcopy(record), "id": record_id}
        return record_id

    def patch(self, table: str, record_id: str, **fields: Any) -> None:
        with self._lock:
            record = self._tables[table].get(record_id)
            if record is None:
                raise StoreError(f"{table}/{record_id} not found")
            record.update(copy.deepcopy(fields))

    def delete(self, table: str, record_id: str) -> None:
        with self._lock:
            if self._tables[table].pop(record_id, None) is None:
                raise StoreError(f"{table}/{record_id} not found")

    # ---------- READS ----------

    def get(self, table: str, record_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._tables[table].get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def query(self, table: str, **match: Any) -> list[dict[str, Any]]:
        """Records whose fields equal every keyword; None matches an unset field."""
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._tables[table].values()
                if all(r.get(k) == v for k, v in match.items())
            ]

    def first(self, table: str, **match: Any) -> dict[str, Any] | None:
        found = self.query(table, **match)
        return found[0] if found else None

    def unique(self, table: str, **match: Any) -> dict[str, Any] | None:
        found = self.query(table, **match)
        if len(found) > 1:
            raise StoreError(f"{table}: {len(found)} records match {match}, expected at most one")
        return found[0] if found else None

    def count(self, table: str) -> int:
        with self._lock:
            return len(self._tables[table])

    # ---------- LOCKING ----------

    @contextmanager
    def key_lock(self, *key: Any) -> Iterator[None]:
        """Serialize read-modify-write sequences on one logical key."""
        with self._lock:
            entry = self._key_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[key]

    def active_locks(self) -> int:
        with self._lock:
            return len(self._key_locks)
