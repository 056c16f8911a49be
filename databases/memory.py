"""
In-process document store, useful for dry runs and tests.
"""

import copy
import logging
import threading
from typing import Any, Dict, List

from databases.base import Database, DatabaseError

logger = logging.getLogger(__name__)


class MemoryDatabase(Database):
    """Thread-safe dictionary-backed document store."""

    name = "memory"

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def connect(self) -> None:
        logger.info("Using in-memory document store")

    def close(self) -> None:
        with self._lock:
            logger.debug(f"Closing in-memory store with {len(self._documents)} documents")

    def create(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            if key in self._documents:
                raise DatabaseError(f"Document already exists: {key}")
            self._documents[key] = copy.deepcopy(value)

    def read(self, key: str) -> Dict[str, Any]:
        with self._lock:
            try:
                return copy.deepcopy(self._documents[key])
            except KeyError:
                raise DatabaseError(f"Document not found: {key}") from None

    def update(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            if key not in self._documents:
                raise DatabaseError(f"Document not found: {key}")
            self._documents[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            if self._documents.pop(key, None) is None:
                raise DatabaseError(f"Document not found: {key}")

    def query(self, field: str, value: Any, limit: int) -> List[Dict[str, Any]]:
        if limit < 0:
            raise DatabaseError(f"Invalid query limit: {limit}")
        results = []
        with self._lock:
            for document in self._documents.values():
                if len(results) >= limit:
                    break
                if document.get(field) == value:
                    results.append(copy.deepcopy(document))
        return results

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._documents
