"""
Base class for document database backends driven by the benchmark.
"""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when a backend cannot be initialised or an operation fails."""


class Database:
    """Capability interface the operation-mix executor drives.

    Every operation either returns normally or raises DatabaseError. Backends
    are shared by all worker threads, so implementations must be thread-safe.
    """

    name = "base"

    def connect(self) -> None:
        """Open connections and make sure the target collection exists.

        Raises:
            DatabaseError: If the backend cannot be reached or configured
        """

    def close(self) -> None:
        """Release connections held by the backend."""

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def create(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def read(self, key: str) -> Dict[str, Any]:
        raise NotImplementedError

    def update(self, key: str, value: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def query(self, field: str, value: Any, limit: int) -> List[Dict[str, Any]]:
        """Return up to limit documents whose field equals value."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
