"""
Base class for workload generators.
"""

import hashlib
import logging
import random
import string
import threading
from typing import Any, Dict, Sequence, Tuple

from configuration import (
    KEY_PREFIX,
    KEY_HASH_LENGTH,
    FIELD_CARDINALITY,
    MIN_QUERY_LIMIT,
    MAX_QUERY_LIMIT,
)

logger = logging.getLogger(__name__)

BODY_ALPHABET = string.ascii_letters + string.digits


class KeyspaceEmptyError(RuntimeError):
    """Raised when an existing key is requested before any record exists."""


def hash_key(sequence_number: int) -> str:
    """Map a record sequence number to its document key."""
    digest = hashlib.md5(str(sequence_number).encode()).hexdigest()
    return f"{KEY_PREFIX}-{digest[:KEY_HASH_LENGTH]}"


def field_value(key: str, field_name: str) -> str:
    """Deterministic value of an indexable field for a given key.

    Values repeat across keys (FIELD_CARDINALITY distinct values per field),
    so queries can match more than one document.
    """
    digest = hashlib.md5(f"{key}:{field_name}".encode()).hexdigest()
    return f"{field_name}-{int(digest, 16) % FIELD_CARDINALITY}"


class Workload:
    """Generates keys, documents and query parameters for the executor.

    Records are numbered from 1 as they are created. The executor passes the
    current record count; subclasses decide which existing record to touch.
    Instances are shared by all worker threads.
    """

    name = "base"

    def __init__(self, seed: int = None):
        self.deleted_records = 0
        self._random = random.Random(seed)
        self._lock = threading.Lock()

    # ---- Selection policy (subclasses) -------------------------------------

    def pick_existing_record(self, lower: int, upper: int) -> int:
        """Choose a sequence number in the closed range [lower, upper]."""
        raise NotImplementedError

    # ---- Keys --------------------------------------------------------------

    def generate_new_key(self, sequence_number: int) -> str:
        return hash_key(sequence_number)

    def generate_existing_key(self, record_count: int) -> str:
        if record_count < 1:
            raise KeyspaceEmptyError("no records have been created yet")
        with self._lock:
            # Once everything is deleted fall back to the newest record
            lower = min(self.deleted_records + 1, record_count)
            sequence_number = self.pick_existing_record(lower, record_count)
        return hash_key(sequence_number)

    def generate_key_for_removal(self) -> str:
        """Oldest record first."""
        with self._lock:
            self.deleted_records += 1
            sequence_number = self.deleted_records
        return hash_key(sequence_number)

    # ---- Values ------------------------------------------------------------

    def generate_value(self, key: str, indexable_fields: Sequence[str],
                       target_size: int) -> Dict[str, Any]:
        """Build a document with indexable fields padded to about target_size bytes."""
        document: Dict[str, Any] = {name: field_value(key, name) for name in indexable_fields}
        overhead = sum(len(name) + len(value) for name, value in document.items())
        with self._lock:
            body = "".join(self._random.choices(BODY_ALPHABET, k=max(target_size - overhead, 0)))
        document["body"] = body
        return document

    def generate_query(self, indexable_fields: Sequence[str],
                       record_count: int) -> Tuple[str, Any, int]:
        if not indexable_fields:
            raise ValueError("no indexable fields to query")
        key = self.generate_existing_key(record_count)
        with self._lock:
            field_name = self._random.choice(list(indexable_fields))
            limit = self._random.randint(MIN_QUERY_LIMIT, MAX_QUERY_LIMIT)
        return field_name, field_value(key, field_name), limit

    def __repr__(self) -> str:
        return f"{type(self).__name__}(deleted_records={self.deleted_records})"
