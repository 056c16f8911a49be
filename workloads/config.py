"""
Workload configuration: immutable run parameters and their JSON loader.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Tuple

from configuration import (
    CREATE,
    READ,
    UPDATE,
    DELETE,
    QUERY,
    DEFAULT_WORKERS,
    DEFAULT_VALUE_SIZE,
    DEFAULT_WORKLOAD,
    DEFAULT_INDEXABLE_FIELDS,
)

logger = logging.getLogger(__name__)

# CamelCase keys accepted in workload files
CAMEL_CASE_KEYS: Dict[str, str] = {
    "Operations": "operations",
    "CreatePercentage": "create_percentage",
    "ReadPercentage": "read_percentage",
    "UpdatePercentage": "update_percentage",
    "DeletePercentage": "delete_percentage",
    "QueryPercentage": "query_percentage",
    "IndexableFields": "indexable_fields",
    "ValueSize": "value_size",
    "Workers": "workers",
    "Records": "records",
    "Type": "workload",
}

INTEGER_FIELDS = (
    "operations",
    "create_percentage",
    "read_percentage",
    "update_percentage",
    "delete_percentage",
    "query_percentage",
    "value_size",
    "workers",
    "records",
)


class ConfigurationError(ValueError):
    """Raised when a workload configuration cannot drive a run."""


@dataclass(frozen=True)
class WorkloadConfig:
    """Parameters of a single benchmark run.

    A percentage only decides whether an operation kind takes part in every
    iteration (> 0) or never does (0); it is not a sampling weight.
    """

    operations: int
    create_percentage: int = 0
    read_percentage: int = 0
    update_percentage: int = 0
    delete_percentage: int = 0
    query_percentage: int = 0
    indexable_fields: Tuple[str, ...] = field(default=DEFAULT_INDEXABLE_FIELDS)
    value_size: int = DEFAULT_VALUE_SIZE
    workers: int = DEFAULT_WORKERS
    records: int = 0
    workload: str = DEFAULT_WORKLOAD

    def __post_init__(self):
        # Accept any iterable of field names, store an immutable tuple
        indexable_fields = self.indexable_fields
        if isinstance(indexable_fields, str):
            indexable_fields = (indexable_fields,)
        object.__setattr__(self, "indexable_fields", tuple(indexable_fields))

    @property
    def percentages(self) -> Dict[str, int]:
        return {
            CREATE: self.create_percentage,
            READ: self.read_percentage,
            UPDATE: self.update_percentage,
            DELETE: self.delete_percentage,
            QUERY: self.query_percentage,
        }

    def includes(self, kind: str) -> bool:
        """Whether the operation kind runs on every iteration."""
        return self.percentages[kind] > 0

    def validate(self) -> None:
        """Check the configuration can drive a run.

        Raises:
            ConfigurationError: On wrongly typed or negative values, no
                workers, or a run that needs existing records while nothing
                creates them
        """
        for name in INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if not isinstance(self.workload, str):
            raise ConfigurationError(f"workload must be a string, got {self.workload!r}")
        for name in self.indexable_fields:
            if not isinstance(name, str):
                raise ConfigurationError(f"indexable field names must be strings, got {name!r}")

        if self.operations < 0:
            raise ConfigurationError(f"operations must be >= 0, got {self.operations}")
        for kind, percentage in self.percentages.items():
            if percentage < 0:
                raise ConfigurationError(f"{kind} percentage must be >= 0, got {percentage}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        if self.value_size < 0:
            raise ConfigurationError(f"value_size must be >= 0, got {self.value_size}")
        if self.records < 0:
            raise ConfigurationError(f"records must be >= 0, got {self.records}")
        if self.includes(QUERY) and not self.indexable_fields:
            raise ConfigurationError("queries are enabled but no indexable fields are configured")

        needs_records = any(self.includes(kind) for kind in (READ, UPDATE, DELETE, QUERY))
        if (self.operations > 0 and needs_records
                and not self.includes(CREATE) and self.records == 0):
            raise ConfigurationError(
                "read/update/delete/query need existing records: "
                "enable creates or set the initial record count"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkloadConfig":
        """Build a config from snake_case or CamelCase keys."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown workload setting: {key}")
                continue
            kwargs[name] = value

        if "operations" not in kwargs:
            raise ConfigurationError("workload configuration must set Operations")
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigurationError(f"invalid workload configuration: {e}") from e

    @classmethod
    def from_file(cls, path: str) -> "WorkloadConfig":
        """Load a JSON workload file.

        The file holds either the workload object itself or a top-level
        object with a "Workload" section.
        """
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"cannot read workload file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"workload file {path} must contain a JSON object")
        section = data.get("Workload", data)
        logger.info(f"Loaded workload configuration from {path}")
        return cls.from_dict(section)
