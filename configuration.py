"""
Configuration constants for the docbench load harness.

This module contains all configuration parameters including:
- Operation kinds and their error codes
- Load shape (iteration cadence, throughput report interval)
- Workload defaults (document size, worker count, query limits)
- Latency histogram bounds and reported percentiles
- Database backend endpoints and credentials
"""

import os
from typing import Dict, Tuple

# =============================================================================
# OPERATION KINDS
# =============================================================================

CREATE: str = "Create"
READ: str = "Read"
UPDATE: str = "Update"
DELETE: str = "Delete"
QUERY: str = "Query"

# Fixed per-iteration execution order
OPERATION_KINDS: Tuple[str, ...] = (CREATE, READ, UPDATE, DELETE, QUERY)

# Single-letter error codes used in the errors map
ERROR_CODES: Dict[str, str] = {
    CREATE: "c",
    READ: "r",
    UPDATE: "u",
    DELETE: "d",
    QUERY: "q",
}
TOTAL_ERRORS_KEY: str = "total"

# Named milestones bracketing a run
EVENT_STARTED: str = "Started"
EVENT_FINISHED: str = "Finished"

# =============================================================================
# LOAD SHAPE
# =============================================================================

ITERATION_SLEEP_SECONDS: float = 1.0  # Pause after each operation-mix iteration
THROUGHPUT_REPORT_INTERVAL_SECONDS: float = 10.0  # Throughput line cadence

# =============================================================================
# WORKLOAD DEFAULTS
# =============================================================================

DEFAULT_WORKERS: int = 1
DEFAULT_DOCUMENTS: int = 1000
DEFAULT_VALUE_SIZE: int = 512  # Average document size in bytes
DEFAULT_WORKLOAD: str = "default"
DEFAULT_INDEXABLE_FIELDS: Tuple[str, ...] = ("name", "city", "country")

KEY_PREFIX: str = "doc"
KEY_HASH_LENGTH: int = 12

FIELD_CARDINALITY: int = 1000  # Distinct values per indexable field
MIN_QUERY_LIMIT: int = 10
MAX_QUERY_LIMIT: int = 20

# Hot spot workload: HOT_SPOT_ACCESS_PERCENTAGE of accesses land on the
# most recent HOT_DATA_PERCENTAGE of records
HOT_DATA_PERCENTAGE: int = 20
HOT_SPOT_ACCESS_PERCENTAGE: int = 80

# =============================================================================
# LATENCY HISTOGRAM
# =============================================================================

NANOSECONDS_PER_SECOND: int = 1_000_000_000
HISTOGRAM_LOWEST_NS: int = 1
HISTOGRAM_HIGHEST_NS: int = 60 * 60 * NANOSECONDS_PER_SECOND  # One hour
HISTOGRAM_SIGNIFICANT_FIGURES: int = 3

SUMMARY_PERCENTILES: Tuple[float, ...] = (0.8, 0.9, 0.95)

# =============================================================================
# DATABASE BACKENDS
# =============================================================================

DEFAULT_DATABASE: str = "memory"
DEFAULT_HOSTNAME: str = "127.0.0.1"
REQUEST_TIMEOUT_SECONDS: int = 30

# CouchDB document API
COUCHDB_PORT: int = int(os.getenv("COUCHDB_PORT", "5984"))
COUCHDB_DATABASE: str = os.getenv("COUCHDB_DATABASE", "docbench")
COUCHDB_USER: str = os.getenv("COUCHDB_USER", "")
COUCHDB_PASSWORD: str = os.getenv("COUCHDB_PASSWORD", "")

# S3-compatible object storage
BUCKET_NAME: str = os.getenv("BUCKET_NAME", "docbench")
S3_ENDPOINT: str = os.getenv("S3_ENDPOINT", "")
AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_REGION: str = os.getenv("AWS_REGION", "eu-north-1")
S3_MAX_POOL_CONNECTIONS: int = 100
