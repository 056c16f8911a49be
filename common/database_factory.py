"""
Factory module for creating database backend instances.
"""

import logging

# Suppress noisy client library logging before the backends import them
logging.getLogger('botocore').setLevel(logging.CRITICAL)
logging.getLogger('boto3').setLevel(logging.CRITICAL)
logging.getLogger('urllib3').setLevel(logging.WARNING)
logging.getLogger('s3transfer').setLevel(logging.CRITICAL)

from databases.base import Database
from databases.memory import MemoryDatabase
from databases.couchdb import CouchDBDatabase
from databases.s3 import S3Database
from configuration import (
    DEFAULT_HOSTNAME,
    COUCHDB_PORT,
    BUCKET_NAME,
    S3_ENDPOINT,
)

logger = logging.getLogger(__name__)

DATABASE_TYPES = ("memory", "couchdb", "s3")


def create_database(database_type: str, hostname: str = DEFAULT_HOSTNAME,
                    bucket_name: str = None) -> Database:
    """Create and return the appropriate database backend based on type.

    Args:
        database_type: Backend type ('memory', 'couchdb' or 's3')
        hostname: Database server hostname (CouchDB)
        bucket_name: Bucket to store documents in (S3, default: from configuration)

    Returns:
        Database instance, not yet connected

    Raises:
        ValueError: If database_type is not supported
    """
    database_type = database_type.lower()

    if database_type == "memory":
        return MemoryDatabase()

    elif database_type == "couchdb":
        logger.debug(f"Creating CouchDB backend for {hostname}:{COUCHDB_PORT}")
        return CouchDBDatabase(hostname)

    elif database_type == "s3":
        logger.debug(f"Creating S3 backend for bucket {bucket_name or BUCKET_NAME}")
        return S3Database(bucket_name=bucket_name or BUCKET_NAME, endpoint=S3_ENDPOINT)

    else:
        raise ValueError(
            f"Unsupported database type: {database_type}. Must be one of {', '.join(DATABASE_TYPES)}."
        )
