"""
S3-compatible object storage used as a JSON document store.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from databases.base import Database, DatabaseError
from configuration import (
    BUCKET_NAME,
    S3_ENDPOINT,
    AWS_ACCESS_KEY_ID,
    AWS_SECRET_ACCESS_KEY,
    AWS_REGION,
    S3_MAX_POOL_CONNECTIONS,
    REQUEST_TIMEOUT_SECONDS,
    KEY_PREFIX,
)

logger = logging.getLogger(__name__)

# Objects inspected per query before giving up
QUERY_SCAN_LIMIT = 1000


class S3Database(Database):
    """Documents stored as one JSON object per key.

    Queries have no server-side index: they list objects under the key prefix
    and filter them client-side, inspecting at most QUERY_SCAN_LIMIT objects.
    """

    name = "s3"

    def __init__(
        self,
        bucket_name: str = BUCKET_NAME,
        endpoint: Optional[str] = S3_ENDPOINT,
        credentials: Optional[dict] = None,
        region_name: str = AWS_REGION,
    ):
        if credentials is None:
            credentials = {
                "access_key_id": AWS_ACCESS_KEY_ID,
                "secret_access_key": AWS_SECRET_ACCESS_KEY,
            }
        self.bucket_name = bucket_name
        self.endpoint = endpoint or None
        self.credentials = credentials
        self.region_name = region_name
        self.client = None

    def _create_config(self) -> Config:
        return Config(
            max_pool_connections=S3_MAX_POOL_CONNECTIONS,
            connect_timeout=5,
            read_timeout=REQUEST_TIMEOUT_SECONDS,
            retries={
                "max_attempts": 3,
                "mode": "adaptive",
            },
            tcp_keepalive=True,
        )

    def _call(self, action: str, method: str, **kwargs) -> Dict[str, Any]:
        if self.client is None:
            raise DatabaseError("S3 client not initialized, call connect() first")
        try:
            return getattr(self.client, method)(Bucket=self.bucket_name, **kwargs)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
            raise DatabaseError(f"{action} failed: {error_code} (HTTP {status_code})") from e
        except BotoCoreError as e:
            raise DatabaseError(f"{action} failed: {e}") from e

    def connect(self) -> None:
        session = boto3.session.Session(
            aws_access_key_id=self.credentials.get("access_key_id") or None,
            aws_secret_access_key=self.credentials.get("secret_access_key") or None,
            region_name=self.region_name,
        )
        self.client = session.client("s3", endpoint_url=self.endpoint, config=self._create_config())
        self._call("bucket check", "head_bucket")
        logger.info(f"Connected to bucket: {self.bucket_name} (endpoint: {self.endpoint or 'default'})")

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None

    @staticmethod
    def _encode(value: Dict[str, Any]) -> bytes:
        return json.dumps(value, separators=(",", ":")).encode("utf-8")

    def _get(self, key: str, action: str) -> Dict[str, Any]:
        response = self._call(action, "get_object", Key=key)
        try:
            return json.loads(response["Body"].read())
        except ValueError as e:
            raise DatabaseError(f"{action} failed: invalid JSON in {key}") from e

    def create(self, key: str, value: Dict[str, Any]) -> None:
        self._call(
            f"create of {key}", "put_object",
            Key=key, Body=self._encode(value), ContentType="application/json", IfNoneMatch="*",
        )

    def read(self, key: str) -> Dict[str, Any]:
        return self._get(key, f"read of {key}")

    def update(self, key: str, value: Dict[str, Any]) -> None:
        self._call(f"update of {key}", "head_object", Key=key)
        self._call(
            f"update of {key}", "put_object",
            Key=key, Body=self._encode(value), ContentType="application/json",
        )

    def delete(self, key: str) -> None:
        # DeleteObject succeeds for missing keys, so check existence first
        self._call(f"delete of {key}", "head_object", Key=key)
        self._call(f"delete of {key}", "delete_object", Key=key)

    def query(self, field: str, value: Any, limit: int) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        scanned = 0
        continuation_token = None

        while len(results) < limit and scanned < QUERY_SCAN_LIMIT:
            kwargs = {"Prefix": KEY_PREFIX, "MaxKeys": min(QUERY_SCAN_LIMIT - scanned, 1000)}
            if continuation_token:
                kwargs["ContinuationToken"] = continuation_token
            page = self._call(f"query on {field}", "list_objects_v2", **kwargs)

            for item in page.get("Contents", []):
                scanned += 1
                document = self._get(item["Key"], f"query on {field}")
                if document.get(field) == value:
                    results.append(document)
                    if len(results) >= limit:
                        break

            if not page.get("IsTruncated"):
                break
            continuation_token = page.get("NextContinuationToken")

        return results

    def __repr__(self) -> str:
        return f"S3Database(bucket='{self.bucket_name}', endpoint='{self.endpoint}')"
