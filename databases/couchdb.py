"""
CouchDB document store driven through its HTTP document API.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.utils import quote

from databases.base import Database, DatabaseError
from configuration import (
    COUCHDB_PORT,
    COUCHDB_DATABASE,
    COUCHDB_USER,
    COUCHDB_PASSWORD,
    REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_NOT_FOUND = 404
HTTP_PRECONDITION_FAILED = 412


class CouchDBDatabase(Database):
    """CouchDB backend with one HTTP session per worker thread."""

    name = "couchdb"

    def __init__(
        self,
        hostname: str,
        port: int = COUCHDB_PORT,
        database: str = COUCHDB_DATABASE,
        username: str = COUCHDB_USER,
        password: str = COUCHDB_PASSWORD,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.server_url = f"http://{hostname}:{port}"
        self.database_url = f"{self.server_url}/{quote(database, safe='')}"
        self.database = database
        self.timeout = timeout
        self._auth: Optional[Tuple[str, str]] = (username, password) if username else None

        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.auth = self._auth
            session.headers.update({"Accept": "application/json"})
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self._session().request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise DatabaseError(f"{method} {url} failed: {e}") from e

    def _document_url(self, key: str) -> str:
        return f"{self.database_url}/{quote(key, safe='')}"

    @staticmethod
    def _check(response: requests.Response, expected: Tuple[int, ...], action: str) -> None:
        if response.status_code not in expected:
            raise DatabaseError(
                f"{action} failed: HTTP {response.status_code} {response.reason}"
            )

    def _revision(self, key: str) -> str:
        """Fetch the current revision of a document from its ETag."""
        response = self._request("HEAD", self._document_url(key))
        self._check(response, (HTTP_OK,), f"revision lookup of {key}")
        etag = response.headers.get("ETag", "")
        return etag.strip('"')

    def connect(self) -> None:
        logger.info(f"Connecting to CouchDB at {self.server_url}")
        response = self._request("GET", self.server_url)
        self._check(response, (HTTP_OK,), "server check")

        response = self._request("PUT", self.database_url)
        if response.status_code == HTTP_PRECONDITION_FAILED:
            logger.info(f"Using existing database: {self.database}")
        else:
            self._check(response, (HTTP_CREATED, HTTP_ACCEPTED), f"creation of database {self.database}")
            logger.info(f"Created database: {self.database}")

    def close(self) -> None:
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
        logger.debug("Closed CouchDB sessions")

    def create(self, key: str, value: Dict[str, Any]) -> None:
        response = self._request("PUT", self._document_url(key), json=value)
        self._check(response, (HTTP_CREATED, HTTP_ACCEPTED), f"create of {key}")

    def read(self, key: str) -> Dict[str, Any]:
        response = self._request("GET", self._document_url(key))
        self._check(response, (HTTP_OK,), f"read of {key}")
        return response.json()

    def update(self, key: str, value: Dict[str, Any]) -> None:
        document = dict(value, _rev=self._revision(key))
        response = self._request("PUT", self._document_url(key), json=document)
        self._check(response, (HTTP_CREATED, HTTP_ACCEPTED), f"update of {key}")

    def delete(self, key: str) -> None:
        revision = self._revision(key)
        response = self._request("DELETE", self._document_url(key), params={"rev": revision})
        self._check(response, (HTTP_OK, HTTP_ACCEPTED), f"delete of {key}")

    def query(self, field: str, value: Any, limit: int) -> List[Dict[str, Any]]:
        payload = {"selector": {field: value}, "limit": limit}
        response = self._request("POST", f"{self.database_url}/_find", json=payload)
        self._check(response, (HTTP_OK,), f"query on {field}")
        return response.json().get("docs", [])

    def __repr__(self) -> str:
        return f"CouchDBDatabase(url='{self.database_url}')"
