"""
Tests for the CouchDB backend with the HTTP session mocked out.
"""

import unittest
import sys
import os
from unittest.mock import Mock, patch

import requests

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from databases.base import DatabaseError
from databases.couchdb import CouchDBDatabase


def response(status_code, json_body=None, headers=None):
    mock = Mock()
    mock.status_code = status_code
    mock.reason = "reason"
    mock.headers = headers or {}
    mock.json.return_value = json_body
    return mock


class TestCouchDBDatabase(unittest.TestCase):
    """Test request construction and status handling."""

    def setUp(self):
        patcher = patch('databases.couchdb.requests.Session')
        self.mock_session_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.session = Mock()
        self.mock_session_class.return_value = self.session

        self.db = CouchDBDatabase("db.local", port=5984, database="bench", username="admin", password="pw")
        self.base = "http://db.local:5984/bench"

    def test_connect_creates_database(self):
        self.session.request.side_effect = [response(200), response(201)]
        self.db.connect()

        calls = self.session.request.call_args_list
        self.assertEqual(calls[0].args, ("GET", "http://db.local:5984"))
        self.assertEqual(calls[1].args, ("PUT", self.base))
        self.assertEqual(self.session.auth, ("admin", "pw"))

    def test_connect_existing_database(self):
        self.session.request.side_effect = [response(200), response(412)]
        self.db.connect()

    def test_connect_server_unreachable(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(DatabaseError):
            self.db.connect()

    def test_connect_unauthorized(self):
        self.session.request.side_effect = [response(200), response(401)]
        with self.assertRaises(DatabaseError):
            self.db.connect()

    def test_create(self):
        self.session.request.return_value = response(201)
        self.db.create("doc-abc", {"city": "Berlin"})

        call = self.session.request.call_args
        self.assertEqual(call.args, ("PUT", f"{self.base}/doc-abc"))
        self.assertEqual(call.kwargs["json"], {"city": "Berlin"})

    def test_create_conflict(self):
        self.session.request.return_value = response(409)
        with self.assertRaises(DatabaseError):
            self.db.create("doc-abc", {})

    def test_read(self):
        self.session.request.return_value = response(200, {"_id": "doc-abc", "city": "Berlin"})
        self.assertEqual(self.db.read("doc-abc")["city"], "Berlin")

    def test_read_missing(self):
        self.session.request.return_value = response(404)
        with self.assertRaises(DatabaseError):
            self.db.read("doc-abc")

    def test_update_sends_revision(self):
        self.session.request.side_effect = [
            response(200, headers={"ETag": '"1-abc"'}),
            response(201),
        ]
        self.db.update("doc-abc", {"city": "Munich"})

        head, put = self.session.request.call_args_list
        self.assertEqual(head.args[0], "HEAD")
        self.assertEqual(put.args[0], "PUT")
        self.assertEqual(put.kwargs["json"], {"city": "Munich", "_rev": "1-abc"})

    def test_update_missing(self):
        self.session.request.return_value = response(404)
        with self.assertRaises(DatabaseError):
            self.db.update("doc-abc", {})

    def test_delete_sends_revision(self):
        self.session.request.side_effect = [
            response(200, headers={"ETag": '"2-def"'}),
            response(200),
        ]
        self.db.delete("doc-abc")

        delete = self.session.request.call_args_list[1]
        self.assertEqual(delete.args, ("DELETE", f"{self.base}/doc-abc"))
        self.assertEqual(delete.kwargs["params"], {"rev": "2-def"})

    def test_query(self):
        self.session.request.return_value = response(200, {"docs": [{"city": "city-7"}]})
        results = self.db.query("city", "city-7", 10)

        call = self.session.request.call_args
        self.assertEqual(call.args, ("POST", f"{self.base}/_find"))
        self.assertEqual(call.kwargs["json"], {"selector": {"city": "city-7"}, "limit": 10})
        self.assertEqual(results, [{"city": "city-7"}])

    def test_session_per_thread(self):
        """Sessions are reused within a thread and closed on close()."""
        self.session.request.return_value = response(200, {})
        self.db.read("a")
        self.db.read("b")
        self.assertEqual(self.mock_session_class.call_count, 1)

        self.db.close()
        self.session.close.assert_called_once()


if __name__ == '__main__':
    unittest.main()
