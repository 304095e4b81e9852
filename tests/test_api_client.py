"""
Tests for the REST client and the persisted session token
"""
import shutil
import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import MagicMock

import requests
from PyQt5.QtCore import QSettings

from pharmabill.data.api_client import ApiClient
from pharmabill.data.session import SessionStore
from pharmabill.errors import NotFoundError, TransientApiError


def fake_response(status=200, payload=None, reason="OK"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.reason = reason
    if payload is None:
        response.content = b""
        response.json.side_effect = ValueError("no body")
    else:
        response.content = b"{}"
        response.json.return_value = payload
    return response


class SessionStoreTests(TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.path = str(Path(self.tmp) / "session.ini")

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def make_store(self):
        return SessionStore(QSettings(self.path, QSettings.IniFormat))

    def test_no_token_by_default(self):
        store = self.make_store()
        self.assertFalse(store.init_from_persisted())
        self.assertEqual(store.auth_header(), {})

    def test_set_persists_across_instances(self):
        self.make_store().set("abc123")
        restored = self.make_store()
        self.assertTrue(restored.init_from_persisted())
        self.assertEqual(restored.auth_header(), {"Authorization": "Bearer abc123"})

    def test_clear_removes_persisted_token(self):
        store = self.make_store()
        store.set("abc123")
        store.clear()
        self.assertIsNone(store.token)
        self.assertFalse(self.make_store().init_from_persisted())

    def test_empty_token_is_ignored(self):
        store = self.make_store()
        store.set("")
        self.assertFalse(store.is_authenticated)


class ApiClientTests(TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.session = SessionStore(QSettings(str(Path(self.tmp) / "s.ini"), QSettings.IniFormat))
        self.http = MagicMock(spec=requests.Session)
        self.http.headers = {}
        self.client = ApiClient(self.session, base_url="https://pharmacy.test/api/", timeout=5, http=self.http)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_json_headers_set_on_session(self):
        self.assertEqual(self.http.headers["Accept"], "application/json")
        self.assertEqual(self.http.headers["Content-Type"], "application/json")

    def test_bearer_token_attached(self):
        self.session.set("tok")
        self.http.request.return_value = fake_response(payload=[])
        self.client.get("/customers", params={"q": "as"})
        _, kwargs = self.http.request.call_args
        self.assertEqual(kwargs["headers"], {"Authorization": "Bearer tok"})
        self.assertEqual(kwargs["timeout"], 5)

    def test_token_change_applies_to_next_request(self):
        self.http.request.return_value = fake_response(payload={})
        self.client.get("/settings")
        self.assertEqual(self.http.request.call_args[1]["headers"], {})
        self.session.set("late")
        self.client.get("/settings")
        self.assertEqual(self.http.request.call_args[1]["headers"], {"Authorization": "Bearer late"})

    def test_url_and_empty_params_dropped(self):
        self.http.request.return_value = fake_response(payload=[])
        self.client.get("/medicines", params={"search": "", "page": 1, "limit": 10})
        args, kwargs = self.http.request.call_args
        self.assertEqual(args, ("GET", "https://pharmacy.test/api/medicines"))
        self.assertEqual(kwargs["params"], {"page": 1, "limit": 10})

    def test_post_body(self):
        self.http.request.return_value = fake_response(payload={"_id": "x"})
        data = self.client.post("/customers", json={"name": "Asha"})
        self.assertEqual(data, {"_id": "x"})
        self.assertEqual(self.http.request.call_args[1]["json"], {"name": "Asha"})

    def test_empty_body_returns_none(self):
        self.http.request.return_value = fake_response(payload=None)
        self.assertIsNone(self.client.delete("/bills/1"))

    def test_not_found(self):
        self.http.request.return_value = fake_response(404, {"message": "Bill not found"}, "Not Found")
        with self.assertRaises(NotFoundError) as ctx:
            self.client.get("/bills/1")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.server_message, "Bill not found")

    def test_server_message_carried(self):
        self.http.request.return_value = fake_response(400, {"message": "Insufficient stock"}, "Bad Request")
        with self.assertRaises(TransientApiError) as ctx:
            self.client.post("/bills", json={})
        self.assertEqual(ctx.exception.user_message("Failed to create bill"), "Insufficient stock")

    def test_server_error_without_message(self):
        self.http.request.return_value = fake_response(500, None, "Server Error")
        with self.assertRaises(TransientApiError) as ctx:
            self.client.get("/bills")
        self.assertEqual(ctx.exception.user_message("Failed to load bills"), "Failed to load bills")

    def test_unauthorized_is_transient(self):
        self.http.request.return_value = fake_response(401, {"message": "Token expired"}, "Unauthorized")
        with self.assertRaises(TransientApiError):
            self.client.get("/medicines")

    def test_connection_error(self):
        self.http.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(TransientApiError) as ctx:
            self.client.get("/medicines")
        self.assertIsNone(ctx.exception.server_message)

    def test_timeout(self):
        self.http.request.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(TransientApiError):
            self.client.get("/medicines")
