"""End-to-end tests over the FastAPI app with the user store swapped for an in-memory fake."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from userapi.api.v1.auth import get_current_username, get_token_codec, get_user_service
from userapi.core.config import settings
from userapi.core.database import get_db
from userapi.core.errors import UnauthenticatedError
from userapi.core.security import TokenCodec
from userapi.main import app
from userapi.repositories.base import StoreError
from userapi.services.user_service import UserService

from tests.fakes import InMemoryUserStore

SECRET = "test-secret-key-that-is-at-least-32-bytes"
AUTH = settings.AUTH_HEADER


class ApiTestCase(unittest.TestCase):
    """Wires the app to a fresh in-memory store and a known signing secret."""

    def setUp(self) -> None:
        self.store = InMemoryUserStore()
        self.codec = TokenCodec(SECRET)
        self.service = UserService(self.store, self.codec, bcrypt_rounds=4)
        app.dependency_overrides[get_token_codec] = lambda: self.codec
        app.dependency_overrides[get_user_service] = lambda: self.service
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def signup(self, username: str = "rrm", password: str = "roeeo", country: str = "india"):
        return self.client.post(
            "/signup",
            json={"username": username, "password": password, "country": country},
        )

    def login_token(self, username: str = "rrm", password: str = "roeeo") -> str:
        response = self.client.post("/login", json={"username": username, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]


class TestEndToEnd(ApiTestCase):
    def test_signup_login_list(self) -> None:
        response = self.signup()
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["username"], "rrm")
        self.assertEqual(data["country"], "india")
        self.assertNotIn("password", data)
        self.assertNotIn("password_hash", data)

        token = self.login_token()

        response = self.client.get("/users", headers={AUTH: token})
        self.assertEqual(response.status_code, 200)
        users = response.json()["data"]
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]["username"], "rrm")

        response = self.client.get("/users")
        self.assertEqual(response.status_code, 401)

    def test_update_then_delete(self) -> None:
        user_id = self.signup(username="u1", password="p1", country="c1").json()["data"]["id"]
        headers = {AUTH: self.login_token("u1", "p1")}

        response = self.client.put(
            f"/users/{user_id}",
            json={"username": "ignored", "password": "p2", "country": "c2"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["username"], "u1")
        self.assertEqual(data["country"], "c2")
        self.assertEqual(self.client.post("/login", json={"username": "u1", "password": "p2"}).status_code, 200)

        response = self.client.delete(f"/users/{user_id}", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"data": "User deleted"})

        response = self.client.get(f"/users/{user_id}", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    def test_countries(self) -> None:
        self.signup(username="a", country="india")
        self.signup(username="b", country="usa")
        self.signup(username="c", country="india")
        response = self.client.get("/countries", headers={AUTH: self.login_token("a")})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"data": ["india", "usa"]})


class TestSignupValidation(ApiTestCase):
    def test_missing_field_is_400(self) -> None:
        response = self.client.post("/signup", json={"username": "rrm", "password": "roeeo"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.rows, {})

    def test_empty_country_is_400(self) -> None:
        self.assertEqual(self.signup(country="").status_code, 400)
        self.assertEqual(self.signup(country="   ").status_code, 400)
        self.assertEqual(self.store.rows, {})

    def test_password_too_long_is_400(self) -> None:
        response = self.signup(password="1234567891" * 9)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.rows, {})

    def test_multibyte_password_over_72_bytes_is_400(self) -> None:
        # 37 two-byte characters: under 72 characters but 74 bytes.
        response = self.signup(password="é" * 37)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.store.rows, {})
        self.assertEqual(self.signup(password="é" * 36).status_code, 200)

    def test_username_with_surrounding_whitespace_is_400(self) -> None:
        for username in (" rrm ", "rrm ", "\trrm"):
            with self.subTest(username=username):
                self.assertEqual(self.signup(username=username).status_code, 400)
        self.assertEqual(self.store.rows, {})

    def test_stored_username_is_the_one_that_logs_in(self) -> None:
        stored = self.signup(username="r m").json()["data"]["username"]
        self.assertEqual(stored, "r m")
        self.assertTrue(self.login_token(stored))

    def test_malformed_json_is_400(self) -> None:
        response = self.client.post(
            "/signup", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(response.status_code, 400)

    def test_duplicate_username_is_store_failure(self) -> None:
        self.signup()
        response = self.signup(password="other", country="usa")
        self.assertEqual(response.status_code, 500)
        self.assertIn("already taken", response.json()["error"])


class TestLogin(ApiTestCase):
    def test_unknown_user_is_401(self) -> None:
        response = self.client.post("/login", json={"username": "nobody", "password": "x"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid credentials"})

    def test_wrong_password_matches_unknown_user_response(self) -> None:
        self.signup(username="u1", password="password")
        wrong = self.client.post("/login", json={"username": "u1", "password": "wrong"})
        unknown = self.client.post("/login", json={"username": "nobody", "password": "wrong"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())

    def test_undecodable_body_is_400(self) -> None:
        response = self.client.post("/login", json={"username": "u1"})
        self.assertEqual(response.status_code, 400)


class TestAuthGuard(ApiTestCase):
    def test_missing_header_is_401(self) -> None:
        response = self.client.get("/users")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Request does not contain an access token"})

    def test_bearer_prefix_is_not_stripped(self) -> None:
        self.signup()
        token = self.login_token()
        response = self.client.get("/users", headers={AUTH: f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid token"})

    def test_expired_token_is_401(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=10)
        token = TokenCodec(SECRET, now=lambda: past).mint("rrm")
        response = self.client.get("/users", headers={AUTH: token})
        self.assertEqual(response.status_code, 401)

    def test_token_from_other_secret_is_401(self) -> None:
        token = TokenCodec("another-secret-key-that-is-32-bytes-long").mint("rrm")
        self.assertEqual(self.client.get("/users", headers={AUTH: token}).status_code, 401)

    def test_rejected_request_never_reaches_service(self) -> None:
        service = MagicMock()
        app.dependency_overrides[get_user_service] = lambda: service
        for method, path in (
            ("GET", "/users"),
            ("GET", "/users/1"),
            ("PUT", "/users/1"),
            ("DELETE", "/users/1"),
            ("GET", "/countries"),
        ):
            with self.subTest(method=method, path=path):
                response = self.client.request(method, path, headers={AUTH: "garbage"})
                self.assertEqual(response.status_code, 401)
        self.assertEqual(service.mock_calls, [])

    def test_guard_sets_request_state(self) -> None:
        request = MagicMock()
        username = get_current_username(request, self.codec.mint("rrm"), self.codec)
        self.assertEqual(username, "rrm")
        self.assertEqual(request.state.username, "rrm")

    def test_guard_rejects_empty_token(self) -> None:
        with self.assertRaises(UnauthenticatedError):
            get_current_username(MagicMock(), "", self.codec)


class TestUserRoutes(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.signup()
        self.headers = {AUTH: self.login_token()}

    def test_get_absent_user_is_404(self) -> None:
        response = self.client.get("/users/999", headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_non_integer_id_is_400(self) -> None:
        response = self.client.get("/users/abc", headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_update_with_over_long_password_is_400(self) -> None:
        user_id = self.store.find_by_field("username", "rrm").id
        response = self.client.put(
            f"/users/{user_id}", json={"password": "é" * 37}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.post("/login", json={"username": "rrm", "password": "roeeo"}).status_code, 200)

    def test_update_absent_user_is_404(self) -> None:
        response = self.client.put("/users/999", json={"country": "usa"}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_delete_absent_user_is_404(self) -> None:
        response = self.client.delete("/users/999", headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_store_outage_is_500(self) -> None:
        self.store.fail_with = StoreError("connection refused")
        response = self.client.get("/users", headers=self.headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "connection refused"})


class TestHealth(unittest.TestCase):
    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_reports_database_status(self) -> None:
        session = MagicMock()
        app.dependency_overrides[get_db] = lambda: session
        response = TestClient(app).get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "connected")
        session.execute.assert_called_once()


if __name__ == "__main__":
    unittest.main()
