"""Bearer authentication and role gate tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import os
import unittest

from fastapi import Request
from fastapi.testclient import TestClient

from hotel_office.adapters.auth import JwtTokenService
from hotel_office.core.config import get_settings
from hotel_office.domain.access import authorize, ensure_authorized
from hotel_office.errors import ApiError
from hotel_office.main import create_app
from hotel_office.repositories.memory import InMemoryStore
from hotel_office.routes.dependencies import get_credential_service, get_token_service
from hotel_office.schemas.auth import AuthPrincipal, Profile, Role
from hotel_office.services.auth_gate import AuthGate

TEST_SECRET = "test-signing-secret-0123456789abcdefghij"


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "HOTEL_JWT_SECRET",
        "HOTEL_BCRYPT_ROUNDS",
        "HOTEL_BOOTSTRAP_ADMIN_USERNAME",
        "HOTEL_BOOTSTRAP_ADMIN_EMAIL",
        "HOTEL_BOOTSTRAP_ADMIN_PASSWORD",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        for key in self._env_keys:
            os.environ.pop(key, None)
        os.environ["HOTEL_JWT_SECRET"] = TEST_SECRET
        os.environ["HOTEL_BCRYPT_ROUNDS"] = "4"
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class _ExplodingTokenService:
    def issue(self, principal_id: str) -> str:
        return "unused"

    def verify(self, token: str) -> str:
        raise RuntimeError("verifier crashed")


class _CapturingCredentialService:
    def __init__(self, request: Request) -> None:
        self.request = request

    def get_profile(self, *, principal_id: str) -> Profile:
        principal = self.request.state.auth_principal
        now = datetime.now(UTC)
        return Profile(
            id=principal_id,
            username=f"seen-{principal.username}",
            email=principal.email,
            role=principal.role,
            created_at=now,
            updated_at=now,
        )


class AuthGateApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = InMemoryStore()
        self.app = create_app(store=self.store)
        self.client = TestClient(self.app)

        response = self.client.post(
            "/api/user/signup",
            json={"username": "alice", "email": "alice@example.com", "password": "secret1"},
        )
        self.assertEqual(response.status_code, 201)
        self.alice = response.json()
        self.store.principal_lookup_count = 0

    def _me(self, authorization: str | None = None):
        headers = {"Authorization": authorization} if authorization is not None else {}
        return self.client.get("/api/user/me", headers=headers)

    def test_missing_header_is_rejected_without_store_lookup(self) -> None:
        response = self._me()

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHENTICATED")
        self.assertEqual(response.json()["message"], "Not authorized, no token.")
        self.assertEqual(self.store.principal_lookup_count, 0)

    def test_bearer_prefix_is_case_sensitive(self) -> None:
        for header in (f"bearer {self.alice['token']}", f"BEARER {self.alice['token']}", self.alice["token"]):
            with self.subTest(header=header[:12]):
                response = self._me(header)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["message"], "Not authorized, no token.")

        self.assertEqual(self.store.principal_lookup_count, 0)

    def test_invalid_token_is_rejected_before_store_lookup(self) -> None:
        foreign = JwtTokenService("some-other-signing-secret-0123456789").issue(self.alice["_id"])

        for token in ("garbage", foreign):
            with self.subTest(token=token[:12]):
                response = self._me(f"Bearer {token}")
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["code"], "UNAUTHENTICATED")
                self.assertTrue(response.json()["message"].startswith("Not authorized, token"))

        self.assertEqual(self.store.principal_lookup_count, 0)

    def test_expired_token_is_rejected_before_store_lookup(self) -> None:
        issued_at = datetime.now(UTC) - timedelta(days=31)
        expired = JwtTokenService(TEST_SECRET, clock=lambda: issued_at).issue(self.alice["_id"])

        response = self._me(f"Bearer {expired}")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Not authorized, token expired.")
        self.assertEqual(self.store.principal_lookup_count, 0)

    def test_valid_token_resolves_principal_without_credential(self) -> None:
        response = self._me(f"Bearer {self.alice['token']}")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["_id"], self.alice["_id"])
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["role"], "user")
        self.assertNotIn("password", body)
        self.assertNotIn("credential_hash", body)
        self.assertGreaterEqual(self.store.principal_lookup_count, 1)

    def test_resolved_principal_is_attached_to_request_state(self) -> None:
        self.app.dependency_overrides[get_credential_service] = _CapturingCredentialService

        response = self._me(f"Bearer {self.alice['token']}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "seen-alice")
        self.assertEqual(response.json()["email"], "alice@example.com")

    def test_deleted_principal_token_is_rejected(self) -> None:
        self.assertTrue(self.store.delete_principal(self.alice["_id"]))

        response = self._me(f"Bearer {self.alice['token']}")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Not authorized, principal not found.")

    def test_verifier_crash_is_reported_as_server_error(self) -> None:
        self.app.dependency_overrides[get_token_service] = _ExplodingTokenService

        response = self._me(f"Bearer {self.alice['token']}")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "INTERNAL_ERROR")
        self.assertEqual(response.json()["message"], "Server error during token verification.")

    def test_store_failure_during_lookup_is_reported_as_server_error(self) -> None:
        self.store.unavailable_message = "connection refused"

        response = self._me(f"Bearer {self.alice['token']}")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["code"], "INTERNAL_ERROR")
        self.assertNotIn("connection refused", response.text)


class AuthGateUnitTests(unittest.TestCase):
    def test_extract_token_requires_exact_prefix(self) -> None:
        self.assertEqual(AuthGate.extract_token("Bearer abc.def.ghi"), "abc.def.ghi")
        self.assertIsNone(AuthGate.extract_token(None))
        self.assertIsNone(AuthGate.extract_token(""))
        self.assertIsNone(AuthGate.extract_token("Bearer "))
        self.assertIsNone(AuthGate.extract_token("bearer abc"))
        self.assertIsNone(AuthGate.extract_token("Token abc"))

    def test_authenticate_returns_principal_for_stored_record(self) -> None:
        store = InMemoryStore()
        record = store.create_principal(
            username="bob",
            email="bob@example.com",
            role=Role.ADMIN,
            credential_hash="$2b$04$placeholder",
        )
        tokens = JwtTokenService(TEST_SECRET)
        gate = AuthGate(tokens, store)

        principal = gate.authenticate(f"Bearer {tokens.issue(record.id)}")

        self.assertEqual(principal, AuthPrincipal(id=record.id, username="bob", email="bob@example.com", role=Role.ADMIN))


class RoleGateTests(unittest.TestCase):
    def _principal(self, role: Role) -> AuthPrincipal:
        return AuthPrincipal(id="principal-1", username="someone", email="someone@example.com", role=role)

    def test_role_membership_decides_access(self) -> None:
        user = self._principal(Role.USER)
        admin = self._principal(Role.ADMIN)

        self.assertFalse(authorize(user, {Role.ADMIN}))
        self.assertTrue(authorize(admin, {Role.ADMIN}))
        self.assertTrue(authorize(admin, {Role.ADMIN, Role.USER}))
        self.assertTrue(authorize(user, {Role.ADMIN, Role.USER}))

    def test_empty_allowed_set_denies_everyone(self) -> None:
        self.assertFalse(authorize(self._principal(Role.USER), set()))
        self.assertFalse(authorize(self._principal(Role.ADMIN), frozenset()))

    def test_role_names_match_exactly(self) -> None:
        admin = self._principal(Role.ADMIN)

        self.assertTrue(authorize(admin, {"admin"}))
        self.assertFalse(authorize(admin, {"Admin"}))
        self.assertFalse(authorize(admin, {"ADMIN"}))

    def test_denial_reports_role_and_allowed_roles(self) -> None:
        with self.assertRaises(ApiError) as context:
            ensure_authorized(self._principal(Role.USER), {Role.ADMIN})

        error = context.exception
        self.assertEqual(error.status_code, 403)
        self.assertEqual(error.payload.code, "FORBIDDEN")
        self.assertEqual(error.payload.message, "User role user is not authorized to access this route.")
        self.assertEqual(error.payload.details, {"role": "user", "allowed_roles": ["admin"]})


if __name__ == "__main__":
    unittest.main()
