"""Settings loading and startup wiring tests."""

from __future__ import annotations

from datetime import timedelta
import os
import unittest

from fastapi.testclient import TestClient
from pydantic import ValidationError

from hotel_office.adapters.auth import SigningKeyMissingError
from hotel_office.core.config import Settings, get_settings
from hotel_office.main import create_app

TEST_SECRET = "test-signing-secret-0123456789abcdefghij"


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "HOTEL_JWT_SECRET",
        "HOTEL_JWT_ALGORITHM",
        "HOTEL_TOKEN_TTL_DAYS",
        "HOTEL_BCRYPT_ROUNDS",
        "HOTEL_BOOTSTRAP_ADMIN_USERNAME",
        "HOTEL_BOOTSTRAP_ADMIN_EMAIL",
        "HOTEL_BOOTSTRAP_ADMIN_PASSWORD",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        for key in self._env_keys:
            os.environ.pop(key, None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class SettingsTests(_SettingsEnvCase):
    def test_defaults(self) -> None:
        settings = Settings()

        self.assertIsNone(settings.jwt_secret)
        self.assertEqual(settings.jwt_algorithm, "HS256")
        self.assertEqual(settings.token_ttl_days, 30)
        self.assertEqual(settings.bcrypt_rounds, 10)
        self.assertFalse(settings.has_bootstrap_admin)

    def test_environment_overrides(self) -> None:
        os.environ["HOTEL_JWT_SECRET"] = TEST_SECRET
        os.environ["HOTEL_JWT_ALGORITHM"] = "HS512"
        os.environ["HOTEL_TOKEN_TTL_DAYS"] = "7"
        os.environ["HOTEL_BCRYPT_ROUNDS"] = "12"

        settings = get_settings()

        self.assertEqual(settings.jwt_secret.get_secret_value(), TEST_SECRET)
        self.assertEqual(settings.jwt_algorithm, "HS512")
        self.assertEqual(settings.token_ttl_days, 7)
        self.assertEqual(settings.bcrypt_rounds, 12)

    def test_secrets_are_masked_in_repr(self) -> None:
        settings = Settings(jwt_secret=TEST_SECRET, bootstrap_admin_password="root-secret")

        self.assertNotIn(TEST_SECRET, repr(settings))
        self.assertNotIn("root-secret", repr(settings))

    def test_out_of_range_values_are_rejected(self) -> None:
        for overrides in ({"bcrypt_rounds": 3}, {"bcrypt_rounds": 32}, {"token_ttl_days": 0}, {"jwt_algorithm": "none"}):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationError):
                    Settings(jwt_secret=TEST_SECRET, **overrides)


class CreateAppTests(_SettingsEnvCase):
    def test_missing_signing_secret_fails_at_startup(self) -> None:
        with self.assertRaises(SigningKeyMissingError):
            create_app()

        with self.assertRaises(SigningKeyMissingError):
            create_app(Settings(jwt_secret=""))

    def test_services_are_built_from_settings(self) -> None:
        app = create_app(Settings(jwt_secret=TEST_SECRET, token_ttl_days=2, bcrypt_rounds=5))

        self.assertEqual(app.state.token_service.ttl, timedelta(days=2))
        self.assertTrue(app.state.password_hasher.hash("secret1").startswith("$2b$05$"))

    def test_openapi_lists_account_and_collection_paths(self) -> None:
        client = TestClient(create_app(Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4)))

        response = client.get("/openapi.json")
        self.assertEqual(response.status_code, 200)
        paths = response.json()["paths"]

        for path in ("/api/user/signup", "/api/user/login", "/api/user/me", "/api/rooms", "/api/rooms/{id}"):
            self.assertIn(path, paths)
        self.assertIn("/api/employee", paths)
        self.assertNotIn("/api/epmloyee", paths)
        self.assertIn("403", paths["/api/booking"]["get"]["responses"])
        self.assertNotIn("401", paths["/api/rooms"]["get"]["responses"])


if __name__ == "__main__":
    unittest.main()
