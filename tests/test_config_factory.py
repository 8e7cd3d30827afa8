from __future__ import annotations

import os
import sqlite3
import tempfile
import unittest

from dbuser_provider.config import (
    DEFAULT_COLUMNS_MAPPING,
    DEFAULT_FIND_PASSWORD_HASH,
    ProviderSettings,
    SettingKey,
)
from dbuser_provider.core.errors import ConfigurationError
from dbuser_provider.core.hashing import BcryptAlgorithm, DigestAlgorithm, hash_password
from dbuser_provider.core.search import SEARCH
from dbuser_provider.factory import PROVIDER_ID, UserStorageProviderFactory
from dbuser_provider.ports.db_api.dialects import SQLiteDialect, SQLServerDialect


def _settings(**overrides: object) -> dict:
    settings = {
        SettingKey.URL.value: "sqlite:///:memory:",
        SettingKey.RDBMS.value: "SQLite 3",
        SettingKey.COLUMNS_MAPPING.value: "id=user_id##username=u_name##email=mail",
        SettingKey.BASE_QUERY.value: "select {columns} from users where {filters}",
        SettingKey.FIND_PASSWORD_HASH.value: "select hash_pwd from users where u_name = ?",
        SettingKey.UPDATE_PASSWORD.value: "update users set hash_pwd = ? where u_name = ?",
    }
    settings.update(overrides)
    return settings


class ProviderSettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        parsed = ProviderSettings.from_mapping({"URL": " jdbc:jtds:sqlserver://db:1433/app "})
        self.assertEqual(parsed.url, "jdbc:jtds:sqlserver://db:1433/app")
        self.assertIsInstance(parsed.dialect, SQLServerDialect)
        self.assertIsNone(parsed.user)
        queries = parsed.queries
        self.assertEqual(queries.hash_function, "SHA-1")
        self.assertIsInstance(queries.hash_algorithm, DigestAlgorithm)
        self.assertEqual(queries.find_password_hash, DEFAULT_FIND_PASSWORD_HASH)
        self.assertEqual(len(queries.columns_mapping), len(DEFAULT_COLUMNS_MAPPING))
        self.assertFalse(queries.allow_keycloak_delete)
        self.assertFalse(queries.can_update_password)

    def test_multivalued_mapping_and_list_values(self) -> None:
        parsed = ProviderSettings.from_mapping(
            _settings(USER=["svc"], PASSWORD=["secret"], HASH_FUNCTION=["Blowfish (bcrypt)"])
        )
        self.assertEqual(dict(parsed.queries.columns_mapping), {"id": "user_id", "username": "u_name", "email": "mail"})
        self.assertEqual((parsed.user, parsed.password), ("svc", "secret"))
        self.assertIsInstance(parsed.queries.hash_algorithm, BcryptAlgorithm)
        self.assertIsInstance(parsed.dialect, SQLiteDialect)

    def test_mapping_as_list(self) -> None:
        parsed = ProviderSettings.from_mapping(_settings(COLUMNS_MAPPING=["id=uid", "email=mail"]))
        self.assertEqual(dict(parsed.queries.columns_mapping), {"id": "uid", "email": "mail"})

    def test_flags(self) -> None:
        for raw, expected in (("true", True), ("TRUE", True), (True, True), ("false", False), ("yes", False)):
            with self.subTest(raw=raw):
                parsed = ProviderSettings.from_mapping(
                    _settings(ALLOW_KEYCLOAK_DELETE=raw, ALLOW_DATABASE_TO_OVERWRITE_KEYCLOAK=raw)
                )
                self.assertIs(parsed.queries.allow_keycloak_delete, expected)
                self.assertIs(parsed.queries.allow_database_to_overwrite_keycloak, expected)

    def test_invalid_settings_raise(self) -> None:
        cases = {
            "missing url": {SettingKey.URL.value: None},
            "blank url": {SettingKey.URL.value: "  "},
            "unknown rdbms": {SettingKey.RDBMS.value: "Informix"},
            "unknown hash": {SettingKey.HASH_FUNCTION.value: "CRC32"},
            "duplicate attribute": {SettingKey.COLUMNS_MAPPING.value: "id=a##id=b"},
        }
        for label, override in cases.items():
            with self.subTest(label=label):
                with self.assertRaises(ConfigurationError):
                    ProviderSettings.from_mapping(_settings(**override))


class FactoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "users.db")
        conn = sqlite3.connect(self.path)
        conn.execute("CREATE TABLE users (user_id INTEGER, u_name TEXT, mail TEXT, hash_pwd TEXT)")
        conn.execute(
            "INSERT INTO users VALUES (1, 'alice', 'alice@example.com', ?)",
            [hash_password("wonderland", "SHA-1")],
        )
        conn.commit()
        conn.close()
        self.factory = UserStorageProviderFactory()

    def tearDown(self) -> None:
        self.factory.close()
        self.tmp.cleanup()

    def _url(self) -> str:
        return f"sqlite:///{self.path}"

    def test_provider_id(self) -> None:
        self.assertEqual(self.factory.provider_id, PROVIDER_ID)
        self.assertEqual(PROVIDER_ID, "RDBMS")

    def test_create_serves_directory_operations(self) -> None:
        repo = self.factory.create("c1", _settings(URL=self._url()), name="users")
        self.assertEqual(repo.get_users_count(), 1)
        self.assertEqual(repo.find_user_by_email("ALICE@EXAMPLE.COM")["username"], "alice")
        self.assertEqual(len(repo.find_users({SEARCH: "ali"})), 1)
        self.assertTrue(repo.validate_credentials("alice", "wonderland"))
        self.assertTrue(repo.update_credentials("alice", "looking-glass"))
        self.assertTrue(repo.validate_credentials("alice", "looking-glass"))

    def test_create_reuses_instance_configuration(self) -> None:
        first = self.factory.create("c1", _settings(URL=self._url()))
        second = self.factory.create("c1", _settings(URL="sqlite:///elsewhere.db"))
        self.assertIs(first.data_source, second.data_source)
        self.assertIs(first.config, second.config)

    def test_create_with_unreachable_database_raises(self) -> None:
        factory = UserStorageProviderFactory(connect=_refuse)
        try:
            with self.assertRaises(ConfigurationError):
                factory.create("c1", _settings())
        finally:
            factory.close()

    def test_validate_configuration_replaces_instance(self) -> None:
        before = self.factory.create("c1", _settings(URL=self._url()))
        self.factory.validate_configuration(
            "c1", _settings(URL=self._url(), HASH_FUNCTION="SHA-256"), name="users"
        )
        after = self.factory.create("c1", _settings())
        self.assertIsNot(before.data_source, after.data_source)
        self.assertEqual(after.config.hash_function, "SHA-256")
        self.assertIsNone(before.data_source.get())

    def test_validate_configuration_rejects_bad_settings(self) -> None:
        before = self.factory.create("c1", _settings(URL=self._url()))
        with self.assertRaises(ConfigurationError):
            self.factory.validate_configuration("c1", _settings(URL=self._url(), RDBMS="Informix"))
        self.assertIs(self.factory.create("c1", _settings()).data_source, before.data_source)

    def test_close_releases_every_instance(self) -> None:
        repo = self.factory.create("c1", _settings(URL=self._url()))
        self.factory.close()
        self.assertIsNone(repo.data_source.get())
        self.assertEqual(repo.get_all_users(), [])


def _refuse(*_args, **_kwargs):  # noqa: ANN002,ANN003,ANN202
    raise sqlite3.OperationalError("unable to open database file")


if __name__ == "__main__":
    unittest.main()
