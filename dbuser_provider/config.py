"""Host configuration keys, defaults, and parsing into typed settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional

from .core.errors import ConfigurationError
from .core.query_config import QueryConfigurations
from .ports.db_api.dialects import Dialect, SQLServerDialect, get_dialect


class SettingKey(str, Enum):
    """Names of the settings a host stores for one provider instance."""

    URL = "URL"
    USER = "USER"
    PASSWORD = "PASSWORD"
    RDBMS = "RDBMS"
    ALLOW_KEYCLOAK_DELETE = "ALLOW_KEYCLOAK_DELETE"
    ALLOW_DATABASE_TO_OVERWRITE_KEYCLOAK = "ALLOW_DATABASE_TO_OVERWRITE_KEYCLOAK"
    BASE_QUERY = "BASE_QUERY"
    COUNT = "COUNT"
    FIND_BY_ID = "FIND_BY_ID"
    FIND_BY_USERNAME = "FIND_BY_USERNAME"
    FIND_BY_EMAIL = "FIND_BY_EMAIL"
    COLUMNS_MAPPING = "COLUMNS_MAPPING"
    FIND_PASSWORD_HASH = "FIND_PASSWORD_HASH"
    HASH_FUNCTION = "HASH_FUNCTION"
    UPDATE_PASSWORD = "UPDATE_PASSWORD"


DEFAULT_BASE_QUERY = "select {columns} from users where {filters}"
DEFAULT_FIND_PASSWORD_HASH = 'select hash_pwd from users where "username" = ?'
DEFAULT_HASH_FUNCTION = "SHA-1"
DEFAULT_RDBMS = SQLServerDialect.description
DEFAULT_COLUMNS_MAPPING = [
    "id=my_id_column",
    "username=my_username_column",
    "firstName=my_first_name_column",
    "lastName=my_last_name_column",
    "email=my_email_column",
    "locale=my_locale_column",
    "EMAIL_VERIFIED=my_email_verified_column",
    "ENABLED=my_enabled_column",
    "CREATED_TIMESTAMP=my_created_timestamp_column",
]

# Multivalued settings are persisted as one string joined with this separator.
MULTIVALUE_SEPARATOR = "##"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
        return None if value is None else str(value)
    return str(value)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = _text(value)
    return text is not None and text.strip().lower() == "true"


def _entries(value: Any) -> List[str]:
    if value is None:
        return list(DEFAULT_COLUMNS_MAPPING)
    if isinstance(value, str):
        return [part for line in value.split(MULTIVALUE_SEPARATOR) for part in line.splitlines()]
    return [str(item) for item in value]


@dataclass(frozen=True)
class ProviderSettings:
    """Connection settings and query configuration for one provider instance."""

    url: str
    user: Optional[str]
    password: Optional[str]
    dialect: Dialect
    queries: QueryConfigurations

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> ProviderSettings:
        """Parse host settings keyed by `SettingKey` names.

        Raises:
            ConfigurationError: URL is missing, or the RDBMS, hash function, or
                attribute mapping is invalid.
        """

        def get(key: SettingKey, default: Optional[str] = None) -> Optional[str]:
            value = _text(settings.get(key.value))
            return default if value is None else value

        url = get(SettingKey.URL)
        if not url or not url.strip():
            raise ConfigurationError("Connection URL is required.")
        dialect = get_dialect(get(SettingKey.RDBMS, DEFAULT_RDBMS) or DEFAULT_RDBMS)
        queries = QueryConfigurations.build(
            base_query=get(SettingKey.BASE_QUERY, DEFAULT_BASE_QUERY) or DEFAULT_BASE_QUERY,
            columns_mapping=_entries(settings.get(SettingKey.COLUMNS_MAPPING.value)),
            dialect=dialect,
            hash_function=get(SettingKey.HASH_FUNCTION, DEFAULT_HASH_FUNCTION) or DEFAULT_HASH_FUNCTION,
            count=get(SettingKey.COUNT),
            find_by_id=get(SettingKey.FIND_BY_ID),
            find_by_username=get(SettingKey.FIND_BY_USERNAME),
            find_by_email=get(SettingKey.FIND_BY_EMAIL),
            find_password_hash=get(SettingKey.FIND_PASSWORD_HASH, DEFAULT_FIND_PASSWORD_HASH),
            update_password=get(SettingKey.UPDATE_PASSWORD),
            allow_keycloak_delete=_flag(settings.get(SettingKey.ALLOW_KEYCLOAK_DELETE.value)),
            allow_database_to_overwrite_keycloak=_flag(
                settings.get(SettingKey.ALLOW_DATABASE_TO_OVERWRITE_KEYCLOAK.value)
            ),
        )
        return cls(
            url=url.strip(),
            user=get(SettingKey.USER),
            password=get(SettingKey.PASSWORD),
            dialect=dialect,
            queries=queries,
        )
