"""Per-instance provider construction and reconfiguration for the host."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from .config import ProviderSettings
from .core.errors import ConfigurationError
from .core.repository import UserRepository
from .ports.db_api.data_source import DataSourceProvider

logger = logging.getLogger(__name__)

PROVIDER_ID = "RDBMS"


@dataclass
class ProviderConfig:
    data_source: DataSourceProvider
    settings: ProviderSettings


class UserStorageProviderFactory:
    """Creates repositories for configured provider instances.

    Each instance (keyed by the host's component id) keeps one data source and
    one immutable query configuration until it is reconfigured.
    """

    provider_id = PROVIDER_ID

    def __init__(self, *, connect: Optional[Callable[..., Any]] = None):
        """Create factory.

        Args:
            connect: Optional DB-API `connect` callable used instead of the
                driver module resolved from the RDBMS setting.
        """

        self._connect = connect
        self._configs: Dict[str, ProviderConfig] = {}
        self._lock = threading.Lock()

    def _configure(self, component_id: str, name: str, settings: Mapping[str, Any]) -> ProviderConfig:
        logger.info("Creating configuration for model: id=%s name=%s", component_id, name)
        parsed = ProviderSettings.from_mapping(settings)
        data_source = DataSourceProvider()
        data_source.configure(
            parsed.url,
            parsed.dialect,
            parsed.user,
            parsed.password,
            name,
            connect=self._connect,
        )
        return ProviderConfig(data_source=data_source, settings=parsed)

    def create(
        self, component_id: str, settings: Mapping[str, Any], *, name: Optional[str] = None
    ) -> UserRepository:
        """Return a repository for `component_id`, configuring it on first use."""

        with self._lock:
            config = self._configs.get(component_id)
            if config is None:
                config = self._configure(component_id, name or component_id, settings)
                self._configs[component_id] = config
        return UserRepository(config.data_source, config.settings.queries)

    def validate_configuration(
        self, component_id: str, settings: Mapping[str, Any], *, name: Optional[str] = None
    ) -> None:
        """Rebuild the configuration for `component_id` and replace the old one.

        Raises:
            ConfigurationError: The settings are invalid or the database is unreachable.
        """

        try:
            config = self._configure(component_id, name or component_id, settings)
        except ConfigurationError:
            raise
        except Exception as exc:
            raise ConfigurationError(str(exc)) from exc
        with self._lock:
            old = self._configs.get(component_id)
            self._configs[component_id] = config
        if old is not None:
            old.data_source.close()

    def close(self) -> None:
        """Close every instance's data source."""

        with self._lock:
            configs = list(self._configs.values())
            self._configs.clear()
        for config in configs:
            config.data_source.close()
