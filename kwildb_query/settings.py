"""Connector configuration.

``ConnectorConfig`` is what a connector factory receives. Only
``ConnectorSettings`` reads ``KWILDB_`` environment variables and ``.env``.
"""

import logging
from typing import Optional

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_HOST = "test-db.kwil.xyz"
DEFAULT_PROTOCOL = "https"


class ConnectorConfig(BaseModel):
    """Where and how to reach the database."""

    host: str = DEFAULT_HOST
    protocol: str = DEFAULT_PROTOCOL
    moat: str = ""
    private_key: Optional[SecretStr] = None

    def with_defaults(self) -> "ConnectorConfig":
        """Copy with blank host/protocol replaced by the defaults."""
        return self.model_copy(
            update={
                "host": self.host or DEFAULT_HOST,
                "protocol": self.protocol or DEFAULT_PROTOCOL,
            }
        )


class ConnectorSettings(BaseSettings):
    """Connection config plus the builder-wide secret, from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="KWILDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = DEFAULT_HOST
    protocol: str = DEFAULT_PROTOCOL
    moat: str = ""
    private_key: Optional[SecretStr] = None
    secret_key: SecretStr = SecretStr("")
    sync: bool = False

    def connector_config(self) -> ConnectorConfig:
        return ConnectorConfig(
            host=self.host,
            protocol=self.protocol,
            moat=self.moat,
            private_key=self.private_key,
        ).with_defaults()


def load_settings(**overrides) -> ConnectorSettings:
    settings = ConnectorSettings(**overrides)
    logger.debug("Loaded connector settings for %s://%s", settings.protocol, settings.host)
    return settings
