import logging
from typing import Iterable, Mapping, Optional

from .connector import create_connector
from .exceptions import ConnectionNotFound
from .result import check_reply
from .settings import ConnectorConfig, ConnectorSettings
from .table import Table

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION = "default"


class Builder:
    """Registry of named connections and entry point for table queries.

    Example:
        db = Builder(secret_key, connector_factory=my_factory)
        db.connect({"moat": "my-moat", "private_key": key})
        users = await db.table("users").where("active", "=", 1).get()
    """

    def __init__(self, secret_key="", sync=False, connector_factory=create_connector):
        self._secret_key = secret_key
        self._sync = sync
        self._connector_factory = connector_factory
        self._connections = {}
        self._current = DEFAULT_CONNECTION

    @classmethod
    def from_settings(cls, settings: Optional[ConnectorSettings] = None, connector_factory=create_connector):
        """Build a registry from environment settings and connect ``default``."""
        settings = settings or ConnectorSettings()
        builder = cls(
            settings.secret_key.get_secret_value(),
            sync=settings.sync,
            connector_factory=connector_factory,
        )
        builder.connect(settings)
        return builder

    # -- connections

    def connect(self, config, name=DEFAULT_CONNECTION):
        """Create a connector from ``config`` and register it under ``name``.

        ``config`` is a ConnectorConfig, a ConnectorSettings or a mapping with
        host, protocol, moat and private_key. Environment variables are not
        consulted here. Blank host/protocol fall back to the defaults.
        """
        if isinstance(config, ConnectorSettings):
            config = config.connector_config()
        elif not isinstance(config, ConnectorConfig):
            config = ConnectorConfig(**{k: v for k, v in dict(config).items() if v is not None})
        config = config.with_defaults()

        connection = self._connector_factory(config, self._secret_key)
        if name in self._connections:
            logger.info("Replacing connection %r", name)
        self._connections[name] = connection
        logger.info("Registered connection %r to %s://%s", name, config.protocol, config.host)
        return connection

    @property
    def current_connection(self):
        return self._current

    def set_current_connection(self, name):
        if name not in self._connections:
            logger.warning("Ignoring switch to unknown connection %r", name)
            return self
        self._current = name
        logger.info("Current connection is now %r", name)
        return self

    def get_connection(self, name=None):
        name = self._current if name is None else name
        try:
            return self._connections[name]
        except KeyError:
            raise ConnectionNotFound(name) from None

    def set_sync(self, sync: bool):
        self._sync = bool(sync)

    def is_syncing(self) -> bool:
        return self._sync

    # -- tables

    def table(self, name) -> Table:
        return Table(self.get_connection(), name, self._sync)

    # -- helpers using the current connection

    async def get_moat_funding(self):
        reply = await self.get_connection().get_moat_funding()
        return reply["funding"]

    async def get_moat_debit(self):
        reply = await self.get_connection().get_moat_debit()
        return reply["debit"]

    def _checked(self, reply):
        if isinstance(reply, str):
            logger.warning("Statement failed: %s", reply)
        return check_reply(reply)

    async def _statement(self, sql, values=()):
        logger.debug("Executing: %s (%d values)", sql, len(values))
        reply = await self.get_connection().prepared_statement(sql, list(values), self._sync)
        return self._checked(reply)

    async def create_schema(self, name):
        await self._statement(f"CREATE SCHEMA {name}")

    async def drop_schema(self, name):
        await self._statement(f"DROP SCHEMA {name}")

    async def create_table(self, name, columns: Mapping[str, str], constraints: Iterable[str] = ()):
        """Create ``name`` with ``{column: type}`` definitions and extra constraints."""
        definitions = [f"{column} {type_}" for column, type_ in columns.items()]
        definitions.extend(constraints)
        await self._statement(f"CREATE TABLE {name} ({', '.join(definitions)})")

    async def drop_table(self, name):
        await self._statement(f"DROP TABLE {name}")

    async def raw_query(self, sql):
        """Run ``sql`` unparameterized and return the connector reply as is."""
        logger.debug("Executing raw: %s", sql)
        reply = await self.get_connection().query(sql, self._sync)
        return self._checked(reply)

    async def raw_prepared_statement(self, sql, values=()):
        return await self._statement(sql, values)
