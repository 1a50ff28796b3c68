import logging
import os
import re
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, Mapping, Protocol, Sequence, Union

import aiosqlite

from .result import Scalar

logger = logging.getLogger(__name__)

Reply = Union[Mapping[str, Any], str]

_PLACEHOLDER = re.compile(r"('(?:[^']|'')*'|\"(?:[^\"]|\"\")*\")|\$(\d+)\b")
_TRUNCATE = re.compile(r"^\s*TRUNCATE\s+(?:TABLE\s+)?", re.IGNORECASE)


class Connector(Protocol):
    """What the builder needs from a database client.

    Statement calls return ``{"rowCount": int, "rows": [...]}`` on success
    and the error message as a plain string on failure.
    """

    async def prepared_statement(self, sql: str, values: Sequence[Scalar], sync: bool) -> Reply:
        ...

    async def query(self, sql: str, sync: bool) -> Reply:
        ...

    async def get_moat_funding(self) -> Mapping[str, Any]:
        ...

    async def get_moat_debit(self) -> Mapping[str, Any]:
        ...


class SqliteConnector:
    """Local connector backed by a SQLite file, for development and tests."""

    def __init__(self, db_path):
        self._db_path = db_path

        dir = os.path.dirname(self._db_path)
        if dir and not os.path.exists(dir):
            os.makedirs(dir)

    @asynccontextmanager
    async def get_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
        except BaseException:
            await conn.rollback()
            raise
        finally:
            await conn.close()

    @staticmethod
    def translate(sql):
        """Rewrite ``$n`` placeholders and TRUNCATE into SQLite syntax.

        Quoted literals and identifiers are copied untouched.
        """
        sql = _PLACEHOLDER.sub(lambda m: m.group(1) or f"?{m.group(2)}", sql)
        return _TRUNCATE.sub("DELETE FROM ", sql)

    async def _run(self, sql, values, sync):
        sql = self.translate(sql)
        logger.debug("sqlite %s (sync=%s): %s", self._db_path, sync, sql)
        try:
            async with self.get_connection() as conn:
                cursor = await conn.execute(sql, list(values))
                rows = await cursor.fetchall()
                description = cursor.description or ()
                columns = [col[0] for col in description]
                row_count = cursor.rowcount if cursor.rowcount >= 0 else len(rows)
                await conn.commit()
        except sqlite3.Error as exc:
            logger.warning("sqlite statement failed: %s", exc)
            return str(exc)

        return {
            "rowCount": row_count,
            "rows": [dict(zip(columns, row)) for row in rows],
        }

    async def prepared_statement(self, sql, values, sync=False):
        return await self._run(sql, values, sync)

    async def query(self, sql, sync=False):
        return await self._run(sql, (), sync)

    async def get_moat_funding(self):
        return {"funding": 0}

    async def get_moat_debit(self):
        return {"debit": 0}


def create_connector(config, secret_key) -> Connector:
    """Default connector factory.

    Only the ``sqlite`` protocol is served locally, with ``host`` as the
    database path. Remote hosts need a client passed to ``Builder`` as
    ``connector_factory``.
    """
    if config.protocol == "sqlite":
        return SqliteConnector(config.host)
    raise ValueError(
        f"No built-in connector for {config.protocol}://{config.host}; "
        "pass connector_factory to Builder"
    )
