import logging
import math
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from .query import COMPARISON_OPERATORS, Between, Comparison, In, Like, Nullity, build_where, placeholder
from .result import Order, Row, Scalar, StatementResult, check_reply

logger = logging.getLogger(__name__)

AGGREGATES = ("count", "max", "min", "sum", "avg")
ORDER_DIRECTIONS = ("asc", "desc")


class Table:
    """Chainable query builder bound to one table on one connection.

    Modifiers accumulate state on the instance and return it, terminal
    coroutines render the statement and hand it to the connector. Create a
    new instance for every independent query.

    Example:
        rows = await db.table("users").where("age", ">", 18).order_by("name").limit(10).get()
    """

    def __init__(self, connection, table_name: str, sync: bool = False):
        self.connection = connection
        self.table_name = table_name
        self.sync = sync
        self._conditions = []
        self._select: List[str] = []
        self._order_by = None
        self._limit_val: Optional[int] = None

    # -- modifiers

    def where(self, field, operator, value):
        """Add a comparison filter. ``like`` takes a pattern as value.

        Example:
            await db.table("users").where("name", "like", "jo%").get()
        """
        if operator == "like":
            self._conditions.append(Like(field, value))
        elif operator in COMPARISON_OPERATORS:
            self._conditions.append(Comparison(field, operator, value))
        else:
            raise ValueError(f"Unsupported operator {operator!r}")
        return self

    def where_null(self, field):
        self._conditions.append(Nullity(field))
        return self

    def where_not_null(self, field):
        self._conditions.append(Nullity(field, negated=True))
        return self

    def where_in(self, field, values: Iterable[Scalar]):
        self._conditions.append(In(field, tuple(values)))
        return self

    def where_between(self, field, values: Sequence[Scalar]):
        """Add ``field BETWEEN low AND high``; ``values`` is ``(low, high)``."""
        bounds = list(values)
        if len(bounds) != 2:
            raise ValueError(f"BETWEEN on {field} needs exactly two bounds, got {len(bounds)}")
        self._conditions.append(Between(field, bounds[0], bounds[1]))
        return self

    def select(self, fields: Iterable[str]):
        self._select = list(fields)
        return self

    def order_by(self, field, direction: Order = "asc"):
        """Order by a single field. A later call replaces the earlier one."""
        direction = str(direction).lower()
        if direction not in ORDER_DIRECTIONS:
            raise ValueError(f"Order direction must be 'asc' or 'desc', got {direction!r}")
        self._order_by = (field, direction)
        return self

    def limit(self, n: int):
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ValueError(f"Limit must be a non-negative integer, got {n!r}")
        self._limit_val = n
        return self

    # -- rendering

    def _tail(self, sql):
        if self._order_by:
            sql += f" ORDER BY {self._order_by[0]} {self._order_by[1]}"
        if self._limit_val is not None:
            sql += f" LIMIT {self._limit_val}"
        return sql

    def render_select(self):
        fields = ",".join(self._select) if self._select else "*"
        where, values = build_where(self._conditions)
        sql = f"SELECT {fields} FROM {self.table_name}"
        if where:
            sql += f" {where}"
        return self._tail(sql), values

    def render_find(self, id):
        return f"SELECT * FROM {self.table_name} WHERE id = $1", [id]

    def render_insert(self, rows: Sequence[Mapping[str, Scalar]]):
        """Render one multi-row INSERT, placeholders numbered row by row.

        Columns come from the first row; every other row must carry exactly
        the same keys.
        """
        if not rows:
            raise ValueError(f"Nothing to insert into {self.table_name}")

        keys = list(rows[0].keys())
        if not keys:
            raise ValueError(f"Cannot insert a row without columns into {self.table_name}")

        values: List[Scalar] = []
        groups = []
        for index, row in enumerate(rows):
            if set(row.keys()) != set(keys):
                raise ValueError(
                    f"Row {index} has columns {sorted(row.keys())}, expected {sorted(keys)}"
                )
            start = len(values) + 1
            groups.append("(" + ",".join(placeholder(start + i) for i in range(len(keys))) + ")")
            values.extend(row[key] for key in keys)

        sql = f"INSERT INTO {self.table_name} ({','.join(keys)}) VALUES {','.join(groups)}"
        return sql, values

    def render_update(self, changes: Mapping[str, Scalar]):
        if not changes:
            raise ValueError(f"Nothing to update in {self.table_name}")

        values: List[Scalar] = []
        assignments = []
        for key, value in changes.items():
            values.append(value)
            assignments.append(f"{key}={placeholder(len(values))}")

        sql = f"UPDATE {self.table_name} SET {','.join(assignments)}"
        where, where_values = build_where(self._conditions, base=len(values))
        if where:
            sql += f" {where}"
        return sql, values + where_values

    def render_delete(self):
        where, values = build_where(self._conditions)
        sql = f"DELETE FROM {self.table_name}"
        if where:
            sql += f" {where}"
        if self._limit_val is not None:
            sql += f" LIMIT {self._limit_val}"
        return sql, values

    def render_truncate(self):
        return f"TRUNCATE {self.table_name}", []

    def render_aggregate(self, function, field="*"):
        function = function.lower()
        if function not in AGGREGATES:
            raise ValueError(f"Unsupported aggregate {function!r}")
        where, values = build_where(self._conditions)
        sql = f"SELECT {function.upper()}({field}) AS {function} FROM {self.table_name}"
        if where:
            sql += f" {where}"
        return sql, values

    # -- execution

    def _checked(self, reply):
        if isinstance(reply, str):
            logger.warning("Statement on %s failed: %s", self.table_name, reply)
        return check_reply(reply)

    async def _send(self, sql, values):
        logger.debug("Executing on %s: %s (%d values)", self.table_name, sql, len(values))
        reply = await self.connection.prepared_statement(sql, values, self.sync)
        return self._checked(reply)

    async def _execute(self, sql, values) -> StatementResult:
        return StatementResult.from_reply(await self._send(sql, values))

    async def insert(self, rows: Sequence[Mapping[str, Scalar]]):
        result = await self._execute(*self.render_insert(rows))
        return {"affected_rows": result.row_count}

    async def update(self, changes: Mapping[str, Scalar]):
        result = await self._execute(*self.render_update(changes))
        return {"affected_rows": result.row_count}

    async def delete(self):
        result = await self._execute(*self.render_delete())
        return {"affected_rows": result.row_count}

    async def truncate(self):
        await self._execute(*self.render_truncate())

    async def get(self) -> List[Row]:
        """Execute the select and return all rows."""
        result = await self._execute(*self.render_select())
        return result.rows

    async def first(self) -> Optional[Row]:
        """Get first row or None."""
        rows = await self.limit(1).get()
        return rows[0] if rows else None

    async def find(self, id) -> Optional[Row]:
        """Fetch the row whose ``id`` column matches, ignoring any filters."""
        result = await self._execute(*self.render_find(id))
        return result.first()

    async def _aggregate(self, function, field="*"):
        result = await self._execute(*self.render_aggregate(function, field))
        row = result.first() or {}
        return row.get(function)

    async def count(self) -> Union[int, float]:
        """Matching row count, truncated like parseInt; NaN when not a number."""
        value = _to_float(await self._aggregate("count"))
        return value if math.isnan(value) or math.isinf(value) else int(value)

    async def max(self, field) -> float:
        return _to_float(await self._aggregate("max", field))

    async def min(self, field) -> float:
        return _to_float(await self._aggregate("min", field))

    async def sum(self, field) -> float:
        return _to_float(await self._aggregate("sum", field))

    async def avg(self, field) -> float:
        return _to_float(await self._aggregate("avg", field))

    async def raw_query(self, sql):
        """Run ``sql`` unparameterized and return the connector reply as is."""
        logger.debug("Executing raw on %s: %s", self.table_name, sql)
        reply = await self.connection.query(sql, self.sync)
        return self._checked(reply)

    async def raw_prepared_statement(self, sql, values=()):
        return await self._send(sql, list(values))


def _to_float(value):
    """Aggregates come back as strings from some connectors; non-numbers are NaN."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan
