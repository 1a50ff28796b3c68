from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from .exceptions import ExecutionError

Scalar = Optional[Union[str, int, float]]
Row = Dict[str, Scalar]
Order = Literal["asc", "desc"]


def check_reply(reply):
    """Return ``reply`` unchanged unless it is an error string, which is raised."""
    if isinstance(reply, str):
        raise ExecutionError(reply)
    return reply


class StatementResult:
    """Successful connector reply: affected row count plus returned rows."""
    def __init__(self, row_count: int = 0, rows: Optional[List[Row]] = None):
        self.row_count = row_count
        self.rows = rows if rows is not None else []

    @classmethod
    def from_reply(cls, reply: Union[Mapping[str, Any], "StatementResult", str]):
        """Turn a raw connector reply into a result.

        Connectors signal failure by returning the error message as a plain
        string, so any string reply is raised as ExecutionError.
        """
        check_reply(reply)
        if isinstance(reply, cls):
            return reply
        row_count = reply.get("rowCount", reply.get("row_count"))
        rows = list(reply.get("rows") or [])
        if row_count is None:
            row_count = len(rows)
        return cls(int(row_count), rows)

    def first(self) -> Optional[Row]:
        return self.rows[0] if self.rows else None

    def __eq__(self, other):
        if not isinstance(other, StatementResult):
            return NotImplemented
        return self.row_count == other.row_count and self.rows == other.rows

    def __repr__(self):
        return f"StatementResult(row_count={self.row_count}, rows={self.rows!r})"
