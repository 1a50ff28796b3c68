from dataclasses import dataclass
from typing import List, Tuple

from .result import Scalar

COMPARISON_OPERATORS = ("=", "!=", "<", ">", "<=", ">=")


def placeholder(index: int) -> str:
    return f"${index}"


@dataclass(frozen=True)
class Comparison:
    """field <op> $n"""
    field: str
    operator: str
    value: Scalar

    def __post_init__(self):
        if self.operator not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported operator {self.operator!r} for {self.field}")

    def render(self, start):
        return f"{self.field} {self.operator} {placeholder(start)}", [self.value]


@dataclass(frozen=True)
class Like:
    """field LIKE $n. The pattern is bound as a parameter, never inlined."""
    field: str
    pattern: str

    def render(self, start):
        return f"{self.field} LIKE {placeholder(start)}", [self.pattern]


@dataclass(frozen=True)
class Nullity:
    field: str
    negated: bool = False

    def render(self, start):
        return f"{self.field} {'IS NOT NULL' if self.negated else 'IS NULL'}", []


@dataclass(frozen=True)
class Between:
    field: str
    low: Scalar
    high: Scalar

    def render(self, start):
        sql = f"{self.field} BETWEEN {placeholder(start)} AND {placeholder(start + 1)}"
        return sql, [self.low, self.high]


@dataclass(frozen=True)
class In:
    field: str
    values: Tuple[Scalar, ...]

    def __post_init__(self):
        if not self.values:
            raise ValueError(f"IN condition on {self.field} needs at least one value")

    def render(self, start):
        placeholders = ",".join(placeholder(start + offset) for offset in range(len(self.values)))
        return f"{self.field} IN ({placeholders})", list(self.values)


def build_where(conditions, base: int = 0) -> Tuple[str, List[Scalar]]:
    """Render conditions into a WHERE clause with numbered placeholders.

    ``base`` is the number of placeholders already used earlier in the
    statement (the SET values of an UPDATE), so the first condition value
    lands on ``$base+1``. Returns ``("", [])`` when there is nothing to filter.
    """
    if not conditions:
        return "", []

    parts = []
    values: List[Scalar] = []
    for condition in conditions:
        sql, params = condition.render(base + len(values) + 1)
        parts.append(sql)
        values.extend(params)

    return "WHERE " + " AND ".join(parts), values
