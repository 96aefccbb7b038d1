"""Composable query specifications.

A specification is a filter condition: a query fragment plus the values
bound to it. The repository applies any number of them to one statement,
each through its own ``WHERE`` in the order given, so ``[s1, s2]`` filters
by ``s1 AND s2``.

Fragments use ``?`` as positional placeholder::

    RawSpecification("age >= ? AND name LIKE ?", 18, "a%")

SQLAlchemy expressions work as well::

    ExpressionSpecification(User.age >= 18)
    FieldSpecification(User, active=False)
"""

import re
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import Select, and_, bindparam, inspect, text, true
from sqlalchemy.sql.elements import ColumnElement

from repokit.errors import SpecificationError

_QUOTED_LITERAL = re.compile(r"'(?:[^']|'')*'")


@runtime_checkable
class Specification(Protocol):
    """Query fragment plus its positional values."""

    def get_query(self) -> str | ColumnElement[bool]: ...

    def get_values(self) -> Sequence[Any]: ...


class RawSpecification:
    """SQL fragment with ``?`` placeholders."""

    __slots__ = ("query", "values")

    def __init__(self, query: str, *values: Any):
        if not query or not query.strip():
            raise SpecificationError("specification query must not be empty")
        self.query = query
        self.values = tuple(values)

    def get_query(self) -> str:
        return self.query

    def get_values(self) -> tuple[Any, ...]:
        return self.values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawSpecification):
            return NotImplemented
        return self.query == other.query and self.values == other.values

    def __hash__(self) -> int:
        return hash((self.query, self.values))

    def __repr__(self) -> str:
        return f"RawSpecification({self.query!r}, {', '.join(map(repr, self.values))})"


class ExpressionSpecification:
    """Specification around a SQLAlchemy boolean expression."""

    __slots__ = ("expression",)

    def __init__(self, expression: ColumnElement[bool]):
        self.expression = expression

    def get_query(self) -> ColumnElement[bool]:
        return self.expression

    def get_values(self) -> tuple[Any, ...]:
        return ()

    def __repr__(self) -> str:
        return f"ExpressionSpecification({self.expression})"


class FieldSpecification(ExpressionSpecification):
    """
    Equality filters by column name.

    Every given field is filtered on, including ``0``, ``False`` and ``""``;
    ``None`` becomes ``IS NULL``.
    """

    __slots__ = ("model", "fields")

    def __init__(self, model: type, **fields: Any):
        columns = inspect(model).column_attrs
        conditions = []
        for key, value in fields.items():
            if key not in columns:
                raise SpecificationError(f"{model.__name__} has no column attribute {key!r}")
            column = getattr(model, key)
            conditions.append(column.is_(None) if value is None else column == value)

        super().__init__(and_(*conditions) if conditions else true())
        self.model = model
        self.fields = fields

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.fields.items())
        return f"FieldSpecification({self.model.__name__}, {args})"


def example_filters(instance: Any, skip_none: bool = False) -> dict[str, Any]:
    """
    Column values explicitly set on a mapped instance.

    Only attributes present in the instance state count, so a transient
    ``User(active=False)`` yields ``{"active": False}`` and unset columns are
    left out. With ``skip_none`` the ``None`` values are dropped too.
    """
    state = inspect(instance)
    filters = {}
    for attr in state.mapper.column_attrs:
        if attr.key not in state.dict:
            continue
        value = state.dict[attr.key]
        if skip_none and value is None:
            continue
        filters[attr.key] = value
    return filters


def by_example(instance: Any, skip_none: bool = False) -> FieldSpecification:
    """Specification matching rows equal to ``instance`` on its set columns."""
    return FieldSpecification(type(instance), **example_filters(instance, skip_none=skip_none))


def _split_placeholders(query: str) -> list[str]:
    """Split ``query`` on ``?`` placeholders outside single-quoted literals."""
    parts = [""]
    pos = 0
    for match in _QUOTED_LITERAL.finditer(query):
        chunks = query[pos:match.start()].split("?")
        parts[-1] += chunks[0]
        parts.extend(chunks[1:])
        parts[-1] += match.group(0)
        pos = match.end()
    chunks = query[pos:].split("?")
    parts[-1] += chunks[0]
    parts.extend(chunks[1:])
    return parts


def to_clause(spec: Specification) -> ColumnElement[bool]:
    """Turn a specification into a clause usable with ``Select.where``."""
    query = spec.get_query()
    values = tuple(spec.get_values())

    if not isinstance(query, str):
        if values:
            raise SpecificationError("expression specifications carry their own values")
        return query

    parts = _split_placeholders(query)
    if len(parts) - 1 != len(values):
        raise SpecificationError(
            f"{query!r} has {len(parts) - 1} placeholders but {len(values)} values"
        )

    # Colons in the fragment are literal text, only the rewritten placeholders bind
    parts = [part.replace(":", "\\:") for part in parts]
    names = [f"p{i}" for i in range(len(values))]
    sql = parts[0] + "".join(f":{name}{part}" for name, part in zip(names, parts[1:]))
    clause = text(sql)
    if values:
        clause = clause.bindparams(*(_bind(name, value) for name, value in zip(names, values)))
    return clause


def _bind(name: str, value: Any):
    # Collections expand for "col IN ?"
    if isinstance(value, (list, tuple, set, frozenset)):
        return bindparam(name, list(value), unique=True, expanding=True)
    return bindparam(name, value, unique=True)


def and_specifications(*specs: Specification) -> Specification:
    """
    Fold specifications into one conjunction, keeping their order.

    Plain fragments combine into ``(q1) AND (q2)`` with the values
    concatenated in the same order; as soon as an expression is involved the
    result is an ``ExpressionSpecification``.
    """
    if not specs:
        raise SpecificationError("and_specifications needs at least one specification")

    queries = [s.get_query() for s in specs]
    if all(isinstance(q, str) for q in queries):
        if len(specs) == 1:
            return RawSpecification(queries[0], *specs[0].get_values())
        values: list[Any] = []
        for s in specs:
            values.extend(s.get_values())
        return RawSpecification(" AND ".join(f"({q})" for q in queries), *values)

    return ExpressionSpecification(and_(*(to_clause(s) for s in specs)))


def apply_specifications(stmt: Select, specs: Sequence[Specification]) -> Select:
    """Add one ``WHERE`` per specification, in order."""
    for spec in specs:
        stmt = stmt.where(to_clause(spec))
    return stmt
