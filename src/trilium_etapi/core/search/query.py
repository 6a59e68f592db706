"""Build Trilium search query strings from structured condition trees.

A condition tree is a JSON-like mapping. A node is either a combinator
(``{"AND": [...]}``, ``{"OR": [...]}``, ``{"NOT": {...}}``) or a leaf map whose
keys select what to compare:

- ``#name``: a label (``#name.sub`` compares a nested label property)
- ``~name``: a relation
- anything else: a note property, prefixed with ``note.`` unless already so

Example::

    >>> build_search_query({"AND": [{"#blog": True}, {"OR": [{"#status": "a"}, {"#status": "b"}]}]})
    "#blog AND (#status = 'a' OR #status = 'b')"

The tree is parsed into explicit node types first (``parse_query``) and then
rendered (``render_query``). String values are quoted with single quotes and
are not escaped; callers must pass quote-safe text.
"""

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Union, get_args

ComparisonOperator = Literal["=", "!=", "<", "<=", ">", ">=", "*=", "=*", "*=*"]

SEARCH_OPERATORS: frozenset[str] = frozenset(get_args(ComparisonOperator))

_NOT_REQUIRES_QUERY = "NOT operator requires a query object, not a simple value"


class QueryBuildError(ValueError):
    """Raised when a condition tree cannot be turned into a query string."""


@dataclass(frozen=True)
class ConditionValue:
    """A value compared with an explicit operator (``=`` or ``*=*`` when omitted)."""

    value: str | int | float | bool
    operator: ComparisonOperator | None = None


class ConditionKind(enum.Enum):
    LABEL = "label"
    RELATION = "relation"
    PROPERTY = "property"


@dataclass(frozen=True)
class Condition:
    """One comparison against a label, relation or note property."""

    kind: ConditionKind
    key: str
    value: str | int | float | bool
    operator: ComparisonOperator | None = None
    explicit: bool = False

    @property
    def nested(self) -> bool:
        """True for ``#label.property`` / ``~relation.property`` keys."""
        return self.kind is not ConditionKind.PROPERTY and "." in self.key[1:]


@dataclass(frozen=True)
class LeafNode:
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True)
class AndNode:
    children: tuple["QueryNode", ...]


@dataclass(frozen=True)
class OrNode:
    children: tuple["QueryNode", ...]


@dataclass(frozen=True)
class NotNode:
    child: "QueryNode"


QueryNode = Union[AndNode, OrNode, NotNode, LeafNode]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


def _classify(key: str) -> ConditionKind:
    if key.startswith("#"):
        return ConditionKind.LABEL
    if key.startswith("~"):
        return ConditionKind.RELATION
    return ConditionKind.PROPERTY


def _parse_condition(key: str, value: Any) -> Condition:
    kind = _classify(key)
    if isinstance(value, ConditionValue):
        return Condition(kind, key, value.value, value.operator, explicit=True)
    if isinstance(value, Mapping) and "value" in value:
        return Condition(kind, key, value["value"], value.get("operator"), explicit=True)
    return Condition(kind, key, value)


def parse_query(helpers: Mapping[str, Any]) -> QueryNode:
    """Turn a JSON-like condition tree into explicit query nodes.

    Combinators are checked before leaf keys, in the order AND, OR, NOT; leaf
    keys sitting next to a combinator are ignored.

    Raises:
        QueryBuildError: ``NOT`` holds a plain value instead of a condition tree.
    """
    and_children = helpers.get("AND")
    if _is_sequence(and_children):
        return AndNode(tuple(parse_query(child) for child in and_children))

    or_children = helpers.get("OR")
    if _is_sequence(or_children):
        return OrNode(tuple(parse_query(child) for child in or_children))

    negated = helpers.get("NOT")
    if negated is not None:
        if isinstance(negated, Mapping) and "value" not in negated:
            return NotNode(parse_query(negated))
        raise QueryBuildError(_NOT_REQUIRES_QUERY)

    return LeafNode(
        tuple(_parse_condition(key, value) for key, value in helpers.items() if value is not None)
    )


def _format_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    return _format_scalar(value)


def _render_condition(condition: Condition) -> str | None:
    """Render one condition, or None when it has no query form."""
    key, value = condition.key, condition.value

    if condition.kind is ConditionKind.PROPERTY:
        lhs = key if key.startswith("note.") else f"note.{key}"
        return f"{lhs} {condition.operator or '='} {_format_value(value)}"

    if condition.explicit:
        default_op = "*=*" if condition.kind is ConditionKind.RELATION and not condition.nested else "="
        return f"{key} {condition.operator or default_op} {_format_value(value)}"

    if condition.nested:
        return f"{key} = {_format_value(value)}"

    if condition.kind is ConditionKind.RELATION:
        # bare numbers and booleans have no relation form
        if isinstance(value, str):
            return f"{key} *=* '{value}'"
        return None

    if value is True:
        return key
    if value is False:
        return f"#!{key[1:]}"
    return f"{key} = {_format_value(value)}"


def render_query(node: QueryNode) -> str:
    """Render parsed query nodes as a Trilium search string."""
    if isinstance(node, AndNode):
        parts = [render_query(child) for child in node.children]
        return " AND ".join(f"({part})" if " OR " in part else part for part in parts)

    if isinstance(node, OrNode):
        parts = [render_query(child) for child in node.children]
        return " OR ".join(
            f"({part})" if " AND " in part or " OR " in part else part for part in parts
        )

    if isinstance(node, NotNode):
        return f"not({render_query(node.child)})"

    rendered = (_render_condition(condition) for condition in node.conditions)
    return " AND ".join(part for part in rendered if part is not None)


def build_search_query(helpers: Mapping[str, Any] | QueryNode) -> str:
    """Build a Trilium search string from a condition tree or parsed nodes.

    Args:
        helpers: Condition tree (see module docstring) or a node from ``parse_query``.

    Returns:
        The query string; empty for an empty leaf map.

    Raises:
        QueryBuildError: ``NOT`` was given a plain value.
    """
    if isinstance(helpers, (AndNode, OrNode, NotNode, LeafNode)):
        return render_query(helpers)
    return render_query(parse_query(helpers))
