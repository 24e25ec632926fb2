"""
========================
Clause fragment parsers.
========================

Pure functions turning one clause input into one SQL fragment. Inputs may be
plain strings/lists/dicts or the variants from query.specs; they are
normalized first and then rendered per variant.

Parsers:
- parse_sort: ORDER BY fragment (leading space included)
- parse_group_by: GROUP BY fragment (leading space included)
- parse_columns: bare select list (no keyword)
- parse_joins: chain of JOIN fragments (each with a leading space)

Every parser returns an empty string for absent or empty input.

Usage:
    from query.clauses import parse_columns, parse_joins, parse_sort

    parse_sort({'users': {'name': 1}, 'created_at': -1})
    # ' ORDER BY users.name ASC, created_at DESC'

    parse_joins([{'customers': 'customer_id', 'orders': 'customer_id'}])
    # ' JOIN orders ON customers.customer_id = orders.customer_id'
"""

from typing import Any, Iterable, List, Mapping, Optional

from query.exceptions import SpecificationError
from query.specs import (
    ColumnList,
    ColumnSpec,
    EquiJoin,
    ExplicitJoin,
    JoinSpec,
    RawColumns,
    RawSort,
    SortKeys,
    TableColumns,
    column_spec,
    join_spec,
    sort_spec,
)


def _column_pieces(spec: Optional[ColumnSpec]) -> List[str]:
    if spec is None:
        return []
    if isinstance(spec, RawColumns):
        return [spec.text]
    if isinstance(spec, ColumnList):
        return list(spec.names)
    if isinstance(spec, TableColumns):
        pieces = []
        for group in spec.groups:
            if group.is_extra:
                pieces.append(", ".join(group.columns))
            else:
                pieces.extend(f"{group.table}.{column}" for column in group.columns)
        return [piece for piece in pieces if piece]
    raise TypeError(f"Unhandled column variant: {spec!r}")


def parse_columns(columns: Any) -> str:
    """
    Render a column specification as a comma-separated select list.

    Args:
        columns: String, list of names, per-table mapping (with optional
            ``extra``), or a column variant

    Returns:
        Select list text without the SELECT keyword, or '' when empty
    """
    return ", ".join(_column_pieces(column_spec(columns)))


def parse_group_by(group_by: Any) -> str:
    """
    Render a GROUP BY fragment.

    Accepts the same shapes as parse_columns. A mapping that yields no
    columns gives '' rather than a bare ' GROUP BY '.

    Args:
        group_by: Group-by specification

    Returns:
        ' GROUP BY ...' or ''
    """
    pieces = _column_pieces(column_spec(group_by))
    if not pieces:
        return ''
    return f" GROUP BY {', '.join(pieces)}"


def parse_sort(sort: Any) -> str:
    """
    Render an ORDER BY fragment.

    Args:
        sort: String, mapping of column to direction code, mapping of table
            alias to such a mapping, or a sort variant

    Returns:
        ' ORDER BY ...' or '' when nothing renders
    """
    spec = sort_spec(sort)
    if spec is None:
        return ''
    if isinstance(spec, RawSort):
        return f" ORDER BY {spec.text}"
    if isinstance(spec, SortKeys):
        keys = [
            f"{key.table}.{key.column} {key.direction}" if key.table else f"{key.column} {key.direction}"
            for key in spec.keys
        ]
        return f" ORDER BY {', '.join(keys)}" if keys else ''
    raise TypeError(f"Unhandled sort variant: {spec!r}")


def render_join(join: JoinSpec) -> str:
    """Render one normalized join with its leading space."""
    if isinstance(join, ExplicitJoin):
        return f" {join.type} {join.table} ON {join.on}"
    if isinstance(join, EquiJoin):
        return (
            f" {join.type} {join.right_table} ON "
            f"{join.left_table}.{join.left_column} {join.operator} "
            f"{join.right_table}.{join.right_column}"
        )
    raise TypeError(f"Unhandled join variant: {join!r}")


def parse_joins(joins: Optional[Iterable[Any]]) -> str:
    """
    Render a chain of JOIN fragments.

    Each descriptor is validated before anything is rendered, so a malformed
    descriptor never yields a partial chain. Renderings are joined with a
    single space on top of their own leading space.

    Args:
        joins: Sequence of join descriptors (mappings or join variants)

    Returns:
        Concatenated JOIN fragments, or '' when there are none

    Raises:
        JoinSpecError: If a descriptor has neither ``on`` nor exactly two pairs
    """
    if not joins:
        return ''
    if isinstance(joins, (Mapping, str)):
        raise SpecificationError(
            f"Joins must be a list of descriptors, got {type(joins).__name__}"
        )
    normalized = [join_spec(descriptor) for descriptor in joins]
    return " ".join(render_join(join) for join in normalized)
