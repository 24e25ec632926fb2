"""
=====================
SELECT query builder.
=====================

Assembles MySQL SELECT statements from clause inputs. Clauses are emitted in
the grammatical order MySQL requires:

    [WITH RECURSIVE ...] SELECT [DISTINCT] <list> FROM <table>
    <joins> WHERE ... GROUP BY ... HAVING ... ORDER BY ... LIMIT ... OFFSET ...

Builders:
- build_select: Build a SELECT statement
- render_select_list: Columns, subqueries and aggregates as one select list
- render_aggregates: Aggregate calls with their aliases
- render_recursive_cte: WITH RECURSIVE prefix

Usage:
    from query.query_builder import build_select

    sql = build_select(
        table='orders',
        columns={'orders': ['id', 'total']},
        joins=[{'orders': 'customer_id', 'customers': 'id'}],
        where='orders.total > 100',
        sort={'orders': {'total': -1}},
        limit_skip={'limit': 10, 'skip': 20}
    )
    # SELECT orders.id, orders.total FROM orders JOIN customers
    # ON orders.customer_id = customers.id WHERE orders.total > 100
    # ORDER BY orders.total DESC LIMIT 10 OFFSET 20
"""

from typing import Any, Iterable, Optional

from core.config import get_config
from core.logger import get_logger, log_statement
from query.clauses import parse_columns, parse_group_by, parse_joins, parse_sort
from query.exceptions import MissingFieldError
from query.specs import (
    AGGREGATE_ALIASES,
    Aggregate,
    RecursiveCTE,
    aggregate_spec,
    limit_skip_spec,
    recursive_cte_spec,
    sub_query_spec,
)

logger = get_logger(__name__)


def render_recursive_cte(cte: RecursiveCTE) -> str:
    """Render ``WITH RECURSIVE <alias> AS (<base> UNION ALL <recursive>) ``."""
    return f"WITH RECURSIVE {cte.alias or ''} AS ({cte.base_case} UNION ALL {cte.recursive_case}) "


def _render_aggregate(aggregate: Aggregate) -> str:
    if aggregate.alias:
        calls = ", ".join(f"{function}({expression})" for function, expression in aggregate.functions)
        return f"{calls} AS {aggregate.alias}"
    return ", ".join(
        f"{function}({expression}) AS {AGGREGATE_ALIASES.get(function, function)}"
        for function, expression in aggregate.functions
    )


def render_aggregates(aggregates: Optional[Iterable[Any]]) -> str:
    """
    Render aggregate descriptors for the select list.

    A descriptor with an ``alias`` puts it after its calls; without one, each
    call gets the default alias for its function (MIN -> minimum,
    MAX -> maximum, SUM -> summation, COUNT -> count, AVG -> average), or the
    function name itself when unrecognized.

    Args:
        aggregates: Sequence of mappings like ``{'COUNT': 'id', 'alias': 'n'}``
            or Aggregate variants

    Returns:
        Comma-joined aggregate calls, or ''
    """
    if not aggregates:
        return ''
    return ", ".join(_render_aggregate(aggregate_spec(item)) for item in aggregates)


def render_sub_queries(sub_queries: Optional[Iterable[Any]]) -> str:
    """Render ``(query) AS alias`` / ``(query)`` items for the select list."""
    if not sub_queries:
        return ''
    rendered = []
    for item in sub_queries:
        sub_query = sub_query_spec(item)
        if sub_query.alias:
            rendered.append(f"({sub_query.query}) AS {sub_query.alias}")
        else:
            rendered.append(f"({sub_query.query})")
    return ", ".join(rendered)


def render_select_list(
    columns: Any = None,
    sub_queries: Optional[Iterable[Any]] = None,
    aggregates: Optional[Iterable[Any]] = None
) -> str:
    """
    Build the select list: columns, then subqueries, then aggregates.

    Returns:
        Select list text, or '*' when nothing was requested
    """
    pieces = [
        parse_columns(columns),
        render_sub_queries(sub_queries),
        render_aggregates(aggregates),
    ]
    return ", ".join(piece for piece in pieces if piece) or "*"


def build_select(
    table: Optional[str] = None,
    columns: Any = None,
    distinct: bool = False,
    sub_queries: Optional[Iterable[Any]] = None,
    aggregates: Optional[Iterable[Any]] = None,
    joins: Optional[Iterable[Any]] = None,
    where: Optional[str] = None,
    group_by: Any = None,
    having: Optional[str] = None,
    sort: Any = None,
    limit_skip: Any = None,
    recursive_cte: Any = None
) -> str:
    """
    Build a SELECT statement.

    Args:
        table: Table to select from (replaced by the CTE alias when
            recursive_cte is given)
        columns: Column specification (string, list, or per-table mapping)
        distinct: Use SELECT DISTINCT
        sub_queries: Subqueries for the select list (``{'query', 'as'}``)
        aggregates: Aggregate descriptors (``{'SUM': 'total', 'alias': ...}``)
        joins: Join descriptors
        where: Raw WHERE predicate
        group_by: Group-by specification
        having: Raw HAVING predicate
        sort: Sort specification
        limit_skip: ``{'limit': n, 'skip': m}``; zero values are omitted
        recursive_cte: ``{'baseCase', 'recursiveCase', 'alias'}``

    Returns:
        SQL SELECT statement without a trailing terminator

    Raises:
        MissingFieldError: Only when ``strict_select`` is configured and
            neither a table nor a CTE alias is available
        JoinSpecError: If a join descriptor is malformed

    Note:
        Without ``strict_select`` a missing table is not rejected; the
        statement ends in a bare ``FROM``.
    """
    source = table
    sql = ""

    if recursive_cte:
        cte = recursive_cte_spec(recursive_cte)
        sql = render_recursive_cte(cte)
        source = cte.alias

    if not source:
        if get_config().strict_select:
            field = 'recursive_cte.alias' if recursive_cte else 'table'
            logger.error(f"SELECT build rejected: `{field}` is missing")
            raise MissingFieldError(field, 'SELECT')
        logger.warning("Building SELECT without a table; the statement will not be valid SQL")

    sql += "SELECT "
    if distinct:
        sql += "DISTINCT "

    sql += f"{render_select_list(columns, sub_queries, aggregates)} FROM {source or ''}"

    if joins:
        sql += parse_joins(joins)

    if where:
        sql += f" WHERE {where}"

    if group_by:
        sql += parse_group_by(group_by)

    if having:
        sql += f" HAVING {having}"

    if sort:
        sql += parse_sort(sort)

    if limit_skip:
        paging = limit_skip_spec(limit_skip)
        if paging.limit:
            sql += f" LIMIT {paging.limit}"
        if paging.skip:
            sql += f" OFFSET {paging.skip}"

    sql = sql.strip()
    log_statement(logger, 'SELECT', sql)
    return sql
