"""
==========================================
Data Manipulation Language (DML) Builders.
==========================================

This module builds MySQL INSERT, UPDATE and DELETE statements from plain
Python inputs. Values are rendered as JSON-style literals (see
query.literals); conditions and expressions are passed through verbatim.

Functions:
- build_insert: INSERT / INSERT IGNORE / INSERT ... ON DUPLICATE KEY UPDATE
- build_update: UPDATE with CASE values, calculations, NULL/DEFAULT resets
- build_delete: DELETE with joins, ordering and a row limit

Usage:
    from query.dml import build_delete, build_insert, build_update

    build_insert(
        table='products',
        insert_data=[{'name': 'Laptop', 'price': 1000}, {'name': 'Phone', 'price': 500}],
        on_duplicate_update_fields=['price']
    )
    # INSERT INTO products (name, price) VALUES ("Laptop",1000), ("Phone",500)
    # ON DUPLICATE KEY UPDATE price = VALUES(price)

    build_update(
        table='employees',
        update_data={'salary': {'case': [{'when': "position = 'Manager'", 'then': 100000}],
                                'default': 50000}},
        where='id = 1'
    )
    # UPDATE employees SET salary = CASE WHEN position = 'Manager' THEN 100000
    # ELSE 50000 END WHERE id = 1

    build_delete(table='users', where='age > 30')
    # DELETE users FROM users WHERE age > 30
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from core.logger import get_logger, log_statement
from query.clauses import parse_joins, parse_sort
from query.exceptions import MissingFieldError, SpecificationError
from query.literals import CURRENT_TIMESTAMP, render_literal, render_row
from query.specs import NO_ELSE, CaseUpdate, case_update_spec, is_case_value

logger = get_logger(__name__)

Row = Mapping[str, Any]


def _require(value: Any, field: str, statement: str) -> None:
    if not value or (isinstance(value, str) and not value.strip()):
        logger.error(f"{statement} build rejected: `{field}` is missing")
        raise MissingFieldError(field, statement)


def _normalize_rows(insert_data: Union[Row, Sequence[Row]]) -> List[Row]:
    if isinstance(insert_data, Mapping):
        rows = [insert_data]
    elif isinstance(insert_data, (list, tuple)):
        rows = list(insert_data)
    else:
        raise SpecificationError(
            f"insert_data must be a mapping or a list of mappings, got {type(insert_data).__name__}"
        )
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise SpecificationError(
                f"insert_data row {index} must be a mapping, got {type(row).__name__}"
            )
    if not rows[0]:
        logger.error("INSERT build rejected: insert data is empty")
        raise MissingFieldError('insert_data', 'INSERT', "Insert data is empty.")
    return rows


def build_insert(
    table: Optional[str] = None,
    insert_data: Union[Row, Sequence[Row], None] = None,
    date_fields: Optional[Sequence[str]] = None,
    unique_column: Optional[str] = None,
    on_duplicate_update_fields: Optional[Sequence[str]] = None
) -> str:
    """
    Generate an INSERT statement for one or many rows.

    The column list comes from the first row's keys followed by
    ``date_fields``; every date field receives ``CURRENT_TIMESTAMP``. Exactly
    one statement form is chosen, in priority order:

    1. ``unique_column`` set: ``INSERT IGNORE INTO ...``
    2. ``on_duplicate_update_fields`` non-empty:
       ``INSERT INTO ... ON DUPLICATE KEY UPDATE f = VALUES(f), ...``
    3. otherwise a plain ``INSERT INTO ...``

    Args:
        table: Target table
        insert_data: One row mapping or a list of row mappings sharing the
            same columns
        date_fields: Columns populated with CURRENT_TIMESTAMP
        unique_column: Unique column; switches to INSERT IGNORE
        on_duplicate_update_fields: Columns refreshed on duplicate key

    Returns:
        SQL INSERT statement

    Raises:
        MissingFieldError: If insert_data is absent or empty
    """
    if not insert_data:
        logger.error("INSERT build rejected: insert data is empty")
        raise MissingFieldError('insert_data', 'INSERT', "Insert data is empty.")

    rows = _normalize_rows(insert_data)
    date_fields = list(date_fields or [])
    columns = list(rows[0].keys())

    for index, row in enumerate(rows[1:], start=1):
        if set(row.keys()) != set(columns):
            logger.warning(
                f"INSERT row {index} columns {sorted(row.keys())} differ from first row "
                f"{sorted(columns)}; using the first row's columns"
            )

    column_list = ", ".join(columns + date_fields)
    timestamps = [CURRENT_TIMESTAMP] * len(date_fields)
    values = ", ".join(
        f"({render_row([row.get(column) for column in columns] + timestamps)})"
        for row in rows
    )

    if unique_column:
        sql = f"INSERT IGNORE INTO {table} ({column_list}) VALUES {values}"
    elif on_duplicate_update_fields:
        update_fields = ", ".join(
            f"{field} = VALUES({field})" for field in on_duplicate_update_fields
        )
        sql = (
            f"INSERT INTO {table} ({column_list}) VALUES {values} "
            f"ON DUPLICATE KEY UPDATE {update_fields}"
        )
    else:
        sql = f"INSERT INTO {table} ({column_list}) VALUES {values}"

    log_statement(logger, 'INSERT', sql)
    return sql


def render_case(case: CaseUpdate) -> str:
    """Render ``CASE WHEN ... THEN ... [ELSE ...] END``."""
    branches = " ".join(
        f"WHEN {branch.when} THEN {render_literal(branch.then)}" for branch in case.branches
    )
    if case.default is NO_ELSE:
        return f"CASE {branches} END"
    return f"CASE {branches} ELSE {render_literal(case.default)} END"


def render_assignment(column: str, value: Any) -> str:
    """
    Render one ``column = value`` assignment from update data.

    CASE descriptors become CASE expressions; strings are trimmed and quoted;
    numbers and booleans stay bare; Raw/NULL/DEFAULT are emitted as given.
    """
    if is_case_value(value):
        return f"{column} = {render_case(case_update_spec(value))}"
    if isinstance(value, Mapping):
        raise SpecificationError(
            f"Update value for '{column}' must be a scalar or a CASE descriptor"
        )
    return f"{column} = {render_literal(value, trim=True)}"


def _expression_assignments(expressions: Optional[Mapping[str, str]]) -> str:
    if not expressions:
        return ''
    return ", ".join(f"{column} = {expression}" for column, expression in expressions.items())


def _keyword_assignments(columns: Optional[Iterable[str]], keyword: str) -> str:
    if not columns:
        return ''
    return ", ".join(f"{column} = {keyword}" for column in columns)


def build_update(
    table: Optional[str] = None,
    where: Optional[str] = None,
    joins: Optional[Iterable[Any]] = None,
    update_data: Optional[Mapping[str, Any]] = None,
    null_values: Optional[Sequence[str]] = None,
    default_values: Optional[Sequence[str]] = None,
    limit: Optional[Union[int, str]] = None,
    sort: Any = None,
    from_sub_query: Optional[Mapping[str, str]] = None,
    set_calculations: Optional[Mapping[str, str]] = None
) -> str:
    """
    Generate an UPDATE statement.

    Assignment groups are emitted in this order, each only when non-empty:
    update_data, set_calculations, from_sub_query, null_values,
    default_values.

    Args:
        table: Table to update
        where: Raw WHERE predicate (required)
        joins: Join descriptors, rendered right after UPDATE
        update_data: Column to literal or CASE descriptor
            (``{'case': [{'when': ..., 'then': ...}], 'default': ...}``)
        null_values: Columns set to NULL
        default_values: Columns set to DEFAULT
        limit: Maximum number of rows to update
        sort: Sort specification applied before LIMIT
        from_sub_query: Column to raw subquery expression
        set_calculations: Column to raw expression (e.g. ``'price * 1.1'``)

    Returns:
        SQL UPDATE statement

    Raises:
        MissingFieldError: If table or where is missing
    """
    _require(table, 'table', 'UPDATE')
    _require(where, 'where', 'UPDATE')

    groups: List[str] = []
    if update_data:
        groups.append(", ".join(
            render_assignment(column, value) for column, value in update_data.items()
        ))
    groups.append(_expression_assignments(set_calculations))
    groups.append(_expression_assignments(from_sub_query))
    groups.append(_keyword_assignments(null_values, 'NULL'))
    groups.append(_keyword_assignments(default_values, 'DEFAULT'))

    assignments = ", ".join(group for group in groups if group)
    if not assignments:
        logger.warning(f"Building UPDATE on '{table}' without any assignments")

    sql = f"UPDATE{parse_joins(joins)} {table} SET {assignments}"
    sql += f" WHERE {where}"

    if sort:
        sql += parse_sort(sort)

    if limit:
        sql += f" LIMIT {limit}"

    log_statement(logger, 'UPDATE', sql)
    return sql


def build_delete(
    table: Optional[str] = None,
    where: Optional[str] = None,
    joins: Optional[Iterable[Any]] = None,
    sort: Any = None,
    limit: Optional[Union[int, str]] = None
) -> str:
    """
    Generate a DELETE statement.

    Args:
        table: Table to delete from
        where: Raw WHERE predicate (required)
        joins: Join descriptors
        sort: Sort specification applied before LIMIT
        limit: Maximum number of rows to delete

    Returns:
        SQL DELETE statement of the form ``DELETE t FROM t ...``

    Raises:
        MissingFieldError: If table or where is missing
    """
    _require(table, 'table', 'DELETE')
    _require(where, 'where', 'DELETE')

    sql = f"DELETE {table} FROM {table}"

    if joins:
        sql += parse_joins(joins)

    sql += f" WHERE {where}"

    if sort:
        sql += parse_sort(sort)

    if limit:
        sql += f" LIMIT {limit}"

    log_statement(logger, 'DELETE', sql)
    return sql

