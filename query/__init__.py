"""
======================================================
MySQL statement builders from composable clause specs.
======================================================

This package renders SELECT, INSERT, UPDATE and DELETE statements for a
MySQL target from plain Python configuration. All functions are pure: they
return SQL text and never touch a database.

The package follows a clear organization:
    - specs.py: Clause input variants and their coercion from plain shapes
    - literals.py: JSON-style literal rendering for values
    - clauses.py: ORDER BY / GROUP BY / select list / JOIN fragments
    - query_builder.py: SELECT builder (aggregates, subqueries, recursive CTE)
    - dml.py: INSERT / UPDATE / DELETE builders
    - statements.py: Dispatch by verb and camelCase configuration mappings
    - exceptions.py: Error hierarchy

Example:
    >>> from query import build_delete, build_insert, build_select
    >>>
    >>> build_insert(table='t', insert_data={'a': 1, 'b': 'x'})
    'INSERT INTO t (a, b) VALUES (1,"x")'
    >>>
    >>> build_delete(table='users', where='age > 30')
    'DELETE users FROM users WHERE age > 30'
    >>>
    >>> build_select(
    ...     table='customers',
    ...     joins=[{'customers': 'customer_id', 'orders': 'customer_id'}]
    ... )
    'SELECT * FROM customers JOIN orders ON customers.customer_id = orders.customer_id'
"""

__version__ = "1.0.0"
__all__ = [
    # Builders
    'build_select', 'build_insert', 'build_update', 'build_delete',
    'build_statement', 'build_from_config',
    # Clause parsers
    'parse_sort', 'parse_group_by', 'parse_columns', 'parse_joins',
    # Literals
    'Raw', 'NULL', 'DEFAULT', 'CURRENT_TIMESTAMP',
    # Exceptions
    'QueryBuildError', 'MissingFieldError', 'JoinSpecError',
    'SpecificationError', 'LiteralError'
]

from .clauses import parse_columns, parse_group_by, parse_joins, parse_sort
from .dml import build_delete, build_insert, build_update
from .exceptions import (
    JoinSpecError,
    LiteralError,
    MissingFieldError,
    QueryBuildError,
    SpecificationError,
)
from .literals import CURRENT_TIMESTAMP, DEFAULT, NULL, Raw
from .query_builder import build_select
from .statements import build_from_config, build_statement
