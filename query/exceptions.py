"""
=========================================
Exceptions raised while building queries.
=========================================

Every failure is raised synchronously from the builder call that detected it;
no partial statement is ever returned.

Hierarchy:
    QueryBuildError
    ├── MissingFieldError   (also a ValueError)
    ├── JoinSpecError       (also a ValueError)
    ├── SpecificationError  (also a TypeError)
    └── LiteralError        (also a TypeError)
"""

from typing import Optional


class QueryBuildError(Exception):
    """Base exception for all statement construction errors."""
    pass


class MissingFieldError(QueryBuildError, ValueError):
    """Exception raised when a required input is absent or empty.

    Attributes:
        field: Name of the missing input (e.g. 'table', 'where')
        statement: Statement kind that required it (e.g. 'UPDATE')
    """

    def __init__(self, field: str, statement: str, message: Optional[str] = None):
        self.field = field
        self.statement = statement
        super().__init__(
            message or f"The `{field}` parameter is required for {statement} statements."
        )


class JoinSpecError(QueryBuildError, ValueError):
    """Exception raised for a join descriptor that names no usable relation.

    Attributes:
        found: Number of table/column pairs found in the descriptor
        shorthand: True when the descriptor had no explicit join type
    """

    def __init__(self, found: int, shorthand: bool):
        self.found = found
        self.shorthand = shorthand
        if shorthand:
            message = (
                f"JOIN shorthand requires exactly two tables, but found {found} "
                "or condition not found"
            )
        else:
            message = (
                f"JOIN requires exactly two tables for a relation, but found {found} "
                "or condition not found"
            )
        super().__init__(message)


class SpecificationError(QueryBuildError, TypeError):
    """Exception raised for a clause input of an unsupported shape."""
    pass


class LiteralError(QueryBuildError, TypeError):
    """Exception raised for a value that has no SQL literal form."""
    pass
