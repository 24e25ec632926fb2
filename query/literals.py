"""
======================
SQL literal rendering.
======================

Converts Python values into the literal text placed in VALUES tuples and SET
assignments. The serialisation is JSON-style: strings are double-quoted with
JSON escapes, numbers and booleans are bare, which is what MySQL accepts with
its default SQL mode.

Values are classified once, here:
- Raw('price * 1.1')      -> emitted verbatim
- NULL / DEFAULT          -> bare keywords
- CURRENT_TIMESTAMP       -> bare keyword
- True / False            -> true / false
- 42, 1.5, Decimal('2.50') -> 42, 1.5, 2.50
- 'text'                  -> "text"
- None                    -> NULL
- date / datetime         -> "2024-01-31" / "2024-01-31 12:00:00"

Usage:
    from query.literals import Raw, render_literal, render_row

    render_literal('  John ', trim=True)   # '"John"'
    render_row([1, 'x', None])             # '1,"x",NULL'
"""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from query.exceptions import LiteralError


@dataclass(frozen=True)
class Raw:
    """A SQL expression emitted without quoting (e.g. ``'price * 1.1'``)."""

    expression: str

    def __str__(self) -> str:
        return self.expression


@dataclass(frozen=True)
class Keyword:
    """A bare SQL keyword used as a value (NULL, DEFAULT, CURRENT_TIMESTAMP)."""

    name: str

    def __str__(self) -> str:
        return self.name


NULL = Keyword('NULL')
DEFAULT = Keyword('DEFAULT')
CURRENT_TIMESTAMP = Keyword('CURRENT_TIMESTAMP')


def _render_number(value: Any) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        raise LiteralError(f"Cannot render non-finite number {value!r} as a SQL literal")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise LiteralError(f"Cannot render non-finite number {value!r} as a SQL literal")
        return str(value)
    return json.dumps(value)


def render_literal(value: Any, trim: bool = False) -> str:
    """
    Render one Python value as a SQL literal.

    Args:
        value: Value to render
        trim: Strip surrounding whitespace from strings before quoting

    Returns:
        Literal text

    Raises:
        LiteralError: If the value has no literal form
    """
    if isinstance(value, (Raw, Keyword)):
        return str(value)
    if value is None:
        return str(NULL)
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float, Decimal)):
        return _render_number(value)
    if isinstance(value, str):
        return json.dumps(value.strip() if trim else value, ensure_ascii=False)
    if isinstance(value, datetime):
        return json.dumps(value.isoformat(sep=' '))
    if isinstance(value, date):
        return json.dumps(value.isoformat())
    raise LiteralError(
        f"Cannot render value of type {type(value).__name__} as a SQL literal: {value!r}"
    )


def render_row(values: Iterable[Any], trim: bool = False) -> str:
    """
    Render a sequence of values as a comma-joined literal list.

    No spaces separate the items, matching how a JSON array body prints.

    Args:
        values: Values in column order
        trim: Strip surrounding whitespace from strings before quoting

    Returns:
        Comma-joined literal text (without parentheses)
    """
    return ",".join(render_literal(value, trim=trim) for value in values)
