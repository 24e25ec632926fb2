"""
===========================
Clause specification types.
===========================

Callers may describe columns, sorting, grouping, joins, aggregates and the
other clause inputs with plain strings, lists and dicts. This module turns
each of those shapes into one explicit variant, once, at the boundary; the
clause parsers then only ever see the variants below.

Variants:
- Columns / GROUP BY: RawColumns, ColumnList, TableColumns (of ColumnGroup)
- ORDER BY: RawSort, SortKeys (of SortKey)
- JOIN: ExplicitJoin, EquiJoin
- SELECT extras: SubQuery, Aggregate, RecursiveCTE, LimitSkip
- UPDATE: CaseUpdate (of CaseBranch)

Coercion functions (``column_spec``, ``sort_spec``, ``join_spec``, ...)
accept either a variant or the plain shape and return the variant.

Usage:
    from query.specs import column_spec, join_spec

    column_spec({'users': ['id', 'name'], 'extra': 'NOW() AS now'})
    # TableColumns(groups=(ColumnGroup('users', ('id', 'name')),
    #                      ColumnGroup(None, ('NOW() AS now',))))

    join_spec({'customers': 'customer_id', 'orders': 'customer_id'})
    # EquiJoin('customers', 'customer_id', 'orders', 'customer_id')
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from core.logger import get_logger
from query.exceptions import JoinSpecError, SpecificationError

logger = get_logger(__name__)

EXTRA_KEY = 'extra'

RESERVED_JOIN_KEYS = ('type', 'on', 'operator')

# Join types and comparison operators understood by the MySQL target.
# Anything else is still rendered as given.
JOIN_TYPES = (
    'JOIN', 'INNER JOIN', 'OUTER JOIN', 'CROSS JOIN', 'RIGHT JOIN', 'LEFT JOIN',
    'LEFT OUTER JOIN', 'RIGHT OUTER JOIN', 'STRAIGHT_JOIN', 'NATURAL JOIN'
)
OPERATORS = ('=', '!=', '<>', '<', '>', '<=', '>=', 'LIKE', 'IN', 'BETWEEN')

AGGREGATE_ALIASES = MappingProxyType({
    'MIN': 'minimum',
    'MAX': 'maximum',
    'SUM': 'summation',
    'COUNT': 'count',
    'AVG': 'average',
})

ASC = 'ASC'
DESC = 'DESC'


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, tuple, dict)) and not value)


# ===============
# Column variants
# ===============

@dataclass(frozen=True)
class RawColumns:
    """Column text used verbatim."""
    text: str


@dataclass(frozen=True)
class ColumnList:
    """Plain column names, joined by commas."""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class ColumnGroup:
    """Columns of one table alias; ``table=None`` holds verbatim ``extra`` text."""
    table: Optional[str]
    columns: Tuple[str, ...]

    @property
    def is_extra(self) -> bool:
        return self.table is None


@dataclass(frozen=True)
class TableColumns:
    """Per-table column groups rendered as ``table.column`` in mapping order."""
    groups: Tuple[ColumnGroup, ...]


ColumnSpec = Union[RawColumns, ColumnList, TableColumns]


def column_spec(value: Any) -> Optional[ColumnSpec]:
    """
    Normalize a column or group-by input into a variant.

    Accepts a string, a list/tuple of names, a mapping of table alias to a
    list of names (with the reserved ``extra`` key), or an existing variant.

    Args:
        value: Column input

    Returns:
        Variant, or None for absent/empty input

    Raises:
        SpecificationError: If the input has an unsupported shape
    """
    if isinstance(value, (RawColumns, ColumnList, TableColumns)):
        return value
    if _is_empty(value):
        return None
    if isinstance(value, str):
        return RawColumns(value)
    if _is_sequence(value):
        return ColumnList(tuple(str(name) for name in value))
    if isinstance(value, Mapping):
        groups = []
        for table, columns in value.items():
            if table == EXTRA_KEY:
                if isinstance(columns, str):
                    groups.append(ColumnGroup(None, (columns,)))
                elif _is_sequence(columns):
                    groups.append(ColumnGroup(None, tuple(str(item) for item in columns)))
                else:
                    raise SpecificationError(
                        f"`{EXTRA_KEY}` must be a string or a list of strings, "
                        f"got {type(columns).__name__}"
                    )
            elif _is_sequence(columns):
                groups.append(ColumnGroup(table, tuple(str(column) for column in columns)))
            else:
                logger.debug(f"Ignoring column entry '{table}': value is not a list")
        return TableColumns(tuple(groups))
    raise SpecificationError(
        f"Columns must be a string, a list or a mapping, got {type(value).__name__}"
    )


# =============
# Sort variants
# =============

@dataclass(frozen=True)
class RawSort:
    """ORDER BY text used verbatim."""
    text: str


@dataclass(frozen=True)
class SortKey:
    """One ORDER BY key; ``direction`` is 'ASC' or 'DESC'."""
    column: str
    direction: str = ASC
    table: Optional[str] = None


@dataclass(frozen=True)
class SortKeys:
    """Ordered ORDER BY keys."""
    keys: Tuple[SortKey, ...]


SortSpec = Union[RawSort, SortKeys]


def direction_for(code: Any) -> str:
    """Map a direction code to ASC (exactly 1) or DESC (anything else)."""
    return ASC if _is_number(code) and code == 1 else DESC


def sort_spec(value: Any) -> Optional[SortSpec]:
    """
    Normalize a sort input into a variant.

    Accepts a string, a mapping of column to direction code, or a mapping of
    table alias to such a mapping. A direction code of exactly 1 sorts
    ascending; every other code sorts descending. Top-level entries that are
    neither a number nor a mapping are dropped.

    Args:
        value: Sort input

    Returns:
        Variant, or None for absent/empty input

    Raises:
        SpecificationError: If the input has an unsupported shape
    """
    if isinstance(value, (RawSort, SortKeys)):
        return value
    if _is_empty(value):
        return None
    if isinstance(value, str):
        return RawSort(value)
    if isinstance(value, Mapping):
        keys = []
        for name, direction in value.items():
            if _is_number(direction):
                keys.append(SortKey(name, direction_for(direction)))
            elif isinstance(direction, Mapping):
                keys.extend(
                    SortKey(column, direction_for(code), table=name)
                    for column, code in direction.items()
                )
            else:
                logger.debug(f"Ignoring sort entry '{name}': unsupported direction {direction!r}")
        return SortKeys(tuple(keys))
    raise SpecificationError(
        f"Sort must be a string or a mapping, got {type(value).__name__}"
    )


# =============
# Join variants
# =============

@dataclass(frozen=True)
class ExplicitJoin:
    """Join on a freeform condition: `` <type> <table> ON <on>``."""
    table: str
    on: str
    type: str = 'JOIN'


@dataclass(frozen=True)
class EquiJoin:
    """Join derived from two table/column pairs joined by ``operator``."""
    left_table: str
    left_column: str
    right_table: str
    right_column: str
    operator: str = '='
    type: str = 'JOIN'


JoinSpec = Union[ExplicitJoin, EquiJoin]


def _warn_unknown(join: JoinSpec) -> JoinSpec:
    if join.type.upper() not in JOIN_TYPES:
        logger.warning(f"Unknown join type '{join.type}', rendering it as given")
    if isinstance(join, EquiJoin) and join.operator.upper() not in OPERATORS:
        logger.warning(f"Unknown join operator '{join.operator}', rendering it as given")
    return join


def join_spec(descriptor: Any) -> JoinSpec:
    """
    Normalize one join descriptor into a variant.

    Keys other than ``type``, ``on`` and ``operator`` are table/column pairs.
    A truthy ``on`` alongside at least one pair gives an ExplicitJoin against
    ``table`` (or the first pair's key). Otherwise exactly two pairs are
    required and give an EquiJoin against the second table.

    Args:
        descriptor: Mapping descriptor or an existing variant

    Returns:
        ExplicitJoin or EquiJoin

    Raises:
        JoinSpecError: If neither an ``on`` condition nor exactly two pairs are given
        SpecificationError: If the descriptor is not a mapping
    """
    if isinstance(descriptor, (ExplicitJoin, EquiJoin)):
        return _warn_unknown(descriptor)
    if not isinstance(descriptor, Mapping):
        raise SpecificationError(
            f"Join descriptor must be a mapping, got {type(descriptor).__name__}"
        )

    shorthand = 'type' not in descriptor
    join_type = descriptor.get('type') or 'JOIN'
    operator = descriptor.get('operator') or '='
    on = descriptor.get('on')
    pairs = [(key, value) for key, value in descriptor.items() if key not in RESERVED_JOIN_KEYS]

    if on and pairs:
        table = descriptor.get('table') or pairs[0][0]
        return _warn_unknown(ExplicitJoin(table=table, on=on, type=join_type))

    if len(pairs) != 2:
        logger.error(f"Invalid join descriptor {dict(descriptor)!r}: found {len(pairs)} table/column pairs")
        raise JoinSpecError(found=len(pairs), shorthand=shorthand)

    (left_table, left_column), (right_table, right_column) = pairs
    return _warn_unknown(EquiJoin(
        left_table=left_table,
        left_column=left_column,
        right_table=right_table,
        right_column=right_column,
        operator=operator,
        type=join_type,
    ))


# =======================
# SELECT-specific inputs
# =======================

@dataclass(frozen=True)
class SubQuery:
    """A parenthesised subquery in the select list, optionally aliased."""
    query: str
    alias: Optional[str] = None


@dataclass(frozen=True)
class Aggregate:
    """One or more aggregate calls sharing an optional alias.

    Attributes:
        functions: (function name, column expression) pairs in order
        alias: Alias for the whole group; per-function defaults apply when None
    """
    functions: Tuple[Tuple[str, str], ...]
    alias: Optional[str] = None


@dataclass(frozen=True)
class RecursiveCTE:
    """A ``WITH RECURSIVE`` relation queried in place of a table."""
    base_case: str
    recursive_case: str
    alias: Optional[str]


@dataclass(frozen=True)
class LimitSkip:
    limit: Optional[int] = None
    skip: Optional[int] = None


def sub_query_spec(value: Any) -> SubQuery:
    """Normalize ``{'query': ..., 'as': ...}`` (or a bare string) into a SubQuery."""
    if isinstance(value, SubQuery):
        return value
    if isinstance(value, str):
        return SubQuery(value)
    if isinstance(value, Mapping):
        query = value.get('query')
        if not query:
            raise SpecificationError("Subquery requires a non-empty `query`")
        return SubQuery(query, value.get('as') or value.get('alias'))
    raise SpecificationError(
        f"Subquery must be a string or a mapping, got {type(value).__name__}"
    )


def aggregate_spec(value: Any) -> Aggregate:
    """Normalize ``{'COUNT': 'id', 'alias': 'total'}`` into an Aggregate."""
    if isinstance(value, Aggregate):
        return value
    if not isinstance(value, Mapping):
        raise SpecificationError(
            f"Aggregate must be a mapping, got {type(value).__name__}"
        )
    functions = tuple(
        (function, str(expression))
        for function, expression in value.items()
        if function != 'alias'
    )
    if not functions:
        raise SpecificationError("Aggregate requires at least one function entry")
    return Aggregate(functions, value.get('alias') or None)


def _first_present(value: Mapping, *keys: str) -> Any:
    for key in keys:
        if value.get(key):
            return value[key]
    return None


def recursive_cte_spec(value: Any) -> RecursiveCTE:
    """Normalize ``{'baseCase', 'recursiveCase', 'alias'}`` (or snake_case keys)."""
    if isinstance(value, RecursiveCTE):
        return value
    if not isinstance(value, Mapping):
        raise SpecificationError(
            f"Recursive CTE must be a mapping, got {type(value).__name__}"
        )
    base_case = _first_present(value, 'base_case', 'baseCase')
    recursive_case = _first_present(value, 'recursive_case', 'recursiveCase')
    if not base_case or not recursive_case:
        raise SpecificationError("Recursive CTE requires both a base case and a recursive case")
    return RecursiveCTE(base_case, recursive_case, value.get('alias') or None)


def limit_skip_spec(value: Any) -> LimitSkip:
    if isinstance(value, LimitSkip):
        return value
    if isinstance(value, Mapping):
        return LimitSkip(value.get('limit'), value.get('skip'))
    raise SpecificationError(
        f"limit_skip must be a mapping with `limit`/`skip`, got {type(value).__name__}"
    )


# ====================
# UPDATE CASE values
# ====================

class _NoElse:
    """Marker for a CASE expression without an ELSE branch."""

    def __repr__(self) -> str:
        return 'NO_ELSE'


NO_ELSE = _NoElse()


@dataclass(frozen=True)
class CaseBranch:
    when: str
    then: Any


@dataclass(frozen=True)
class CaseUpdate:
    """``CASE WHEN ... THEN ... [ELSE default] END`` assigned to a column."""
    branches: Tuple[CaseBranch, ...]
    default: Any = NO_ELSE


def is_case_value(value: Any) -> bool:
    return isinstance(value, CaseUpdate) or (isinstance(value, Mapping) and 'case' in value)


def case_update_spec(value: Any) -> CaseUpdate:
    """
    Normalize ``{'case': [{'when': ..., 'then': ...}], 'default': ...}``.

    Raises:
        SpecificationError: If there are no branches or a branch lacks ``when``
    """
    if isinstance(value, CaseUpdate):
        branches: Sequence = value.branches
        default = value.default
    elif isinstance(value, Mapping):
        branches = value.get('case') or ()
        default = value['default'] if 'default' in value else NO_ELSE
    else:
        raise SpecificationError(
            f"CASE update must be a mapping, got {type(value).__name__}"
        )

    normalized = []
    for branch in branches:
        if isinstance(branch, CaseBranch):
            normalized.append(branch)
        elif isinstance(branch, Mapping) and branch.get('when'):
            normalized.append(CaseBranch(branch['when'], branch.get('then')))
        else:
            raise SpecificationError(f"CASE branch requires a `when` condition: {branch!r}")

    if not normalized:
        raise SpecificationError("CASE update requires at least one WHEN branch")
    return CaseUpdate(tuple(normalized), default)
