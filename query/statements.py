"""
Dispatch by statement verb.

``build_statement('update', table=..., where=...)`` calls the matching
builder. ``build_from_config`` accepts a single configuration mapping and
also understands the camelCase option names used by JavaScript callers
(``insertData``, ``limitSkip``, ``recursiveCTE`` ...).
"""

from typing import Any, Callable, Dict, Mapping

from core.logger import get_logger
from query.dml import build_delete, build_insert, build_update
from query.exceptions import QueryBuildError
from query.query_builder import build_select

logger = get_logger(__name__)

BUILDERS: Dict[str, Callable[..., str]] = {
    'SELECT': build_select,
    'INSERT': build_insert,
    'UPDATE': build_update,
    'DELETE': build_delete,
}

CAMEL_CASE_OPTIONS = {
    'subQueries': 'sub_queries',
    'groupBy': 'group_by',
    'limitSkip': 'limit_skip',
    'recursiveCTE': 'recursive_cte',
    'insertData': 'insert_data',
    'dateFields': 'date_fields',
    'uniqueColumn': 'unique_column',
    'onDuplicateUpdateFields': 'on_duplicate_update_fields',
    'updateData': 'update_data',
    'nullValues': 'null_values',
    'defaultValues': 'default_values',
    'fromSubQuery': 'from_sub_query',
    'setCalculations': 'set_calculations',
}


def _builder_for(kind: str) -> Callable[..., str]:
    builder = BUILDERS.get(str(kind).strip().upper())
    if builder is None:
        logger.error(f"Unknown statement kind: {kind!r}")
        raise QueryBuildError(
            f"Unknown statement kind {kind!r}; expected one of {', '.join(BUILDERS)}"
        )
    return builder


def build_statement(kind: str, **options: Any) -> str:
    """
    Build a statement of the given kind.

    Args:
        kind: 'select', 'insert', 'update' or 'delete' (case-insensitive)
        **options: Keyword arguments of the matching builder

    Returns:
        SQL statement

    Raises:
        QueryBuildError: If the kind is unknown or an option is not accepted
    """
    builder = _builder_for(kind)
    verb = str(kind).strip().upper()
    try:
        return builder(**options)
    except TypeError as e:
        if isinstance(e, QueryBuildError):
            raise
        logger.error(f"Invalid options for {verb}: {e}")
        raise QueryBuildError(f"Invalid options for {verb}: {e}") from e


def normalize_options(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate camelCase option names to the builders' keyword names."""
    return {CAMEL_CASE_OPTIONS.get(key, key): value for key, value in config.items()}


def build_from_config(kind: str, config: Mapping[str, Any]) -> str:
    """
    Build a statement from one configuration mapping.

    Example:
        >>> build_from_config('insert', {'table': 't', 'insertData': {'a': 1}})
        'INSERT INTO t (a) VALUES (1)'
    """
    return build_statement(kind, **normalize_options(config))
