"""
========================================================
Comprehensive pytest suite for query/clauses.py
========================================================

Sections:
---------
1. Unit tests - parse_sort, parse_group_by, parse_columns, parse_joins
2. Edge case tests - Empty inputs, dropped entries, malformed joins
3. Property tests - Comma structure and direction tokens

Available markers:
------------------
unit, edge_case

Test Coverage:
--------------
- parse_sort: string, flat mapping, per-table mapping, non-1 direction codes
- parse_group_by: string, list, per-table mapping, `extra` escape
- parse_columns: same shapes as group-by without keyword
- parse_joins: explicit `on`, two-pair equality, operators, shorthand, errors

How to Execute:
---------------
All tests:          pytest tests/tests_query/test_clauses.py -v
By category:        pytest tests/tests_query/test_clauses.py -m unit
With coverage:      pytest tests/tests_query/test_clauses.py --cov=query.clauses

Note: Use 'python -m pytest' (not just 'pytest') to ensure correct Python path resolution.
"""

import logging

import pytest

from query.clauses import parse_columns, parse_group_by, parse_joins, parse_sort
from query.exceptions import JoinSpecError, SpecificationError
from query.specs import EquiJoin, ExplicitJoin, SortKey, SortKeys, TableColumns

# ===============
# 1. UNIT TESTS
# ===============

# parse_sort
# ----------

@pytest.mark.unit
def test_parse_sort_string_is_wrapped():
    assert parse_sort("name DESC") == " ORDER BY name DESC"


@pytest.mark.unit
def test_parse_sort_flat_mapping():
    assert parse_sort({"name": 1, "age": -1}) == " ORDER BY name ASC, age DESC"


@pytest.mark.unit
def test_parse_sort_per_table_mapping():
    sort = {"users": {"name": 1, "created_at": -1}, "orders": {"total": -1}}
    assert parse_sort(sort) == (
        " ORDER BY users.name ASC, users.created_at DESC, orders.total DESC"
    )


@pytest.mark.unit
def test_parse_sort_mixed_levels_keep_order():
    assert parse_sort({"users": {"name": 1}, "created_at": -1}) == (
        " ORDER BY users.name ASC, created_at DESC"
    )


@pytest.mark.unit
def test_parse_sort_accepts_variant():
    spec = SortKeys((SortKey("total", "DESC", table="orders"), SortKey("id")))
    assert parse_sort(spec) == " ORDER BY orders.total DESC, id ASC"


# parse_group_by
# --------------

@pytest.mark.unit
def test_parse_group_by_string():
    assert parse_group_by("department") == " GROUP BY department"


@pytest.mark.unit
def test_parse_group_by_list():
    assert parse_group_by(["department", "role"]) == " GROUP BY department, role"


@pytest.mark.unit
def test_parse_group_by_per_table_mapping():
    group_by = {"employees": ["department", "role"], "offices": ["city"]}
    assert parse_group_by(group_by) == (
        " GROUP BY employees.department, employees.role, offices.city"
    )


@pytest.mark.unit
def test_parse_group_by_extra_list_is_verbatim():
    group_by = {"employees": ["department"], "extra": ["YEAR(hired_at)", "MONTH(hired_at)"]}
    assert parse_group_by(group_by) == (
        " GROUP BY employees.department, YEAR(hired_at), MONTH(hired_at)"
    )


@pytest.mark.unit
def test_parse_group_by_extra_string_is_verbatim():
    group_by = {"extra": "YEAR(hired_at)", "employees": ["department"]}
    assert parse_group_by(group_by) == " GROUP BY YEAR(hired_at), employees.department"


# parse_columns
# -------------

@pytest.mark.unit
def test_parse_columns_string_is_verbatim():
    assert parse_columns("id, name") == "id, name"


@pytest.mark.unit
def test_parse_columns_list():
    assert parse_columns(["id", "name", "email"]) == "id, name, email"


@pytest.mark.unit
def test_parse_columns_per_table_with_extra():
    columns = {"users": ["id", "name"], "orders": ["total"], "extra": "NOW() AS fetched_at"}
    assert parse_columns(columns) == "users.id, users.name, orders.total, NOW() AS fetched_at"


@pytest.mark.unit
def test_parse_columns_extra_is_never_a_table_alias():
    result = parse_columns({"extra": ["COUNT(*) AS n"]})
    assert result == "COUNT(*) AS n"
    assert "extra." not in result


# parse_joins
# -----------

@pytest.mark.unit
def test_parse_joins_two_pair_default_operator():
    joins = [{"customers": "customer_id", "orders": "customer_id"}]
    assert parse_joins(joins) == " JOIN orders ON customers.customer_id = orders.customer_id"


@pytest.mark.unit
def test_parse_joins_explicit_type_with_on_and_table():
    joins = [{"type": "INNER JOIN", "table": "categories", "on": "products.category_id = categories.id"}]
    assert parse_joins(joins) == " INNER JOIN categories ON products.category_id = categories.id"


@pytest.mark.unit
def test_parse_joins_on_without_table_uses_first_key():
    joins = [{"type": "LEFT JOIN", "profiles": "user_id", "on": "profiles.user_id = users.id"}]
    assert parse_joins(joins) == " LEFT JOIN profiles ON profiles.user_id = users.id"


@pytest.mark.unit
def test_parse_joins_explicit_type_with_operator():
    joins = [{"type": "LEFT JOIN", "operator": ">=", "orders": "created_at", "promotions": "starts_at"}]
    assert parse_joins(joins) == (
        " LEFT JOIN promotions ON orders.created_at >= promotions.starts_at"
    )


@pytest.mark.unit
def test_parse_joins_shorthand_with_on():
    joins = [{"table": "departments", "on": "employees.department_id = departments.id"}]
    assert parse_joins(joins) == " JOIN departments ON employees.department_id = departments.id"


@pytest.mark.unit
def test_parse_joins_multiple_descriptors_are_space_joined():
    joins = [
        {"customers": "id", "orders": "customer_id"},
        {"type": "LEFT JOIN", "table": "payments", "on": "payments.order_id = orders.id"},
    ]
    assert parse_joins(joins) == (
        " JOIN orders ON customers.id = orders.customer_id"
        "  LEFT JOIN payments ON payments.order_id = orders.id"
    )


@pytest.mark.unit
def test_parse_joins_accepts_variants():
    joins = [
        ExplicitJoin(table="b", on="a.id = b.a_id", type="RIGHT JOIN"),
        EquiJoin("b", "id", "c", "b_id"),
    ]
    assert parse_joins(joins) == " RIGHT JOIN b ON a.id = b.a_id  JOIN c ON b.id = c.b_id"


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
@pytest.mark.parametrize("parser", [parse_sort, parse_group_by, parse_columns, parse_joins])
@pytest.mark.parametrize("empty", [None, "", [], {}])
def test_parsers_return_empty_string_for_empty_input(parser, empty):
    assert parser(empty) == ""


@pytest.mark.edge_case
def test_parse_sort_non_one_codes_are_descending():
    assert parse_sort({"a": 2, "b": 0, "c": 1.0, "d": -5}) == (
        " ORDER BY a DESC, b DESC, c ASC, d DESC"
    )


@pytest.mark.edge_case
def test_parse_sort_drops_entries_that_render_nothing():
    assert parse_sort({"name": "asc", "age": -1, "flag": True}) == " ORDER BY age DESC"


@pytest.mark.edge_case
def test_parse_sort_all_entries_dropped_gives_empty_string():
    assert parse_sort({"users": {}, "name": None}) == ""


@pytest.mark.edge_case
def test_parse_sort_rejects_list():
    with pytest.raises(SpecificationError):
        parse_sort(["name"])


@pytest.mark.edge_case
def test_parse_group_by_mapping_without_columns_is_empty():
    assert parse_group_by({"users": "not-a-list"}) == ""
    assert parse_group_by({"users": []}) == ""


@pytest.mark.edge_case
def test_parse_columns_rejects_unsupported_type():
    with pytest.raises(SpecificationError, match="Columns must be"):
        parse_columns(42)


@pytest.mark.edge_case
def test_parse_columns_rejects_bad_extra():
    with pytest.raises(SpecificationError, match="extra"):
        parse_columns({"extra": 5})


@pytest.mark.edge_case
def test_parse_joins_three_pairs_explicit_type_fails():
    joins = [{"type": "JOIN", "a": "id", "b": "a_id", "c": "b_id"}]
    with pytest.raises(JoinSpecError, match="JOIN requires exactly two tables for a relation, but found 3") as exc_info:
        parse_joins(joins)
    assert exc_info.value.found == 3
    assert exc_info.value.shorthand is False


@pytest.mark.edge_case
def test_parse_joins_three_pairs_shorthand_fails():
    joins = [{"a": "id", "b": "a_id", "c": "b_id"}]
    with pytest.raises(JoinSpecError, match="JOIN shorthand requires exactly two tables, but found 3") as exc_info:
        parse_joins(joins)
    assert exc_info.value.shorthand is True


@pytest.mark.edge_case
def test_parse_joins_on_without_any_table_fails():
    with pytest.raises(JoinSpecError, match="found 0"):
        parse_joins([{"type": "JOIN", "on": "a.id = b.id"}])


@pytest.mark.edge_case
def test_parse_joins_empty_on_falls_back_to_pairs():
    joins = [{"on": "", "users": "id", "posts": "user_id"}]
    assert parse_joins(joins) == " JOIN posts ON users.id = posts.user_id"


@pytest.mark.edge_case
def test_parse_joins_failure_returns_nothing_partial():
    joins = [
        {"customers": "id", "orders": "customer_id"},
        {"only": "one"},
    ]
    with pytest.raises(JoinSpecError):
        parse_joins(joins)


@pytest.mark.edge_case
def test_parse_joins_rejects_single_mapping():
    with pytest.raises(SpecificationError):
        parse_joins({"customers": "id", "orders": "customer_id"})


@pytest.mark.edge_case
def test_parse_joins_unknown_operator_is_rendered_and_logged(caplog):
    caplog.set_level(logging.WARNING, logger="query")
    joins = [{"operator": "<=>", "a": "x", "b": "y"}]
    assert parse_joins(joins) == " JOIN b ON a.x <=> b.y"
    assert "Unknown join operator '<=>'" in caplog.text


# ===================
# 3. PROPERTY TESTS
# ===================

@pytest.mark.unit
@pytest.mark.parametrize("columns, expected_groups", [
    (["a"], 1),
    (["a", "b", "c"], 3),
    ({"t1": ["a", "b"], "t2": ["c"]}, 3),
    ({"t1": ["a"], "extra": "NOW()"}, 2),
    ({"t1": ["a", "b"], "t2": ["c", "d"], "extra": "1 AS one"}, 5),
])
def test_parse_columns_comma_structure(columns, expected_groups):
    result = parse_columns(columns)
    assert not result.startswith(",")
    assert not result.endswith(",")
    assert len(result.split(", ")) == expected_groups


@pytest.mark.unit
def test_parse_sort_one_token_per_leaf():
    sort = {"t": {"a": 1, "b": -1, "c": 1}, "d": -1}
    tokens = [word for word in parse_sort(sort).replace(",", " ").split() if word in ("ASC", "DESC")]
    assert tokens == ["ASC", "DESC", "ASC", "DESC"]


@pytest.mark.unit
def test_table_columns_variant_round_trips_through_parser():
    spec = TableColumns(())
    assert parse_columns(spec) == ""
