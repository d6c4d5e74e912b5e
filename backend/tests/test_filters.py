"""Filter-to-clause mapping used by the entity listings."""

from bricopos.models.filters import (
    MAX_LIMIT,
    build_pagination,
    build_where,
    date_range,
    exact,
    flag,
    search,
)

SPECS = (
    exact("category"),
    search("search", "name", "email"),
    date_range("startDate", "endDate", "date"),
    flag("low_stock", "stock <= min_stock"),
)


def test_no_filters_means_no_constraint():
    where, params = build_where({}, SPECS)
    assert where == ""
    assert params == {}


def test_base_clauses_are_kept():
    where, _ = build_where({}, SPECS, base=["is_active = 1"])
    assert where == "WHERE is_active = 1"


def test_present_filters_are_joined_with_and():
    where, params = build_where({"category": "Outils", "search": "MAR"}, SPECS)
    assert where == (
        "WHERE category = :f_category AND "
        "(LOWER(name) LIKE :f_search OR LOWER(email) LIKE :f_search)"
    )
    assert params == {"f_category": "Outils", "f_search": "%mar%"}


def test_empty_and_none_values_are_ignored():
    where, params = build_where({"category": "", "search": None}, SPECS)
    assert where == ""
    assert params == {}


def test_date_range_needs_both_bounds():
    where, _ = build_where({"startDate": "2024-01-01"}, SPECS)
    assert where == ""

    where, params = build_where({"startDate": "2024-01-01", "endDate": "2024-01-31"}, SPECS)
    assert where == "WHERE date BETWEEN :f_startDate AND :f_endDate"
    assert params == {"f_startDate": "2024-01-01", "f_endDate": "2024-01-31"}


def test_flag_applies_only_when_truthy():
    assert build_where({"low_stock": False}, SPECS)[0] == ""
    assert build_where({"low_stock": True}, SPECS)[0] == "WHERE stock <= min_stock"


def test_pagination_only_when_supplied():
    params = {}
    assert build_pagination({}, params) == ""
    assert params == {}

    params = {}
    assert build_pagination({"limit": "5", "offset": 10}, params) == " LIMIT :limit OFFSET :offset"
    assert params == {"limit": 5, "offset": 10}


def test_offset_without_limit_uses_maximal_limit():
    params = {}
    assert build_pagination({"offset": 3}, params) == " LIMIT :limit OFFSET :offset"
    assert params == {"limit": MAX_LIMIT, "offset": 3}


def test_limit_below_one_and_negative_offset_are_ignored():
    for filters in ({"limit": 0}, {"limit": -5}, {"offset": -1}, {"limit": "0", "offset": -3}):
        params = {}
        assert build_pagination(filters, params) == ""
        assert params == {}

    params = {}
    assert build_pagination({"limit": 0, "offset": 4}, params) == " LIMIT :limit OFFSET :offset"
    assert params == {"limit": MAX_LIMIT, "offset": 4}
