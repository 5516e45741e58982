"""Tests for settings, request parameter parsing and date helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from dynsearch import (
    OrderDirection,
    Pagination,
    RelationValidation,
    SearchParams,
    SearchSettings,
    ValidationError,
    construct_date_list,
    construct_date_map,
)


class TestSearchSettings:
    def test_defaults(self) -> None:
        settings = SearchSettings()
        assert settings.default_timezone == "UTC"
        assert settings.relation_validation is RelationValidation.EAGER
        assert "password" in settings.sensitive_fields
        assert settings.max_per_page is None

    def test_with_helpers_return_copies(self) -> None:
        base = SearchSettings()
        derived = (
            base.with_timezone("Europe/Berlin")
            .with_ordering("created_at", "desc")
            .with_sensitive_fields("api_token")
            .with_relation_validation("lazy")
            .with_max_per_page(50)
        )
        assert base.default_timezone == "UTC"
        assert derived.default_timezone == "Europe/Berlin"
        assert derived.default_order_by == "created_at"
        assert derived.default_order_direction is OrderDirection.DESC
        assert {"api_token", "password"} <= derived.sensitive_fields
        assert derived.relation_validation is RelationValidation.LAZY
        assert derived.max_per_page == 50

    def test_to_dict(self) -> None:
        data = SearchSettings().with_max_per_page(10).to_dict()
        assert data["max_per_page"] == 10
        assert data["default_order_direction"] == "asc"
        assert data["sensitive_fields"] == sorted(data["sensitive_fields"])


class TestOrderDirection:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("asc", OrderDirection.ASC),
            (" DESC ", OrderDirection.DESC),
            (OrderDirection.DESC, OrderDirection.DESC),
            ("sideways", OrderDirection.ASC),
            (None, OrderDirection.ASC),
        ],
    )
    def test_parse(self, raw, expected) -> None:
        assert OrderDirection.parse(raw) is expected

    def test_parse_default(self) -> None:
        assert OrderDirection.parse("?", OrderDirection.DESC) is OrderDirection.DESC


class TestSearchParams:
    def test_control_keys_and_filters_are_split(self) -> None:
        params = SearchParams.from_query_params(
            {
                "page": "2",
                "per_page": "20",
                "order_by": "created_at",
                "order_direction": "DESC",
                "status": "open",
                "name@customer": "ann",
            }
        )
        assert params.filters == {"status": "open", "name@customer": "ann"}
        assert params.pagination == Pagination(page=2, per_page=20)
        assert params.order_direction is OrderDirection.DESC

    def test_comma_separated_order_by(self) -> None:
        params = SearchParams.from_query_params({"order_by": "status, id"})
        assert params.order_by == ["status", "id"]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("false", False),
            ("", False),
            ("items, customer", ["items", "customer"]),
        ],
    )
    def test_preload(self, raw, expected) -> None:
        assert SearchParams.from_query_params({"preload": raw}).preload == expected

    def test_invalid_control_value(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SearchParams.from_query_params({"page": "first"})
        assert exc_info.value.path == "page"

    def test_to_search_kwargs_omits_unset_options(self) -> None:
        kwargs = SearchParams(per_page=10, use_or=True).to_search_kwargs()
        assert kwargs == {
            "pagination": Pagination(page=1, per_page=10),
            "preload": False,
            "use_or": True,
            "distinct": False,
        }

    def test_params_are_immutable(self) -> None:
        params = SearchParams()
        with pytest.raises(PydanticValidationError):
            params.page = 3  # type: ignore[misc]


class TestDateHelpers:
    def test_both_bounds_make_a_range(self) -> None:
        assert construct_date_list("2024-01-01", "2024-01-31") == [
            "2024-01-01",
            "2024-01-31",
            "range",
        ]

    def test_single_bounds(self) -> None:
        assert construct_date_list("2024-01-01", None) == ["2024-01-01", "after_equal"]
        assert construct_date_list("", "2024-01-31") == ["2024-01-31", "before_equal"]

    def test_no_bounds_is_absent(self) -> None:
        assert construct_date_list(None, "") == []

    def test_map(self) -> None:
        assert construct_date_map(None, "2024-01-31", "created_at") == {
            "created_at": ["2024-01-31", "before_equal"]
        }
