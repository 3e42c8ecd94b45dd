"""Unit tests for the keyset resume predicate."""
from __future__ import annotations

import pytest

from query_pager.core.exceptions import CursorError
from query_pager.core.pagination.predicate import ResumePredicate, build_resume_predicate
from query_pager.core.pagination.sorting import SortDirection, SortSpecification


def _spec(*expressions: str) -> SortSpecification:
    return SortSpecification.from_mapping({expression: f"c{i}" for i, expression in enumerate(expressions)})


class ByField:
    """Callable value source that is unhashable (defines __eq__ only)."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, row):
        return row[self.name]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ByField) and other.name == self.name


@pytest.mark.unit
class TestBuildResumePredicate:
    """Tests for predicate template construction."""

    def test_single_descending_key(self):
        predicate = build_resume_predicate(_spec("id DESC"))

        assert predicate.sql == "id < :seek_1"
        assert predicate.bind_names == ("seek_1",)
        assert predicate.terms == (("id", SortDirection.DESC),)

    def test_two_keys(self):
        predicate = build_resume_predicate(_spec("a", "b desc"))

        assert predicate.sql == "a > :seek_1 OR a = :seek_2 AND b < :seek_3"

    def test_three_keys_nest_two_groups(self):
        predicate = build_resume_predicate(_spec("a DESC", "b", "c"))

        assert predicate.sql == "a < :seek_1 OR a = :seek_2 AND (b > :seek_3 OR b = :seek_4 AND c > :seek_5)"

    @pytest.mark.parametrize("key_count", [1, 2, 3, 4, 7])
    def test_requires_two_n_minus_one_values(self, key_count: int):
        predicate = build_resume_predicate(_spec(*(f"k{i}" for i in range(key_count))))

        assert len(predicate.bind_names) == 2 * key_count - 1
        assert predicate.key_count == key_count

    def test_uses_clean_expression_in_comparisons(self):
        predicate = build_resume_predicate(_spec("COALESCE(a, 0)   DESC", "id"))

        assert predicate.sql.startswith("COALESCE(a, 0) < :seek_1 OR COALESCE(a, 0) = :seek_2")

    def test_colons_in_expressions_are_not_binds(self):
        predicate = build_resume_predicate(_spec("(category || ' :x') DESC", "id"))

        compiled = predicate.clause(("b :x", 4)).compile()

        assert "(category || ' :x') < :seek_1" in str(compiled)
        assert set(compiled.params) == {"seek_1", "seek_2", "seek_3"}

    def test_custom_bind_prefix(self):
        predicate = build_resume_predicate(_spec("a", "b"), bind_prefix="after")

        assert predicate.bind_names == ("after_1", "after_2", "after_3")
        assert ":after_3" in predicate.sql

    def test_construction_is_idempotent(self):
        first = build_resume_predicate(_spec("a DESC", "b"))
        second = build_resume_predicate(_spec("a DESC", "b"))

        assert first == second
        assert first is second

    def test_value_sources_do_not_affect_template(self):
        first = build_resume_predicate(SortSpecification.from_mapping({"a": lambda row: row["a"], "id": "id"}))
        second = build_resume_predicate(SortSpecification.from_mapping({"a": lambda row: row["a"], "id": "id"}))

        assert first is second

    def test_unhashable_callable_source(self):
        spec = SortSpecification.from_mapping({"a": ByField("a"), "id": "id"})

        predicate = build_resume_predicate(spec)

        assert predicate.terms == (("a", SortDirection.ASC), ("id", SortDirection.ASC))


@pytest.mark.unit
class TestBindValues:
    """Tests for expanding a cursor into bound values."""

    def test_values_repeat_all_but_last(self):
        predicate = build_resume_predicate(_spec("a", "b", "c"))

        assert predicate.bind_values((1, "two", 3.0)) == [1, 1, "two", "two", 3.0]

    def test_single_value(self):
        predicate = build_resume_predicate(_spec("id DESC"))
        assert predicate.bind_values((4,)) == [4]

    def test_wrong_arity_fails(self):
        predicate = build_resume_predicate(_spec("a", "b"))

        with pytest.raises(CursorError) as exc_info:
            predicate.bind_values((1,))

        assert exc_info.value.details == {"expected": 2, "received": 1}

    def test_clause_binds_values_in_order(self):
        predicate = build_resume_predicate(_spec("a", "b DESC"))

        compiled = predicate.clause((10, 20)).compile()

        assert compiled.params == {"seek_1": 10, "seek_2": 10, "seek_3": 20}
        assert str(compiled) == predicate.sql

    def test_predicate_is_plain_value(self):
        predicate = ResumePredicate(terms=(("id", SortDirection.ASC),), bind_names=("seek_1",))
        assert predicate.key_count == 1
        assert predicate.bind_values(["x"]) == ["x"]
        assert predicate.sql == "id > :seek_1"
