"""Tests for pagination exceptions."""

from query_pager.core import exceptions as exc


def test_pagination_error_without_details() -> None:
    error = exc.PaginationError("broken")
    assert str(error) == "broken"
    assert error.details == {}


def test_pagination_error_formats_details() -> None:
    error = exc.PaginationError("broken", details={"page": 3, "name": "x"})
    assert str(error) == "broken (page=3, name='x')"


def test_sort_specification_error_keeps_expression() -> None:
    error = exc.SortSpecificationError("bad source", expression="id DESC")
    assert error.details == {"expression": "id DESC"}
    assert isinstance(error, exc.PaginationError)


def test_page_size_error_messages() -> None:
    error = exc.PageSizeError("page_size", 0)
    assert error.message == "page_size must be at least 1"
    assert error.value == 0

    bounded = exc.PageSizeError("page_size", 20, maximum=10)
    assert str(bounded) == "page_size must be between 1 and 10 (page_size=20)"


def test_cursor_extraction_error_is_cursor_error() -> None:
    error = exc.CursorExtractionError("score", {"id": 1})
    assert isinstance(error, exc.CursorError)
    assert "'score'" in str(error)
    assert repr(error) == "CursorExtractionError(column='score')"
