"""Tests for Pagination arithmetic and header writing."""

import pytest
from fastapi import Response
from pydantic import ValidationError

from restcontroller import Pagination, set_pagination_headers


class TestPagination:
    def test_page_count_rounds_up(self):
        assert Pagination(total_count=45, per_page=20).page_count == 3

    def test_empty_collection(self):
        pagination = Pagination(total_count=0)
        assert pagination.page_count == 0
        assert pagination.page == 1
        assert pagination.offset == 0

    def test_page_clamped(self):
        assert Pagination(total_count=45, page=10, per_page=20).page == 3
        assert Pagination(total_count=45, page=-2, per_page=20).page == 1

    def test_offset_and_limit(self):
        pagination = Pagination(total_count=45, page=2, per_page=20)
        assert pagination.offset == 20
        assert pagination.limit == 20

    @pytest.mark.parametrize("per_page", [0, 101])
    def test_per_page_bounds(self, per_page):
        with pytest.raises(ValidationError):
            Pagination(total_count=10, per_page=per_page)

    def test_headers(self):
        response = Response()
        set_pagination_headers(response, Pagination(total_count=45, page=2, per_page=20))
        assert response.headers["X-Pagination-Total-Count"] == "45"
        assert response.headers["X-Pagination-Page-Count"] == "3"
        assert response.headers["X-Pagination-Current-Page"] == "2"
        assert response.headers["X-Pagination-Per-Page"] == "20"

    def test_exported_from_package(self):
        import restcontroller
        from restcontroller import pagination

        assert restcontroller.Pagination is pagination.Pagination
        assert restcontroller.set_pagination_headers is pagination.set_pagination_headers
        assert {"Pagination", "set_pagination_headers"} <= set(restcontroller.__all__)
