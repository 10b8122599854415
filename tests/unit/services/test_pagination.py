"""Tests for pagination metadata."""

import math

import pytest

from app.services.user_service import paginate


@pytest.mark.parametrize("page, limit, total", [
    (1, 10, 0),
    (1, 10, 1),
    (1, 10, 10),
    (1, 10, 11),
    (2, 10, 11),
    (3, 10, 11),
    (5, 1, 5),
    (7, 3, 20),
    (1, 100, 250),
])
def test_metadata_relations(page, limit, total):
    meta = paginate(page, limit, total)
    assert meta.total_pages == math.ceil(total / limit)
    assert meta.has_prev_page == (page > 1)
    assert meta.has_next_page == (page < meta.total_pages)
    assert meta.total_items == total
    assert meta.items_per_page == limit
    assert meta.current_page == page


def test_empty_table():
    meta = paginate(1, 10, 0)
    assert meta.total_pages == 0
    assert meta.has_next_page is False
    assert meta.has_prev_page is False


def test_page_beyond_last():
    meta = paginate(4, 10, 25)
    assert meta.total_pages == 3
    assert meta.has_next_page is False
    assert meta.has_prev_page is True


def test_serialises_camel_case():
    meta = paginate(2, 10, 35)
    assert meta.model_dump(by_alias=True) == {
        "currentPage": 2,
        "totalPages": 4,
        "totalItems": 35,
        "itemsPerPage": 10,
        "hasNextPage": True,
        "hasPrevPage": True,
    }
