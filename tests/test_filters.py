from beautyshelf.core.filters import FilterState, SortOrder, build_product_query, build_sort


def test_default_filters_produce_no_clauses():
    q = build_product_query(FilterState())
    assert q.search is None
    assert q.equals == {}
    assert q.min_rating is None
    assert q.sort == SortOrder("created_at", descending=True, nulls_last=False)
    assert q.limit is None
    assert q.range_end is None


def test_all_clauses():
    q = build_product_query(FilterState(
        search="  serum ",
        category="Skincare",
        brand="all",
        rating=4,
        usage_status="finished",
        sort_by="price",
        sort_order="asc",
    ))
    assert q.search == "serum"
    assert q.equals == {"category": "Skincare", "usage_status": "finished"}
    assert q.min_rating == 4
    assert q.sort == SortOrder("price", descending=False, nulls_last=True)


def test_blank_search_is_ignored():
    assert build_product_query(FilterState(search="   ")).search is None


def test_pagination_range_is_inclusive():
    q = build_product_query(FilterState(), limit=20, offset=40)
    assert (q.offset, q.range_end) == (40, 59)


def test_sort_mapping():
    assert build_sort("date_added", "asc") == SortOrder("created_at", descending=False, nulls_last=False)
    assert build_sort("rating", "desc") == SortOrder("rating", descending=True, nulls_last=True)
    assert build_sort("name", "whatever") == SortOrder("name", descending=True, nulls_last=False)
    # unknown keys fall back to newest first
    assert build_sort("popularity", "asc") == SortOrder("created_at", descending=True, nulls_last=False)
