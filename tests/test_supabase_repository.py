"""
SupabaseProductRepository against a recording fake of the PostgREST builder.
"""
from types import SimpleNamespace

import httpx
import pytest

from beautyshelf.core.errors import RepositoryError
from beautyshelf.core.filters import FilterState, ProductQuery, SortOrder, build_product_query
from beautyshelf.db.supabase_repository import SupabaseProductRepository, order_param, search_filter


class FakeBuilder:
    def __init__(self, table, result=None, error=None):
        self.table = table
        self.calls = []
        self.params = httpx.QueryParams()
        self.result = result or SimpleNamespace(data=[], count=0)
        self.error = error

    def __getattr__(self, name):
        # select/insert/update/delete/eq/gte/or_/range/limit/is_ all just record
        if name.startswith("__"):
            raise AttributeError(name)

        def _record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return _record

    @property
    def not_(self):
        self.calls.append(("not_", (), {}))
        return self

    def execute(self):
        if self.error:
            raise self.error
        return self.result


class FakeClient:
    def __init__(self, **builder_kwargs):
        self.builders = []
        self.builder_kwargs = builder_kwargs

    def table(self, name):
        b = FakeBuilder(name, **self.builder_kwargs)
        self.builders.append(b)
        return b


def test_order_param():
    assert order_param(SortOrder("rating", True, True)) == "rating.desc.nullslast"
    assert order_param(SortOrder("created_at", False, False)) == "created_at.asc"


def test_search_filter_quotes_term():
    assert search_filter("a,b") == 'name.ilike."%a,b%",brand.ilike."%a,b%"'


def test_query_applies_owner_and_every_clause():
    client = FakeClient(result=SimpleNamespace(data=[{"id": "1"}], count=7))
    repo = SupabaseProductRepository(client)
    query = build_product_query(
        FilterState(search="glow", category="Skincare", rating=4, sort_by="rating"),
        limit=10,
        offset=20,
    )

    rows, count = repo.query("u1", query)

    assert rows == [{"id": "1"}]
    assert count == 7
    b = client.builders[0]
    assert b.table == "products"
    assert ("select", ("*",), {"count": "exact"}) in b.calls
    assert ("eq", ("user_id", "u1"), {}) in b.calls
    assert ("or_", ('name.ilike."%glow%",brand.ilike."%glow%"',), {}) in b.calls
    assert ("eq", ("category", "Skincare"), {}) in b.calls
    assert ("gte", ("rating", 4), {}) in b.calls
    assert ("range", (20, 29), {}) in b.calls
    assert b.params["order"] == "rating.desc.nullslast"


def test_query_projects_columns():
    client = FakeClient()
    SupabaseProductRepository(client).query("u1", ProductQuery(columns=["id", "name"]))
    assert ("select", ("id, name",), {"count": "exact"}) in client.builders[0].calls


def test_update_is_scoped_to_id_and_owner():
    client = FakeClient(result=SimpleNamespace(data=[{"id": "p1", "usage_status": "finished"}], count=None))
    row = SupabaseProductRepository(client).update("u1", "p1", {"usage_status": "finished", "user_id": "evil"})
    assert row["usage_status"] == "finished"
    calls = client.builders[0].calls
    assert ("update", ({"usage_status": "finished"},), {}) in calls
    assert ("eq", ("id", "p1"), {}) in calls
    assert ("eq", ("user_id", "u1"), {}) in calls


def test_insert_sets_owner():
    client = FakeClient(result=SimpleNamespace(data=[{"id": "new"}], count=None))
    SupabaseProductRepository(client).insert("u1", {"name": "Serum", "id": "ignored"})
    assert ("insert", ({"name": "Serum", "user_id": "u1"},), {}) in client.builders[0].calls


def test_distinct_values_sorted_without_nulls():
    data = [{"brand": "Nivea"}, {"brand": "CeraVe"}, {"brand": "Nivea"}, {"brand": ""}]
    client = FakeClient(result=SimpleNamespace(data=data, count=None))
    assert SupabaseProductRepository(client).distinct_values("u1", "brand") == ["CeraVe", "Nivea"]
    assert ("is_", ("brand", "null"), {}) in client.builders[0].calls


def test_errors_become_repository_errors():
    client = FakeClient(error=RuntimeError("permission denied for table products"))
    with pytest.raises(RepositoryError, match="permission denied"):
        SupabaseProductRepository(client).get("u1", "p1")
