# tests/test_products.py
import pytest

from beautyshelf.models.product import Product


def _names(resp):
    return [p["name"] for p in resp.json()["products"]]


def test_create_and_get_product(client, auth_header):
    payload = {
        "name": "  Niacinamide Serum ",
        "brand": "The Ordinary",
        "price": 8.5,
        "category": "Skincare",
        "purchase_date": "2024-03-01",
        "usage_status": "in progress",
        "rating": 4,
    }
    r = client.post("/api/products/", json=payload, headers=auth_header("user-1"))
    assert r.status_code == 201, r.text
    product = r.json()
    assert product["name"] == "Niacinamide Serum"
    assert product["user_id"] == "user-1"
    assert product["created_at"]
    pid = product["id"]

    r = client.get(f"/api/products/{pid}", headers=auth_header("user-1"))
    assert r.status_code == 200, r.text
    fetched = r.json()
    assert fetched["price"] == pytest.approx(8.5)
    assert fetched["purchase_date"] == "2024-03-01"
    assert fetched["rating"] == 4


def test_products_are_scoped_to_owner(client, auth_header, create_product):
    p = create_product("Lip Balm", user_id="alice")

    r = client.get(f"/api/products/{p['id']}", headers=auth_header("bob"))
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"

    r = client.get("/api/products/", headers=auth_header("bob"))
    assert r.json() == {"products": [], "count": 0}

    r = client.delete(f"/api/products/{p['id']}", headers=auth_header("bob"))
    assert r.status_code == 404
    r = client.get(f"/api/products/{p['id']}", headers=auth_header("alice"))
    assert r.status_code == 200


def test_create_requires_name(client, auth_header):
    r = client.post("/api/products/", json={"name": "   "}, headers=auth_header())
    assert r.status_code == 422


def test_create_rejects_out_of_range_rating(client, auth_header):
    r = client.post("/api/products/", json={"name": "Mask", "rating": 6}, headers=auth_header())
    assert r.status_code == 422


def test_blank_optional_fields_become_null(client, create_product):
    p = create_product("Toner", brand="  ", category="", price="")
    assert p["brand"] is None
    assert p["category"] is None
    assert p["price"] is None


def test_literal_null_words_are_kept(client, auth_header, create_product):
    p = create_product("None", brand="Null")
    stored = client.get(f"/api/products/{p['id']}", headers=auth_header()).json()
    assert (stored["name"], stored["brand"]) == ("None", "Null")


def test_missing_csv_cells_read_as_null():
    row = Product.from_dict({"name": "Balm", "brand": float("nan"), "price": "nan", "rating": float("nan")})
    assert row.brand is None
    assert row.price is None
    assert row.rating is None


def test_photo_url_must_come_from_storage_host(client, auth_header):
    r = client.post(
        "/api/products/",
        json={"name": "Cream", "photo_url": "https://elsewhere.example.com/x.jpg"},
        headers=auth_header(),
    )
    assert r.status_code == 400
    assert r.json()["error"] == "validation_failed"

    r = client.post(
        "/api/products/",
        json={"name": "Cream", "photo_url": "http://testserver/storage/product-photos/user-1/1-abc.jpg"},
        headers=auth_header(),
    )
    assert r.status_code == 201, r.text


def test_update_is_partial(client, auth_header, create_product):
    p = create_product("Shampoo", brand="Olaplex", rating=3)
    r = client.put(f"/api/products/{p['id']}", json={"rating": 5}, headers=auth_header())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["rating"] == 5
    assert body["brand"] == "Olaplex"
    assert body["name"] == "Shampoo"


def test_update_missing_product_is_not_found(client, auth_header):
    r = client.put("/api/products/does-not-exist", json={"rating": 2}, headers=auth_header())
    assert r.status_code == 404


def test_default_listing_is_newest_first(client, auth_header, create_product):
    for name in ("first", "second", "third"):
        create_product(name)
    r = client.get("/api/products/", headers=auth_header())
    assert r.status_code == 200
    assert _names(r) == ["third", "second", "first"]
    assert r.json()["count"] == 3


def test_filters_combine(client, auth_header, create_product):
    create_product("Glow Serum", brand="The Ordinary", category="Skincare", rating=5, usage_status="finished")
    create_product("AHA Peel", brand="The Ordinary", category="Skincare", rating=3, usage_status="finished")
    create_product("Mascara", brand="Maybelline", category="Makeup", rating=5, usage_status="new")

    r = client.get("/api/products/", params={"search": "ordinary"}, headers=auth_header())
    assert sorted(_names(r)) == ["AHA Peel", "Glow Serum"]

    r = client.get("/api/products/", params={"search": "ordinary", "rating": 4}, headers=auth_header())
    assert _names(r) == ["Glow Serum"]

    r = client.get("/api/products/", params={"category": "Makeup", "usage_status": "all"}, headers=auth_header())
    assert _names(r) == ["Mascara"]

    r = client.get("/api/products/", params={"usage_status": "finished", "brand": "Maybelline"},
                   headers=auth_header())
    assert r.json()["count"] == 0


def test_search_matches_literal_characters(client, auth_header, create_product):
    create_product("Tools & Brushes (set)", category="Tools & Accessories")
    create_product("Plain")
    r = client.get("/api/products/", params={"search": "(set)"}, headers=auth_header())
    assert _names(r) == ["Tools & Brushes (set)"]


def test_rating_sort_puts_unrated_last(client, auth_header, create_product):
    create_product("unrated")
    create_product("five", rating=5)
    create_product("three", rating=3)

    r = client.get("/api/products/", params={"sort_by": "rating", "sort_order": "desc"}, headers=auth_header())
    assert _names(r) == ["five", "three", "unrated"]

    r = client.get("/api/products/", params={"sort_by": "rating", "sort_order": "asc"}, headers=auth_header())
    assert _names(r) == ["three", "five", "unrated"]


def test_name_sort_and_pagination(client, auth_header, create_product):
    for name in ("delta", "alpha", "charlie", "bravo"):
        create_product(name)
    r = client.get("/api/products/", params={"sort_by": "name", "sort_order": "asc", "limit": 2, "offset": 1},
                   headers=auth_header())
    assert _names(r) == ["bravo", "charlie"]
    assert r.json()["count"] == 4


def test_filter_options_are_distinct_and_sorted(client, auth_header, create_product):
    create_product("a", brand="Nivea", category="Body Care", usage_status="new")
    create_product("b", brand="CeraVe", category="Skincare", usage_status="new")
    create_product("c", brand="Nivea")
    create_product("d", user_id="someone-else", brand="Dior")

    r = client.get("/api/products/filter-options", headers=auth_header())
    assert r.status_code == 200
    assert r.json() == {
        "categories": ["Body Care", "Skincare"],
        "brands": ["CeraVe", "Nivea"],
        "usage_statuses": ["new"],
    }


def test_delete_removes_row_and_photo(client, auth_header, photo_bucket, make_sample_jpeg_bytes):
    r = client.post(
        "/api/photos/",
        files={"file": ("face.jpg", make_sample_jpeg_bytes(), "image/jpeg")},
        headers=auth_header(),
    )
    upload = r.json()
    assert upload["success"] is True, upload
    stored = photo_bucket / upload["file_name"]
    assert stored.exists()

    r = client.post("/api/products/", json={"name": "Cleanser", "photo_url": upload["url"]}, headers=auth_header())
    pid = r.json()["id"]

    r = client.delete(f"/api/products/{pid}", headers=auth_header())
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert not stored.exists()
    assert client.get(f"/api/products/{pid}", headers=auth_header()).status_code == 404


def test_delete_succeeds_when_photo_cleanup_fails(client, auth_header, create_product):
    # no bucket exists, so the photo cannot be removed
    p = create_product("Perfume", photo_url="http://testserver/storage/product-photos/user-1/1-x.jpg")
    r = client.delete(f"/api/products/{p['id']}", headers=auth_header())
    assert r.status_code == 200


def test_photo_verification_report(client, auth_header, create_product):
    create_product("no photo")
    create_product("good", photo_url="http://testserver/storage/product-photos/user-1/1-a.jpg")

    r = client.get("/api/products/photo-verification", headers=auth_header())
    assert r.status_code == 200
    report = r.json()
    assert report["total_products"] == 2
    assert report["products_with_photos"] == 1
    assert report["products_without_photos"] == 1
    assert report["invalid_photo_urls"] == []
    assert report["photo_url_patterns"] == {"testserver": 1}
    assert [p["name"] for p in report["recent_products"]] == ["good", "no photo"]


def test_products_require_authentication(client):
    r = client.get("/api/products/")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"
