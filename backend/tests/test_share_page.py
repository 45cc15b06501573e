from typing import Dict

from fastapi.testclient import TestClient

from conftest import auth_headers, create_owner_token


def test_unknown_share_link_reports_invalid(test_app: Dict[str, object]) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    token, _ = create_owner_token(test_app["session_factory"])
    client.post(
        "/api/v1/wishlist/items",
        json={"name": "Secret Gift", "price": "42.00", "image": "https://img.example.com/gift.jpg"},
        headers=auth_headers(token),
    )

    res = client.get("/share/doesnotexist")
    assert res.status_code == 404
    assert "text/html" in res.headers["content-type"]
    assert "invalid or has been disabled" in res.text
    assert "Secret Gift" not in res.text

    res = client.get("/api/v1/share/doesnotexist")
    assert res.status_code == 404
    assert res.json() == {"detail": "This wishlist link is invalid or has been disabled.", "code": "not_found"}


def test_share_page_renders_items(test_app: Dict[str, object]) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    token, _ = create_owner_token(test_app["session_factory"])
    client.post(
        "/api/v1/wishlist/items",
        json={
            "name": "Headphones",
            "price": 199.99,
            "image": "https://x/y.jpg",
            "link": "https://shop.example.com/hp",
        },
        headers=auth_headers(token),
    )
    slug = client.get("/api/v1/wishlist", headers=auth_headers(token)).json()["share_slug"]

    res = client.get(f"/share/{slug}")
    assert res.status_code == 200
    assert "Headphones" in res.text
    assert "$199.99" in res.text
    assert 'href="https://shop.example.com/hp"' in res.text


def test_share_page_escapes_item_text(test_app: Dict[str, object]) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    token, _ = create_owner_token(test_app["session_factory"])
    client.post(
        "/api/v1/wishlist/items",
        json={"name": "<script>alert(1)</script>", "price": "5", "image": "https://x/z.jpg"},
        headers=auth_headers(token),
    )
    slug = client.get("/api/v1/wishlist", headers=auth_headers(token)).json()["share_slug"]

    res = client.get(f"/share/{slug}")
    assert "<script>alert(1)</script>" not in res.text
    assert "&lt;script&gt;" in res.text


def test_empty_shared_wishlist(test_app: Dict[str, object]) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    token, _ = create_owner_token(test_app["session_factory"])
    slug = client.get("/api/v1/wishlist", headers=auth_headers(token)).json()["share_slug"]

    res = client.get(f"/share/{slug}")
    assert res.status_code == 200
    assert "No items yet" in res.text


def test_script_urls_never_reach_share_page(test_app: Dict[str, object]) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    token, _ = create_owner_token(test_app["session_factory"])

    res = client.post(
        "/api/v1/wishlist/items",
        json={
            "name": "Trap",
            "price": "1",
            "image": "https://x/t.jpg",
            "link": "javascript:alert(document.domain)",
        },
        headers=auth_headers(token),
    )
    assert res.status_code == 422
    assert res.json()["code"] == "validation_error"

    res = client.post(
        "/api/v1/wishlist/items",
        json={"name": "Trap", "price": "1", "image": "JavaScript:alert(1)"},
        headers=auth_headers(token),
    )
    assert res.status_code == 422

    created = client.post(
        "/api/v1/wishlist/items",
        json={"name": "Lamp", "price": "25", "image": "https://x/l.jpg"},
        headers=auth_headers(token),
    ).json()
    res = client.patch(
        f"/api/v1/wishlist/items/{created['id']}",
        json={"link": "data:text/html,<script>alert(1)</script>"},
        headers=auth_headers(token),
    )
    assert res.status_code == 422

    slug = client.get("/api/v1/wishlist", headers=auth_headers(token)).json()["share_slug"]
    page = client.get(f"/share/{slug}").text
    assert "Lamp" in page
    assert "javascript:" not in page.lower()
    assert "data:text/html" not in page
