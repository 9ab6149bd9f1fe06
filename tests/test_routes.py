import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import config
from conftest import make_image
from deps import get_relay
from descriptions import DEFAULT_CANVAS_DESCRIPTION
from main import app


@pytest.fixture
def client(relay):
    app.dependency_overrides[get_relay] = lambda: relay
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestRelayRoutes:
    def test_list_shops(self, client, fake_printify):
        fake_printify.add("GET", "/shops.json", [{"id": 1, "title": "My Shop"}])
        response = client.get("/api/shops")
        assert response.status_code == 200
        assert response.json() == {"data": [{"id": 1, "title": "My Shop"}]}

    def test_upstream_404_passed_through(self, client, fake_printify):
        body = {"status": "error", "code": 8203, "message": "Shop not found"}
        fake_printify.add("POST", "/shops/99/products.json", body, status=404)

        response = client.post("/api/shops/99/products", json={"title": "x"})
        assert response.status_code == 404
        assert response.json() == body

    def test_transport_error_is_server_error(self, client, fake_printify):
        fake_printify.fail_transport("GET", "/catalog/blueprints.json")
        response = client.get("/api/catalog")
        assert response.status_code == 500
        assert response.json() == {"message": "Server error"}

    def test_upload_image_forwards_body(self, client, fake_printify):
        fake_printify.add("POST", "/uploads/images.json", {"id": "img-1"})
        response = client.post("/api/uploads/images", json={"file_name": "a.jpg", "contents": "aGVsbG8="})

        assert response.json() == {"id": "img-1"}
        sent = json.loads(fake_printify.calls[0].content)
        assert sent == {"file_name": "a.jpg", "contents": "aGVsbG8="}

    def test_upload_requires_file_name(self, client):
        response = client.post("/api/uploads/images", json={"contents": "aGVsbG8="})
        assert response.status_code == 422

    def test_blueprint_detail(self, client, fake_printify):
        fake_printify.add("GET", "/catalog/blueprints/42.json", {"id": 42, "title": "Canvas"})
        assert client.get("/api/catalog/42").json() == {"id": 42, "title": "Canvas"}

    def test_provider_not_found(self, client, fake_printify):
        fake_printify.add("GET", "/catalog/blueprints/42/print_providers.json", [{"id": 3, "title": "Other"}])
        response = client.get("/api/catalog/42/print_providers")
        assert response.status_code == 404
        assert response.json() == {"message": "Jondo provider not found", "available_providers": ["Other"]}

    def test_variants_and_shipping(self, client, canvas_printify):
        variants = client.get("/api/catalog/42/print_providers/7/variants").json()
        assert set(variants["data"]) == {"0", "1"}

        shipping = client.get("/api/catalog/42/print_providers/7/shipping").json()
        assert shipping["standard"]["first_item"] == 799

    def test_list_products_page(self, client, fake_printify):
        fake_printify.add("GET", "/shops/3/products.json", {"data": [], "total": 0, "current_page": 2})
        response = client.get("/api/shops/3/products", params={"page": 2, "limit": 10})
        assert response.json()["current_page"] == 2
        assert fake_printify.calls[0].url.params["limit"] == "10"

    def test_global_providers(self, client, fake_printify):
        fake_printify.add("GET", "/catalog/print_providers.json", [{"id": 2, "title": "Sensaria"}, {"id": 4, "title": "X"}])
        assert client.get("/api/print-providers").json() == {"data": [{"id": 2, "title": "Sensaria"}]}

    def test_body_limit(self, client, monkeypatch):
        monkeypatch.setattr(config, "MAX_BODY_BYTES", 64)
        response = client.post("/api/uploads/images", json={"file_name": "a.jpg", "contents": "x" * 200})
        assert response.status_code == 413
        assert response.json() == {"message": "Payload too large"}

    def test_body_limit_counts_chunked_bodies(self, client, fake_printify, monkeypatch):
        monkeypatch.setattr(config, "MAX_BODY_BYTES", 64)

        def chunks():
            yield b'{"file_name": "a.jpg", "contents": "'
            for _ in range(16):
                yield b"x" * 64
            yield b'"}'

        response = client.post(
            "/api/uploads/images",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json() == {"message": "Payload too large"}
        assert fake_printify.calls == []


class TestWorkflowRoutes:
    def test_resolve_canvas(self, client, canvas_printify):
        response = client.get("/api/workflow/canvas", params={"shop_id": "1"})
        assert response.status_code == 200
        data = response.json()
        assert data["provider"] == {"id": 7, "title": "Jondo"}
        assert [(v["id"], v["price"]) for v in data["variants"]] == [(1006, 2000)]

    def test_resolve_canvas_failure(self, client, fake_printify):
        fake_printify.add("GET", "/catalog/blueprints.json", [])
        response = client.get("/api/workflow/canvas", params={"shop_id": "1"})
        assert response.status_code == 404
        assert response.json()["kind"] == "blueprint_not_found"

    def test_create_product(self, client, canvas_printify):
        canvas_printify.add("POST", "/uploads/images.json", {"id": "img-5"})
        canvas_printify.add("POST", "/shops/1/products.json", {"id": "prod-9"})

        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "Sunset", "description": "Warm", "background": "#000000"},
            files={"image": ("sunset.png", make_image(1500, 1200), "image/png")},
        )
        assert response.status_code == 200
        assert response.json() == {"id": "prod-9"}

        payload = json.loads(canvas_printify.calls_to("/shops/1/products.json")[0].content)
        assert payload["print_areas"][0]["background"] == "#000000"
        assert payload["shipping_from"] == "standard"

    def test_create_product_shipping_and_default_description(self, client, canvas_printify):
        canvas_printify.add("POST", "/uploads/images.json", {"id": "img-5"})
        canvas_printify.add("POST", "/shops/1/products.json", {"id": "prod-9"})

        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "Sunset", "description": "  ", "shipping_method": "express"},
            files={"image": ("sunset.png", make_image(1500, 1200), "image/png")},
        )
        assert response.status_code == 200

        payload = json.loads(canvas_printify.calls_to("/shops/1/products.json")[0].content)
        assert payload["shipping_from"] == "express"
        assert payload["description"] == DEFAULT_CANVAS_DESCRIPTION

    def test_create_product_unknown_shipping_method(self, client, canvas_printify):
        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "Sunset", "description": "Warm", "shipping_method": "overnight"},
            files={"image": ("sunset.png", make_image(1500, 1200), "image/png")},
        )
        assert response.status_code == 422
        assert response.json()["errors"] == ["Unknown shipping method: overnight"]

    def test_create_product_image_too_small(self, client, canvas_printify):
        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "Sunset"},
            files={"image": ("tiny.png", make_image(500, 500), "image/png")},
        )
        assert response.status_code == 400
        assert "1000x1000" in response.json()["message"]

    def test_create_product_validation(self, client, canvas_printify):
        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "   ", "description": "Warm"},
            files={"image": ("sunset.png", make_image(1500, 1200), "image/png")},
        )
        assert response.status_code == 422
        assert "Title is required" in response.json()["errors"]
        assert canvas_printify.calls_to("/uploads/images.json") == []

    def test_create_product_upstream_error(self, client, canvas_printify):
        body = {"errors": {"reason": "Invalid variants"}}
        canvas_printify.add("POST", "/uploads/images.json", {"id": "img-5"})
        canvas_printify.add("POST", "/shops/1/products.json", body, status=400)
        response = client.post(
            "/api/workflow/products",
            data={"shop_id": "1", "title": "Sunset", "description": "Warm"},
            files={"image": ("sunset.png", make_image(1500, 1200), "image/png")},
        )
        assert response.status_code == 400
        assert response.json() == body

    def test_pick_color(self, client):
        buf = io.BytesIO()
        with Image.new("RGB", (4, 4), (16, 32, 48)) as img:
            img.save(buf, format="PNG")
        response = client.post(
            "/api/workflow/color",
            data={"x": "1", "y": "1"},
            files={"image": ("c.png", buf.getvalue(), "image/png")},
        )
        assert response.json() == {"color": "#102030"}

    def test_list_all_products(self, client, fake_printify):
        fake_printify.add("GET", "/shops/9/products.json", {"total": 3, "data": [
            {"id": "a", "title": "Ocean", "print_provider_id": 105, "visible": True},
            {"id": "b", "title": "Ocean Mug", "print_provider_id": 99, "visible": True},
            {"id": "c", "title": "Desert", "print_provider_id": 2, "visible": False},
        ]})
        response = client.get("/api/shops/9/products/all", params={"search": "ocean"})
        data = response.json()
        assert [p["id"] for p in data["data"]] == ["a"]
        assert data["summary"] == {"total": 2, "jondo": 1, "sensaria": 1}

    def test_list_all_products_rejects_bad_status(self, client):
        assert client.get("/api/shops/9/products/all", params={"status": "archived"}).status_code == 422


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
