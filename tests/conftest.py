"""Shared fixtures: an in-memory Printify and synthetic images."""

import io

import httpx
import pytest
from PIL import Image

from printify import PrintifyAPI
from relay import PrintifyRelay

BASE_URL = "https://printify.test/v1"
CANVAS_TITLE = 'Matte Canvas, Stretched, 1.25"'


class FakePrintify:
    """Answers Printify requests from a (method, path) table and records them."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method: str, path: str, body=None, status: int = 200):
        self.routes[(method, f"/v1{path}")] = (status, body)

    def fail_transport(self, method: str, path: str):
        self.routes[(method, f"/v1{path}")] = (None, None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": f"unmocked {key}"})
        status, body = self.routes[key]
        if status is None:
            raise httpx.ConnectError("connection refused", request=request)
        if callable(body):
            body = body(request)
        return httpx.Response(status, json=body)

    def calls_to(self, path: str):
        return [c for c in self.calls if c.url.path == f"/v1{path}"]


@pytest.fixture
def fake_printify():
    return FakePrintify()


@pytest.fixture
def printify_api(fake_printify):
    return PrintifyAPI(
        api_token="test-token",
        base_url=BASE_URL,
        transport=httpx.MockTransport(fake_printify.handler),
    )


@pytest.fixture
def relay(printify_api):
    return PrintifyRelay(printify_api)


@pytest.fixture
def canvas_printify(fake_printify):
    """Printify with the canvas blueprint (42), Jondo (7), two sizes and shipping."""
    fake_printify.add("GET", "/catalog/blueprints.json", [
        {"id": 5, "title": "Matte Vertical Posters"},
        {"id": 42, "title": CANVAS_TITLE},
    ])
    fake_printify.add("GET", "/catalog/blueprints/42/print_providers.json", [
        {"id": 7, "title": "Jondo"},
    ])
    fake_printify.add("GET", "/catalog/blueprints/42/print_providers/7/variants.json", {
        "id": 7,
        "title": "Jondo",
        "variants": [
            {"id": 1008, "title": '8" x 8" / 1.25"', "options": {"size": '8" x 8"'}},
            {"id": 1006, "title": '6″ x 6″ / 1.25″', "options": {"size": "6″ x 6″", "orientation": "square"}},
        ],
    })
    fake_printify.add("GET", "/catalog/blueprints/42/print_providers/7/shipping.json", {
        "standard": {"first_item": 799, "additional_items": 399, "handling_time": 5},
    })
    return fake_printify


def make_image(width: int, height: int, color="white", mode: str = "RGB", fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    with Image.new(mode, (width, height), color) as img:
        img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def small_png():
    return make_image(1200, 1000, color="navy")
