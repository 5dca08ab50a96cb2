"""Canned FakeStore responses served through ``httpx.MockTransport``."""

import httpx
from services.store_service.services.fakestore_client import FakeStoreClient

FAKESTORE_CATEGORIES = ["electronics", "jewelery", "men's clothing"]

FAKESTORE_PRODUCTS = [
    {
        "id": 1,
        "title": "Fjallraven - Foldsack No. 1 Backpack",
        "price": 109.95,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/81fPKd-2AYL._AC_SL1500_.jpg",
        "rating": {"rate": 3.9, "count": 120},
    },
    {
        "id": 5,
        "title": "John Hardy Women's Legends Naga Bracelet",
        "price": 695,
        "description": "From our Legends Collection",
        "category": "jewelery",
        "image": "https://fakestoreapi.com/img/71pWzhdJNwL._AC_UL640_QL65_ML3_.jpg",
        "rating": {"rate": 4.6, "count": 400},
    },
    {
        "id": 9,
        "title": "WD 2TB Elements Portable External Hard Drive",
        "price": 64,
        "description": "USB 3.0 and USB 2.0 compatibility",
        "category": "electronics",
        "image": "https://fakestoreapi.com/img/61IBBVJvSDL._AC_SY879_.jpg",
        "rating": {"rate": 3.3, "count": 203},
    },
]


class RoutingTransport:
    """
    Returns canned JSON keyed by request path and counts the calls per path.

    Unknown paths answer 404. A route mapped to an ``Exception`` raises it.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls: dict[str, int] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls[path] = self.calls.get(path, 0) + 1
        if path not in self.routes:
            return httpx.Response(404, json={"detail": "not found"}, request=request)
        route = self.routes[path]
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route, request=request)


def default_routes() -> dict:
    routes = {
        "/products": FAKESTORE_PRODUCTS,
        "/products/categories": FAKESTORE_CATEGORIES,
    }
    for product in FAKESTORE_PRODUCTS:
        routes[f"/products/{product['id']}"] = product
    return routes


def make_fakestore_client(routes: dict = None) -> tuple[FakeStoreClient, RoutingTransport]:
    handler = RoutingTransport(default_routes() if routes is None else routes)
    client = FakeStoreClient(
        base_url="https://fakestore.test",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )
    return client, handler
