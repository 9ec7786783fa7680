import pytest

from catalog_service.app.clients import tiendanube_client
from catalog_service.app.clients.tiendanube_client import (
    RemoteCatalogConfigError,
    RemoteCatalogError,
    TiendanubeClient,
)


class StubResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class StubSession:
    def __init__(self, *responses):
        self.headers = {}
        self.calls = []
        self.responses = list(responses)

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self.responses.pop(0)

    def patch(self, url, **kwargs):
        self.calls.append(("PATCH", url, kwargs))
        return self.responses.pop(0)


def make_client(*responses):
    session = StubSession(*responses)
    client = TiendanubeClient("123", "secret", "Catalog (ops@example.com)", api_version="2025-03",
                              timeout=5, session=session)
    return client, session


def test_sets_tiendanube_headers():
    _, session = make_client()

    assert session.headers["Authentication"] == "bearer secret"
    assert session.headers["User-Agent"] == "Catalog (ops@example.com)"


def test_list_products_page():
    client, session = make_client(StubResponse(200, [{"id": 1, "variants": []}]))

    products = client.list_products_page(2, 200)

    assert products == [{"id": 1, "variants": []}]
    method, url, kwargs = session.calls[0]
    assert method == "GET"
    assert url == "https://api.tiendanube.com/2025-03/123/products"
    assert kwargs["params"] == {"page": 2, "per_page": 200, "fields": "id,variants"}
    assert kwargs["timeout"] == 5


def test_non_list_page_is_empty():
    client, _ = make_client(StubResponse(200, {"code": 404}))

    assert client.list_products_page(1, 200) == []


def test_patch_variants_sends_batch():
    payload = [{"id": 501, "price": "123"}]
    client, session = make_client(StubResponse(200, payload))

    client.patch_variants(9, payload)

    method, url, kwargs = session.calls[0]
    assert method == "PATCH"
    assert url == "https://api.tiendanube.com/2025-03/123/products/9/variants"
    assert kwargs["json"] == payload


def test_error_status_raises_remote_catalog_error():
    client, _ = make_client(StubResponse(422, text="price is invalid"))

    with pytest.raises(RemoteCatalogError) as exc_info:
        client.patch_variants(9, [])

    assert exc_info.value.status_code == 422
    assert "price is invalid" in str(exc_info.value)


def test_from_settings_requires_credentials(monkeypatch):
    monkeypatch.setattr(tiendanube_client.settings, "TIENDANUBE_TOKEN", None)

    with pytest.raises(RemoteCatalogConfigError):
        TiendanubeClient.from_settings()
