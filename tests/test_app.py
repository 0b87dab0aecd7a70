"""
Tests for application wiring: health check, error envelopes and middleware.
"""

from fastapi.testclient import TestClient

from bookshelf.config import APIConfig
from bookshelf.main import create_app


def test_health_check(client, sample_book_payload):
    """Test health check endpoint."""
    client.post("/books", json=sample_book_payload)

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["version"] == "1.0.0"
    assert data["books"] == 1


def test_unknown_path(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json() == {"status": "fail", "message": "Halaman tidak ditemukan"}


def test_unsupported_method(client):
    response = client.patch("/books")

    assert response.status_code == 405
    assert response.json() == {
        "status": "fail",
        "message": "Halaman tidak dapat diakses dengan method tersebut"
    }


def test_malformed_json_body(client):
    response = client.post(
        "/books",
        content=b"{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["status"] == "fail"


def test_empty_body_is_missing_name(client):
    response = client.post("/books")

    assert response.status_code == 400
    assert response.json() == {
        "status": "fail",
        "message": "Gagal menambahkan buku. Mohon isi nama buku"
    }


def test_openapi_shows_success_status_per_route(client):
    """Test that the route table status codes are documented even though endpoints set their own."""
    paths = client.get("/openapi.json").json()["paths"]

    assert "201" in paths["/books"]["post"]["responses"]
    assert "200" in paths["/books/{book_id}"]["put"]["responses"]


def test_unhandled_exception(handlers):
    app = create_app(handlers=handlers)

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    response = TestClient(app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Internal server error"}


def test_unhandled_exception_detail_in_debug(handlers):
    app = create_app(settings=APIConfig(debug=True), handlers=handlers)

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    response = TestClient(app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == 500
    assert response.json()["data"] == {"detail": "boom"}


def test_request_id_header_is_echoed(client):
    response = client.get("/books", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_header_is_generated(client):
    response = client.get("/books")

    assert response.headers["X-Request-ID"]


def test_each_app_owns_its_store(sample_book_payload):
    first = TestClient(create_app())
    second = TestClient(create_app())

    first.post("/books", json=sample_book_payload)

    assert len(first.get("/books").json()["data"]["books"]) == 1
    assert second.get("/books").json()["data"]["books"] == []


def test_lifespan_runs(handlers):
    """Test startup and shutdown with logging configured from settings."""
    settings = APIConfig(log_format="console", log_level="DEBUG")

    with TestClient(create_app(settings=settings, handlers=handlers)) as client:
        assert client.get("/health").status_code == 200
