"""Tests for request tracing and HTTP error rendering."""


class TestRequestTracing:

    def test_generates_request_id(self, client):
        response = client.get("/health")

        assert response.headers["X-Request-ID"]
        assert response.headers["X-Process-Time"].endswith("ms")

    def test_echoes_caller_request_id(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"


class TestHttpErrors:

    def test_unknown_route_uses_error_shape(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        body = response.json()
        assert body["status_code"] == 404
        assert body["path"] == "/api/v1/nothing-here"

    def test_bad_token_keeps_authenticate_header(self, client):
        response = client.get("/api/v1/stock", headers={"Authorization": "Bearer broken"})

        assert response.status_code == 401
        assert response.json()["error"]
        assert "www-authenticate" in {k.lower() for k in response.headers}
