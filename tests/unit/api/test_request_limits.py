"""Tests for API request size limits."""

from fastapi.testclient import TestClient

from bonding_curve.api.main import MAX_REQUEST_SIZE, app
from tests.helpers import make_config_payload


class TestRequestSizeLimits:
    """Request body size limit."""

    def test_oversized_request_returns_413(self):
        """Request with Content-Length exceeding limit returns 413."""
        client = TestClient(app)
        response = client.post(
            "/config/derive",
            json=make_config_payload(),
            headers={"Content-Length": str(20 * 1024 * 1024)},  # 20 MB
        )
        assert response.status_code == 413
        assert response.json()["detail"] == "Request too large"

    def test_limit_is_one_megabyte(self):
        """The limit is 1 MB."""
        assert MAX_REQUEST_SIZE == 1024 * 1024

    def test_normal_request_accepted(self):
        """Normal-sized request is accepted."""
        client = TestClient(app)
        response = client.post("/config/derive", json=make_config_payload())
        assert response.status_code == 200
