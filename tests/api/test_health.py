# SPDX-License-Identifier: MIT
"""Tests for the health check and asset mount."""

from pinmap import __version__


class TestRootEndpoint:
    """Test root endpoint (health check)."""

    def test_reports_ok(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "pinmap API"

    def test_reports_package_version(self, test_client):
        assert test_client.get("/").json()["version"] == __version__


class TestAssets:
    """Test the /assets static mount."""

    def test_missing_asset_is_404(self, test_client):
        response = test_client.get("/assets/does-not-exist.glb")
        assert response.status_code == 404

    def test_serves_model_file(self, test_client, glb_bytes):
        from api.main import _assets_dir

        path = _assets_dir / "test-marker.glb"
        path.write_bytes(glb_bytes)
        try:
            response = test_client.get("/assets/test-marker.glb")
            assert response.status_code == 200
            assert response.content == glb_bytes
        finally:
            path.unlink()
