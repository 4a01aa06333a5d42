"""
Tests for the config API routes and the core health/diagnostic routes.
"""

from __future__ import annotations


class TestConfigRoutes:
    def test_get_defaults(self, client):
        data = client.get("/api/config").get_json()
        assert data == {
            "auto_sync": True,
            "sync_interval": 3600,
            "conflict_strategy": "prefer_source",
            "log_level": "info",
            "log_retention_days": 30,
        }

    def test_post_merges(self, client):
        resp = client.post("/api/config", json={"sync_interval": 1200})
        assert resp.status_code == 200
        data = client.get("/api/config").get_json()
        assert data["sync_interval"] == 1200
        assert data["auto_sync"] is True

    def test_post_invalid(self, client):
        resp = client.post("/api/config", json={"sync_interval": 10})
        assert resp.status_code == 400
        assert client.get("/api/config").get_json()["sync_interval"] == 3600

    def test_post_unknown_only(self, client):
        assert client.post("/api/config", json={"colour": "blue"}).status_code == 400

    def test_reset(self, client):
        client.post("/api/config", json={"auto_sync": False})
        data = client.post("/api/config/reset").get_json()
        assert data["auto_sync"] is True


class TestCoreRoutes:
    def test_health(self, client):
        data = client.get("/api/health").get_json()
        assert data["status"] == "ok"

    def test_diagnostic(self, client, services):
        services.platforms.set_token("github", "ghp")
        client.post("/api/repos", json={"role": "source", "platformId": "github", "path": "org/app"})

        data = client.get("/api/system/diagnostic").get_json()

        assert data["git"]["available"] is True
        assert data["platforms"] == {"total": 4, "withToken": 1}
        assert data["repositories"]["sources"] == 1
        assert data["repositories"]["byStatus"]["idle"] == 1
        assert data["inFlight"] == []
        assert any(i["message"] == "source has no mirrors" for i in data["issues"])

    def test_unknown_api_path_is_json_404(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Not found"
