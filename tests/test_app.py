"""Tests for the application factory: service endpoints, static frontend, logging."""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from rich.logging import RichHandler

from region_timer.api import app as app_module
from region_timer.api.core import database as database_module
from region_timer.api.core.config import get_settings
from region_timer.api.core.dependencies import get_region_repository
from region_timer.api.core.logging import setup_logging
from region_timer.shared.database import DatabaseManager
from region_timer.shared.repositories import InMemoryRegionRepository
from tests.conftest import make_connection, make_pool


@pytest.fixture
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(app_module, "setup_logging", lambda settings: None)


@pytest.fixture
def client(no_logging_setup, monkeypatch):
    monkeypatch.setattr(database_module, "_db_manager", None)
    return TestClient(app_module.create_app())


class TestServiceEndpoints:
    def test_hello_world(self, client):
        response = client.get("/hello_world")

        assert response.status_code == 200
        assert response.text == "Hello, World!"

    def test_ping(self, client):
        assert client.get("/ping").text == "pong"

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert "uptime_seconds" in body

    def test_status_without_database(self, client):
        body = client.get("/status").json()

        assert body["service"] == "region-timer"
        assert body["db_connected"] is False
        assert body["environment"] == "test"

    def test_root_info_without_frontend(self, client):
        assert client.get("/").json() == {"service": "region-timer", "status": "running"}


class TestStaticFrontend:
    @pytest.fixture
    def frontend_client(self, no_logging_setup, monkeypatch, tmp_path):
        static_dir = tmp_path / "static"
        (static_dir / "assets").mkdir(parents=True)
        (static_dir / "index.html").write_text("<h1>Regions</h1>", encoding="utf-8")
        (static_dir / "assets" / "app.js").write_text("console.log(1);", encoding="utf-8")
        monkeypatch.setenv("STATIC_DIR", str(static_dir))
        monkeypatch.setattr(database_module, "_db_manager", None)
        get_settings.cache_clear()
        app = app_module.create_app()
        app.dependency_overrides[get_region_repository] = lambda: InMemoryRegionRepository()
        return TestClient(app)

    def test_serves_index(self, frontend_client):
        client = frontend_client

        response = client.get("/")
        assert response.status_code == 200
        assert "<h1>Regions</h1>" in response.text
        # API routes still take precedence over the mount
        assert client.get("/hello_world").text == "Hello, World!"

    def test_serves_assets(self, frontend_client):
        response = frontend_client.get("/assets/app.js")

        assert response.status_code == 200
        assert response.text == "console.log(1);"

    def test_unknown_path_falls_back_to_index(self, frontend_client):
        response = frontend_client.get("/regions/north/details")

        assert response.status_code == 200
        assert "<h1>Regions</h1>" in response.text

    def test_api_validation_not_shadowed(self, frontend_client):
        assert frontend_client.post("/api/nowhere/start").status_code == 422


class TestLogging:
    @pytest.fixture
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield root
        root.handlers = handlers
        root.setLevel(level)

    def test_setup_logging_installs_rich_handler(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        get_settings.cache_clear()

        setup_logging(get_settings())

        assert any(isinstance(h, RichHandler) for h in restore_root_logger.handlers)
        assert restore_root_logger.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.WARNING


class TestLifespan:
    def test_startup_connects_and_migrates(self, no_logging_setup):
        conn = make_connection()
        pool = make_pool(conn)

        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)):
            with TestClient(app_module.create_app()) as client:
                assert client.get("/status").json()["db_connected"] is True
                executed = " ".join(str(c.args[0]) for c in conn.execute.await_args_list)
                assert "CREATE TABLE IF NOT EXISTS region_history" in executed

        pool.close.assert_awaited_once()

    def test_startup_without_database_keeps_serving(self, no_logging_setup):
        connect = AsyncMock(side_effect=OSError("refused"))

        with patch.object(DatabaseManager, "connect", connect):
            with TestClient(app_module.create_app()) as client:
                assert client.get("/health").status_code == 200
                assert client.get("/api/currently_active").status_code == 503

        connect.assert_awaited()

    def test_migrations_can_be_disabled(self, no_logging_setup, monkeypatch):
        monkeypatch.setenv("RUN_MIGRATIONS", "false")
        get_settings.cache_clear()
        conn = make_connection()
        pool = make_pool(conn)

        with patch("asyncpg.create_pool", AsyncMock(return_value=pool)):
            with TestClient(app_module.create_app()):
                pass

        conn.transaction.assert_not_called()
