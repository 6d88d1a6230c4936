"""Tests for config.py, logging_config.py and app factory wiring."""

from __future__ import annotations

import json
import logging

import pytest


class TestProductionConfig:
    def test_rejects_default_secret(self, monkeypatch):
        from config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "dev-key-change-in-production")
        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            ProductionConfig.validate()

    def test_rejects_unknown_backend(self, monkeypatch):
        from config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "s3cure")
        monkeypatch.setattr(ProductionConfig, "STORAGE_BACKEND", "redis")
        with pytest.raises(RuntimeError, match="STORAGE_BACKEND"):
            ProductionConfig.validate()

    def test_valid(self, monkeypatch):
        from config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, "SECRET_KEY", "s3cure")
        monkeypatch.setattr(ProductionConfig, "STORAGE_BACKEND", "sqlite")
        ProductionConfig.validate()


class TestJSONFormatter:
    def test_single_line_json(self):
        from logging_config import JSONFormatter
        record = logging.LogRecord("audit", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.request_id = "abc123"
        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "audit"
        assert entry["request_id"] == "abc123"

    def test_omits_missing_ids(self):
        from logging_config import JSONFormatter
        record = logging.LogRecord("access", logging.INFO, __file__, 1, "GET /api/users", (), None)
        entry = json.loads(JSONFormatter().format(record))
        assert "request_id" not in entry
        assert "user_id" not in entry


class TestAccessLog:
    def test_access_line_carries_user(self, auth_client, caplog):
        with caplog.at_level(logging.INFO, logger="access"):
            auth_client.get("/api/users")
        line = next(r for r in caplog.records if r.name == "access")
        assert line.getMessage().startswith("GET /api/users 200 user=1 ")
        assert line.user_id == "1"
        assert len(line.request_id) == 12

    def test_anonymous_request(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="access"):
            client.get("/api/user")
        line = next(r for r in caplog.records if r.name == "access")
        assert "401 user=- " in line.getMessage()


class TestAppFactory:
    def test_storage_is_injected(self, app):
        from storage import MemStorage
        assert isinstance(app.extensions["storage"], MemStorage)

    def test_each_app_gets_its_own_storage(self):
        from app import create_app
        a = create_app({"TESTING": True, "SECRET_KEY": "k"})
        b = create_app({"TESTING": True, "SECRET_KEY": "k"})
        assert a.extensions["storage"] is not b.extensions["storage"]

    def test_audit_events_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="audit"):
            client.post("/api/login", json={"username": "alice", "password": "wrong"})
        assert any("login_failed" in r.getMessage() for r in caplog.records)
