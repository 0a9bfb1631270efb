import json
import logging

import pytest

from todo_api.generate_openapi import generate_openapi
from todo_api.logging_setup import setup_logging
from todo_api.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "MONGO_URI", "CORS_ALLOW_ORIGINS", "AUTH_USER_ID_HEADER", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.mongo_uri == "mongodb://localhost:27017"
        assert s.mongo_db_name == "todo_app"
        assert s.mongo_collection == "todos"
        assert s.cors_allow_origins == ["*"]
        assert s.auth_user_id_header == "X-User-Id"
        assert s.auth_user_email_header == "X-User-Email"
        assert s.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", " Mongo ")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example,")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        s = get_settings()
        assert s.persistence_backend == "mongo"
        assert s.cors_allow_origins == ["https://a.example", "https://b.example"]
        assert s.log_level == "DEBUG"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        with pytest.raises(ValueError):
            get_settings()


def test_setup_logging_is_idempotent():
    setup_logging("DEBUG")
    root = logging.getLogger()
    handlers = list(root.handlers)
    setup_logging("WARNING")
    assert root.handlers == handlers
    assert root.level == logging.WARNING
    setup_logging("INFO")


def test_generate_openapi(tmp_path):
    out = generate_openapi(tmp_path / "nested" / "openapi.json")
    schema = json.loads(out.read_text(encoding="utf-8"))
    assert "/todos" in schema["paths"]
    assert "/todos/{todo_id}" in schema["paths"]
    assert {t["name"] for t in schema["tags"]} >= {"health", "todos"}
