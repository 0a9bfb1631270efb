from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'mongo'
    - MONGO_URI: MongoDB connection string. Default 'mongodb://localhost:27017'
    - MONGO_DB_NAME: database holding the todo collection. Default 'todo_app'
    - MONGO_COLLECTION: collection name. Default 'todos'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - AUTH_USER_ID_HEADER: trusted header carrying the authenticated user id
    - AUTH_USER_EMAIL_HEADER: trusted header carrying the authenticated user email
    - LOG_LEVEL: logging level name (default: INFO)
    """

    persistence_backend: str
    mongo_uri: str
    mongo_db_name: str
    mongo_collection: str
    cors_allow_origins: List[str]
    auth_user_id_header: str
    auth_user_email_header: str
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value.strip() == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "mongo"}:
        raise ValueError(f"Unsupported PERSISTENCE_BACKEND: {backend!r} (expected 'memory' or 'mongo')")

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        persistence_backend=backend,
        mongo_uri=_get_env("MONGO_URI", "mongodb://localhost:27017").strip(),
        mongo_db_name=_get_env("MONGO_DB_NAME", "todo_app").strip(),
        mongo_collection=_get_env("MONGO_COLLECTION", "todos").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        auth_user_id_header=_get_env("AUTH_USER_ID_HEADER", "X-User-Id").strip(),
        auth_user_email_header=_get_env("AUTH_USER_EMAIL_HEADER", "X-User-Email").strip(),
        log_level=log_level,
    )
