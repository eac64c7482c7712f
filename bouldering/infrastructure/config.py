"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all bouldering backend settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseConfig:
    """SQLite tweet store."""
    path: str = "bouldering.db"


@dataclass(frozen=True)
class TasksConfig:
    """Cloud Tasks queue used for storage cleanup."""
    project: str = ""
    location: str = "asia-northeast1"
    queue: str = "gcs-delete-queue"
    handler_url: str = ""
    service_account_email: str = ""

    @property
    def missing_settings(self) -> tuple[str, ...]:
        required = {
            "project": self.project,
            "handler_url": self.handler_url,
            "service_account_email": self.service_account_email,
        }
        return tuple(name for name, value in required.items() if not value)

    @property
    def is_configured(self) -> bool:
        return not self.missing_settings


@dataclass(frozen=True)
class StorageConfig:
    """Cloud Storage bucket holding tweet media."""
    bucket_name: str = "bouldering-app-media-dev"


@dataclass(frozen=True)
class FirebaseConfig:
    """Firebase Admin credentials for ID-token verification."""
    project_id: str = ""
    credentials_path: str = ""


@dataclass(frozen=True)
class WebConfig:
    """HTTP API configuration."""
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class EventsConfig:
    """Event dispatch mode."""
    use_outbox: bool = False
    outbox_path: str = "bouldering-outbox.db"
    relay_max_attempts: int = 5


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class BoulderingConfig:
    """Root configuration for the bouldering backend."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    tasks: TasksConfig = field(default_factory=TasksConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    firebase: FirebaseConfig = field(default_factory=FirebaseConfig)
    web: WebConfig = field(default_factory=WebConfig)
    events: EventsConfig = field(default_factory=EventsConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"


_SECTIONS = {
    "database": DatabaseConfig,
    "tasks": TasksConfig,
    "storage": StorageConfig,
    "firebase": FirebaseConfig,
    "web": WebConfig,
    "events": EventsConfig,
    "telemetry": TelemetryConfig,
}


def _env_override(data: dict, prefix: str = "BOULDERING") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern BOULDERING_SECTION_KEY.
    For example: BOULDERING_WEB_PORT=9090, BOULDERING_TASKS_PROJECT=my-project.
    Anything that does not name a section is a top-level key (BOULDERING_LOG_LEVEL).
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        parts = name.split("_", 1)
        if len(parts) == 2 and parts[0] in _SECTIONS:
            section, field_name = parts
            data.setdefault(section, {})[field_name] = value
        else:
            data[name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Environment values arrive as strings
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                filtered[f.name] = int(filtered[f.name])
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "BOULDERING",
) -> BoulderingConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (BOULDERING_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to bouldering.json in CWD.
        env_prefix: Environment variable prefix. Defaults to BOULDERING.
    """
    config_path = Path(path) if path else Path("bouldering.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    sections = {
        name: _build_sub_config(cls, data.get(name, {}))
        for name, cls in _SECTIONS.items()
    }
    return BoulderingConfig(
        **sections,
        log_level=str(data.get("log_level", "WARNING")).upper(),
    )
