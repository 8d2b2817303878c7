"""Configuration management for the rentals service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .context import Backend
from .database import Database, MemoryBackend, resolve_database_path

STORAGE_BACKENDS = ("sqlite", "memory")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the stores and the HTTP service."""

    storage: str = "sqlite"
    database_path: Optional[Path] = None
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self) -> None:
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{self.storage}'; expected one of {', '.join(STORAGE_BACKENDS)}"
            )
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        unknown = set(data) - {"storage", "database_path", "host", "port"}
        if unknown:
            raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        database_path: Optional[Path] = None
        raw_path = data.get("database_path")
        if raw_path:
            expanded = Path(str(raw_path)).expanduser()
            if not expanded.is_absolute() and base_path is not None:
                expanded = base_path / expanded
            database_path = expanded.resolve(strict=False)

        return Settings(
            storage=str(data.get("storage", "sqlite")),
            database_path=database_path,
            host=str(data.get("host", "0.0.0.0")),
            port=int(data.get("port", 8000)),  # type: ignore[arg-type]
        )

    def with_environment(self, environ: Mapping[str, str]) -> "Settings":
        """Return a copy with ``RENTALS_*`` environment overrides applied."""

        overrides: Dict[str, object] = {}
        if environ.get("RENTALS_STORAGE"):
            overrides["storage"] = environ["RENTALS_STORAGE"].strip().lower()
        if environ.get("RENTALS_DB_PATH"):
            overrides["database_path"] = resolve_database_path(environ["RENTALS_DB_PATH"])
        if environ.get("RENTALS_HOST"):
            overrides["host"] = environ["RENTALS_HOST"].strip()
        if environ.get("RENTALS_PORT"):
            try:
                overrides["port"] = int(environ["RENTALS_PORT"])
            except ValueError as exc:
                raise ValueError(f"RENTALS_PORT must be an integer, got {environ['RENTALS_PORT']!r}") from exc
        return replace(self, **overrides) if overrides else self

    def resolved_database_path(self) -> Path:
        return self.database_path or resolve_database_path(None)

    def open_backend(self) -> Backend:
        """Build and initialise the configured storage backend."""

        backend: Backend
        if self.storage == "memory":
            backend = MemoryBackend()
        else:
            backend = Database(self.resolved_database_path())
        backend.initialize()
        return backend


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (Path(__file__).resolve().parent.parent / "config" / "rentals.yaml").resolve(strict=False)


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from the YAML file (if present) and the environment."""
    env = os.environ if environ is None else environ
    path = config_path or resolve_config_path(env.get("RENTALS_CONFIG"))

    settings = Settings()
    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
        section = raw.get("rentals") or {}
        if not isinstance(section, dict):
            raise ValueError("The 'rentals' configuration section must be a mapping")
        settings = Settings.from_dict(section, base_path=path.parent)

    return settings.with_environment(env)


__all__ = ["STORAGE_BACKENDS", "Settings", "load_settings", "resolve_config_path"]
