from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

BACKENDS = ("memory", "disk", "redis")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    # Store
    backend: str
    namespace: str
    data_dir: Path
    redis_url: str

    # Read-modify-write
    optimistic: bool
    max_retries: int


def get_settings() -> Settings:
    backend = os.getenv("REBRIDGE_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"REBRIDGE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}")

    namespace = os.getenv("REBRIDGE_NAMESPACE", "rebridge").strip() or "rebridge"
    data_dir = Path(os.getenv("REBRIDGE_DATA_DIR", "data"))
    redis_url = os.getenv("REBRIDGE_REDIS_URL", "redis://localhost:6379/0")

    # Off by default: concurrent writers to one root race, last write wins.
    optimistic = _env_bool("REBRIDGE_OPTIMISTIC", False)
    max_retries = _env_int("REBRIDGE_MAX_RETRIES", 3)
    if max_retries < 0:
        raise ValueError("REBRIDGE_MAX_RETRIES must be >= 0")

    return Settings(
        backend=backend,
        namespace=namespace,
        data_dir=data_dir,
        redis_url=redis_url,
        optimistic=optimistic,
        max_retries=max_retries,
    )
