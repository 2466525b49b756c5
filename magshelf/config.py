# Centralised configuration and logging setup for the publishing service.

# What this module provides:
#   1) A Settings dataclass holding all env-driven configuration
#   2) get_settings(): reads env vars once, configures logging once
#   3) setup_logging(): idempotent root logger configuration

import os
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

# Development value used when ADMIN_PASSWORD is unset.
DEFAULT_ADMIN_PASSWORD = "changeme"


@dataclass(frozen=True)
class Settings:
    admin_password: str
    data_dir: Path
    uploads_dir: Path
    log_level: str = "INFO"  # One of: DEBUG, INFO, WARNING, ERROR, CRITICAL
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def data_file(self) -> Path:
        """The single JSON file holding every catalog record."""
        return self.data_dir / "entries.json"


# -----------------------------------------------------------------------------
# Small helpers for robust environment variable parsing
# -----------------------------------------------------------------------------
def _env_str(key: str, default: str) -> str:
    """
    Read a string environment variable & fall back to default if unset or empty
    """
    val = os.getenv(key, default).strip()
    return val if val else default


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


# -----------------------------------------------------------------------------
# Logging configuration
# -----------------------------------------------------------------------------
def setup_logging(level: str) -> None:
    """
    Configure the root logger ONCE per process (idempotent).
    """
    if getattr(setup_logging, "_configured", False):
        return

    # Example output:
    # 2026-10-19 12:34:56,789 INFO [magshelf.storage] Created item ...
    logging.basicConfig(
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )
    setup_logging._configured = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read all environment variables, configure logging once, and return a
    frozen Settings object.
    """
    admin_password = _env_str("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    data_dir = Path(_env_str("MAGSHELF_DATA_DIR", "data")).resolve()
    uploads_dir = Path(_env_str("MAGSHELF_UPLOADS_DIR", "uploads")).resolve()
    log_level = _env_str("LOG_LEVEL", "INFO")
    host = _env_str("MAGSHELF_HOST", "127.0.0.1")
    port = _env_int("MAGSHELF_PORT", 3000)

    setup_logging(log_level)
    logger = logging.getLogger("magshelf.config")
    logger.info(
        "Loaded settings data_dir=%s uploads_dir=%s", data_dir, uploads_dir
    )
    if admin_password == DEFAULT_ADMIN_PASSWORD:
        logger.warning("ADMIN_PASSWORD is not set; using the development default")

    return Settings(
        admin_password=admin_password,
        data_dir=data_dir,
        uploads_dir=uploads_dir,
        log_level=log_level,
        host=host,
        port=port,
    )
