"""Configuration for the college seeding job."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

BASE_PATH = Path(__file__).resolve().parent.parent
DEFAULT_FIXTURE = BASE_PATH / "data" / "colleges-seed.json"
DEFAULT_TABLE = "colleges"
BATCH_SIZE = 100

REQUIRED_VARS = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")


class ConfigurationError(Exception):
    """Raised when the seeder cannot start because of bad configuration."""


@dataclass(frozen=True)
class SeedConfig:
    """Everything the seeder needs, validated once at startup."""

    supabase_url: str
    service_role_key: str
    fixture_path: Path = DEFAULT_FIXTURE
    table: str = DEFAULT_TABLE
    batch_size: int = BATCH_SIZE


def _parse_batch_size(raw: str | None) -> int:
    if not raw:
        return BATCH_SIZE
    try:
        size = int(raw)
    except ValueError:
        raise ConfigurationError(f"SEED_BATCH_SIZE must be an integer, got {raw!r}") from None
    if size < 1:
        raise ConfigurationError(f"SEED_BATCH_SIZE must be positive, got {size}")
    return size


def load_seed_config(env: Mapping[str, str] | None = None) -> SeedConfig:
    """Build a :class:`SeedConfig` from ``env`` (defaults to ``os.environ``).

    Raises :class:`ConfigurationError` naming every missing credential.
    """
    env = os.environ if env is None else env
    missing = [name for name in REQUIRED_VARS if not env.get(name)]
    if missing:
        raise ConfigurationError(f"Missing {' and '.join(missing)}")

    fixture = env.get("COLLEGES_FIXTURE")
    return SeedConfig(
        supabase_url=env["SUPABASE_URL"].rstrip("/"),
        service_role_key=env["SUPABASE_SERVICE_ROLE_KEY"],
        fixture_path=Path(fixture) if fixture else DEFAULT_FIXTURE,
        batch_size=_parse_batch_size(env.get("SEED_BATCH_SIZE")),
    )
