"""Load the college fixture and upsert it into Supabase in batches."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Protocol, Sequence

from ingest.supabase_client import SupabaseError

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY = "India"
CONFLICT_COLUMN = "name"


class FixtureError(Exception):
    """Raised when the seed fixture is missing or malformed."""


class UpsertTarget(Protocol):
    def upsert(self, rows: list[dict[str, Any]], on_conflict: str) -> None: ...


@dataclass
class SeedResult:
    """Outcome of a seeding run."""

    total: int
    processed: int = 0
    batches_attempted: int = 0
    failed_batches: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_batches


def load_fixture(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON array of college records from ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise FixtureError(f"Cannot read fixture {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FixtureError(f"Invalid JSON in fixture {path}: {exc}") from exc

    if not isinstance(data, list):
        raise FixtureError(f"Fixture {path} must contain a JSON array, got {type(data).__name__}")
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise FixtureError(f"Fixture {path}: record {index} is not an object")
    return data


def with_default_country(record: dict[str, Any], default: str = DEFAULT_COUNTRY) -> dict[str, Any]:
    """Return a copy of ``record`` with ``country`` filled in when absent or empty."""
    return {**record, "country": record.get("country") or default}


def chunked(records: Sequence[dict[str, Any]], size: int) -> Iterator[Sequence[dict[str, Any]]]:
    """Yield consecutive slices of ``records`` holding at most ``size`` items."""
    if size < 1:
        raise ValueError("batch size must be positive")
    for start in range(0, len(records), size):
        yield records[start:start + size]


def seed_batch(
    result: SeedResult,
    batch_number: int,
    batch: Sequence[dict[str, Any]],
    target: UpsertTarget,
    report: Callable[[str], None] = print,
) -> SeedResult:
    """Upsert one batch and fold its outcome into ``result``.

    A :class:`SupabaseError` marks the batch as failed; anything else
    propagates.
    """
    rows = [with_default_country(record) for record in batch]
    result.batches_attempted += 1
    try:
        target.upsert(rows, on_conflict=CONFLICT_COLUMN)
    except SupabaseError as exc:
        logger.error("Batch %d failed: %s", batch_number, exc)
        report(f"❌ Error inserting batch {batch_number}: {exc}")
        result.failed_batches.append(batch_number)
        return result

    result.processed += len(batch)
    report(f"✅ Inserted batch {batch_number} ({result.processed}/{result.total})")
    return result


def seed_colleges(
    records: Sequence[dict[str, Any]],
    target: UpsertTarget,
    batch_size: int,
    report: Callable[[str], None] = print,
) -> SeedResult:
    """Upsert ``records`` in sequential batches, skipping batches that fail."""
    result = SeedResult(total=len(records))
    for number, batch in enumerate(chunked(records, batch_size), start=1):
        result = seed_batch(result, number, batch, target, report)
    return result
