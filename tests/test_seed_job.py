"""End-to-end tests for the college seeding job with a fake Supabase table."""

import json
import logging
from unittest.mock import patch

import pytest

from ingest.supabase_client import SupabaseError
from jobs import seed_colleges as job


class FakeTable:
    instances = []

    def __init__(self, base_url, api_key, table, fail_on=(), row_count=0, count_error=None):
        self.base_url = base_url
        self.api_key = api_key
        self.table = table
        self.fail_on = set(fail_on)
        self.row_count = row_count
        self.count_error = count_error
        self.upserts = []
        self.count_calls = 0
        self.closed = False
        FakeTable.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def upsert(self, rows, on_conflict):
        self.upserts.append(rows)
        if len(self.upserts) in self.fail_on:
            raise SupabaseError("batch rejected", status_code=500)

    def count(self):
        self.count_calls += 1
        if self.count_error:
            raise self.count_error
        return self.row_count


@pytest.fixture(autouse=True)
def environment(monkeypatch, tmp_path):
    FakeTable.instances = []
    monkeypatch.setattr(job, "load_dotenv", lambda: None)
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    monkeypatch.delenv("SEED_BATCH_SIZE", raising=False)
    fixture = tmp_path / "colleges.json"
    fixture.write_text(json.dumps([{"name": f"College {i}"} for i in range(250)]))
    monkeypatch.setenv("COLLEGES_FIXTURE", str(fixture))
    return fixture


def use_fake_table(monkeypatch, **options):
    monkeypatch.setattr(job, "SupabaseTable", lambda *args: FakeTable(*args, **options))


def test_full_run(monkeypatch, capsys):
    use_fake_table(monkeypatch, row_count=250)

    assert job.main() == 0

    table = FakeTable.instances[0]
    assert table.table == "colleges"
    assert [len(rows) for rows in table.upserts] == [100, 100, 50]
    assert table.count_calls == 1
    assert table.closed
    out = capsys.readouterr().out
    assert "Found 250 colleges to seed" in out
    assert "Successfully seeded 250 colleges!" in out
    assert "Total colleges in database: 250" in out


def test_failed_batch_still_reconciles(monkeypatch, capsys):
    use_fake_table(monkeypatch, fail_on={2}, row_count=150)

    assert job.main() == 0

    table = FakeTable.instances[0]
    assert len(table.upserts) == 3
    assert table.count_calls == 1
    out = capsys.readouterr().out
    assert "Error inserting batch 2" in out
    assert "Inserted batch 3 (150/250)" in out
    assert "Successfully seeded 150 colleges!" in out
    assert "Failed batches: 2" in out


def test_count_failure_does_not_fail_run(monkeypatch, capsys):
    use_fake_table(monkeypatch, count_error=SupabaseError("timeout"))

    assert job.main() == 0
    assert "Total colleges in database: unavailable" in capsys.readouterr().out


@pytest.mark.parametrize("missing", ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"])
def test_missing_credential_exits_before_reading_fixture(monkeypatch, capsys, missing):
    monkeypatch.delenv(missing)
    use_fake_table(monkeypatch)

    with patch.object(job, "load_fixture") as load_fixture:
        assert job.main() == 1

    load_fixture.assert_not_called()
    assert FakeTable.instances == []
    err = capsys.readouterr().err
    assert missing in err
    assert ".env" in err


def test_missing_fixture_exits(monkeypatch, environment, capsys):
    environment.unlink()
    use_fake_table(monkeypatch)

    assert job.main() == 1

    assert FakeTable.instances == []
    assert "Cannot read fixture" in capsys.readouterr().err


def test_malformed_fixture_exits(monkeypatch, environment):
    environment.write_text("not json")
    use_fake_table(monkeypatch)

    assert job.main() == 1
    assert FakeTable.instances == []


def test_uncaught_error_exits(monkeypatch, capsys):
    def broken_table(*args):
        raise RuntimeError("connection pool exhausted")

    monkeypatch.setattr(job, "SupabaseTable", broken_table)

    assert job.main() == 1
    assert "Seed failed: connection pool exhausted" in capsys.readouterr().err


def test_count_failure_logged_as_warning(monkeypatch, caplog):
    use_fake_table(monkeypatch, count_error=SupabaseError("timeout"))

    with caplog.at_level(logging.WARNING, logger="jobs.seed_colleges"):
        assert job.main() == 0

    warnings = [r for r in caplog.records if r.name == "jobs.seed_colleges"]
    assert [r.levelno for r in warnings] == [logging.WARNING]
    assert "Count query failed" in warnings[0].getMessage()
