"""
Unit tests for the PostgreSQL repository and migration helpers.

The AsyncSession is mocked; no database is needed.
"""

import asyncio
import json
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from tabular_insights.storage.postgres.connection import MIGRATIONS_DIR, split_statements
from tabular_insights.storage.postgres.repositories import FileDataRepository

FILE_ID = "3f1c9a9e-5b1e-4c6f-9a8e-2d2f0b7c1a11"


def mock_session(row=None, rows=None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    return session


def db_row(**values):
    return SimpleNamespace(_mapping=values)


class TestFileDataRepository:
    """Test SQL parameters and row conversion."""

    def test_create_serializes_json(self):
        """Test rows and columns are sent as JSON text."""
        returned = db_row(
            id=FILE_ID, owner_id="alice", file_name="file-1.csv", original_name="a.csv",
            file_type="csv", file_size=10, columns=[{"name": "x", "type": "number"}],
            row_count=1, upload_date=datetime.now(timezone.utc), is_processed=True,
        )
        session = mock_session(row=returned)
        repo = FileDataRepository(session)

        record = asyncio.run(repo.create(
            owner_id="alice", file_name="file-1.csv", original_name="a.csv",
            file_type="csv", file_size=10, data=[{"x": "1"}],
            columns=[{"name": "x", "type": "number"}], row_count=1,
        ))

        params = session.execute.call_args.args[1]
        assert json.loads(params["data"]) == [{"x": "1"}]
        assert json.loads(params["columns"]) == [{"name": "x", "type": "number"}]
        assert record["id"] == FILE_ID
        assert "data" not in record

    def test_get_decodes_json_text(self):
        """Test JSONB returned as text is decoded."""
        row = db_row(
            id=FILE_ID, owner_id="alice", original_name="a.csv", file_type="csv",
            data='[{"x": "1"}]', columns='[{"name": "x", "type": "number"}]',
            row_count=1, upload_date=None,
        )
        repo = FileDataRepository(mock_session(row=row))

        record = asyncio.run(repo.get_by_id_and_owner(FILE_ID, "alice"))

        assert record["data"] == [{"x": "1"}]
        assert record["columns"][0]["type"] == "number"

    def test_get_missing(self):
        """Test a missing or foreign row is None."""
        repo = FileDataRepository(mock_session(row=None))
        assert asyncio.run(repo.get_by_id_and_owner(FILE_ID, "bob")) is None

    def test_non_uuid_id_skips_query(self):
        """Test malformed ids behave as not found without touching the database."""
        session = mock_session()
        repo = FileDataRepository(session)

        assert asyncio.run(repo.get_by_id_and_owner("not-a-uuid", "alice")) is None
        assert asyncio.run(repo.delete_by_id_and_owner("not-a-uuid", "alice")) is False
        session.execute.assert_not_called()

    def test_delete_scoped_to_owner(self):
        """Test delete passes the owner and reports whether a row went away."""
        session = mock_session(row=db_row(id=FILE_ID))
        repo = FileDataRepository(session)

        assert asyncio.run(repo.delete_by_id_and_owner(FILE_ID, "alice")) is True
        assert session.execute.call_args.args[1] == {"file_id": FILE_ID, "owner_id": "alice"}

    def test_list_by_owner(self):
        """Test list rows are converted in query order."""
        rows = [
            db_row(id=FILE_ID, original_name="b.csv", file_type="csv", row_count=2,
                   upload_date=None, is_processed=True),
        ]
        repo = FileDataRepository(mock_session(rows=rows))
        listed = asyncio.run(repo.list_by_owner("alice"))
        assert [r["original_name"] for r in listed] == ["b.csv"]


class TestMigrations:
    """Test migration file handling."""

    def test_split_statements_drops_comments(self):
        """Test comment-only chunks are removed."""
        sql = "-- header\nCREATE TABLE t (id INT);\n\n-- trailing comment\n"
        assert split_statements(sql) == ["CREATE TABLE t (id INT)"]

    def test_initial_schema(self):
        """Test the shipped schema creates the file table and its index."""
        statements = split_statements((MIGRATIONS_DIR / "001_initial_schema.sql").read_text())
        assert len(statements) == 2
        assert statements[0].startswith("CREATE TABLE IF NOT EXISTS file_data")
        assert statements[1].startswith("CREATE INDEX IF NOT EXISTS")
