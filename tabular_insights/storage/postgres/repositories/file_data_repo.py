"""
Repository for uploaded file data.

Every read and delete is scoped to the owning user.
"""

import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _json_value(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


class FileDataRepository:
    """Repository for file_data CRUD operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        owner_id: str,
        file_name: str,
        original_name: str,
        file_type: str,
        file_size: int,
        data: List[Dict[str, Any]],
        columns: List[Dict[str, str]],
        row_count: int,
        is_processed: bool = True
    ) -> dict:
        """
        Create a new file data record.

        Args:
            owner_id: Identifier of the uploading user
            file_name: Stored (temporary) filename
            original_name: Filename as uploaded
            file_type: csv, xlsx or xls
            file_size: File size in bytes
            data: Parsed rows
            columns: Column descriptors ({name, type})
            row_count: Number of rows
            is_processed: Whether parsing completed

        Returns:
            Created record dict
        """
        result = await self.session.execute(
            text("""
                INSERT INTO file_data
                    (owner_id, file_name, original_name, file_type, file_size,
                     data, columns, row_count, is_processed)
                VALUES
                    (:owner_id, :file_name, :original_name, :file_type, :file_size,
                     CAST(:data AS jsonb), CAST(:columns AS jsonb), :row_count, :is_processed)
                RETURNING id, owner_id, file_name, original_name, file_type, file_size,
                          columns, row_count, upload_date, is_processed
            """),
            {
                "owner_id": owner_id,
                "file_name": file_name,
                "original_name": original_name,
                "file_type": file_type,
                "file_size": file_size,
                "data": json.dumps(data),
                "columns": json.dumps(columns),
                "row_count": row_count,
                "is_processed": is_processed
            }
        )
        row = result.fetchone()
        return self._row_to_dict(row)

    async def get_by_id_and_owner(self, file_id: str, owner_id: str) -> Optional[dict]:
        """
        Get a file with its rows.

        Returns:
            Record dict or None if missing or owned by someone else
        """
        if not _is_uuid(file_id):
            return None

        result = await self.session.execute(
            text("""
                SELECT id, owner_id, original_name, file_type, data, columns,
                       row_count, upload_date
                FROM file_data
                WHERE id = :file_id AND owner_id = :owner_id
            """),
            {"file_id": file_id, "owner_id": owner_id}
        )
        row = result.fetchone()
        return self._row_to_dict(row) if row else None

    async def list_by_owner(self, owner_id: str) -> List[dict]:
        """
        List a user's files (summary projection, newest first).
        """
        result = await self.session.execute(
            text("""
                SELECT id, original_name, file_type, row_count, upload_date, is_processed
                FROM file_data
                WHERE owner_id = :owner_id
                ORDER BY upload_date DESC
            """),
            {"owner_id": owner_id}
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def delete_by_id_and_owner(self, file_id: str, owner_id: str) -> bool:
        """
        Delete a file record.

        Returns:
            True if deleted, False if not found or not owned by owner_id
        """
        if not _is_uuid(file_id):
            return False

        result = await self.session.execute(
            text("""
                DELETE FROM file_data
                WHERE id = :file_id AND owner_id = :owner_id
                RETURNING id
            """),
            {"file_id": file_id, "owner_id": owner_id}
        )
        return result.fetchone() is not None

    def _row_to_dict(self, row) -> Optional[dict]:
        """Convert a database row to a dict, keeping only the selected columns."""
        if row is None:
            return None
        record = dict(row._mapping)
        record["id"] = str(record["id"])
        for key in ("data", "columns"):
            if key in record:
                record[key] = _json_value(record[key])
        return record
