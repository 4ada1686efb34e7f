"""
Upload ingestion and file record access, scoped to the owning user.
"""

import logging
from typing import Any, Dict, List, Optional

from tabular_insights.api.exceptions import NotFoundError, UnsupportedFormatError
from tabular_insights.ingestion.file_processor import (
    SUPPORTED_FILE_TYPES,
    get_file_type,
    parse_path,
    temporary_upload,
    validate_columns,
)

logger = logging.getLogger(__name__)


class FileService:
    """Parses uploads into tables and persists them through a FileDataRepository."""

    def __init__(self, repository, upload_dir: Optional[str] = None):
        self.repository = repository
        self.upload_dir = upload_dir

    async def ingest_upload(self, owner_id: str, filename: str, content: bytes) -> Dict[str, Any]:
        """
        Parse an uploaded file and store it.

        The temporary copy of the upload is removed whether or not parsing
        succeeds. Nothing is persisted unless parsing and the column check pass.
        """
        file_type = get_file_type(filename)
        if file_type not in SUPPORTED_FILE_TYPES:
            raise UnsupportedFormatError(file_type)

        logger.info(
            f"Processing upload '{filename}' ({len(content)} bytes, type={file_type}) for user {owner_id}"
        )

        with temporary_upload(content, filename, self.upload_dir) as tmp_path:
            table = parse_path(tmp_path, file_type)
            columns = validate_columns(table.columns)

            record = await self.repository.create(
                owner_id=owner_id,
                file_name=tmp_path.name,
                original_name=filename,
                file_type=file_type,
                file_size=len(content),
                data=table.rows,
                columns=columns,
                row_count=table.row_count,
                is_processed=True,
            )

        logger.info(f"Stored file {record['id']}: {table.row_count} rows, {len(columns)} columns")

        return {
            "fileId": record["id"],
            "fileName": filename,
            "fileType": file_type,
            "rowCount": table.row_count,
            "columns": columns,
            "uploadDate": record.get("upload_date"),
        }

    async def list_files(self, owner_id: str) -> List[Dict[str, Any]]:
        records = await self.repository.list_by_owner(owner_id)
        return [
            {
                "fileId": r["id"],
                "fileName": r["original_name"],
                "fileType": r["file_type"],
                "rowCount": r["row_count"],
                "uploadDate": r.get("upload_date"),
                "isProcessed": r.get("is_processed", True),
            }
            for r in records
        ]

    async def get_file(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        record = await self.repository.get_by_id_and_owner(file_id, owner_id)
        if not record:
            raise NotFoundError("File", file_id)
        return {
            "fileId": record["id"],
            "fileName": record["original_name"],
            "fileType": record["file_type"],
            "rowCount": record["row_count"],
            "columns": record["columns"],
            "data": record["data"],
            "uploadDate": record.get("upload_date"),
        }

    async def delete_file(self, file_id: str, owner_id: str) -> None:
        deleted = await self.repository.delete_by_id_and_owner(file_id, owner_id)
        if not deleted:
            raise NotFoundError("File", file_id)
        logger.info(f"Deleted file {file_id} for user {owner_id}")
