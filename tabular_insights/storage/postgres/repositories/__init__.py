from tabular_insights.storage.postgres.repositories.file_data_repo import FileDataRepository

__all__ = ["FileDataRepository"]
