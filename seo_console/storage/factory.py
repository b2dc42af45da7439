"""Build the record store selected by a :class:`StorageConfig`."""

from __future__ import annotations

from seo_console.core.logging_config import get_logger
from seo_console.core.models import StorageConfig
from seo_console.storage.adapter import StorageAdapter
from seo_console.storage.file_storage import FileStorage
from seo_console.storage.sql_storage import SqlStorage

logger = get_logger(__name__)


def create_storage_adapter(config: StorageConfig | None = None) -> StorageAdapter:
    """Instantiate the backend named by ``config.type`` (file by default)."""
    config = config or StorageConfig()
    if config.type == "sql":
        logger.debug("Using SQL storage")
        return SqlStorage(config.dsn)
    logger.debug("Using file storage at %s", config.file_path)
    return FileStorage(config.file_path)
