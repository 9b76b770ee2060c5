"""
Local-disk storage provider for uploaded media
Files are grouped in per-day folders and served by the app under /files.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from contract_vault.core.config import settings

logger = logging.getLogger(__name__)


class FileStorageService:
    def __init__(self, storage_path: Optional[str] = None, public_base_url: Optional[str] = None):
        self.storage_path = Path(storage_path or settings.STORAGE_PATH)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def save_file(self, file_content: bytes, original_filename: str, media_id: str) -> str:
        """Save file to disk and return its key (path relative to the storage root)"""
        date_folder = datetime.now().strftime("%Y-%m-%d")
        save_dir = self.storage_path / date_folder
        save_dir.mkdir(parents=True, exist_ok=True)

        # media_id keeps names unique
        file_extension = Path(original_filename).suffix.lower()
        file_path = save_dir / f"{media_id}{file_extension}"

        with open(file_path, 'wb') as f:
            f.write(file_content)

        logger.info(f"Stored {original_filename} ({len(file_content)} bytes) at {file_path}")
        return file_path.relative_to(self.storage_path).as_posix()

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/files/{key}"

    def get_file_path(self, key: str) -> Optional[Path]:
        """Absolute path of a stored file, or None if it is gone"""
        full_path = (self.storage_path / key).resolve()
        if self.storage_path.resolve() not in full_path.parents:
            return None
        return full_path if full_path.exists() else None

    def delete_file(self, key: str) -> bool:
        file_path = self.get_file_path(key)
        if file_path:
            file_path.unlink()
            return True
        return False
