"""
Media service
Upload, listing, soft delete and per-contract zip download of media files.
"""

import io
import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.config import settings
from contract_vault.core.exceptions import BadRequestError, NotFoundError
from contract_vault.db.models.contract import Contract
from contract_vault.db.models.media import Media
from contract_vault.services.file_storage import FileStorageService

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = (
    "jpg", "jpeg", "png", "gif", "pdf",
    "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt",
)
MAX_FILES_PER_UPLOAD = 10


def parse_tags(raw: Optional[str]) -> List[str]:
    """Comma separated form value -> list of non-empty tags"""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


class MediaService:
    """Service for media files and their metadata"""

    def __init__(self, storage: Optional[FileStorageService] = None):
        self.storage = storage or FileStorageService()

    @staticmethod
    def validate_file(filename: str, size: int) -> None:
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if not extension or extension not in ALLOWED_FORMATS:
            raise BadRequestError(f"File type not allowed. Allowed types: {', '.join(ALLOWED_FORMATS)}")
        if size > settings.MAX_UPLOAD_SIZE:
            raise BadRequestError(f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE} bytes")

    async def upload(
        self,
        db: AsyncSession,
        content: bytes,
        original_name: str,
        mimetype: Optional[str],
        uploaded_by: str,
        contract_id: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> Media:
        """
        Store a file and record its metadata.

        Attaching to a contract marks that contract as having a document.

        Raises:
            BadRequestError: Disallowed type or too large
            NotFoundError: contract_id does not exist
        """
        self.validate_file(original_name, len(content))

        contract = None
        if contract_id:
            contract = await db.get(Contract, contract_id)
            if contract is None:
                raise NotFoundError("Contract not found")

        media_id = str(uuid4())
        key = self.storage.save_file(content, original_name, media_id)

        media = Media(
            id=media_id,
            url=self.storage.public_url(key),
            filename=Path(key).name,
            original_name=original_name,
            mimetype=mimetype or "application/octet-stream",
            size=len(content),
            public_id=key,
            uploaded_by=uploaded_by,
            contract_id=contract_id,
            tags=tags or []
        )
        db.add(media)
        if contract is not None:
            contract.has_document = True

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            self.storage.delete_file(key)
            raise
        await db.refresh(media)
        return media

    async def list_media(
        self,
        db: AsyncSession,
        contract_id: Optional[str] = None,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[Media], int]:
        conditions = [Media.is_deleted.is_(False)]
        if contract_id:
            conditions.append(Media.contract_id == contract_id)

        total = (await db.execute(
            select(func.count()).select_from(Media).where(*conditions)
        )).scalar_one()

        result = await db.execute(
            select(Media)
            .where(*conditions)
            .order_by(Media.created_at.desc(), Media.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get(self, db: AsyncSession, media_id: str) -> Media:
        media = await db.get(Media, media_id)
        if media is None or media.is_deleted:
            raise NotFoundError("Media not found")
        return media

    async def soft_delete(self, db: AsyncSession, media_id: str) -> Media:
        """Flag as deleted and remove the stored file; the row is kept"""
        media = await self.get(db, media_id)
        media.is_deleted = True
        media.deleted_at = datetime.now(timezone.utc)
        await db.commit()

        if not self.storage.delete_file(media.public_id):
            logger.warning(f"Stored file for media {media_id} was already missing")
        logger.info(f"Media {media_id} soft deleted")
        return media

    async def build_contract_zip(self, db: AsyncSession, contract_id: str) -> Tuple[str, bytes]:
        """
        Zip every non-deleted file of a contract.

        Returns:
            (download filename, zip bytes)

        Raises:
            NotFoundError: Unknown contract or no files to zip
        """
        contract = await db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")

        result = await db.execute(
            select(Media)
            .where(Media.contract_id == contract_id, Media.is_deleted.is_(False))
            .order_by(Media.created_at, Media.id)
        )
        media_items = list(result.scalars().all())

        buffer = io.BytesIO()
        written = 0
        used_names = set()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for media in media_items:
                path = self.storage.get_file_path(media.public_id)
                if path is None:
                    logger.warning(f"Skipping media {media.id} in zip: stored file missing")
                    continue
                name = media.original_name
                if name in used_names:
                    name = f"{Path(name).stem}_{media.id[:8]}{Path(name).suffix}"
                used_names.add(name)
                archive.write(path, arcname=name)
                written += 1

        if not written:
            raise NotFoundError("No files found for this contract")

        return f"{contract.contract_number}.zip", buffer.getvalue()
