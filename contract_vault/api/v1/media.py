"""
Media endpoints: upload, listing, soft delete and contract zip download
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from contract_vault.core.exceptions import BadRequestError
from contract_vault.core.security import get_current_user
from contract_vault.db.base import get_db
from contract_vault.db.models.user import User
from contract_vault.schemas.common import create_response
from contract_vault.schemas.contract import MediaRead
from contract_vault.services.media_service import MediaService, MAX_FILES_PER_UPLOAD, parse_tags

router = APIRouter()


def get_media_service() -> MediaService:
    """Dependency to get media service instance"""
    return MediaService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_media(
    file: Optional[UploadFile] = File(None),
    contract_id: Optional[str] = Form(None, alias="contractId"),
    tags: Optional[str] = Form(None, description="Comma separated tags"),
    user: User = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    if file is None or not file.filename:
        raise BadRequestError("No file uploaded")

    content = await file.read()
    media = await service.upload(
        db,
        content=content,
        original_name=file.filename,
        mimetype=file.content_type,
        uploaded_by=user.id,
        contract_id=contract_id,
        tags=parse_tags(tags)
    )
    return create_response(
        status=201,
        message="File uploaded successfully",
        data=MediaRead.model_validate(media).model_dump(by_alias=True)
    )


@router.post("/multiple", status_code=status.HTTP_201_CREATED)
async def upload_multiple_media(
    files: List[UploadFile] = File(...),
    contract_id: Optional[str] = Form(None, alias="contractId"),
    tags: Optional[str] = Form(None, description="Comma separated tags"),
    user: User = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    if not files:
        raise BadRequestError("No files uploaded")
    if len(files) > MAX_FILES_PER_UPLOAD:
        raise BadRequestError(f"At most {MAX_FILES_PER_UPLOAD} files per upload")

    # Validate everything before storing anything
    contents = []
    for upload in files:
        content = await upload.read()
        service.validate_file(upload.filename, len(content))
        contents.append((upload, content))

    uploaded = []
    for upload, content in contents:
        media = await service.upload(
            db,
            content=content,
            original_name=upload.filename,
            mimetype=upload.content_type,
            uploaded_by=user.id,
            contract_id=contract_id,
            tags=parse_tags(tags)
        )
        uploaded.append(MediaRead.model_validate(media).model_dump(by_alias=True))

    return create_response(
        status=201,
        message=f"{len(uploaded)} files uploaded successfully",
        data={"media": uploaded, "total": len(uploaded)}
    )


@router.get("")
async def list_media(
    contract_id: Optional[str] = Query(None, alias="contractId"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    items, total = await service.list_media(db, contract_id=contract_id, page=page, limit=limit)
    return create_response(
        status=200,
        message="Media retrieved successfully",
        data={
            "media": [MediaRead.model_validate(m).model_dump(by_alias=True) for m in items],
            "total": total,
            "page": page,
            "limit": limit,
        }
    )


@router.get("/zip/{contract_id}")
async def download_contract_zip(
    contract_id: str,
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    filename, payload = await service.build_contract_zip(db, contract_id)
    return Response(
        content=payload,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/{media_id}")
async def get_media(
    media_id: str,
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    media = await service.get(db, media_id)
    return create_response(
        status=200,
        message="Media retrieved successfully",
        data=MediaRead.model_validate(media).model_dump(by_alias=True)
    )


@router.delete("/{media_id}")
async def delete_media(
    media_id: str,
    user: User = Depends(get_current_user),
    service: MediaService = Depends(get_media_service),
    db: AsyncSession = Depends(get_db)
):
    await service.soft_delete(db, media_id)
    return create_response(status=200, message="Media deleted successfully")
