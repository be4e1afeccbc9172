from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional

from certificates_api.db.database import get_db
from certificates_api.schemas.certificate import (
    CertificateSave,
    CertificateSaveResponse,
    CertificateDeleteResponse,
)
from certificates_api.services.certificate import CertificateService
from certificates_api.utils.storage import BlobStore

router = APIRouter(prefix="/certificates", tags=["certificates"])


def get_blob_store(request: Request) -> BlobStore:
    """The store created at startup and shared by every request."""
    return request.app.state.blob_store


def get_certificate_service(
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> CertificateService:
    return CertificateService(db, blob_store)


@router.post("/save", response_model=CertificateSaveResponse)
async def save_certificate(
    data: CertificateSave,
    service: CertificateService = Depends(get_certificate_service),
):
    """Create a certificate, or update the one with the given id."""
    return await service.save(data)


@router.get("/list", response_model=List[Dict[str, Any]])
async def list_certificates(service: CertificateService = Depends(get_certificate_service)):
    return await service.list_certificates()


@router.get("/image/{cert_id}")
async def get_certificate_image(
    cert_id: str,
    download: Optional[str] = None,
    service: CertificateService = Depends(get_certificate_service),
):
    """Stream the stored image; `?download=1` asks the browser to save it."""
    image = await service.get_image(cert_id)
    headers = {}
    if download == "1":
        headers["Content-Disposition"] = f'attachment; filename="{image.filename}"'
    return Response(content=image.data, media_type=image.content_type, headers=headers)


@router.get("/search/byRegNumber/{reg_num}", response_model=Dict[str, Any])
async def search_by_registration_number(
    reg_num: str,
    service: CertificateService = Depends(get_certificate_service),
):
    return await service.get_by_registration_number(reg_num)


@router.get("/{cert_id}", response_model=Dict[str, Any])
async def get_certificate(
    cert_id: str,
    service: CertificateService = Depends(get_certificate_service),
):
    return await service.get_by_id(cert_id)


@router.delete("/{cert_id}", response_model=CertificateDeleteResponse)
async def delete_certificate(
    cert_id: str,
    service: CertificateService = Depends(get_certificate_service),
):
    return await service.delete(cert_id)
