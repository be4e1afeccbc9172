"""
Certificate workflow: save (upsert), list, lookups, image download, delete.

Each operation turns provider failures into ``StorageError`` with the message
the frontend shows for that operation; not-found and validation errors pass
through untouched.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from certificates_api.core.config import settings
from certificates_api.core.exceptions import (
    CustomHTTPException,
    CertificateValidationError,
    CertificateNotFoundError,
    StorageError,
    ImageTooLargeError,
)
from certificates_api.crud import certificate as crud
from certificates_api.models.certificate import Certificate, utcnow
from certificates_api.schemas.certificate import CertificateSave, to_public_view
from certificates_api.utils.image_codec import (
    DEFAULT_IMAGE_MIME,
    decode_payload,
    extension_for_mime,
    extension_from_path,
    parse_image,
)
from certificates_api.utils.storage import BlobStore

logger = logging.getLogger(__name__)

MSG_MISSING_FIELDS = "بيانات ناقصة - يجب تحديد رقم القيد والاسم والفئة"
MSG_SAVED = "تم حفظ الشهادة بنجاح"
MSG_SAVE_FAILED = "خطأ في حفظ الشهادة"
MSG_UPLOAD_FAILED = "خطأ في رفع صورة الشهادة"
MSG_IMAGE_TOO_LARGE = "حجم صورة الشهادة كبير جداً"
MSG_LIST_FAILED = "خطأ في جلب الشهادات"
MSG_GET_FAILED = "خطأ في جلب الشهادة"
MSG_SEARCH_FAILED = "خطأ في البحث عن الشهادة"
MSG_NOT_FOUND = "الشهادة غير موجودة"
MSG_IMAGE_NOT_FOUND = "الصورة غير موجودة"
MSG_IMAGE_FAILED = "خطأ في تحميل الصورة"
MSG_DELETED = "تم حذف الشهادة بنجاح"
MSG_DELETE_FAILED = "خطأ في حذف الشهادة"


@dataclass
class CertificateImage:
    data: bytes
    content_type: str
    extension: str
    filename: str


class CertificateService:
    def __init__(self, db: AsyncSession, blob_store: BlobStore, max_image_size: Optional[int] = None):
        self.db = db
        self.blob_store = blob_store
        self.max_image_size = max_image_size or settings.MAX_IMAGE_SIZE

    async def save(self, data: CertificateSave) -> Dict[str, Any]:
        if not (data.registrationNumber and data.studentName and data.studentCategory):
            raise CertificateValidationError(MSG_MISSING_FIELDS)

        try:
            cert_id = data.id or str(uuid4())
            now = utcnow()
            certification = data.certification if isinstance(data.certification, dict) else {}

            existing = await crud.get_certificate(self.db, cert_id)
            previous_path = existing.image_path if existing else None
            image_path = previous_path
            image_url = existing.image_url if existing else None

            parsed = parse_image(data.image)
            if parsed:
                image_path = f"{cert_id}.{extension_for_mime(parsed.mime)}"
                image_url = await self._store_image(image_path, parsed.base64, parsed.mime or DEFAULT_IMAGE_MIME)

            student_center = data.studentCenter or certification.get("studentCenter")
            row = Certificate(
                id=cert_id,
                registration_number=data.registrationNumber,
                student_name=data.studentName,
                student_category=data.studentCategory,
                student_center=str(student_center) if student_center not in (None, "") else None,
                certification=certification,
                image_path=image_path,
                image_url=image_url,
                saved_at=existing.saved_at if existing else now,
                updated_at=now,
            )
            saved = await crud.upsert_certificate(self.db, row)
        except CustomHTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to save certificate: {e}", exc_info=True)
            raise StorageError(MSG_SAVE_FAILED)

        # A new format leaves the old object behind under another key
        if previous_path and previous_path != image_path:
            if not await self.blob_store.remove(previous_path):
                logger.warning(f"Replaced image {previous_path} of certificate {cert_id} was not removed")

        logger.info(f"Certificate saved: {cert_id}")
        return {
            "success": True,
            "message": MSG_SAVED,
            "id": cert_id,
            "certificate": to_public_view(saved),
        }

    async def _store_image(self, path: str, payload: str, mime: str) -> str:
        """Upload the decoded image and return its public URL."""
        try:
            content = decode_payload(payload)
        except ValueError as e:
            logger.error(f"Storage upload error: {e}")
            raise StorageError(MSG_UPLOAD_FAILED)

        if len(content) > self.max_image_size:
            raise ImageTooLargeError(MSG_IMAGE_TOO_LARGE)

        try:
            await self.blob_store.upload(path, content, content_type=mime)
        except Exception as e:
            logger.error(f"Storage upload error: {e}")
            raise StorageError(MSG_UPLOAD_FAILED)

        return self.blob_store.public_url(path)

    async def list_certificates(self) -> List[Dict[str, Any]]:
        try:
            rows = await crud.list_certificates(self.db)
        except Exception as e:
            logger.error(f"Failed to list certificates: {e}")
            raise StorageError(MSG_LIST_FAILED)
        return [to_public_view(row) for row in rows]

    async def get_by_id(self, cert_id: str) -> Dict[str, Any]:
        try:
            row = await crud.get_certificate(self.db, cert_id)
        except Exception as e:
            logger.error(f"Failed to fetch certificate {cert_id}: {e}")
            raise StorageError(MSG_GET_FAILED)
        if row is None:
            raise CertificateNotFoundError(MSG_NOT_FOUND)
        return to_public_view(row)

    async def get_by_registration_number(self, registration_number: str) -> Dict[str, Any]:
        try:
            row = await crud.get_certificate_by_registration_number(self.db, registration_number)
        except Exception as e:
            logger.error(f"Failed to search certificate {registration_number}: {e}")
            raise StorageError(MSG_SEARCH_FAILED)
        if row is None:
            raise CertificateNotFoundError(MSG_NOT_FOUND)
        return to_public_view(row)

    async def get_image(self, cert_id: str) -> CertificateImage:
        try:
            row = await crud.get_certificate(self.db, cert_id)
        except Exception as e:
            logger.error(f"Image lookup failed for {cert_id}: {e}")
            raise StorageError(MSG_IMAGE_FAILED)
        if row is None or not row.image_path:
            raise CertificateNotFoundError(MSG_IMAGE_NOT_FOUND)

        try:
            blob = await self.blob_store.download(row.image_path)
        except Exception as e:
            logger.error(f"Storage download error: {e}")
            raise StorageError(MSG_IMAGE_FAILED)
        if blob is None:
            raise CertificateNotFoundError(MSG_IMAGE_NOT_FOUND)

        extension = extension_from_path(row.image_path)
        return CertificateImage(
            data=blob.data,
            content_type=blob.content_type or DEFAULT_IMAGE_MIME,
            extension=extension,
            filename=f"certificate_{cert_id}.{extension}",
        )

    async def delete(self, cert_id: str) -> Dict[str, Any]:
        try:
            row = await crud.get_certificate(self.db, cert_id)
        except Exception as e:
            logger.error(f"Lookup before delete failed for {cert_id}: {e}")
            raise StorageError(MSG_DELETE_FAILED)
        if row is None:
            raise CertificateNotFoundError(MSG_NOT_FOUND)

        # Orphaned images are tolerated; the row is removed regardless
        if row.image_path and not await self.blob_store.remove(row.image_path):
            logger.warning(f"Image {row.image_path} of certificate {cert_id} was not removed")

        try:
            await crud.delete_certificate(self.db, cert_id)
        except Exception as e:
            logger.error(f"Failed to delete certificate {cert_id}: {e}")
            raise StorageError(MSG_DELETE_FAILED)

        return {"success": True, "message": MSG_DELETED}
