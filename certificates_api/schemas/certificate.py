from pydantic import BaseModel, Field, validator
from typing import Optional, Any, Dict
from datetime import datetime

from certificates_api.models.certificate import Certificate


class CertificateSave(BaseModel):
    """Body of POST /certificates/save.

    Required fields are checked by the service so that a missing one is a
    400 with the usual error message rather than a schema error.
    """
    id: Optional[str] = None
    registrationNumber: Optional[str] = None
    studentName: Optional[str] = None
    studentCategory: Optional[str] = None
    studentCenter: Optional[str] = None
    certification: Optional[Any] = None
    image: Optional[Any] = None

    @validator("id", "registrationNumber", "studentName", "studentCategory", "studentCenter", pre=True)
    def numbers_as_text(cls, v):
        # Registration numbers and ids often arrive as JSON numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class CertificateRead(BaseModel):
    """Fixed part of the public view. Never carries image_path."""
    id: str
    registration_number: str = Field(alias="registrationNumber")
    student_name: str = Field(alias="studentName")
    student_category: str = Field(alias="studentCategory")
    student_center: Optional[str] = Field(default=None, alias="studentCenter")
    image: Optional[str] = None
    saved_at: datetime = Field(alias="savedAt")
    updated_at: datetime = Field(alias="updatedAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_row(cls, row: Certificate) -> "CertificateRead":
        return cls(
            id=row.id,
            registration_number=row.registration_number,
            student_name=row.student_name,
            student_category=row.student_category,
            student_center=row.student_center,
            image=row.image_url or None,
            saved_at=row.saved_at,
            updated_at=row.updated_at,
        )


def to_public_view(row: Optional[Certificate]) -> Optional[Dict[str, Any]]:
    """Flatten a stored row into the API shape.

    The named columns form the base layer and the row's ``certification``
    mapping is laid over it, so a certification key with the same name as a
    column wins.
    """
    if row is None:
        return None
    view = CertificateRead.from_row(row).model_dump(by_alias=True)
    view.update(row.certification or {})
    return view


class CertificateSaveResponse(BaseModel):
    success: bool = True
    message: str
    id: str
    certificate: Dict[str, Any]


class CertificateDeleteResponse(BaseModel):
    success: bool = True
    message: str
