from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import DateTime, Text
from typing import Optional, Dict, Any
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Certificate(SQLModel, table=True):
    __tablename__ = "certificates"

    id: str = Field(primary_key=True)

    registration_number: str = Field(index=True, nullable=False)
    student_name: str = Field(nullable=False)
    student_category: str = Field(nullable=False)
    student_center: Optional[str] = None

    # Free-form fields shown on the certificate, kept verbatim
    certification: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    # Object key inside the bucket, e.g. "1712345678.png"
    image_path: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    image_url: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    saved_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
