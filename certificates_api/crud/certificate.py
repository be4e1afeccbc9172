"""
Certificate table access:
- lookups by id and by registration number
- listing, newest update first
- upsert keyed by id, delete by id
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from sqlmodel import select

from certificates_api.models.certificate import Certificate


async def get_certificate(db: AsyncSession, cert_id: str) -> Optional[Certificate]:
    result = await db.execute(select(Certificate).where(Certificate.id == cert_id))
    return result.scalar_one_or_none()


async def get_certificate_by_registration_number(db: AsyncSession, registration_number: str) -> Optional[Certificate]:
    """Registration numbers are not unique; the most recently updated match is returned."""
    result = await db.execute(
        select(Certificate)
        .where(Certificate.registration_number == registration_number)
        .order_by(Certificate.updated_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def list_certificates(db: AsyncSession) -> List[Certificate]:
    result = await db.execute(
        select(Certificate).order_by(Certificate.updated_at.desc(), Certificate.id)
    )
    return result.scalars().all()


async def upsert_certificate(db: AsyncSession, row: Certificate) -> Certificate:
    """Insert the row, or replace every column of the row with the same id."""
    try:
        merged = await db.merge(row)
        await db.commit()
        await db.refresh(merged)
        return merged
    except Exception:
        await db.rollback()
        raise


async def delete_certificate(db: AsyncSession, cert_id: str) -> None:
    try:
        await db.execute(delete(Certificate).where(Certificate.id == cert_id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise
