"""Read contract for the certificate store and its SQLAlchemy implementation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError
from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.config import settings
from certverify.models.certificate import Certificate
from certverify.schemas.certificate import CertificateRecord


class StoreError(RuntimeError):
    """Raised when the store cannot answer a lookup (outage, timeout, bad data)."""


@dataclass(frozen=True, slots=True)
class LookupResult:
    record: CertificateRecord | None = None

    @property
    def not_found(self) -> bool:
        return self.record is None


class CertificateStore(Protocol):
    async def find_by_public_id_and_token(
        self, public_id: str, token: str
    ) -> LookupResult:
        """Return the single record matching both values, or ``not_found``.

        Raises:
            StoreError: the store is unreachable or returned an invalid answer.
        """
        ...


class SQLAlchemyCertificateStore:
    """Matched equality lookup against the ``certificates`` table."""

    def __init__(
        self,
        session: AsyncSession,
        timeout: float | None = None,
    ) -> None:
        self.session = session
        self.timeout = timeout if timeout is not None else settings.store_timeout_seconds

    async def find_by_public_id_and_token(
        self, public_id: str, token: str
    ) -> LookupResult:
        # Both columns are matched in the same WHERE clause; no id-only read.
        stmt = (
            select(Certificate)
            .where(
                and_(
                    Certificate.qr_code_id == public_id,
                    Certificate.qr_verification_token == token,
                )
            )
            .limit(2)
        )
        try:
            result = await asyncio.wait_for(
                self.session.execute(stmt), timeout=self.timeout
            )
            rows = result.scalars().all()
        except TimeoutError as exc:
            raise StoreError("Certificate lookup timed out.") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError("Certificate store unavailable.") from exc

        if len(rows) > 1:
            raise StoreError("Certificate lookup matched more than one record.")
        if not rows:
            return LookupResult()

        try:
            record = CertificateRecord.model_validate(rows[0], from_attributes=True)
        except ValidationError as exc:
            raise StoreError("Certificate record failed validation.") from exc
        return LookupResult(record=record)
