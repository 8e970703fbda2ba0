"""Certificate issuance, listing and repair of passed attempts left without one."""
import logging
import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.models.assessment import Assessment
from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.models.module import TrainingModule
from app.schemas.stats import CertificateOutSchema
from app.services.scoring import certificate_expiry, is_certificate_valid

logger = logging.getLogger(__name__)


def new_certificate_number(issued_at: datetime) -> str:
    """e.g. CT-2026-9F3A1B2C"""
    return f"CT-{issued_at:%Y}-{secrets.token_hex(4).upper()}"


def build_certificate(
    user_id: int,
    module_id: int,
    attempt_id: int | None,
    issued_at: datetime | None = None,
) -> Certificate:
    """Create (not persist) a certificate row valid for the configured number of days."""
    settings = get_settings()
    issued_at = issued_at or datetime.now(timezone.utc)
    return Certificate(
        certificate_number=new_certificate_number(issued_at),
        user_id=user_id,
        module_id=module_id,
        attempt_id=attempt_id,
        issued_at=issued_at,
        valid_until=certificate_expiry(issued_at, settings.certificate_validity_days),
    )


def _missing_certificates_query():
    return (
        select(Attempt, Assessment.module_id)
        .join(Assessment, Attempt.assessment_id == Assessment.id)
        .outerjoin(Certificate, Certificate.attempt_id == Attempt.id)
        .where(
            Attempt.passed == True,  # noqa: E712
            Assessment.module_id.is_not(None),
            Certificate.id.is_(None),
        )
        .order_by(Attempt.id)
    )


async def count_attempts_missing_certificate(db: AsyncSession) -> int:
    result = await db.execute(_missing_certificates_query())
    return len(result.all())


async def reconcile_missing_certificates(db: AsyncSession) -> list[Certificate]:
    """Issue a certificate for every passed, module-linked attempt that has none.

    Running it twice issues nothing the second time.
    """
    result = await db.execute(_missing_certificates_query())
    rows = result.all()
    issued = []
    for attempt, module_id in rows:
        cert = build_certificate(
            user_id=attempt.user_id,
            module_id=module_id,
            attempt_id=attempt.id,
            issued_at=attempt.completed_at or datetime.now(timezone.utc),
        )
        db.add(cert)
        issued.append(cert)
    if issued:
        await db.commit()
        logger.warning("Reconciled %d passed attempt(s) without certificate", len(issued))
    return issued


async def list_certificates(
    db: AsyncSession,
    user_id: int,
    expiring_first: bool = False,
    limit: int | None = None,
) -> list[CertificateOutSchema]:
    """Newest first by default; ``expiring_first`` orders by valid_until ascending."""
    stmt = (
        select(Certificate, TrainingModule.title)
        .join(TrainingModule, Certificate.module_id == TrainingModule.id)
        .where(Certificate.user_id == user_id)
    )
    if expiring_first:
        stmt = stmt.order_by(Certificate.valid_until.asc(), Certificate.id)
    else:
        stmt = stmt.order_by(Certificate.issued_at.desc(), Certificate.id.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return [
        CertificateOutSchema(
            id=cert.id,
            certificate_number=cert.certificate_number,
            module_id=cert.module_id,
            module_title=title,
            attempt_id=cert.attempt_id,
            issued_at=cert.issued_at,
            valid_until=cert.valid_until,
            is_valid=is_certificate_valid(cert.valid_until),
        )
        for cert, title in result.all()
    ]
