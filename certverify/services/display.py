"""Shape verified certificate records into their public display projection."""

from __future__ import annotations

from datetime import UTC, date, datetime

from certverify.schemas.certificate import CertificateRecord, CertificateView

NOT_AVAILABLE = "N/A"


def format_display_value(value: date | str | None) -> str:
    """Render a structured-or-text value: dates as ISO, text as given, else N/A."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        return value.strip()
    return NOT_AVAILABLE


def format_training_period(
    start: date | None,
    end: date | None,
    text: str | None,
) -> str:
    if start and end:
        return f"{start.isoformat()} to {end.isoformat()}"
    return format_display_value(text)


def format_issued_date(issued_at: datetime) -> str:
    """en-US medium date, e.g. ``Jan 10, 2024``."""
    if issued_at.tzinfo is not None:
        issued_at = issued_at.astimezone(UTC)
    return f"{issued_at:%b} {issued_at.day}, {issued_at.year}"


def format_verified_on(moment: datetime | None = None) -> str:
    """en-US long timestamp, e.g. ``October 19, 2026 at 03:05 PM``."""
    moment = moment or datetime.now(UTC)
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p}"


def build_certificate_view(record: CertificateRecord) -> CertificateView:
    control_number = record.control_number or None
    return CertificateView(
        certificate_id=record.id,
        recipient_name=record.recipient_name,
        training_label=record.training_label,
        training_period=format_training_period(
            record.training_start_date,
            record.training_end_date,
            record.training_period,
        ),
        award_date=format_display_value(record.award_date),
        issued_date=format_issued_date(record.issued_at),
        control_number=control_number,
    )
