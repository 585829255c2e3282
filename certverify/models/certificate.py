from datetime import date, datetime

from sqlalchemy import Date, DateTime, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from certverify.database import Base


class Certificate(Base):
    """Issued certificate as written by the issuance process.

    Rows are read-only for this service. Two period shapes are stored side by
    side:
    - training_start_date / training_end_date: structured dates
    - training_period: pre-rendered text

    The (qr_code_id, qr_verification_token) pair is unique, and both values
    must match for a row to be disclosed.
    """

    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint(
            "qr_code_id",
            "qr_verification_token",
            name="uq_certificates_qr_code_id_token",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    qr_code_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    qr_verification_token: Mapped[str] = mapped_column(String(255), unique=True)
    fullname: Mapped[str] = mapped_column(String(255))
    training: Mapped[str] = mapped_column(String(255))
    training_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    training_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    training_period: Mapped[str | None] = mapped_column(String(255), nullable=True)
    award_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    control_number: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
