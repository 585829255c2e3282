from __future__ import annotations

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CertificateRecord(BaseModel):
    """Authoritative certificate record as read from the store.

    Accepts either storage shape: structured ``training_start_date`` /
    ``training_end_date`` or a pre-rendered ``training_period`` string, and a
    token column named ``qr_verification_token`` or ``verification_token``.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True, populate_by_name=True)

    id: str
    public_id: str = Field(validation_alias=AliasChoices("public_id", "qr_code_id"))
    verification_token: str = Field(
        repr=False,
        exclude=True,
        validation_alias=AliasChoices(
            "verification_token", "qr_verification_token"
        ),
    )
    recipient_name: str = Field(
        validation_alias=AliasChoices("recipient_name", "fullname")
    )
    training_label: str = Field(
        validation_alias=AliasChoices("training_label", "training")
    )
    training_start_date: date | None = None
    training_end_date: date | None = None
    training_period: str | None = None
    award_date: date | str | None = None
    control_number: str | None = None
    issued_at: datetime = Field(
        validation_alias=AliasChoices("issued_at", "created_at")
    )


class CertificateView(BaseModel):
    """Display projection of a verified certificate. Carries no secrets."""

    model_config = ConfigDict(frozen=True)

    certificate_id: str
    recipient_name: str
    training_label: str
    training_period: str
    award_date: str
    issued_date: str
    control_number: str | None = None
