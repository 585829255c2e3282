"""Tests for certverify/schemas/: Pydantic validation models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from certverify.schemas.certificate import CertificateRecord, CertificateView


class TestCertificateRecord:
    """Both storage shapes map onto one record."""

    def test_structured_row_parses(self):
        record = CertificateRecord.model_validate(
            {
                "id": "c1",
                "qr_code_id": "qr-abc",
                "qr_verification_token": "tok-123",
                "fullname": "Jane Doe",
                "training": "Fire Safety",
                "training_start_date": "2024-01-01",
                "training_end_date": "2024-01-05",
                "created_at": "2024-01-10T00:00:00Z",
            }
        )
        assert record.public_id == "qr-abc"
        assert record.verification_token == "tok-123"
        assert record.recipient_name == "Jane Doe"
        assert record.training_start_date == date(2024, 1, 1)
        assert record.training_period is None

    def test_text_row_with_alternate_token_name(self):
        record = CertificateRecord.model_validate(
            {
                "id": "c2",
                "qr_code_id": "qr-def",
                "verification_token": "tok-456",
                "fullname": "John Roe",
                "training": "First Aid",
                "training_period": "Spring 2024",
                "award_date": "May 1, 2024",
                "created_at": "2024-05-02T12:00:00Z",
            }
        )
        assert record.verification_token == "tok-456"
        assert record.training_period == "Spring 2024"
        assert record.award_date == "May 1, 2024"

    def test_token_hidden_from_repr_and_dump(self):
        record = CertificateRecord.model_validate(
            {
                "id": "c1",
                "public_id": "qr-abc",
                "verification_token": "tok-123",
                "recipient_name": "Jane Doe",
                "training_label": "Fire Safety",
                "issued_at": "2024-01-10T00:00:00Z",
            }
        )
        assert "tok-123" not in repr(record)
        assert "verification_token" not in record.model_dump()

    def test_missing_token_errors(self):
        with pytest.raises(ValidationError):
            CertificateRecord.model_validate(
                {
                    "id": "c1",
                    "qr_code_id": "qr-abc",
                    "fullname": "Jane Doe",
                    "training": "Fire Safety",
                    "created_at": "2024-01-10T00:00:00Z",
                }
            )


class TestCertificateView:
    def test_view_is_frozen(self):
        view = CertificateView(
            certificate_id="c1",
            recipient_name="Jane Doe",
            training_label="Fire Safety",
            training_period="N/A",
            award_date="N/A",
            issued_date="Jan 10, 2024",
        )
        assert view.control_number is None
        with pytest.raises(ValidationError):
            view.recipient_name = "Someone Else"
