"""End-to-end tests for the /verify pages."""

from __future__ import annotations

from datetime import date

import pytest
from fakes import FakeCertificateStore, seed_certificate
from fastapi.testclient import TestClient

from certverify.main import app
from certverify.routers.verify import get_certificate_store
from certverify.services.certificate_store import StoreError
from certverify.services.verification import INVALID_LINK_MESSAGE, NOT_FOUND_MESSAGE


@pytest.fixture
def failing_store():
    store = FakeCertificateStore(error=StoreError("connection refused"))
    app.dependency_overrides[get_certificate_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_certificate_store, None)


def _failure_message(html: str) -> str:
    marker = 'class="muted text-center failure-message">'
    start = html.index(marker) + len(marker)
    return html[start : html.index("</p>", start)]


class TestVerifiedCertificate:
    def test_exact_pair_renders_certificate(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "Certificate Verified" in resp.text
        assert "Jane Doe" in resp.text
        assert "Fire Safety" in resp.text
        assert "CN-0099" in resp.text
        assert "Jan 10, 2024" in resp.text
        assert "Certificate ID:" in resp.text
        assert "Verified on" in resp.text

    def test_token_never_rendered(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert resp.status_code == 200
        assert "tok-123" not in resp.text

    def test_missing_optional_fields_render_na(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert resp.text.count("N/A") == 2

    def test_structured_period(self, client: TestClient, db_session):
        seed_certificate(
            db_session,
            training_start_date=date(2024, 1, 1),
            training_end_date=date(2024, 1, 5),
            award_date="January 5, 2024",
        )
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert "2024-01-01 to 2024-01-05" in resp.text
        assert "January 5, 2024" in resp.text

    def test_text_period_without_control_number(self, client: TestClient, db_session):
        seed_certificate(
            db_session, training_period="Spring 2024 cohort", control_number=None
        )
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert "Spring 2024 cohort" in resp.text
        assert "Control Number" not in resp.text

    def test_repeat_requests_are_idempotent(self, client: TestClient, jane_doe):
        first = client.get("/verify/qr-abc", params={"token": "tok-123"})
        second = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert first.status_code == second.status_code == 200
        assert "Jane Doe" in first.text and "Jane Doe" in second.text

    def test_response_is_not_cached(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc", params={"token": "tok-123"})
        assert resp.headers["Cache-Control"] == "no-store"
        assert resp.headers["Referrer-Policy"] == "no-referrer"


class TestUnverifiedCertificate:
    def test_wrong_token(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc", params={"token": "wrong"})
        assert resp.status_code == 404
        assert "Verification Failed" in resp.text
        assert _failure_message(resp.text) == NOT_FOUND_MESSAGE
        assert "Jane Doe" not in resp.text

    def test_unknown_id(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-zzz", params={"token": "tok-123"})
        assert resp.status_code == 404
        assert _failure_message(resp.text) == NOT_FOUND_MESSAGE

    def test_token_of_other_certificate(self, client: TestClient, db_session):
        seed_certificate(db_session)
        seed_certificate(
            db_session,
            id="c2",
            qr_code_id="qr-def",
            qr_verification_token="tok-456",
            fullname="John Roe",
        )
        resp = client.get("/verify/qr-abc", params={"token": "tok-456"})
        assert resp.status_code == 404
        assert "John Roe" not in resp.text
        assert "Jane Doe" not in resp.text

    def test_store_failure_matches_not_found(
        self, client: TestClient, db_session, failing_store
    ):
        failed = client.get("/verify/qr-abc", params={"token": "tok-123"})
        app.dependency_overrides.pop(get_certificate_store, None)
        missing = client.get("/verify/qr-abc", params={"token": "tok-123"})

        assert failing_store.calls == [("qr-abc", "tok-123")]
        assert failed.status_code == missing.status_code == 404
        assert _failure_message(failed.text) == _failure_message(missing.text)
        assert "connection refused" not in failed.text


class TestInvalidRequest:
    def test_missing_token(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc")
        assert resp.status_code == 400
        assert _failure_message(resp.text) == INVALID_LINK_MESSAGE
        assert "Jane Doe" not in resp.text

    def test_empty_token(self, client: TestClient, jane_doe):
        resp = client.get("/verify/qr-abc?token=")
        assert resp.status_code == 400
        assert _failure_message(resp.text) == INVALID_LINK_MESSAGE

    @pytest.mark.parametrize("path", ["/verify", "/verify/", "/verify/?token=tok-123"])
    def test_missing_id(self, client: TestClient, path):
        resp = client.get(path, follow_redirects=False)
        assert resp.status_code == 400
        assert _failure_message(resp.text) == INVALID_LINK_MESSAGE

    def test_store_not_called(self, client: TestClient):
        store = FakeCertificateStore()
        app.dependency_overrides[get_certificate_store] = lambda: store
        try:
            client.get("/verify/qr-abc")
            client.get("/verify/qr-abc?token=")
        finally:
            app.dependency_overrides.pop(get_certificate_store, None)
        assert store.calls == []
