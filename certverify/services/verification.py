"""Verification flow: (public id, token) in, one terminal state out.

An attempt starts as ``Pending`` and resolves to exactly one of
``InvalidRequest``, ``Unverified`` or ``Verified``. The terminal state is
computed by :func:`resolve_state`, a pure function of the request and the
store outcome. :class:`VerificationAttempt` performs the single lookup and
publishes the state unless it was cancelled first.

Failure states carry fixed messages. A wrong token, an unknown id and a store
outage all produce the same ``Unverified`` text.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import parse_qs, quote, unquote, urlsplit

from certverify.observability.metrics import VERIFICATION_COUNTER
from certverify.schemas.certificate import CertificateView
from certverify.services.certificate_store import CertificateStore, LookupResult
from certverify.services.display import build_certificate_view

logger = logging.getLogger(__name__)

INVALID_LINK_MESSAGE = "Invalid verification link"
NOT_FOUND_MESSAGE = "Certificate not found or invalid"

VERIFY_PATH_PREFIX = "/verify/"


@dataclass(frozen=True, slots=True)
class Pending:
    kind: Literal["pending"] = "pending"


@dataclass(frozen=True, slots=True)
class InvalidRequest:
    message: str = INVALID_LINK_MESSAGE
    kind: Literal["invalid_request"] = "invalid_request"


@dataclass(frozen=True, slots=True)
class Unverified:
    message: str = NOT_FOUND_MESSAGE
    kind: Literal["unverified"] = "unverified"


@dataclass(frozen=True, slots=True)
class Verified:
    certificate: CertificateView
    kind: Literal["verified"] = "verified"


VerificationState = Pending | InvalidRequest | Unverified | Verified


@dataclass(frozen=True, slots=True)
class VerificationRequest:
    public_id: str | None
    token: str | None

    @classmethod
    def from_params(cls, public_id: Any, token: Any) -> VerificationRequest:
        """Keep only non-empty strings; anything else becomes ``None``."""
        return cls(
            public_id=public_id if isinstance(public_id, str) and public_id else None,
            token=token if isinstance(token, str) and token else None,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.public_id) and bool(self.token)

    def __repr__(self) -> str:
        return f"VerificationRequest(public_id={self.public_id!r}, token=<redacted>)"


def parse_verification_link(url: str) -> VerificationRequest:
    """Extract the public id and token from ``/verify/{public_id}?token=...``."""
    parts = urlsplit(url)
    public_id: str | None = None
    if parts.path.startswith(VERIFY_PATH_PREFIX):
        public_id = unquote(parts.path[len(VERIFY_PATH_PREFIX) :].strip("/")) or None
    # Repeated parameters resolve to the last value, as in the route.
    tokens = parse_qs(parts.query).get("token") or [None]
    return VerificationRequest.from_params(public_id, tokens[-1])


def build_verification_link(base_url: str, public_id: str, token: str) -> str:
    return (
        f"{base_url.rstrip('/')}{VERIFY_PATH_PREFIX}{quote(public_id, safe='')}"
        f"?token={quote(token, safe='')}"
    )


def resolve_state(
    request: VerificationRequest,
    outcome: LookupResult | BaseException | None = None,
) -> VerificationState:
    """Map a request and the store outcome to the next state.

    ``outcome`` is ``None`` while the lookup has not resolved, a
    :class:`LookupResult` on success, or the exception the lookup raised.
    """
    if not request.is_complete:
        return InvalidRequest()
    if outcome is None:
        return Pending()
    if isinstance(outcome, BaseException):
        return Unverified()
    if outcome.record is None:
        return Unverified()
    try:
        view = build_certificate_view(outcome.record)
    except Exception as exc:
        logger.warning("Certificate display shaping failed: %s", type(exc).__name__)
        return Unverified()
    return Verified(certificate=view)


StateListener = Callable[[VerificationState], None]


class VerificationAttempt:
    """One verification attempt against a store.

    The lookup is awaited once. Results that resolve after :meth:`cancel`
    are discarded and never reach listeners.
    """

    def __init__(self, store: CertificateStore, request: VerificationRequest) -> None:
        self.store = store
        self.request = request
        self.state: VerificationState = Pending()
        self.cancelled = False
        self._listeners: list[StateListener] = []

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def cancel(self) -> None:
        self.cancelled = True

    async def run(self) -> VerificationState:
        if self.cancelled or not isinstance(self.state, Pending):
            return self.state
        if not self.request.is_complete:
            return self._publish(resolve_state(self.request))

        outcome: LookupResult | BaseException
        try:
            outcome = await self.store.find_by_public_id_and_token(
                self.request.public_id, self.request.token
            )
        except Exception as exc:
            # Exception text may embed bound query parameters; log the type only.
            logger.warning(
                "Certificate lookup failed for public_id=%s: %s",
                self.request.public_id,
                type(exc).__name__,
            )
            outcome = exc

        if self.cancelled:
            logger.debug(
                "Discarding lookup result for cancelled attempt public_id=%s",
                self.request.public_id,
            )
            return self.state
        return self._publish(resolve_state(self.request, outcome))

    def _publish(self, state: VerificationState) -> VerificationState:
        if self.cancelled:
            return self.state
        self.state = state
        VERIFICATION_COUNTER.labels(state.kind).inc()
        logger.info(
            "Verification attempt resolved",
            extra={"public_id": self.request.public_id, "outcome": state.kind},
        )
        for listener in self._listeners:
            listener(state)
        return state


async def verify_certificate(
    store: CertificateStore, public_id: Any, token: Any
) -> VerificationState:
    """Run a complete verification attempt and return its terminal state."""
    request = VerificationRequest.from_params(public_id, token)
    attempt = VerificationAttempt(store, request)
    return await attempt.run()
