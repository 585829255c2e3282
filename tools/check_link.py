#!/usr/bin/env python3
"""Verify a certificate link against the configured database.

Usage: python tools/check_link.py "https://example.org/verify/qr-abc?token=..."
"""

from __future__ import annotations

import asyncio
import sys

from certverify.database_async import AsyncSessionLocal
from certverify.services.certificate_store import SQLAlchemyCertificateStore
from certverify.services.verification import (
    Verified,
    VerificationAttempt,
    parse_verification_link,
)


async def check_link(url: str) -> int:
    request = parse_verification_link(url)
    async with AsyncSessionLocal() as session:
        attempt = VerificationAttempt(SQLAlchemyCertificateStore(session), request)
        state = await attempt.run()

    print(f"public id: {request.public_id or '-'}")
    print(f"outcome:   {state.kind}")
    if isinstance(state, Verified):
        for field, value in state.certificate.model_dump().items():
            if value is not None:
                print(f"  {field}: {value}")
        return 0
    print(f"message:   {state.message}")
    return 1


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(__doc__.strip(), file=sys.stderr)
        return 2
    return asyncio.run(check_link(args[0]))


if __name__ == "__main__":
    sys.exit(main())
