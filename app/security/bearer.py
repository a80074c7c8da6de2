"""Bearer-token helpers for inbound caller authorization."""

from __future__ import annotations

import hmac

from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

bearer_scheme = HTTPBearer(auto_error=False)


def token_matches(provided: str | None, expected: str) -> bool:
    """Return True when no service token is configured or the tokens match."""

    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


async def caller_token(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str | None:
    """Extract the bearer token from the Authorization header, if any."""

    if credentials is None:
        return None
    return credentials.credentials.strip() or None
