"""JWT bearer token gate step."""

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import structlog
from pydantic import SecretStr
from starlette.responses import Response

from filecrud.core.context import FileRequestContext
from filecrud.core.exceptions import (
    AuthenticationError,
    AuthorizationDenied,
    InvalidTokenError,
    TokenExpiredError,
)
from filecrud.core.gates import CallNext, Step

logger = structlog.get_logger()


def _secret_value(secret: str | SecretStr) -> str:
    return secret.get_secret_value() if isinstance(secret, SecretStr) else secret


def create_access_token(
    secret: str | SecretStr,
    subject: str,
    role: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
) -> str:
    """Create a signed JWT access token."""
    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "role": role,
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, _secret_value(secret), algorithm=algorithm)


def decode_token(secret: str | SecretStr, token: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Decode and validate a JWT access token."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token, _secret_value(secret), algorithms=[algorithm]
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError from e

    if payload.get("type") != "access":
        raise InvalidTokenError()
    return payload


def bearer_token_step(
    secret: str | SecretStr,
    algorithm: str = "HS256",
    roles: Iterable[str] | None = None,
) -> Step:
    """Build a gate step that requires an ``Authorization: Bearer`` token.

    Missing or invalid tokens answer 401 through the error handler. A valid
    token whose role is not in ``roles`` is denied outright. The decoded
    claims are left in ``ctx.state["claims"]`` for later steps.
    """
    allowed = frozenset(roles or ())

    async def require_bearer_token(
        ctx: FileRequestContext, call_next: CallNext
    ) -> Response | None:
        auth_header = ctx.request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            raise AuthenticationError("Authorization header required")

        payload = decode_token(secret, auth_header[7:], algorithm)
        role = payload.get("role")
        if allowed and role not in allowed:
            logger.info("Role not permitted", role=role, path=ctx.path)
            raise AuthorizationDenied(f"Role '{role}' is not permitted")

        ctx.state["claims"] = payload
        return await call_next()

    return require_bearer_token
