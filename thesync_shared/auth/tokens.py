"""
Signed, self-expiring JWTs carrying {sub, role, identifier}.

Access and refresh tokens share this codec and differ only in the secret and
lifetime the caller passes in.  The identifier claim is a random nonce that
is mirrored in the session cache so stale tokens can be detected.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, ValidationError

from thesync_shared.constants import Role


class TokenVerificationError(Exception):
    """Signature, expiry or claim check failed.

    The message is for server-side logs only; callers answer the client with
    a generic 401 so validation internals are not leaked.
    """


class TokenPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    sub: str
    role: Role
    identifier: str
    iat: int
    exp: int


def issue_token(
    *,
    sub: str,
    role: Role,
    identifier: str,
    secret: str,
    algorithm: str,
    expire_seconds: int,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "role": role.value,
        "identifier": identifier,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=expire_seconds),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(token: str, secret: str, algorithm: str) -> TokenPayload:
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise TokenVerificationError(str(exc)) from exc
    try:
        return TokenPayload.model_validate(claims)
    except ValidationError as exc:
        raise TokenVerificationError("Token payload is missing required claims") from exc
