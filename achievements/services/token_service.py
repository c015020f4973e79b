"""Bearer tokens naming the calling principal.

ES256 JWTs: ``sub`` is the principal string the store compares against
record owners and the admin principal.  The store trusts it as given;
proving who holds the token is the identity provider's job.  The key
pair is generated at import, so tokens do not survive a restart.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

ALGORITHM = "ES256"
ISSUER = "achievement-store"
AUDIENCE = "achievement-store"
ACCESS_TOKEN_TTL_MIN = 15
REQUIRED_CLAIMS = ("sub", "exp", "iat", "jti")

_signing_key = ec.generate_private_key(ec.SECP256R1())
_verifying_key = _signing_key.public_key()


def create_access_token(*, sub: str, ttl_minutes: int = ACCESS_TOKEN_TTL_MIN) -> str:
    """Sign a token for principal ``sub`` valid for ``ttl_minutes``."""
    issued = datetime.now(UTC)
    claims = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "sub": sub,
        "iat": issued,
        "exp": issued + timedelta(minutes=ttl_minutes),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, _signing_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    # Only ES256 is accepted; raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
    return jwt.decode(
        token,
        key=_verifying_key,
        algorithms=[ALGORITHM],
        audience=AUDIENCE,
        issuer=ISSUER,
        options={"require": list(REQUIRED_CLAIMS)},
    )
