"""JWT access token creation and validation (ES256).

The signing key comes from JWT_PRIVATE_KEY (PEM, EC P-256).  Without it an
ephemeral key pair is generated on import, which is enough for dev and
tests but means tokens do not survive a restart.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
ISSUER = "host-payments-service"
AUDIENCE = "host-payments-service"
ACCESS_TOKEN_TTL_MIN = 60


def _load_private_key(pem: str | None) -> ec.EllipticCurvePrivateKey:
    if not pem:
        if SETTINGS.is_prod:
            raise RuntimeError("JWT_PRIVATE_KEY must be set when APP_ENV=prod")
        logger.info("JWT_PRIVATE_KEY not set, generating an ephemeral signing key")
        return ec.generate_private_key(ec.SECP256R1())
    key = serialization.load_pem_private_key(pem.encode(), password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError("JWT_PRIVATE_KEY must be an EC private key")
    return key


_private_key = _load_private_key(SETTINGS.jwt_private_key)
_public_key = _private_key.public_key()


def create_access_token(
    *,
    sub: str,
    ttl: timedelta | None = None,
) -> str:
    """Build and sign a JWT access token for ``sub``."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + (ttl if ttl is not None else timedelta(minutes=ACCESS_TOKEN_TTL_MIN)),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256; exp, iss and aud are checked by PyJWT.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
