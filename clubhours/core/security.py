# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Security helpers: HS256 JSON Web Tokens and bcrypt password hashing.

Two token kinds share the signing key:
    access     sub = member record id, lifetime ACCESS_TOKEN_TTL_SECONDS
    selection  sub = e-mail address, issued when several members share
               one login, lifetime SELECTION_TOKEN_TTL_SECONDS
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clubhours.core.config import settings
from clubhours.core.logging import get_logger

logger = get_logger(__name__)

ACCESS = "access"
SELECTION = "selection"
PBKDF2_ITERATIONS = 100_000
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
BCRYPT_MAX_BYTES = 72


def _b64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def _encode(claims: dict[str, Any]) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.JWT_SECRET))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def _decode(token: str) -> Optional[dict[str, Any]]:
    """Verify signature and expiry; None for anything malformed."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        expected = _sign(f"{header_b64}.{payload_b64}".encode("utf-8"), settings.JWT_SECRET)
        if not hmac.compare_digest(expected, _b64_url_decode(signature_b64)):
            return None
        claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or exp < time.time():
        return None
    return claims


def create_access_token(member_id: str, ttl_seconds: Optional[int] = None) -> str:
    now = int(time.time())
    return _encode({
        "sub": member_id,
        "typ": ACCESS,
        "iat": now,
        "exp": now + (ttl_seconds or settings.ACCESS_TOKEN_TTL_SECONDS),
    })


def decode_access_token(token: str) -> Optional[str]:
    """Return the member id of a valid access token, else None."""
    claims = _decode(token)
    if not claims or claims.get("typ") != ACCESS:
        return None
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    # Numeric subjects come from the pre-Records-Service user table.
    if subject.isdigit():
        logger.info("Rejected legacy token with numeric subject")
        return None
    return subject


def create_selection_token(email: str) -> str:
    now = int(time.time())
    return _encode({
        "sub": email.lower(),
        "typ": SELECTION,
        "iat": now,
        "exp": now + settings.SELECTION_TOKEN_TTL_SECONDS,
    })


def verify_selection_token(token: str) -> Optional[str]:
    """Return the e-mail a selection token was issued for, else None."""
    claims = _decode(token)
    if not claims or claims.get("typ") != SELECTION:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None


def _bcrypt_secret(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes.
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """bcrypt hash, the format the ``details`` table has always held."""
    return bcrypt.hashpw(_bcrypt_secret(password), bcrypt.gensalt()).decode("utf-8")


def needs_rehash(hashed_password: str) -> bool:
    """True for ``<salt hex>$<pbkdf2-sha256 hex>`` rows from earlier builds."""
    return not hashed_password.startswith(BCRYPT_PREFIXES)


def _verify_pbkdf2(plain_password: str, hashed_password: str) -> bool:
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    if not needs_rehash(hashed_password):
        try:
            return bcrypt.checkpw(_bcrypt_secret(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            logger.warning("Malformed bcrypt hash in credential store")
            return False
    return _verify_pbkdf2(plain_password, hashed_password)


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_member_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """FastAPI dependency: authenticated member id or HTTP 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    member_id = decode_access_token(credentials.credentials)
    if member_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return member_id
