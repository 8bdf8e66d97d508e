"""
Todo Cards Backend — Password Hashing and Session Tokens
==========================================================

What:  Argon2 password hashes and opaque session tokens.
How:   argon2-cffi's PasswordHasher with its default parameters; the PHC
       string it produces carries the salt and cost parameters, so they can
       be raised later without breaking existing accounts. Tokens come from
       secrets.token_urlsafe.

Stored format:
    $argon2id$v=19$m=65536,t=3,p=4$<salt b64>$<hash b64>
"""

import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

TOKEN_BYTES = 32

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hashes a plain-text password for storage."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Checks a plain-text password against a stored hash.

    Malformed or foreign hashes never match.
    """
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def new_session_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def parse_bearer_token(authorization: Optional[str]) -> str:
    """Extracts the token from an Authorization header; bare tokens pass through."""
    if not authorization:
        return ""
    value = authorization.strip()
    if value[:7].lower() == "bearer ":
        value = value[7:].strip()
    return value
