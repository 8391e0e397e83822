"""
Bearer token handling.

Tokens are minted by the identity provider; this service only verifies them.
``create_access_token`` is kept for local tooling and the test-suite.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from shared.config.settings import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY

ADMIN_ROLE = "Admin"


def create_access_token(claims: dict, expires_in: Optional[timedelta] = None) -> str:
    expires_at = datetime.now(timezone.utc) + (expires_in or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({**claims, "exp": expires_at}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_access_token(token: str) -> Optional[dict]:
    """Claims of a valid token; None when it is malformed, forged or expired."""
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None


def token_roles(claims: dict) -> set[str]:
    # Providers disagree on the claim name and on string vs list.
    roles = claims.get("role") or claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return set(roles)
