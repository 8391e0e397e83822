from dataclasses import dataclass

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from .jwt_handler import ADMIN_ROLE, token_roles, verify_access_token

# Defines the expected header format (Bearer <token>). Tokens are issued by the
# identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    is_admin: bool = False

    def can_access(self, owner_id: str) -> bool:
        return self.is_admin or self.user_id == owner_id


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Dependency to validate JWT and return the caller (sub + admin role)."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    if not token:
        raise credentials_exception
        
    payload = verify_access_token(token)
    if payload is None:
        raise credentials_exception
        
    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception
        
    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = str(user_id)
    return CurrentUser(user_id=str(user_id), is_admin=ADMIN_ROLE in token_roles(payload))


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency for admin-only endpoints."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )
    return user
