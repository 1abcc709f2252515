import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import AUTH_COOKIE_NAME
from .database import get_db
from .models import SpaceOwner, User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# Cookie is the primary carrier; the bearer header is accepted for API clients
security = HTTPBearer(auto_error=False)

ADMIN_ROLES = {"admin"}


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = extract_token(request, credentials)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    payload = verify_jwt_token(token)
    if not payload or "id" not in payload:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.query(User).filter(User.id == payload["id"]).first()
    if not user:
        logger.warning(f"⚠️ Token references missing user id={payload.get('id')}")
        raise HTTPException(status_code=401, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is deactivated")

    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    token = extract_token(request, credentials)
    if not token:
        return None
    payload = verify_jwt_token(token)
    if not payload or "id" not in payload:
        return None
    return db.query(User).filter(User.id == payload["id"], User.is_active.is_(True)).first()


async def get_current_owner(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SpaceOwner:
    """Resolve the SpaceOwner row for an authenticated owner account"""
    if current_user.role != "owner":
        raise HTTPException(status_code=403, detail="Space owner access required")

    owner = db.query(SpaceOwner).filter(SpaceOwner.user_id == current_user.id).first()
    if not owner:
        raise HTTPException(status_code=404, detail="Space owner not found")
    return owner


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in ADMIN_ROLES:
        logger.warning(f"⚠️ Non-admin user {current_user.id} attempted admin access")
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
