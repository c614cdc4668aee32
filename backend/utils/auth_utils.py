from datetime import datetime, timedelta
from typing import Dict, Optional
import logging
import os

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from crud.rbac import user_has_permission
from database import get_db
from models.users import User
from utils.actor import ActorContext
from utils.tenancy import get_tenant_id

load_dotenv()

logger = logging.getLogger(__name__)

# === Token configuration ===
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

bcrypt_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return bcrypt_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return bcrypt_context.verify(password, password_hash)


def create_access_token(user_id: int, email: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "email": email, "exp": expire}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, any]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    FastAPI dependency that validates the bearer token and loads the user.

    Usage:
        @router.get("/secure-data")
        def secure_endpoint(user: User = Depends(get_current_user)):
            ...
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    payload = decode_access_token(parts[1])
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token claims: missing subject"
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )
    return user


def get_actor(user: User = Depends(get_current_user), tenant_id: int = Depends(get_tenant_id)) -> ActorContext:
    return ActorContext(user_id=user.id, tenant_id=tenant_id)


def require_permission(permission_name: str):
    """
    Dependency factory: the caller must hold `permission_name` in the
    tenant named by the X-Tenant-ID header.
    """
    def checker(
        actor: ActorContext = Depends(get_actor),
        db: Session = Depends(get_db),
    ) -> ActorContext:
        if not user_has_permission(db, actor.user_id, actor.tenant_id, permission_name):
            logger.warning(
                f"User {actor.user_id} denied '{permission_name}' for tenant {actor.tenant_id}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission '{permission_name}' for tenant {actor.tenant_id}"
            )
        return actor

    return checker
