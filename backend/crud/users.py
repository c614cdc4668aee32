from typing import Optional

from sqlalchemy.orm import Session

from exceptions import ValidationError
from models.audit_mixin import now_local
from models.users import User
from schemas.users import CreateUserRequest
from utils.auth_utils import hash_password, verify_password


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(db: Session, user: CreateUserRequest) -> User:
    if get_user_by_email(db, user.email):
        raise ValidationError("A user with this email already exists")
    db_user = User(
        email=user.email.lower(),
        password_hash=hash_password(user.password),
        first_name=user.first_name,
        last_name=user.last_name,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        return None
    user.last_login_at = now_local()
    db.commit()
    db.refresh(user)
    return user
