from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from starlette import status
import logging

from database import get_db
from models.users import User as UserModel
from schemas.users import CreateUserRequest, Token, User
from utils.auth_utils import create_access_token, get_current_user
from crud import users as crud_users

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("auth")

db_dependency = Annotated[Session, Depends(get_db)]


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register_user(
    user: CreateUserRequest,
    db: db_dependency
):
    new_user = crud_users.create_user(db, user)
    logger.info(f"User {new_user.id} registered")
    access_token = create_access_token(new_user.id, new_user.email)
    return Token(access_token=access_token, token_type="bearer")


@router.post("/login", response_model=Token)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: db_dependency
):
    user = crud_users.authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        logger.warning(f"Failed login for {form_data.username}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    access_token = create_access_token(user.id, user.email)
    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=User)
def read_current_user(user: UserModel = Depends(get_current_user)):
    return user
