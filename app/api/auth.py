# app/api/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..db import get_db
from ..errors import ConflictError, NotFoundError, UnauthorizedError
from ..security import create_access_token, hash_password, verify_password
from ..utils import logger
from .deps import get_current_user

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=schemas.UserOut, status_code=201)
def register(payload: schemas.RegisterIn, db: Session = Depends(get_db)):
    email = payload.email.lower()
    if crud.get_user_by_email(db, email):
        raise ConflictError("Email already registered")
    try:
        # privileged roles are only granted out-of-band (see app.seed)
        user = crud.create_user(db, {
            "name": payload.name,
            "email": email,
            "password_hash": hash_password(payload.password),
            "phone": payload.phone,
            "role": "user",
        })
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered")
    logger.info("Registered user %s", user.id)
    return user


@router.post("/login", response_model=schemas.TokenOut)
def login(payload: schemas.LoginIn, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    token = create_access_token(user.id, user.role)
    return {"token": token, "user": user}


@router.get("/me", response_model=schemas.UserOut)
def me(current: schemas.ActingUser = Depends(get_current_user), db: Session = Depends(get_db)):
    user = crud.get_user(db, current.id)
    if not user:
        raise NotFoundError("User not found")
    return user
