from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from .config import settings
from .db import get_session
from .deps import get_current_user
from .logging_config import log_auth_event
from .models import User, utcnow
from .schemas import (
    LoginIn,
    MessageResponse,
    PasswordUpdate,
    ProfileUpdate,
    TokenResponse,
    UserCreate,
    UserOut,
    UserResponse,
)
from .security import create_access_token, hash_password, verify_password


router = APIRouter(tags=["users"])


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, name=user.name, email=user.email, created_at=user.created_at)


def _check_password_length(password: str) -> None:
    if len(password) < settings.min_password_length:
        raise HTTPException(
            status_code=422,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )


def _find_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email.lower())).first()


# ------------------ Public ------------------


@router.post("/register", response_model=UserResponse, status_code=201)
def register(user_in: UserCreate, session: Session = Depends(get_session)) -> UserResponse:
    _check_password_length(user_in.password)
    if _find_by_email(session, user_in.email):
        log_auth_event("register", user_in.email, success=False, details="Email already registered")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = User(
        name=user_in.name,
        email=user_in.email.lower(),
        password_hash=hash_password(user_in.password),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    log_auth_event("register", user.email, success=True)
    return UserResponse(user=_user_out(user))


@router.post("/login", response_model=TokenResponse)
def login(credentials: LoginIn, session: Session = Depends(get_session)) -> TokenResponse:
    user = _find_by_email(session, credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        log_auth_event("login", credentials.email, success=False, details="Bad credentials")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(subject=str(user.id))
    log_auth_event("login", user.email, success=True)
    return TokenResponse(token=token, user=_user_out(user))


# ------------------ Private ------------------


@router.get("/me", response_model=UserResponse)
def get_me(me: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(user=_user_out(me))


@router.put("/profile", response_model=UserResponse)
def update_profile(
    fields: ProfileUpdate,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> UserResponse:
    if fields.email is not None and fields.email.lower() != me.email:
        other = _find_by_email(session, fields.email)
        if other and other.id != me.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
        me.email = fields.email.lower()
    if fields.name is not None:
        me.name = fields.name
    me.updated_at = utcnow()
    session.add(me)
    session.commit()
    session.refresh(me)
    log_auth_event("profile", me.email, success=True)
    return UserResponse(user=_user_out(me))


@router.put("/password", response_model=MessageResponse)
def update_password(
    body: PasswordUpdate,
    me: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> MessageResponse:
    if not verify_password(body.current_password, me.password_hash):
        log_auth_event("password", me.email, success=False, details="Wrong current password")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")
    _check_password_length(body.new_password)

    me.password_hash = hash_password(body.new_password)
    me.updated_at = utcnow()
    session.add(me)
    session.commit()
    log_auth_event("password", me.email, success=True)
    return MessageResponse(message="Password updated")
