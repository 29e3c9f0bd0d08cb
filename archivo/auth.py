from datetime import datetime, timedelta, date
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session
import bcrypt

from archivo.config import settings
from archivo.core.errors import NotAuthenticated, ValidationError
from archivo.database import get_db
from archivo.models.user import User


MIN_PASSWORD_LENGTH = 6

# auto_error=False: the session cookie is an equally valid credential
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


# ============================================================
# PASSWORD HELPERS
# ============================================================

def hash_password(password: str) -> str:
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed.encode())


def validate_password(password: str):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


# ============================================================
# REGISTER USER
# ============================================================

def register_user(
    db: Session,
    username: str,
    password: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    date_of_birth: Optional[date] = None,
    commit: bool = True,
) -> User:
    """
    Create an account. With ``commit=False`` the row is only flushed, so
    the caller can commit it together with related writes.
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")

    validate_password(password)

    existing = db.query(User).filter(User.username == username).first()
    if existing:
        raise ValidationError("Username already exists")

    user = User(
        username=username,
        hashed_password=hash_password(password),
        display_name=(display_name or "").strip() or username,
        email=email,
        date_of_birth=date_of_birth,
    )

    db.add(user)
    if not commit:
        db.flush()
        return user

    db.commit()
    db.refresh(user)
    return user


# ============================================================
# LOGIN
# ============================================================

def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    username = (username or "").strip()
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


# ============================================================
# TOKEN CREATION
# ============================================================

def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def session_token_for(user: User) -> str:
    # JWT "sub" must be a string
    return create_access_token({"sub": str(user.id)})


# ============================================================
# GET CURRENT USER
# ============================================================

def _user_from_token(db: Session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        user_id = int(subject) if subject is not None else None
    except (JWTError, ValueError):
        return None

    if user_id is None:
        return None

    # A token can outlive its user (account deleted, db wiped)
    return db.query(User).filter(User.id == user_id).first()


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    return _user_from_token(db, token or request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise NotAuthenticated()
    return user
