from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import date, datetime


# --------------------------------------------------
# USER SUMMARY (embedded in relations, tags, albums)
# --------------------------------------------------
class UserSummary(BaseModel):
    id: int
    username: str
    display_name: str

    model_config = {"from_attributes": True}


# --------------------------------------------------
# FULL USER (the logged-in user, profile pages)
# --------------------------------------------------
class UserOut(BaseModel):
    id: int
    username: str
    display_name: str
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# --------------------------------------------------
# AUTH REQUESTS
# --------------------------------------------------
class RegisterRequest(BaseModel):
    username: str
    password: str
    display_name: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class ResetPasswordRequest(BaseModel):
    username: str
    new_password: str


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    access_token: str
    token_type: str = "bearer"


# --------------------------------------------------
# PROFILE EDIT (only provided fields change)
# --------------------------------------------------
class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    bio: Optional[str] = None
