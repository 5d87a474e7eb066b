from pydantic import BaseModel, EmailStr
from typing import Literal


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class AuthTokens(BaseModel):
    access_token: str
    refresh_token: str
    token_type: Literal["bearer"] = "bearer"


class AuthUser(BaseModel):
    id: int
    username: str
    name: str | None = None
    role: str


class LoginResponse(BaseModel):
    auth: AuthTokens
    user: AuthUser


class RefreshResponse(AuthTokens):
    role: str
