"""Pydantic schemas for registration, login and identity responses.

Learn: Credentials are optional at the schema level on purpose. A missing
username or password is reported by AccountService with the same 400
message as an empty one, instead of a framework-shaped validation error.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class UserInfo(BaseModel):
    id: uuid.UUID
    username: str


class ProtectedResponse(BaseModel):
    success: bool = True
    message: str
    user: UserInfo
