from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    email: EmailStr = Field(..., max_length=254)
    password: str = Field(..., min_length=8, max_length=128)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class GuestCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=64)

class GuestUpgrade(BaseModel):
    email: EmailStr = Field(..., max_length=254)
    password: str = Field(..., min_length=8, max_length=128)
    name: Optional[str] = Field(default=None, min_length=1, max_length=64)

class UserNameUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)

    class Config:
        str_strip_whitespace = True

class UserResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    is_guest: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
