from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field, EmailStr

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: str
    username: str
    email: EmailStr

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserProfile(BaseModel):
    nombre: str = ""
    email: Optional[EmailStr] = None
    telefono: str = ""
    direccion: str = ""

@dataclass(frozen=True)
class Session:
    """The authenticated user a request acts on behalf of."""
    user_id: str
    email: str
    username: str = ""
