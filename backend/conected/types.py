from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator


class RegisterRequest(BaseModel):
    # Extra profile fields are accepted and ignored
    model_config = ConfigDict(extra="ignore")

    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., max_length=128)

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, v: str) -> str:
        # Stored hashes are of the trimmed password, which must not be empty
        if not v.strip():
            raise ValueError("Password must not be blank")
        return v


class UserResponse(BaseModel):
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class SessionData(BaseModel):
    """Identity attached to an authenticated browser context"""
    user_id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class AuthenticatedSession(BaseModel):
    """A freshly issued session and the signed token that names it"""
    token: str
    data: SessionData


class SubjectResponse(BaseModel):
    id: int
    title: Optional[str]
    link_to_call: Optional[str]
    image: str
    details: Dict[str, Any]
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class ListingQuery(BaseModel):
    page_number: int
    search_text: Optional[str] = None


class ListingPage(BaseModel):
    items: List[SubjectResponse]
    total_pages: int
    current_page: int
    search_text: Optional[str] = None
