from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, EmailStr, field_validator

from src.api.config import settings


def _strip_required(value: Optional[str], label: str, max_length: int) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) > max_length:
        raise ValueError(f"{label} must be at most {max_length} characters")
    return value


# Auth / Tokens

class TokenResponse(BaseModel):
    """Token response for successful login or registration"""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")


class MessageResponse(BaseModel):
    """Plain acknowledgement"""
    message: str


# Users

class UserCreateRequest(BaseModel):
    """Request model to register a new user"""
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=6, description="Plaintext password (min 6 chars)")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _strip_required(value, "Name", 100)


class LoginRequest(BaseModel):
    """Request model to log in with email and password"""
    # Plain str: any failed login, malformed email included, is a uniform 401.
    email: str
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User response without sensitive fields"""
    id: int
    name: str
    email: EmailStr
    created_at: datetime

    class Config:
        from_attributes = True


# Folders

class FolderCreateRequest(BaseModel):
    """Create folder request; omitted description and color take the configured defaults"""
    name: str = Field(..., description="Folder name, unique per user")
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=32, description="Display color hint; empty means default")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _strip_required(value, "Folder name", 100)


class FolderUpdateRequest(BaseModel):
    """Update folder request (partial); null fields and an empty color are left unchanged"""
    name: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, max_length=32)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: Optional[str]) -> Optional[str]:
        return _strip_required(value, "Folder name", 100)


class FolderResponse(BaseModel):
    """Folder response model"""
    id: int
    name: str
    description: str
    color: str
    user_id: int
    note_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FolderRef(BaseModel):
    """Folder details embedded in a note"""
    id: int
    name: str
    color: str

    class Config:
        from_attributes = True


class FolderDeleteResponse(BaseModel):
    """Folder deletion result"""
    message: str
    detached_notes: int


# Notes

class NoteCreateRequest(BaseModel):
    """Create note request"""
    title: str = Field(..., description="Note title")
    content: str = Field(..., min_length=1, max_length=settings.NOTE_CONTENT_MAX_LENGTH)
    folder_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("folder_id", "folder"),
        description="Folder to file the note in",
    )

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        return _strip_required(value, "Title", settings.NOTE_TITLE_MAX_LENGTH)


class NoteUpdateRequest(BaseModel):
    """Update note request (partial); an explicit null folder unfiles the note"""
    title: Optional[str] = None
    content: Optional[str] = Field(None, min_length=1, max_length=settings.NOTE_CONTENT_MAX_LENGTH)
    folder_id: Optional[int] = Field(None, validation_alias=AliasChoices("folder_id", "folder"))

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: Optional[str]) -> Optional[str]:
        return _strip_required(value, "Title", settings.NOTE_TITLE_MAX_LENGTH)


class NoteResponse(BaseModel):
    """Note response model with the folder resolved for display"""
    id: int
    title: str
    content: str
    user_id: int
    folder_id: Optional[int] = None
    folder: Optional[FolderRef] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
