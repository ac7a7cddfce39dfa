"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    """Account roles."""

    ADMIN = "admin"
    USER = "user"

    @property
    def label(self) -> str:
        return "Administrator" if self is Role.ADMIN else "Standard User"


class User(BaseModel):
    """A registered user, as exposed outside the auth layer. No password hash."""

    id: UUID
    email: EmailStr
    display_name: str
    role: Role = Role.USER
    is_active: bool = True
    email_verified: bool = False
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserRecord(User):
    """Stored user row including the bcrypt hash. Never serialized to clients."""

    password_hash: str = Field(..., exclude=True, repr=False)

    def to_public(self) -> User:
        return User.model_validate(self.model_dump())


class Session(BaseModel):
    """A server-side session record. Holds the token hash, never the secret."""

    id: UUID
    user_id: UUID
    token_hash: str = Field(..., min_length=64, max_length=64)
    expires_at: datetime
    is_active: bool  # Required - fail closed, no default
    created_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = {"from_attributes": True}

    def is_usable(self, now: datetime) -> bool:
        """Active and strictly before expiry."""
        return self.is_active and now < self.expires_at


class TokenClaims(BaseModel):
    """Verified claims of a session token."""

    sub: UUID
    email: str
    role: Role
    sid: str
    iat: int
    exp: int


class AuthResult(BaseModel):
    """Returned by sign-up and sign-in."""

    user: User
    token: str
    expires_at: datetime


class ProvisionedUser(BaseModel):
    """Admin provisioning result. The generated password is shown once."""

    user: User
    initial_password: str | None = None


# Request bodies. The browser UI sends camelCase; snake_case is accepted too.


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


class SignUpRequest(_RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=255)


class SignInRequest(_RequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(_RequestModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class ProvisionUserRequest(_RequestModel):
    email: EmailStr
    display_name: str = Field(..., min_length=1, max_length=255)
    role: Role | None = None
    password: str | None = Field(default=None, max_length=128)


class SetRoleRequest(_RequestModel):
    role: Role

    @field_validator("role", mode="before")
    @classmethod
    def accept_labels(cls, value):
        # The UI shows "Administrator" / "Standard User"
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "administrator":
                return Role.ADMIN
            if lowered == "standard user":
                return Role.USER
            return lowered
        return value


class SetActiveRequest(_RequestModel):
    active: bool
