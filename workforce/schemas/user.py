"""User Pydantic schemas — registration, login, admin edits, profile output."""

from typing import Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from workforce.models.user import Role
from workforce.schemas.base import CamelModel, UtcDatetime


class UserCreate(CamelModel):
    """Fields an admin submits to create an account."""
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    role: Role = Role.EMPLOYEE


class UserRegister(UserCreate):
    """Self-service sign-up; the password must be typed twice."""
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords do not match")
        return value


class UserLogin(CamelModel):
    username: str = Field(min_length=1, description="Username is required")
    password: str = Field(min_length=1, description="Password is required")


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    password: Optional[str] = Field(default=None, min_length=1)


class UserOut(CamelModel):
    """Public user representation; never carries the password hash."""
    id: int
    username: str
    name: str
    email: str
    role: Role
    created_at: Optional[UtcDatetime] = None


class EmployeeOut(UserOut):
    skills_count: int = 0
    assignments_count: int = 0
    on_bench: bool = True
