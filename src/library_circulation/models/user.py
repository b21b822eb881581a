"""
User model for the Library Circulation service.

Users are library members. Their membership type selects the loan period and
only active users may borrow.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class MembershipType(str, Enum):
    """Membership tiers; each maps to a loan period in the policy table."""

    REGULAR = "REGULAR"
    PREMIUM = "PREMIUM"
    STUDENT = "STUDENT"


class User(BaseModel):
    """Represents a library member who may borrow books."""

    id: str = Field(
        ...,
        description="Unique identifier for the user",
        min_length=1,
        max_length=50,
        examples=["user_jsmith01"],
    )

    username: str = Field(
        ...,
        description="Unique login name",
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_.\-]+$",
        examples=["jsmith", "jane.doe"],
    )

    email: EmailStr = Field(
        ...,
        description="Unique email address",
        examples=["john.smith@example.com"],
    )

    first_name: str = Field(..., min_length=1, max_length=100)

    last_name: str = Field(..., min_length=1, max_length=100)

    membership_type: MembershipType = Field(
        default=MembershipType.REGULAR,
        description="Membership tier, selects the loan period",
    )

    is_active: bool = Field(
        default=True,
        description="Inactive users cannot borrow",
    )

    phone: str | None = Field(
        None,
        description="Phone number",
        pattern=r"^\+?[\d\s\-\(\)]+$",
    )

    address: str | None = Field(None, max_length=500)

    created_at: datetime = Field(default_factory=datetime.now)

    updated_at: datetime | None = None

    @field_validator("membership_type", mode="before")
    @classmethod
    def normalize_membership_type(cls, v):
        """Accept membership types in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def can_borrow(self) -> bool:
        return self.is_active

    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "id": "user_jsmith01",
                "username": "jsmith",
                "email": "john.smith@example.com",
                "first_name": "John",
                "last_name": "Smith",
                "membership_type": "REGULAR",
                "is_active": True,
            }
        },
    )
