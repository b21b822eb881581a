"""
User repository implementation for the Library Circulation service.

This is the SQL-backed Membership Store. Circulation only reads users; creation
and activation toggles are here for administration and tests.
"""

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import or_, select

from ..models.user import MembershipType
from ..models.user import User as UserModel
from .repository import (
    BaseRepository,
    DuplicateError,
    NotFoundError,
    generate_id,
    safe_flush,
    safe_query,
)
from .schema import User as UserDB


class UserCreateSchema(BaseModel):
    """Schema for registering a member."""

    id: str | None = None
    username: str
    email: str
    first_name: str
    last_name: str
    membership_type: MembershipType = MembershipType.REGULAR
    is_active: bool = True
    phone: str | None = None
    address: str | None = None


class UserRepository(BaseRepository[UserDB, UserModel]):
    """Repository for member data access."""

    @property
    def model_class(self):
        return UserDB

    @property
    def response_schema(self):
        return UserModel

    def create(self, data: UserCreateSchema) -> UserModel:
        """
        Register a member.

        Raises:
            DuplicateError: If the username or email is taken
        """
        user = UserModel(id=data.id or generate_id("user"), **data.model_dump(exclude={"id"}))

        existing = safe_query(
            self.session,
            lambda s: s.execute(
                select(UserDB.id).where(
                    or_(UserDB.username == user.username, UserDB.email == user.email)
                )
            ).first(),
            "Failed to check for duplicate user",
        )
        if existing:
            raise DuplicateError(
                f"User with username {user.username} or email {user.email} already exists"
            )

        db_user = UserDB(**user.model_dump(exclude={"updated_at"}))
        self.session.add(db_user)
        safe_flush(self.session, "create user")
        return self._to_response_model(db_user)

    def get_user(self, user_id: str) -> UserModel | None:
        return self.get_by_id(user_id)

    def set_active(self, user_id: str, is_active: bool) -> UserModel:
        """Activate or deactivate a member."""
        db_user = self._get_row(user_id, for_update=True)
        if db_user is None:
            raise NotFoundError(f"User {user_id} not found")

        db_user.is_active = is_active
        db_user.updated_at = datetime.now()
        safe_flush(self.session, "update user status")
        return self._to_response_model(db_user)

    def count_active(self) -> int:
        return self.count(UserDB.is_active.is_(True))
