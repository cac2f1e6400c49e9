"""User account model."""
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, String, Uuid, func

from resource_query.db.database import Base
from resource_query.models.enums import LoginMethod, UserRole


def _enum_values(enum_class):
    return [member.value for member in enum_class]


class User(Base):
    """Application user. Soft-deleted users keep their row with ``deleted_at`` set."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=True)
    mobile_no = Column(String(15), nullable=True, unique=True)
    google_id = Column(String(100), nullable=True, unique=True)
    facebook_id = Column(String(100), nullable=True, unique=True)

    login_method = Column(
        Enum(LoginMethod, name="login_method", values_callable=_enum_values),
        nullable=False,
        default=LoginMethod.GOOGLE_OAUTH,
    )
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )
    onboarding = Column(Boolean, nullable=False, default=True)

    # Profile
    profession = Column(String(100), nullable=True)
    company = Column(String(150), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    timezone = Column(String(50), nullable=True, default="UTC")
    language = Column(String(10), nullable=True, default="en")
    avatar_url = Column(String(500), nullable=True)

    # Status
    is_active = Column(Boolean, nullable=False, default=False)
    is_banned = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    deleted_by = Column(Uuid, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
