# backend/trailblazers/models/user.py
"""
User model.

One row per identity-provider account. The role and the custom claims
(``assignedHikes`` for guides) are issued into the ID token at sign-in.
"""

from typing import Any, Dict, List

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..core.enums import RoleName
from ..database import Base

USER_SCHEMA_VERSION = 1


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.GUEST.value, index=True)
    custom_claims = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    schema_version = Column(Integer, nullable=False, default=USER_SCHEMA_VERSION)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('guest', 'guide', 'admin')", name="ck_users_role"),
    )

    @property
    def role_name(self) -> RoleName:
        return RoleName(self.role)

    @property
    def claims(self) -> Dict[str, Any]:
        return dict(self.custom_claims or {})

    @property
    def assigned_hikes(self) -> List[str]:
        return list(self.claims.get("assignedHikes", []))

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
