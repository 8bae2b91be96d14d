# backend/trailblazers/repositories/user_repository.py
"""User repository: account lookups for the identity service."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by email."""
        try:
            return (
                self.db.query(User)
                .filter(func.lower(User.email) == email.strip().lower())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def list_by_role(self, role: str) -> List[User]:
        try:
            return self.db.query(User).filter(User.role == role).order_by(User.name.asc()).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing users with role {role}: {str(e)}")
            raise RepositoryException(f"Failed to list users: {str(e)}")

    def set_custom_claims(self, user_id: str, claims: Dict[str, Any]) -> Optional[User]:
        # Assign a fresh dict so the JSON column is flagged dirty
        return self.update(user_id, custom_claims=dict(claims))
