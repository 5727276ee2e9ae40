"""Authentication service: user registration, credential checks and access tokens."""

import logging
from typing import Optional

from flask_jwt_extended import create_access_token

from task_tracker.errors import UserExistsError
from task_tracker.models import User
from task_tracker.store import MemoryStore

logger = logging.getLogger(__name__)


class AuthService:
    """Handle user authentication and management."""

    def __init__(self, store: MemoryStore):
        self.store = store

    def create_user(self, email: str, password: str, name: str) -> User:
        """Create a new user account.

        Raises UserExistsError when the email is taken. The store repeats
        the check under its lock, so a registration racing this one during
        hashing still fails.
        """
        # Check if user exists
        if self.store.find_user_by_email(email):
            raise UserExistsError(email)

        password_hash = User.hash_password(password)
        user = self.store.add_user(email, password_hash, name)
        logger.info(f"User registered: id={user.id} email={user.email}")
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self.store.find_user_by_email(email)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self.store.get_user(user_id)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Authenticate user with email and password.

        Returns None for an unknown email and for a wrong password alike;
        the reason is only logged.
        """
        user = self.get_user_by_email(email)

        if not user:
            logger.info(f"Login failed - user not found: {email}")
            return None

        if not user.verify_password(password):
            logger.info(f"Login failed - invalid password: user_id={user.id}")
            return None

        return user

    @staticmethod
    def issue_token(user: User) -> str:
        """Signed access token whose subject is the user id."""
        return create_access_token(identity=str(user.id))

    @staticmethod
    def user_id_from_subject(subject) -> Optional[int]:
        """Parse a token subject back into a user id, None if it is not an integer."""
        try:
            return int(subject)
        except (TypeError, ValueError):
            return None
