from __future__ import annotations

import logging

import bcrypt

from cashmemo.models.user import User
from cashmemo.repositories.base import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    def create_user(self, email: str, password: str) -> User:
        email = email.strip().lower()
        if not email or not password:
            raise ValueError("Email and password are required")
        if self.repo.get_by_email(email) is not None:
            raise ValueError(f"User '{email}' already exists")
        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
        result = self.repo.create(User(email=email, password_hash=password_hash))
        logger.info("User created: %s", email)
        return result

    def authenticate(self, email: str, password: str) -> User | None:
        user = self.repo.get_by_email(email.strip().lower())
        if user is None:
            logger.info("Sign-in failed: unknown user %s", email)
            return None
        if bcrypt.checkpw(password.encode(), user.password_hash.encode()):
            logger.info("Signed in: %s", user.email)
            return user
        logger.info("Sign-in failed: bad password for %s", email)
        return None

    def change_password(self, email: str, new_password: str) -> None:
        password_hash = bcrypt.hashpw(new_password.encode(), bcrypt.gensalt()).decode()
        self.repo.update_password_hash(email, password_hash)
        logger.info("Password changed for user: %s", email)

    def list_users(self) -> list[User]:
        return self.repo.list_all()

    def has_users(self) -> bool:
        return bool(self.repo.list_all())
